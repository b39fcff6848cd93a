"""
Annotations drawn on an image with one of the project's labels.

`is_approved` is a tri-state review outcome:
NULL = pending, True = approved, False = rejected.
"""

from datetime import datetime
from typing import Any, Dict, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clarity_api.db.base import Base

if TYPE_CHECKING:
    from clarity_api.models.image import Image
    from clarity_api.models.label import Label


class Annotation(Base):
    __tablename__ = "annotations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    image_id: Mapped[str] = mapped_column(
        String, ForeignKey("images.id", ondelete="CASCADE"), index=True
    )
    label_id: Mapped[str] = mapped_column(
        String, ForeignKey("labels.id", ondelete="CASCADE"), index=True
    )
    # coordinates, points, masks, ... shaped by annotation_type
    annotation_data: Mapped[Dict[str, Any]] = mapped_column(JSON)
    annotation_type: Mapped[str] = mapped_column(String)

    created_by: Mapped[str] = mapped_column(
        String, ForeignKey("profiles.id", ondelete="CASCADE"), index=True
    )
    reviewed_by: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    is_approved: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=None)
    notes: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    image: Mapped["Image"] = relationship("Image", back_populates="annotations")
    label: Mapped["Label"] = relationship("Label", back_populates="annotations")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )
