from datetime import datetime
from typing import List, TYPE_CHECKING

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clarity_api.db.base import Base

if TYPE_CHECKING:
    from clarity_api.models.annotation import Annotation
    from clarity_api.models.project import Project

DEFAULT_LABEL_COLOR = "#3B82F6"


class Label(Base):
    __tablename__ = "labels"
    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_label_project_name"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String)
    color: Mapped[str] = mapped_column(String, default=DEFAULT_LABEL_COLOR)
    annotation_type: Mapped[str] = mapped_column(String)

    project: Mapped["Project"] = relationship("Project", back_populates="labels")
    annotations: Mapped[List["Annotation"]] = relationship(
        "Annotation",
        back_populates="label",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
