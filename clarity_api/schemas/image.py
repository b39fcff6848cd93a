"""
Image record schemas. Uploads register metadata only.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ImageStatus = Literal["pending", "in_progress", "completed", "reviewed", "rejected"]

IMAGE_FILENAME = r"(?i)^.+\.(jpe?g|png|gif|bmp|webp|tiff?)$"


class ImageCreate(BaseModel):
    original_filename: str = Field(pattern=IMAGE_FILENAME)
    file_size: int = Field(ge=0)
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)


class ImageUpdate(BaseModel):
    status: Optional[ImageStatus] = None
    assigned_to: Optional[str] = None


class ImageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    filename: str
    original_filename: str
    file_path: str
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None
    status: ImageStatus
    assigned_to: Optional[str] = None
    uploaded_by: str
    created_at: Optional[datetime] = None
