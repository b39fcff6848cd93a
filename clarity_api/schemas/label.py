from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AnnotationType = Literal["bounding_box", "polygon", "keypoint", "classification", "mask"]

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class LabelCreate(BaseModel):
    name: str = Field(min_length=1)
    color: str = Field(default="#3B82F6", pattern=HEX_COLOR)
    annotation_type: AnnotationType


class LabelUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    annotation_type: Optional[AnnotationType] = None


class LabelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    name: str
    color: str
    annotation_type: AnnotationType
