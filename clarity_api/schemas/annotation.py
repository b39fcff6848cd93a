from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from clarity_api.schemas.label import AnnotationType


class AnnotationCreate(BaseModel):
    label_id: str
    annotation_type: AnnotationType
    annotation_data: Dict[str, Any]
    notes: Optional[str] = None


class AnnotationUpdate(BaseModel):
    label_id: Optional[str] = None
    annotation_data: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None


class AnnotationReview(BaseModel):
    # None puts the annotation back to pending
    is_approved: Optional[bool]
    notes: Optional[str] = None


class AnnotationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    image_id: str
    label_id: str
    annotation_type: AnnotationType
    annotation_data: Dict[str, Any]
    created_by: str
    reviewed_by: Optional[str] = None
    is_approved: Optional[bool] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
