from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from clarity_api.schemas.profile import GlobalRole

ProjectStatus = Literal["active", "completed", "paused"]


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    status: ProjectStatus = "active"


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    created_by: str
    status: ProjectStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    image_count: int = 0


class DashboardStatsOut(BaseModel):
    total_projects: int
    total_images: int
    completed_images: int
    completion_rate: int
    recent_projects: List[ProjectOut] = Field(default_factory=list)


class MemberCreate(BaseModel):
    user_id: str
    role: GlobalRole = "annotator"


class MemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    user_id: str
    role: GlobalRole
