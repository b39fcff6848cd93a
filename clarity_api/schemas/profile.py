"""
Profile schemas returned to the frontend.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr

GlobalRole = Literal["admin", "annotator", "reviewer"]


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    full_name: str
    role: GlobalRole
    active: bool = True


class ProfileUpdate(BaseModel):
    # role is deliberately absent: it is not editable by its owner
    full_name: Optional[str] = None
