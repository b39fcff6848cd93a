"""
Profile routes:
- GET   /profiles/me
- PATCH /profiles/me
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clarity_api.api.deps import get_db, get_principal
from clarity_api.core import access
from clarity_api.core.principals import Principal
from clarity_api.schemas.profile import ProfileOut, ProfileUpdate

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileOut)
def get_my_profile(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    return ProfileOut.model_validate(access.fetch(db, principal, "profile", principal.id))


@router.patch("/me", response_model=ProfileOut)
def update_my_profile(
    payload: ProfileUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    profile = access.update(db, principal, "profile", principal.id, changes)
    return ProfileOut.model_validate(profile)
