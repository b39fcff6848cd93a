"""
Auth routes:
- POST /auth/register
- POST /auth/login
- GET  /auth/me

Local accounts only. Registering creates the caller's profile with the
default `annotator` role.
"""

import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from clarity_api.api.deps import get_db, get_principal
from clarity_api.core import access
from clarity_api.core.principals import Principal
from clarity_api.core.security import hash_password, verify_password, create_access_token
from clarity_api.models.profile import Profile
from clarity_api.schemas.auth import RegisterIn, LoginIn, TokenOut
from clarity_api.schemas.profile import ProfileOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=ProfileOut)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    if db.query(Profile).filter(Profile.email == payload.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    # system-level write: there is no principal yet to authorize
    profile = Profile(
        id=str(uuid4()),
        email=payload.email,
        full_name=payload.full_name,
        password_hash=hash_password(payload.password),
        role="annotator",
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info("Registered profile %s", profile.id)
    return ProfileOut.model_validate(profile)


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    profile = db.query(Profile).filter(Profile.email == payload.email).first()
    if not profile or not verify_password(payload.password, profile.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not profile.active:
        raise HTTPException(status_code=403, detail="Account inactive")

    token = create_access_token({"sub": profile.id})
    return TokenOut(access_token=token)


@router.get("/me", response_model=ProfileOut)
def me(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    return ProfileOut.model_validate(access.fetch(db, principal, "profile", principal.id))
