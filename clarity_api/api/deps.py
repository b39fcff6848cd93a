"""
Shared FastAPI dependencies:
- DB session
- Current principal from the bearer token
"""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from clarity_api.core.errors import Unauthenticated
from clarity_api.core.principals import Principal, resolve
from clarity_api.core.security import identity_from_token
from clarity_api.db.session import SessionLocal


def get_db():
    """Yield a SQLAlchemy session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_identity(authorization: str | None = Header(default=None)) -> str:
    """
    Read the bearer token and return the identity it carries.
    Raises Unauthenticated if missing/invalid.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthenticated("Missing bearer token")

    identity = identity_from_token(authorization.split(" ", 1)[1])
    if not identity:
        raise Unauthenticated("Invalid token")
    return identity


def get_principal(
    db: Session = Depends(get_db),
    identity: str = Depends(get_identity),
) -> Principal:
    return resolve(db, identity)
