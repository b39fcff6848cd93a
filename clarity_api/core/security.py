"""
Security utilities:
- Password hashing/verification
- JWT creation and validation
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from jose import jwt, JWTError
from passlib.context import CryptContext

from clarity_api.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(
    data: Dict[str, Any], expires_minutes: Optional[int] = None
) -> str:
    """
    Create a signed JWT.
    `data` must include the profile id as "sub".
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate JWT, raising JWTError on failure."""
    return jwt.decode(
        token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
    )


def identity_from_token(token: str) -> Optional[str]:
    """Return the identity carried by a token, or None if it is unusable."""
    try:
        payload = decode_token(token)
    except JWTError:
        return None
    return payload.get("sub") or None
