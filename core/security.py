# app/core/security.py
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from starlette import status

from core.config import settings

# Tokens are issued by the identity provider; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def create_access_token(subject: str, expires_minutes: int = 60, extra_data: dict = None) -> str:
    """Sign a token the way the identity provider does (used by tests and tooling)."""
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes)
    payload = {
        "sub": subject,
        "exp": expire,
        "aud": settings.AUTH_JWT_AUDIENCE,
        "iat": datetime.utcnow(),
    }

    if extra_data:
        payload.update(extra_data)

    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> str:
    """Return the identity id (``sub``) carried by a valid token."""
    payload = jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.ALGORITHM],
        audience=settings.AUTH_JWT_AUDIENCE,
    )
    user_id: Optional[str] = payload.get("sub")
    if user_id is None:
        raise JWTError("Token missing subject claim")
    return user_id


def require_identity(token: Optional[str]) -> str:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_token(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
