from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from .errors import AuthFailure
from .models import User
from .settings import settings

# -----------------------------
# Password hashing helpers
# -----------------------------

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    """Return a secure bcrypt hash of *password*."""
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    """Verify *password* against *hashed* bcrypt digest."""
    return pwd_context.verify(password, hashed)

# -----------------------------
# Bearer tokens
# -----------------------------

def create_token(user_id: str, expires_in: Optional[timedelta] = None) -> str:
    """Issue a signed token carrying *user_id*."""
    lifetime = expires_in if expires_in is not None else timedelta(days=settings.JWT_EXPIRES_DAYS)
    claims = {"user_id": str(user_id), "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def verify_token(token: Optional[str]) -> str:
    """Return the user id embedded in *token*.

    Raises
    ------
    AuthFailure
        If the token is missing, malformed, expired or signed with another key.
    """
    if not token:
        raise AuthFailure("No token provided")
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthFailure("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthFailure("Invalid token") from exc
    user_id = claims.get("user_id")
    if not isinstance(user_id, str) or not user_id:
        raise AuthFailure("Token carries no user")
    return user_id

def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None

# -----------------------------
# FastAPI dependency helpers
# -----------------------------

security = HTTPBearer(auto_error=False)

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """Validate the bearer token and return the matching *User* instance.

    Raises
    ------
    HTTPException
        401 if the token is missing or invalid, or the user no longer exists.
    """
    try:
        user_id = verify_token(credentials.credentials if credentials else None)
    except AuthFailure as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    try:
        uuid.UUID(user_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    user: Optional[User] = await User.filter(id=user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user

__all__ = [
    "pwd_context",
    "hash_password",
    "verify_password",
    "create_token",
    "verify_token",
    "bearer_token",
    "security",
    "get_current_user",
]
