"""
Authentication Utility - JWT handling.

Provides:
- JWT token creation/verification (payload: {"user_id": <ObjectId hex>})
- FastAPI dependencies for protected and optionally-authenticated routes
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from goodjob.core.config import get_settings
from goodjob.services.mongo_service import ModelManager, get_manager

settings = get_settings()

# Bearer token extractor; a missing header is handled by the dependencies
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def sign_user(user: dict) -> str:
    return create_access_token(data={"user_id": str(user["_id"])})


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_user_from_token(token: Optional[str], manager: ModelManager) -> Optional[dict]:
    """The user a token belongs to, or None for a bad token / unknown user."""
    if not token:
        return None
    payload = decode_token(token)
    if not payload or not payload.get("user_id"):
        return None
    return manager.UserModel.find_one_by_id(payload["user_id"])


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    manager: ModelManager = Depends(get_manager)
) -> Optional[dict]:
    """FastAPI dependency - current user when a valid token is sent, else None."""
    if credentials is None:
        return None
    return get_user_from_token(credentials.credentials, manager)


async def get_current_user(user: Optional[dict] = Depends(get_optional_user)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.post("/workings")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
