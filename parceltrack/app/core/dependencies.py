"""
Authentication and service dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT
authentication and for building services bound to the request session.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from parceltrack.app.core.config import settings
from parceltrack.app.core.jwt import decode_access_token
from parceltrack.app.core.token_revocation import is_token_revoked, are_user_tokens_revoked
from parceltrack.app.db.session import get_db
from parceltrack.app.repositories.user_repository import UserRepository
from parceltrack.app.services.parcel_service import ParcelService
from parceltrack.app.services.user_service import UserService

# HTTP Bearer security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    FastAPI dependency for JWT authentication.
    
    Security checks:
    1. Validates JWT token signature and expiry
    2. Checks if token has been explicitly revoked (logout)
    3. Checks if all user tokens have been revoked (user blocked)
    4. Verifies user still exists and is not blocked (real-time check)
    
    Returns:
        Authenticated identity: {"user_id", "role", "email"}
        
    Raises:
        HTTPException: 401 if authentication fails, 403 if the user is blocked
    """
    token = credentials.credentials
    
    # 1. Decode and validate JWT
    payload = decode_access_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    user_id = payload.get("user_id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    # 2. Check if this specific token has been revoked
    if await is_token_revoked(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    # 3. Check if all user tokens have been revoked (user was blocked)
    if await are_user_tokens_revoked(user_id):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User access has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    # 4. Real-time database check
    user = await UserRepository(db).find_by_id(user_id)
    
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    if user.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is blocked",
        )
    
    return {
        "user_id": user.id,
        "role": user.role.value,
        "email": user.email,
    }


def get_parcel_service(db: AsyncSession = Depends(get_db)) -> ParcelService:
    return ParcelService(db, settings)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db, settings)
