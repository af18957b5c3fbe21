"""
Authentication API endpoints.

Provides register, login, logout and current-user endpoints.
"""

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from parceltrack.app.schemas.auth import UserRegister, UserLogin, TokenResponse, UserResponse
from parceltrack.app.core.dependencies import get_current_user, get_user_service, security
from parceltrack.app.core.token_revocation import revoke_token
from parceltrack.app.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    service: UserService = Depends(get_user_service)
):
    """
    Register a new user.
    
    - ADMIN role cannot be created via API.
    - A short ID is assigned when one can be allocated.
    """
    user, access_token = await service.register(
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
        role=user_data.role,
        phone=user_data.phone,
        address=user_data.address,
    )
    
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    service: UserService = Depends(get_user_service)
):
    """
    Login user and return JWT token.
    
    Accepts email or short ID for login.
    """
    user, access_token = await service.login(credentials.email, credentials.password)
    
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.post("/logout")
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    current_user: dict = Depends(get_current_user)
):
    """Revoke the presented token."""
    await revoke_token(credentials.credentials, current_user["user_id"])
    return {"success": True, "message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Get the authenticated user's profile."""
    user = await service.get_user(current_user["user_id"])
    return UserResponse.model_validate(user)
