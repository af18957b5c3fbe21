"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional
from parceltrack.app.models.enums import UserRole
from parceltrack.app.core.security import MAX_PASSWORD_BYTES


class UserRegister(BaseModel):
    """
    Schema for user registration.
    
    Used by POST /auth/register endpoint.
    Default role is SENDER.
    """
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, max_length=72, description="Password (at most 72 bytes once UTF-8 encoded)")
    role: Optional[UserRole] = Field(default=UserRole.SENDER, description="User role (defaults to sender)")
    phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=255)
    
    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
        return value


class UserLogin(BaseModel):
    """
    Schema for user login.
    
    ``email`` may hold either an email address or a short ID.
    """
    email: str = Field(..., min_length=1, description="Email address or short ID")
    password: str = Field(..., description="Password")


class UserResponse(BaseModel):
    """Public view of a user (never includes the password hash)."""
    id: int
    name: str
    email: str
    role: UserRole
    short_id: Optional[str] = None
    is_blocked: bool
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True  # Pydantic v2 (was orm_mode in v1)


class TokenResponse(BaseModel):
    """
    Schema for JWT token response.
    
    Returned by successful login/register operations.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserResponse
