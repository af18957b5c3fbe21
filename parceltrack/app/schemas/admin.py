"""
Admin API Schema Definitions.

Pydantic schemas for user management endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from parceltrack.app.schemas.auth import UserResponse
from parceltrack.app.schemas.common import PaginationMeta


class UserListResponse(BaseModel):
    """Schema for list users response."""
    items: List[UserResponse]
    meta: PaginationMeta


class BlockUserRequest(BaseModel):
    """Schema for blocking / unblocking a user."""
    reason: Optional[str] = Field(None, max_length=500, description="Reason (logged)")


class AdminActionResponse(BaseModel):
    """Schema for admin action response."""
    success: bool
    message: str
    user: UserResponse
