"""
Admin user management endpoints.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from parceltrack.app.core.config import settings
from parceltrack.app.core.dependencies import get_current_user, get_user_service
from parceltrack.app.core.guards import require_admin
from parceltrack.app.schemas.admin import AdminActionResponse, BlockUserRequest, UserListResponse
from parceltrack.app.schemas.auth import UserResponse
from parceltrack.app.schemas.common import PaginationMeta
from parceltrack.app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    q: Optional[str] = Query(None, description="Search name, email or phone"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Items per page"),
    admin: dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """List users, newest first (admin-only)."""
    users, total = await service.list_users(q, page, limit)
    
    return UserListResponse(
        items=[UserResponse.model_validate(user) for user in users],
        meta=PaginationMeta.build(total, page, limit),
    )


@router.get("/short/{short_id}", response_model=UserResponse)
async def get_user_by_short_id(
    short_id: str,
    current_user: dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Resolve a short ID, e.g. to address a parcel."""
    user = await service.get_user_by_short_id(short_id)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    admin: dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """Get detailed information about a specific user (admin-only)."""
    user = await service.get_user(user_id)
    return UserResponse.model_validate(user)


@router.api_route("/{user_id}/block", methods=["PATCH", "PUT"], response_model=AdminActionResponse)
async def block_user(
    user_id: int,
    request: Optional[BlockUserRequest] = None,
    admin: dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """
    Block a user and revoke all their active tokens (admin-only).
    
    This immediately terminates all user sessions.
    """
    user = await service.set_blocked(
        user_id, True, admin_id=admin["user_id"], reason=request.reason if request else None
    )
    
    return AdminActionResponse(
        success=True,
        message=f"User '{user.email}' has been blocked",
        user=UserResponse.model_validate(user),
    )


@router.api_route("/{user_id}/unblock", methods=["PATCH", "PUT"], response_model=AdminActionResponse)
async def unblock_user(
    user_id: int,
    request: Optional[BlockUserRequest] = None,
    admin: dict = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """Unblock a user and clear token revocations (admin-only)."""
    user = await service.set_blocked(
        user_id, False, admin_id=admin["user_id"], reason=request.reason if request else None
    )
    
    return AdminActionResponse(
        success=True,
        message=f"User '{user.email}' has been unblocked",
        user=UserResponse.model_validate(user),
    )
