"""
Security guards for role-based and party-based access control.

Authorization happens here, before the parcel core is invoked; the core
only receives the already-authorized identity.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from parceltrack.app.models.enums import UserRole
from parceltrack.app.models.parcel import Parcel
from parceltrack.app.core.dependencies import get_current_user


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.
    
    Usage:
        @router.get("/dashboard/receiver")
        async def receiver_dashboard(current_user: dict = Depends(require_role([UserRole.RECEIVER]))):
            ...
    
    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        user_role_str = current_user.get("role")
        
        if not user_role_str:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Role information missing from token"
            )
        
        try:
            user_role = UserRole(user_role_str)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )
        
        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Forbidden: insufficient role. Required role: {', '.join([r.value for r in allowed_roles])}"
            )
        
        return current_user
    
    return role_checker


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Dependency for admin-only endpoints."""
    if current_user.get("role") != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    
    return current_user


# Roles that see and handle every parcel
STAFF_ROLES = frozenset({UserRole.ADMIN.value, UserRole.DELIVERY.value})


def is_parcel_party(parcel: Parcel, current_user: dict) -> bool:
    """
    True when the user may act on the parcel.
    
    Staff (admin, delivery) may act on any parcel; senders only on parcels
    they sent, receivers only on parcels addressed to them.
    """
    role = current_user.get("role")
    user_id = current_user.get("user_id")
    
    if role in STAFF_ROLES:
        return True
    if role == UserRole.SENDER.value:
        return parcel.sender_id == user_id
    if role == UserRole.RECEIVER.value:
        return parcel.receiver_id == user_id
    return False


class ParcelAccessGuard:
    """
    Class-based guard scoping parcel access to the parties involved.
    
    Usage:
        parcel_guard = ParcelAccessGuard()
        parcel = await service.get_parcel(parcel_id)
        parcel_guard.enforce(parcel, current_user)
    """
    
    def enforce(self, parcel: Parcel, current_user: dict):
        """
        Raises:
            HTTPException 403 if the user is not a party to the parcel
        """
        if not is_parcel_party(parcel, current_user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. You do not have permission to access this parcel."
            )
    
    def scope_filters(self, current_user: dict) -> dict:
        """
        Listing filters forced by the user's role.
        
        Senders see what they sent, receivers what they receive; staff
        are unrestricted (empty dict).
        """
        role = current_user.get("role")
        user_id = current_user.get("user_id")
        
        if role == UserRole.SENDER.value:
            return {"sender_id": user_id}
        if role == UserRole.RECEIVER.value:
            return {"receiver_id": user_id}
        return {}
