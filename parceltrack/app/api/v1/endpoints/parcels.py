"""
Parcel API Endpoints.

Creation by senders, public tracking, scoped listing, status updates and
cancellation. Role and party checks run here; the service only receives
the authorized actor.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from parceltrack.app.core.config import settings
from parceltrack.app.core.dependencies import get_current_user, get_parcel_service
from parceltrack.app.core.guards import ParcelAccessGuard, require_role
from parceltrack.app.db.session import get_db
from parceltrack.app.models.enums import UserRole
from parceltrack.app.schemas.common import PaginationMeta
from parceltrack.app.schemas.dashboard import DashboardSummary
from parceltrack.app.schemas.parcel import (
    ParcelCreate, ParcelListResponse, ParcelResponse, StatusUpdateRequest,
)
from parceltrack.app.services.dashboard import DashboardService
from parceltrack.app.services.parcel_service import ParcelFilters, ParcelService

router = APIRouter(prefix="/parcels", tags=["Parcels"])

parcel_guard = ParcelAccessGuard()

STATUS_ROLES = [UserRole.ADMIN, UserRole.DELIVERY, UserRole.SENDER, UserRole.RECEIVER]
CANCEL_ROLES = [UserRole.SENDER, UserRole.ADMIN]


@router.post("", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    current_user: dict = Depends(require_role([UserRole.SENDER])),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Create a parcel addressed to a receiver (sender only).
    
    The receiver is referenced by ``receiver_id`` or ``receiver_short_id``.
    """
    receiver = await service.resolve_receiver(
        receiver_id=parcel_data.receiver_id,
        receiver_short_id=parcel_data.receiver_short_id,
    )
    
    parcel = await service.create_parcel(
        sender_id=current_user["user_id"],
        receiver_id=receiver.id,
        origin=parcel_data.origin,
        destination=parcel_data.destination,
        weight=parcel_data.weight,
        price=parcel_data.price,
        note=parcel_data.note,
    )
    return ParcelResponse.model_validate(parcel)


@router.get("/track/{tracking_id}", response_model=ParcelResponse)
async def track_parcel(
    tracking_id: str,
    service: ParcelService = Depends(get_parcel_service)
):
    """Public tracking lookup by tracking ID."""
    parcel = await service.get_parcel_by_tracking_id(tracking_id)
    return ParcelResponse.model_validate(parcel)


@router.get("", response_model=ParcelListResponse)
async def list_parcels(
    status_filter: Optional[str] = Query(None, alias="status"),
    sender_id: Optional[int] = Query(None),
    receiver_id: Optional[int] = Query(None),
    tracking_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Alias of search"),
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    date_range: Optional[str] = Query(None, description="7d, 30d, 90d or all"),
    sort: Optional[str] = Query(None, description="Field name, '-' prefix for descending"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: dict = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    List parcels with filters, sorting and pagination.
    
    Senders only see parcels they sent and receivers only parcels
    addressed to them.
    """
    filters = ParcelFilters(
        status=status_filter,
        sender_id=sender_id,
        receiver_id=receiver_id,
        tracking_id=tracking_id,
        search=search or q,
        from_date=from_date,
        to_date=to_date,
        date_range=date_range,
    )
    filters = filters.model_copy(update=parcel_guard.scope_filters(current_user))
    
    items, total = await service.list_parcels(filters, page=page, limit=limit, sort=sort)
    return ParcelListResponse(
        items=[ParcelResponse.model_validate(parcel) for parcel in items],
        meta=PaginationMeta.build(total, page, limit),
    )


@router.get("/stats", response_model=DashboardSummary)
async def parcel_stats(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Status totals and monthly creation counts."""
    return await DashboardService.get_dashboard_summary(db, months=settings.dashboard_months)


@router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: int,
    current_user: dict = Depends(get_current_user),
    service: ParcelService = Depends(get_parcel_service)
):
    """Get one parcel with its full status history."""
    parcel = await service.get_parcel(parcel_id)
    parcel_guard.enforce(parcel, current_user)
    return ParcelResponse.model_validate(parcel)


@router.api_route("/{parcel_id}/status", methods=["PATCH", "PUT"], response_model=ParcelResponse)
async def update_parcel_status(
    parcel_id: int,
    update: StatusUpdateRequest,
    current_user: dict = Depends(require_role(STATUS_ROLES)),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Set the parcel status and append a history entry.
    
    Staff may update any parcel; senders and receivers only their own.
    """
    parcel = await service.get_parcel(parcel_id)
    parcel_guard.enforce(parcel, current_user)
    
    parcel = await service.update_parcel_status(
        parcel_id,
        update.status,
        actor_id=current_user["user_id"],
        note=update.note,
    )
    return ParcelResponse.model_validate(parcel)


@router.api_route("/{parcel_id}/cancel", methods=["PATCH", "PUT"], response_model=ParcelResponse)
async def cancel_parcel(
    parcel_id: int,
    current_user: dict = Depends(require_role(CANCEL_ROLES)),
    service: ParcelService = Depends(get_parcel_service)
):
    """Cancel a parcel that has not been dispatched (its sender or an admin)."""
    parcel = await service.get_parcel(parcel_id)
    parcel_guard.enforce(parcel, current_user)
    
    parcel = await service.cancel_parcel(parcel_id, actor_id=current_user["user_id"])
    return ParcelResponse.model_validate(parcel)
