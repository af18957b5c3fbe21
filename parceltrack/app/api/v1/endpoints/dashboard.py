"""
Dashboard API Endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from parceltrack.app.core.config import settings
from parceltrack.app.core.guards import require_role
from parceltrack.app.db.session import get_db
from parceltrack.app.models.enums import UserRole
from parceltrack.app.schemas.dashboard import DashboardSummary, ReceiverDashboardStats
from parceltrack.app.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/summary", response_model=DashboardSummary)
async def dashboard_summary(
    current_user: dict = Depends(require_role([UserRole.ADMIN, UserRole.SENDER, UserRole.RECEIVER])),
    db: AsyncSession = Depends(get_db)
):
    """Counts per status bucket and parcels created in each of the last months."""
    return await DashboardService.get_dashboard_summary(db, months=settings.dashboard_months)


@router.get("/receiver", response_model=ReceiverDashboardStats)
async def receiver_dashboard(
    current_user: dict = Depends(require_role([UserRole.RECEIVER])),
    db: AsyncSession = Depends(get_db)
):
    """Counters for the parcels addressed to the calling receiver."""
    return await DashboardService.get_receiver_dashboard_stats(db, current_user["user_id"])
