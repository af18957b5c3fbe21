"""
Dashboard Service.

Read-only aggregation over parcels and their histories.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from parceltrack.app.core.clock import utcnow
from parceltrack.app.domain.parcels.dashboard import (
    month_window_start, monthly_buckets, receiver_stats, summarize_status_counts,
)
from parceltrack.app.repositories.parcel_repository import ParcelRepository
from parceltrack.app.schemas.dashboard import DashboardSummary, ReceiverDashboardStats


class DashboardService:

    @staticmethod
    async def get_dashboard_summary(
        db: AsyncSession,
        months: int = 6,
        now: Optional[datetime] = None,
    ) -> DashboardSummary:
        """Global counts per status bucket and parcels created per month."""
        now = now or utcnow()
        parcels = ParcelRepository(db)
        
        totals = summarize_status_counts(await parcels.status_counts())
        created = await parcels.created_since(month_window_start(now, months))
        
        return DashboardSummary(
            totals=totals,
            monthly=monthly_buckets(created, now, months),
        )

    @staticmethod
    async def get_receiver_dashboard_stats(
        db: AsyncSession,
        receiver_id: int,
        now: Optional[datetime] = None,
    ) -> ReceiverDashboardStats:
        """Counters for parcels addressed to one receiver."""
        parcels = await ParcelRepository(db).for_receiver(receiver_id)
        return ReceiverDashboardStats(**receiver_stats(parcels, receiver_id, now or utcnow()))
