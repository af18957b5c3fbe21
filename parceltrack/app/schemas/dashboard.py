"""
Dashboard Schemas.
"""

from pydantic import BaseModel
from typing import List


class StatusTotals(BaseModel):
    """Parcel counts per dashboard bucket."""
    total: int
    pending: int
    in_transit: int
    delivered: int
    cancelled: int


class MonthlyCount(BaseModel):
    month: str  # YYYY-MM
    count: int


class DashboardSummary(BaseModel):
    """Global (admin) dashboard."""
    totals: StatusTotals
    monthly: List[MonthlyCount]


class ReceiverDashboardStats(BaseModel):
    """Dashboard counters scoped to one receiver."""
    total: int
    in_transit: int
    delivered: int
    awaiting_confirmation: int
    arriving_today: int
