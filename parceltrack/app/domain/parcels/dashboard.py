"""
Read-side derivations for dashboards.

Pure functions over already-loaded data; the dashboard service does the
querying and passes results in.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Mapping

from parceltrack.app.core.clock import as_utc
from parceltrack.app.domain.parcels.lifecycle import IN_TRANSIT_FAMILY, dashboard_bucket
from parceltrack.app.domain.parcels.status_history import latest_entry
from parceltrack.app.models.parcel import Parcel
from parceltrack.app.models.parcel_enums import ParcelStatus


def summarize_status_counts(status_counts: Mapping[ParcelStatus, int]) -> Dict[str, int]:
    """Collapse per-status counts into dashboard buckets plus a total."""
    totals = {"total": 0, "pending": 0, "in_transit": 0, "delivered": 0, "cancelled": 0}
    for status, count in status_counts.items():
        totals["total"] += count
        totals[dashboard_bucket(status)] += count
    return totals


def shift_month(year: int, month: int, delta: int) -> tuple:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_window_start(now: datetime, months: int) -> datetime:
    """First instant of the oldest month in a trailing window that includes ``now``'s month."""
    now = as_utc(now)
    year, month = shift_month(now.year, now.month, -(months - 1))
    return now.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)


def monthly_buckets(created_ats: Iterable[datetime], now: datetime, months: int = 6) -> List[Dict[str, object]]:
    """
    Count parcels per ``YYYY-MM`` over the trailing ``months`` months.
    
    Every month in the window is present, oldest first, even when empty.
    Timestamps outside the window are ignored.
    """
    now = as_utc(now)
    counts: Dict[str, int] = {}
    for offset in range(months - 1, -1, -1):
        year, month = shift_month(now.year, now.month, -offset)
        counts[f"{year:04d}-{month:02d}"] = 0
    
    for created_at in created_ats:
        if created_at is None:
            continue
        key = as_utc(created_at).strftime("%Y-%m")
        if key in counts:
            counts[key] += 1
    
    return [{"month": key, "count": count} for key, count in counts.items()]


def last_update_at(parcel: Parcel) -> datetime:
    entry = latest_entry(parcel)
    return as_utc(entry.timestamp if entry is not None else parcel.updated_at)


def is_awaiting_confirmation(parcel: Parcel, receiver_id: int) -> bool:
    """Delivered, but the delivery was marked by someone other than the receiver."""
    if parcel.status != ParcelStatus.DELIVERED:
        return False
    entry = latest_entry(parcel)
    return entry is None or entry.actor_id != receiver_id


def receiver_stats(parcels: Iterable[Parcel], receiver_id: int, now: datetime) -> Dict[str, int]:
    """
    Derive a receiver's dashboard counters.
    
    ``arriving_today`` is a heuristic: parcels whose latest update happened
    on the current UTC calendar day. It is not an ETA.
    """
    today = as_utc(now).date()
    stats = {"total": 0, "in_transit": 0, "delivered": 0, "awaiting_confirmation": 0, "arriving_today": 0}
    for parcel in parcels:
        if parcel.receiver_id != receiver_id:
            continue
        stats["total"] += 1
        if parcel.status in IN_TRANSIT_FAMILY:
            stats["in_transit"] += 1
        elif parcel.status == ParcelStatus.DELIVERED:
            stats["delivered"] += 1
            if is_awaiting_confirmation(parcel, receiver_id):
                stats["awaiting_confirmation"] += 1
        if last_update_at(parcel).date() == today:
            stats["arriving_today"] += 1
    return stats
