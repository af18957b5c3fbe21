"""
Tests for dashboard derivations and the dashboard service.
"""

from datetime import datetime, timezone

from parceltrack.app.domain.parcels.dashboard import (
    is_awaiting_confirmation,
    month_window_start,
    monthly_buckets,
    receiver_stats,
    summarize_status_counts,
)
from parceltrack.app.domain.parcels.status_history import apply_transition, append_status_log
from parceltrack.app.models.parcel import Parcel
from parceltrack.app.models.parcel_enums import ParcelStatus

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
RECEIVER_ID = 7
COURIER_ID = 9


def make_parcel(*steps, receiver_id=RECEIVER_ID):
    """Build an unsaved parcel whose history is ``steps`` of (status, actor_id, at)."""
    parcel = Parcel(
        tracking_id="SD-20260315-AAAAAA",
        sender_id=1,
        receiver_id=receiver_id,
        origin="Pune",
        destination="Delhi",
        status=ParcelStatus.PENDING,
    )
    first_status, first_actor, first_at = steps[0]
    append_status_log(parcel, first_status, actor_id=first_actor, at=first_at)
    parcel.status = first_status
    parcel.updated_at = first_at
    for status, actor_id, at in steps[1:]:
        entry = apply_transition(parcel, status, actor_id=actor_id)
        entry.timestamp = at
        parcel.updated_at = at
    return parcel


def test_summary_buckets_sum_to_total():
    totals = summarize_status_counts({
        ParcelStatus.PENDING: 3,
        ParcelStatus.COLLECTED: 1,
        ParcelStatus.DISPATCHED: 2,
        ParcelStatus.IN_TRANSIT: 4,
        ParcelStatus.DELIVERED: 5,
        ParcelStatus.CANCELLED: 2,
    })
    
    assert totals == {"total": 17, "pending": 3, "in_transit": 7, "delivered": 5, "cancelled": 2}
    assert totals["pending"] + totals["in_transit"] + totals["delivered"] + totals["cancelled"] == totals["total"]


def test_summary_of_nothing():
    assert summarize_status_counts({}) == {"total": 0, "pending": 0, "in_transit": 0, "delivered": 0, "cancelled": 0}


def test_monthly_buckets_include_empty_months_oldest_first():
    created = [
        datetime(2026, 3, 1, tzinfo=timezone.utc),
        datetime(2026, 3, 14, tzinfo=timezone.utc),
        datetime(2026, 1, 31, 23, 59, tzinfo=timezone.utc),
        datetime(2025, 10, 2, tzinfo=timezone.utc),
        datetime(2025, 9, 30, tzinfo=timezone.utc),  # outside the window
    ]
    
    buckets = monthly_buckets(created, NOW, months=6)
    
    assert buckets == [
        {"month": "2025-10", "count": 1},
        {"month": "2025-11", "count": 0},
        {"month": "2025-12", "count": 0},
        {"month": "2026-01", "count": 1},
        {"month": "2026-02", "count": 0},
        {"month": "2026-03", "count": 2},
    ]


def test_monthly_buckets_accept_naive_timestamps():
    buckets = monthly_buckets([datetime(2026, 2, 10)], NOW, months=2)
    assert buckets == [{"month": "2026-02", "count": 1}, {"month": "2026-03", "count": 0}]


def test_window_start_crosses_year_boundary():
    assert month_window_start(NOW, 6) == datetime(2025, 10, 1, tzinfo=timezone.utc)
    assert month_window_start(NOW, 1) == datetime(2026, 3, 1, tzinfo=timezone.utc)


def test_delivered_by_courier_awaits_confirmation():
    parcel = make_parcel(
        (ParcelStatus.PENDING, 1, datetime(2026, 3, 10, tzinfo=timezone.utc)),
        (ParcelStatus.DELIVERED, COURIER_ID, datetime(2026, 3, 12, tzinfo=timezone.utc)),
    )
    assert is_awaiting_confirmation(parcel, RECEIVER_ID)


def test_delivered_by_receiver_is_confirmed():
    parcel = make_parcel(
        (ParcelStatus.PENDING, 1, datetime(2026, 3, 10, tzinfo=timezone.utc)),
        (ParcelStatus.DELIVERED, RECEIVER_ID, datetime(2026, 3, 12, tzinfo=timezone.utc)),
    )
    assert not is_awaiting_confirmation(parcel, RECEIVER_ID)


def test_delivered_without_actor_awaits_confirmation():
    parcel = make_parcel(
        (ParcelStatus.PENDING, 1, datetime(2026, 3, 10, tzinfo=timezone.utc)),
        (ParcelStatus.DELIVERED, None, datetime(2026, 3, 12, tzinfo=timezone.utc)),
    )
    assert is_awaiting_confirmation(parcel, RECEIVER_ID)


def test_receiver_stats():
    today = datetime(2026, 3, 15, 8, 30, tzinfo=timezone.utc)
    earlier = datetime(2026, 3, 10, tzinfo=timezone.utc)
    parcels = [
        make_parcel((ParcelStatus.PENDING, 1, today)),
        make_parcel((ParcelStatus.PENDING, 1, earlier), (ParcelStatus.IN_TRANSIT, COURIER_ID, today)),
        make_parcel((ParcelStatus.PENDING, 1, earlier), (ParcelStatus.DISPATCHED, COURIER_ID, earlier)),
        make_parcel((ParcelStatus.PENDING, 1, earlier), (ParcelStatus.DELIVERED, COURIER_ID, earlier)),
        make_parcel((ParcelStatus.PENDING, 1, earlier), (ParcelStatus.DELIVERED, RECEIVER_ID, earlier)),
        make_parcel((ParcelStatus.PENDING, 1, today), receiver_id=99),
    ]
    
    stats = receiver_stats(parcels, RECEIVER_ID, NOW)
    
    assert stats == {
        "total": 5,
        "in_transit": 2,
        "delivered": 2,
        "awaiting_confirmation": 1,
        "arriving_today": 2,
    }


def test_arriving_today_ignores_status():
    today = datetime(2026, 3, 15, 0, 5, tzinfo=timezone.utc)
    parcel = make_parcel(
        (ParcelStatus.PENDING, 1, datetime(2026, 3, 1, tzinfo=timezone.utc)),
        (ParcelStatus.CANCELLED, 1, today),
    )
    
    assert receiver_stats([parcel], RECEIVER_ID, NOW)["arriving_today"] == 1
