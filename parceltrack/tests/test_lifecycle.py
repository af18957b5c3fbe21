"""
Tests for the parcel lifecycle rules.
"""

import pytest

from parceltrack.app.core.exceptions import DomainError, ValidationError
from parceltrack.app.domain.parcels.lifecycle import (
    check_cancellable,
    check_status_update,
    dashboard_bucket,
    is_forward_transition,
    is_terminal,
    parse_status,
)
from parceltrack.app.models.parcel_enums import ParcelStatus


@pytest.mark.parametrize("raw, expected", [
    ("pending", ParcelStatus.PENDING),
    ("IN_TRANSIT", ParcelStatus.IN_TRANSIT),
    ("  Delivered ", ParcelStatus.DELIVERED),
    (ParcelStatus.CANCELLED, ParcelStatus.CANCELLED),
])
def test_parse_status_normalizes(raw, expected):
    assert parse_status(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_parse_status_missing(raw):
    with pytest.raises(ValidationError, match="Missing status"):
        parse_status(raw)


def test_parse_status_unknown_lists_allowed_values():
    with pytest.raises(ValidationError) as exc_info:
        parse_status("lost")
    
    assert exc_info.value.message.startswith("Invalid status. Allowed:")
    assert "in_transit" in exc_info.value.details["allowed"]


def test_manual_override_is_accepted_and_logged(caplog):
    target = check_status_update(ParcelStatus.DELIVERED, "pending", "SD-20260101-AAAAAA")
    
    assert target == ParcelStatus.PENDING
    assert "Manual status override" in caplog.text


def test_forward_update_is_not_flagged(caplog):
    assert check_status_update(ParcelStatus.PENDING, "collected") == ParcelStatus.COLLECTED
    assert "Manual status override" not in caplog.text


@pytest.mark.parametrize("status", [ParcelStatus.PENDING, ParcelStatus.COLLECTED])
def test_cancellable_before_dispatch(status):
    check_cancellable(status)


@pytest.mark.parametrize("status", [ParcelStatus.DISPATCHED, ParcelStatus.IN_TRANSIT, ParcelStatus.DELIVERED])
def test_not_cancellable_after_dispatch(status):
    with pytest.raises(DomainError, match="Cannot cancel parcel after dispatch"):
        check_cancellable(status)


def test_cancelling_twice_is_rejected():
    with pytest.raises(DomainError, match="already cancelled"):
        check_cancellable(ParcelStatus.CANCELLED)


def test_transition_table():
    assert is_forward_transition(ParcelStatus.PENDING, ParcelStatus.COLLECTED)
    assert is_forward_transition(ParcelStatus.COLLECTED, ParcelStatus.CANCELLED)
    assert not is_forward_transition(ParcelStatus.DISPATCHED, ParcelStatus.CANCELLED)
    assert not is_forward_transition(ParcelStatus.DELIVERED, ParcelStatus.IN_TRANSIT)
    assert is_terminal(ParcelStatus.DELIVERED)
    assert is_terminal(ParcelStatus.CANCELLED)
    assert not is_terminal(ParcelStatus.IN_TRANSIT)


def test_dashboard_buckets():
    assert dashboard_bucket(ParcelStatus.PENDING) == "pending"
    assert dashboard_bucket(ParcelStatus.COLLECTED) == "in_transit"
    assert dashboard_bucket(ParcelStatus.DISPATCHED) == "in_transit"
    assert dashboard_bucket(ParcelStatus.IN_TRANSIT) == "in_transit"
    assert dashboard_bucket(ParcelStatus.DELIVERED) == "delivered"
    assert dashboard_bucket(ParcelStatus.CANCELLED) == "cancelled"
