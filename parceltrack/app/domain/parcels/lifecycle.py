"""
Parcel lifecycle state machine.

Canonical progression::

    pending → collected → dispatched → in_transit → delivered
    pending / collected → cancelled

Explicit status updates accept any canonical status regardless of the
current one (operators use this to correct mistakes); only cancellation is
gated. Out-of-order updates are logged as manual overrides.
"""

import logging
from typing import Optional

from parceltrack.app.core.exceptions import DomainError, ValidationError
from parceltrack.app.models.parcel_enums import ParcelStatus

logger = logging.getLogger(__name__)

INITIAL_STATUS = ParcelStatus.PENDING

TERMINAL_STATUSES = frozenset({ParcelStatus.DELIVERED, ParcelStatus.CANCELLED})

# Cancellation is only allowed before dispatch
CANCELLABLE_STATUSES = frozenset({ParcelStatus.PENDING, ParcelStatus.COLLECTED})

# Nominal forward transitions. Not enforced for manual updates.
FORWARD_TRANSITIONS = {
    ParcelStatus.PENDING: frozenset({ParcelStatus.COLLECTED, ParcelStatus.CANCELLED}),
    ParcelStatus.COLLECTED: frozenset({ParcelStatus.DISPATCHED, ParcelStatus.CANCELLED}),
    ParcelStatus.DISPATCHED: frozenset({ParcelStatus.IN_TRANSIT}),
    ParcelStatus.IN_TRANSIT: frozenset({ParcelStatus.DELIVERED}),
    ParcelStatus.DELIVERED: frozenset(),
    ParcelStatus.CANCELLED: frozenset(),
}

IN_TRANSIT_FAMILY = frozenset({ParcelStatus.COLLECTED, ParcelStatus.DISPATCHED, ParcelStatus.IN_TRANSIT})

ALLOWED_STATUS_VALUES = tuple(s.value for s in ParcelStatus)


def parse_status(raw: object) -> ParcelStatus:
    """
    Normalize caller input to a canonical status.
    
    Matching is case-insensitive and ignores surrounding whitespace.
    
    Raises:
        ValidationError: Missing or unrecognized status value
    """
    if isinstance(raw, ParcelStatus):
        return raw
    if raw is None or not str(raw).strip():
        raise ValidationError("Missing status")
    value = str(raw).strip().lower()
    try:
        return ParcelStatus(value)
    except ValueError:
        raise ValidationError(
            f"Invalid status. Allowed: {', '.join(ALLOWED_STATUS_VALUES)}",
            details={"status": str(raw), "allowed": list(ALLOWED_STATUS_VALUES)},
        )


def is_terminal(status: ParcelStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_forward_transition(current: ParcelStatus, target: ParcelStatus) -> bool:
    return target in FORWARD_TRANSITIONS[current]


def check_status_update(current: ParcelStatus, raw_target: object, parcel_ref: Optional[str] = None) -> ParcelStatus:
    """
    Validate an explicit status update and return the normalized target.
    
    Any canonical status is accepted; a non-forward move is only logged.
    """
    target = parse_status(raw_target)
    if not is_forward_transition(current, target):
        logger.warning(
            "Manual status override on parcel %s: %s -> %s",
            parcel_ref or "?", current.value, target.value,
        )
    return target


def check_cancellable(current: ParcelStatus) -> None:
    """
    Raises:
        DomainError: The parcel is already cancelled or has been dispatched
    """
    if current == ParcelStatus.CANCELLED:
        raise DomainError("Parcel is already cancelled", details={"status": current.value})
    if current not in CANCELLABLE_STATUSES:
        raise DomainError("Cannot cancel parcel after dispatch", details={"status": current.value})


def dashboard_bucket(status: ParcelStatus) -> str:
    """Collapse a status into the dashboard bucket it is counted under."""
    if status == ParcelStatus.PENDING:
        return "pending"
    if status in IN_TRANSIT_FAMILY:
        return "in_transit"
    return status.value
