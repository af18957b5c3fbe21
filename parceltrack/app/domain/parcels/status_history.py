"""
Append-only status history of a parcel.

Insertion order is chronological order; entries are never reordered,
edited or removed. ``apply_transition`` is the only way the parcel's
current status changes, so the status column always equals the last entry.
"""

from datetime import datetime
from typing import Optional

from parceltrack.app.core.clock import utcnow
from parceltrack.app.models.parcel import Parcel, ParcelStatusLog
from parceltrack.app.models.parcel_enums import ParcelStatus


def append_status_log(
    parcel: Parcel,
    status: ParcelStatus,
    actor_id: Optional[int] = None,
    note: Optional[str] = None,
    at: Optional[datetime] = None,
) -> ParcelStatusLog:
    """Append one entry as the new last element of the parcel's history."""
    entry = ParcelStatusLog(
        position=len(parcel.status_logs),
        status=status,
        timestamp=at or utcnow(),
        actor_id=actor_id,
        note=note,
    )
    parcel.status_logs.append(entry)
    return entry


def apply_transition(
    parcel: Parcel,
    status: ParcelStatus,
    actor_id: Optional[int] = None,
    note: Optional[str] = None,
) -> ParcelStatusLog:
    """
    Set the current status and record it in the history.
    
    Both changes live in the same unit of work; the caller commits them
    together or rolls both back.
    """
    entry = append_status_log(parcel, status, actor_id=actor_id, note=note)
    parcel.status = status
    parcel.updated_at = entry.timestamp
    return entry


def latest_entry(parcel: Parcel) -> Optional[ParcelStatusLog]:
    """Most recent history entry, or None for an empty history."""
    if not parcel.status_logs:
        return None
    return parcel.status_logs[-1]


def clean_note(note: Optional[str]) -> Optional[str]:
    """Trim a free-text note; blank notes are stored as absent."""
    if note is None:
        return None
    note = note.strip()
    return note or None
