"""
Human-facing identifier candidates.

Tracking IDs look like ``SD-20260118-7KQ2ZX``: a constant prefix, the UTC
date and a random run over upper-case letters and digits. Short IDs
are a flat random run over a mixed-case alphabet.

Both are drawn with ``secrets``. Generation is pure: uniqueness is the
allocator's job.
"""

import re
import secrets
import string
from datetime import datetime
from typing import Optional

from parceltrack.app.core.clock import utcnow

TRACKING_ALPHABET = string.ascii_uppercase + string.digits
SHORT_ID_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

DEFAULT_TRACKING_PREFIX = "SD"
DEFAULT_TRACKING_LENGTH = 6
DEFAULT_SHORT_ID_LENGTH = 8


def random_run(length: int, alphabet: str = TRACKING_ALPHABET) -> str:
    """Return ``length`` characters drawn uniformly from ``alphabet``."""
    if length <= 0:
        return ""
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_tracking_id(
    prefix: str = DEFAULT_TRACKING_PREFIX,
    length: int = DEFAULT_TRACKING_LENGTH,
    now: Optional[datetime] = None,
) -> str:
    """
    Build a tracking ID candidate: ``<PREFIX>-<YYYYMMDD>-<RANDOM>``.
    
    Args:
        prefix: Constant tag in front of the ID
        length: Length of the random section
        now: Clock override (UTC); defaults to the current time
    """
    stamp = (now or utcnow()).strftime("%Y%m%d")
    return f"{prefix}-{stamp}-{random_run(length, TRACKING_ALPHABET)}"


def generate_short_id(length: int = DEFAULT_SHORT_ID_LENGTH) -> str:
    """Build a short ID candidate (no structure, mixed case)."""
    return random_run(length, SHORT_ID_ALPHABET)


def tracking_id_pattern(prefix: str = DEFAULT_TRACKING_PREFIX, length: int = DEFAULT_TRACKING_LENGTH) -> "re.Pattern[str]":
    return re.compile(rf"^{re.escape(prefix)}-(\d{{8}})-([A-Z0-9]{{{length}}})$")


def is_tracking_id(value: str, prefix: str = DEFAULT_TRACKING_PREFIX, length: int = DEFAULT_TRACKING_LENGTH) -> bool:
    """True when ``value`` is syntactically a tracking ID."""
    return bool(tracking_id_pattern(prefix, length).match(value or ""))
