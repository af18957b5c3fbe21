"""
Uniqueness-retry allocation of identifiers.

The storage layer's unique constraint is the source of truth. The allocator
generates a candidate, attempts the atomic create and only retries when the
create reports a duplicate on *this* identifier field. Any other failure is
propagated untouched.

An optional ``exists`` pre-check may skip candidates that are already taken
without attempting a write (used for user short IDs, which are best-effort).
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from parceltrack.app.core.exceptions import AllocationExhaustedError, DuplicateIdentifierError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 6


async def allocate_unique_identifier(
    generate: Callable[[], str],
    create: Callable[[str], Awaitable[T]],
    exists: Optional[Callable[[str], Awaitable[bool]]] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    field: str = "identifier",
) -> T:
    """
    Create a record under a freshly generated unique identifier.
    
    Args:
        generate: Zero-argument candidate generator
        create: Atomically persists a record with the candidate; raises
            DuplicateIdentifierError(field) on a uniqueness collision
        exists: Optional pre-check; a True result skips the candidate
        max_attempts: Total number of candidates to try
        field: Identifier field name, used to tell our collisions apart
            from unrelated unique violations
    
    Returns:
        Whatever ``create`` returned for the first free candidate
    
    Raises:
        AllocationExhaustedError: Every attempt collided; wraps the last collision
        Exception: Any non-collision failure from ``exists`` or ``create``
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    
    last_error: Optional[DuplicateIdentifierError] = None
    
    for attempt in range(1, max_attempts + 1):
        candidate = generate()
        
        if exists is not None and await exists(candidate):
            last_error = DuplicateIdentifierError(field, candidate)
            logger.debug("%s candidate already taken (attempt %d/%d)", field, attempt, max_attempts)
            continue
        
        try:
            return await create(candidate)
        except DuplicateIdentifierError as exc:
            if exc.field != field:
                raise
            last_error = exc
            logger.warning("%s collision on create (attempt %d/%d)", field, attempt, max_attempts)
    
    logger.error("Could not allocate a unique %s after %d attempts", field, max_attempts)
    raise AllocationExhaustedError(field, max_attempts, last_error) from last_error
