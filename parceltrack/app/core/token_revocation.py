"""
Token revocation backed by Redis.

Two kinds of flags are kept, both expiring together with the longest-lived
token they could affect:

- ``revoked:token:<jwt>``: one token, set on logout
- ``revoked:user:<id>``: every token of a user, set while the user is blocked

Lookups fail open when Redis is unreachable; the database blocked-flag
check in ``get_current_user`` still rejects blocked users.
"""

import logging
from redis.exceptions import RedisError
import parceltrack.app.core.redis_client as redis_client_module
from parceltrack.app.core.config import settings

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "revoked:token:"
USER_PREFIX = "revoked:user:"


def _redis():
    # Resolved per call so tests can swap the client
    return redis_client_module.redis_client


def _ttl_seconds() -> int:
    return settings.access_token_expire_minutes * 60


async def revoke_token(token: str, user_id: int) -> bool:
    """
    Revoke a single token (logout).
    
    Returns:
        True if the flag was stored
    """
    try:
        await _redis().setex(f"{TOKEN_PREFIX}{token}", _ttl_seconds(), str(user_id))
        return True
    except (RedisError, OSError):
        logger.exception("Could not revoke token of user %s", user_id)
        return False


async def is_token_revoked(token: str) -> bool:
    try:
        return await _redis().exists(f"{TOKEN_PREFIX}{token}") > 0
    except (RedisError, OSError):
        logger.warning("Token revocation check unavailable", exc_info=True)
        return False


async def revoke_all_user_tokens(user_id: int) -> bool:
    """Invalidate every outstanding token of a user (on block)."""
    try:
        await _redis().setex(f"{USER_PREFIX}{user_id}", _ttl_seconds(), "1")
        return True
    except (RedisError, OSError):
        logger.exception("Could not revoke tokens of user %s", user_id)
        return False


async def are_user_tokens_revoked(user_id: int) -> bool:
    try:
        return await _redis().exists(f"{USER_PREFIX}{user_id}") > 0
    except (RedisError, OSError):
        logger.warning("User revocation check unavailable", exc_info=True)
        return False


async def clear_user_token_revocation(user_id: int) -> bool:
    """Lift the user-wide flag (on unblock)."""
    try:
        await _redis().delete(f"{USER_PREFIX}{user_id}")
        return True
    except (RedisError, OSError):
        logger.exception("Could not clear token revocation of user %s", user_id)
        return False
