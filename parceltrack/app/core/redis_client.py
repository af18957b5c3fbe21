"""
Redis connection.

Redis only holds token revocation flags; losing it un-revokes tokens but
never blocks requests.
"""

import logging
import redis.asyncio as redis
from redis.exceptions import RedisError
from parceltrack.app.core.config import settings

logger = logging.getLogger(__name__)

redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def ping_redis() -> bool:
    """True when Redis answers a PING."""
    try:
        return bool(await redis_client.ping())
    except (RedisError, OSError) as exc:
        logger.warning("Redis ping failed: %s", exc)
        return False
