"""Redis client lifecycle management.

Redis backs the per-session turn lock, so it must be reachable before the
first message is sent.
"""

import redis.asyncio as redis
import structlog

from companion.core.config import settings

logger = structlog.get_logger()

redis_client: redis.Redis | None = None  # type: ignore[type-arg]


async def init_redis(url: str | None = None) -> redis.Redis:  # type: ignore[type-arg]
    """Connect to Redis and verify the connection with a ping."""
    global redis_client  # noqa: PLW0603
    redis_client = redis.from_url(
        url or settings.redis.url,
        decode_responses=True,
        socket_timeout=settings.redis.socket_timeout_seconds,
    )
    await redis_client.ping()
    logger.info("Redis connected")
    return redis_client


async def close_redis() -> None:
    """Close the Redis connection if one is open."""
    global redis_client  # noqa: PLW0603
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None


def get_redis() -> redis.Redis:  # type: ignore[type-arg]
    """Get the active Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client not initialized")
    return redis_client
