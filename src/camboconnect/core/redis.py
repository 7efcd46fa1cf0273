"""
Redis Configuration

Shared async Redis client, used for rate limiting. Redis is optional outside
production: callers must handle ``None``.
"""

from redis.asyncio import Redis, from_url

from camboconnect.core.config import settings

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """
    Connect to Redis and verify the connection.

    Call this on application startup.
    """
    global redis_client
    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    redis_client = client
    return client


async def get_redis() -> Redis | None:
    """
    Get the shared client.

    Returns None when Redis was not initialised (optional outside production).
    """
    return redis_client


async def close_redis() -> None:
    """Close the shared Redis connection."""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
