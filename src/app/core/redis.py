"""
Redis Configuration

Shared async Redis client. Redis backs the rate limiter; the service keeps
working (with in-memory rate limits) when it is unavailable.
"""

from redis.asyncio import Redis, from_url

from app.core.config import settings

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """Connect to Redis on startup and verify the connection."""
    global redis_client
    client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    redis_client = client
    return redis_client


async def ping_redis() -> str:
    """
    Report Redis connectivity for readiness checks.

    Returns:
        "connected", "not initialized" or "error: <message>"
    """
    if redis_client is None:
        return "not initialized"
    try:
        await redis_client.ping()
        return "connected"
    except Exception as e:
        return f"error: {e}"


async def close_redis() -> None:
    """Close the Redis connection on shutdown."""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
