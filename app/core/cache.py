"""Redis client for the BDC Screener (rate limiting, optional watchlist backend)."""

from typing import Optional, Tuple

import redis.asyncio as redis

from app.core.config import ConfigurationError, get_settings


_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get Redis client, creating if needed. None when REDIS_URL is unset."""
    global _redis_client

    settings = get_settings()
    if not settings.redis_url:
        return None

    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )

    return _redis_client


async def require_redis() -> redis.Redis:
    """Get Redis client for features that cannot run without it."""
    client = await get_redis()
    if client is None:
        raise ConfigurationError("REDIS_URL not configured")
    return client


async def close_redis():
    """Close Redis connection."""
    global _redis_client
    if _redis_client:
        await _redis_client.close()
        _redis_client = None


async def cache_ping() -> tuple[bool, str]:
    """Check if Redis is reachable. Returns (success, message)."""
    client = await get_redis()
    if client:
        try:
            await client.ping()
            return True, "connected"
        except Exception as e:
            return False, str(e)
    return False, "no client"


async def check_rate_limit(
    identifier: str,
    limit: Optional[int] = None,
    window: Optional[int] = None,
) -> Tuple[bool, int, int]:
    """
    Check and update the fixed-window request counter for an identifier.

    Args:
        identifier: Client identifier (IP address)
        limit: Maximum requests per window (default from settings)
        window: Window size in seconds (default from settings)

    Returns:
        Tuple of (allowed, remaining, reset_seconds)
    """
    settings = get_settings()
    limit = limit or settings.rate_limit_requests
    window = window or settings.rate_limit_window

    client = await get_redis()

    # Without Redis every request is allowed (fail open)
    if not client:
        return True, limit, window

    key = f"ratelimit:{identifier}"

    try:
        pipe = client.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        current_count, ttl = await pipe.execute()

        # First request in the window starts the clock
        if ttl == -1:
            await client.expire(key, window)
            ttl = window

        remaining = max(0, limit - current_count)
        allowed = current_count <= limit

        return allowed, remaining, ttl if ttl > 0 else window

    except Exception:
        # Fail open on Redis errors
        return True, limit, window
