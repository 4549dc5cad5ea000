"""Redis store for caching.

TTL policies:
- FX rates (OpenExchangeRates dollar rate): ~1 hour

Pricing and plan canje rules are never cached: they are read fresh from
Postgres on every request.
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from app.settings import get_settings

# TTL constants (in seconds)
TTL_FX_RATES = 3600  # 1 hour

# Key prefixes
PREFIX_FX_RATES = "fx:rates:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


async def cache_get_json(key: str) -> dict[str, Any] | None:
    """Get JSON value from cache.

    Args:
        key: Cache key.

    Returns:
        Parsed JSON dict or None if not found.
    """
    value = await _get_redis().get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: dict[str, Any], ttl: int) -> None:
    """Set JSON value in cache with TTL (seconds)."""
    await _get_redis().setex(key, ttl, json.dumps(value))


async def get_fx_rates_cache(base: str = "USD") -> dict[str, Any] | None:
    """Get cached FX rates payload for a base currency."""
    return await cache_get_json(f"{PREFIX_FX_RATES}{base.upper()}")


async def set_fx_rates_cache(base: str, payload: dict[str, Any]) -> None:
    """Cache FX rates payload for a base currency (TTL ~1 hour)."""
    await cache_set_json(f"{PREFIX_FX_RATES}{base.upper()}", payload, TTL_FX_RATES)
