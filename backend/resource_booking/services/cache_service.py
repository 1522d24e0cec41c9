"""
Redis caching for resource availability listings.

CACHING STRATEGY
================

What we cache:
  - The active bookings of one resource on one day, as served by
    GET /bookings/resource/{id}?date=...
  - Key pattern: "availability:{resource_id}:{date}" ("all" when no date)

Why:
  - Calendar views poll this endpoint far more often than bookings change

Invalidation strategy:
  - Every booking write (create, status change) deletes all keys of that
    resource: "availability:{resource_id}:*"
  - Short TTL as a safety net

The cache is never consulted by the conflict checker. A stale entry can at
worst show a slot as free that is taken; the booking attempt will then get
a 409 from the authoritative check.

Redis is optional: when disabled or unreachable every call degrades to a
no-op and the database answers.
"""

import json
from typing import Optional

import redis.asyncio as redis
from resource_booking.core.config import get_settings
from resource_booking.core.logging import get_logger
from resource_booking.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_availability_key(resource_id: int, day: Optional[str]) -> str:
    return f"availability:{resource_id}:{day or 'all'}"


async def get_cached_availability(resource_id: int, day: Optional[str]) -> Optional[list]:
    client = await get_redis()
    if not client:
        return None

    key = _make_availability_key(resource_id, day)
    try:
        data = await client.get(key)
        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_availability(resource_id: int, day: Optional[str], data: list) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_availability_key(resource_id, day)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_resource_availability(resource_id: int) -> None:
    """Drop every cached day of one resource."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"availability:{resource_id}:*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", resource_id=resource_id, keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", resource_id=resource_id, error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
