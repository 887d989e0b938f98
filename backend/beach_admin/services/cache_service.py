"""
Redis connection and caching for beach listings.

CACHING STRATEGY
================

What we cache:
  - Beach listing responses (paginated, JSON-serialized)
    key pattern: "beaches:list:page={page}&size={size}&q={search}&status={status}"
  - The occupancy overview used by dashboards: "beaches:occupancy"

Invalidation strategy:
  - Any beach, zone, sunbed, admin or booking mutation changes what those
    responses show, so the routes delete every "beaches:*" key afterwards
  - TTL-based expiry as safety net (5 minutes)

Single-beach reads are never cached: they carry live sunbed statuses.

The same client is used by the notification publisher.
"""

import json
from typing import Optional

import redis.asyncio as redis
from beach_admin.core.config import get_settings
from beach_admin.core.metrics import record_cache_operation
from beach_admin.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None

OCCUPANCY_OVERVIEW_KEY = "beaches:occupancy"


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or unreachable."""
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


def make_beach_list_key(page: int, page_size: int, search: str = "", status: Optional[str] = None) -> str:
    return f"beaches:list:page={page}&size={page_size}&q={search or ''}&status={status or ''}"


async def get_cached(key: str):
    client = await get_redis()
    if not client:
        return None

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


async def set_cached(key: str, data) -> None:
    """Cache a JSON-serializable response with the configured TTL."""
    client = await get_redis()
    if not client:
        return

    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", hit=False)
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_beach_cache() -> None:
    """Delete every cached beach listing and the occupancy overview."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match="beaches:*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


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
