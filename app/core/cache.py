"""
Redis cache for analytics payloads.

Values are stored as JSON under the `csr:` namespace. When caching is disabled
`redis_client` is None and every helper behaves as a miss. Redis faults are
logged and also treated as a miss, so the dashboard is recomputed rather than
failing.
"""
import json
from datetime import timedelta
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import settings
from app.core.logging import logger

CACHE_PREFIX = "csr:"
SOCKET_TIMEOUT_SECONDS = 5


def _create_client() -> Optional[redis.Redis]:
    if not settings.cache.enabled:
        logger.info("Analytics cache disabled")
        return None

    redis_settings = settings.redis
    client = redis.Redis(
        host=redis_settings.host,
        port=redis_settings.port,
        db=redis_settings.db,
        password=redis_settings.password_str,
        max_connections=redis_settings.max_connections,
        socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
        socket_timeout=SOCKET_TIMEOUT_SECONDS,
    )
    logger.info(f"Analytics cache at {redis_settings.host}:{redis_settings.port}/{redis_settings.db}")
    return client


redis_client = _create_client()


def get_cache_key(key: str) -> str:
    return CACHE_PREFIX + key


async def set_cache(key: str, value: Any, expire: Optional[timedelta] = None) -> bool:
    """
    Store a JSON-serializable value, optionally with a time to live.

    Returns False when caching is disabled or the write failed.
    """
    if redis_client is None:
        return False

    try:
        payload = json.dumps(value, default=str)
        ttl = int(expire.total_seconds()) if expire else None
        return bool(await redis_client.set(get_cache_key(key), payload, ex=ttl))
    except (RedisError, TypeError, ValueError) as e:
        logger.warning(f"Could not cache {key}: {e}")
        return False


async def get_cache(key: str) -> Optional[Any]:
    """Cached value for `key`, or None on a miss."""
    if redis_client is None:
        return None

    try:
        raw = await redis_client.get(get_cache_key(key))
        return json.loads(raw) if raw is not None else None
    except (RedisError, ValueError) as e:
        logger.warning(f"Could not read cache entry {key}: {e}")
        return None


async def invalidate_cache_pattern(pattern: str) -> int:
    """
    Drop every entry whose unprefixed key matches a glob pattern such as
    `analytics:*`. Returns how many entries were removed.
    """
    if redis_client is None:
        return 0

    try:
        matched = [key async for key in redis_client.scan_iter(match=get_cache_key(pattern))]
        if not matched:
            return 0
        removed = await redis_client.delete(*matched)
    except RedisError as e:
        logger.warning(f"Could not invalidate cache entries {pattern}: {e}")
        return 0

    logger.debug(f"Invalidated {removed} cache entries matching {pattern}")
    return removed


async def check_redis_connection() -> bool:
    if redis_client is None:
        return False

    try:
        return bool(await redis_client.ping())
    except (RedisError, OSError) as e:
        logger.error(f"Redis ping failed: {e}")
        return False
