"""Redis store for distributed locks.

Handles:
- Per-offer sync locks shared by every API worker / script run
- Token-checked release so a slow holder never frees a lock it no longer owns

TTL policies:
- Sync locks: SYNC_LOCK_TTL_SECONDS (default 120s, longer than one upstream fetch)
"""

import logging

import redis.asyncio as redis

from mobgran_sync.settings import get_settings

# Key prefixes
PREFIX_LOCK = "lock:"

# Compare-and-delete: only the holder that set the token may release the lock.
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class RedisNotInitializedError(RuntimeError):
    """Raised when Redis is used before init_redis() succeeded."""


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
    # No client is kept when the ping fails.
    try:
        await _redis.ping()
    except Exception:
        client, _redis = _redis, None
        await client.aclose()
        raise
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
        raise RedisNotInitializedError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Distributed locks
# ============================================================


async def acquire_lock(key: str, token: str, ttl: int) -> bool:
    """Acquire a distributed lock.

    Args:
        key: Lock key (e.g., "sync:<canonical id>").
        token: Unique value identifying this holder.
        ttl: Lock timeout in seconds.

    Returns:
        True if lock acquired, False if already locked.
    """
    lock_key = f"{PREFIX_LOCK}{key}"
    # SET NX (only if not exists) with TTL
    result = await _get_redis().set(lock_key, token, nx=True, ex=ttl)
    return result is not None


async def release_lock(key: str, token: str) -> bool:
    """Release a distributed lock if it is still held with `token`.

    Returns:
        True if the lock was deleted, False if it had expired or changed hands.
    """
    deleted = await _get_redis().eval(_RELEASE_SCRIPT, 1, f"{PREFIX_LOCK}{key}", token)
    return bool(deleted)
