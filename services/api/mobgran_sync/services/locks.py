"""Per-offer sync locks.

At most one synchronization per canonical identifier runs at a time:
1. An in-process asyncio.Lock serializes coroutines of this worker
2. A Redis SET NX lock serializes across workers / hosts / script runs

If Redis is not initialized (tests, local minimal env) or unreachable, the
in-process lock still applies and a warning is logged.
"""

import asyncio
import logging
import weakref
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import uuid4

from redis.exceptions import RedisError

from mobgran_sync.services.errors import SyncInProgressError
from mobgran_sync.settings import get_settings
from mobgran_sync.stores.redis import RedisNotInitializedError, acquire_lock, release_lock

logger = logging.getLogger("uvicorn.error")

# Poll interval while waiting for a Redis lock held elsewhere
_POLL_SECONDS = 0.2

# Entries vanish once no coroutine holds or waits on the lock
_local_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def _local_lock(canonical_id: str) -> asyncio.Lock:
    lock = _local_locks.get(canonical_id)
    if lock is None:
        lock = asyncio.Lock()
        _local_locks[canonical_id] = lock
    return lock


def lock_key(canonical_id: str) -> str:
    return f"sync:{canonical_id}"


async def _acquire_distributed(canonical_id: str, ttl: int, wait: float) -> str | None:
    """Acquire the Redis lock, polling until `wait` seconds elapse.

    Returns:
        The holder token, or None when running without Redis.
    """
    token = uuid4().hex
    loop = asyncio.get_running_loop()
    deadline = loop.time() + wait
    while True:
        try:
            if await acquire_lock(lock_key(canonical_id), token, ttl):
                return token
        except RedisNotInitializedError:
            return None
        except RedisError as e:
            logger.warning(f"Redis lock unavailable for id={canonical_id}, using local lock only: {e}")
            return None

        if loop.time() >= deadline:
            raise SyncInProgressError(
                "Another import of this offer is still running; try again later"
            )
        await asyncio.sleep(_POLL_SECONDS)


@asynccontextmanager
async def identifier_lock(
    canonical_id: str,
    *,
    ttl: int | None = None,
    wait: float | None = None,
) -> AsyncGenerator[None, None]:
    """Hold the sync lock of one offer for the duration of the block.

    Raises:
        SyncInProgressError: The lock could not be acquired within `wait` seconds.
    """
    settings = get_settings()
    ttl = ttl if ttl is not None else settings.sync_lock_ttl_seconds
    wait = wait if wait is not None else settings.sync_lock_wait_seconds

    local = _local_lock(canonical_id)
    loop = asyncio.get_running_loop()
    started = loop.time()
    try:
        await asyncio.wait_for(local.acquire(), timeout=wait)
    except asyncio.TimeoutError:
        raise SyncInProgressError(
            "Another import of this offer is still running; try again later"
        ) from None

    try:
        remaining = max(0.0, wait - (loop.time() - started))
        token = await _acquire_distributed(canonical_id, ttl, remaining)
        try:
            yield
        finally:
            if token is not None:
                try:
                    if not await release_lock(lock_key(canonical_id), token):
                        logger.warning(f"Sync lock for id={canonical_id} expired before release")
                except RedisError as e:
                    logger.warning(f"Failed to release sync lock for id={canonical_id}: {e}")
    finally:
        local.release()
