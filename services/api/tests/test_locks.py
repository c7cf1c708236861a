"""Tests for per-offer sync locks (Redis mocked or absent)."""

import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from mobgran_sync.services import locks
from mobgran_sync.services.errors import ErrorKind, SyncInProgressError, SyncStage
from mobgran_sync.stores.redis import RedisNotInitializedError

OFFER_ID = "cae15fe7-86a3-4a7b-9a4d-5ed91ae6d568"


class FakeRedisLocks:
    """In-memory stand-in for acquire_lock / release_lock."""

    def __init__(self) -> None:
        self.held: dict[str, str] = {}
        self.acquire_calls = 0

    async def acquire_lock(self, key: str, token: str, ttl: int) -> bool:
        self.acquire_calls += 1
        if key in self.held:
            return False
        self.held[key] = token
        return True

    async def release_lock(self, key: str, token: str) -> bool:
        if self.held.get(key) != token:
            return False
        del self.held[key]
        return True


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedisLocks:
    fake = FakeRedisLocks()
    monkeypatch.setattr(locks, "acquire_lock", fake.acquire_lock)
    monkeypatch.setattr(locks, "release_lock", fake.release_lock)
    return fake


@pytest.mark.asyncio
async def test_lock_works_without_redis():
    # Redis is never initialized in tests
    async with locks.identifier_lock(OFFER_ID, wait=1):
        pass


@pytest.mark.asyncio
async def test_same_identifier_is_serialized():
    events: list[str] = []

    async def worker(name: str) -> None:
        async with locks.identifier_lock(OFFER_ID, wait=5):
            events.append(f"{name}-start")
            await asyncio.sleep(0.05)
            events.append(f"{name}-end")

    await asyncio.gather(worker("a"), worker("b"))

    assert events in (
        ["a-start", "a-end", "b-start", "b-end"],
        ["b-start", "b-end", "a-start", "a-end"],
    )


@pytest.mark.asyncio
async def test_different_identifiers_run_concurrently():
    other = "00000000-1111-2222-3333-444444444444"
    inside = asyncio.Event()

    async def holder() -> None:
        async with locks.identifier_lock(OFFER_ID, wait=1):
            await asyncio.wait_for(inside.wait(), timeout=1)

    async def other_worker() -> None:
        async with locks.identifier_lock(other, wait=1):
            inside.set()

    await asyncio.gather(holder(), other_worker())


@pytest.mark.asyncio
async def test_local_wait_timeout_raises_sync_in_progress():
    entered = asyncio.Event()
    release = asyncio.Event()

    async def holder() -> None:
        async with locks.identifier_lock(OFFER_ID, wait=1):
            entered.set()
            await release.wait()

    task = asyncio.create_task(holder())
    await asyncio.wait_for(entered.wait(), timeout=1)
    try:
        with pytest.raises(SyncInProgressError) as exc_info:
            async with locks.identifier_lock(OFFER_ID, wait=0.05):
                pass
        assert exc_info.value.kind is ErrorKind.SYNC_IN_PROGRESS
        assert exc_info.value.stage is SyncStage.LOCK
    finally:
        release.set()
        await task


@pytest.mark.asyncio
async def test_redis_lock_is_taken_and_released(fake_redis: FakeRedisLocks):
    async with locks.identifier_lock(OFFER_ID, wait=1):
        assert locks.lock_key(OFFER_ID) in fake_redis.held

    assert fake_redis.held == {}


@pytest.mark.asyncio
async def test_redis_lock_held_elsewhere_times_out(fake_redis: FakeRedisLocks):
    fake_redis.held[locks.lock_key(OFFER_ID)] = "other-worker"

    with pytest.raises(SyncInProgressError):
        async with locks.identifier_lock(OFFER_ID, wait=0.3):
            pass

    assert fake_redis.acquire_calls >= 2
    assert fake_redis.held == {locks.lock_key(OFFER_ID): "other-worker"}


@pytest.mark.asyncio
async def test_redis_lock_released_elsewhere_is_acquired(fake_redis: FakeRedisLocks):
    key = locks.lock_key(OFFER_ID)
    fake_redis.held[key] = "other-worker"

    async def release_later() -> None:
        await asyncio.sleep(0.1)
        del fake_redis.held[key]

    task = asyncio.create_task(release_later())
    async with locks.identifier_lock(OFFER_ID, wait=2):
        assert fake_redis.held[key] != "other-worker"
    await task

    assert fake_redis.held == {}


@pytest.mark.asyncio
async def test_redis_lock_released_on_error(fake_redis: FakeRedisLocks):
    with pytest.raises(ValueError):
        async with locks.identifier_lock(OFFER_ID, wait=1):
            raise ValueError("boom")

    assert fake_redis.held == {}


@pytest.mark.asyncio
async def test_redis_errors_fall_back_to_local_lock(monkeypatch: pytest.MonkeyPatch):
    async def broken_acquire(key: str, token: str, ttl: int) -> bool:
        raise RedisConnectionError("connection refused")

    monkeypatch.setattr(locks, "acquire_lock", broken_acquire)

    async with locks.identifier_lock(OFFER_ID, wait=1):
        pass


@pytest.mark.asyncio
async def test_unexpected_runtime_error_is_not_treated_as_missing_redis(monkeypatch: pytest.MonkeyPatch):
    async def closed_loop_acquire(key: str, token: str, ttl: int) -> bool:
        raise RuntimeError("Event loop is closed")

    monkeypatch.setattr(locks, "acquire_lock", closed_loop_acquire)

    with pytest.raises(RuntimeError, match="Event loop is closed"):
        async with locks.identifier_lock(OFFER_ID, wait=1):
            pass


@pytest.mark.asyncio
async def test_uninitialized_redis_falls_back_to_local_lock(monkeypatch: pytest.MonkeyPatch):
    calls: list[str] = []

    async def uninitialized_acquire(key: str, token: str, ttl: int) -> bool:
        calls.append(key)
        raise RedisNotInitializedError("Redis not initialized. Call init_redis() first.")

    monkeypatch.setattr(locks, "acquire_lock", uninitialized_acquire)

    async with locks.identifier_lock(OFFER_ID, wait=1):
        pass

    assert calls == [locks.lock_key(OFFER_ID)]
