"""Tests for the bounded TTL cache."""

import asyncio

import pytest

from fill_assist.core.cache import TTLCache
from fill_assist.core.errors import CacheConfigError


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(default_ttl=60, max_entries=3, clock=clock)


def test_cache_get_empty(cache):
    """Test getting a never-set key."""
    assert cache.get("key") is None
    assert cache.get("key", default="fallback") == "fallback"
    assert cache.has("key") is False


def test_cache_set_and_get(cache):
    """Test setting and getting values."""
    cache.set("key", "value", ttl_seconds=10)
    assert cache.get("key") == "value"
    assert cache.has("key") is True


def test_cache_ttl_expiration(cache, clock):
    """Entries vanish once the TTL has fully elapsed."""
    cache.set("key", "value", ttl_seconds=10)
    clock.advance(9.99)
    assert cache.get("key") == "value"
    clock.advance(0.01)
    assert cache.get("key") is None


def test_cache_default_ttl(cache, clock):
    cache.set("key", "value")
    clock.advance(59)
    assert cache.has("key")
    clock.advance(1)
    assert not cache.has("key")


def test_expired_entry_is_deleted_on_read(cache, clock):
    cache.set("a", 1, ttl_seconds=5)
    clock.advance(5)
    assert len(cache) == 1
    assert cache.get("a") is None
    assert len(cache) == 0


def test_has_deletes_expired_entry(cache, clock):
    cache.set("a", 1, ttl_seconds=5)
    clock.advance(6)
    assert cache.has("a") is False
    assert len(cache) == 0


def test_cache_overwrite(cache):
    """Test overwriting cache entries."""
    cache.set("key", "value1")
    cache.set("key", "value2")
    assert cache.get("key") == "value2"
    assert len(cache) == 1


def test_cached_none_is_a_hit(cache):
    cache.set("key", None)
    assert cache.has("key")
    assert cache.get("key", default="missing") is None


def test_capacity_evicts_oldest_inserted(cache):
    for key in ("a", "b", "c", "d"):
        cache.set(key, key.upper())
    assert len(cache) == 3
    assert cache.get("a") is None
    assert [cache.get(k) for k in ("b", "c", "d")] == ["B", "C", "D"]


def test_eviction_is_fifo_not_lru(cache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    cache.get("a")
    cache.set("d", 4)
    assert not cache.has("a")
    assert cache.has("b")


def test_overwrite_at_capacity_does_not_evict(cache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    cache.set("b", 20)
    assert cache.stats()["keys"] == ["a", "b", "c"]
    assert cache.get("b") == 20


def test_delete(cache):
    cache.set("a", 1)
    assert cache.delete("a") is True
    assert cache.delete("a") is False
    assert cache.get("a") is None


def test_clear(cache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()
    assert len(cache) == 0


def test_stats(cache):
    cache.set("a", 1)
    cache.get("a")
    cache.get("missing")
    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["max_size"] == 3
    assert stats["keys"] == ["a"]
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_sweep_removes_write_only_expired_keys(cache, clock):
    cache.set("short", 1, ttl_seconds=1)
    cache.set("long", 2, ttl_seconds=100)
    clock.advance(2)
    assert cache.sweep() == 1
    assert cache.stats()["keys"] == ["long"]


@pytest.mark.parametrize(
    "kwargs",
    [{"default_ttl": 0}, {"default_ttl": -5}, {"max_entries": 0}, {"sweep_interval": 0}],
)
def test_invalid_configuration_fails_fast(kwargs):
    with pytest.raises(CacheConfigError):
        TTLCache(**kwargs)


@pytest.mark.parametrize("ttl", [0, -1])
def test_non_positive_ttl_rejected(cache, ttl):
    with pytest.raises(CacheConfigError):
        cache.set("key", "value", ttl_seconds=ttl)
    assert not cache.has("key")


@pytest.mark.asyncio
async def test_get_cached_invokes_generator_once(cache):
    calls = []

    async def generate():
        calls.append(1)
        return [0.1, 0.2]

    first = await cache.get_cached("k", generate)
    second = await cache.get_cached("k", generate)
    assert first == second == [0.1, 0.2]
    assert len(calls) == 1
    assert cache.get("k") == [0.1, 0.2]


@pytest.mark.asyncio
async def test_get_cached_accepts_plain_callable(cache):
    assert await cache.get_cached("k", lambda: 42) == 42
    assert cache.get("k") == 42


@pytest.mark.asyncio
async def test_get_cached_respects_ttl(cache, clock):
    await cache.get_cached("k", lambda: "v", ttl_seconds=5)
    clock.advance(5)
    assert cache.get("k") is None


@pytest.mark.asyncio
async def test_get_cached_failure_does_not_poison(cache):
    error = RuntimeError("upstream down")

    async def fail():
        raise error

    with pytest.raises(RuntimeError) as excinfo:
        await cache.get_cached("k", fail)
    assert excinfo.value is error
    assert cache.get("k") is None

    assert await cache.get_cached("k", lambda: "recovered") == "recovered"


@pytest.mark.asyncio
async def test_concurrent_get_cached_is_single_flight(cache):
    calls = []
    release = asyncio.Event()

    async def generate():
        calls.append(1)
        await release.wait()
        return "value"

    first = asyncio.ensure_future(cache.get_cached("k", generate))
    second = asyncio.ensure_future(cache.get_cached("k", generate))
    await asyncio.sleep(0)
    release.set()

    assert await asyncio.gather(first, second) == ["value", "value"]
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_concurrent_failure_reaches_every_caller(cache):
    release = asyncio.Event()

    async def fail():
        await release.wait()
        raise ValueError("bad")

    first = asyncio.ensure_future(cache.get_cached("k", fail))
    second = asyncio.ensure_future(cache.get_cached("k", fail))
    await asyncio.sleep(0)
    release.set()

    results = await asyncio.gather(first, second, return_exceptions=True)
    assert all(isinstance(r, ValueError) for r in results)
    assert not cache.has("k")


@pytest.mark.asyncio
async def test_clear_discards_in_flight_result(cache):
    release = asyncio.Event()

    async def generate():
        await release.wait()
        return "stale"

    pending = asyncio.ensure_future(cache.get_cached("k", generate))
    await asyncio.sleep(0)
    cache.clear()
    release.set()

    assert await pending == "stale"
    assert cache.get("k") is None


@pytest.mark.asyncio
async def test_start_schedules_sweep_and_destroy_stops_it(clock):
    cache = TTLCache(default_ttl=60, max_entries=10, sweep_interval=60, clock=clock)
    cache.set("a", 1)
    cache.start()
    scheduler = cache.scheduler
    assert scheduler.running
    job = scheduler.get_job(f"cache-sweep-{id(cache)}")
    assert job is not None

    cache.destroy()
    assert not scheduler.running
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_async_context_manager_lifecycle(clock):
    async with TTLCache(default_ttl=60, clock=clock) as cache:
        cache.set("a", 1)
        assert cache.scheduler.running
    assert cache.scheduler is None
    assert len(cache) == 0
