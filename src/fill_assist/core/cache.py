"""
In-memory TTL cache with a hard capacity.
Why: memoize expensive generator calls (embeddings, page scans) in-process.

Expiry is both lazy (checked on every read) and periodic (an APScheduler job
sweeps write-only keys). Eviction is FIFO by first insertion, not LRU.
"""

import asyncio
import inspect
import time
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .errors import CacheConfigError
from .logging import get_logger

_LOG = get_logger(__name__)

_Entry = Tuple[Any, float]  # (value, expires_at)
_MISSING = object()

Generator = Callable[[], Union[Awaitable[Any], Any]]


class TTLCache:
    """Key/value store with per-entry expiry and FIFO capacity eviction.

    Synchronous operations never suspend. ``get_cached`` is the only
    coroutine: concurrent callers for the same absent key share a single
    in-flight generation (single-flight), and a failed generation stores
    nothing.

    The periodic sweep needs a running event loop, so it is started
    explicitly with ``start()`` (or by entering ``async with``) and must be
    stopped with ``destroy()``.
    """

    def __init__(
        self,
        default_ttl: float = 3600,
        max_entries: int = 1000,
        sweep_interval: float = 60,
        clock: Callable[[], float] = time.monotonic,
        scheduler: Optional[AsyncIOScheduler] = None,
    ) -> None:
        if default_ttl <= 0:
            raise CacheConfigError(f"default_ttl must be positive, got {default_ttl}")
        if max_entries <= 0:
            raise CacheConfigError(f"max_entries must be positive, got {max_entries}")
        if sweep_interval <= 0:
            raise CacheConfigError(
                f"sweep_interval must be positive, got {sweep_interval}"
            )
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._data: Dict[str, _Entry] = {}
        self._inflight: Dict[str, "asyncio.Future[Any]"] = {}
        self._scheduler = scheduler
        self._owns_scheduler = scheduler is None
        self._job_id = f"cache-sweep-{id(self)}"
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._data)

    def _resolve_ttl(self, ttl_seconds: Optional[float]) -> float:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise CacheConfigError(f"ttl_seconds must be positive, got {ttl}")
        return ttl

    def _lookup(self, key: str) -> Any:
        entry = self._data.get(key)
        if entry is None:
            return _MISSING
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return _MISSING
        return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._resolve_ttl(ttl_seconds)
        if key not in self._data and len(self._data) >= self.max_entries:
            oldest = next(iter(self._data))
            del self._data[oldest]
            _LOG.warning(f"Cache full, evicting oldest entry: {oldest}")
        self._data[key] = (value, self._clock() + ttl)
        _LOG.debug(f"Cache set: {key} (TTL: {ttl}s)")

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        if value is _MISSING:
            self.misses += 1
            return default
        self.hits += 1
        _LOG.debug(f"Cache hit: {key}")
        return value

    def has(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def delete(self, key: str) -> bool:
        return self._data.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        self._data.clear()
        # Generations started before the clear must not repopulate the cache
        self._inflight.clear()
        _LOG.info("Cache cleared")

    def stats(self) -> Dict[str, Any]:
        return {
            "size": len(self._data),
            "max_size": self.max_entries,
            "keys": list(self._data),
            "hits": self.hits,
            "misses": self.misses,
        }

    async def get_cached(
        self, key: str, generator: Generator, ttl_seconds: Optional[float] = None
    ) -> Any:
        value = self._lookup(key)
        if value is not _MISSING:
            self.hits += 1
            return value
        self.misses += 1

        pending = self._inflight.get(key)
        if pending is None:
            ttl = self._resolve_ttl(ttl_seconds)
            result = generator()
            if not inspect.isawaitable(result):
                self.set(key, result, ttl)
                return result
            pending = asyncio.ensure_future(result)
            self._inflight[key] = pending
            pending.add_done_callback(partial(self._settle, key, ttl))
        else:
            _LOG.debug(f"Cache join in-flight generation: {key}")

        # shield: one caller being cancelled must not cancel the shared generation
        return await asyncio.shield(pending)

    def _settle(self, key: str, ttl: float, task: "asyncio.Future[Any]") -> None:
        if self._inflight.get(key) is not task:
            return
        del self._inflight[key]
        if task.cancelled():
            _LOG.debug(f"Cache generation cancelled: {key}")
            return
        error = task.exception()
        if error is not None:
            _LOG.debug(f"Cache generation failed, nothing stored: {key} ({error!r})")
            return
        self.set(key, task.result(), ttl)

    def sweep(self) -> int:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._data.items() if now >= expires_at]
        for key in expired:
            del self._data[key]
        if expired:
            _LOG.debug(f"Cache cleanup: removed {len(expired)} expired entries")
        return len(expired)

    async def _sweep_job(self) -> None:
        # Coroutine job: runs on the event loop, not in the executor thread pool
        self.sweep()

    @property
    def scheduler(self) -> Optional[AsyncIOScheduler]:
        return self._scheduler

    def start(self) -> None:
        """Schedule the periodic sweep. Must be called with a running event loop."""
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._sweep_job,
            trigger=IntervalTrigger(seconds=self.sweep_interval),
            id=self._job_id,
            replace_existing=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        _LOG.info(f"Cache sweep scheduled every {self.sweep_interval}s")

    def destroy(self) -> None:
        """Stop the periodic sweep and drop every entry."""
        if self._scheduler is not None and self._scheduler.running:
            if self._owns_scheduler:
                self._scheduler.shutdown(wait=False)
                self._scheduler = None
            elif self._scheduler.get_job(self._job_id) is not None:
                self._scheduler.remove_job(self._job_id)
        self.clear()

    async def __aenter__(self) -> "TTLCache":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.destroy()
