"""In-process key/value cache with per-entry expiry."""
import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Missing:
    """Sentinel type returned on a cache miss."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class CacheSettings(BaseModel):
    """
    Cache sizing and TTLs, in seconds.

    Listings that include a free-text search are more volatile than plain
    browse listings, so they expire sooner.
    """

    max_entries: int = Field(default=1000, ge=1)
    list_ttl_seconds: float = 300
    search_list_ttl_seconds: float = 120
    client_ttl_seconds: float = 600
    stats_ttl_seconds: float = 600
    search_ttl_seconds: float = 120
    warm_on_startup: bool = True
    warm_recent_limit: int = 20


@dataclass
class _Entry:
    value: Any
    stored_at: float
    ttl: float
    timer: asyncio.TimerHandle | None = None


class TTLCache:
    """
    Bounded TTL cache with least-recently-used eviction.

    Entries expire ``ttl`` seconds after they were stored. When an event loop is
    running, every entry also gets an expiry timer so memory is released without
    waiting for the next read. Concurrent ``with_cache`` misses on the same key
    share a single fetch.

    One instance is meant to live for the whole process; it is constructed
    explicitly and handed to whoever needs it.
    """

    def __init__(self, max_entries: int = 1000, clock: Callable[[], float] = time.monotonic):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._in_flight: dict[str, asyncio.Task] = {}

    @classmethod
    def from_settings(cls, settings: CacheSettings) -> "TTLCache":
        return cls(max_entries=settings.max_entries)

    def _is_fresh(self, entry: _Entry) -> bool:
        return self._clock() - entry.stored_at <= entry.ttl

    def _schedule_expiry(self, key: str, entry: _Entry) -> asyncio.TimerHandle | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: expiry is checked lazily on read
            return None
        return loop.call_later(entry.ttl, self._expire, key, entry)

    def _expire(self, key: str, entry: _Entry) -> None:
        if self._entries.get(key) is entry:
            self._remove(key)

    def _remove(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        if entry.timer is not None:
            entry.timer.cancel()
        return True

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store a value, replacing any existing entry and its timer."""
        self._remove(key)
        entry = _Entry(value=value, stored_at=self._clock(), ttl=ttl)
        entry.timer = self._schedule_expiry(key, entry)
        self._entries[key] = entry

        while len(self._entries) > self.max_entries:
            evicted, _ = next(iter(self._entries.items()))
            self._remove(evicted)
            logger.debug("Evicted least recently used cache entry: %s", evicted)

    def get(self, key: str, default: Any = MISSING) -> Any:
        """Return the value if present and fresh, otherwise ``default``."""
        entry = self._entries.get(key)
        if entry is None:
            return default
        if not self._is_fresh(entry):
            self._remove(key)
            return default
        self._entries.move_to_end(key)
        return entry.value

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if not self._is_fresh(entry):
            self._remove(key)
            return False
        return True

    def delete(self, key: str) -> None:
        self._remove(key)
        self._in_flight.pop(key, None)

    def clear(self) -> None:
        for entry in self._entries.values():
            if entry.timer is not None:
                entry.timer.cancel()
        self._entries.clear()
        self._in_flight.clear()

    def size(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries.keys())

    def invalidate_by_pattern(self, pattern: str) -> int:
        """
        Delete every entry whose key contains ``pattern``.

        In-flight fetches for matching keys are detached, so their results are
        returned to the callers already waiting but never stored.

        Returns:
            Number of stored entries removed
        """
        removed = 0
        for key in [k for k in self._entries if pattern in k]:
            if self._remove(key):
                removed += 1
        for key in [k for k in self._in_flight if pattern in k]:
            del self._in_flight[key]

        if removed:
            logger.debug("Invalidated %d cache entries matching '%s'", removed, pattern)
        return removed

    async def with_cache(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        ttl: float,
        cache_none: bool = True,
    ) -> T:
        """
        Return the cached value, or fetch, store and return it.

        Callers that miss while a fetch for the same key is running wait for
        that fetch instead of starting their own. A failed fetch is not cached
        and its error is raised to every waiter. With ``cache_none=False`` a
        ``None`` result is returned but not stored.

        A fetch whose key is deleted or invalidated while it runs still answers
        its callers but never stores its result.
        """
        cached = self.get(key)
        if cached is not MISSING:
            logger.debug("Cache hit: %s", key)
            return cached

        task = self._in_flight.get(key)
        if task is None:
            logger.debug("Cache miss: %s", key)
            task = asyncio.ensure_future(self._fetch(key, fetcher, ttl, cache_none))
            self._in_flight[key] = task
        else:
            logger.debug("Joining in-flight fetch: %s", key)

        return await asyncio.shield(task)

    async def _fetch(self, key: str, fetcher: Callable[[], Awaitable[T]], ttl: float, cache_none: bool) -> T:
        this_task = asyncio.current_task()
        try:
            value = await fetcher()
            if self._in_flight.get(key) is this_task and (cache_none or value is not None):
                self.set(key, value, ttl)
            return value
        finally:
            if self._in_flight.get(key) is this_task:
                del self._in_flight[key]
