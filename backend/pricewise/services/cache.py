"""
In-process query cache.

Maps query keys to their last fetched value. A value is served while it is
fresh; otherwise the next read calls the fetcher again. Freshness ends when
the key is invalidated or, for entries with a staleness window, when the
window elapses.

Concurrent reads of one key share a single in-flight fetch. Every
invalidation bumps the key's generation, and a fetch only writes its
result back if the generation it started under is still current, so a
response that raced an invalidation never overwrites newer state.

Entries nobody has read for `gc_after` seconds are evicted. A key's
generation is forgotten once it has neither an entry nor a running fetch.
"""
import asyncio
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    fetched_at: float
    stale_after: Optional[float] = None  # Seconds; None means fresh until invalidated
    invalidated: bool = False
    last_used: float = field(default=0.0)

    def __post_init__(self):
        self.last_used = max(self.last_used, self.fetched_at)

    def is_fresh(self, now: float) -> bool:
        if self.invalidated:
            return False
        if self.stale_after is None:
            return True
        return now - self.fetched_at < self.stale_after


@dataclass
class _InFlight:
    task: asyncio.Task
    generation: int


def _retrieve_exception(task: asyncio.Task):
    # Mark the failure as retrieved when every waiter has gone away
    if not task.cancelled():
        task.exception()


class QueryCache:
    """Key -> cached result store with explicit invalidation."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        gc_after: Optional[float] = None,
    ):
        self._clock = clock
        self.gc_after = gc_after  # Seconds unused before eviction; None keeps entries
        self._entries: dict[str, CacheEntry] = {}
        self._generations: dict[str, int] = {}
        self._inflight: dict[str, _InFlight] = {}
        # Fetches still running per key, including ones superseded in _inflight
        self._running: Counter = Counter()
        self._last_sweep = clock()
        self._hits = 0
        self._misses = 0

    async def fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        stale_after: Optional[float] = None,
    ) -> Any:
        """
        Return the value for `key`, calling `fetcher` only when needed.

        Errors from the fetcher propagate to every waiter and leave any
        previously cached value untouched.
        """
        now = self._clock()
        self._maybe_collect(now)

        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(now):
            entry.last_used = now
            self._hits += 1
            logger.debug(f"Cache hit: {key}")
            return entry.value

        generation = self._generations.get(key, 0)
        inflight = self._inflight.get(key)
        if inflight is None or inflight.generation != generation:
            self._misses += 1
            logger.debug(f"Cache miss, fetching: {key}")
            self._running[key] += 1
            task = asyncio.ensure_future(self._run(key, fetcher, stale_after, generation))
            task.add_done_callback(_retrieve_exception)
            inflight = _InFlight(task=task, generation=generation)
            self._inflight[key] = inflight
        else:
            logger.debug(f"Joining in-flight fetch: {key}")

        # A cancelled waiter must not cancel the fetch other waiters share
        return await asyncio.shield(inflight.task)

    async def _run(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        stale_after: Optional[float],
        generation: int,
    ) -> Any:
        try:
            value = await fetcher()
        finally:
            current = self._inflight.get(key)
            if current is not None and current.task is asyncio.current_task():
                del self._inflight[key]
            self._running[key] -= 1
            if self._running[key] <= 0:
                del self._running[key]

        if self._generations.get(key, 0) != generation:
            logger.debug(f"Discarding stale response for {key}")
            self._forget_generation(key)
            return value

        self._entries[key] = CacheEntry(
            value=value,
            fetched_at=self._clock(),
            stale_after=stale_after,
        )
        return value

    def _bump(self, key: str):
        self._generations[key] = self._generations.get(key, 0) + 1

    def _forget_generation(self, key: str):
        # Generations only matter to fetches still running for the key
        if key not in self._entries and key not in self._running:
            self._generations.pop(key, None)

    def _matching(self, pattern: str) -> set[str]:
        known = set(self._entries) | set(self._inflight)
        return {key for key in known if fnmatchcase(key, pattern)}

    def _maybe_collect(self, now: float):
        if self.gc_after is not None and now - self._last_sweep >= self.gc_after:
            self.collect_garbage()

    def collect_garbage(self) -> int:
        """Evict entries unused for `gc_after` seconds. Returns the count evicted."""
        now = self._clock()
        self._last_sweep = now
        if self.gc_after is None:
            return 0

        idle = [
            key for key, entry in self._entries.items()
            if now - entry.last_used >= self.gc_after and key not in self._running
        ]
        for key in idle:
            del self._entries[key]
        for key in list(self._generations):
            self._forget_generation(key)

        if idle:
            logger.debug(f"Evicted {len(idle)} idle cache entries")
        return len(idle)

    def invalidate(self, key: str):
        """Mark `key` stale. The value stays readable via peek()."""
        self._bump(key)
        entry = self._entries.get(key)
        if entry is not None:
            entry.invalidated = True
        self._forget_generation(key)
        logger.debug(f"Invalidated cache key: {key}")

    def invalidate_pattern(self, pattern: str):
        """Invalidate every known key matching a glob pattern."""
        for key in self._matching(pattern):
            self.invalidate(key)

    def invalidate_keys(self, keys: list[str]):
        """Invalidate plain keys and glob patterns alike."""
        for key in keys:
            if any(ch in key for ch in "*?["):
                self.invalidate_pattern(key)
            else:
                self.invalidate(key)

    def remove(self, key: str):
        """Drop `key` entirely; an in-flight fetch for it will not be stored."""
        self._bump(key)
        self._entries.pop(key, None)
        self._forget_generation(key)
        logger.debug(f"Removed cache key: {key}")

    def clear(self):
        """Drop every entry."""
        for key in set(self._running):
            self._bump(key)
        self._entries.clear()
        self._generations = {
            key: gen for key, gen in self._generations.items() if key in self._running
        }
        logger.info("Cleared query cache")

    def peek(self, key: str) -> Optional[Any]:
        """Cached value for `key`, fresh or not, without fetching."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def is_fresh(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_fresh(self._clock())

    def is_fetching(self, key: str) -> bool:
        return key in self._inflight

    def keys(self) -> list[str]:
        return sorted(self._entries)

    def stats(self) -> dict:
        now = self._clock()
        return {
            "entries": len(self._entries),
            "fresh": sum(1 for e in self._entries.values() if e.is_fresh(now)),
            "in_flight": len(self._inflight),
            "generations": len(self._generations),
            "hits": self._hits,
            "misses": self._misses,
        }
