from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    created_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now > self.created_at + self.ttl


class TTLCache:
    """Very small in-memory cache with TTL semantics.

    The clock is injectable so expiry can be asserted deterministically.
    Optionally bounds the number of items via ``max_size``. When the cache
    exceeds ``max_size`` on set(), expired entries are dropped first, then
    the entries closest to expiry.
    """

    def __init__(
        self,
        default_ttl: float = 600.0,
        max_size: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._max_size = max_size
        self._clock = clock
        self._lock = threading.Lock()
        self._store: Dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def _now(self) -> float:
        return self._clock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.expired(self._now()):
                del self._store[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl_value = self._default_ttl if ttl is None else ttl
        with self._lock:
            now = self._now()
            self._store[key] = CacheEntry(key=key, value=value, created_at=now, ttl=ttl_value)
            if self._max_size is not None and len(self._store) > self._max_size:
                self._prune(now)

    def _prune(self, now: float) -> None:
        expired_keys = [k for k, entry in self._store.items() if entry.expired(now)]
        for k in expired_keys:
            if len(self._store) <= self._max_size:
                break
            self._store.pop(k, None)
        if len(self._store) > self._max_size:
            by_expiry = sorted(self._store.values(), key=lambda e: e.created_at + e.ttl)
            to_remove = len(self._store) - self._max_size
            for entry in by_expiry[:to_remove]:
                self._store.pop(entry.key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            now = self._now()
            return sum(1 for entry in self._store.values() if not entry.expired(now))

    def stats(self) -> Dict[str, Any]:
        return {
            "entries": len(self),
            "hits": self.hits,
            "misses": self.misses,
            "max_size": self._max_size,
        }


class SingleFlight:
    """Collapse concurrent producers for the same key into one shared task.

    The shared task is shielded, so a caller that gets cancelled does not
    cancel the fetch other callers are waiting on.
    """

    def __init__(self) -> None:
        self._inflight: Dict[str, asyncio.Task] = {}

    async def do(self, key: str, producer: Callable[[], Awaitable[Any]]) -> Any:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(producer())
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._forget(k, _t))
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Retrieve the outcome so an unobserved failure is not reported as lost
        if not task.cancelled():
            task.exception()

    def __len__(self) -> int:
        return len(self._inflight)
