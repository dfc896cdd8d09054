from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
import time
from typing import Any, Callable


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float
    last_access: float


class ExpiringCache:
    """Capacity-bounded TTL cache.

    Stale entries are dropped when read. When an insert pushes the size over
    ``max_items`` the least recently accessed entry is evicted (full scan).
    """

    def __init__(self, *, max_items: int = 500, clock: Callable[[], float] = time.monotonic):
        if max_items <= 0:
            raise ValueError("max_items must be positive.")
        self._max_items = max_items
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = Lock()

    def get(self, key: str) -> Any | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                del self._entries[key]
                return None
            entry.last_access = now
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        now = self._clock()
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, expires_at=now + ttl_seconds, last_access=now)
            while len(self._entries) > self._max_items:
                oldest_key = min(self._entries, key=lambda k: self._entries[k].last_access)
                del self._entries[oldest_key]

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
