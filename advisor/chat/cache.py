from __future__ import annotations

import hashlib
import json
import time
from collections import OrderedDict
from typing import Any, Callable


def make_key(*parts: Any) -> str:
    normalized = json.dumps(parts, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


class TTLCache:
    """
    Bounded cache with per-entry expiry.

    Entries expire ``ttl`` seconds after insertion and are dropped lazily on
    read. Once ``capacity`` is exceeded the oldest-inserted key is evicted.
    """

    def __init__(
        self,
        capacity: int = 500,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.capacity = capacity
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry and self._clock() - entry[0] < self.ttl:
            self._hits += 1
            return entry[1]
        if entry:
            self._entries.pop(key, None)
        self._misses += 1
        return None

    def set(self, key: str, value: Any) -> None:
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), value)
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "capacity": self.capacity,
            "ttl_seconds": self.ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)
