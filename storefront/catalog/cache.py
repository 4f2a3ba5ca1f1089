"""Response caches injected into the catalog client."""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from typing import Any, Protocol

DEFAULT_TTL = float(os.environ.get("CATALOG_CACHE_TTL", 60 * 60))
DEFAULT_MAXSIZE = int(os.environ.get("CATALOG_CACHE_MAXSIZE", 2048))


class ResponseCache(Protocol):
    ttl: float

    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


def cache_key(operation: str, **params: Any) -> str:
    parts = [f"{name}={params[name]}" for name in sorted(params)]
    return ":".join([operation, *parts])


class MemoryCache:
    """Process-wide cache with a fixed time-to-live per entry.

    Expired entries are swept on write at most once per ``ttl``; ``maxsize``
    additionally bounds the map by evicting the oldest entries first.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        *,
        maxsize: int | None = DEFAULT_MAXSIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.maxsize = maxsize
        self._clock = clock
        self._data: dict[str, tuple[float, Any]] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str) -> Any | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl:
            self._data.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        if now - self._last_sweep >= self.ttl:
            self._sweep(now)
        self._data.pop(key, None)
        self._data[key] = (now, value)
        if self.maxsize is not None:
            while len(self._data) > self.maxsize:
                self._data.pop(next(iter(self._data)))

    def clear(self) -> None:
        self._data.clear()

    def _sweep(self, now: float) -> None:
        expired = [key for key, (stored_at, _) in self._data.items() if now - stored_at >= self.ttl]
        for key in expired:
            del self._data[key]
        self._last_sweep = now


class NullCache:
    ttl = 0.0

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any) -> None:
        return None
