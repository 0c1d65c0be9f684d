"""Thread-safe in-memory cache with optional TTL.

Shared between request threads, so every access goes through an RLock.
Eviction is FIFO once ``max_size`` is reached.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class InMemoryCache(Generic[T]):
    """In-memory implementation of CachePort.

    Attributes:
        default_ttl_seconds: Default time-to-live for entries (None = no expiry)
        max_size: Maximum number of entries (None = unlimited)
        name: Cache name for logging

    Example:
        cache = InMemoryCache[str](name="city-code", default_ttl_seconds=3600)
        adcode = cache.get_or_compute("成都", lambda: lookup("成都"))
    """

    default_ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "cache"

    _store: Dict[str, Tuple[Any, float]] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            value, expiry = entry
            if time.monotonic() > expiry:
                del self._store[key]
                self._logger.debug("Cache entry expired", extra={"key": key})
                self._misses += 1
                return None

            self._hits += 1
            return value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        with self._lock:
            if (
                self.max_size is not None
                and key not in self._store
                and len(self._store) >= self.max_size
            ):
                oldest_key = next(iter(self._store))
                del self._store[oldest_key]
                self._logger.debug(
                    "Cache evicted entry",
                    extra={"key": oldest_key, "reason": "max_size"},
                )

            effective_ttl = ttl if ttl is not None else self.default_ttl_seconds
            expiry = (
                time.monotonic() + effective_ttl
                if effective_ttl is not None
                else float("inf")
            )
            self._store[key] = (value, expiry)

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        value = self.get(key)
        if value is not None:
            self._logger.debug("Cache hit", extra={"key": key})
            return value

        # Computed outside the lock so slow upstream calls don't serialize.
        computed = compute_fn()
        if computed is not None:
            self.set(key, computed)
        return computed

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> int:
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._logger.info("Cache cleared", extra={"entries_cleared": count})
            return count

    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, Any]:
        """Return hit/miss counts and size."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 1),
            }
