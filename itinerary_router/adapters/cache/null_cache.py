"""No-op cache for tests: every lookup misses, nothing is stored."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class NullCache(Generic[T]):
    """CachePort implementation that never caches."""

    name: str = "null"

    def get(self, key: str) -> Optional[T]:
        return None

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        pass

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        return compute_fn()

    def invalidate(self, key: str) -> bool:
        return False

    def clear(self) -> int:
        return 0

    def size(self) -> int:
        return 0
