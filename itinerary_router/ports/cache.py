"""Cache port - Injectable caching abstraction.

A cache object is created once by the container and handed to the
components that need it. Only the city name -> adcode lookup is
cached; itineraries never are.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """Port for key/value caching with expiry.

    Implementations:
    - adapters/cache/memory_cache.py (InMemoryCache) - Production
    - adapters/cache/null_cache.py (NullCache) - Testing
    """

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None if missing or expired."""
        ...

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Store a value, optionally overriding the default TTL."""
        ...

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        """Cache-aside lookup.

        Returns the cached value if present, otherwise calls compute_fn,
        stores a non-None result and returns it. Exceptions raised by
        compute_fn propagate and nothing is stored.
        """
        ...

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns True if it existed."""
        ...

    def clear(self) -> int:
        """Drop every entry. Returns how many were removed."""
        ...

    def size(self) -> int:
        """Number of entries currently stored."""
        ...
