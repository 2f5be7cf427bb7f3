"""
In-memory cache implementation.

Provides per-process memoization of scanner results with TTL-based,
read-triggered expiration.
"""

import time
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Callable, Mapping, Optional


@dataclass
class CacheEntry:
    """A cached value and the clock reading when it was stored."""

    value: Any
    inserted_at: float


class ResultCache:
    """In-memory cache for scanner results.

    Entries expire ``ttl`` seconds after insertion. Expiry is checked
    lazily on read; there is no background sweep and no size bound.
    Not thread-safe: it is only touched from the event loop.
    """

    DEFAULT_TTL = 300.0  # 5 minutes

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            ttl: Time-to-live in seconds for cached entries.
            clock: Monotonic clock returning seconds.
        """
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        """Get cached value if not expired.

        Args:
            key: Cache key.

        Returns:
            Cached value or None if not found or expired.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.inserted_at > self.ttl:
            del self._entries[key]
            return None

        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store value in cache, replacing any existing entry.

        Args:
            key: Cache key.
            value: Value to cache.
        """
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    def delete(self, key: str) -> bool:
        """Delete a specific cache entry.

        Returns:
            True if entry was deleted, False if not found.
        """
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Clear all cache entries.

        Returns:
            Number of entries removed.
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    def stats(self) -> dict[str, Any]:
        """Get cache statistics without evicting anything."""
        now = self._clock()
        valid = sum(
            1 for entry in self._entries.values() if now - entry.inserted_at <= self.ttl
        )
        total = len(self._entries)
        return {
            "total_entries": total,
            "valid_entries": valid,
            "expired_entries": total - valid,
            "ttl_seconds": self.ttl,
        }

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def make_key(*parts: Any) -> str:
        """Create a canonical cache key from multiple parts.

        Mappings and dataclasses are rendered as sorted ``field=value``
        pairs, so the key does not depend on field order.

        Args:
            *parts: Key components to join.

        Returns:
            Colon-separated cache key.
        """
        rendered = []
        for part in parts:
            if is_dataclass(part) and not isinstance(part, type):
                part = asdict(part)
            if isinstance(part, Mapping):
                rendered.extend(f"{k}={part[k]!r}" for k in sorted(part))
            else:
                rendered.append(str(part))
        return ":".join(rendered)
