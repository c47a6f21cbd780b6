"""
Small in-memory TTL cache, used for short-lived provider credentials.
"""
from typing import Any, Callable, Optional
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry:
    """A single cache entry with expiration."""
    value: Any
    expires_at: datetime


class TTLCache:
    """
    In-memory cache whose entries expire after a per-entry time-to-live.

    Instances are owned by a single component; nothing here is shared
    process-wide.
    """

    def __init__(self, default_ttl_seconds: int = 300, clock: Callable[[], datetime] = utcnow):
        """
        Args:
            default_ttl_seconds: Default time-to-live in seconds (default: 5 minutes)
            clock: Callable returning the current aware datetime (injectable for tests)
        """
        self._cache: dict[str, CacheEntry] = {}
        self.default_ttl = default_ttl_seconds
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            del self._cache[key]
            return None

        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl
        expires_at = self._clock() + timedelta(seconds=ttl)
        self._cache[key] = CacheEntry(value=value, expires_at=expires_at)
