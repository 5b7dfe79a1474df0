"""Cache entry entity."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from tagcache.utils.time import utc_now


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache entry value object.

    Represents a cached value with its creation time, TTL and the tags
    it was stored under. The value itself is held by reference and is
    never copied.
    """

    key: str
    value: Any
    created_at: datetime
    ttl: timedelta
    tags: tuple[str, ...] = ()

    @property
    def expires_at(self) -> datetime:
        """Absolute expiration time of this entry."""
        return self.created_at + self.ttl

    def is_expired_at(self, now: datetime) -> bool:
        """Check whether the entry has expired at the given instant.

        Args:
            now: The instant to compare against.

        Returns:
            True once ``now`` has passed ``expires_at``.
        """
        return now > self.expires_at

    @property
    def is_expired(self) -> bool:
        """Check if entry has expired against the wall clock."""
        return self.is_expired_at(utc_now())

    @classmethod
    def create(
        cls,
        key: str,
        value: Any,
        ttl: timedelta,
        tags: Iterable[str] | None = None,
        now: datetime | None = None,
    ) -> "CacheEntry":
        """Factory method to create a new cache entry.

        Duplicate tags are collapsed while keeping their first-seen order.

        Args:
            key: The cache key.
            value: The value to cache.
            ttl: Time-to-live, must be positive.
            tags: Optional tags for group invalidation.
            now: Creation time. Defaults to the current UTC time.

        Returns:
            A new CacheEntry instance.
        """
        return cls(
            key=key,
            value=value,
            created_at=now or utc_now(),
            ttl=ttl,
            tags=tuple(dict.fromkeys(tags)) if tags else (),
        )
