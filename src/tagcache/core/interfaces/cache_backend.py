"""Cache backend interface."""

from collections.abc import Callable, Iterable
from datetime import datetime
from enum import Enum
from typing import Protocol

from tagcache.core.entities.cache_entry import CacheEntry


class RemovalCause(str, Enum):
    """Why an entry left the store."""

    DELETED = "deleted"
    EXPIRED = "expired"
    EVICTED = "evicted"


RemovalListener = Callable[[CacheEntry, RemovalCause], None]


class ICacheBackend(Protocol):
    """Contract for entry stores used by ``Cache``.

    A backend owns the entries and the tag index and keeps them mutually
    consistent. Backends are not thread-safe on their own; ``Cache``
    serializes access to them. Every removal, whatever its cause, is
    reported to the removal listener.
    """

    def get(self, key: str, now: datetime) -> CacheEntry | None:
        """Return the live entry for ``key``.

        An entry found expired at ``now`` is removed (reported as
        ``EXPIRED``) and None is returned.
        """
        ...

    def put(self, entry: CacheEntry) -> None:
        """Insert or replace an entry together with its tag registrations.

        Either the entry and all of its tags are registered, or the key is
        left absent with no tag registrations.
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete an entry and retract its tags.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        ...

    def keys_for_tag(self, tag: str) -> frozenset[str]:
        """Return the keys currently registered under ``tag``."""
        ...

    def purge_expired(self, now: datetime) -> int:
        """Remove every entry expired at ``now``.

        Returns:
            Number of entries removed.
        """
        ...

    def clear(self) -> None:
        """Remove all entries and the tag index without reporting them."""
        ...

    def keys(self) -> Iterable[str]:
        """Return the stored keys, expired ones included."""
        ...

    def __len__(self) -> int:
        """Return the number of stored entries."""
        ...

    @property
    def maxsize(self) -> int:
        """Return the maximum number of entries."""
        ...

    @property
    def tag_count(self) -> int:
        """Return the number of distinct tags with at least one key."""
        ...

    def set_removal_listener(self, listener: RemovalListener | None) -> None:
        """Register the callback invoked for every removed entry."""
        ...
