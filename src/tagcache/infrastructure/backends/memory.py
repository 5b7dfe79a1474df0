"""In-memory cache backend implementation."""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from cachetools import FIFOCache  # type: ignore[import-untyped]

from tagcache.core.entities.cache_entry import CacheEntry
from tagcache.core.interfaces.cache_backend import RemovalCause, RemovalListener

logger = logging.getLogger(__name__)


class _EvictingFIFOCache(FIFOCache):
    """FIFOCache that reports every capacity eviction."""

    def __init__(
        self,
        maxsize: int,
        on_evict: Callable[[str, CacheEntry], None],
    ) -> None:
        super().__init__(maxsize=maxsize)
        self._on_evict = on_evict

    def popitem(self) -> tuple[str, CacheEntry]:
        key, entry = super().popitem()
        self._on_evict(key, entry)
        return key, entry


class InMemoryCacheBackend:
    """In-memory entry store with a tag index and FIFO eviction.

    Suitable for single-process deployments. Uses cachetools' FIFOCache
    for the capacity bound: when a new key would exceed ``maxsize`` the
    earliest-inserted entry is evicted first. Reads never change the
    eviction order; replacing a key moves it to the back.

    Expiry is not handled by cachetools. Each entry carries its own TTL,
    checked lazily on ``get`` and in bulk by ``purge_expired``.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        removal_listener: RemovalListener | None = None,
    ) -> None:
        """Initialize the in-memory cache backend.

        Args:
            maxsize: Maximum number of entries in the store.
            removal_listener: Optional callback for removed entries.
        """
        if maxsize < 1:
            raise ValueError(f"maxsize must be at least 1, got {maxsize}")
        self._maxsize = maxsize
        self._entries: FIFOCache = self._new_store()
        # tag -> keys carrying it; buckets are never left empty
        self._tags: dict[str, set[str]] = {}
        self._listener = removal_listener

    def set_removal_listener(self, listener: RemovalListener | None) -> None:
        """Register the callback invoked for every removed entry."""
        self._listener = listener

    def get(self, key: str, now: datetime) -> CacheEntry | None:
        """Return the live entry for ``key``, dropping it if expired.

        Args:
            key: The cache key.
            now: Current time used for the expiry check.

        Returns:
            The entry, or None if missing or expired.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired_at(now):
            self._remove(key, RemovalCause.EXPIRED)
            return None
        return entry

    def put(self, entry: CacheEntry) -> None:
        """Insert or replace an entry together with its tag registrations.

        The previous entry's tags are retracted before the new ones are
        registered. If anything fails midway the key is left absent with
        no tag registrations and the error is re-raised.

        Args:
            entry: The entry to store.
        """
        key = entry.key
        previous = self._entries.get(key)
        if previous is not None:
            self._untag(key, previous.tags)

        registered: list[str] = []
        try:
            self._entries[key] = entry
            for tag in entry.tags:
                self._tags.setdefault(tag, set()).add(key)
                registered.append(tag)
        except BaseException:
            self._entries.pop(key, None)
            self._untag(key, registered)
            raise

    def delete(self, key: str) -> bool:
        """Delete an entry and retract its tags.

        Args:
            key: The cache key to delete.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        return self._remove(key, RemovalCause.DELETED) is not None

    def keys_for_tag(self, tag: str) -> frozenset[str]:
        """Return the keys currently registered under ``tag``."""
        return frozenset(self._tags.get(tag, ()))

    def purge_expired(self, now: datetime) -> int:
        """Remove every entry expired at ``now``.

        Args:
            now: Current time used for the expiry check.

        Returns:
            Number of entries removed.
        """
        expired = [
            key for key, entry in self._entries.items() if entry.is_expired_at(now)
        ]
        for key in expired:
            self._remove(key, RemovalCause.EXPIRED)
        return len(expired)

    def clear(self) -> None:
        """Clear all entries and the tag index."""
        # MutableMapping.clear pops item by item, which would report evictions.
        self._entries = self._new_store()
        self._tags.clear()

    def keys(self) -> Iterable[str]:
        """Return the stored keys, expired ones included."""
        return list(self._entries.keys())

    def __len__(self) -> int:
        """Return the number of items in the store."""
        return len(self._entries)

    @property
    def maxsize(self) -> int:
        """Return the maximum size of the store."""
        return self._maxsize

    @property
    def tag_count(self) -> int:
        """Return the number of distinct tags in the index."""
        return len(self._tags)

    def _new_store(self) -> FIFOCache:
        return _EvictingFIFOCache(self._maxsize, self._handle_eviction)

    def _remove(self, key: str, cause: RemovalCause) -> CacheEntry | None:
        entry = self._entries.pop(key, None)
        if entry is None:
            return None
        self._untag(key, entry.tags)
        self._notify(entry, cause)
        return entry

    def _handle_eviction(self, key: str, entry: CacheEntry) -> None:
        self._untag(key, entry.tags)
        logger.debug("Evicted cache entry", extra={"cache_key": key})
        self._notify(entry, RemovalCause.EVICTED)

    def _untag(self, key: str, tags: Iterable[str]) -> None:
        for tag in tags:
            bucket = self._tags.get(tag)
            if bucket is None:
                continue
            bucket.discard(key)
            if not bucket:
                del self._tags[tag]

    def _notify(self, entry: CacheEntry, cause: RemovalCause) -> None:
        if self._listener is not None:
            self._listener(entry, cause)
