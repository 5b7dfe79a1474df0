"""Cache service - main entry point for caching operations."""

import asyncio
import functools
import logging
import threading
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, TypeVar

from tagcache.core.entities.cache_config import CacheConfig
from tagcache.core.entities.cache_entry import CacheEntry
from tagcache.core.entities.cache_stats import CacheStats, CacheStatsSnapshot
from tagcache.core.exceptions import InvalidTTLError, KeyGenerationError
from tagcache.core.interfaces.cache_backend import ICacheBackend, RemovalCause
from tagcache.core.interfaces.key_builder import IKeyBuilder
from tagcache.core.services.sweeper import ExpirySweeper
from tagcache.infrastructure.backends.memory import InMemoryCacheBackend
from tagcache.infrastructure.key_builders.default import DefaultKeyBuilder
from tagcache.utils.time import Clock, TTLLike, to_timedelta, utc_now

logger = logging.getLogger(__name__)

V = TypeVar("V")

Tags = str | Iterable[str] | None


class Cache(Generic[V]):
    """Capacity-bounded, TTL-expiring, tag-invalidatable in-process cache.

    Composes an entry store (backend), a key builder, hit/miss statistics
    and a periodic expiry sweeper. Every public operation is a fault
    boundary: internal errors are logged and the operation degrades to a
    cache miss, so the cache can never fail the caller's request path.

    One ``threading.RLock`` guards the store, the tag index and the
    counters together. ``wrap`` never holds it while awaiting a producer.

    Example:
        cache = Cache(CacheConfig(max_size=500, default_ttl=60))
        await cache.start()

        key = cache.generate_key("product", {"id": 42})
        product = await cache.wrap(key, lambda: repo.get_product(42),
                                   tags=["products"])

        cache.delete_by_tag("products")
        await cache.close()
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        backend: ICacheBackend | None = None,
        key_builder: IKeyBuilder | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            config: Optional cache configuration. Uses defaults if not provided.
            backend: Entry store. Defaults to an in-memory FIFO store sized
                by ``config.max_size``.
            key_builder: Key builder for ``generate_key``.
            clock: Callable returning the current aware datetime.
        """
        self._config = config or CacheConfig()
        if backend is None:
            backend = InMemoryCacheBackend(maxsize=self._config.max_size)
        if key_builder is None:
            key_builder = DefaultKeyBuilder(namespace=self._config.key_prefix)
        self._backend = backend
        self._key_builder = key_builder
        self._clock = clock or utc_now

        self._lock = threading.RLock()
        self._stats = CacheStats()
        # In-flight producers per (event loop, key); tasks are bound to one loop.
        self._inflight: dict[
            tuple[asyncio.AbstractEventLoop, str], asyncio.Task[Any]
        ] = {}
        self._sweeper = ExpirySweeper(self.sweep, self._config.sweep_interval)

        self._backend.set_removal_listener(self._on_removal)

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    @property
    def running(self) -> bool:
        """Whether the expiry sweeper is running."""
        return self._sweeper.running

    def generate_key(self, prefix: str, identifier: Any) -> str | None:
        """Build a canonical cache key.

        Args:
            prefix: Key prefix, e.g. ``"products"``.
            identifier: JSON-serializable identifier. Dicts are encoded
                with sorted keys, so field order does not matter.

        Returns:
            The key, or None if the identifier cannot be encoded. Every
            cache operation treats a None key as an absent entry.
        """
        try:
            return self._key_builder.build(prefix, identifier)
        except KeyGenerationError as e:
            logger.warning(
                "Cache key generation failed: %s", e, extra={"key_prefix": prefix}
            )
        except Exception:
            logger.exception(
                "Cache key generation failed", extra={"key_prefix": prefix}
            )
        return None

    def get(self, key: str | None, default: V | None = None) -> V | None:
        """Get a cached value.

        Counts a hit when a live entry is found and a miss otherwise. An
        expired entry is removed on the spot.

        Args:
            key: The cache key.
            default: Value returned on a miss.

        Returns:
            The cached value, or ``default``.
        """
        entry = self._lookup(key)
        if entry is None:
            return default
        return entry.value

    def set(
        self,
        key: str | None,
        value: V,
        ttl: TTLLike | None = None,
        tags: Tags = None,
    ) -> None:
        """Store a value.

        A new key stored while the cache is full evicts the
        earliest-inserted entry first. Replacing a key retracts its old
        tags before registering the new ones.

        Args:
            key: The cache key.
            value: The value to cache. Stored by reference, not copied.
            ttl: Seconds or timedelta. Uses the configured default if None.
            tags: Tags for group invalidation.
        """
        if key is None or not self._config.enabled:
            return

        try:
            effective_ttl = (
                self._config.default_ttl if ttl is None else to_timedelta(ttl)
            )
        except InvalidTTLError as e:
            logger.warning("Cache SET rejected: %s", e, extra={"cache_key": key})
            return

        try:
            with self._lock:
                entry = CacheEntry.create(
                    key=key,
                    value=value,
                    ttl=effective_ttl,
                    tags=_normalize_tags(tags),
                    now=self._clock(),
                )
                self._backend.put(entry)
                self._stats.sets += 1
        except Exception:
            logger.exception("Cache SET failed", extra={"cache_key": key})
            return

        logger.debug(
            "Cache SET",
            extra={
                "cache_key": key,
                "ttl_seconds": effective_ttl.total_seconds(),
                "tags": list(entry.tags),
            },
        )

    def has(self, key: str | None) -> bool:
        """Check whether a live entry exists.

        Expired entries are removed, but hit/miss counters are untouched.

        Args:
            key: The cache key.

        Returns:
            True if a live entry exists.
        """
        if key is None or not self._config.enabled:
            return False
        try:
            with self._lock:
                return self._backend.get(key, self._clock()) is not None
        except Exception:
            logger.exception("Cache HAS failed", extra={"cache_key": key})
            return False

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._backend)

    def delete(self, key: str | None) -> bool:
        """Delete an entry and retract it from its tags.

        Args:
            key: The cache key.

        Returns:
            True if an entry was removed, False if there was none.
        """
        if key is None:
            return False
        try:
            with self._lock:
                deleted = self._backend.delete(key)
        except Exception:
            logger.exception("Cache DELETE failed", extra={"cache_key": key})
            return False

        if deleted:
            logger.debug("Cache DELETE", extra={"cache_key": key})
        return deleted

    def delete_by_tag(self, tag: str) -> int:
        """Delete every entry carrying ``tag``.

        Entries removed this way also leave every other tag they carried.

        Args:
            tag: The tag to invalidate.

        Returns:
            Number of entries deleted.
        """
        count = 0
        with self._lock:
            try:
                keys = self._backend.keys_for_tag(tag)
            except Exception:
                logger.exception("Cache tag lookup failed", extra={"tag": tag})
                return 0
            for key in keys:
                if self.delete(key):
                    count += 1

        logger.info("Cache invalidated by tag", extra={"tag": tag, "count": count})
        return count

    def delete_by_tags(self, tags: Iterable[str]) -> int:
        """Delete every entry carrying any of ``tags``.

        Args:
            tags: Tags to invalidate.

        Returns:
            Number of distinct entries deleted.
        """
        with self._lock:
            return sum(self.delete_by_tag(tag) for tag in _normalize_tags(tags))

    def keys_for_tag(self, tag: str) -> frozenset[str]:
        """Return the keys currently registered under ``tag``."""
        with self._lock:
            return self._backend.keys_for_tag(tag)

    def keys(self) -> list[str]:
        """Return the keys of all live entries, dropping expired ones."""
        with self._lock:
            now = self._clock()
            return [
                key
                for key in list(self._backend.keys())
                if self._backend.get(key, now) is not None
            ]

    def clear(self) -> None:
        """Drop all entries and the tag index. Statistics are kept."""
        with self._lock:
            self._backend.clear()
        logger.info("Cache cleared")

    def sweep(self) -> int:
        """Remove every expired entry, read or not.

        Returns:
            Number of entries removed.
        """
        try:
            with self._lock:
                removed = self._backend.purge_expired(self._clock())
        except Exception:
            logger.exception("Cache sweep failed")
            return 0

        if removed:
            logger.debug("Cache sweep", extra={"count": removed})
        return removed

    def get_stats(self) -> CacheStatsSnapshot:
        """Get cache statistics.

        Returns:
            Counters, derived hit rate and current occupancy.
        """
        with self._lock:
            stats = self._stats
            return CacheStatsSnapshot(
                hits=stats.hits,
                misses=stats.misses,
                sets=stats.sets,
                deletes=stats.deletes,
                evictions=stats.evictions,
                expirations=stats.expirations,
                hit_rate=stats.hit_rate,
                size=len(self._backend),
                max_size=self._backend.maxsize,
                active_tag_count=self._backend.tag_count,
            )

    def reset_stats(self) -> None:
        """Zero all statistics counters."""
        with self._lock:
            self._stats.reset()

    async def wrap(
        self,
        key: str | None,
        producer: Callable[[], Awaitable[V]],
        ttl: TTLLike | None = None,
        tags: Tags = None,
    ) -> V:
        """Return the cached value, computing and storing it on a miss.

        Exceptions raised by ``producer`` propagate and nothing is stored.
        With ``single_flight`` enabled, concurrent misses on the same key
        within one event loop share one producer call; otherwise each
        runs its own and the last write wins.

        Args:
            key: The cache key.
            producer: Zero-argument coroutine function computing the value.
            ttl: TTL for the stored result.
            tags: Tags for the stored result.

        Returns:
            The cached or freshly produced value.
        """
        entry = self._lookup(key)
        if entry is not None:
            return entry.value  # type: ignore[no-any-return]

        if key is None or not self._config.enabled:
            return await producer()

        if self._config.single_flight:
            return await self._wrap_single_flight(key, producer, ttl, tags)

        value = await producer()
        self.set(key, value, ttl, tags)
        return value

    async def start(self) -> None:
        """Start the background expiry sweeper."""
        self._sweeper.start()

    async def close(self) -> None:
        """Stop the background expiry sweeper. Safe to call repeatedly."""
        await self._sweeper.stop()

    async def __aenter__(self) -> "Cache[V]":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _lookup(self, key: str | None) -> CacheEntry | None:
        if key is None or not self._config.enabled:
            with self._lock:
                self._stats.misses += 1
            return None

        try:
            with self._lock:
                entry = self._backend.get(key, self._clock())
                if entry is None:
                    self._stats.misses += 1
                    return None
                self._stats.hits += 1
        except Exception:
            logger.exception("Cache GET failed", extra={"cache_key": key})
            return None

        logger.debug("Cache HIT", extra={"cache_key": key})
        return entry

    async def _wrap_single_flight(
        self,
        key: str,
        producer: Callable[[], Awaitable[V]],
        ttl: TTLLike | None,
        tags: Tags,
    ) -> V:
        loop = asyncio.get_running_loop()
        flight = (loop, key)
        with self._lock:
            task = self._inflight.get(flight)
            if task is None:
                task = loop.create_task(self._produce(key, producer, ttl, tags))
                self._inflight[flight] = task
                task.add_done_callback(
                    functools.partial(self._forget_inflight, flight)
                )
        # A cancelled caller must not cancel the computation other callers share.
        return await asyncio.shield(task)

    async def _produce(
        self,
        key: str,
        producer: Callable[[], Awaitable[V]],
        ttl: TTLLike | None,
        tags: Tags,
    ) -> V:
        value = await producer()
        self.set(key, value, ttl, tags)
        return value

    def _forget_inflight(
        self,
        flight: tuple[asyncio.AbstractEventLoop, str],
        task: "asyncio.Task[Any]",
    ) -> None:
        with self._lock:
            if self._inflight.get(flight) is task:
                del self._inflight[flight]
        if not task.cancelled():
            # Mark the exception retrieved; waiting callers still re-raise it.
            task.exception()

    def _on_removal(self, entry: CacheEntry, cause: RemovalCause) -> None:
        if cause is RemovalCause.DELETED:
            self._stats.deletes += 1
        elif cause is RemovalCause.EVICTED:
            self._stats.evictions += 1
        elif cause is RemovalCause.EXPIRED:
            self._stats.expirations += 1


def _normalize_tags(tags: Tags) -> list[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        return [tags]
    return list(tags)
