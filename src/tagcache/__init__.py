"""tagcache - in-process caching with TTLs, tags and hit-rate statistics.

A capacity-bounded key/value cache for application data such as query
results and API responses. Entries expire after a TTL (lazily on read and
periodically by a background sweeper), can be grouped under tags for bulk
invalidation, and are evicted in insertion order once the cache is full.

Example:
    from tagcache import Cache, CacheConfig

    cache = Cache(CacheConfig(max_size=1000, default_ttl=300))
    await cache.start()

    key = cache.generate_key("products", {"category": "books", "page": 1})
    products = await cache.wrap(
        key,
        lambda: repo.list_products(category="books", page=1),
        ttl=120,
        tags=["products"],
    )

    # After a write, drop everything derived from products
    cache.delete_by_tag("products")

    print(cache.get_stats().hit_rate)
    await cache.close()

Decorators:
    from tagcache import cached, invalidates

    @cached(cache, ttl=600, tags=["product:{product_id}"])
    async def get_product(product_id: int) -> dict:
        return await repo.get_product(product_id)

    @invalidates(cache, tags=["products", "product:{product_id}"])
    async def update_product(product_id: int, data: dict) -> dict:
        return await repo.update_product(product_id, data)
"""

from tagcache.core.entities import (
    CacheConfig,
    CacheEntry,
    CacheStats,
    CacheStatsSnapshot,
)
from tagcache.core.exceptions import CacheError, InvalidTTLError, KeyGenerationError
from tagcache.core.interfaces import ICacheBackend, IKeyBuilder, RemovalCause
from tagcache.core.services import Cache, ExpirySweeper
from tagcache.decorators import cached, invalidates
from tagcache.infrastructure import DefaultKeyBuilder, InMemoryCacheBackend
from tagcache.lifecycle import cache_lifespan, install_shutdown_handlers

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core entities
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "CacheStatsSnapshot",
    # Exceptions
    "CacheError",
    "InvalidTTLError",
    "KeyGenerationError",
    # Core interfaces
    "ICacheBackend",
    "IKeyBuilder",
    "RemovalCause",
    # Core services
    "Cache",
    "ExpirySweeper",
    # Infrastructure implementations
    "InMemoryCacheBackend",
    "DefaultKeyBuilder",
    # Decorators
    "cached",
    "invalidates",
    # Lifecycle
    "cache_lifespan",
    "install_shutdown_handlers",
]
