"""Domain entities for tagcache."""

from tagcache.core.entities.cache_config import CacheConfig
from tagcache.core.entities.cache_entry import CacheEntry
from tagcache.core.entities.cache_stats import CacheStats, CacheStatsSnapshot

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "CacheStatsSnapshot",
]
