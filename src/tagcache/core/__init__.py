"""Core domain layer for tagcache."""

from tagcache.core.entities import (
    CacheConfig,
    CacheEntry,
    CacheStats,
    CacheStatsSnapshot,
)
from tagcache.core.exceptions import CacheError, InvalidTTLError, KeyGenerationError
from tagcache.core.interfaces import ICacheBackend, IKeyBuilder, RemovalCause
from tagcache.core.services import Cache, ExpirySweeper

__all__ = [
    # Entities
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "CacheStatsSnapshot",
    # Exceptions
    "CacheError",
    "InvalidTTLError",
    "KeyGenerationError",
    # Interfaces
    "ICacheBackend",
    "IKeyBuilder",
    "RemovalCause",
    # Services
    "Cache",
    "ExpirySweeper",
]
