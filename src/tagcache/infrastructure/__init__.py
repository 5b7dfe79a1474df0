"""Infrastructure layer implementations for tagcache."""

from tagcache.infrastructure.backends import InMemoryCacheBackend
from tagcache.infrastructure.key_builders import DefaultKeyBuilder

__all__ = [
    "InMemoryCacheBackend",
    "DefaultKeyBuilder",
]
