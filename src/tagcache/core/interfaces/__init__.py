"""Core interfaces (protocols) for tagcache."""

from tagcache.core.interfaces.cache_backend import (
    ICacheBackend,
    RemovalCause,
    RemovalListener,
)
from tagcache.core.interfaces.key_builder import IKeyBuilder

__all__ = [
    "ICacheBackend",
    "IKeyBuilder",
    "RemovalCause",
    "RemovalListener",
]
