"""Exceptions raised inside tagcache.

Public ``Cache`` operations catch these at their boundary and degrade to
a cache miss; they only escape from the lower-level building blocks.
"""


class CacheError(Exception):
    """Base class for cache errors."""


class KeyGenerationError(CacheError):
    """Raised when an identifier cannot be encoded into a cache key."""


class InvalidTTLError(CacheError, ValueError):
    """Raised when a TTL is not a strictly positive duration."""
