"""Core services for tagcache."""

from tagcache.core.services.cache_service import Cache
from tagcache.core.services.sweeper import ExpirySweeper

__all__ = [
    "Cache",
    "ExpirySweeper",
]
