"""Pytest configuration for tagcache tests."""

import pytest

from tagcache import Cache, CacheConfig

from tests.fakes import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock for deterministic expiry."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> Cache:
    """Create a cache driven by the fake clock."""
    return Cache(CacheConfig(max_size=100, default_ttl=300), clock=clock)
