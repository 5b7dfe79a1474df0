"""Tests for tag-based cache invalidation."""

from tagcache import Cache, CacheConfig

from tests.fakes import FakeClock


def create_cache(max_size: int = 100) -> tuple[Cache, FakeClock]:
    """Create a cache with a fake clock for testing."""
    clock = FakeClock()
    return Cache(CacheConfig(max_size=max_size), clock=clock), clock


class TestSimpleTagInvalidation:
    """Tests for single tag invalidation."""

    def test_invalidate_single_tag(self):
        """Should delete every entry carrying the tag."""
        cache, _ = create_cache()
        cache.set("product:1", {"id": 1}, tags=["products"])
        cache.set("product:2", {"id": 2}, tags=["products"])
        cache.set("user:1", {"id": 1}, tags=["users"])

        deleted = cache.delete_by_tag("products")

        assert deleted == 2
        assert cache.get("product:1") is None
        assert cache.get("product:2") is None
        assert cache.get("user:1") == {"id": 1}

    def test_unknown_tag(self):
        """Should return zero for a tag nobody carries."""
        cache, _ = create_cache()
        cache.set("k", 1, tags=["A"])

        assert cache.delete_by_tag("nope") == 0
        assert cache.has("k")

    def test_tag_is_dropped_from_index(self):
        """Should leave no empty bucket behind."""
        cache, _ = create_cache()
        cache.set("k", 1, tags=["A"])

        cache.delete_by_tag("A")

        assert cache.keys_for_tag("A") == frozenset()
        assert cache.get_stats().active_tag_count == 0

    def test_counts_as_deletes(self):
        """Should count each removed entry as a delete."""
        cache, _ = create_cache()
        cache.set("k1", 1, tags=["A"])
        cache.set("k2", 2, tags=["A"])

        cache.delete_by_tag("A")

        assert cache.get_stats().deletes == 2


class TestMultiTagInvalidation:
    """Tests for entries carrying several tags."""

    def test_side_effect_on_other_tags(self):
        """Should retract invalidated entries from every other tag."""
        cache, _ = create_cache()
        cache.set("k1", "v1", 60, tags=["A"])
        cache.set("k2", "v2", 60, tags=["A", "B"])

        assert cache.delete_by_tag("A") == 2

        assert cache.get("k1") is None
        assert cache.get("k2") is None
        assert cache.keys_for_tag("A") == frozenset()
        assert cache.keys_for_tag("B") == frozenset()
        assert cache.get_stats().active_tag_count == 0

    def test_shared_tag_keeps_survivors(self):
        """Should keep other members of a secondary tag."""
        cache, _ = create_cache()
        cache.set("k1", 1, tags=["A", "B"])
        cache.set("k2", 2, tags=["B"])

        cache.delete_by_tag("A")

        assert cache.keys_for_tag("B") == frozenset({"k2"})

    def test_delete_by_tags_counts_distinct_entries(self):
        """Should not double count entries carrying several tags."""
        cache, _ = create_cache()
        cache.set("k1", 1, tags=["A", "B"])
        cache.set("k2", 2, tags=["B"])
        cache.set("k3", 3, tags=["C"])

        assert cache.delete_by_tags(["A", "B"]) == 2
        assert cache.keys() == ["k3"]

    def test_single_string_tag(self):
        """Should accept a bare string as a single tag."""
        cache, _ = create_cache()
        cache.set("k", 1, tags="products")

        assert cache.keys_for_tag("products") == frozenset({"k"})
        assert cache.get_stats().active_tag_count == 1


class TestRetaggingOnOverwrite:
    """Tests for replacing an entry under a different tag set."""

    def test_old_tags_are_retracted(self):
        """Should not leave the key reachable through its previous tag."""
        cache, _ = create_cache()
        cache.set("k", "old", tags=["A"])

        cache.set("k", "new", tags=["B"])

        assert cache.keys_for_tag("A") == frozenset()
        assert cache.keys_for_tag("B") == frozenset({"k"})
        assert cache.delete_by_tag("A") == 0
        assert cache.get("k") == "new"

    def test_overwrite_without_tags(self):
        """Should drop all tag associations when re-set untagged."""
        cache, _ = create_cache()
        cache.set("k", 1, tags=["A", "B"])

        cache.set("k", 2)

        assert cache.get_stats().active_tag_count == 0

    def test_overlapping_tags(self):
        """Should keep a tag present in both the old and new tag sets."""
        cache, _ = create_cache()
        cache.set("k", 1, tags=["A", "B"])

        cache.set("k", 2, tags=["B", "C"])

        assert cache.keys_for_tag("A") == frozenset()
        assert cache.keys_for_tag("B") == frozenset({"k"})
        assert cache.keys_for_tag("C") == frozenset({"k"})


class TestInvalidationWithExpiry:
    """Tests for tag invalidation of entries past their TTL."""

    def test_expired_but_unswept_entries_are_removed(self):
        """Should remove tagged entries even if they already expired."""
        cache, clock = create_cache()
        cache.set("k1", 1, ttl=1, tags=["A"])
        cache.set("k2", 2, ttl=100, tags=["A"])
        clock.advance(5)

        assert cache.delete_by_tag("A") == 2
        assert len(cache) == 0

    def test_sweep_retracts_tags(self):
        """Should drop swept entries from the tag index."""
        cache, clock = create_cache()
        cache.set("k1", 1, ttl=1, tags=["A"])
        cache.set("k2", 2, ttl=100, tags=["A"])
        clock.advance(5)

        assert cache.sweep() == 1
        assert cache.keys_for_tag("A") == frozenset({"k2"})
