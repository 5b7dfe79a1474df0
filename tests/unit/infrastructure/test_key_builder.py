"""Tests for DefaultKeyBuilder and hashing helpers."""

import pytest

from tagcache.core.exceptions import KeyGenerationError
from tagcache.infrastructure.key_builders.default import DefaultKeyBuilder
from tagcache.utils.hashing import canonical_json, hash_value


class TestDefaultKeyBuilder:
    """Tests for DefaultKeyBuilder."""

    @pytest.fixture
    def key_builder(self) -> DefaultKeyBuilder:
        """Create a key builder for testing."""
        return DefaultKeyBuilder()

    def test_scalar_identifier(self, key_builder: DefaultKeyBuilder) -> None:
        """Test building a key from a scalar id."""
        assert key_builder.build("product", 42) == "product:42"
        assert key_builder.build("user", "abc") == 'user:"abc"'

    def test_dict_identifier_is_order_independent(
        self, key_builder: DefaultKeyBuilder
    ) -> None:
        """Test field order does not change the key."""
        first = key_builder.build("search", {"q": "lamp", "filters": {"b": 2, "a": 1}})
        second = key_builder.build("search", {"filters": {"a": 1, "b": 2}, "q": "lamp"})

        assert first == second
        assert first == 'search:{"filters":{"a":1,"b":2},"q":"lamp"}'

    def test_different_identifiers_differ(
        self, key_builder: DefaultKeyBuilder
    ) -> None:
        """Test distinct identifiers produce distinct keys."""
        assert key_builder.build("p", {"id": 1}) != key_builder.build("p", {"id": 2})

    def test_namespace(self) -> None:
        """Test the namespace is prepended."""
        key_builder = DefaultKeyBuilder(namespace="shop")

        assert key_builder.build("product", 1) == "shop:product:1"

    def test_hashed_identifiers(self) -> None:
        """Test hashed keys are short and deterministic."""
        key_builder = DefaultKeyBuilder(hash_identifiers=True)

        key = key_builder.build("search", {"b": 2, "a": 1})

        assert key == key_builder.build("search", {"a": 1, "b": 2})
        assert key.startswith("search:")
        assert len(key.split(":", 1)[1]) == 16

    @pytest.mark.parametrize(
        "identifier", [{1, 2}, object(), float("nan"), {"when": b"bytes"}]
    )
    def test_unserializable_identifier(
        self, key_builder: DefaultKeyBuilder, identifier: object
    ) -> None:
        """Test identifiers JSON cannot encode raise KeyGenerationError."""
        with pytest.raises(KeyGenerationError):
            key_builder.build("p", identifier)

    def test_circular_identifier(self, key_builder: DefaultKeyBuilder) -> None:
        """Test self-referencing identifiers raise KeyGenerationError."""
        identifier: dict[str, object] = {}
        identifier["self"] = identifier

        with pytest.raises(KeyGenerationError):
            key_builder.build("p", identifier)


class TestHashing:
    """Tests for hashing helpers."""

    def test_canonical_json(self) -> None:
        """Test canonical JSON is compact and key-sorted."""
        assert canonical_json({"b": [1, 2], "a": None}) == '{"a":null,"b":[1,2]}'

    def test_hash_value_is_stable(self) -> None:
        """Test equal values hash equally regardless of key order."""
        assert hash_value({"x": 1, "y": 2}) == hash_value({"y": 2, "x": 1})
        assert len(hash_value("anything")) == 16
