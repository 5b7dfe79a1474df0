"""Default key builder implementation."""

from typing import Any

from tagcache.core.exceptions import KeyGenerationError
from tagcache.utils.hashing import canonical_json, hash_value


class DefaultKeyBuilder:
    """Default key builder using a canonical JSON encoding of the identifier.

    Keys have the form ``[namespace:]prefix:<identifier>`` where the
    identifier part is the key-sorted, compact JSON of the identifier,
    or its SHA-256 digest when ``hash_identifiers`` is enabled.
    """

    def __init__(
        self,
        namespace: str = "",
        hash_identifiers: bool = False,
    ) -> None:
        """Initialize the key builder.

        Args:
            namespace: Optional prefix for all keys built by this instance.
            hash_identifiers: Whether to hash the encoded identifier,
                keeping keys short for large filter objects.
        """
        self._namespace = namespace
        self._hash_identifiers = hash_identifiers

    def build(self, prefix: str, identifier: Any) -> str:
        """Build a cache key from a prefix and an identifier.

        Args:
            prefix: Key prefix, e.g. ``"products"``.
            identifier: JSON-serializable identifier.

        Returns:
            The cache key.

        Raises:
            KeyGenerationError: If the identifier is not JSON-serializable.
        """
        try:
            if self._hash_identifiers:
                encoded = hash_value(identifier)
            else:
                encoded = canonical_json(identifier)
        except (TypeError, ValueError) as e:
            raise KeyGenerationError(
                f"Cannot build cache key for prefix {prefix!r}: {e}"
            ) from e

        parts = [prefix, encoded]
        if self._namespace:
            parts.insert(0, self._namespace)
        return ":".join(parts)
