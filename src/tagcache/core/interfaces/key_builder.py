"""Key builder interface."""

from typing import Any, Protocol


class IKeyBuilder(Protocol):
    """Contract for building cache keys from a prefix and an identifier.

    Implementations must be deterministic: structurally equal identifiers
    always yield the same key.
    """

    def build(self, prefix: str, identifier: Any) -> str:
        """Build a cache key.

        Args:
            prefix: Key namespace, e.g. ``"product"``.
            identifier: Value identifying the cached item, e.g. an ID or a
                dict of query filters.

        Returns:
            The cache key.

        Raises:
            KeyGenerationError: If the identifier cannot be encoded.
        """
        ...
