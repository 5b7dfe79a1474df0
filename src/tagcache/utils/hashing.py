"""Canonical encoding and hashing utilities for cache key generation."""

import hashlib
import json
from typing import Any


def canonical_json(value: Any) -> str:
    """Encode a value as canonical JSON.

    Keys are sorted and separators are compact, so structurally equal
    values always produce the same string regardless of field order.

    Args:
        value: Any JSON-serializable value.

    Returns:
        The canonical JSON string.

    Raises:
        TypeError: If the value contains a type JSON cannot encode.
        ValueError: If the value contains a circular reference or NaN.
    """
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def hash_value(value: Any) -> str:
    """Create a deterministic hash of a value.

    Args:
        value: Any JSON-serializable value.

    Returns:
        A hexadecimal hash string (first 16 chars of SHA-256).
    """
    normalized = canonical_json(value)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]
