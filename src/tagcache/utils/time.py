"""Clock and TTL helpers."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from tagcache.core.exceptions import InvalidTTLError

Clock = Callable[[], datetime]

TTLLike = int | float | timedelta


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_timedelta(ttl: TTLLike) -> timedelta:
    """Normalize a TTL given in seconds or as a timedelta.

    Raises:
        InvalidTTLError: If the TTL is not strictly positive.
    """
    if isinstance(ttl, bool):
        raise InvalidTTLError(f"TTL must be a number of seconds, got {ttl!r}")
    if isinstance(ttl, timedelta):
        delta = ttl
    elif isinstance(ttl, (int, float)):
        delta = timedelta(seconds=ttl)
    else:
        raise InvalidTTLError(f"TTL must be seconds or a timedelta, got {ttl!r}")

    if delta <= timedelta(0):
        raise InvalidTTLError(f"TTL must be positive, got {ttl!r}")
    return delta
