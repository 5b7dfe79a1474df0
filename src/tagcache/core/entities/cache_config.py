"""Cache configuration entity."""

import logging
import math
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from tagcache.utils.time import TTLLike, to_timedelta

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass
class CacheConfig:
    """Cache configuration.

    Durations may be given as seconds or as ``timedelta``; they are
    normalized to ``timedelta`` on construction.

    Stampede handling:
        With ``single_flight=False`` concurrent ``wrap`` calls that miss on
        the same key each run their producer and the last write wins.
        With ``single_flight=True`` they share a single producer call.
    """

    enabled: bool = True
    max_size: int = 1000
    default_ttl: TTLLike = timedelta(seconds=300)
    sweep_interval: TTLLike = timedelta(seconds=60)
    single_flight: bool = False
    key_prefix: str = ""

    def __post_init__(self) -> None:
        """Validate and normalize the configuration."""
        if isinstance(self.max_size, bool) or not isinstance(self.max_size, int):
            raise ValueError(f"max_size must be an integer, got {self.max_size!r}")
        if self.max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {self.max_size}")
        self.default_ttl = to_timedelta(self.default_ttl)
        self.sweep_interval = to_timedelta(self.sweep_interval)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CacheConfig":
        """Build a configuration from ``CACHE_*`` environment variables.

        Unset variables use the defaults. Unparseable values are logged
        and also fall back to the defaults.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            A validated CacheConfig.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        return cls(
            enabled=_read_bool(env, "CACHE_ENABLED", defaults.enabled),
            max_size=_read_number(env, "CACHE_MAX_SIZE", defaults.max_size, int, 1),
            default_ttl=_read_number(
                env, "CACHE_DEFAULT_TTL", defaults.default_ttl, float, 0
            ),
            sweep_interval=_read_number(
                env, "CACHE_SWEEP_INTERVAL", defaults.sweep_interval, float, 0
            ),
            single_flight=_read_bool(
                env, "CACHE_SINGLE_FLIGHT", defaults.single_flight
            ),
            key_prefix=env.get("CACHE_KEY_PREFIX", defaults.key_prefix),
        )


def _read_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(
        "Ignoring invalid boolean in %s", name, extra={"env_var": name, "value": raw}
    )
    return default


def _read_number(
    env: Mapping[str, str],
    name: str,
    default: Any,
    parse: Callable[[str], float],
    minimum: float,
) -> Any:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        value = parse(raw)
    except ValueError:
        value = None
    # Durations must be strictly positive and finite, sizes at least the minimum.
    if (
        value is None
        or not math.isfinite(value)
        or value < minimum
        or (parse is float and value <= minimum)
    ):
        logger.warning(
            "Ignoring invalid value in %s", name, extra={"env_var": name, "value": raw}
        )
        return default
    return value
