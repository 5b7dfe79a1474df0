"""Cache statistics entities."""

from dataclasses import asdict, dataclass


@dataclass
class CacheStats:
    """Running counters of cache activity.

    The hit rate is derived on read rather than stored, so it can never
    drift from the counters.
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups that found a live entry (0.0 if none)."""
        lookups = self.hits + self.misses
        if lookups == 0:
            return 0.0
        return self.hits / lookups

    def reset(self) -> None:
        """Zero every counter."""
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0
        self.evictions = 0
        self.expirations = 0


@dataclass(frozen=True)
class CacheStatsSnapshot:
    """Point-in-time view of the counters plus store occupancy."""

    hits: int
    misses: int
    sets: int
    deletes: int
    evictions: int
    expirations: int
    hit_rate: float
    size: int
    max_size: int
    active_tag_count: int

    def as_dict(self) -> dict[str, int | float]:
        """Return the snapshot as a plain dictionary."""
        return asdict(self)
