"""
Gem Pools - Fixed-size gem count containers.

A GemPool holds a count for every gem kind (including gold), so gem
lookups never miss. Used for the bank, player holdings, selections and
payments.

Design principles:
- Immutable-friendly: plus/minus return new pools
- Counts never negative
- Serializable: to_dict() / from_mapping() for the wire
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..catalog.gems import Gem, ALL_GEMS, COLORED_GEMS, parse_gem


def _zero_counts() -> dict[Gem, int]:
    return {gem: 0 for gem in ALL_GEMS}


@dataclass
class GemPool:
    """Counts per gem kind. Always holds all six kinds."""
    counts: dict[Gem, int] = field(default_factory=_zero_counts)

    def __post_init__(self):
        full = _zero_counts()
        for gem, count in self.counts.items():
            if count < 0:
                raise ValueError(f"Negative gem count for {gem.value}: {count}")
            full[gem] = count
        self.counts = full

    @classmethod
    def uniform(cls, count: int, gold: int = 0) -> GemPool:
        """Pool with `count` of every colored gem and `gold` gold."""
        counts = {gem: count for gem in COLORED_GEMS}
        counts[Gem.GOLD] = gold
        return cls(counts)

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, int] | None) -> GemPool:
        """
        Build a pool from a mapping with Gem or string keys.

        Raises ValueError for unknown gem names or negative/non-integer counts.
        """
        counts = _zero_counts()
        for key, value in (mapping or {}).items():
            gem = parse_gem(key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Gem count for {gem.value} must be an integer")
            if value < 0:
                raise ValueError(f"Gem count for {gem.value} must not be negative")
            counts[gem] += value
        return cls(counts)

    def get(self, gem: Gem) -> int:
        return self.counts[gem]

    def __getitem__(self, gem: Gem) -> int:
        return self.counts[gem]

    def total(self) -> int:
        return sum(self.counts.values())

    def colored_total(self) -> int:
        return sum(self.counts[gem] for gem in COLORED_GEMS)

    def nonzero(self) -> dict[Gem, int]:
        """Kinds with a positive count, in canonical order."""
        return {gem: self.counts[gem] for gem in ALL_GEMS if self.counts[gem] > 0}

    def plus(self, other: GemPool) -> GemPool:
        return GemPool({gem: self.counts[gem] + other.counts[gem] for gem in ALL_GEMS})

    def minus(self, other: GemPool) -> GemPool:
        """Subtract another pool. Raises ValueError if any count would go negative."""
        return GemPool({gem: self.counts[gem] - other.counts[gem] for gem in ALL_GEMS})

    def covers(self, other: GemPool) -> bool:
        """True if this pool holds at least `other` of every kind."""
        return all(self.counts[gem] >= other.counts[gem] for gem in ALL_GEMS)

    def with_count(self, gem: Gem, count: int) -> GemPool:
        counts = dict(self.counts)
        counts[gem] = count
        return GemPool(counts)

    def to_dict(self, include_zero: bool = False) -> dict[str, int]:
        """Wire form with string keys."""
        return {
            gem.value: self.counts[gem]
            for gem in ALL_GEMS
            if include_zero or self.counts[gem] > 0
        }

    def __repr__(self) -> str:
        return f"GemPool({self.to_dict()})"
