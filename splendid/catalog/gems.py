"""
Gem kinds - the closed set of token colors used by cards, nobles and the bank.
"""

from enum import Enum


class Gem(Enum):
    """Gem token kinds. Five colored kinds plus the gold wildcard."""
    DIAMOND = "diamond"
    SAPPHIRE = "sapphire"
    EMERALD = "emerald"
    RUBY = "ruby"
    ONYX = "onyx"
    GOLD = "gold"

    @property
    def is_colored(self) -> bool:
        return self is not Gem.GOLD


# Fixed iteration order for every gem-indexed operation
ALL_GEMS: tuple[Gem, ...] = (
    Gem.DIAMOND,
    Gem.SAPPHIRE,
    Gem.EMERALD,
    Gem.RUBY,
    Gem.ONYX,
    Gem.GOLD,
)

COLORED_GEMS: tuple[Gem, ...] = ALL_GEMS[:5]


def parse_gem(name: str | Gem) -> Gem:
    """Map a wire name ("ruby", "RUBY") to a Gem. Raises ValueError if unknown."""
    if isinstance(name, Gem):
        return name
    try:
        return Gem(str(name).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown gem kind: {name!r}") from None
