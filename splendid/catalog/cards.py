"""
Splendid Catalog - Card and noble definitions.

The full base set:
- 40 tier 1 cards (ids 101-140)
- 30 tier 2 cards (ids 201-230)
- 20 tier 3 cards (ids 301-320)
- 10 nobles worth 3 points each

Definitions are immutable. Game state refers to them by id only.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .gems import Gem, COLORED_GEMS


@dataclass(frozen=True)
class CardDefinition:
    """
    A development card.

    The bonus is the gem color the card discounts forever once owned.
    Costs only ever name colored gems.
    """
    id: int
    tier: int
    points: int
    bonus: Gem
    cost: dict[Gem, int] = field(default_factory=dict, hash=False)

    @property
    def total_cost(self) -> int:
        return sum(self.cost.values())


@dataclass(frozen=True)
class NobleDefinition:
    """A noble tile, awarded automatically once bonus requirements are met."""
    id: int
    name: str
    points: int
    requirements: dict[Gem, int] = field(default_factory=dict, hash=False)

    @property
    def total_required(self) -> int:
        return sum(self.requirements.values())


DIAMOND = Gem.DIAMOND
SAPPHIRE = Gem.SAPPHIRE
EMERALD = Gem.EMERALD
RUBY = Gem.RUBY
ONYX = Gem.ONYX


def _card(card_id: int, tier: int, points: int, bonus: Gem, **cost: int) -> CardDefinition:
    return CardDefinition(
        id=card_id,
        tier=tier,
        points=points,
        bonus=bonus,
        cost={Gem(color): count for color, count in cost.items()},
    )


def _noble(noble_id: int, name: str, points: int, **requirements: int) -> NobleDefinition:
    return NobleDefinition(
        id=noble_id,
        name=name,
        points=points,
        requirements={Gem(color): count for color, count in requirements.items()},
    )


# ============================================================================
# Tier 1
# ============================================================================

TIER_1_CARDS: tuple[CardDefinition, ...] = (
    _card(101, 1, 0, ONYX, diamond=1, sapphire=1, emerald=1, ruby=1),
    _card(102, 1, 0, ONYX, diamond=1, sapphire=2, emerald=1, ruby=1),
    _card(103, 1, 0, ONYX, diamond=2, sapphire=2, ruby=1),
    _card(104, 1, 0, ONYX, emerald=1, ruby=3, onyx=1),
    _card(105, 1, 0, ONYX, emerald=2, ruby=1),
    _card(106, 1, 0, ONYX, diamond=2, emerald=2),
    _card(107, 1, 0, ONYX, emerald=3),
    _card(108, 1, 1, ONYX, sapphire=4),
    _card(109, 1, 0, SAPPHIRE, diamond=1, emerald=1, ruby=1, onyx=1),
    _card(110, 1, 0, SAPPHIRE, diamond=1, emerald=1, ruby=2, onyx=1),
    _card(111, 1, 0, SAPPHIRE, diamond=1, emerald=2, ruby=2),
    _card(112, 1, 0, SAPPHIRE, sapphire=1, emerald=3, ruby=1),
    _card(113, 1, 0, SAPPHIRE, diamond=1, onyx=2),
    _card(114, 1, 0, SAPPHIRE, emerald=2, onyx=2),
    _card(115, 1, 1, SAPPHIRE, ruby=4),
    _card(116, 1, 0, SAPPHIRE, sapphire=3),
    _card(117, 1, 0, DIAMOND, sapphire=1, emerald=1, ruby=1, onyx=1),
    _card(118, 1, 0, DIAMOND, sapphire=1, emerald=2, ruby=1, onyx=1),
    _card(119, 1, 0, DIAMOND, sapphire=2, emerald=2, onyx=1),
    _card(120, 1, 0, DIAMOND, diamond=3, sapphire=1, onyx=1),
    _card(121, 1, 0, DIAMOND, ruby=2, onyx=1),
    _card(122, 1, 0, DIAMOND, sapphire=2, onyx=2),
    _card(123, 1, 1, DIAMOND, emerald=4),
    _card(124, 1, 0, DIAMOND, diamond=3),
    _card(125, 1, 0, EMERALD, diamond=1, sapphire=1, ruby=1, onyx=1),
    _card(126, 1, 0, EMERALD, diamond=1, sapphire=1, ruby=1, onyx=2),
    _card(127, 1, 0, EMERALD, sapphire=1, ruby=2, onyx=2),
    _card(128, 1, 0, EMERALD, diamond=1, sapphire=3, emerald=1),
    _card(129, 1, 0, EMERALD, diamond=2, sapphire=1),
    _card(130, 1, 0, EMERALD, sapphire=2, ruby=2),
    _card(131, 1, 1, EMERALD, onyx=4),
    _card(132, 1, 0, EMERALD, ruby=3),
    _card(133, 1, 0, RUBY, diamond=1, sapphire=1, emerald=1, onyx=1),
    _card(134, 1, 0, RUBY, diamond=2, sapphire=1, emerald=1, onyx=1),
    _card(135, 1, 0, RUBY, diamond=2, emerald=1, onyx=2),
    _card(136, 1, 0, RUBY, diamond=1, ruby=1, onyx=3),
    _card(137, 1, 0, RUBY, sapphire=2, emerald=1),
    _card(138, 1, 0, RUBY, diamond=2, ruby=2),
    _card(139, 1, 0, RUBY, diamond=3),
    _card(140, 1, 1, RUBY, diamond=4),
)


# ============================================================================
# Tier 2
# ============================================================================

TIER_2_CARDS: tuple[CardDefinition, ...] = (
    _card(201, 2, 1, ONYX, diamond=3, sapphire=2, emerald=2),
    _card(202, 2, 1, ONYX, diamond=3, emerald=3, onyx=2),
    _card(203, 2, 2, ONYX, sapphire=1, emerald=4, ruby=2),
    _card(204, 2, 2, ONYX, emerald=5, ruby=3),
    _card(205, 2, 2, ONYX, diamond=5),
    _card(206, 2, 3, ONYX, onyx=6),
    _card(207, 2, 1, SAPPHIRE, sapphire=2, emerald=2, ruby=3),
    _card(208, 2, 1, SAPPHIRE, sapphire=2, emerald=3, onyx=3),
    _card(209, 2, 2, SAPPHIRE, diamond=5, sapphire=3),
    _card(210, 2, 2, SAPPHIRE, diamond=2, ruby=1, onyx=4),
    _card(211, 2, 2, SAPPHIRE, sapphire=5),
    _card(212, 2, 3, SAPPHIRE, sapphire=6),
    _card(213, 2, 1, DIAMOND, emerald=3, ruby=2, onyx=2),
    _card(214, 2, 1, DIAMOND, diamond=2, sapphire=3, ruby=3),
    _card(215, 2, 2, DIAMOND, emerald=1, ruby=4, onyx=2),
    _card(216, 2, 2, DIAMOND, ruby=5, onyx=3),
    _card(217, 2, 2, DIAMOND, ruby=5),
    _card(218, 2, 3, DIAMOND, diamond=6),
    _card(219, 2, 1, EMERALD, diamond=3, emerald=2, ruby=3),
    _card(220, 2, 1, EMERALD, diamond=2, sapphire=3, onyx=2),
    _card(221, 2, 2, EMERALD, diamond=4, sapphire=2, onyx=1),
    _card(222, 2, 2, EMERALD, sapphire=5, emerald=3),
    _card(223, 2, 2, EMERALD, emerald=5),
    _card(224, 2, 3, EMERALD, emerald=6),
    _card(225, 2, 1, RUBY, diamond=2, ruby=2, onyx=3),
    _card(226, 2, 1, RUBY, sapphire=3, ruby=2, onyx=3),
    _card(227, 2, 2, RUBY, diamond=1, sapphire=4, emerald=2),
    _card(228, 2, 2, RUBY, diamond=3, onyx=5),
    _card(229, 2, 2, RUBY, onyx=5),
    _card(230, 2, 3, RUBY, ruby=6),
)


# ============================================================================
# Tier 3
# ============================================================================

TIER_3_CARDS: tuple[CardDefinition, ...] = (
    _card(301, 3, 3, ONYX, diamond=3, sapphire=3, emerald=5, ruby=3),
    _card(302, 3, 4, ONYX, ruby=7),
    _card(303, 3, 4, ONYX, emerald=3, ruby=6, onyx=3),
    _card(304, 3, 5, ONYX, ruby=7, onyx=3),
    _card(305, 3, 3, SAPPHIRE, diamond=3, emerald=3, ruby=3, onyx=5),
    _card(306, 3, 4, SAPPHIRE, diamond=7),
    _card(307, 3, 4, SAPPHIRE, diamond=6, sapphire=3, onyx=3),
    _card(308, 3, 5, SAPPHIRE, diamond=7, sapphire=3),
    _card(309, 3, 3, DIAMOND, sapphire=3, emerald=3, ruby=5, onyx=3),
    _card(310, 3, 4, DIAMOND, onyx=7),
    _card(311, 3, 4, DIAMOND, diamond=3, ruby=3, onyx=6),
    _card(312, 3, 5, DIAMOND, diamond=3, onyx=7),
    _card(313, 3, 3, EMERALD, diamond=5, sapphire=3, ruby=3, onyx=3),
    _card(314, 3, 4, EMERALD, sapphire=7),
    _card(315, 3, 4, EMERALD, diamond=3, sapphire=6, emerald=3),
    _card(316, 3, 5, EMERALD, sapphire=7, emerald=3),
    _card(317, 3, 3, RUBY, diamond=3, sapphire=5, emerald=3, onyx=3),
    _card(318, 3, 4, RUBY, emerald=7),
    _card(319, 3, 4, RUBY, sapphire=3, emerald=6, ruby=3),
    _card(320, 3, 5, RUBY, emerald=7, ruby=3),
)


# ============================================================================
# Nobles
# ============================================================================

NOBLES: tuple[NobleDefinition, ...] = (
    _noble(1, "Mary Stuart", 3, ruby=4, emerald=4),
    _noble(2, "Charles Quint", 3, onyx=3, ruby=3, diamond=3),
    _noble(3, "Macchiavelli", 3, sapphire=4, diamond=4),
    _noble(4, "Isabel of Castille", 3, onyx=4, diamond=4),
    _noble(5, "Soliman the Magnificent", 3, sapphire=4, emerald=4),
    _noble(6, "Catherine of Medicis", 3, emerald=3, sapphire=3, ruby=3),
    _noble(7, "Anne of Brittany", 3, emerald=3, sapphire=3, diamond=3),
    _noble(8, "Henri VIII", 3, onyx=4, ruby=4),
    _noble(9, "Elisabeth of Austria", 3, onyx=3, sapphire=3, diamond=3),
    _noble(10, "Francis I of France", 3, onyx=3, ruby=3, emerald=3),
)


CARDS_BY_TIER: dict[int, tuple[CardDefinition, ...]] = {
    1: TIER_1_CARDS,
    2: TIER_2_CARDS,
    3: TIER_3_CARDS,
}

TIERS: tuple[int, ...] = (1, 2, 3)

ALL_CARDS: tuple[CardDefinition, ...] = TIER_1_CARDS + TIER_2_CARDS + TIER_3_CARDS

_CARDS_BY_ID: dict[int, CardDefinition] = {card.id: card for card in ALL_CARDS}
_NOBLES_BY_ID: dict[int, NobleDefinition] = {noble.id: noble for noble in NOBLES}


def get_card(card_id: int) -> CardDefinition | None:
    """Get a card definition by id."""
    return _CARDS_BY_ID.get(card_id)


def get_noble(noble_id: int) -> NobleDefinition | None:
    """Get a noble definition by id."""
    return _NOBLES_BY_ID.get(noble_id)


def cards_for_tier(tier: int) -> tuple[CardDefinition, ...]:
    return CARDS_BY_TIER.get(tier, ())


def validate_catalog() -> list[str]:
    """
    Check the static data for consistency.

    Returns a list of problems (empty if the catalog is sound).
    """
    problems = []

    if len(_CARDS_BY_ID) != len(ALL_CARDS):
        problems.append("Duplicate card ids in catalog")
    if len(_NOBLES_BY_ID) != len(NOBLES):
        problems.append("Duplicate noble ids in catalog")

    for tier, cards in CARDS_BY_TIER.items():
        for card in cards:
            if card.tier != tier:
                problems.append(f"Card {card.id} listed in tier {tier} but has tier {card.tier}")
            if not card.bonus.is_colored:
                problems.append(f"Card {card.id} grants a gold bonus")
            if Gem.GOLD in card.cost:
                problems.append(f"Card {card.id} costs gold")
            if len(card.cost) > 4:
                problems.append(f"Card {card.id} costs more than 4 colors")
            if any(count <= 0 for count in card.cost.values()):
                problems.append(f"Card {card.id} has a non-positive cost entry")

    for noble in NOBLES:
        if any(gem not in COLORED_GEMS for gem in noble.requirements):
            problems.append(f"Noble {noble.id} requires a non-colored bonus")

    return problems
