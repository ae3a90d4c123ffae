"""
Catalog - Static, immutable definitions of cards, nobles and gem kinds.

Pure data. The engine refers to cards and nobles by id and looks the
definitions up here.
"""

from .gems import Gem, ALL_GEMS, COLORED_GEMS, parse_gem
from .cards import (
    CardDefinition,
    NobleDefinition,
    TIER_1_CARDS,
    TIER_2_CARDS,
    TIER_3_CARDS,
    NOBLES,
    ALL_CARDS,
    CARDS_BY_TIER,
    TIERS,
    get_card,
    get_noble,
    cards_for_tier,
    validate_catalog,
)

__all__ = [
    "Gem",
    "ALL_GEMS",
    "COLORED_GEMS",
    "parse_gem",
    "CardDefinition",
    "NobleDefinition",
    "TIER_1_CARDS",
    "TIER_2_CARDS",
    "TIER_3_CARDS",
    "NOBLES",
    "ALL_CARDS",
    "CARDS_BY_TIER",
    "TIERS",
    "get_card",
    "get_noble",
    "cards_for_tier",
    "validate_catalog",
]
