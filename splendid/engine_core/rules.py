"""
Rules - Pure, read-only rule helpers.

Shared by the reducer (validation), the action generator (enumeration)
and the bots (scoring). Nothing here mutates state.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Iterable

from ..catalog import (
    COLORED_GEMS,
    CardDefinition,
    Gem,
    get_card,
    get_noble,
)
from .action import ErrorCode
from .gems import GemPool

if TYPE_CHECKING:
    from .state import PlayerState


MIN_PLAYERS = 2
MAX_PLAYERS = 4

# Colored gems per kind in the bank, by player count
BANK_SIZE_BY_PLAYERS = {2: 4, 3: 5, 4: 7}
GOLD_SUPPLY = 5

# Taking two of one color needs this many in the bank
DOUBLE_TAKE_MINIMUM = 4
MAX_DISTINCT_TAKE = 3


def initial_bank(num_players: int) -> GemPool:
    """Bank contents at the start of a match."""
    if num_players not in BANK_SIZE_BY_PLAYERS:
        raise ValueError(
            f"Matches support {MIN_PLAYERS}-{MAX_PLAYERS} players, got {num_players}"
        )
    return GemPool.uniform(BANK_SIZE_BY_PLAYERS[num_players], gold=GOLD_SUPPLY)


def check_gem_selection(
    selection: GemPool | None,
    bank: GemPool,
) -> tuple[ErrorCode, str] | None:
    """
    Validate the shape of a take-gems selection against the bank.

    Legal shapes:
    - exactly one color with count 2, bank holds at least 4 of it
    - 1 to 3 distinct colors with count 1 each, all present in the bank

    Returns (error_code, message) if illegal, None if legal.
    """
    if selection is None or selection.total() == 0:
        return ErrorCode.INVALID_GEM_SELECTION_SHAPE, "No gems selected"

    if selection.get(Gem.GOLD) > 0:
        return ErrorCode.INVALID_GEM_SELECTION_SHAPE, "Gold cannot be taken directly"

    chosen = selection.nonzero()

    if len(chosen) == 1:
        gem, count = next(iter(chosen.items()))
        if count == 2:
            if bank.get(gem) < DOUBLE_TAKE_MINIMUM:
                return (
                    ErrorCode.INSUFFICIENT_RESOURCES,
                    f"Taking two {gem.value} needs at least {DOUBLE_TAKE_MINIMUM} in the bank",
                )
            return None

    if any(count != 1 for count in chosen.values()):
        return (
            ErrorCode.INVALID_GEM_SELECTION_SHAPE,
            "Take two of one color or one each of up to three colors",
        )

    if len(chosen) > MAX_DISTINCT_TAKE:
        return (
            ErrorCode.INVALID_GEM_SELECTION_SHAPE,
            f"At most {MAX_DISTINCT_TAKE} distinct colors can be taken",
        )

    for gem in chosen:
        if bank.get(gem) < 1:
            return ErrorCode.INSUFFICIENT_RESOURCES, f"No {gem.value} left in the bank"

    return None


def compute_payment(
    cost: dict[Gem, int],
    gems: GemPool,
    bonuses: dict[Gem, int],
) -> GemPool | None:
    """
    Work out what a player pays for a cost.

    Bonuses reduce each color one-for-one; the player's gems of that color
    cover what is left, and any shortfall is paid in gold.

    Returns the gems paid (gold included), or None if unaffordable.
    """
    paid = {gem: 0 for gem in COLORED_GEMS}
    gold_needed = 0

    for gem in COLORED_GEMS:
        owed = max(0, cost.get(gem, 0) - bonuses.get(gem, 0))
        if owed == 0:
            continue
        from_gems = min(owed, gems.get(gem))
        paid[gem] = from_gems
        gold_needed += owed - from_gems

    if gold_needed > gems.get(Gem.GOLD):
        return None

    paid[Gem.GOLD] = gold_needed
    return GemPool(paid)


def payment_for(player: PlayerState, card: CardDefinition) -> GemPool | None:
    return compute_payment(card.cost, player.gems, player.bonuses())


def can_afford(player: PlayerState, card: CardDefinition) -> bool:
    return payment_for(player, card) is not None


def missing_for(player: PlayerState, card: CardDefinition) -> dict[Gem, int]:
    """
    Colored gems still missing for a card after bonuses and held gems.

    Gold is not applied here.
    """
    bonuses = player.bonuses()
    missing = {}
    for gem, required in card.cost.items():
        have = bonuses.get(gem, 0) + player.gems.get(gem)
        if required > have:
            missing[gem] = required - have
    return missing


def meets_requirements(bonuses: dict[Gem, int], requirements: dict[Gem, int]) -> bool:
    return all(bonuses.get(gem, 0) >= count for gem, count in requirements.items())


def eligible_nobles(player: PlayerState, noble_ids: Iterable[int]) -> list[int]:
    """Nobles in the pool whose requirements the player's bonuses meet."""
    bonuses = player.bonuses()
    eligible = []
    for noble_id in noble_ids:
        noble = get_noble(noble_id)
        if noble and meets_requirements(bonuses, noble.requirements):
            eligible.append(noble_id)
    return eligible


def card_points(card_ids: Iterable[int]) -> int:
    total = 0
    for card_id in card_ids:
        card = get_card(card_id)
        if card:
            total += card.points
    return total


def determine_winner(players: Iterable[PlayerState]) -> tuple[str | None, list[str]]:
    """
    Pick the winner at the end of the match.

    Most points wins; equal points go to the player with fewer purchased
    cards. If that still leaves a tie there is no winner.

    Returns (winner_id or None, ids of the players still tied at the top).
    """
    players = list(players)
    if not players:
        return None, []

    top_points = max(p.points for p in players)
    leaders = [p for p in players if p.points == top_points]

    fewest_cards = min(len(p.cards) for p in leaders)
    leaders = [p for p in leaders if len(p.cards) == fewest_cards]

    if len(leaders) == 1:
        return leaders[0].player_id, [leaders[0].player_id]
    return None, [p.player_id for p in leaders]
