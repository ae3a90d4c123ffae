"""
Pytest fixtures for Splendid tests.
"""

import pytest

from ..catalog import cards_for_tier, get_card
from ..engine_core.gems import GemPool
from ..engine_core.state import GameState, TierRow, MatchConfig
from ..engine_core.setup import initialize_match


# Displays with no card cheap enough to matter unless a test says so
QUIET_DISPLAYS = {
    1: [108, 115, 123, 131],
    2: [201, 202, 203, 204],
    3: [301, 305, 309, 313],
}


def build_state(
    num_players: int = 2,
    displays: dict[int, list[int | None]] | None = None,
    nobles: list[int] | None = None,
    bank: GemPool | None = None,
    target_points: int = 15,
    seed: int = 7,
) -> GameState:
    """
    A match in its opening position with selected parts pinned.

    Seats are p1..pN. A pinned display gets a deck of every other card
    of its tier, lowest id on top.
    """
    seats = [(f"p{i + 1}", f"Player {i + 1}") for i in range(num_players)]
    state = initialize_match(
        seats,
        random_seed=seed,
        config=MatchConfig(target_points=target_points),
        game_id="test_game",
    )
    for tier, display in (displays or {}).items():
        shown = [card_id for card_id in display if card_id is not None]
        deck = [card.id for card in cards_for_tier(tier) if card.id not in shown]
        state.tiers[tier] = TierRow(tier=tier, display=list(display), deck=deck)
    if nobles is not None:
        state.nobles = list(nobles)
    if bank is not None:
        state.bank = bank
        state.gem_supply = bank
    return state


def give_cards(state: GameState, player_id: str, card_ids: list[int]):
    """Move cards into a player's collection, out of decks and displays."""
    player = state.get_player(player_id)
    for card_id in card_ids:
        row = state.tiers[get_card(card_id).tier]
        if card_id in row.deck:
            row.deck.remove(card_id)
        slot = row.slot_of(card_id)
        if slot is not None:
            row.display[slot] = row.deck.pop(0) if row.deck else None
        player.cards.append(card_id)
        player.points += get_card(card_id).points


def give_gems(state: GameState, player_id: str, **gems: int):
    """Move gems from the bank to a player, keeping the totals intact."""
    pool = GemPool.from_mapping(gems)
    state.bank = state.bank.minus(pool)
    player = state.get_player(player_id)
    player.gems = player.gems.plus(pool)


@pytest.fixture
def two_player_state() -> GameState:
    """Seeded 2-player opening position."""
    return initialize_match([("p1", "Alice"), ("p2", "Bob")], random_seed=42)


@pytest.fixture
def quiet_state() -> GameState:
    """2-player state with pinned displays and no nobles."""
    return build_state(displays=QUIET_DISPLAYS, nobles=[])


@pytest.fixture
def four_player_state() -> GameState:
    """4-player state with pinned displays and no nobles."""
    return build_state(num_players=4, displays=QUIET_DISPLAYS, nobles=[])
