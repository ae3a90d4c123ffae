"""
Match Setup - Creates the initial game state.

This module handles:
- Building the bank for the player count
- Shuffling each tier deck with a seed for determinism
- Dealing the four-card displays
- Drawing players + 1 nobles
- Replaying a recorded action log from the same seed

Setup follows the base game rules for 2-4 players.
"""

from __future__ import annotations
import logging
import random
import uuid
from typing import Iterable, Sequence

from ..catalog import NOBLES, TIERS, cards_for_tier
from .state import GameState, PlayerState, TierRow, MatchConfig
from .action import Action
from .reducer import apply_action
from . import rules

logger = logging.getLogger(__name__)

# (player_id, name) or (player_id, name, is_bot)
SeatSpec = Sequence


class ReplayError(Exception):
    """A recorded action could not be re-applied during replay."""

    def __init__(self, index: int, action: Action, error: str | None):
        super().__init__(f"Action {index} ({action.describe()}) failed on replay: {error}")
        self.index = index
        self.action = action
        self.error = error


def initialize_match(
    seats: Iterable[SeatSpec],
    random_seed: int | None = None,
    config: MatchConfig | None = None,
    game_id: str | None = None,
) -> GameState:
    """
    Set up a new match.

    Args:
        seats: Ordered seats, each (player_id, name) or (player_id, name, is_bot).
            The first seat moves first.
        random_seed: Seed for deterministic shuffling (generated if omitted,
            and always recorded on the state)
        config: Rule knobs (defaults to the standard game)
        game_id: Match id (generated if omitted)

    Returns:
        Initial GameState ready for play
    """
    players = _create_players(seats)
    if len(players) < rules.MIN_PLAYERS or len(players) > rules.MAX_PLAYERS:
        raise ValueError(
            f"Matches support {rules.MIN_PLAYERS}-{rules.MAX_PLAYERS} players, got {len(players)}"
        )

    if random_seed is None:
        random_seed = random.SystemRandom().randrange(2**31)
    rng = random.Random(random_seed)
    config = config or MatchConfig()

    tiers = _create_tiers(rng, config.display_size)
    nobles = _draw_nobles(rng, len(players) + 1)
    bank = rules.initial_bank(len(players))

    state = GameState(
        game_id=game_id or uuid.uuid4().hex,
        seat_order=[p.player_id for p in players],
        players={p.player_id: p for p in players},
        current_player_idx=0,
        turn_number=0,
        bank=bank,
        gem_supply=bank,
        tiers=tiers,
        nobles=nobles,
        random_seed=random_seed,
        config=config,
    )

    logger.info(
        "Initialized game %s for %d players (seed %d)",
        state.game_id, len(players), random_seed,
    )
    return state


def replay_match(
    seats: Iterable[SeatSpec],
    random_seed: int,
    actions: Iterable[Action],
    config: MatchConfig | None = None,
    game_id: str | None = None,
) -> GameState:
    """
    Rebuild a match from its seed and action log.

    Raises ReplayError if any recorded action is rejected.
    """
    state = initialize_match(seats, random_seed=random_seed, config=config, game_id=game_id)
    for index, action in enumerate(actions):
        result = apply_action(state, action)
        if not result.success:
            raise ReplayError(index, action, result.error)
        state = result.new_state
    return state


def seats_of(state: GameState) -> list[tuple[str, str, bool]]:
    """Seat specs of an existing match, for replaying it."""
    return [(p.player_id, p.name, p.is_bot) for p in state.ordered_players()]


def _create_players(seats: Iterable[SeatSpec]) -> list[PlayerState]:
    """Create player states, rejecting duplicate ids."""
    players = []
    seen = set()
    for seat in seats:
        if len(seat) < 2:
            raise ValueError(f"Seat must be (player_id, name[, is_bot]), got {seat!r}")
        player_id, name = str(seat[0]), str(seat[1])
        is_bot = bool(seat[2]) if len(seat) > 2 else False
        if player_id in seen:
            raise ValueError(f"Duplicate player id: {player_id}")
        seen.add(player_id)
        players.append(PlayerState(player_id=player_id, name=name, is_bot=is_bot))
    return players


def _create_tiers(rng: random.Random, display_size: int) -> dict[int, TierRow]:
    """Shuffle each tier and deal its display."""
    tiers = {}
    for tier in TIERS:
        deck = [card.id for card in cards_for_tier(tier)]
        rng.shuffle(deck)
        display: list[int | None] = deck[:display_size]
        display += [None] * (display_size - len(display))
        tiers[tier] = TierRow(tier=tier, display=display, deck=deck[display_size:])
    return tiers


def _draw_nobles(rng: random.Random, count: int) -> list[int]:
    noble_ids = [noble.id for noble in NOBLES]
    rng.shuffle(noble_ids)
    return noble_ids[:count]
