"""
Game State - Canonical state of one match.

Design principles:
- Owned by the engine: the only mutation path is the reducer
- Self-contained: decks, bank and players live on the state, nothing is
  shared between matches
- Serializable: can be saved/loaded for replays
- Cards and nobles are referenced by catalog id
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from copy import deepcopy
from enum import Enum

from ..catalog import COLORED_GEMS, Gem, get_card
from .gems import GemPool


class GamePhase(Enum):
    """High-level match phases. Nothing leaves FINISHED."""
    IN_PROGRESS = "in_progress"
    LAST_ROUND = "last_round"
    FINISHED = "finished"


@dataclass(frozen=True)
class MatchConfig:
    """Rule knobs for a match."""
    target_points: int = 15
    max_gems: int = 10
    max_reserved: int = 3
    display_size: int = 4


@dataclass
class TierRow:
    """
    Display and face-down deck for one tier.

    The display has a fixed number of slots; None marks an empty slot
    once the deck has run out. The top of the deck is index 0.
    """
    tier: int
    display: list[int | None] = field(default_factory=list)
    deck: list[int] = field(default_factory=list)

    @property
    def visible_cards(self) -> list[int]:
        return [card_id for card_id in self.display if card_id is not None]

    def slot_of(self, card_id: int) -> int | None:
        """Index of the display slot holding card_id."""
        for idx, slot in enumerate(self.display):
            if slot == card_id:
                return idx
        return None


@dataclass
class PlayerState:
    """State for a single seat."""
    player_id: str
    name: str
    is_bot: bool = False

    gems: GemPool = field(default_factory=GemPool)
    cards: list[int] = field(default_factory=list)  # permanent collection
    reserved: list[int] = field(default_factory=list)
    blind_reserved: list[int] = field(default_factory=list)  # face-down subset of reserved
    nobles: list[int] = field(default_factory=list)
    points: int = 0

    @property
    def gem_count(self) -> int:
        return self.gems.total()

    def bonuses(self) -> dict[Gem, int]:
        """Permanent discount per colored gem, from owned cards."""
        counts = {gem: 0 for gem in COLORED_GEMS}
        for card_id in self.cards:
            card = get_card(card_id)
            if card:
                counts[card.bonus] += 1
        return counts


@dataclass
class GameState:
    """
    Complete match state at a point in time.

    Turn order is the explicit seat_order list plus the
    current_player_idx cursor.
    """
    game_id: str

    # Seats
    seat_order: list[str] = field(default_factory=list)
    players: dict[str, PlayerState] = field(default_factory=dict)
    current_player_idx: int = 0
    turn_number: int = 0

    # Shared supply
    bank: GemPool = field(default_factory=GemPool)
    gem_supply: GemPool = field(default_factory=GemPool)  # initial totals per kind
    tiers: dict[int, TierRow] = field(default_factory=dict)
    nobles: list[int] = field(default_factory=list)

    # Phase and end-game
    phase: GamePhase = GamePhase.IN_PROGRESS
    last_round: bool = False
    last_round_trigger_idx: int | None = None
    winner: str | None = None
    co_leaders: list[str] = field(default_factory=list)

    # Player who must discard before the turn can advance
    pending_discard: str | None = None

    # History (for replay, audit)
    action_history: list[Any] = field(default_factory=list)

    # Shuffle seed, recorded so the match can be replayed
    random_seed: int = 0

    config: MatchConfig = field(default_factory=MatchConfig)

    @property
    def current_player(self) -> PlayerState:
        """Get the player whose turn it is."""
        return self.players[self.seat_order[self.current_player_idx]]

    @property
    def num_players(self) -> int:
        return len(self.seat_order)

    @property
    def is_finished(self) -> bool:
        return self.phase == GamePhase.FINISHED

    def get_player(self, player_id: str) -> PlayerState | None:
        """Get player by ID."""
        return self.players.get(player_id)

    def ordered_players(self) -> list[PlayerState]:
        """Players in seat order."""
        return [self.players[pid] for pid in self.seat_order]

    def display_cards(self) -> list[int]:
        """All face-up card ids, tier 1 first."""
        cards = []
        for tier in sorted(self.tiers):
            cards.extend(self.tiers[tier].visible_cards)
        return cards

    def all_card_locations(self) -> dict[int, list[str]]:
        """
        Map every card id in play to the places it appears.

        A sound state has exactly one location per card.
        """
        locations: dict[int, list[str]] = {}

        def note(card_id: int, where: str):
            locations.setdefault(card_id, []).append(where)

        for tier, row in self.tiers.items():
            for card_id in row.visible_cards:
                note(card_id, f"display_{tier}")
            for card_id in row.deck:
                note(card_id, f"deck_{tier}")
        for player in self.players.values():
            for card_id in player.reserved:
                note(card_id, f"{player.player_id}_reserved")
            for card_id in player.cards:
                note(card_id, f"{player.player_id}_cards")
        return locations

    def gem_totals(self) -> GemPool:
        """Bank plus every player's holdings."""
        total = self.bank
        for player in self.players.values():
            total = total.plus(player.gems)
        return total

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
