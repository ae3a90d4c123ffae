"""
Action Generator - Generates all legal actions from a game state.

The action generator is used by:
1. Bots to enumerate possible moves
2. UI to show available actions
3. Validation (is this action in legal_actions?)

Design: Generates Action objects, not just action types.
This ensures all generated actions are fully specified.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from itertools import combinations

from ..catalog import COLORED_GEMS, Gem, get_card
from .state import GameState, GamePhase
from .action import Action, ActionType
from .gems import GemPool
from . import rules


@dataclass
class LegalActionsSummary:
    """
    What a seat can do right now, without the full action list.

    Used by the bot and by UI hints.
    """
    player_id: str
    is_turn: bool = False
    pending_discard: bool = False
    discard_required: int = 0
    purchasable_card_ids: list[int] = field(default_factory=list)
    reservable_card_ids: list[int] = field(default_factory=list)
    blind_reserve_tiers: list[int] = field(default_factory=list)
    takeable_colors: list[Gem] = field(default_factory=list)
    double_take_colors: list[Gem] = field(default_factory=list)

    @property
    def can_take_double(self) -> bool:
        return bool(self.double_take_colors)

    @property
    def can_reserve(self) -> bool:
        return bool(self.reservable_card_ids or self.blind_reserve_tiers)


class ActionGenerator:
    """Generates legal actions for a seat."""

    def generate(self, state: GameState, player_id: str | None = None) -> list[Action]:
        """
        Generate all legal actions for a player (default: current player).

        Returns an empty list when the match is over or it is not that
        player's turn. While a discard is pending only discards are legal.
        """
        if state.phase == GamePhase.FINISHED:
            return []

        player_id = player_id or state.current_player.player_id
        if player_id != state.current_player.player_id:
            return []

        if state.pending_discard == player_id:
            return self._generate_discard_actions(state, player_id)

        actions = []
        actions.extend(self._generate_take_actions(state, player_id))
        actions.extend(self._generate_purchase_actions(state, player_id))
        actions.extend(self._generate_reserve_actions(state, player_id))
        return actions

    def summarize(self, state: GameState, player_id: str) -> LegalActionsSummary:
        """Summarize legal options for a player."""
        summary = LegalActionsSummary(player_id=player_id)
        player = state.get_player(player_id)
        if player is None or state.phase == GamePhase.FINISHED:
            return summary

        summary.is_turn = player_id == state.current_player.player_id
        if state.pending_discard == player_id:
            summary.pending_discard = True
            summary.discard_required = player.gem_count - state.config.max_gems
            return summary

        summary.purchasable_card_ids = self._purchasable_cards(state, player_id)
        if len(player.reserved) < state.config.max_reserved:
            summary.reservable_card_ids = state.display_cards()
            summary.blind_reserve_tiers = [
                tier for tier, row in sorted(state.tiers.items()) if row.deck
            ]
        summary.takeable_colors = [gem for gem in COLORED_GEMS if state.bank.get(gem) > 0]
        summary.double_take_colors = [
            gem for gem in COLORED_GEMS
            if state.bank.get(gem) >= rules.DOUBLE_TAKE_MINIMUM
        ]
        return summary

    def _generate_take_actions(self, state: GameState, player_id: str) -> list[Action]:
        """One action per legal take shape: doubles, then 1-3 distinct colors."""
        actions = []
        available = [gem for gem in COLORED_GEMS if state.bank.get(gem) > 0]

        for gem in available:
            if state.bank.get(gem) >= rules.DOUBLE_TAKE_MINIMUM:
                actions.append(Action.take_gems(player_id, GemPool({gem: 2})))

        for size in range(min(rules.MAX_DISTINCT_TAKE, len(available)), 0, -1):
            for colors in combinations(available, size):
                actions.append(
                    Action.take_gems(player_id, GemPool({gem: 1 for gem in colors}))
                )
        return actions

    def _purchasable_cards(self, state: GameState, player_id: str) -> list[int]:
        player = state.get_player(player_id)
        candidates = state.display_cards() + list(player.reserved)
        return [
            card_id for card_id in candidates
            if rules.can_afford(player, get_card(card_id))
        ]

    def _generate_purchase_actions(self, state: GameState, player_id: str) -> list[Action]:
        return [
            Action.purchase(player_id, card_id)
            for card_id in self._purchasable_cards(state, player_id)
        ]

    def _generate_reserve_actions(self, state: GameState, player_id: str) -> list[Action]:
        player = state.get_player(player_id)
        if len(player.reserved) >= state.config.max_reserved:
            return []

        actions = [Action.reserve(player_id, card_id) for card_id in state.display_cards()]
        for tier, row in sorted(state.tiers.items()):
            if row.deck:
                actions.append(Action.reserve_blind(player_id, tier))
        return actions

    def _generate_discard_actions(self, state: GameState, player_id: str) -> list[Action]:
        """
        Every way to return exactly the excess gems.

        Discarding more than the excess is also legal but never useful,
        so only exact discards are listed.
        """
        player = state.get_player(player_id)
        excess = player.gem_count - state.config.max_gems
        if excess <= 0:
            return []

        # Expand holdings to a multiset of tokens and pick distinct combinations
        tokens = []
        for gem, count in player.gems.nonzero().items():
            tokens.extend([gem] * count)

        seen = set()
        actions = []
        for combo in combinations(tokens, excess):
            if combo in seen:
                continue
            seen.add(combo)
            counts: dict[Gem, int] = {}
            for gem in combo:
                counts[gem] = counts.get(gem, 0) + 1
            actions.append(Action.discard(player_id, GemPool(counts)))
        return actions


def legal_actions(state: GameState, player_id: str | None = None) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    return ActionGenerator().generate(state, player_id)


def legal_actions_summary(state: GameState, player_id: str) -> LegalActionsSummary:
    """Convenience function to summarize a player's options."""
    return ActionGenerator().summarize(state, player_id)


def is_legal(state: GameState, action: Action) -> bool:
    """Check if an action matches one of the generated legal actions."""
    if not isinstance(action.action_type, ActionType):
        return False
    for a in legal_actions(state, action.payload.player_id):
        if (
            a.action_type == action.action_type
            and a.payload.card_id == action.payload.card_id
            and a.payload.tier == action.payload.tier
            and a.payload.gems == action.payload.gems
        ):
            return True
    return False
