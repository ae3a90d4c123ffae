"""
Splendor Bot - Heuristic automa for bot seats.

Decision order, first match wins:
1. Pending discard: give back the least wanted gems
2. Buy an affordable card that moves towards a targeted noble
3. Buy the best affordable card
4. Reserve a visible card if it beats taking gems and clears the
   threshold for the current stage, else maybe reserve blind from tier 3
5. Take gems (two of one color, three distinct, or what is left)
6. Most plentiful colors in the bank

The bot does NOT:
- Search or look ahead
- Keep memory between turns
- Use randomness (same state, same action)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from ..catalog import Gem, get_card
from ..engine_core.action import Action
from ..engine_core.action_generator import legal_actions, legal_actions_summary
from .policy import BotPolicy, BotDecision
from .evaluator import HeuristicEvaluator, game_stage

if TYPE_CHECKING:
    from ..engine_core.state import GameState, PlayerState

logger = logging.getLogger(__name__)


@dataclass
class SplendorBot(BotPolicy):
    """
    Stateless heuristic bot.

    Usage:
        bot = SplendorBot()
        decision = bot.select_action(state, "p2")
        result = apply_action(state, decision.action)
    """
    evaluator: HeuristicEvaluator = field(default_factory=HeuristicEvaluator)

    def select_action(self, state: GameState, player_id: str) -> BotDecision:
        """
        Pick one action for a seat.

        Raises KeyError if the seat is not in the match. The caller is
        expected to ask only for the seat whose turn it is.
        """
        player = state.get_player(player_id)
        if player is None:
            raise KeyError(player_id)

        if state.pending_discard == player_id:
            discard = self.evaluator.choose_discard(state, player)
            logger.debug("%s discards %s", player_id, discard)
            return BotDecision(
                action=Action.discard(player_id, discard),
                explanation=f"Over the gem cap, returning {discard}",
                branch="discard",
            )

        targets = self.evaluator.noble_targets(state, player)
        summary = legal_actions_summary(state, player_id)
        affordable = [get_card(card_id) for card_id in summary.purchasable_card_ids]

        # Noble-directed purchase
        if targets and affordable:
            best_card, best_score = None, 0.0
            for card in affordable:
                if not any(card.bonus in target.needed for target in targets):
                    continue
                score = self.evaluator.score_noble_card(card, targets)
                if best_card is None or score > best_score:
                    best_card, best_score = card, score
            if best_card is not None:
                logger.debug(
                    "%s buys %d towards noble %d (score %.2f)",
                    player_id, best_card.id, targets[0].noble.id, best_score,
                )
                return BotDecision(
                    action=Action.purchase(player_id, best_card.id),
                    explanation=f"Buying card {best_card.id} towards a noble",
                    branch="noble_purchase",
                    evaluated_actions=len(affordable),
                    best_score=best_score,
                )

        # General purchase
        if affordable:
            scored = [(card, self.evaluator.score_card(card, player, state)) for card in affordable]
            scored.sort(key=lambda item: item[1], reverse=True)
            best_card, best_score = scored[0]
            logger.debug("%s buys %d (score %.2f)", player_id, best_card.id, best_score)
            return BotDecision(
                action=Action.purchase(player_id, best_card.id),
                explanation=f"Buying card {best_card.id}",
                branch="purchase",
                evaluated_actions=len(scored),
                best_score=best_score,
            )

        selected = self.evaluator.select_gems(state, player, targets)
        gem_value = self.evaluator.gem_selection_value(state, player, targets, selected)

        # Reserve versus take gems
        if summary.can_reserve:
            decision = self._consider_reserve(state, player, summary.reservable_card_ids, gem_value)
            if decision is not None:
                return decision

        if selected.total() > 0:
            logger.debug("%s takes %s (value %.2f)", player_id, selected, gem_value)
            return BotDecision(
                action=Action.take_gems(player_id, selected),
                explanation=f"Taking {selected}",
                branch="take_gems",
                best_score=gem_value,
            )

        return self._fallback(state, player_id)

    def _consider_reserve(
        self,
        state: GameState,
        player: PlayerState,
        reservable: list[int],
        gem_value: float,
    ) -> BotDecision | None:
        strategies = self.evaluator.noble_strategies(state, player)

        # Tier 3 first, then 2, then 1
        candidates = sorted(reservable, key=lambda card_id: -get_card(card_id).tier)
        scored = [
            (card_id, self.evaluator.score_reservation(get_card(card_id), player, strategies, state))
            for card_id in candidates
        ]
        scored.sort(key=lambda item: item[1], reverse=True)
        threshold = self.evaluator.reserve_threshold(player)

        if scored:
            card_id, score = scored[0]
            if score > gem_value and score > threshold:
                logger.debug(
                    "%s reserves %d (score %.2f, gems %.2f, threshold %.2f)",
                    player.player_id, card_id, score, gem_value, threshold,
                )
                return BotDecision(
                    action=Action.reserve(player.player_id, card_id),
                    explanation=f"Reserving card {card_id}",
                    branch="reserve",
                    evaluated_actions=len(scored),
                    best_score=score,
                )

        w = self.evaluator.weights
        blind_row = state.tiers.get(w.blind_reserve_tier)
        if (
            blind_row is not None and blind_row.deck
            and player.gems.get(Gem.GOLD) < w.blind_reserve_max_gold
            and game_stage(player) != "early"
            and gem_value < w.blind_reserve_max_gem_value
            and len(player.reserved) < w.blind_reserve_max_reserved
        ):
            logger.debug("%s reserves blind from tier %d", player.player_id, w.blind_reserve_tier)
            return BotDecision(
                action=Action.reserve_blind(player.player_id, w.blind_reserve_tier),
                explanation=f"Reserving blind from tier {w.blind_reserve_tier}",
                branch="reserve_blind",
                best_score=gem_value,
            )
        return None

    def _fallback(self, state: GameState, player_id: str) -> BotDecision:
        """Most plentiful colors, or any legal action when the bank is dry."""
        selection = self.evaluator.default_selection(state)
        if selection.total() > 0:
            return BotDecision(
                action=Action.take_gems(player_id, selection),
                explanation=f"Taking the most plentiful colors {selection}",
                branch="default_gems",
            )

        actions = legal_actions(state, player_id)
        if actions:
            return BotDecision(
                action=actions[0],
                explanation="Nothing to take, using first legal action",
                branch="first_legal",
                evaluated_actions=1,
            )

        logger.warning("%s has no legal action in game %s", player_id, state.game_id)
        return BotDecision(
            action=Action.take_gems(player_id, {}),
            explanation="No legal action",
            branch="none",
        )

    def get_name(self) -> str:
        return "SplendorBot"


_DEFAULT_BOT = SplendorBot()


def choose_action(state: GameState, seat_id: str) -> Action:
    """Convenience function: the heuristic bot's action for a seat."""
    return _DEFAULT_BOT.select_action(state, seat_id).action


def disconnected_seat_action(state: GameState, seat_id: str) -> Action | None:
    """
    Action to play for a seat whose player has dropped.

    Returns None when the match is over or the seat has nothing to do.
    """
    if state.is_finished:
        return None
    if state.pending_discard is not None:
        if state.pending_discard != seat_id:
            return None
    elif state.current_player.player_id != seat_id:
        return None
    return choose_action(state, seat_id)
