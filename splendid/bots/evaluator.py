"""
Heuristic Evaluator - Scores cards, reservations and gem picks for the bot.

Every score is a weighted linear combination over observable state:
- Noble progress (how far each noble is from the seat's bonuses)
- Card value (points, bonus scarcity, cost)
- Gem value (what the picked gems unlock, bank scarcity, hand cap)
- Opponent threat (nobles an opponent is one card away from)

No search or lookahead. Weights can be adjusted via ScoringWeights.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import math
from typing import TYPE_CHECKING

from ..catalog import COLORED_GEMS, Gem, CardDefinition, NobleDefinition, get_card, get_noble
from ..engine_core.gems import GemPool
from ..engine_core import rules

if TYPE_CHECKING:
    from ..engine_core.state import GameState, PlayerState

logger = logging.getLogger(__name__)


@dataclass
class ScoringWeights:
    """
    Weights for the heuristic evaluator.

    Higher values = more importance.
    """
    # Noble targeting
    noble_target_min_completion: float = 0.3
    noble_card_points: float = 2.0
    noble_card_need: float = 3.0

    # General purchase
    card_points: float = 4.0
    scarcity_cap: int = 3
    noble_progress: float = 0.7
    cheapness_base: int = 10
    cheapness: float = 0.3
    reserved_card_bonus: float = 1.0

    # Gem selection value
    gem_base_value: float = 5.0
    early_gem_bonus: float = 3.0
    per_gem_value: float = 0.8
    reserved_gem_benefit: float = 1.2
    bank_scarcity_cap: int = 4
    bank_scarcity: float = 0.4
    gem_soft_cap: int = 8
    gem_cap_penalty: float = 2.0

    # Gem priorities
    double_take_threshold: float = 1.0
    almost_purchasable_slack: int = 3
    almost_purchasable_points: float = 0.5

    # Reservation
    reserve_points: float = 2.0
    early_reserve_penalty: float = 3.0
    late_game_points: int = 10
    late_reserve_points: float = 0.5
    noble_strategy_bonus: float = 2.0
    high_priority_multiplier: float = 1.5
    medium_priority_multiplier: float = 1.0
    blocking_bonus: float = 3.0
    quick_acquisition_turns: int = 2
    quick_acquisition_base: int = 5
    slow_acquisition_turns: int = 3
    slow_acquisition_cap: int = 3
    gems_per_turn: int = 2
    reserve_gem_cap: int = 9
    reserve_cap_penalty: float = 2.0

    # Reserve thresholds by stage
    reserve_thresholds: dict[str, float] = field(
        default_factory=lambda: {"early": 8.0, "mid": 5.0, "late": 3.0}
    )
    reserve_threshold_step: float = 1.5

    # Blind reserve fallback
    blind_reserve_tier: int = 3
    blind_reserve_max_gold: int = 3
    blind_reserve_max_gem_value: float = 4.0
    blind_reserve_max_reserved: int = 2


@dataclass
class NobleTarget:
    """A noble the seat is already partly on the way to."""
    noble: NobleDefinition
    needed: dict[Gem, int]
    total_needed: int
    completion: float


@dataclass
class NobleStrategy:
    """Progress towards one noble in the pool, with a priority tier."""
    noble: NobleDefinition
    required: dict[Gem, int]
    have: dict[Gem, int]
    completion: float
    priority: str  # "high", "medium" or "low"

    def still_needs(self, gem: Gem) -> bool:
        return self.required.get(gem, 0) > self.have.get(gem, 0)


def game_stage(player: PlayerState) -> str:
    """early: fewer than 2 cards, mid: fewer than 5, late otherwise."""
    if len(player.cards) < 2:
        return "early"
    if len(player.cards) < 5:
        return "mid"
    return "late"


class HeuristicEvaluator:
    """
    Read-only scoring over a game state.

    Used by SplendorBot:
    1. Find noble targets
    2. Score purchasable cards
    3. Compare reserving against taking gems
    4. Rank gem colors
    """

    def __init__(self, weights: ScoringWeights | None = None):
        self.weights = weights or ScoringWeights()

    # =========================================================================
    # Nobles
    # =========================================================================

    def noble_targets(self, state: GameState, player: PlayerState) -> list[NobleTarget]:
        """Nobles at least partly satisfied by the seat's bonuses, closest first."""
        bonuses = player.bonuses()
        targets = []
        for noble_id in state.nobles:
            noble = get_noble(noble_id)
            needed = {}
            for gem, required in noble.requirements.items():
                missing = max(0, required - bonuses.get(gem, 0))
                if missing > 0:
                    needed[gem] = missing
            total_needed = sum(needed.values())
            completion = (noble.total_required - total_needed) / noble.total_required
            targets.append(NobleTarget(noble, needed, total_needed, completion))

        targets = [
            t for t in targets
            if t.completion >= self.weights.noble_target_min_completion
        ]
        targets.sort(key=lambda t: t.completion, reverse=True)
        return targets

    def noble_strategies(self, state: GameState, player: PlayerState) -> list[NobleStrategy]:
        """Progress towards every noble still in the pool."""
        bonuses = player.bonuses()
        strategies = []
        for noble_id in state.nobles:
            noble = get_noble(noble_id)
            have = {gem: bonuses.get(gem, 0) for gem in noble.requirements}
            progress = sum(min(count, have[gem]) for gem, count in noble.requirements.items())
            completion = progress / noble.total_required
            if completion > 0.5:
                priority = "high"
            elif completion > 0.3:
                priority = "medium"
            else:
                priority = "low"
            strategies.append(
                NobleStrategy(noble, dict(noble.requirements), have, completion, priority)
            )
        return strategies

    # =========================================================================
    # Purchases
    # =========================================================================

    def score_noble_card(self, card: CardDefinition, targets: list[NobleTarget]) -> float:
        """Value of a card whose bonus moves the seat towards its noble targets."""
        w = self.weights
        score = card.points * w.noble_card_points
        for target in targets:
            needed = target.needed.get(card.bonus, 0)
            if needed > 0:
                score += needed * w.noble_card_need * target.completion
        return score

    def score_card(self, card: CardDefinition, player: PlayerState, state: GameState) -> float:
        """Overall value of buying a card now."""
        w = self.weights
        bonuses = player.bonuses()

        score = card.points * w.card_points
        score += w.scarcity_cap - min(w.scarcity_cap, bonuses.get(card.bonus, 0))

        current = bonuses.get(card.bonus, 0)
        for noble_id in state.nobles:
            noble = get_noble(noble_id)
            required = noble.requirements.get(card.bonus, 0)
            if required and current < required:
                score += noble.points * ((current + 1) / required) * w.noble_progress

        score += max(0, w.cheapness_base - card.total_cost) * w.cheapness

        if card.id in player.reserved:
            score += w.reserved_card_bonus

        return score

    # =========================================================================
    # Reservations
    # =========================================================================

    def estimate_acquisition(self, card: CardDefinition, player: PlayerState) -> tuple[bool, int]:
        """
        Rough number of turns before the seat could buy a card.

        Assumes about two gems per turn. Returns (within two turns, turns).
        """
        missing = sum(rules.missing_for(player, card).values())
        missing = max(0, missing - player.gems.get(Gem.GOLD))
        turns = math.ceil(missing / self.weights.gems_per_turn)
        return turns <= self.weights.quick_acquisition_turns, turns

    def score_reservation(
        self,
        card: CardDefinition,
        player: PlayerState,
        strategies: list[NobleStrategy],
        state: GameState,
    ) -> float:
        """Value of reserving a visible card."""
        w = self.weights
        score = card.points * w.reserve_points

        if game_stage(player) == "early":
            score -= w.early_reserve_penalty
        if player.points >= w.late_game_points:
            score += card.points * w.late_reserve_points

        bonuses = player.bonuses()
        score += w.scarcity_cap - min(w.scarcity_cap, bonuses.get(card.bonus, 0))

        for strategy in strategies:
            if strategy.priority == "low" or not strategy.still_needs(card.bonus):
                continue
            multiplier = (
                w.high_priority_multiplier if strategy.priority == "high"
                else w.medium_priority_multiplier
            )
            score += w.noble_strategy_bonus * multiplier

        score += self._blocking_score(card, player, state)

        quick, turns = self.estimate_acquisition(card, player)
        if quick:
            score -= max(0, w.quick_acquisition_base - turns)
        elif turns > w.slow_acquisition_turns:
            score += min(w.slow_acquisition_cap, card.points)

        if player.gem_count >= w.reserve_gem_cap:
            score -= w.reserve_cap_penalty

        return score

    def _blocking_score(self, card: CardDefinition, player: PlayerState, state: GameState) -> float:
        """Bonus for denying an opponent the last card they need for a noble."""
        score = 0.0
        for other in state.ordered_players():
            if other.player_id == player.player_id:
                continue
            other_bonuses = other.bonuses()
            for noble_id in state.nobles:
                noble = get_noble(noble_id)
                close = all(
                    other_bonuses.get(gem, 0) >= required - 1
                    for gem, required in noble.requirements.items()
                )
                critical = other_bonuses.get(card.bonus, 0) == noble.requirements.get(card.bonus, 0) - 1
                if close and card.bonus in noble.requirements and critical:
                    score += self.weights.blocking_bonus
        return score

    def reserve_threshold(self, player: PlayerState) -> float:
        w = self.weights
        return w.reserve_thresholds[game_stage(player)] + len(player.reserved) * w.reserve_threshold_step

    # =========================================================================
    # Gems
    # =========================================================================

    def almost_purchasable(
        self, state: GameState, player: PlayerState,
    ) -> list[tuple[CardDefinition, dict[Gem, int]]]:
        """Visible and reserved cards a few gems away, fewest missing first."""
        result = []
        gold = player.gems.get(Gem.GOLD)
        for card_id in state.display_cards() + list(player.reserved):
            card = get_card(card_id)
            missing = rules.missing_for(player, card)
            if sum(missing.values()) <= gold + self.weights.almost_purchasable_slack:
                result.append((card, missing))
        result.sort(key=lambda item: (sum(item[1].values()), -item[0].points))
        return result

    def gem_priorities(
        self,
        state: GameState,
        player: PlayerState,
        targets: list[NobleTarget],
    ) -> dict[Gem, float]:
        """How much the seat wants each colored gem right now."""
        priorities = {gem: 0.0 for gem in COLORED_GEMS}
        for target in targets:
            for gem, count in target.needed.items():
                priorities[gem] += count * (1 + target.completion)
        for card, missing in self.almost_purchasable(state, player):
            for gem, count in missing.items():
                priorities[gem] += count * (1 + card.points * self.weights.almost_purchasable_points)
        return priorities

    def select_gems(
        self,
        state: GameState,
        player: PlayerState,
        targets: list[NobleTarget],
    ) -> GemPool:
        """
        Pick a take-gems selection that keeps the seat within the gem cap.

        Two of the top color if it is wanted enough and the bank allows,
        else the top three colors, else as many top colors as fit.
        """
        max_gems = state.config.max_gems
        if player.gem_count >= max_gems:
            return GemPool()

        max_take = min(rules.MAX_DISTINCT_TAKE, max_gems - player.gem_count)
        priorities = self.gem_priorities(state, player, targets)

        def ranked(colors: list[Gem]) -> list[Gem]:
            return sorted(colors, key=lambda gem: priorities[gem], reverse=True)

        if max_take >= 2:
            doubles = ranked([
                gem for gem in COLORED_GEMS
                if state.bank.get(gem) >= rules.DOUBLE_TAKE_MINIMUM
            ])
            if doubles and priorities[doubles[0]] > self.weights.double_take_threshold:
                return GemPool({doubles[0]: 2})

        available = ranked([gem for gem in COLORED_GEMS if state.bank.get(gem) > 0])

        if max_take >= 3 and len(available) >= 3:
            return GemPool({gem: 1 for gem in available[:3]})

        return GemPool({gem: 1 for gem in available[:max_take]})

    def gem_selection_value(
        self,
        state: GameState,
        player: PlayerState,
        targets: list[NobleTarget],
        selected: GemPool,
    ) -> float:
        """How good taking `selected` is, on the same scale as reservation scores."""
        w = self.weights
        value = w.gem_base_value

        if game_stage(player) == "early":
            value += w.early_gem_bonus

        gem_count = selected.total()
        value += gem_count * w.per_gem_value

        if player.reserved:
            best = 0.0
            for card_id in player.reserved:
                benefit = self._selection_benefit(get_card(card_id), player, selected, w.reserved_gem_benefit)
                best = max(best, benefit)
            value += best

        for target in targets:
            for card_id in state.display_cards():
                card = get_card(card_id)
                if card.bonus in target.needed:
                    value += self._selection_benefit(card, player, selected, target.completion)

        for gem, count in selected.nonzero().items():
            scarcity = w.bank_scarcity_cap - min(w.bank_scarcity_cap, state.bank.get(gem) - count)
            if scarcity > 0:
                value += scarcity * w.bank_scarcity

        value -= max(0, player.gem_count + gem_count - w.gem_soft_cap) * w.gem_cap_penalty
        return value

    def _selection_benefit(
        self,
        card: CardDefinition,
        player: PlayerState,
        selected: GemPool,
        weight: float,
    ) -> float:
        benefit = 0.0
        for gem, count in selected.nonzero().items():
            required = card.cost.get(gem, 0)
            have = player.gems.get(gem)
            if required > have:
                benefit += min(count, required - have) * weight
        return benefit

    def default_selection(self, state: GameState) -> GemPool:
        """Up to three of the most plentiful colors in the bank."""
        available = sorted(
            (gem for gem in COLORED_GEMS if state.bank.get(gem) > 0),
            key=lambda gem: state.bank.get(gem),
            reverse=True,
        )
        return GemPool({gem: 1 for gem in available[:rules.MAX_DISTINCT_TAKE]})

    def choose_discard(self, state: GameState, player: PlayerState) -> GemPool:
        """
        Gems to give back when over the cap.

        Least wanted colors go first, most-held first among equals; gold
        is kept as long as possible.
        """
        excess = player.gem_count - state.config.max_gems
        if excess <= 0:
            return GemPool()

        priorities = self.gem_priorities(state, player, self.noble_targets(state, player))
        held = {gem: player.gems.get(gem) for gem in COLORED_GEMS}
        order = sorted(
            (gem for gem in COLORED_GEMS if held[gem] > 0),
            key=lambda gem: (priorities[gem], -held[gem]),
        )
        order.append(Gem.GOLD)
        held[Gem.GOLD] = player.gems.get(Gem.GOLD)

        discard: dict[Gem, int] = {}
        for gem in order:
            if excess == 0:
                break
            take = min(excess, held[gem])
            if take > 0:
                discard[gem] = take
                excess -= take
        return GemPool(discard)
