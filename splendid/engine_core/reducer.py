"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> ActionResult with a new state
- Validates before applying; a failure never touches the input state
- One action runs to completion: validate -> mutate -> nobles -> end-game
- Turn only advances once the action is fully resolved
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from ..catalog import Gem, get_card, get_noble
from .state import GameState, GamePhase, PlayerState
from .action import Action, ActionType, ActionResult, ErrorCode
from .gems import GemPool
from . import rules

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error.
        """
        failure = self._validate_action(state, action)
        if failure:
            logger.debug(
                "Rejected %s for %s: %s",
                action.type_name, action.payload.player_id, failure.error_code.value,
            )
            return failure

        handler = self._get_handler(action.action_type)
        result = handler(state, action)
        if not result.success:
            logger.debug(
                "Rejected %s for %s: %s",
                action.type_name, action.payload.player_id, result.error_code.value,
            )
            return result

        new_state = result.new_state
        new_state.action_history.append(action)
        logger.debug("Applied %s for %s", action.describe(), action.payload.player_id)

        if new_state.pending_discard is None:
            result.state_changes.extend(self._finish_turn(new_state))

        return result

    def _validate_action(self, state: GameState, action: Action) -> ActionResult | None:
        """
        Checks shared by every action type.

        Returns a failure result if invalid, None if the action may proceed
        to its handler.
        """
        if state.phase == GamePhase.FINISHED:
            return ActionResult.failure(
                "Game is over - no actions allowed",
                ErrorCode.GAME_ALREADY_FINISHED,
                winner=state.winner,
            )

        if self._get_handler(action.action_type) is None:
            return ActionResult.failure(
                f"Unknown action type: {action.type_name}",
                ErrorCode.UNKNOWN_ACTION_TYPE,
                action_type=action.type_name,
            )

        player_id = action.payload.player_id
        if state.get_player(player_id) is None:
            return ActionResult.failure(
                f"Player {player_id} not found",
                ErrorCode.PLAYER_NOT_FOUND,
                player_id=player_id,
            )

        if player_id != state.current_player.player_id:
            return ActionResult.failure(
                f"Not {player_id}'s turn",
                ErrorCode.NOT_YOUR_TURN,
                player_id=player_id,
                current_player_id=state.current_player.player_id,
            )

        if state.pending_discard is not None and action.action_type != ActionType.DISCARD_GEMS:
            player = state.get_player(player_id)
            return ActionResult.failure(
                f"{player.name} holds {player.gem_count} gems and must discard first",
                ErrorCode.GEM_CAP_EXCEEDED,
                gem_count=player.gem_count,
                max_gems=state.config.max_gems,
            )

        return None

    def _get_handler(self, action_type: ActionType | str):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.TAKE_GEMS: self._handle_take_gems,
            ActionType.PURCHASE_CARD: self._handle_purchase,
            ActionType.RESERVE_CARD: self._handle_reserve,
            ActionType.DISCARD_GEMS: self._handle_discard,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_take_gems(self, state: GameState, action: Action) -> ActionResult:
        """Move the selected gems from the bank to the player."""
        selection = action.payload.gems
        problem = rules.check_gem_selection(selection, state.bank)
        if problem:
            code, message = problem
            return ActionResult.failure(
                message, code, selection=selection.to_dict() if selection else {},
            )

        new_state = state.clone()
        player = new_state.get_player(action.payload.player_id)
        new_state.bank = new_state.bank.minus(selection)
        player.gems = player.gems.plus(selection)

        changes = [f"{player.name} took {_format_gems(selection)}"]
        changes.extend(self._check_gem_cap(new_state, player))
        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_purchase(self, state: GameState, action: Action) -> ActionResult:
        """Buy a card from the display or the player's own reserve."""
        card_id = action.payload.card_id
        player = state.get_player(action.payload.player_id)

        card = get_card(card_id) if card_id is not None else None
        from_reserve = card_id in player.reserved
        if card is None or (not from_reserve and _find_display_slot(state, card_id) is None):
            return ActionResult.failure(
                f"Card {card_id} is not on display or in your reserve",
                ErrorCode.CARD_NOT_FOUND,
                card_id=card_id,
            )

        payment = rules.payment_for(player, card)
        if payment is None:
            return ActionResult.failure(
                f"Not enough resources to purchase card {card_id}",
                ErrorCode.INSUFFICIENT_RESOURCES,
                card_id=card_id,
                missing=_format_missing(rules.missing_for(player, card)),
                gold=player.gems.get(Gem.GOLD),
            )

        new_state = state.clone()
        player = new_state.get_player(player.player_id)
        player.gems = player.gems.minus(payment)
        new_state.bank = new_state.bank.plus(payment)

        if from_reserve:
            player.reserved.remove(card_id)
            if card_id in player.blind_reserved:
                player.blind_reserved.remove(card_id)
        else:
            self._take_from_display(new_state, card_id)

        player.cards.append(card_id)
        player.points += card.points

        changes = [f"{player.name} purchased card {card_id} paying {_format_gems(payment)}"]
        awarded = self._award_nobles(new_state, player)
        for noble_id in awarded:
            noble = get_noble(noble_id)
            changes.append(f"{noble.name} visited {player.name} (+{noble.points})")

        return ActionResult.success_with_state(new_state, changes=changes, nobles_awarded=awarded)

    def _handle_reserve(self, state: GameState, action: Action) -> ActionResult:
        """Reserve a visible card, or the top card of a tier deck."""
        player = state.get_player(action.payload.player_id)
        if len(player.reserved) >= state.config.max_reserved:
            return ActionResult.failure(
                f"Cannot reserve more than {state.config.max_reserved} cards",
                ErrorCode.RESERVE_LIMIT_REACHED,
                reserved=len(player.reserved),
            )

        card_id = action.payload.card_id
        tier = action.payload.tier

        if card_id is None:
            row = state.tiers.get(tier) if tier is not None else None
            if row is None or not row.deck:
                return ActionResult.failure(
                    f"No tier {tier} deck to reserve from",
                    ErrorCode.SLOT_UNAVAILABLE,
                    tier=tier,
                )
        elif _find_display_slot(state, card_id) is None:
            return ActionResult.failure(
                f"Card {card_id} is not on display",
                ErrorCode.CARD_NOT_FOUND,
                card_id=card_id,
            )

        new_state = state.clone()
        player = new_state.get_player(player.player_id)

        if card_id is None:
            reserved_id = new_state.tiers[tier].deck.pop(0)
            # Face down: only the owner sees it
            player.blind_reserved.append(reserved_id)
            changes = [f"{player.name} reserved a card from the tier {tier} deck"]
        else:
            reserved_id = card_id
            self._take_from_display(new_state, card_id)
            changes = [f"{player.name} reserved card {card_id}"]

        player.reserved.append(reserved_id)

        if new_state.bank.get(Gem.GOLD) > 0:
            gold = GemPool({Gem.GOLD: 1})
            new_state.bank = new_state.bank.minus(gold)
            player.gems = player.gems.plus(gold)
            changes.append(f"{player.name} took 1 gold")

        changes.extend(self._check_gem_cap(new_state, player))
        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_discard(self, state: GameState, action: Action) -> ActionResult:
        """Return gems to the bank to resolve a pending discard."""
        player = state.get_player(action.payload.player_id)
        if state.pending_discard != player.player_id:
            return ActionResult.failure(
                "No discard is pending",
                ErrorCode.NO_PENDING_DISCARD,
            )

        selection = action.payload.gems
        if selection is None or selection.total() == 0:
            return ActionResult.failure(
                "No gems selected to discard",
                ErrorCode.INVALID_GEM_SELECTION_SHAPE,
            )

        if not player.gems.covers(selection):
            return ActionResult.failure(
                "Cannot discard more gems than held",
                ErrorCode.INSUFFICIENT_RESOURCES,
                selection=selection.to_dict(),
                held=player.gems.to_dict(),
            )

        remaining = player.gem_count - selection.total()
        if remaining > state.config.max_gems:
            return ActionResult.failure(
                f"Discard leaves {remaining} gems, limit is {state.config.max_gems}",
                ErrorCode.GEM_CAP_EXCEEDED,
                gem_count=remaining,
                max_gems=state.config.max_gems,
            )

        new_state = state.clone()
        player = new_state.get_player(player.player_id)
        player.gems = player.gems.minus(selection)
        new_state.bank = new_state.bank.plus(selection)
        new_state.pending_discard = None

        return ActionResult.success_with_state(
            new_state,
            changes=[f"{player.name} discarded {_format_gems(selection)}"],
        )

    # =========================================================================
    # Shared steps
    # =========================================================================

    def _check_gem_cap(self, state: GameState, player: PlayerState) -> list[str]:
        """Park the state in pending discard if the player is over the cap."""
        if player.gem_count > state.config.max_gems:
            state.pending_discard = player.player_id
            return [
                f"{player.name} holds {player.gem_count} gems and must discard "
                f"{player.gem_count - state.config.max_gems}"
            ]
        return []

    def _take_from_display(self, state: GameState, card_id: int):
        """Remove a card from its display slot and refill the slot from the deck."""
        tier, slot = _find_display_slot(state, card_id)
        row = state.tiers[tier]
        row.display[slot] = row.deck.pop(0) if row.deck else None

    def _award_nobles(self, state: GameState, player: PlayerState) -> list[int]:
        """Give the acting player every noble their bonuses now satisfy."""
        awarded = rules.eligible_nobles(player, state.nobles)
        for noble_id in awarded:
            state.nobles.remove(noble_id)
            player.nobles.append(noble_id)
            player.points += get_noble(noble_id).points
        return awarded

    def _finish_turn(self, state: GameState) -> list[str]:
        """
        End-game check, then rotate the turn.

        The last round starts when the acting player reaches the target.
        It ends when the next seat would be the seat that triggered it.
        """
        changes = []
        player = state.current_player

        if not state.last_round and player.points >= state.config.target_points:
            state.last_round = True
            state.last_round_trigger_idx = state.current_player_idx
            state.phase = GamePhase.LAST_ROUND
            logger.info(
                "Game %s: %s reached %d points, last round begins",
                state.game_id, player.player_id, player.points,
            )
            changes.append(f"{player.name} reached {player.points} points - last round")

        next_idx = (state.current_player_idx + 1) % state.num_players

        if state.last_round and next_idx == state.last_round_trigger_idx:
            winner, leaders = rules.determine_winner(state.ordered_players())
            state.phase = GamePhase.FINISHED
            state.winner = winner
            state.co_leaders = leaders
            logger.info("Game %s finished, winner: %s", state.game_id, winner or "tied")
            if winner:
                changes.append(f"Game over. {state.get_player(winner).name} wins")
            else:
                changes.append(f"Game over. Tied: {', '.join(leaders)}")
            return changes

        state.current_player_idx = next_idx
        state.turn_number += 1
        return changes


def _find_display_slot(state: GameState, card_id: int | None) -> tuple[int, int] | None:
    """(tier, slot) of a face-up card."""
    if card_id is None:
        return None
    for tier, row in state.tiers.items():
        slot = row.slot_of(card_id)
        if slot is not None:
            return tier, slot
    return None


def _format_gems(pool: GemPool) -> str:
    parts = [f"{count} {gem.value}" for gem, count in pool.nonzero().items()]
    return ", ".join(parts) if parts else "nothing"


def _format_missing(missing: dict[Gem, int]) -> dict[str, int]:
    return {gem.value: count for gem, count in missing.items()}


def apply_action(state: GameState, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer()
    return reducer.apply(state, action)
