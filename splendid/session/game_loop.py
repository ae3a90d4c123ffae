"""
Game Loop - Drives bot seats through the engine.

The loop:
1. Look at the seat to act
2. If it has a bot, ask it for an action
3. Apply the action through the reducer
4. Repeat until a human seat is up, the match ends, or the cap is hit

A rejected bot action stops the loop; it never skips a seat.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import TYPE_CHECKING

from ..engine_core.reducer import apply_action

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action
    from ..bots import BotPolicy

logger = logging.getLogger(__name__)

# Well above any real match length
DEFAULT_MAX_ACTIONS = 1000


class LoopState(Enum):
    """Why the loop stopped."""
    WAITING_HUMAN_ACTION = "waiting_human_action"
    GAME_OVER = "game_over"
    ACTION_LIMIT = "action_limit"
    BOT_ERROR = "bot_error"


@dataclass
class TurnResult:
    """
    Result of running bot seats.

    Contains the state reached and every action applied on the way.
    """
    success: bool
    loop_state: LoopState
    state: GameState

    # Bot actions applied, in order
    actions: list[Action] = field(default_factory=list)

    # Errors (a bot action the reducer rejected)
    errors: list[str] = field(default_factory=list)

    # Game over info
    winner: str | None = None
    co_leaders: list[str] = field(default_factory=list)


class GameLoop:
    """
    The bot turn driver.

    Usage:
        loop = GameLoop()
        result = loop.run_bot_turns(state, {"p2": SplendorBot()})
        state = result.state

        # Or bots in every seat
        result = loop.play_to_end(state, bots)
    """

    def __init__(self, max_actions: int = DEFAULT_MAX_ACTIONS):
        self.max_actions = max_actions

    def run_bot_turns(self, state: GameState, bots: dict[str, BotPolicy]) -> TurnResult:
        """
        Run bot seats until a seat without a bot is up or the match ends.
        """
        actions: list[Action] = []

        while not state.is_finished:
            seat_id = state.current_player.player_id
            bot = bots.get(seat_id)
            if bot is None:
                return TurnResult(
                    success=True,
                    loop_state=LoopState.WAITING_HUMAN_ACTION,
                    state=state,
                    actions=actions,
                )

            if len(actions) >= self.max_actions:
                logger.warning(
                    "Game %s stopped after %d bot actions", state.game_id, len(actions),
                )
                return TurnResult(
                    success=False,
                    loop_state=LoopState.ACTION_LIMIT,
                    state=state,
                    actions=actions,
                    errors=[f"Stopped after {len(actions)} actions"],
                )

            decision = bot.select_action(state, seat_id)
            result = apply_action(state, decision.action)
            if not result.success:
                # Legal-only bots should never get here
                logger.error(
                    "Bot action rejected in game %s: %s (%s)",
                    state.game_id, decision.action.describe(), result.error,
                )
                return TurnResult(
                    success=False,
                    loop_state=LoopState.BOT_ERROR,
                    state=state,
                    actions=actions,
                    errors=[f"{decision.action.describe()}: {result.error}"],
                )

            logger.debug("%s: %s (%s)", seat_id, decision.action.describe(), decision.branch)
            state = result.new_state
            actions.append(decision.action)

        return TurnResult(
            success=True,
            loop_state=LoopState.GAME_OVER,
            state=state,
            actions=actions,
            winner=state.winner,
            co_leaders=list(state.co_leaders),
        )

    def play_to_end(self, state: GameState, bots: dict[str, BotPolicy]) -> TurnResult:
        """
        Play a match where every seat is a bot.

        Raises ValueError if a seat has no bot.
        """
        missing = [seat for seat in state.seat_order if seat not in bots]
        if missing:
            raise ValueError(f"No bot for seats: {', '.join(missing)}")
        return self.run_bot_turns(state, bots)
