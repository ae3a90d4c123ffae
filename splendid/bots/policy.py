"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a game state and a seat and returns a decision.
Decisions include:
- Which action to take
- Which decision branch produced it
- Explanation (for logs and UI)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import random
from typing import TYPE_CHECKING

from ..engine_core.action_generator import legal_actions

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for UI/debugging)
    - The branch of the decision procedure that chose it
    """
    action: Action
    explanation: str = ""
    branch: str = ""

    # Evaluation details (for debugging)
    evaluated_actions: int = 0
    best_score: float = 0.0


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects actions.
    Implementations range from baselines for testing to the
    heuristic SplendorBot.
    """

    @abstractmethod
    def select_action(self, state: GameState, player_id: str) -> BotDecision:
        """
        Select an action for a seat.

        Args:
            state: Current game state
            player_id: The seat to act for

        Returns:
            BotDecision with the selected action
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects legal actions uniformly at random.

    Used for:
    - Testing (fuzzing the reducer with legal play)
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(self, state: GameState, player_id: str) -> BotDecision:
        actions = legal_actions(state, player_id)
        if not actions:
            raise ValueError("No legal actions available")

        action = self.rng.choice(actions)
        return BotDecision(
            action=action,
            explanation="Selected randomly",
            branch="random",
            evaluated_actions=len(actions),
        )


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal action.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def select_action(self, state: GameState, player_id: str) -> BotDecision:
        actions = legal_actions(state, player_id)
        if not actions:
            raise ValueError("No legal actions available")

        return BotDecision(
            action=actions[0],
            explanation="Selected first legal action",
            branch="first_legal",
            evaluated_actions=1,
        )
