"""
Bots module - Automa AI for bot seats.

Provides:
- BotPolicy: Interface for bot decision-making
- HeuristicEvaluator: Scores cards, reservations and gem picks
- SplendorBot: The heuristic bot
- choose_action / disconnected_seat_action: Stateless entry points
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy
from .evaluator import (
    HeuristicEvaluator,
    ScoringWeights,
    NobleTarget,
    NobleStrategy,
    game_stage,
)
from .splendor_bot import SplendorBot, choose_action, disconnected_seat_action

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "HeuristicEvaluator",
    "ScoringWeights",
    "NobleTarget",
    "NobleStrategy",
    "game_stage",
    "SplendorBot",
    "choose_action",
    "disconnected_seat_action",
]
