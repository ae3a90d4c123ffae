"""
Engine Core - Deterministic match state management.

The engine is the runtime that:
1. Initializes a match (bank, shuffled tiers, nobles)
2. Owns the GameState
3. Generates legal actions
4. Applies actions via the reducer
5. Awards nobles and detects the end of the match
"""

from .gems import GemPool
from .state import GameState, GamePhase, PlayerState, TierRow, MatchConfig
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode
from .reducer import Reducer, apply_action
from .action_generator import (
    ActionGenerator,
    LegalActionsSummary,
    legal_actions,
    legal_actions_summary,
    is_legal,
)
from .setup import initialize_match, replay_match, seats_of, ReplayError

__all__ = [
    "GemPool",
    "GameState",
    "GamePhase",
    "PlayerState",
    "TierRow",
    "MatchConfig",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "Reducer",
    "apply_action",
    "ActionGenerator",
    "LegalActionsSummary",
    "legal_actions",
    "legal_actions_summary",
    "is_legal",
    "initialize_match",
    "replay_match",
    "seats_of",
    "ReplayError",
]
