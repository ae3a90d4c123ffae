"""
Session Module - Hosts matches in memory.

A match is one play-through:
- Created with its seats, seed and bot seats
- Holds the canonical game state
- Applies human actions and runs bot turns
- Dropped when it ends

Matches are EPHEMERAL:
- No persistence to database
- Any state can be rebuilt from seed + action log
"""

from .manager import MatchManager, Match, MatchStatus, MatchNotFoundError
from .game_loop import GameLoop, LoopState, TurnResult, DEFAULT_MAX_ACTIONS

__all__ = [
    "MatchManager",
    "Match",
    "MatchStatus",
    "MatchNotFoundError",
    "GameLoop",
    "LoopState",
    "TurnResult",
    "DEFAULT_MAX_ACTIONS",
]
