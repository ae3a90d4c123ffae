"""
API Module - HTTP interface for hosted matches.

Exposes the engine via REST API.
A client:
1. Creates a match with human and bot seats
2. Submits actions for human seats
3. Asks the server to run bot seats
4. Reads match state and legal actions

All state is match-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    SeatRequest,
    CreateMatchRequest,
    ActionRequest,
    # Responses
    GameStateResponse,
    ActionResponse,
    LegalActionsResponse,
    BotTurnsResponse,
    MatchListResponse,
    EndMatchResponse,
    HealthResponse,
    ErrorResponse,
    # Shared
    PlayerInfo,
    TierInfo,
    CardInfo,
    ReservedCardInfo,
    NobleInfo,
    ActionInfo,
    # Enums
    MatchStatus,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "SeatRequest",
    "CreateMatchRequest",
    "ActionRequest",
    # Responses
    "GameStateResponse",
    "ActionResponse",
    "LegalActionsResponse",
    "BotTurnsResponse",
    "MatchListResponse",
    "EndMatchResponse",
    "HealthResponse",
    "ErrorResponse",
    # Shared
    "PlayerInfo",
    "TierInfo",
    "CardInfo",
    "ReservedCardInfo",
    "NobleInfo",
    "ActionInfo",
    # Enums
    "MatchStatus",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
