"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- Rule failures carry the engine's code (NOT_YOUR_TURN, CARD_NOT_FOUND, ...)
- MATCH_NOT_FOUND: Match does not exist or has ended
- VALIDATION_ERROR: Request could not be turned into a match or action
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


API_VERSION = "v1"


# =============================================================================
# Enums
# =============================================================================

class MatchStatus(str, Enum):
    """Match status values."""
    ACTIVE = "active"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured error codes."""
    # Engine rule failures
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    INSUFFICIENT_RESOURCES = "INSUFFICIENT_RESOURCES"
    INVALID_GEM_SELECTION_SHAPE = "INVALID_GEM_SELECTION_SHAPE"
    RESERVE_LIMIT_REACHED = "RESERVE_LIMIT_REACHED"
    GEM_CAP_EXCEEDED = "GEM_CAP_EXCEEDED"
    NO_PENDING_DISCARD = "NO_PENDING_DISCARD"
    GAME_ALREADY_FINISHED = "GAME_ALREADY_FINISHED"
    UNKNOWN_ACTION_TYPE = "UNKNOWN_ACTION_TYPE"

    # Hosting
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Development card information for display."""
    card_id: int
    tier: int
    points: int
    bonus: str
    cost: dict[str, int] = Field(default_factory=dict)


class NobleInfo(BaseModel):
    """Noble tile information for display."""
    noble_id: int
    name: str
    points: int
    requirements: dict[str, int] = Field(default_factory=dict)


class ReservedCardInfo(BaseModel):
    """
    A reserved card as one viewer sees it.

    A card reserved blind from a deck shows only its tier to every seat
    but its owner.
    """
    tier: int
    face_down: bool = False
    card_id: Optional[int] = None
    points: Optional[int] = None
    bonus: Optional[str] = None
    cost: Optional[dict[str, int]] = None


class TierInfo(BaseModel):
    """One tier row: display slots (null = empty slot) and deck size."""
    tier: int
    display: list[Optional[CardInfo]] = Field(default_factory=list)
    deck_size: int = 0


class PlayerInfo(BaseModel):
    """Player information for display."""
    player_id: str
    name: str
    is_bot: bool = False
    is_current_turn: bool = False
    points: int = 0
    gems: dict[str, int] = Field(default_factory=dict)
    bonuses: dict[str, int] = Field(default_factory=dict)
    card_ids: list[int] = Field(default_factory=list)
    reserved: list[ReservedCardInfo] = Field(default_factory=list)
    noble_ids: list[int] = Field(default_factory=list)


class ActionInfo(BaseModel):
    """An action in wire form."""
    type: str
    player_id: str
    card_id: Optional[int] = None
    tier: Optional[int] = None
    gems: Optional[dict[str, int]] = None
    description: str = ""


# =============================================================================
# Request Models
# =============================================================================

class SeatRequest(BaseModel):
    """One seat in a new match."""
    player_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    is_bot: bool = Field(False, description="Seat is played by the heuristic bot")


class CreateMatchRequest(BaseModel):
    """Request to create a new match."""
    players: list[SeatRequest] = Field(
        ..., min_length=2, max_length=4, description="Seats in turn order"
    )
    random_seed: Optional[int] = Field(None, description="Seed for reproducible matches")
    target_points: int = Field(15, ge=1, description="Points that trigger the last round")


class ActionRequest(BaseModel):
    """
    Request to apply an action.

    type is TAKE_GEMS, PURCHASE_CARD, RESERVE_CARD or DISCARD_GEMS.
    RESERVE_CARD takes card_id for a visible card, or tier for the top
    of that tier's deck.
    """
    type: str
    player_id: str
    card_id: Optional[int] = None
    tier: Optional[int] = None
    gems: Optional[dict[str, int]] = None


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field(API_VERSION, description="API version")


class GameStateResponse(BaseModel):
    """Complete match state for display."""
    match_id: str
    status: MatchStatus
    phase: str
    turn_number: int
    current_player_id: Optional[str] = None
    players: list[PlayerInfo] = Field(default_factory=list)
    bank: dict[str, int] = Field(default_factory=dict)
    tiers: list[TierInfo] = Field(default_factory=list)
    nobles: list[NobleInfo] = Field(default_factory=list)
    last_round: bool = False
    pending_discard: Optional[str] = None
    winner: Optional[str] = None
    co_leaders: list[str] = Field(default_factory=list)
    random_seed: int = 0
    action_count: int = 0
    api_version: str = API_VERSION


class ActionResponse(BaseModel):
    """Response after an action is applied."""
    success: bool
    match_id: str
    changes: list[str] = Field(default_factory=list)
    nobles_awarded: list[int] = Field(default_factory=list)
    state: GameStateResponse
    api_version: str = API_VERSION


class LegalActionsResponse(BaseModel):
    """What a seat can do right now."""
    match_id: str
    player_id: str
    is_turn: bool
    pending_discard: bool = False
    discard_required: int = 0
    purchasable_card_ids: list[int] = Field(default_factory=list)
    reservable_card_ids: list[int] = Field(default_factory=list)
    blind_reserve_tiers: list[int] = Field(default_factory=list)
    actions: list[ActionInfo] = Field(default_factory=list)
    api_version: str = API_VERSION


class BotTurnsResponse(BaseModel):
    """Response after running bot seats."""
    match_id: str
    success: bool
    loop_state: str
    actions: list[ActionInfo] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    state: GameStateResponse
    api_version: str = API_VERSION


class MatchListResponse(BaseModel):
    """Response listing active matches."""
    matches: list[str]
    count: int


class EndMatchResponse(BaseModel):
    """Response after ending a match."""
    success: bool
    match_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
