"""
FastAPI Application - REST API for hosted matches.

Endpoints:
    GET    /health                                      Health check
    GET    /api/v1/matches                              List active matches
    POST   /api/v1/matches                              Create a match
    GET    /api/v1/matches/{id}                         Get match state (?viewer=seat)
    DELETE /api/v1/matches/{id}                         End a match
    POST   /api/v1/matches/{id}/actions                 Apply an action
    GET    /api/v1/matches/{id}/legal-actions/{player}  What a seat can do
    POST   /api/v1/matches/{id}/bot-turns               Run bot seats

Error mapping:
    404  MATCH_NOT_FOUND
    400  VALIDATION_ERROR (request could not be turned into an action)
    409  any engine rule failure (NOT_YOUR_TURN, GEM_CAP_EXCEEDED, ...)

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import os

from .. import __version__

# Environment configuration
SPLENDID_ENV = os.getenv("SPLENDID_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    from fastapi import FastAPI, Query
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from .service import APIService
    from .schemas import (
        # Request models
        CreateMatchRequest,
        ActionRequest,
        # Response models
        GameStateResponse,
        ActionResponse,
        LegalActionsResponse,
        BotTurnsResponse,
        ErrorResponse,
        MatchListResponse,
        EndMatchResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    is_production = SPLENDID_ENV == "production"

    app = FastAPI(
        title="Splendid API",
        description="""
Gem-trading card game engine with heuristic bot seats.

## Turn Flow

1. `POST /matches` with 2-4 seats (mark bot seats with `is_bot`)
2. Human seats `POST /actions`; bot seats move on `POST /bot-turns`
3. Taking gems above the cap leaves a pending discard: the same seat must
   send `DISCARD_GEMS` before the turn passes

## Error Codes

| Code | Status | Description |
|------|--------|-------------|
| `MATCH_NOT_FOUND` | 404 | Match does not exist |
| `VALIDATION_ERROR` | 400 | Malformed request |
| engine codes | 409 | Action broke a game rule |
        """,
        version=__version__,
        docs_url=None if is_production else "/api/docs",
        redoc_url=None if is_production else "/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def status_for(error_code: ErrorCode) -> int:
        if error_code == ErrorCode.MATCH_NOT_FOUND:
            return 404
        if error_code == ErrorCode.VALIDATION_ERROR:
            return 400
        if error_code == ErrorCode.INTERNAL_ERROR:
            return 500
        return 409

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_for(error.error_code),
            content=error.model_dump(mode="json"),
        )

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches",
        response_model=GameStateResponse,
        status_code=201,
        responses={400: {"model": ErrorResponse, "description": "Invalid seats"}},
        tags=["Matches"],
        summary="Create a new match",
    )
    async def create_match(body: CreateMatchRequest) -> Union[GameStateResponse, JSONResponse]:
        """
        Create a new match.

        Seats play in the order given. Pass `random_seed` for a reproducible
        shuffle; the seed used is always returned.
        """
        response = api_service.create_match(body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/matches",
        response_model=MatchListResponse,
        tags=["Matches"],
        summary="List active matches",
    )
    async def list_matches() -> MatchListResponse:
        """List all active match IDs."""
        matches = api_service.list_matches()
        return MatchListResponse(matches=matches, count=len(matches))

    @app.get(
        "/api/v1/matches/{match_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Get match state",
    )
    async def get_match(
        match_id: str,
        viewer: Annotated[
            Optional[str], Query(description="Seat asking; sees its own blind reserves")
        ] = None,
    ) -> Union[GameStateResponse, JSONResponse]:
        """Get the state of a match as one seat (or the public) sees it."""
        response = api_service.get_match(match_id, viewer)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.delete(
        "/api/v1/matches/{match_id}",
        response_model=EndMatchResponse,
        tags=["Matches"],
        summary="End a match",
    )
    async def end_match(
        match_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndMatchResponse:
        """End a match and release it."""
        success = api_service.end_match(match_id, reason)
        return EndMatchResponse(success=success, match_id=match_id)

    # =========================================================================
    # Play Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches/{match_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Malformed action"},
            404: {"model": ErrorResponse, "description": "Match not found"},
            409: {"model": ErrorResponse, "description": "Action broke a rule"},
        },
        tags=["Play"],
        summary="Apply an action",
    )
    async def submit_action(
        match_id: str,
        body: ActionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Apply one action for a seat.

        **Request Body:**
        ```json
        {"type": "TAKE_GEMS", "player_id": "p1", "gems": {"ruby": 1, "onyx": 1}}
        ```
        """
        response = api_service.submit_action(match_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/matches/{match_id}/legal-actions/{player_id}",
        response_model=LegalActionsResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Match not found"},
            409: {"model": ErrorResponse, "description": "Unknown player"},
        },
        tags=["Play"],
        summary="List legal actions for a seat",
    )
    async def get_legal_actions(
        match_id: str,
        player_id: str,
    ) -> Union[LegalActionsResponse, JSONResponse]:
        """Every legal action for the seat; empty when it is not their turn."""
        response = api_service.get_legal_actions(match_id, player_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # Plain def so the bot loop runs in the threadpool
    @app.post(
        "/api/v1/matches/{match_id}/bot-turns",
        response_model=BotTurnsResponse,
        responses={404: {"model": ErrorResponse, "description": "Match not found"}},
        tags=["Play"],
        summary="Run bot seats",
    )
    def run_bot_turns(match_id: str) -> Union[BotTurnsResponse, JSONResponse]:
        """Play bot seats until a human seat is up or the match ends."""
        response = api_service.run_bot_turns(match_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="splendid",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Splendid API",
            "version": __version__,
            "environment": SPLENDID_ENV,
            "docs": None if is_production else "/api/docs",
            "health": "/health",
        }

    return app
