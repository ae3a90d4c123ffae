"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Hosts matches through the MatchManager
3. Runs bot seats
4. Formats engine state and results for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    CreateMatchRequest,
    ActionRequest,
    # Responses
    GameStateResponse,
    ActionResponse,
    LegalActionsResponse,
    BotTurnsResponse,
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
from ..catalog import get_card, get_noble
from ..engine_core.action import Action
from ..engine_core.action_generator import legal_actions, legal_actions_summary
from ..engine_core.state import GameState, MatchConfig
from ..session import MatchManager, Match, MatchNotFoundError


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create match
        state = service.create_match(request)

        # Play
        response = service.submit_action(state.match_id, action_request)

        # Let bot seats move
        response = service.run_bot_turns(state.match_id)
    """
    match_manager: MatchManager = field(default_factory=MatchManager)

    def create_match(self, request: CreateMatchRequest) -> GameStateResponse | ErrorResponse:
        """
        Create a new match.
        """
        seats = [(seat.player_id, seat.name, seat.is_bot) for seat in request.players]
        try:
            match = self.match_manager.create_match(
                seats,
                random_seed=request.random_seed,
                config=MatchConfig(target_points=request.target_points),
            )
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)
        return self._build_game_state(match)

    def get_match(
        self,
        match_id: str,
        viewer: str | None = None,
    ) -> GameStateResponse | ErrorResponse:
        """
        Get current match state as `viewer` sees it.

        Blind reserves stay face down unless the viewer owns them.
        """
        match = self.match_manager.get_match(match_id)
        if not match:
            return _match_not_found(match_id)
        return self._build_game_state(match, viewer)

    def submit_action(
        self,
        match_id: str,
        request: ActionRequest,
    ) -> ActionResponse | ErrorResponse:
        """
        Apply one action. Rule failures come back with the engine's code.
        """
        try:
            action = Action.from_dict(request.model_dump(exclude_none=True))
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)

        match = self.match_manager.get_match(match_id)
        if not match:
            return _match_not_found(match_id)
        try:
            result = self.match_manager.submit_action(match_id, action)
        except MatchNotFoundError:
            return _match_not_found(match_id)

        if not result.success:
            return ErrorResponse(
                error=result.error or "Action rejected",
                error_code=ErrorCode(result.error_code.value),
                details=result.context or None,
            )

        return ActionResponse(
            success=True,
            match_id=match_id,
            changes=result.state_changes,
            nobles_awarded=result.nobles_awarded,
            state=self._build_game_state(match, action.payload.player_id),
        )

    def get_legal_actions(
        self,
        match_id: str,
        player_id: str,
    ) -> LegalActionsResponse | ErrorResponse:
        """
        List what a seat can do right now.
        """
        match = self.match_manager.get_match(match_id)
        if not match:
            return _match_not_found(match_id)

        state = match.state
        if state.get_player(player_id) is None:
            return ErrorResponse(
                error=f"Player {player_id} not found",
                error_code=ErrorCode.PLAYER_NOT_FOUND,
                details={"player_id": player_id},
            )

        summary = legal_actions_summary(state, player_id)
        return LegalActionsResponse(
            match_id=match_id,
            player_id=player_id,
            is_turn=summary.is_turn,
            pending_discard=summary.pending_discard,
            discard_required=summary.discard_required,
            purchasable_card_ids=summary.purchasable_card_ids if summary.is_turn else [],
            reservable_card_ids=summary.reservable_card_ids if summary.is_turn else [],
            blind_reserve_tiers=summary.blind_reserve_tiers if summary.is_turn else [],
            actions=[_action_info(a) for a in legal_actions(state, player_id)],
        )

    def run_bot_turns(self, match_id: str) -> BotTurnsResponse | ErrorResponse:
        """
        Play bot seats until a human seat is up or the match ends.
        """
        match = self.match_manager.get_match(match_id)
        if not match:
            return _match_not_found(match_id)
        try:
            result = self.match_manager.run_bot_turns(match_id)
        except MatchNotFoundError:
            return _match_not_found(match_id)

        return BotTurnsResponse(
            match_id=match_id,
            success=result.success,
            loop_state=result.loop_state.value,
            actions=[_action_info(a) for a in result.actions],
            errors=result.errors,
            state=self._build_game_state(match),
        )

    def end_match(self, match_id: str, reason: str = "user_ended") -> bool:
        """
        End a match.
        """
        return self.match_manager.end_match(match_id, reason)

    def list_matches(self) -> list[str]:
        """
        List active match IDs.
        """
        return self.match_manager.list_active_matches()

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _build_game_state(self, match: Match, viewer: str | None = None) -> GameStateResponse:
        """Build complete game state response."""
        state = match.state
        current_id = None if state.is_finished else state.current_player.player_id

        return GameStateResponse(
            match_id=match.match_id,
            status=MatchStatus(match.status.value),
            phase=state.phase.value,
            turn_number=state.turn_number,
            current_player_id=current_id,
            players=[
                self._build_player(state, player.player_id, current_id, viewer)
                for player in state.ordered_players()
            ],
            bank=state.bank.to_dict(include_zero=True),
            tiers=[
                TierInfo(
                    tier=tier,
                    display=[
                        _card_info(card_id) if card_id is not None else None
                        for card_id in row.display
                    ],
                    deck_size=len(row.deck),
                )
                for tier, row in sorted(state.tiers.items())
            ],
            nobles=[_noble_info(noble_id) for noble_id in state.nobles],
            last_round=state.last_round,
            pending_discard=state.pending_discard,
            winner=state.winner,
            co_leaders=list(state.co_leaders),
            random_seed=state.random_seed,
            action_count=len(state.action_history),
        )

    def _build_player(
        self,
        state: GameState,
        player_id: str,
        current_id: str | None,
        viewer: str | None,
    ) -> PlayerInfo:
        player = state.get_player(player_id)
        return PlayerInfo(
            player_id=player.player_id,
            name=player.name,
            is_bot=player.is_bot,
            is_current_turn=player.player_id == current_id,
            points=player.points,
            gems=player.gems.to_dict(include_zero=True),
            bonuses={gem.value: count for gem, count in player.bonuses().items()},
            card_ids=list(player.cards),
            reserved=[
                _reserved_info(card_id, card_id in player.blind_reserved, player_id == viewer)
                for card_id in player.reserved
            ],
            noble_ids=list(player.nobles),
        )


def _match_not_found(match_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Match {match_id} not found",
        error_code=ErrorCode.MATCH_NOT_FOUND,
        details={"match_id": match_id},
    )


def _card_info(card_id: int) -> CardInfo:
    card = get_card(card_id)
    return CardInfo(
        card_id=card.id,
        tier=card.tier,
        points=card.points,
        bonus=card.bonus.value,
        cost={gem.value: count for gem, count in card.cost.items()},
    )


def _reserved_info(card_id: int, face_down: bool, visible: bool) -> ReservedCardInfo:
    card = get_card(card_id)
    if face_down and not visible:
        return ReservedCardInfo(tier=card.tier, face_down=True)
    return ReservedCardInfo(
        tier=card.tier,
        face_down=face_down,
        card_id=card.id,
        points=card.points,
        bonus=card.bonus.value,
        cost={gem.value: count for gem, count in card.cost.items()},
    )


def _noble_info(noble_id: int) -> NobleInfo:
    noble = get_noble(noble_id)
    return NobleInfo(
        noble_id=noble.id,
        name=noble.name,
        points=noble.points,
        requirements={gem.value: count for gem, count in noble.requirements.items()},
    )


def _action_info(action: Action) -> ActionInfo:
    data = action.to_dict()
    return ActionInfo(
        type=data["type"],
        player_id=data["player_id"],
        card_id=data.get("card_id"),
        tier=data.get("tier"),
        gems=data.get("gems"),
        description=action.describe(),
    )
