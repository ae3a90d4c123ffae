"""
Tests for API layer.

Tests:
- API service methods
- HTTP status mapping through the FastAPI app
- Match lifecycle via API
- Error handling
"""

import inspect

import pytest
from fastapi.testclient import TestClient

from ..api.schemas import (
    ActionRequest,
    CreateMatchRequest,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    MatchStatus,
    SeatRequest,
)
from ..api.service import APIService
from ..api.app import create_app
from ..session import MatchManager


def create_request(*, bot_seats=(), seed=11, target_points=15):
    return CreateMatchRequest(
        players=[
            SeatRequest(player_id="p1", name="Alice", is_bot="p1" in bot_seats),
            SeatRequest(player_id="p2", name="Bob", is_bot="p2" in bot_seats),
        ],
        random_seed=seed,
        target_points=target_points,
    )


TAKE_THREE = {"type": "TAKE_GEMS", "player_id": "p1", "gems": {"ruby": 1, "onyx": 1, "diamond": 1}}
BLIND_TIER_3 = {"type": "RESERVE_CARD", "player_id": "p1", "tier": 3}


class EndsAfterEachCall(MatchManager):
    """Another request ends the match right after each call returns."""

    def submit_action(self, match_id, action):
        result = super().submit_action(match_id, action)
        self.end_match(match_id)
        return result

    def run_bot_turns(self, match_id):
        result = super().run_bot_turns(match_id)
        self.end_match(match_id)
        return result


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self):
        """Create a fresh API service."""
        return APIService()

    @pytest.fixture
    def match_id(self, service):
        return service.create_match(create_request()).match_id

    def test_create_match(self, service):
        response = service.create_match(create_request())

        assert isinstance(response, GameStateResponse)
        assert response.status == MatchStatus.ACTIVE
        assert response.phase == "in_progress"
        assert response.current_player_id == "p1"
        assert response.random_seed == 11
        assert [p.player_id for p in response.players] == ["p1", "p2"]
        assert response.players[0].is_current_turn
        assert len(response.nobles) == 3
        assert [t.deck_size for t in response.tiers] == [36, 26, 16]
        assert response.bank["gold"] == 5

    def test_create_match_duplicate_ids(self, service):
        request = CreateMatchRequest(players=[
            SeatRequest(player_id="p1", name="Alice"),
            SeatRequest(player_id="p1", name="Bob"),
        ])

        response = service.create_match(request)

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.VALIDATION_ERROR

    def test_get_match(self, service, match_id):
        response = service.get_match(match_id)
        assert response.match_id == match_id
        assert response.action_count == 0

    def test_get_nonexistent_match(self, service):
        response = service.get_match("nope")
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.MATCH_NOT_FOUND

    def test_submit_action(self, service, match_id):
        response = service.submit_action(match_id, ActionRequest(**TAKE_THREE))

        assert response.success
        assert response.state.current_player_id == "p2"
        assert response.state.players[0].gems["ruby"] == 1
        assert response.state.bank["ruby"] == 3
        assert response.state.action_count == 1
        assert response.changes

    def test_rule_failure_carries_engine_code(self, service, match_id):
        request = ActionRequest(type="TAKE_GEMS", player_id="p2", gems={"ruby": 1})

        response = service.submit_action(match_id, request)

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.NOT_YOUR_TURN
        assert response.details["current_player_id"] == "p1"

    def test_unknown_gem_is_validation_error(self, service, match_id):
        request = ActionRequest(type="TAKE_GEMS", player_id="p1", gems={"pearl": 1})
        response = service.submit_action(match_id, request)
        assert response.error_code == ErrorCode.VALIDATION_ERROR

    def test_unknown_action_type(self, service, match_id):
        request = ActionRequest(type="PASS", player_id="p1")
        response = service.submit_action(match_id, request)
        assert response.error_code == ErrorCode.UNKNOWN_ACTION_TYPE

    def test_submit_to_missing_match(self, service):
        response = service.submit_action("nope", ActionRequest(**TAKE_THREE))
        assert response.error_code == ErrorCode.MATCH_NOT_FOUND

    def test_legal_actions(self, service, match_id):
        response = service.get_legal_actions(match_id, "p1")

        assert response.is_turn
        assert len(response.actions) == 45
        assert len(response.reservable_card_ids) == 12
        assert response.blind_reserve_tiers == [1, 2, 3]

    def test_legal_actions_waiting_seat(self, service, match_id):
        response = service.get_legal_actions(match_id, "p2")
        assert not response.is_turn
        assert response.actions == []
        assert response.reservable_card_ids == []

    def test_legal_actions_unknown_player(self, service, match_id):
        response = service.get_legal_actions(match_id, "ghost")
        assert response.error_code == ErrorCode.PLAYER_NOT_FOUND

    def test_bot_turns_stop_at_human_seat(self, service):
        match_id = service.create_match(create_request(bot_seats=("p2",))).match_id
        service.submit_action(match_id, ActionRequest(**TAKE_THREE))

        response = service.run_bot_turns(match_id)

        assert response.success
        assert response.loop_state == "waiting_human_action"
        assert len(response.actions) == 1
        assert response.actions[0].player_id == "p2"
        assert response.state.current_player_id == "p1"

    def test_bot_turns_on_human_seat_do_nothing(self, service, match_id):
        response = service.run_bot_turns(match_id)
        assert response.actions == []
        assert response.loop_state == "waiting_human_action"

    def test_bot_only_match(self, service):
        match_id = service.create_match(create_request(bot_seats=("p1", "p2"))).match_id

        response = service.run_bot_turns(match_id)

        assert response.loop_state in ("game_over", "action_limit")
        if response.loop_state == "game_over":
            assert response.state.status == MatchStatus.GAME_OVER
            assert response.state.phase == "finished"
            assert response.state.current_player_id is None
            assert response.state.winner or response.state.co_leaders

    def test_blind_reserve_hidden_from_others(self, service, match_id):
        service.submit_action(match_id, ActionRequest(**BLIND_TIER_3))

        for viewer in (None, "p2"):
            [card] = service.get_match(match_id, viewer).players[0].reserved
            assert card.face_down
            assert card.tier == 3
            assert card.card_id is None
            assert card.cost is None

    def test_blind_reserve_visible_to_owner(self, service, match_id):
        response = service.submit_action(match_id, ActionRequest(**BLIND_TIER_3))
        [card] = response.state.players[0].reserved
        assert card.face_down
        assert card.card_id is not None
        assert card.tier == 3

        [again] = service.get_match(match_id, "p1").players[0].reserved
        assert again == card

    def test_visible_reserve_is_public(self, service, match_id):
        card_id = service.get_match(match_id).tiers[0].display[0].card_id
        service.submit_action(
            match_id, ActionRequest(type="RESERVE_CARD", player_id="p1", card_id=card_id),
        )
        [card] = service.get_match(match_id).players[0].reserved
        assert not card.face_down
        assert card.card_id == card_id

    def test_action_response_survives_match_ending(self):
        service = APIService(match_manager=EndsAfterEachCall())
        match_id = service.create_match(create_request()).match_id

        response = service.submit_action(match_id, ActionRequest(**TAKE_THREE))

        assert response.success
        assert response.state.status == MatchStatus.ABANDONED
        assert response.state.action_count == 1

    def test_bot_turns_response_survives_match_ending(self):
        service = APIService(match_manager=EndsAfterEachCall())
        match_id = service.create_match(create_request(bot_seats=("p1",))).match_id

        response = service.run_bot_turns(match_id)

        assert len(response.actions) == 1
        assert response.state.status == MatchStatus.ABANDONED

    def test_end_match(self, service, match_id):
        assert match_id in service.list_matches()
        assert service.end_match(match_id)
        assert match_id not in service.list_matches()
        assert not service.end_match(match_id)


class TestHTTP:
    """Status codes and payloads through the FastAPI app."""

    @pytest.fixture
    def client(self):
        return TestClient(create_app(APIService()))

    @pytest.fixture
    def match_id(self, client):
        response = client.post("/api/v1/matches", json=create_request().model_dump())
        return response.json()["match_id"]

    def test_create_returns_201(self, client):
        response = client.post("/api/v1/matches", json=create_request().model_dump())
        assert response.status_code == 201
        assert response.json()["current_player_id"] == "p1"

    def test_one_seat_is_422(self, client):
        response = client.post(
            "/api/v1/matches", json={"players": [{"player_id": "p1", "name": "Alice"}]},
        )
        assert response.status_code == 422

    def test_duplicate_ids_is_400(self, client):
        body = {"players": [
            {"player_id": "p1", "name": "Alice"},
            {"player_id": "p1", "name": "Bob"},
        ]}
        response = client.post("/api/v1/matches", json=body)
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_missing_match_is_404(self, client):
        response = client.get("/api/v1/matches/nope")
        assert response.status_code == 404
        assert response.json()["error_code"] == "MATCH_NOT_FOUND"

    def test_action_applies(self, client, match_id):
        response = client.post(f"/api/v1/matches/{match_id}/actions", json=TAKE_THREE)
        assert response.status_code == 200
        assert response.json()["state"]["current_player_id"] == "p2"

    def test_rule_failure_is_409(self, client, match_id):
        body = {"type": "TAKE_GEMS", "player_id": "p2", "gems": {"ruby": 1}}
        response = client.post(f"/api/v1/matches/{match_id}/actions", json=body)
        assert response.status_code == 409
        assert response.json()["error_code"] == "NOT_YOUR_TURN"

    def test_bad_gem_is_400(self, client, match_id):
        body = {"type": "TAKE_GEMS", "player_id": "p1", "gems": {"pearl": 1}}
        response = client.post(f"/api/v1/matches/{match_id}/actions", json=body)
        assert response.status_code == 400

    def test_legal_actions(self, client, match_id):
        response = client.get(f"/api/v1/matches/{match_id}/legal-actions/p1")
        assert response.status_code == 200
        assert len(response.json()["actions"]) == 45

    def test_legal_actions_unknown_player(self, client, match_id):
        response = client.get(f"/api/v1/matches/{match_id}/legal-actions/ghost")
        assert response.status_code == 409
        assert response.json()["error_code"] == "PLAYER_NOT_FOUND"

    def test_bot_turns(self, client, match_id):
        response = client.post(f"/api/v1/matches/{match_id}/bot-turns")
        assert response.status_code == 200
        assert response.json()["loop_state"] == "waiting_human_action"

    def test_blind_reserve_needs_owner_as_viewer(self, client, match_id):
        client.post(f"/api/v1/matches/{match_id}/actions", json=BLIND_TIER_3)

        public = client.get(f"/api/v1/matches/{match_id}").json()
        owner = client.get(f"/api/v1/matches/{match_id}", params={"viewer": "p1"}).json()

        assert public["players"][0]["reserved"][0]["card_id"] is None
        assert public["players"][0]["reserved"][0]["tier"] == 3
        assert owner["players"][0]["reserved"][0]["card_id"] is not None

    def test_list_and_delete(self, client, match_id):
        assert match_id in client.get("/api/v1/matches").json()["matches"]

        response = client.delete(f"/api/v1/matches/{match_id}", params={"reason": "test"})
        assert response.json() == {"success": True, "match_id": match_id}
        assert client.get(f"/api/v1/matches/{match_id}").status_code == 404

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["service"] == "splendid"

    def test_bot_turns_route_runs_in_threadpool(self, client):
        [route] = [r for r in client.app.routes if getattr(r, "path", "").endswith("/bot-turns")]
        assert not inspect.iscoroutinefunction(route.endpoint)
