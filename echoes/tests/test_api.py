"""
Tests for API layer.

Tests:
- API service methods
- Game lifecycle via API
- Simulations and tournaments
- Error handling
"""

import pytest

from ..api.schemas import (
    CreateGameRequest,
    DirectionSchema,
    ErrorCode,
    MoveInstruction,
    SimulationRequest,
    SubmitMoveRequest,
    TournamentRequest,
)
from ..api.service import APIService
from ..engine_core.state import InstructionType


def _walk(dr, dc):
    return MoveInstruction(type=InstructionType.WALK, direction=DirectionSchema(dr=dr, dc=dc))


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self):
        """Create a fresh API service."""
        return APIService()

    def test_create_game(self, service):
        response = service.create_game(CreateGameRequest(opponent="forward", random_seed=1))

        assert response.game_id is not None
        assert response.status == "active"
        assert response.agents == {"player2": "ForwardAgent"}
        assert response.state.current_player == "player1"
        assert response.state.turn_number == 1

    def test_create_game_unknown_agent(self, service):
        response = service.create_game(CreateGameRequest(opponent="deep_blue"))

        assert response.error_code == ErrorCode.UNKNOWN_AGENT
        assert "random" in response.details["available"]

    def test_create_game_bad_seat(self, service):
        response = service.create_game(CreateGameRequest(opponent_player_id="player3"))

        assert response.error_code == ErrorCode.VALIDATION_ERROR

    def test_get_game(self, service):
        created = service.create_game(CreateGameRequest(random_seed=1))
        response = service.get_game(created.game_id)

        assert response.game_id == created.game_id

    def test_get_missing_game(self, service):
        response = service.get_game("nonexistent-id")

        assert response.error_code == ErrorCode.GAME_NOT_FOUND

    def test_legal_actions(self, service):
        created = service.create_game(CreateGameRequest(random_seed=1))
        response = service.get_legal_actions(created.game_id, "player1")

        assert len(response.actions) == 8
        assert response.actions[0].type == "add_echo"
        assert response.actions[0].echo.position.col == 0
        assert service.get_legal_actions(created.game_id, "player2").actions == []

    def test_submit_move_plays_full_round(self, service):
        created = service.create_game(CreateGameRequest(opponent="first_legal", random_seed=1))
        response = service.submit_move(
            created.game_id,
            SubmitMoveRequest(player_id="player1", col=4, instructions=[_walk(1, 0)] * 5),
        )

        assert response.state.turn_number == 2
        assert len(response.state.turn_history) == 1
        assert any(line.startswith("Turn 1:") for line in response.log)

    def test_illegal_move(self, service):
        created = service.create_game(CreateGameRequest(random_seed=1))
        response = service.submit_move(
            created.game_id,
            SubmitMoveRequest(player_id="player1", col=0, instructions=[_walk(-1, 0)]),
        )

        assert response.error_code == ErrorCode.ILLEGAL_MOVE
        assert service.get_game(created.game_id).state.echoes == []

    def test_move_needs_target(self, service):
        created = service.create_game(CreateGameRequest(random_seed=1))
        response = service.submit_move(created.game_id, SubmitMoveRequest(player_id="player1"))

        assert response.error_code == ErrorCode.VALIDATION_ERROR

    def test_unassigned_action_points(self, service):
        created = service.create_game(CreateGameRequest(opponent=None, random_seed=1))
        response = service.submit_move(
            created.game_id,
            SubmitMoveRequest(player_id="player1", col=0, instructions=[]),
        )

        assert response.error_code == ErrorCode.ILLEGAL_MOVE
        assert service.get_game(created.game_id).state.echoes == []

    def test_col_and_echo_id_together(self, service):
        created = service.create_game(CreateGameRequest(random_seed=1))
        response = service.submit_move(
            created.game_id,
            SubmitMoveRequest(player_id="player1", col=0, echo_id="echo-1", instructions=[_walk(1, 0)] * 5),
        )

        assert response.error_code == ErrorCode.VALIDATION_ERROR
        assert response.details == {"col": 0, "echo_id": "echo-1"}

    def test_zero_direction_is_validation_error(self, service):
        created = service.create_game(CreateGameRequest(random_seed=1))
        response = service.submit_move(
            created.game_id,
            SubmitMoveRequest(player_id="player1", col=0, instructions=[_walk(0, 0)]),
        )

        assert response.error_code == ErrorCode.VALIDATION_ERROR

    def test_end_and_list_games(self, service):
        created = service.create_game(CreateGameRequest(random_seed=1))

        assert created.game_id in service.list_games().games
        assert service.end_game(created.game_id).success
        assert created.game_id not in service.list_games().games
        assert not service.end_game(created.game_id).success

    def test_run_simulation(self, service):
        response = service.run_simulation(
            SimulationRequest(agent1="random", agent2="forward", games=3, random_seed=5, include_log=True)
        )

        assert response.games == 3
        assert sum(response.wins.values()) + response.draws + response.stalls == 3
        assert response.final_state is not None
        assert response.log[0].startswith("=== Turn 1")

    def test_run_simulation_unknown_agent(self, service):
        response = service.run_simulation(SimulationRequest(agent1="oracle"))

        assert response.error_code == ErrorCode.UNKNOWN_AGENT

    def test_run_tournament(self, service):
        response = service.run_tournament(TournamentRequest(first="random", second="first_legal", games=4))

        assert response.games == 4
        assert set(response.win_rates) == {"random", "first_legal"}


class TestApp:
    """Tests for the FastAPI wiring."""

    def test_routes_registered(self):
        from ..api.app import create_app

        app = create_app(APIService())
        paths = {route.path for route in app.routes}

        assert "/api/v1/games" in paths
        assert "/api/v1/games/{game_id}/moves" in paths
        assert "/api/v1/games/{game_id}/legal-actions" in paths
        assert "/api/v1/simulations" in paths
        assert "/api/v1/tournaments" in paths
        assert "/health" in paths

    def test_batch_routes_run_off_the_event_loop(self):
        """Simulations and tournaments are sync handlers, so FastAPI threads them."""
        import inspect

        from ..api.app import create_app

        app = create_app(APIService())
        endpoints = {route.path: route.endpoint for route in app.routes}

        assert not inspect.iscoroutinefunction(endpoints["/api/v1/simulations"])
        assert not inspect.iscoroutinefunction(endpoints["/api/v1/tournaments"])
        assert inspect.iscoroutinefunction(endpoints["/health"])
