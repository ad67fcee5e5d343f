"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine and session calls
2. Manages interactive game sessions
3. Runs headless simulations and tournaments
4. Formats responses as pydantic schemas

This layer is framework-agnostic; failures come back as ErrorResponse
values rather than exceptions so any web layer can map them.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import logging
import random

from ..agents import AGENT_TYPES, build_agent
from ..engine_core.action import Action
from ..engine_core.config import GameConfig, DEFAULT_CONFIG
from ..session import (
    HeadlessGameRunner,
    IllegalMoveError,
    Session,
    SessionManager,
    run_tournament,
)
from .schemas import (
    ActionSchema,
    CreateGameRequest,
    EchoSchema,
    EndGameResponse,
    ErrorCode,
    ErrorResponse,
    GameListResponse,
    GameResponse,
    GameStateSchema,
    LegalActionsResponse,
    SimulationRequest,
    SimulationResponse,
    SubmitMoveRequest,
    TournamentRequest,
    TournamentResponse,
)

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        game = service.create_game(CreateGameRequest(opponent="forward"))
        legal = service.get_legal_actions(game.game_id, "player1")
        game = service.submit_move(game.game_id, SubmitMoveRequest(...))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    config: GameConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    def create_game(self, request: CreateGameRequest) -> GameResponse | ErrorResponse:
        """Create a new interactive game, running the agent seat if it moves first."""
        if request.opponent is not None and request.opponent not in AGENT_TYPES:
            return self._unknown_agent(request.opponent)

        config = replace(
            self.config,
            allow_extension=request.allow_extension,
            extended_instructions=request.extended_instructions,
        )
        try:
            session = self.session_manager.create_session(
                opponent=request.opponent,
                opponent_player_id=request.opponent_player_id,
                seed=request.random_seed,
                config=config,
            )
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)
        return self._session_to_response(session)

    def get_game(self, game_id: str) -> GameResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)
        return self._session_to_response(session)

    def get_legal_actions(self, game_id: str, player_id: str) -> LegalActionsResponse | ErrorResponse:
        """Legal top-level actions for a player. Empty when it is not their turn."""
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)
        actions = session.legal_actions(player_id) if session.is_active() else []
        return LegalActionsResponse(
            game_id=game_id,
            player_id=player_id,
            actions=[self._action_to_schema(a) for a in actions],
        )

    def submit_move(self, game_id: str, request: SubmitMoveRequest) -> GameResponse | ErrorResponse:
        """
        Place or extend an echo and program it in one request.

        On an illegal move the game is left untouched.
        """
        session = self.session_manager.get_session(game_id)
        if not session:
            return self._not_found(game_id)
        if (request.col is None) == (request.echo_id is None):
            return ErrorResponse(
                error="Exactly one of col or echo_id is required",
                error_code=ErrorCode.VALIDATION_ERROR,
                details={"col": request.col, "echo_id": request.echo_id},
            )

        try:
            instructions = [
                (step.type, step.direction.to_direction()) for step in request.instructions
            ]
            session.submit_move(
                request.player_id,
                instructions,
                col=request.col,
                echo_id=request.echo_id,
            )
        except IllegalMoveError as e:
            logger.info("Rejected move in %s: %s", game_id, e)
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.ILLEGAL_MOVE,
                details={"player_id": request.player_id},
            )
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)

        return self._session_to_response(session)

    def end_game(self, game_id: str, reason: str = "user_ended") -> EndGameResponse:
        success = self.session_manager.end_session(game_id, reason)
        return EndGameResponse(success=success, game_id=game_id)

    def list_games(self) -> GameListResponse:
        games = self.session_manager.list_active_sessions()
        return GameListResponse(games=games, count=len(games))

    def run_simulation(self, request: SimulationRequest) -> SimulationResponse | ErrorResponse:
        """Play headless games with fixed seats: agent1 is always player1."""
        for kind in (request.agent1, request.agent2):
            if kind not in AGENT_TYPES:
                return self._unknown_agent(kind)

        config = replace(self.config, max_turns=request.max_turns)
        base_seed = request.random_seed if request.random_seed is not None else random.randrange(2**31)

        response = SimulationResponse(games=request.games, wins={"player1": 0, "player2": 0})
        total_turns = 0
        for index in range(request.games):
            seed = base_seed + index
            runner = HeadlessGameRunner(config=config, seed=seed)
            result = runner.run_game(
                build_agent(request.agent1, "player1", seed=seed),
                build_agent(request.agent2, "player2", seed=seed + 1),
            )
            total_turns += result.turns
            if result.winner is not None:
                response.wins[result.winner] += 1
            elif result.reason == "stalled":
                response.stalls += 1
            else:
                response.draws += 1
            if index == 0:
                response.final_state = GameStateSchema.from_state(result.final_state)
                if request.include_log:
                    response.log = list(result.log)

        response.avg_turns = total_turns / request.games
        return response

    def run_tournament(self, request: TournamentRequest) -> TournamentResponse | ErrorResponse:
        for kind in (request.first, request.second):
            if kind not in AGENT_TYPES:
                return self._unknown_agent(kind)

        result = run_tournament(
            request.first,
            request.second,
            games=request.games,
            workers=request.workers,
            seed=request.random_seed,
            config=self.config,
        )
        return TournamentResponse(
            games=result.games,
            wins=result.wins,
            win_rates=result.win_rates,
            draws=result.draws,
            stalls=result.stalls,
            avg_turns=result.avg_turns,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _session_to_response(self, session: Session) -> GameResponse:
        return GameResponse(
            game_id=session.session_id,
            status=session.status.value,
            state=GameStateSchema.from_state(session.game_state),
            agents={player_id: agent.name for player_id, agent in session.agents.items()},
            log=list(session.log),
        )

    def _action_to_schema(self, action: Action) -> ActionSchema:
        payload = action.payload
        return ActionSchema(
            type=action.action_type.value,
            player_id=payload.player_id,
            echo=EchoSchema.from_echo(payload.echo) if payload.echo else None,
        )

    def _not_found(self, game_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Game not found: {game_id}",
            error_code=ErrorCode.GAME_NOT_FOUND,
        )

    def _unknown_agent(self, kind: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Unknown agent: {kind}",
            error_code=ErrorCode.UNKNOWN_AGENT,
            details={"available": sorted(AGENT_TYPES)},
        )
