"""
FastAPI Application - REST API for playing and simulating Echoes.

Endpoints:
    POST   /api/v1/games                     Create an interactive game
    GET    /api/v1/games                     List active games
    GET    /api/v1/games/{id}                Get game state and log
    DELETE /api/v1/games/{id}                End a game
    GET    /api/v1/games/{id}/legal-actions  Legal moves for a player
    POST   /api/v1/games/{id}/moves          Place and program an echo
    POST   /api/v1/simulations               Run headless agent games
    POST   /api/v1/tournaments               Run a seat-alternating tournament

Agent seats and replay resolution run automatically after every accepted
move, so each response already reflects the opponent's reply.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import logging
import os

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..engine_core.config import GameConfig
from .schemas import (
    CreateGameRequest,
    EndGameResponse,
    ErrorCode,
    ErrorResponse,
    GameListResponse,
    GameResponse,
    HealthResponse,
    LegalActionsResponse,
    SimulationRequest,
    SimulationResponse,
    SubmitMoveRequest,
    TournamentRequest,
    TournamentResponse,
)
from .service import APIService

# Environment configuration
ECHOES_ENV = os.getenv("ECHOES_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    ErrorCode.GAME_NOT_FOUND: 404,
    ErrorCode.ILLEGAL_MOVE: 409,
    ErrorCode.UNKNOWN_AGENT: 400,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Echoes API",
        description="""
Turn-based tactical game engine with simultaneous programmed moves.

## Flow

1. `POST /api/v1/games` creates a game, optionally against an agent
2. `GET /legal-actions` lists the free home-row cells
3. `POST /moves` places an echo and programs its instructions
4. Once both players submit, the round replays and scores update

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | Game does not exist or has ended |
| `ILLEGAL_MOVE` | Move is not legal in the current state |
| `UNKNOWN_AGENT` | Agent name is not registered |
| `VALIDATION_ERROR` | Request is malformed |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(config=GameConfig.from_env())

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code or _STATUS_CODES.get(error_code, 400),
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def respond(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response.error_code, response.error, details=response.details)
        return response

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameResponse,
        responses={400: {"model": ErrorResponse, "description": "Unknown agent"}},
        tags=["Games"],
        summary="Create a new game",
    )
    async def create_game(request: CreateGameRequest) -> Union[GameResponse, JSONResponse]:
        """
        Create a new game.

        Set `opponent` to an agent name to play against the computer, or to
        null for a hot-seat game between two clients.
        """
        return respond(api_service.create_game(request))

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List active games",
    )
    async def list_games() -> GameListResponse:
        return api_service.list_games()

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game state",
    )
    async def get_game(game_id: str) -> Union[GameResponse, JSONResponse]:
        """Get the full state and event log of a game."""
        return respond(api_service.get_game(game_id))

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=EndGameResponse,
        tags=["Games"],
        summary="End a game",
    )
    async def end_game(
        game_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndGameResponse:
        """End a game and release resources."""
        return api_service.end_game(game_id, reason)

    @app.get(
        "/api/v1/games/{game_id}/legal-actions",
        response_model=LegalActionsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="List legal moves",
    )
    async def get_legal_actions(
        game_id: str,
        player_id: Annotated[str, Query(description="Player to list moves for")],
    ) -> Union[LegalActionsResponse, JSONResponse]:
        return respond(api_service.get_legal_actions(game_id, player_id))

    @app.post(
        "/api/v1/games/{game_id}/moves",
        response_model=GameResponse,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse, "description": "Illegal move"},
        },
        tags=["Games"],
        summary="Place and program an echo",
    )
    async def submit_move(game_id: str, request: SubmitMoveRequest) -> Union[GameResponse, JSONResponse]:
        """
        Submit a full move: a home-row column (or an echo to extend) plus
        its instruction program. Illegal moves leave the game unchanged.
        """
        return respond(api_service.submit_move(game_id, request))

    # =========================================================================
    # Simulation Endpoints
    # Plain def: FastAPI runs these in its threadpool, off the event loop.
    # =========================================================================

    @app.post(
        "/api/v1/simulations",
        response_model=SimulationResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Simulation"],
        summary="Run headless games",
    )
    def run_simulation(request: SimulationRequest) -> Union[SimulationResponse, JSONResponse]:
        return respond(api_service.run_simulation(request))

    @app.post(
        "/api/v1/tournaments",
        response_model=TournamentResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Simulation"],
        summary="Run a tournament",
    )
    def run_tournament(request: TournamentRequest) -> Union[TournamentResponse, JSONResponse]:
        """Play many games between two agent kinds, alternating seats."""
        return respond(api_service.run_tournament(request))

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
            service="echoes-engine",
            version=__version__,
            active_games=len(api_service.session_manager.list_active_sessions()),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Echoes API",
            "version": __version__,
            "environment": ECHOES_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    logger.debug("Created Echoes API app (env=%s)", ECHOES_ENV)
    return app


# For running directly: uvicorn echoes.api.app:app
app = create_app()
