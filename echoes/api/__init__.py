"""
API Module - HTTP interface.

Exposes the engine via a REST API. Clients:
1. Create games, optionally against an agent
2. Query legal moves
3. Submit placements and instruction programs
4. Run headless simulations and tournaments

All state is session-scoped and in memory.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    SubmitMoveRequest,
    MoveInstruction,
    SimulationRequest,
    TournamentRequest,
    # Responses
    GameResponse,
    LegalActionsResponse,
    SimulationResponse,
    TournamentResponse,
    GameListResponse,
    EndGameResponse,
    ErrorResponse,
    HealthResponse,
    ErrorCode,
    # State
    GameStateSchema,
    EchoSchema,
    InstructionSchema,
    DirectionSchema,
    PositionSchema,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "SubmitMoveRequest",
    "MoveInstruction",
    "SimulationRequest",
    "TournamentRequest",
    # Responses
    "GameResponse",
    "LegalActionsResponse",
    "SimulationResponse",
    "TournamentResponse",
    "GameListResponse",
    "EndGameResponse",
    "ErrorResponse",
    "HealthResponse",
    "ErrorCode",
    # State
    "GameStateSchema",
    "EchoSchema",
    "InstructionSchema",
    "DirectionSchema",
    "PositionSchema",
    # Service
    "APIService",
    "create_app",
]
