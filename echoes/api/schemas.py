"""
Pydantic Schemas for API - External representation of the game.

These models define the exact contract between clients and the engine.
GameStateSchema mirrors every GameState field and converts both ways:

    schema = GameStateSchema.from_state(state)
    assert schema.to_state() == state

Error Codes:
- GAME_NOT_FOUND: Game session does not exist or has ended
- ILLEGAL_MOVE: Submitted move is not legal in the current state
- UNKNOWN_AGENT: Agent name is not registered
- VALIDATION_ERROR: Request body failed validation
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from ..engine_core.state import (
    Destruction,
    Direction,
    Echo,
    GamePhase,
    GameState,
    Instruction,
    InstructionType,
    Position,
    TurnHistoryEntry,
)


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    UNKNOWN_AGENT = "UNKNOWN_AGENT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Game State Models
# =============================================================================

class PositionSchema(BaseModel):
    """A board cell."""
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)

    @classmethod
    def from_position(cls, position: Position) -> "PositionSchema":
        return cls(row=position.row, col=position.col)

    def to_position(self) -> Position:
        return Position(self.row, self.col)


class DirectionSchema(BaseModel):
    """Unit step: dr is the row delta, dc the column delta."""
    dr: int = Field(..., ge=-1, le=1)
    dc: int = Field(..., ge=-1, le=1)

    @classmethod
    def from_direction(cls, direction: Direction) -> "DirectionSchema":
        return cls(dr=direction.dr, dc=direction.dc)

    def to_direction(self) -> Direction:
        return Direction(self.dr, self.dc)


class InstructionSchema(BaseModel):
    """One programmed instruction."""
    type: InstructionType
    direction: DirectionSchema
    tick: int = Field(..., ge=1)
    cost: int = Field(1, ge=0)

    @classmethod
    def from_instruction(cls, instruction: Instruction) -> "InstructionSchema":
        return cls(
            type=instruction.instruction_type,
            direction=DirectionSchema.from_direction(instruction.direction),
            tick=instruction.tick,
            cost=instruction.cost,
        )

    def to_instruction(self) -> Instruction:
        return Instruction(self.type, self.direction.to_direction(), self.tick, self.cost)


class EchoSchema(BaseModel):
    """A programmed unit."""
    id: str
    player_id: str
    position: PositionSchema
    instruction_list: list[InstructionSchema] = Field(default_factory=list)
    is_shielded: bool = False
    shield_direction: Optional[DirectionSchema] = None
    action_points: int = 0
    max_action_points: int = 0
    alive: bool = True

    @classmethod
    def from_echo(cls, echo: Echo) -> "EchoSchema":
        return cls(
            id=echo.echo_id,
            player_id=echo.player_id,
            position=PositionSchema.from_position(echo.position),
            instruction_list=[InstructionSchema.from_instruction(i) for i in echo.instruction_list],
            is_shielded=echo.is_shielded,
            shield_direction=(
                DirectionSchema.from_direction(echo.shield_direction)
                if echo.shield_direction else None
            ),
            action_points=echo.action_points,
            max_action_points=echo.max_action_points,
            alive=echo.alive,
        )

    def to_echo(self) -> Echo:
        return Echo(
            echo_id=self.id,
            player_id=self.player_id,
            position=self.position.to_position(),
            instruction_list=tuple(i.to_instruction() for i in self.instruction_list),
            is_shielded=self.is_shielded,
            shield_direction=self.shield_direction.to_direction() if self.shield_direction else None,
            action_points=self.action_points,
            max_action_points=self.max_action_points,
            alive=self.alive,
        )


class DestructionSchema(BaseModel):
    """An echo destroyed during a replay."""
    echo_id: str
    player_id: str
    destroyed_by: Optional[str] = None
    position: PositionSchema
    tick: int
    cause: str = "collision"

    @classmethod
    def from_destruction(cls, destruction: Destruction) -> "DestructionSchema":
        return cls(
            echo_id=destruction.echo_id,
            player_id=destruction.player_id,
            destroyed_by=destruction.destroyed_by,
            position=PositionSchema.from_position(destruction.position),
            tick=destruction.tick,
            cause=destruction.cause,
        )

    def to_destruction(self) -> Destruction:
        return Destruction(
            echo_id=self.echo_id,
            player_id=self.player_id,
            destroyed_by=self.destroyed_by,
            position=self.position.to_position(),
            tick=self.tick,
            cause=self.cause,
        )


class TurnHistoryEntrySchema(BaseModel):
    """One resolved round."""
    turn_number: int
    echoes: list[EchoSchema] = Field(default_factory=list)
    destroyed: list[DestructionSchema] = Field(default_factory=list)
    ticks: int = 0
    scores: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_entry(cls, entry: TurnHistoryEntry) -> "TurnHistoryEntrySchema":
        return cls(
            turn_number=entry.turn_number,
            echoes=[EchoSchema.from_echo(e) for e in entry.echoes],
            destroyed=[DestructionSchema.from_destruction(d) for d in entry.destroyed],
            ticks=entry.ticks,
            scores=dict(entry.scores),
        )

    def to_entry(self) -> TurnHistoryEntry:
        return TurnHistoryEntry(
            turn_number=self.turn_number,
            echoes=tuple(e.to_echo() for e in self.echoes),
            destroyed=tuple(d.to_destruction() for d in self.destroyed),
            ticks=self.ticks,
            scores=dict(self.scores),
        )


class GameStateSchema(BaseModel):
    """
    Full game state.

    `board` is derived from the echoes on output and ignored on input.
    """
    board: list[list[Optional[str]]] = Field(default_factory=list)
    echoes: list[EchoSchema] = Field(default_factory=list)
    phase: GamePhase = GamePhase.INPUT
    current_tick: int = 0
    turn_number: int = 1
    scores: dict[str, int] = Field(default_factory=dict)
    current_player: str = "player1"
    pending_echo: Optional[EchoSchema] = None
    submitted_players: list[str] = Field(default_factory=list)
    winner: Optional[str] = None
    turn_history: list[TurnHistoryEntrySchema] = Field(default_factory=list)
    next_echo_number: int = 1
    board_size: int = Field(8, ge=1)

    @classmethod
    def from_state(cls, state: GameState) -> "GameStateSchema":
        return cls(
            board=[[cell.value if cell else None for cell in row] for row in state.board],
            echoes=[EchoSchema.from_echo(e) for e in state.echoes],
            phase=state.phase,
            current_tick=state.current_tick,
            turn_number=state.turn_number,
            scores=dict(state.scores),
            current_player=state.current_player,
            pending_echo=EchoSchema.from_echo(state.pending_echo) if state.pending_echo else None,
            submitted_players=list(state.submitted_players),
            winner=state.winner,
            turn_history=[TurnHistoryEntrySchema.from_entry(t) for t in state.turn_history],
            next_echo_number=state.next_echo_number,
            board_size=state.board_size,
        )

    def to_state(self) -> GameState:
        """Rebuild the engine state. Raises ValueError for echoes off the board."""
        echoes = [e for e in (*self.echoes, self.pending_echo) if e is not None]
        for echo in echoes:
            if not echo.position.to_position().in_bounds(self.board_size):
                raise ValueError(
                    f"Echo {echo.id} at ({echo.position.row}, {echo.position.col}) "
                    f"is outside a {self.board_size}x{self.board_size} board"
                )

        return GameState(
            echoes=tuple(e.to_echo() for e in self.echoes),
            phase=self.phase,
            current_tick=self.current_tick,
            turn_number=self.turn_number,
            scores=dict(self.scores),
            current_player=self.current_player,
            pending_echo=self.pending_echo.to_echo() if self.pending_echo else None,
            submitted_players=tuple(self.submitted_players),
            winner=self.winner,
            turn_history=tuple(t.to_entry() for t in self.turn_history),
            next_echo_number=self.next_echo_number,
            board_size=self.board_size,
        )


class ActionSchema(BaseModel):
    """A legal top-level move, as offered to clients."""
    type: str = Field(..., description="add_echo, select_echo or finalize_echo")
    player_id: Optional[str] = None
    echo: Optional[EchoSchema] = None


# =============================================================================
# Request Models
# =============================================================================

class CreateGameRequest(BaseModel):
    """Request to create a new interactive game."""
    opponent: Optional[str] = Field(
        "random", description="Agent for the computer seat: random, first_legal, forward; null for hot-seat"
    )
    opponent_player_id: str = Field("player2", description="Seat taken by the agent")
    random_seed: Optional[int] = Field(None, description="Seed for reproducible games")
    allow_extension: bool = Field(False, description="Allow extending existing echoes")
    extended_instructions: bool = Field(False, description="Offer dash, fire, mine and shield")


class MoveInstruction(BaseModel):
    """One instruction of a submitted program."""
    type: InstructionType = InstructionType.WALK
    direction: DirectionSchema


class SubmitMoveRequest(BaseModel):
    """Place (or extend) an echo and program it."""
    player_id: str
    col: Optional[int] = Field(None, ge=0, description="Home row column for a new echo")
    echo_id: Optional[str] = Field(None, description="Existing echo to extend")
    instructions: list[MoveInstruction] = Field(default_factory=list)


class SimulationRequest(BaseModel):
    """Request to run headless games between two agents."""
    agent1: str = Field("random", description="Agent for player1")
    agent2: str = Field("random", description="Agent for player2")
    games: int = Field(1, ge=1, le=500)
    random_seed: Optional[int] = None
    max_turns: int = Field(200, ge=1, le=10000)
    include_log: bool = Field(False, description="Include the trace of the first game")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameResponse(BaseModel):
    """State of an interactive game."""
    game_id: str
    status: str
    state: GameStateSchema
    agents: dict[str, str] = Field(default_factory=dict)
    log: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class LegalActionsResponse(BaseModel):
    """Legal moves for one player."""
    game_id: str
    player_id: str
    actions: list[ActionSchema] = Field(default_factory=list)


class SimulationResponse(BaseModel):
    """Outcome of a batch of headless games."""
    games: int
    wins: dict[str, int] = Field(default_factory=dict)
    draws: int = 0
    stalls: int = 0
    avg_turns: float = 0.0
    final_state: Optional[GameStateSchema] = None
    log: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    active_games: int = 0


class TournamentRequest(BaseModel):
    """Request to run a tournament between two agent kinds."""
    first: str = Field("random", description="First agent kind")
    second: str = Field("forward", description="Second agent kind")
    games: int = Field(10, ge=1, le=1000)
    workers: int = Field(1, ge=1, le=16)
    random_seed: int = 0


class TournamentResponse(BaseModel):
    """Aggregated tournament outcome; seats alternate between games."""
    games: int
    wins: dict[str, int] = Field(default_factory=dict)
    win_rates: dict[str, float] = Field(default_factory=dict)
    draws: int = 0
    stalls: int = 0
    avg_turns: float = 0.0


class GameListResponse(BaseModel):
    """IDs of active games."""
    games: list[str] = Field(default_factory=list)
    count: int = 0


class EndGameResponse(BaseModel):
    """Result of ending a game."""
    success: bool
    game_id: str
