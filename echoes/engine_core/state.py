"""
Game State - Immutable snapshot of an Echoes game.

Design principles:
- Immutable: every transition returns a new GameState
- Authoritative positions live on the echoes; the board is derived
- Serializable: see api.schemas for the external representation
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum


PLAYER_ONE = "player1"
PLAYER_TWO = "player2"
PLAYERS = (PLAYER_ONE, PLAYER_TWO)


def opponent_of(player_id: str) -> str:
    """Return the other player's id."""
    return PLAYER_TWO if player_id == PLAYER_ONE else PLAYER_ONE


def home_row(player_id: str, board_size: int = 8) -> int:
    """Row on which a player places new echoes."""
    return 0 if player_id == PLAYER_ONE else board_size - 1


class GamePhase(Enum):
    """Turn phases."""
    INPUT = "input"
    REPLAY = "replay"


class EntityType(Enum):
    """Markers used on the derived board grid."""
    ECHO = "echo"
    PROJECTILE = "projectile"
    MINE = "mine"


class InstructionType(Enum):
    """Instructions an echo can be programmed with."""
    WALK = "walk"
    DASH = "dash"
    FIRE = "fire"
    MINE = "mine"
    SHIELD = "shield"


INSTRUCTION_COSTS = {
    InstructionType.WALK: 1,
    InstructionType.DASH: 2,
    InstructionType.FIRE: 2,
    InstructionType.MINE: 2,
    InstructionType.SHIELD: 1,
}


@dataclass(frozen=True)
class Direction:
    """Unit step on the board. dr is the row delta, dc the column delta."""
    dr: int
    dc: int

    def __post_init__(self):
        if self.dr not in (-1, 0, 1) or self.dc not in (-1, 0, 1):
            raise ValueError(f"Invalid direction components: ({self.dr}, {self.dc})")
        if self.dr == 0 and self.dc == 0:
            raise ValueError("Direction cannot be (0, 0)")

    @property
    def is_orthogonal(self) -> bool:
        return self.dr == 0 or self.dc == 0

    @property
    def name(self) -> str:
        return DIRECTION_NAMES[self]

    @property
    def arrow(self) -> str:
        return DIRECTION_ARROWS[self]

    def opposite(self) -> Direction:
        return Direction(-self.dr, -self.dc)


EAST = Direction(0, 1)
SOUTH = Direction(1, 0)
WEST = Direction(0, -1)
NORTH = Direction(-1, 0)
SOUTH_EAST = Direction(1, 1)
NORTH_EAST = Direction(-1, 1)
SOUTH_WEST = Direction(1, -1)
NORTH_WEST = Direction(-1, -1)

# Enumeration order for step instructions. Agents that pick "first legal"
# or index into the list depend on it.
DIRECTIONS = (EAST, SOUTH, WEST, NORTH, SOUTH_EAST, NORTH_EAST, SOUTH_WEST, NORTH_WEST)

# Clockwise compass order, used for shield arcs
COMPASS = (NORTH, NORTH_EAST, EAST, SOUTH_EAST, SOUTH, SOUTH_WEST, WEST, NORTH_WEST)

DIRECTION_NAMES = {
    NORTH: "N", NORTH_EAST: "NE", EAST: "E", SOUTH_EAST: "SE",
    SOUTH: "S", SOUTH_WEST: "SW", WEST: "W", NORTH_WEST: "NW",
}

DIRECTION_ARROWS = {
    NORTH: "↑", NORTH_EAST: "↗", EAST: "→", SOUTH_EAST: "↘",
    SOUTH: "↓", SOUTH_WEST: "↙", WEST: "←", NORTH_WEST: "↖",
}


@dataclass(frozen=True)
class Position:
    """A board cell."""
    row: int
    col: int

    def offset(self, direction: Direction, steps: int = 1) -> Position:
        return Position(self.row + direction.dr * steps, self.col + direction.dc * steps)

    def in_bounds(self, board_size: int = 8) -> bool:
        return 0 <= self.row < board_size and 0 <= self.col < board_size

    @property
    def label(self) -> str:
        """Cell notation: column letter + 1-based row, e.g. A1."""
        return f"{chr(ord('A') + self.col)}{self.row + 1}"


@dataclass(frozen=True)
class Instruction:
    """One programmed step, executed at `tick` during every replay."""
    instruction_type: InstructionType
    direction: Direction
    tick: int
    cost: int = 1

    @classmethod
    def walk(cls, direction: Direction, tick: int) -> Instruction:
        """Factory for walk instruction."""
        return cls(InstructionType.WALK, direction, tick, INSTRUCTION_COSTS[InstructionType.WALK])

    def move_from(self, position: Position) -> Position:
        """Cell reached from `position` after this instruction."""
        if self.instruction_type == InstructionType.WALK:
            return position.offset(self.direction)
        if self.instruction_type == InstructionType.DASH:
            return position.offset(self.direction, 2)
        return position

    @property
    def label(self) -> str:
        if self.instruction_type == InstructionType.WALK:
            return self.direction.arrow
        return f"{self.instruction_type.value}:{self.direction.arrow}"


@dataclass(frozen=True)
class Echo:
    """
    A programmed unit.

    `position` is the cell the echo starts each replay from. The program
    is replayed from there every round until the echo is destroyed.
    """
    echo_id: str
    player_id: str
    position: Position
    instruction_list: tuple[Instruction, ...] = ()
    is_shielded: bool = False
    shield_direction: Direction | None = None
    action_points: int = 0
    max_action_points: int = 0
    alive: bool = True

    def _copy_with(self, **kwargs) -> Echo:
        return replace(self, **kwargs)

    def with_instruction(self, instruction: Instruction) -> Echo:
        """Return new echo with the instruction appended and its cost paid."""
        return self._copy_with(
            instruction_list=self.instruction_list + (instruction,),
            action_points=max(0, self.action_points - instruction.cost),
        )

    def projected_position(self) -> Position:
        """Where the echo ends up after its movement instructions."""
        position = self.position
        for instruction in self.instruction_list:
            position = instruction.move_from(position)
        return position


@dataclass(frozen=True)
class Destruction:
    """An echo destroyed during replay."""
    echo_id: str
    player_id: str
    destroyed_by: str | None
    position: Position
    tick: int
    cause: str = "collision"


@dataclass(frozen=True)
class TurnHistoryEntry:
    """Everything needed to regenerate the event log of one round."""
    turn_number: int
    echoes: tuple[Echo, ...] = ()
    destroyed: tuple[Destruction, ...] = ()
    ticks: int = 0
    scores: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    This is the state-of-record. All changes go through the reducer.
    """
    echoes: tuple[Echo, ...] = ()
    phase: GamePhase = GamePhase.INPUT
    current_tick: int = 0
    turn_number: int = 1
    scores: dict[str, int] = field(default_factory=lambda: {p: 0 for p in PLAYERS})
    current_player: str = PLAYER_ONE
    pending_echo: Echo | None = None
    submitted_players: tuple[str, ...] = ()
    winner: str | None = None
    turn_history: tuple[TurnHistoryEntry, ...] = ()
    next_echo_number: int = 1
    board_size: int = 8

    @classmethod
    def initial(cls, board_size: int = 8) -> GameState:
        """The canonical starting snapshot."""
        return cls(board_size=board_size)

    @property
    def board(self) -> list[list[EntityType | None]]:
        """Grid of entity markers, derived from the living echoes."""
        grid: list[list[EntityType | None]] = [
            [None] * self.board_size for _ in range(self.board_size)
        ]
        for echo in self.living_echoes():
            if echo.position.in_bounds(self.board_size):
                grid[echo.position.row][echo.position.col] = EntityType.ECHO
        return grid

    def living_echoes(self, player_id: str | None = None) -> list[Echo]:
        return [
            e for e in self.echoes
            if e.alive and (player_id is None or e.player_id == player_id)
        ]

    def get_echo(self, echo_id: str) -> Echo | None:
        for echo in self.echoes:
            if echo.echo_id == echo_id:
                return echo
        return None

    def is_occupied(self, position: Position) -> bool:
        """True if a living echo sits on the cell."""
        return any(e.position == position for e in self.living_echoes())

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)
