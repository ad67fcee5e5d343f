"""
Engine Core - Deterministic game state management and replay resolution.

The engine is the runtime that:
1. Holds the immutable GameState
2. Generates legal actions
3. Applies actions via the reducer
4. Replays echo programs and resolves collisions
5. Turns each replay into scores, history and a win check
"""

from .config import GameConfig, DEFAULT_CONFIG
from .state import (
    GameState,
    GamePhase,
    Echo,
    Instruction,
    InstructionType,
    Position,
    Direction,
    Destruction,
    TurnHistoryEntry,
    EntityType,
    DIRECTIONS,
    PLAYER_ONE,
    PLAYER_TWO,
    PLAYERS,
    opponent_of,
    home_row,
)
from .action import Action, ActionType, ActionPayload
from .reducer import Reducer, apply_action, evaluate_winner
from .action_generator import ActionGenerator, legal_actions, legal_echo_actions, is_legal
from .replay import ReplayResolver, ReplayResult, ReplayFrame, Projectile, simulate_replay
from .resolution import RoundOutcome, resolve_round
from .events import format_turn_entry, format_history

__all__ = [
    "GameConfig",
    "DEFAULT_CONFIG",
    "GameState",
    "GamePhase",
    "Echo",
    "Instruction",
    "InstructionType",
    "Position",
    "Direction",
    "Destruction",
    "TurnHistoryEntry",
    "EntityType",
    "DIRECTIONS",
    "PLAYER_ONE",
    "PLAYER_TWO",
    "PLAYERS",
    "opponent_of",
    "home_row",
    "Action",
    "ActionType",
    "ActionPayload",
    "Reducer",
    "apply_action",
    "evaluate_winner",
    "ActionGenerator",
    "legal_actions",
    "legal_echo_actions",
    "is_legal",
    "ReplayResolver",
    "ReplayResult",
    "ReplayFrame",
    "Projectile",
    "simulate_replay",
    "RoundOutcome",
    "resolve_round",
    "format_turn_entry",
    "format_history",
]
