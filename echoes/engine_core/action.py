"""
Action System - Transitions understood by the reducer.

Actions represent:
1. Player moves (place an echo, select one for extension, finalize it)
2. Turn bookkeeping (submit, switch player, next turn)
3. Round resolution (replay outcome, scores, history, win check)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .state import Echo, TurnHistoryEntry


class ActionType(Enum):
    """Types of actions in the system."""
    # Game lifecycle
    RESET_GAME = "reset_game"

    # Player moves
    ADD_ECHO = "add_echo"
    SELECT_ECHO = "select_echo"
    FINALIZE_ECHO = "finalize_echo"

    # Turn bookkeeping
    SWITCH_PLAYER = "switch_player"
    SUBMIT_TURN = "submit_turn"
    NEXT_TURN = "next_turn"
    REMOVE_ECHO = "remove_echo"

    # Round resolution
    RESOLVE_REPLAY = "resolve_replay"
    RECORD_TURN_HISTORY = "record_turn_history"
    UPDATE_SCORES = "update_scores"
    CHECK_WIN = "check_win"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    This is a generic container; the reducer ignores what it does not need.
    """
    player_id: str | None = None
    echo: Echo | None = None
    echo_id: str | None = None

    # Round resolution
    entry: TurnHistoryEntry | None = None
    destroyed: tuple[tuple[str, str | None], ...] = ()
    destroyed_ids: tuple[str, ...] = ()
    tick: int = 0


@dataclass(frozen=True)
class Action:
    """A complete action to be applied to the game state."""
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def reset(cls) -> Action:
        return cls(ActionType.RESET_GAME)

    @classmethod
    def add_echo(cls, echo: Echo) -> Action:
        """Factory for placing a fresh echo on the home row."""
        return cls(
            ActionType.ADD_ECHO,
            ActionPayload(player_id=echo.player_id, echo=echo, echo_id=echo.echo_id),
        )

    @classmethod
    def select_echo(cls, echo: Echo) -> Action:
        """Factory for picking an existing echo to extend."""
        return cls(
            ActionType.SELECT_ECHO,
            ActionPayload(player_id=echo.player_id, echo=echo, echo_id=echo.echo_id),
        )

    @classmethod
    def finalize_echo(cls, echo: Echo) -> Action:
        """Factory for committing the pending echo's program."""
        return cls(
            ActionType.FINALIZE_ECHO,
            ActionPayload(player_id=echo.player_id, echo=echo, echo_id=echo.echo_id),
        )

    @classmethod
    def switch_player(cls) -> Action:
        return cls(ActionType.SWITCH_PLAYER)

    @classmethod
    def submit_turn(cls, player_id: str) -> Action:
        return cls(ActionType.SUBMIT_TURN, ActionPayload(player_id=player_id))

    @classmethod
    def next_turn(cls) -> Action:
        return cls(ActionType.NEXT_TURN)

    @classmethod
    def remove_echo(cls, echo_id: str) -> Action:
        return cls(ActionType.REMOVE_ECHO, ActionPayload(echo_id=echo_id))

    @classmethod
    def resolve_replay(cls, destroyed_ids: list[str], tick: int) -> Action:
        """Factory for applying a replay outcome (marks echoes dead)."""
        return cls(
            ActionType.RESOLVE_REPLAY,
            ActionPayload(destroyed_ids=tuple(destroyed_ids), tick=tick),
        )

    @classmethod
    def record_turn_history(cls, entry: TurnHistoryEntry) -> Action:
        return cls(ActionType.RECORD_TURN_HISTORY, ActionPayload(entry=entry))

    @classmethod
    def update_scores(cls, destroyed: list[tuple[str, str | None]]) -> Action:
        """Factory for scoring (destroyed echo id, destroying player or None) pairs."""
        return cls(ActionType.UPDATE_SCORES, ActionPayload(destroyed=tuple(destroyed)))

    @classmethod
    def check_win(cls) -> Action:
        return cls(ActionType.CHECK_WIN)

    @property
    def label(self) -> str:
        """Short human-readable description for logs."""
        echo = self.payload.echo
        if self.action_type == ActionType.ADD_ECHO and echo:
            return f"ADD_ECHO at {echo.position.label}"
        if self.action_type == ActionType.SELECT_ECHO and echo:
            return f"SELECT_ECHO {echo.echo_id} at {echo.position.label}"
        if self.action_type == ActionType.FINALIZE_ECHO and echo:
            return f"FINALIZE_ECHO {echo.echo_id}"
        return self.action_type.name
