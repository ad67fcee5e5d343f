"""
Session Manager - Creates and manages interactive game sessions.

A session is one game in progress where at least one side is driven from
outside (a UI or API client). The other side may be an agent, in which
case its turns run automatically after every human submission, as do
replay resolutions.

Sessions are in-memory only. There is no persistence and no
synchronization between clients.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import time
import uuid
from typing import Any

from ..agents import Agent, build_agent
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.config import GameConfig, DEFAULT_CONFIG
from ..engine_core.events import format_turn_entry
from ..engine_core.reducer import Reducer
from ..engine_core.resolution import resolve_round
from ..engine_core.state import (
    PLAYER_TWO,
    PLAYERS,
    Direction,
    GamePhase,
    GameState,
    InstructionType,
)
from .runner import GameStalled, HeadlessGameRunner

logger = logging.getLogger(__name__)


class IllegalMoveError(ValueError):
    """A submitted move is not legal in the current state."""


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"
    STALLED = "stalled"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


@dataclass
class Session:
    """
    An in-memory game session.

    Contains:
    - The current canonical game state and its history
    - Agents for any computer-controlled seats
    - A running event log
    """
    session_id: str
    created_at: float
    config: GameConfig = field(default_factory=lambda: DEFAULT_CONFIG)
    status: SessionState = SessionState.ACTIVE
    game_state: GameState = field(default_factory=GameState.initial)
    agents: dict[str, Agent] = field(default_factory=dict)
    history: list[GameState] = field(default_factory=list)
    log: list[str] = field(default_factory=list)
    seed: int | None = None

    def __post_init__(self):
        if not self.history:
            self.history.append(self.game_state)
        self._runner = HeadlessGameRunner(config=self.config, seed=self.seed)
        self._generator = ActionGenerator(config=self.config)
        self._reducer = Reducer(config=self.config)

    def is_active(self) -> bool:
        return self.status == SessionState.ACTIVE

    def is_agent_turn(self) -> bool:
        return self.game_state.current_player in self.agents

    def legal_actions(self, player_id: str) -> list[Action]:
        return self._generator.generate(self.game_state, player_id)

    def submit_move(
        self,
        player_id: str,
        instructions: list[tuple[InstructionType, Direction]],
        col: int | None = None,
        echo_id: str | None = None,
    ):
        """
        Play a full move for a human-controlled player.

        Either place a new echo on `col` of the home row, or extend the
        living echo `echo_id`, then program it with `instructions` in
        order. Every action point must be spent while a legal instruction
        remains. Raises IllegalMoveError without changing anything if any
        part of the move is illegal, and ValueError if both or neither of
        `col` and `echo_id` are given.
        """
        if (col is None) == (echo_id is None):
            raise ValueError("Give exactly one of col or echo_id")
        if not self.is_active():
            raise IllegalMoveError(f"Session is {self.status.value}")
        if player_id in self.agents:
            raise IllegalMoveError(f"{player_id} is controlled by an agent")

        state = self.game_state
        snapshots: list[GameState] = []

        opener = self._find_opening_action(state, player_id, col, echo_id)
        state = self._reducer.apply(state, opener)
        snapshots.append(state)

        echo = state.pending_echo
        working = echo._copy_with(position=echo.projected_position())
        for kind, direction in instructions:
            options = self._generator.generate_echo_actions(state, working)
            choice = next(
                (i for i in options if i.instruction_type == kind and i.direction == direction),
                None,
            )
            if choice is None:
                raise IllegalMoveError(
                    f"Illegal {kind.value} {direction.name} at tick {len(working.instruction_list) + 1}"
                )
            working = working.with_instruction(choice)
            working = working._copy_with(position=choice.move_from(working.position))

        if working.action_points > 0 and self._generator.generate_echo_actions(state, working):
            raise IllegalMoveError(
                f"{working.action_points} action point(s) left unassigned on {echo.echo_id}"
            )

        finalized = echo._copy_with(
            instruction_list=working.instruction_list,
            action_points=working.action_points,
        )
        for action in (Action.finalize_echo(finalized), Action.submit_turn(player_id)):
            state = self._reducer.apply(state, action)
            snapshots.append(state)
        if state.phase == GamePhase.INPUT:
            state = self._reducer.apply(state, Action.switch_player())
            snapshots.append(state)

        self.game_state = state
        self.history.extend(snapshots)
        self.log.append(f"{player_id}: {opener.label} programmed with {len(instructions)} instruction(s)")
        self.advance()

    def advance(self):
        """Run replays and agent turns until a human must act or the game ends."""
        while self.is_active():
            state = self.game_state
            if state.winner is not None:
                self.status = SessionState.GAME_OVER
                self.log.append(f"Game over! Winner: {state.winner}")
                break

            if state.phase == GamePhase.REPLAY:
                outcome = resolve_round(state, self._reducer)
                self.history.extend(outcome.states)
                self.log.extend(format_turn_entry(outcome.entry))
                self.game_state = outcome.final_state
                continue

            agent = self.agents.get(state.current_player)
            if agent is None:
                if not self.legal_actions(state.current_player):
                    self._stall("No valid actions available.")
                break

            try:
                self.game_state = self._runner.step(state, agent, self.log, self.history)
            except GameStalled as stall:
                self._stall(str(stall))

    def _stall(self, message: str):
        self.log.append(message)
        self.status = SessionState.STALLED
        logger.info("Session %s stalled: %s", self.session_id, message)

    def _find_opening_action(self, state, player_id, col, echo_id) -> Action:
        legal = self._generator.generate(state, player_id)
        if not legal:
            raise IllegalMoveError(f"No legal actions for {player_id}")

        if echo_id is not None:
            wanted = ActionType.SELECT_ECHO
            match = next(
                (a for a in legal if a.action_type == wanted and a.payload.echo_id == echo_id),
                None,
            )
        else:
            wanted = ActionType.ADD_ECHO
            match = next(
                (a for a in legal if a.action_type == wanted and a.payload.echo.position.col == col),
                None,
            )
        if match is None:
            target = f"echo {echo_id}" if echo_id is not None else f"column {col}"
            raise IllegalMoveError(f"Cannot {wanted.value} for {player_id} at {target}")
        return match


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with optional agent opponents
    - Track active sessions
    - Clean up finished sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, config: GameConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        opponent: str | None = "random",
        opponent_player_id: str = PLAYER_TWO,
        seed: int | None = None,
        config: GameConfig | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            opponent: Agent registry name for the computer seat, or None
                for a hot-seat game between two humans
            opponent_player_id: Which seat the agent takes
            seed: Seed for the agent and the driver's fallback rng
            config: Rule overrides for this session

        Raises KeyError for an unknown opponent name.
        """
        config = config or self.config
        seed = seed if seed is not None else random.randrange(2**31)

        agents = {}
        if opponent is not None:
            if opponent_player_id not in PLAYERS:
                raise ValueError(f"Unknown player id: {opponent_player_id}")
            agents[opponent_player_id] = build_agent(opponent, opponent_player_id, seed=seed)

        session = Session(
            session_id=str(uuid.uuid4()),
            created_at=time.time(),
            config=config,
            game_state=GameState.initial(board_size=config.board_size),
            agents=agents,
            seed=seed,
        )
        self._sessions[session.session_id] = session
        logger.info("Created session %s (opponent=%s)", session.session_id, opponent)

        # The agent may hold the first seat
        session.advance()
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """End a session and drop it from memory."""
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        if session.status == SessionState.ACTIVE:
            session.status = SessionState.ABANDONED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [sid for sid, s in self._sessions.items() if s.is_active()]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """Drop finished sessions older than max_age. Returns how many were removed."""
        now = time.time()
        stale = [
            sid for sid, s in self._sessions.items()
            if now - s.created_at > max_age_seconds and not s.is_active()
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return len(stale)

    def stats(self) -> dict[str, Any]:
        return {
            "sessions": len(self._sessions),
            "active": len(self.list_active_sessions()),
        }
