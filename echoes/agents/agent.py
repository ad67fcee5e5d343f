"""
Agent - Interface for decision-making players.

An Agent takes a game state and a list of legal choices and returns one
of them, or None for "no action". The same call serves both decisions
the driver needs:
- Top-level moves (place / select / finalize an echo)
- Per-tick instructions for the echo being programmed

Agents may also implement `get_echo_action(state, echo, valid_echo_actions)`;
the driver prefers it for per-tick choices when present.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import random
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..engine_core.state import Echo, GameState


@dataclass
class GameResult:
    """
    Outcome of one headless game.

    winner is None for a draw, a stall or a cancelled run.
    """
    winner: str | None
    final_state: GameState
    log: list[str] = field(default_factory=list)
    history: list[GameState] = field(default_factory=list)
    reason: str = "max_turns"
    turns: int = 0


class Agent(ABC):
    """
    Abstract base class for agents.

    Implementations range from uniform random play to rule-based
    heuristics and learned policies; all are drop-in for the driver.
    """

    def __init__(self, agent_id: str, name: str | None = None, player_id: str | None = None):
        self.id = agent_id
        self.name = name or self.__class__.__name__
        self.player_id = player_id

    @abstractmethod
    def get_action(
        self,
        state: GameState,
        echo_id: str | None = None,
        valid_actions: list[Any] | None = None,
    ) -> Any | None:
        """
        Choose one entry of `valid_actions`.

        Args:
            state: Current game state
            echo_id: Echo being programmed, for per-tick decisions
            valid_actions: Legal choices, pre-computed by the driver

        Returns:
            The chosen entry, or None for no action
        """

    def reset(self):
        """Clear any memory kept between games."""

    def on_game_end(self, result: GameResult, history: list[GameState]):
        """Called once with the final result and the full state history."""

    def get_stats(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "player_id": self.player_id,
        }


class RandomAgent(Agent):
    """
    Random agent - samples uniformly from whatever it is handed.

    Used for:
    - Testing
    - Baseline comparison
    - Training data generation
    """

    def __init__(
        self,
        agent_id: str,
        name: str | None = None,
        player_id: str | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ):
        super().__init__(agent_id, name, player_id)
        self.rng = rng or random.Random(seed)

    def get_action(self, state, echo_id=None, valid_actions=None):
        if not valid_actions:
            return None
        return self.rng.choice(valid_actions)

    def get_echo_action(self, state: GameState, echo: Echo, valid_echo_actions: list[Any]):
        if not valid_echo_actions:
            return None
        return self.rng.choice(valid_echo_actions)


class FirstLegalAgent(Agent):
    """
    First-legal agent - always picks the first entry.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def get_action(self, state, echo_id=None, valid_actions=None):
        if not valid_actions:
            return None
        return valid_actions[0]

    def get_echo_action(self, state: GameState, echo: Echo, valid_echo_actions: list[Any]):
        if not valid_echo_actions:
            return None
        return valid_echo_actions[0]
