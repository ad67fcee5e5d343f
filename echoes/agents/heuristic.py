"""
Forward Agent - A small rule-based opponent.

Rules of thumb:
- Place new echoes in the free column closest to the board centre
- Program steps that advance towards the opponent's home row
- Break ties by the fixed enumeration order, then by the seeded rng
"""

from __future__ import annotations
import random

from ..engine_core.action import ActionType
from ..engine_core.state import (
    PLAYER_ONE,
    Echo,
    GameState,
    Instruction,
    InstructionType,
)
from .agent import Agent


class ForwardAgent(Agent):
    """Rule-based agent that pushes its echoes up the board."""

    def __init__(
        self,
        agent_id: str,
        name: str | None = None,
        player_id: str | None = None,
        seed: int | None = None,
        board_size: int = 8,
    ):
        super().__init__(agent_id, name, player_id)
        self.rng = random.Random(seed)
        self.board_size = board_size

    def get_action(self, state, echo_id=None, valid_actions=None):
        if not valid_actions:
            return None

        if echo_id is not None:
            echo = state.pending_echo
            if echo is None or echo.echo_id != echo_id:
                echo = state.get_echo(echo_id)
            if echo is not None:
                return self.get_echo_action(state, echo, valid_actions)
            return self.rng.choice(valid_actions)

        placements = [
            a for a in valid_actions
            if getattr(a, "action_type", None) == ActionType.ADD_ECHO
        ]
        if placements:
            centre = (self.board_size - 1) / 2
            return min(placements, key=lambda a: abs(a.payload.echo.position.col - centre))
        return valid_actions[0]

    def get_echo_action(self, state: GameState, echo: Echo, valid_echo_actions: list[Instruction]):
        if not valid_echo_actions:
            return None

        forward = 1 if echo.player_id == PLAYER_ONE else -1
        best_score = max(self._score(i, forward) for i in valid_echo_actions)
        best = [i for i in valid_echo_actions if self._score(i, forward) == best_score]
        return best[0] if len(best) == 1 else self.rng.choice(best)

    @staticmethod
    def _score(instruction: Instruction, forward: int) -> int:
        advance = instruction.direction.dr * forward
        if instruction.instruction_type == InstructionType.FIRE:
            return 3 if advance > 0 else 0
        if instruction.instruction_type == InstructionType.DASH:
            return 2 * advance
        if instruction.instruction_type == InstructionType.WALK:
            return advance
        return 0
