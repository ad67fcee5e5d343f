"""
Action Generator - Enumerates every legal action from a game state.

The action generator is used by:
1. Agents to enumerate possible moves
2. The headless driver and API to drive a turn
3. Validation (is this move in legal_actions?)

Enumeration is exhaustive and ordered, never sampled: placements scan
columns 0..7, step instructions follow the fixed DIRECTIONS table.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .action import Action, ActionType
from .config import GameConfig, DEFAULT_CONFIG
from .state import (
    DIRECTIONS,
    INSTRUCTION_COSTS,
    Echo,
    GamePhase,
    GameState,
    Instruction,
    InstructionType,
    Position,
    home_row,
)


@dataclass
class ActionGenerator:
    """
    Generates legal actions for a player.

    Stateless - all state is in GameState.
    Config provides the action point budgets and optional rules.
    """
    config: GameConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    def generate(self, state: GameState, player_id: str) -> list[Action]:
        """
        Generate all legal actions for a player.

        Returns an empty list when it is not the player's turn, the phase
        is not input, or the player has already submitted this turn.
        """
        if state.current_player != player_id:
            return []
        if state.phase != GamePhase.INPUT:
            return []
        if player_id in state.submitted_players:
            return []

        if state.pending_echo is None:
            actions = self._generate_placement_actions(state, player_id)
            if self.config.allow_extension:
                actions.extend(self._generate_extension_actions(state, player_id))
            return actions

        if state.pending_echo.player_id == player_id:
            return [Action.finalize_echo(state.pending_echo)]

        return []

    def generate_echo_actions(self, state: GameState, echo: Echo) -> list[Instruction]:
        """
        Generate the legal next instructions for a partially programmed echo.

        `echo.position` is taken as the cell the echo occupies once its
        current program has run, so callers pass a projected copy.
        """
        remaining = echo.action_points
        if remaining <= 0:
            return []

        size = self.config.board_size
        tick = len(echo.instruction_list) + 1
        origin = echo.position

        instructions = [
            Instruction.walk(direction, tick)
            for direction in DIRECTIONS
            if origin.offset(direction).in_bounds(size)
        ]

        if self.config.extended_instructions:
            instructions.extend(self._generate_extended_instructions(origin, tick, remaining))

        return [i for i in instructions if i.cost <= remaining]

    def is_legal_program(self, state: GameState, echo: Echo, program) -> bool:
        """
        Check that `program` extends `echo`'s instruction list one legal
        step at a time. Unspent action points are not checked here.
        """
        program = tuple(program)
        existing = echo.instruction_list
        if program[:len(existing)] != existing:
            return False

        working = echo._copy_with(position=echo.projected_position())
        for instruction in program[len(existing):]:
            if instruction not in self.generate_echo_actions(state, working):
                return False
            working = working.with_instruction(instruction)
            working = working._copy_with(position=instruction.move_from(working.position))
        return True

    def _generate_placement_actions(self, state: GameState, player_id: str) -> list[Action]:
        """One ADD_ECHO per free column of the player's home row."""
        row = home_row(player_id, self.config.board_size)
        echo_id = f"echo-{state.next_echo_number}"

        actions = []
        for col in range(self.config.board_size):
            position = Position(row, col)
            if state.is_occupied(position):
                continue
            actions.append(Action.add_echo(Echo(
                echo_id=echo_id,
                player_id=player_id,
                position=position,
                action_points=self.config.new_echo_action_points,
                max_action_points=self.config.new_echo_action_points,
            )))
        return actions

    def _generate_extension_actions(self, state: GameState, player_id: str) -> list[Action]:
        """One SELECT_ECHO per living echo the player owns."""
        points = self.config.extension_action_points
        return [
            Action.select_echo(echo._copy_with(action_points=points, max_action_points=points))
            for echo in state.living_echoes(player_id)
        ]

    def _generate_extended_instructions(
        self, origin: Position, tick: int, remaining: int
    ) -> list[Instruction]:
        size = self.config.board_size
        instructions = []

        for direction in DIRECTIONS:
            if direction.is_orthogonal and origin.offset(direction, 2).in_bounds(size):
                instructions.append(self._instruction(InstructionType.DASH, direction, tick))
        for kind in (InstructionType.FIRE, InstructionType.MINE):
            for direction in DIRECTIONS:
                if origin.offset(direction).in_bounds(size):
                    instructions.append(self._instruction(kind, direction, tick))
        for direction in DIRECTIONS:
            instructions.append(self._instruction(InstructionType.SHIELD, direction, tick))

        return instructions

    @staticmethod
    def _instruction(kind: InstructionType, direction, tick: int) -> Instruction:
        return Instruction(kind, direction, tick, INSTRUCTION_COSTS[kind])


def legal_actions(
    state: GameState, player_id: str, config: GameConfig | None = None
) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    return ActionGenerator(config=config or DEFAULT_CONFIG).generate(state, player_id)


def legal_echo_actions(
    state: GameState, echo: Echo, config: GameConfig | None = None
) -> list[Instruction]:
    """Convenience function to get the legal next instructions for an echo."""
    return ActionGenerator(config=config or DEFAULT_CONFIG).generate_echo_actions(state, echo)


def is_legal(state: GameState, action: Action, config: GameConfig | None = None) -> bool:
    """
    Check if a specific player move is legal.

    For FINALIZE_ECHO the instruction list is checked step by step
    against generate_echo_actions, starting from the pending echo.
    """
    player_id = action.payload.player_id
    if player_id is None:
        return False
    generator = ActionGenerator(config=config or DEFAULT_CONFIG)
    for candidate in generator.generate(state, player_id):
        if candidate.action_type != action.action_type:
            continue
        if action.action_type == ActionType.FINALIZE_ECHO:
            pending = candidate.payload.echo
            if pending.echo_id == action.payload.echo_id and action.payload.echo is not None:
                return generator.is_legal_program(state, pending, action.payload.echo.instruction_list)
        elif candidate == action:
            return True
    return False
