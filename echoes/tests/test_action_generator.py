"""
Tests for the action generator.

Tests:
- Placement enumeration on the home rows
- Turn, phase and submission gating
- Per-tick instruction enumeration and ordering
- Optional extension and extended instructions
"""

import pytest

from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import (
    ActionGenerator,
    is_legal,
    legal_actions,
    legal_echo_actions,
)
from ..engine_core.state import (
    DIRECTIONS,
    EAST,
    NORTH,
    PLAYER_ONE,
    PLAYER_TWO,
    SOUTH,
    GamePhase,
    Instruction,
    InstructionType,
    Position,
)
from .conftest import make_echo


class TestPlacement:
    """Tests for ADD_ECHO enumeration."""

    def test_initial_state_offers_eight_placements(self, generator, initial_state):
        actions = generator.generate(initial_state, PLAYER_ONE)

        assert len(actions) == 8
        assert all(a.action_type == ActionType.ADD_ECHO for a in actions)
        assert [a.payload.echo.position for a in actions] == [Position(0, c) for c in range(8)]

    def test_placement_echo_fields(self, generator, initial_state):
        """New echoes carry the next id and a full action point budget."""
        echo = generator.generate(initial_state, PLAYER_ONE)[0].payload.echo

        assert echo.echo_id == "echo-1"
        assert echo.player_id == PLAYER_ONE
        assert echo.instruction_list == ()
        assert echo.action_points == 5
        assert echo.max_action_points == 5
        assert echo.alive

    def test_player_two_uses_bottom_row(self, generator, initial_state):
        state = initial_state._copy_with(current_player=PLAYER_TWO)
        actions = generator.generate(state, PLAYER_TWO)

        assert {a.payload.echo.position.row for a in actions} == {7}

    def test_occupied_cells_are_skipped(self, generator, initial_state):
        """A living echo on the home row blocks that column."""
        state = initial_state._copy_with(
            echoes=(make_echo("echo-1", PLAYER_ONE, 0, 3),),
            next_echo_number=2,
        )
        actions = generator.generate(state, PLAYER_ONE)

        assert 3 not in [a.payload.echo.position.col for a in actions]
        assert len(actions) == 7
        assert actions[0].payload.echo.echo_id == "echo-2"

    def test_dead_echo_does_not_block(self, generator, initial_state):
        state = initial_state._copy_with(echoes=(make_echo("echo-1", PLAYER_ONE, 0, 3, alive=False),))
        assert len(generator.generate(state, PLAYER_ONE)) == 8

    def test_full_home_row_offers_nothing(self, generator, initial_state):
        """Eight living echoes on row 0 leave player1 no placement."""
        echoes = tuple(make_echo(f"echo-{c + 1}", PLAYER_ONE, 0, c) for c in range(8))
        state = initial_state._copy_with(echoes=echoes, next_echo_number=9)

        assert generator.generate(state, PLAYER_ONE) == []


class TestGating:
    """When no actions are offered."""

    def test_not_your_turn(self, generator, initial_state):
        assert generator.generate(initial_state, PLAYER_TWO) == []

    def test_replay_phase(self, generator, initial_state):
        state = initial_state._copy_with(phase=GamePhase.REPLAY)
        assert generator.generate(state, PLAYER_ONE) == []

    def test_already_submitted(self, generator, initial_state):
        state = initial_state._copy_with(submitted_players=(PLAYER_ONE,))
        assert generator.generate(state, PLAYER_ONE) == []

    def test_pending_echo_offers_only_finalize(self, generator, reducer, initial_state):
        add = generator.generate(initial_state, PLAYER_ONE)[2]
        state = reducer.apply(initial_state, add)
        actions = generator.generate(state, PLAYER_ONE)

        assert actions == [Action.finalize_echo(state.pending_echo)]

    def test_pending_echo_of_opponent(self, generator, initial_state):
        state = initial_state._copy_with(pending_echo=make_echo("echo-1", PLAYER_TWO, 7, 0))
        assert generator.generate(state, PLAYER_ONE) == []


class TestEchoActions:
    """Tests for per-tick instruction enumeration."""

    def test_corner_offers_in_bounds_directions(self, generator, initial_state):
        """From A1 only E, S and SE stay on the board, in table order."""
        echo = make_echo("echo-1", PLAYER_ONE, 0, 0, action_points=5)
        options = generator.generate_echo_actions(initial_state, echo)

        assert [i.direction.name for i in options] == ["E", "S", "SE"]
        assert all(i.instruction_type == InstructionType.WALK for i in options)
        assert all(i.tick == 1 for i in options)

    def test_centre_offers_all_directions_in_order(self, generator, initial_state):
        echo = make_echo("echo-1", PLAYER_ONE, 3, 3, action_points=5)
        options = generator.generate_echo_actions(initial_state, echo)

        assert [i.direction for i in options] == list(DIRECTIONS)

    def test_tick_follows_program_length(self, generator, initial_state):
        echo = make_echo("echo-1", PLAYER_ONE, 2, 2, steps=(SOUTH, EAST), action_points=3)
        options = generator.generate_echo_actions(initial_state, echo)

        assert {i.tick for i in options} == {3}

    def test_no_action_points(self, generator, initial_state):
        echo = make_echo("echo-1", PLAYER_ONE, 3, 3, action_points=0)
        assert generator.generate_echo_actions(initial_state, echo) == []

    def test_helpers_match_generator(self, initial_state):
        echo = make_echo("echo-1", PLAYER_ONE, 0, 0, action_points=5)

        assert len(legal_actions(initial_state, PLAYER_ONE)) == 8
        assert [i.direction for i in legal_echo_actions(initial_state, echo)] == [EAST, SOUTH, DIRECTIONS[4]]


class TestOptionalRules:
    """Tests for extension and extended instructions."""

    def test_extension_offers_select(self, extended_config, initial_state):
        generator = ActionGenerator(config=extended_config)
        echo = make_echo("echo-1", PLAYER_ONE, 0, 0)
        state = initial_state._copy_with(echoes=(echo,), next_echo_number=2)
        actions = generator.generate(state, PLAYER_ONE)

        selects = [a for a in actions if a.action_type == ActionType.SELECT_ECHO]
        assert len(selects) == 1
        assert selects[0].payload.echo.action_points == 3
        assert len(actions) == 8

    def test_extension_off_by_default(self, generator, initial_state):
        state = initial_state._copy_with(echoes=(make_echo("echo-1", PLAYER_ONE, 0, 0),))
        actions = generator.generate(state, PLAYER_ONE)

        assert all(a.action_type == ActionType.ADD_ECHO for a in actions)

    def test_extended_instruction_kinds(self, extended_config, initial_state):
        generator = ActionGenerator(config=extended_config)
        echo = make_echo("echo-1", PLAYER_ONE, 3, 3, action_points=5)
        kinds = {i.instruction_type for i in generator.generate_echo_actions(initial_state, echo)}

        assert kinds == set(InstructionType)

    def test_costs_filter_by_remaining_points(self, extended_config, initial_state):
        """With one point left only walk and shield remain."""
        generator = ActionGenerator(config=extended_config)
        echo = make_echo("echo-1", PLAYER_ONE, 3, 3, action_points=1)
        kinds = {i.instruction_type for i in generator.generate_echo_actions(initial_state, echo)}

        assert kinds == {InstructionType.WALK, InstructionType.SHIELD}

    def test_dash_needs_two_cells(self, extended_config, initial_state):
        generator = ActionGenerator(config=extended_config)
        echo = make_echo("echo-1", PLAYER_ONE, 1, 1, action_points=5)
        dashes = [
            i.direction for i in generator.generate_echo_actions(initial_state, echo)
            if i.instruction_type == InstructionType.DASH
        ]

        assert NORTH not in dashes
        assert dashes == [EAST, SOUTH]


class TestIsLegal:
    """Tests for is_legal."""

    def test_offered_placement_is_legal(self, generator, initial_state):
        action = generator.generate(initial_state, PLAYER_ONE)[5]
        assert is_legal(initial_state, action)

    def test_wrong_row_is_illegal(self, initial_state):
        echo = make_echo("echo-1", PLAYER_ONE, 4, 0, action_points=5)
        assert not is_legal(initial_state, Action.add_echo(echo))

    def test_finalize_with_program_is_legal(self, generator, reducer, initial_state):
        add = generator.generate(initial_state, PLAYER_ONE)[0]
        state = reducer.apply(initial_state, add)
        programmed = make_echo("echo-1", PLAYER_ONE, 0, 0, steps=(SOUTH,))

        assert is_legal(state, Action.finalize_echo(programmed))

    def test_action_without_player_is_illegal(self, initial_state):
        assert not is_legal(initial_state, Action.switch_player())

    def test_finalize_with_off_board_step_is_illegal(self, generator, reducer, initial_state):
        add = generator.generate(initial_state, PLAYER_ONE)[0]
        state = reducer.apply(initial_state, add)
        programmed = make_echo("echo-1", PLAYER_ONE, 0, 0, steps=(SOUTH, NORTH, NORTH))

        assert not is_legal(state, Action.finalize_echo(programmed))

    def test_finalize_with_wrong_tick_is_illegal(self, generator, reducer, initial_state):
        add = generator.generate(initial_state, PLAYER_ONE)[0]
        state = reducer.apply(initial_state, add)
        skipped = Instruction.walk(SOUTH, 2)
        programmed = add.payload.echo._copy_with(instruction_list=(skipped,))

        assert not is_legal(state, Action.finalize_echo(programmed))


class TestLegalProgram:
    """Tests for step-by-step program validation."""

    def test_walk_to_the_far_row(self, generator, initial_state):
        echo = make_echo("echo-1", PLAYER_ONE, 0, 3, action_points=5)
        program = [Instruction.walk(SOUTH, tick) for tick in range(1, 6)]

        assert generator.is_legal_program(initial_state, echo, program)

    def test_too_many_steps(self, generator, initial_state):
        echo = make_echo("echo-1", PLAYER_ONE, 0, 3, action_points=2)
        program = [Instruction.walk(EAST, tick) for tick in range(1, 4)]

        assert not generator.is_legal_program(initial_state, echo, program)

    def test_extension_must_keep_existing_program(self, generator, initial_state):
        echo = make_echo("echo-1", PLAYER_ONE, 0, 3, steps=(SOUTH,), action_points=3)

        assert generator.is_legal_program(
            initial_state, echo, [Instruction.walk(SOUTH, 1), Instruction.walk(EAST, 2)]
        )
        assert not generator.is_legal_program(initial_state, echo, [Instruction.walk(EAST, 1)])

    def test_extension_starts_from_projected_cell(self, generator, initial_state):
        """An echo that already walks to row 1 may step north once, not twice."""
        echo = make_echo("echo-1", PLAYER_ONE, 0, 3, steps=(SOUTH,), action_points=3)
        existing = echo.instruction_list

        assert generator.is_legal_program(initial_state, echo, existing + (Instruction.walk(NORTH, 2),))
        assert not generator.is_legal_program(
            initial_state, echo, existing + (Instruction.walk(NORTH, 2), Instruction.walk(NORTH, 3))
        )
