"""
Pytest fixtures for Echoes tests.
"""

import pytest

from ..engine_core.action import Action
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.config import GameConfig
from ..engine_core.reducer import Reducer
from ..engine_core.state import (
    PLAYER_ONE,
    PLAYER_TWO,
    Echo,
    GameState,
    Instruction,
    Position,
)


def make_echo(echo_id, player_id, row, col, steps=(), alive=True, action_points=0):
    """Build an echo whose program walks `steps` (directions) in order."""
    return Echo(
        echo_id=echo_id,
        player_id=player_id,
        position=Position(row, col),
        instruction_list=tuple(Instruction.walk(d, tick) for tick, d in enumerate(steps, start=1)),
        action_points=action_points,
        max_action_points=5,
        alive=alive,
    )


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def extended_config() -> GameConfig:
    """Config with every optional rule switched on."""
    return GameConfig(allow_extension=True, extended_instructions=True)


@pytest.fixture
def reducer(config) -> Reducer:
    return Reducer(config=config)


@pytest.fixture
def generator(config) -> ActionGenerator:
    return ActionGenerator(config=config)


@pytest.fixture
def initial_state() -> GameState:
    """The canonical starting snapshot."""
    return GameState.initial()


@pytest.fixture
def replay_ready_state(reducer, generator, initial_state) -> GameState:
    """Both players have placed an echo at column 0 with an empty program."""
    state = initial_state
    for player_id in (PLAYER_ONE, PLAYER_TWO):
        add = generator.generate(state, player_id)[0]
        state = reducer.apply(state, add)
        state = reducer.apply(state, Action.finalize_echo(state.pending_echo))
        state = reducer.apply(state, Action.submit_turn(player_id))
        if player_id == PLAYER_ONE:
            state = reducer.apply(state, Action.switch_player())
    return state
