"""
Tests for the headless game runner.

Tests:
- Full games terminate with a valid result
- Stalls, cancellation and the turn ceiling
- Log format and history snapshots
"""

import logging
import threading

import pytest

from ..agents import Agent, FirstLegalAgent, ForwardAgent, RandomAgent
from ..engine_core.config import GameConfig
from ..engine_core.state import PLAYER_ONE, PLAYER_TWO, GameState
from ..session.runner import GameStalled, HeadlessGameRunner, run_game
from .conftest import make_echo


class NullAgent(Agent):
    """Never chooses anything."""

    def get_action(self, state, echo_id=None, valid_actions=None):
        return None


class PlaceOnlyAgent(FirstLegalAgent):
    """Places echoes but refuses to program them."""

    def get_echo_action(self, state, echo, valid_echo_actions):
        return None


class RecordingAgent(RandomAgent):
    """Remembers the end-of-game callback."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.results = []
        self.resets = 0

    def reset(self):
        self.resets += 1

    def on_game_end(self, result, history):
        self.results.append((result, len(history)))


class TestFullGames:
    """Complete games between agents."""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_random_vs_random_terminates(self, seed):
        result = run_game(RandomAgent("a", seed=seed), RandomAgent("b", seed=seed + 100), seed=seed)

        assert result.winner in {PLAYER_ONE, PLAYER_TWO, None}
        assert len(result.history) >= 1
        assert result.history[0] == GameState.initial()
        assert result.history[-1] is result.final_state
        assert result.turns <= 200

    def test_same_seed_same_game(self):
        first = run_game(RandomAgent("a", seed=4), RandomAgent("b", seed=5), seed=9)
        second = run_game(RandomAgent("a", seed=4), RandomAgent("b", seed=5), seed=9)

        assert first.log == second.log
        assert first.final_state == second.final_state

    def test_forward_vs_first_legal(self):
        result = run_game(ForwardAgent("fw", seed=1), FirstLegalAgent("fl"))

        assert result.reason in {"win", "stalled", "max_turns"}
        if result.reason == "win":
            assert result.winner is not None
            assert result.log[-1] == f"Game over! Winner: {result.winner}"

    def test_log_format(self):
        result = run_game(RandomAgent("a", seed=1), RandomAgent("b", seed=2), seed=3)

        assert result.log[0] == "=== Turn 1 | Phase: input | Current Player: player1 ==="
        assert result.log[1].startswith("  Add Echo Phase: 8 valid actions: A1, B1")
        assert result.log[2].startswith("  Selected: ADD_ECHO at ")
        assert any(line.startswith("  Assign Action Point 1: valid actions:") for line in result.log)
        assert "  Finalized echo with sequence." in result.log

    def test_agents_are_seated_and_notified(self):
        first = RecordingAgent("a", seed=1)
        second = RecordingAgent("b", seed=2)
        result = HeadlessGameRunner(seed=0).run_game(first, second)

        assert first.player_id == PLAYER_ONE
        assert second.player_id == PLAYER_TWO
        assert first.resets == 1
        assert first.results == [(result, len(result.history))]
        assert second.results == [(result, len(result.history))]


class TestStalls:
    """Games that cannot proceed end without a winner."""

    def test_null_agent_stalls_on_first_turn(self):
        result = run_game(NullAgent("n"), RandomAgent("r", seed=0))

        assert result.winner is None
        assert result.reason == "stalled"
        assert result.turns == 0
        assert any("No action returned" in line for line in result.log)
        assert len(result.history) == 1

    def test_refusing_to_program_stalls(self):
        result = run_game(PlaceOnlyAgent("p"), RandomAgent("r", seed=0))

        assert result.reason == "stalled"
        assert any("No echo-action returned" in line for line in result.log)

    def test_step_raises_without_actions(self):
        """A player with nothing legal stalls the step."""
        state = GameState.initial()._copy_with(submitted_players=(PLAYER_ONE,))
        with pytest.raises(GameStalled, match="No valid actions available."):
            HeadlessGameRunner(seed=0).step(state, RandomAgent("a", seed=0), [], [])

    def test_full_home_row_stalls_the_step(self):
        """No free column on the home row is a stall, not an error."""
        echoes = tuple(make_echo(f"echo-{c + 1}", PLAYER_ONE, 0, c) for c in range(8))
        state = GameState.initial()._copy_with(echoes=echoes, next_echo_number=9)
        history = []

        with pytest.raises(GameStalled, match="No valid actions available."):
            HeadlessGameRunner(seed=0).step(state, RandomAgent("a", seed=0), [], history)
        assert history == []


class TestLimits:
    """Cancellation and the turn ceiling."""

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()
        result = HeadlessGameRunner(seed=0).run_game(
            RandomAgent("a", seed=0), RandomAgent("b", seed=1), cancel_event=cancel
        )

        assert result.reason == "cancelled"
        assert result.winner is None
        assert result.log == ["Game cancelled."]

    def test_turn_ceiling(self):
        config = GameConfig(max_turns=1)
        result = HeadlessGameRunner(config=config, seed=0).run_game(FirstLegalAgent("a"), FirstLegalAgent("b"))

        assert result.turns == 1
        assert result.winner is None
        assert result.reason == "max_turns"
        assert result.log[-1] == "Game ended in a draw or max turns reached."
        assert result.final_state.current_player == PLAYER_TWO

    def test_injected_logger(self, caplog):
        logger = logging.getLogger("echoes.tests.runner")
        with caplog.at_level(logging.INFO, logger="echoes.tests.runner"):
            HeadlessGameRunner(seed=0, logger=logger).run_game(NullAgent("n"), NullAgent("m"))

        assert any("stalled" in record.getMessage() for record in caplog.records)
