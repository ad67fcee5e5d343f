"""
Tests for tournaments.
"""

import pytest

from ..agents import FirstLegalAgent, RandomAgent
from ..engine_core.config import GameConfig
from ..session.tournament import TournamentResult, run_tournament


class TestTournament:
    """Tests for run_tournament."""

    def test_counts_add_up(self):
        result = run_tournament("random", "forward", games=6, seed=1)

        assert result.games == 6
        assert set(result.wins) == {"random", "forward"}
        assert sum(result.wins.values()) + result.draws + result.stalls == 6

    def test_parallel_matches_serial(self):
        """Games are independent, so a thread pool gives the same totals."""
        serial = run_tournament("random", "random", games=4, workers=1, seed=7)
        parallel = run_tournament("random", "random", games=4, workers=4, seed=7)

        assert serial == parallel

    def test_same_kind_names_are_distinct(self):
        result = run_tournament("random", "random", games=2, seed=0)
        assert set(result.wins) == {"random#1", "random#2"}

    def test_factories_and_custom_names(self):
        config = GameConfig(max_turns=4)
        result = run_tournament(
            lambda player_id, seed: RandomAgent(f"r-{player_id}", seed=seed),
            lambda player_id, seed: FirstLegalAgent(f"f-{player_id}"),
            games=2,
            config=config,
            first_name="rand",
            second_name="first",
        )

        assert set(result.wins) == {"rand", "first"}
        assert result.avg_turns <= 4

    def test_win_rates(self):
        result = TournamentResult(games=4, wins={"a": 3, "b": 1})
        assert result.win_rates == {"a": 0.75, "b": 0.25}

    def test_win_rates_without_games(self):
        assert TournamentResult(games=0, wins={"a": 0}).win_rates == {"a": 0.0}
