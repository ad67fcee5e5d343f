"""
Tournament - Many independent headless games between two agent types.

Each game gets its own runner, its own freshly built agents and its own
state thread, so games can run side by side on a thread pool without
sharing anything mutable.

Usage example:
    result = run_tournament("random", "forward", games=100, seed=1)
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
from typing import Callable

from ..agents import Agent, build_agent
from ..agents.agent import GameResult
from ..engine_core.config import GameConfig, DEFAULT_CONFIG
from ..engine_core.state import PLAYER_ONE, PLAYER_TWO
from .runner import HeadlessGameRunner

logger = logging.getLogger(__name__)

AgentFactory = Callable[[str, int], Agent]


@dataclass
class TournamentResult:
    games: int
    wins: dict[str, int] = field(default_factory=dict)
    draws: int = 0
    stalls: int = 0
    avg_turns: float = 0.0

    @property
    def win_rates(self) -> dict[str, float]:
        if self.games == 0:
            return {name: 0.0 for name in self.wins}
        return {name: count / self.games for name, count in self.wins.items()}


def _factory(kind: str) -> AgentFactory:
    def make(player_id: str, seed: int) -> Agent:
        return build_agent(kind, player_id, seed=seed)
    return make


def _play_one(
    index: int,
    first: AgentFactory,
    second: AgentFactory,
    seed: int,
    config: GameConfig,
) -> tuple[bool, GameResult]:
    # Alternate seats so neither side always moves first
    swapped = index % 2 == 1
    game_seed = seed + index
    if swapped:
        agent1, agent2 = second(PLAYER_ONE, game_seed), first(PLAYER_TWO, game_seed + 1)
    else:
        agent1, agent2 = first(PLAYER_ONE, game_seed), second(PLAYER_TWO, game_seed + 1)
    runner = HeadlessGameRunner(config=config, seed=game_seed)
    return swapped, runner.run_game(agent1, agent2)


def run_tournament(
    first: str | AgentFactory,
    second: str | AgentFactory,
    games: int = 10,
    workers: int = 1,
    seed: int = 0,
    config: GameConfig | None = None,
    first_name: str = "first",
    second_name: str = "second",
) -> TournamentResult:
    """
    Play `games` games between two agent kinds.

    Agents are given as registry names or factories `(player_id, seed) -> Agent`.
    Win counts are keyed by `first_name` / `second_name`.
    """
    config = config or DEFAULT_CONFIG
    if isinstance(first, str):
        first_name = first if first_name == "first" else first_name
        first = _factory(first)
    if isinstance(second, str):
        second_name = second if second_name == "second" else second_name
        second = _factory(second)
    if first_name == second_name:
        first_name, second_name = f"{first_name}#1", f"{second_name}#2"

    def play(index: int):
        return _play_one(index, first, second, seed, config)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(play, range(games)))
    else:
        outcomes = [play(i) for i in range(games)]

    result = TournamentResult(games=games, wins={first_name: 0, second_name: 0})
    total_turns = 0
    for swapped, game in outcomes:
        total_turns += game.turns
        if game.winner is None:
            if game.reason == "stalled":
                result.stalls += 1
            else:
                result.draws += 1
            continue
        first_won = (game.winner == PLAYER_ONE) != swapped
        result.wins[first_name if first_won else second_name] += 1

    result.avg_turns = total_turns / games if games else 0.0
    logger.info("Tournament finished: %s", result)
    return result
