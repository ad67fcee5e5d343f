"""
Headless Runner - Plays a complete game between two agents without a UI.

The loop, per step:
1. Ask the action generator for the current player's legal actions
2. Placement only -> the agent picks a cell
3. Pending echo -> the agent picks one instruction per action point,
   then the echo is finalized, submitted and the turn handed over
4. Anything else -> the agent picks a general action
5. Replay phase -> the round is resolved (scores, history, win check)

Every applied transition appends a snapshot to the history. The run stops
on a winner, a stall, cancellation or the turn ceiling.
"""

from __future__ import annotations
import logging
import random
import threading
from typing import Any

from ..agents.agent import Agent, GameResult
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.config import GameConfig, DEFAULT_CONFIG
from ..engine_core.events import describe_program, format_turn_entry
from ..engine_core.reducer import Reducer
from ..engine_core.resolution import resolve_round
from ..engine_core.state import (
    PLAYER_ONE,
    PLAYER_TWO,
    Echo,
    GamePhase,
    GameState,
    Instruction,
)

module_logger = logging.getLogger(__name__)


class GameStalled(Exception):
    """Raised by step() when the current game cannot proceed."""


class HeadlessGameRunner:
    """
    Runs Echoes games between two agents.

    Usage:
        runner = HeadlessGameRunner(seed=7)
        result = runner.run_game(RandomAgent("a"), RandomAgent("b"))
        print(result.winner)
        for line in result.log:
            print(line)

    Each call to run_game owns its own state thread; a runner can be
    reused, but must not run two games at once.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.rng = rng or random.Random(seed)
        self.logger = logger or module_logger
        self.reducer = Reducer(config=self.config)
        self.generator = ActionGenerator(config=self.config)

    def run_game(
        self,
        agent1: Agent,
        agent2: Agent,
        cancel_event: threading.Event | None = None,
    ) -> GameResult:
        """
        Play one game from the initial state.

        Stalls, cancellation and the turn ceiling end the game without
        a winner; none of them raise.
        """
        agents = {PLAYER_ONE: agent1, PLAYER_TWO: agent2}
        for player_id, agent in agents.items():
            agent.player_id = player_id
            agent.reset()

        state = GameState.initial(board_size=self.config.board_size)
        log: list[str] = []
        history: list[GameState] = [state]
        turn = 0
        reason = "max_turns"
        previous_player = state.current_player
        previous_phase = state.phase

        self.logger.info("Starting game: %s vs %s", agent1.name, agent2.name)

        while state.winner is None and turn < self.config.max_turns:
            if cancel_event is not None and cancel_event.is_set():
                log.append("Game cancelled.")
                reason = "cancelled"
                break

            log.append(
                f"=== Turn {turn + 1} | Phase: {state.phase.value} "
                f"| Current Player: {state.current_player} ==="
            )

            try:
                state = self.step(state, agents[state.current_player], log, history)
            except GameStalled as stall:
                log.append(f"  {stall}")
                self.logger.info("Game stalled on turn %d: %s", turn + 1, stall)
                reason = "stalled"
                break

            if state.winner is not None:
                log.append(f"Game over! Winner: {state.winner}")
                reason = "win"
                break

            if state.phase == GamePhase.INPUT and (
                state.current_player != previous_player or state.phase != previous_phase
            ):
                turn += 1
            previous_player = state.current_player
            previous_phase = state.phase

        if state.winner is None and reason == "max_turns":
            log.append("Game ended in a draw or max turns reached.")

        result = GameResult(
            winner=state.winner,
            final_state=state,
            log=log,
            history=history,
            reason=reason,
            turns=turn,
        )
        self.logger.info(
            "Game finished: winner=%s reason=%s turns=%d", result.winner, reason, turn
        )

        agent1.on_game_end(result, history)
        agent2.on_game_end(result, history)
        return result

    def step(self, state: GameState, agent: Agent, log: list[str], history: list[GameState]) -> GameState:
        """
        Advance the game by one driver step for the current player.

        Appends log lines and snapshots in place. Raises GameStalled when
        the player has nothing legal to do or the agent gives up.
        """
        if state.phase == GamePhase.REPLAY:
            outcome = resolve_round(state, self.reducer)
            history.extend(outcome.states)
            log.extend(f"  {line}" for line in format_turn_entry(outcome.entry))
            return outcome.final_state

        player_id = state.current_player
        valid_actions = self.generator.generate(state, player_id)
        if not valid_actions:
            raise GameStalled("No valid actions available.")

        if all(a.action_type == ActionType.ADD_ECHO for a in valid_actions):
            cells = ", ".join(a.payload.echo.position.label for a in valid_actions)
            log.append(f"  Add Echo Phase: {len(valid_actions)} valid actions: {cells}")
            action = agent.get_action(state, None, valid_actions)
            if action is None:
                raise GameStalled("No action returned, skipping turn.")
            log.append(f"  Selected: {_label(action)}")
            return self._apply(state, action, history)

        pending = state.pending_echo
        if pending is not None and pending.player_id == player_id:
            return self._program_echo(state, pending, agent, log, history)

        action = agent.get_action(state, None, valid_actions)
        if action is None:
            raise GameStalled("No action returned, skipping turn.")
        log.append(f"  Selected: {_label(action)}")
        return self._apply(state, action, history)

    def _program_echo(self, state, echo: Echo, agent, log, history) -> GameState:
        """Assign one instruction per remaining action point, then finalize."""
        working = echo._copy_with(position=echo.projected_position())

        while working.action_points > 0:
            options = self.generator.generate_echo_actions(state, working)
            if not options:
                log.append("  No valid echo-actions available.")
                break

            log.append(
                f"  Assign Action Point {len(working.instruction_list) + 1}: "
                f"valid actions: {' '.join(i.label for i in options)}"
            )
            choice = self._choose_instruction(agent, state, working, options)
            if choice is None:
                raise GameStalled("No echo-action returned, skipping AP assignment.")

            working = working.with_instruction(choice)
            working = working._copy_with(position=choice.move_from(working.position))
            log.append(
                f"  Assigned {choice.label} on Tick {choice.tick}, "
                f"New Position: {working.position.label}"
            )

        finalized = echo._copy_with(
            instruction_list=working.instruction_list,
            action_points=working.action_points,
        )
        log.append(f"  Assigned sequence: {describe_program(finalized.instruction_list)}")
        log.append("  Finalized echo with sequence.")

        state = self._apply(state, Action.finalize_echo(finalized), history)
        state = self._apply(state, Action.submit_turn(echo.player_id), history)
        if state.phase == GamePhase.INPUT:
            state = self._apply(state, Action.switch_player(), history)
        return state

    def _choose_instruction(self, agent, state, echo, options) -> Instruction | None:
        hook = getattr(agent, "get_echo_action", None)
        if callable(hook):
            return hook(state, echo, options)
        return self.rng.choice(options)

    def _apply(self, state: GameState, action: Any, history: list[GameState]) -> GameState:
        new_state = self.reducer.apply(state, action)
        if new_state is state:
            raise GameStalled("Action had no effect.")
        history.append(new_state)
        self.logger.debug("Applied %s", _label(action))
        return new_state


def _label(action: Any) -> str:
    if isinstance(action, Action):
        return action.label
    return repr(action)


def run_game(
    agent1: Agent,
    agent2: Agent,
    config: GameConfig | None = None,
    seed: int | None = None,
) -> GameResult:
    """Convenience function to play a single game."""
    return HeadlessGameRunner(config=config, seed=seed).run_game(agent1, agent2)
