"""
Round Resolution - Turns a replay into the end-of-round transitions.

Once both players have submitted, the round is resolved as a fixed
sequence of reducer transitions:
    RESOLVE_REPLAY -> UPDATE_SCORES -> RECORD_TURN_HISTORY -> CHECK_WIN
    -> NEXT_TURN (only if nobody won)
Every intermediate snapshot is returned so callers can keep a history.
"""

from __future__ import annotations
from dataclasses import dataclass

from .action import Action
from .reducer import Reducer
from .replay import ReplayResult, simulate_replay
from .state import GamePhase, GameState, TurnHistoryEntry


@dataclass(frozen=True)
class RoundOutcome:
    """Snapshots produced while resolving one round."""
    states: tuple[GameState, ...]
    replay: ReplayResult
    entry: TurnHistoryEntry

    @property
    def final_state(self) -> GameState:
        return self.states[-1]


def resolve_round(state: GameState, reducer: Reducer | None = None) -> RoundOutcome:
    """
    Resolve the replay phase of the current round.

    Raises ValueError if the state is not in the replay phase.
    """
    if state.phase != GamePhase.REPLAY:
        raise ValueError(f"Cannot resolve a round in phase {state.phase.value}")

    reducer = reducer or Reducer()
    replay = simulate_replay(state.echoes, board_size=state.board_size)
    replayed = tuple(e for e in state.echoes if e.alive)

    states = []
    state = reducer.apply(state, Action.resolve_replay(replay.destroyed_ids, replay.ticks))
    states.append(state)

    state = reducer.apply(state, Action.update_scores(replay.score_events))
    states.append(state)

    entry = TurnHistoryEntry(
        turn_number=state.turn_number,
        echoes=replayed,
        destroyed=replay.destroyed,
        ticks=replay.ticks,
        scores=dict(state.scores),
    )
    state = reducer.apply(state, Action.record_turn_history(entry))
    states.append(state)

    state = reducer.apply(state, Action.check_win())
    states.append(state)

    if state.winner is None:
        state = reducer.apply(state, Action.next_turn())
        states.append(state)

    return RoundOutcome(states=tuple(states), replay=replay, entry=entry)
