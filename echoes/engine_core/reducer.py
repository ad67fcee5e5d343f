"""
Reducer - Applies actions to game state.

The reducer is the single point of state change.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- No randomness, no I/O
- Unknown or malformed actions return the state unchanged
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .action import Action, ActionType
from .config import GameConfig, DEFAULT_CONFIG
from .state import GamePhase, GameState, PLAYERS, opponent_of

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    Config provides the winning score and board size.
    """
    config: GameConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    def apply(self, state: GameState, action: Action) -> GameState:
        """
        Apply an action to the game state.

        Returns the new state, or the same state for anything the
        reducer does not recognize.
        """
        if not isinstance(action, Action):
            logger.debug("Ignoring non-action input: %r", action)
            return state

        handler = self._get_handler(action.action_type)
        if not handler:
            logger.debug("No handler for action type %s", action.action_type)
            return state

        return handler(state, action)

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.RESET_GAME: self._handle_reset,
            ActionType.ADD_ECHO: self._handle_add_echo,
            ActionType.SELECT_ECHO: self._handle_select_echo,
            ActionType.FINALIZE_ECHO: self._handle_finalize_echo,
            ActionType.SWITCH_PLAYER: self._handle_switch_player,
            ActionType.SUBMIT_TURN: self._handle_submit_turn,
            ActionType.NEXT_TURN: self._handle_next_turn,
            ActionType.REMOVE_ECHO: self._handle_remove_echo,
            ActionType.RESOLVE_REPLAY: self._handle_resolve_replay,
            ActionType.RECORD_TURN_HISTORY: self._handle_record_turn_history,
            ActionType.UPDATE_SCORES: self._handle_update_scores,
            ActionType.CHECK_WIN: self._handle_check_win,
        }
        return handlers.get(action_type)

    def _handle_reset(self, state: GameState, action: Action) -> GameState:
        return GameState.initial(board_size=self.config.board_size)

    def _handle_add_echo(self, state: GameState, action: Action) -> GameState:
        """Append a fresh echo and make it the pending echo."""
        echo = action.payload.echo
        if echo is None or state.get_echo(echo.echo_id) is not None:
            return state

        return state._copy_with(
            echoes=state.echoes + (echo,),
            pending_echo=echo,
            next_echo_number=state.next_echo_number + 1,
        )

    def _handle_select_echo(self, state: GameState, action: Action) -> GameState:
        """Make an existing echo pending without appending it."""
        echo = action.payload.echo
        if echo is None or state.get_echo(echo.echo_id) is None:
            return state
        return state._copy_with(pending_echo=echo)

    def _handle_finalize_echo(self, state: GameState, action: Action) -> GameState:
        """Commit the echo: replace by id in place, or append if new."""
        echo = action.payload.echo
        if echo is None:
            return state

        replaced = False
        new_echoes = []
        for existing in state.echoes:
            if existing.echo_id == echo.echo_id:
                new_echoes.append(echo)
                replaced = True
            else:
                new_echoes.append(existing)
        if not replaced:
            new_echoes.append(echo)

        return state._copy_with(
            echoes=tuple(new_echoes),
            pending_echo=None,
            submitted_players=_with_player(state.submitted_players, echo.player_id),
        )

    def _handle_switch_player(self, state: GameState, action: Action) -> GameState:
        return state._copy_with(current_player=opponent_of(state.current_player))

    def _handle_submit_turn(self, state: GameState, action: Action) -> GameState:
        """Record a submission; both submitted moves the game to replay."""
        player_id = action.payload.player_id
        if player_id not in PLAYERS:
            return state

        submitted = _with_player(state.submitted_players, player_id)
        both_submitted = all(p in submitted for p in PLAYERS)
        return state._copy_with(
            submitted_players=submitted,
            phase=GamePhase.REPLAY if both_submitted else state.phase,
        )

    def _handle_next_turn(self, state: GameState, action: Action) -> GameState:
        """Start the next round. The only place dead echoes are pruned."""
        return state._copy_with(
            turn_number=state.turn_number + 1,
            phase=GamePhase.INPUT,
            submitted_players=(),
            pending_echo=None,
            echoes=tuple(e for e in state.echoes if e.alive),
        )

    def _handle_remove_echo(self, state: GameState, action: Action) -> GameState:
        echo_id = action.payload.echo_id
        return state._copy_with(
            echoes=tuple(e for e in state.echoes if e.echo_id != echo_id),
        )

    def _handle_resolve_replay(self, state: GameState, action: Action) -> GameState:
        """Mark echoes destroyed during replay as dead; they stay listed."""
        destroyed = set(action.payload.destroyed_ids)
        return state._copy_with(
            echoes=tuple(
                e._copy_with(alive=False) if e.echo_id in destroyed else e
                for e in state.echoes
            ),
            current_tick=action.payload.tick,
        )

    def _handle_record_turn_history(self, state: GameState, action: Action) -> GameState:
        entry = action.payload.entry
        if entry is None:
            return state
        return state._copy_with(turn_history=state.turn_history + (entry,))

    def _handle_update_scores(self, state: GameState, action: Action) -> GameState:
        """One point per destruction with a known destroyer."""
        scores = dict(state.scores)
        for _echo_id, destroyed_by in action.payload.destroyed:
            if destroyed_by in PLAYERS:
                scores[destroyed_by] = scores.get(destroyed_by, 0) + 1
        return state._copy_with(scores=scores)

    def _handle_check_win(self, state: GameState, action: Action) -> GameState:
        if state.winner is not None:
            return state
        winner = evaluate_winner(state, self.config)
        if winner is None:
            return state
        logger.debug("Winner determined: %s", winner)
        return state._copy_with(winner=winner)


def _with_player(players: tuple[str, ...], player_id: str) -> tuple[str, ...]:
    if player_id in players:
        return players
    return players + (player_id,)


def evaluate_winner(state: GameState, config: GameConfig | None = None) -> str | None:
    """
    Check win conditions against the current snapshot.

    Priority order:
    1. Column control - living echoes on every column
    2. Elimination - only one side has living echoes
    3. Score - first to the winning score
    A condition both players satisfy at once is skipped.
    """
    config = config or DEFAULT_CONFIG

    controllers = [p for p in PLAYERS if _controls_all_columns(state, p, config.board_size)]
    if len(controllers) == 1:
        return controllers[0]

    survivors = [p for p in PLAYERS if state.living_echoes(p)]
    if len(survivors) == 1:
        return survivors[0]

    leaders = [p for p in PLAYERS if state.scores.get(p, 0) >= config.winning_score]
    if len(leaders) == 1:
        return leaders[0]

    return None


def _controls_all_columns(state: GameState, player_id: str, board_size: int) -> bool:
    columns = {e.position.col for e in state.living_echoes(player_id)}
    return columns >= set(range(board_size))


def apply_action(state: GameState, action: Action, config: GameConfig | None = None) -> GameState:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    return Reducer(config=config or DEFAULT_CONFIG).apply(state, action)
