"""
Event Log - Human-readable lines regenerated from turn history.
"""

from __future__ import annotations

from .state import GameState, TurnHistoryEntry


def describe_program(instructions) -> str:
    return "[" + " ".join(i.label for i in instructions) + "]"


def format_turn_entry(entry: TurnHistoryEntry) -> list[str]:
    """Render one round of history as log lines."""
    lines = [f"Turn {entry.turn_number}: {len(entry.echoes)} echo(es) replayed over {entry.ticks} tick(s)"]

    for echo in entry.echoes:
        lines.append(
            f"  {echo.player_id} {echo.echo_id} from {echo.position.label} "
            f"{describe_program(echo.instruction_list)}"
        )

    for destruction in entry.destroyed:
        if destruction.cause == "off_board":
            reason = "left the board"
        elif destruction.destroyed_by:
            reason = f"destroyed by {destruction.destroyed_by}"
        else:
            reason = "destroyed"
        lines.append(
            f"  Tick {destruction.tick}: {destruction.player_id} {destruction.echo_id} "
            f"{reason} at {destruction.position.label}"
        )

    score_text = ", ".join(f"{player} {score}" for player, score in sorted(entry.scores.items()))
    lines.append(f"  Scores: {score_text}")
    return lines


def format_history(state: GameState) -> list[str]:
    """Render the full turn history of a game."""
    lines: list[str] = []
    for entry in state.turn_history:
        lines.extend(format_turn_entry(entry))
    if state.winner:
        lines.append(f"Winner: {state.winner}")
    return lines
