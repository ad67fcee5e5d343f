"""
Session Module - Runs Echoes games.

- HeadlessGameRunner: plays a full game between two agents, no UI
- SessionManager: in-memory interactive games driven by a client
- run_tournament: many independent headless games

Every game owns its own state thread; nothing mutable is shared
between games.
"""

from .runner import HeadlessGameRunner, GameStalled, run_game
from .manager import SessionManager, Session, SessionState, IllegalMoveError
from .tournament import TournamentResult, run_tournament

__all__ = [
    "HeadlessGameRunner",
    "GameStalled",
    "run_game",
    "SessionManager",
    "Session",
    "SessionState",
    "IllegalMoveError",
    "TournamentResult",
    "run_tournament",
]
