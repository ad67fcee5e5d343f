"""
Game Config - Tunable rule constants.

Defaults reproduce the standard Echoes rules. Values can be overridden
per game or read from ECHOES_* environment variables.
"""

from __future__ import annotations
from dataclasses import dataclass
import os


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GameConfig:
    """Rule constants shared by the action generator, reducer and driver."""
    board_size: int = 8
    new_echo_action_points: int = 5
    extension_action_points: int = 3
    winning_score: int = 10
    max_turns: int = 200

    # Optional rules, off by default
    allow_extension: bool = False
    extended_instructions: bool = False

    @classmethod
    def from_env(cls) -> GameConfig:
        """Build a config from ECHOES_* environment variables."""
        defaults = cls()
        return cls(
            board_size=_env_int("ECHOES_BOARD_SIZE", defaults.board_size),
            new_echo_action_points=_env_int(
                "ECHOES_NEW_ECHO_AP", defaults.new_echo_action_points
            ),
            extension_action_points=_env_int(
                "ECHOES_EXTENSION_AP", defaults.extension_action_points
            ),
            winning_score=_env_int("ECHOES_WINNING_SCORE", defaults.winning_score),
            max_turns=_env_int("ECHOES_MAX_TURNS", defaults.max_turns),
            allow_extension=_env_bool("ECHOES_ALLOW_EXTENSION", defaults.allow_extension),
            extended_instructions=_env_bool(
                "ECHOES_EXTENDED_INSTRUCTIONS", defaults.extended_instructions
            ),
        )


DEFAULT_CONFIG = GameConfig()
