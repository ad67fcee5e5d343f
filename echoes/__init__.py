"""
Echoes - Turn-based tactical board game engine.

Each side programs units ("echoes") with a sequence of instructions that
replay automatically every round until the unit is destroyed. The engine
provides:
- Immutable game state snapshots
- Legal action enumeration
- A pure state transition reducer
- Deterministic replay and collision resolution
- Pluggable agents and a headless simulation driver
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
