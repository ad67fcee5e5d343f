"""
Agents module - Pluggable decision makers.

Provides:
- Agent: Interface for agent decision-making
- GameResult: Outcome handed to agents at game end
- RandomAgent / FirstLegalAgent: Baselines
- ForwardAgent: Rule-based heuristic
- build_agent: Construct an agent by registry name
"""

from __future__ import annotations

from .agent import Agent, GameResult, RandomAgent, FirstLegalAgent
from .heuristic import ForwardAgent

AGENT_TYPES = {
    "random": RandomAgent,
    "first_legal": FirstLegalAgent,
    "forward": ForwardAgent,
}


def build_agent(
    kind: str,
    player_id: str,
    seed: int | None = None,
    agent_id: str | None = None,
) -> Agent:
    """Build an agent from its registry name. Raises KeyError if unknown."""
    agent_cls = AGENT_TYPES[kind]
    agent_id = agent_id or f"{kind}-{player_id}"
    if agent_cls is FirstLegalAgent:
        return agent_cls(agent_id, player_id=player_id)
    return agent_cls(agent_id, player_id=player_id, seed=seed)


__all__ = [
    "Agent",
    "GameResult",
    "RandomAgent",
    "FirstLegalAgent",
    "ForwardAgent",
    "AGENT_TYPES",
    "build_agent",
]
