"""Agent Protocol — structural interface for all agent implementations."""

from pathlib import Path
from typing import Protocol

from matrix_eval.agent.domain.result import AgentResult


class Agent(Protocol):
    """Structural interface satisfied by any agent implementation.

    Each instance is constructed once per trial and carries that trial's
    environment values; ``run`` must drain the agent's full event sequence
    before returning.
    """

    async def run(
        self, prompt: str, working_dir: Path, timeout_seconds: float
    ) -> AgentResult: ...
