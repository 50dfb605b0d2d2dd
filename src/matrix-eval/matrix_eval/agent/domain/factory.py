"""AgentFactory Protocol — structural interface for constructing Agent instances."""

from collections.abc import Mapping
from typing import Protocol

from matrix_eval.agent.domain.agent import Agent


class AgentFactory(Protocol):
    """Constructs a new Agent for one trial."""

    def create(
        self,
        trial_id: int,
        prompt_id: str,
        environment: Mapping[str, str],
    ) -> Agent: ...
