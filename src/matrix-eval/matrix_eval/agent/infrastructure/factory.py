"""ClaudeAgentSDKAgentFactory — constructs ClaudeAgentSDKAgent instances."""

from collections.abc import Mapping

from matrix_eval.agent.domain.agent import Agent
from matrix_eval.agent.domain.observer import AgentObserver
from matrix_eval.agent.infrastructure.claude_sdk import (
    ClaudeAgentSDKAgent,
    validate_sdk_options,
)
from matrix_eval.config.domain.agent import AgentConfig


class ClaudeAgentSDKAgentFactory:
    """Creates ClaudeAgentSDKAgent instances configured for a given trial.

    Raises:
        AgentOptionsError: at construction, if config.options cannot be
            forwarded to the SDK.
    """

    def __init__(self, config: AgentConfig, observer: AgentObserver) -> None:
        validate_sdk_options(config.options)
        self._config = config
        self._observer = observer

    def create(
        self,
        trial_id: int,
        prompt_id: str,
        environment: Mapping[str, str],
    ) -> Agent:
        """Construct a new ClaudeAgentSDKAgent for the given trial."""
        return ClaudeAgentSDKAgent(
            config=self._config,
            trial_id=trial_id,
            prompt_id=prompt_id,
            environment=environment,
            observer=self._observer,
        )
