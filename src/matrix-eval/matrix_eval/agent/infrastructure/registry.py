"""Agent factory registry — maps AgentConfig.type to the correct AgentFactory."""

from matrix_eval.agent.domain.factory import AgentFactory
from matrix_eval.agent.domain.observer import AgentObserver
from matrix_eval.agent.infrastructure.errors import AgentTypeNotSupportedError
from matrix_eval.agent.infrastructure.factory import ClaudeAgentSDKAgentFactory
from matrix_eval.config.domain.agent import AgentConfig

_SUPPORTED_TYPE = "claude_agent_sdk"


def create_agent_factory(config: AgentConfig, observer: AgentObserver) -> AgentFactory:
    """Return the appropriate AgentFactory for the given AgentConfig.

    Raises:
        AgentTypeNotSupportedError: if config.type is not a known agent type.
    """
    if config.type == _SUPPORTED_TYPE:
        return ClaudeAgentSDKAgentFactory(config=config, observer=observer)

    raise AgentTypeNotSupportedError(agent_type=config.type)
