"""Tests for create_agent_factory routing."""

import pytest

from matrix_eval.agent.infrastructure.claude_sdk import ClaudeAgentSDKAgent
from matrix_eval.agent.infrastructure.errors import (
    AgentOptionsError,
    AgentTypeNotSupportedError,
)
from matrix_eval.agent.infrastructure.factory import ClaudeAgentSDKAgentFactory
from matrix_eval.agent.infrastructure.registry import create_agent_factory
from matrix_eval.config.domain.agent import AgentConfig
from matrix_eval.core.errors import MatrixEvalError
from tests.agent.fake_observer import FakeAgentObserver


class TestCreateAgentFactory:
    """create_agent_factory routes to the correct factory based on AgentConfig.type."""

    def test_default_type_returns_claude_sdk_factory(self) -> None:
        factory = create_agent_factory(config=AgentConfig(), observer=FakeAgentObserver())

        assert isinstance(factory, ClaudeAgentSDKAgentFactory)

    def test_factory_creates_agent_per_trial(self) -> None:
        factory = create_agent_factory(config=AgentConfig(), observer=FakeAgentObserver())

        first = factory.create(trial_id=0, prompt_id="a", environment={})
        second = factory.create(trial_id=1, prompt_id="a", environment={})

        assert isinstance(first, ClaudeAgentSDKAgent)
        assert first is not second

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(AgentTypeNotSupportedError) as exc_info:
            create_agent_factory(
                config=AgentConfig(type="gpt_computer_use"), observer=FakeAgentObserver()
            )

        assert str(exc_info.value).startswith("Failed to ")
        assert "gpt_computer_use" in str(exc_info.value)
        assert isinstance(exc_info.value, MatrixEvalError)

    def test_engine_owned_option_rejected_before_any_trial(self) -> None:
        config = AgentConfig(options={"cwd": "/somewhere/else"})

        with pytest.raises(AgentOptionsError, match="may not set cwd"):
            create_agent_factory(config=config, observer=FakeAgentObserver())
