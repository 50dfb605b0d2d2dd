"""Tests for ClaudeAgentSDKAgent infrastructure implementation."""

import asyncio
import json
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from claude_agent_sdk._errors import ClaudeSDKError
from claude_agent_sdk.types import AssistantMessage, ResultMessage, TextBlock

from matrix_eval.agent.infrastructure.claude_sdk import (
    ClaudeAgentSDKAgent,
    validate_sdk_options,
)
from matrix_eval.agent.infrastructure.errors import (
    AgentInvocationError,
    AgentOptionsError,
)
from matrix_eval.config.domain.agent import AgentConfig
from matrix_eval.core.errors import TrialTimeoutError
from tests.agent.fake_observer import FakeAgentObserver

_QUERY = "matrix_eval.agent.infrastructure.claude_sdk.query"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_agent(
    config: AgentConfig | None = None,
    trial_id: int = 0,
    prompt_id: str = "basic",
    environment: dict[str, str] | None = None,
    observer: FakeAgentObserver | None = None,
) -> ClaudeAgentSDKAgent:
    return ClaudeAgentSDKAgent(
        config=config if config is not None else AgentConfig(model="claude-sonnet-4-5"),
        trial_id=trial_id,
        prompt_id=prompt_id,
        environment=environment if environment is not None else {},
        observer=observer if observer is not None else FakeAgentObserver(),
    )


def _make_result_message(
    subtype: str = "success",
    is_error: bool = False,
    total_cost_usd: float | None = 0.005,
    usage: dict[str, Any] | None = None,
) -> ResultMessage:
    return ResultMessage(
        subtype=subtype,
        duration_ms=1500,
        duration_api_ms=1200,
        is_error=is_error,
        num_turns=2,
        session_id="test-session-id",
        total_cost_usd=total_cost_usd,
        usage=usage,
        result="Done.",
    )


def _make_assistant_message(text: str) -> AssistantMessage:
    return AssistantMessage(content=[TextBlock(text=text)], model="claude-sonnet-4-5")


async def _async_gen(*items: Any) -> AsyncIterator[Any]:
    """Async generator yielding a fixed set of items."""
    for item in items:
        yield item


def _mock_query(*items: Any) -> MagicMock:
    """Return a MagicMock for `query` that yields the given items when iterated."""
    mock = MagicMock()
    mock.return_value = _async_gen(*items)
    return mock


def _mock_query_raising(exc: Exception) -> MagicMock:
    """Return a MagicMock for `query` that raises on iteration."""

    async def _raising_gen() -> AsyncIterator[Any]:
        raise exc
        yield  # make it an async generator

    mock = MagicMock()
    mock.return_value = _raising_gen()
    return mock


def _mock_query_hanging() -> MagicMock:
    """Return a MagicMock for `query` whose stream never finishes in time."""

    async def _hanging_gen() -> AsyncIterator[Any]:
        await asyncio.sleep(30)
        yield _make_result_message()

    mock = MagicMock()
    mock.return_value = _hanging_gen()
    return mock


# ---------------------------------------------------------------------------
# run(): success path
# ---------------------------------------------------------------------------


class TestRunSuccess:
    async def test_transcript_contains_every_event(self, tmp_path: Path) -> None:
        with patch(
            _QUERY,
            new=_mock_query(_make_assistant_message("hello"), _make_result_message()),
        ):
            result = await _make_agent().run(
                prompt="Add a route", working_dir=tmp_path, timeout_seconds=10
            )

        events = json.loads(result.transcript)
        assert [e["type"] for e in events] == ["AssistantMessage", "ResultMessage"]
        assert "hello" in result.transcript
        assert result.num_events == 2

    async def test_stop_reason_recorded_without_interpreting_is_error(
        self, tmp_path: Path
    ) -> None:
        message = _make_result_message(subtype="error_max_turns", is_error=True)

        with patch(_QUERY, new=_mock_query(message)):
            result = await _make_agent().run(
                prompt="p", working_dir=tmp_path, timeout_seconds=10
            )

        assert result.stop_reason == "error_max_turns"

    async def test_usage_metrics_mapped(self, tmp_path: Path) -> None:
        message = _make_result_message(
            total_cost_usd=0.25,
            usage={
                "input_tokens": 100,
                "output_tokens": 50,
                "cache_creation_input_tokens": 10,
                "cache_read_input_tokens": 5,
            },
        )

        with patch(_QUERY, new=_mock_query(message)):
            result = await _make_agent().run(
                prompt="p", working_dir=tmp_path, timeout_seconds=10
            )

        assert result.usage is not None
        assert result.usage.input_tokens == 100
        assert result.usage.output_tokens == 50
        assert result.usage.cache_creation_input_tokens == 10
        assert result.usage.cache_read_input_tokens == 5
        assert result.usage.total_tokens == 165
        assert result.usage.cost_usd == pytest.approx(0.25)

    async def test_missing_usage_counters_default_to_zero(self, tmp_path: Path) -> None:
        message = _make_result_message(total_cost_usd=None, usage={"input_tokens": 7})

        with patch(_QUERY, new=_mock_query(message)):
            result = await _make_agent().run(
                prompt="p", working_dir=tmp_path, timeout_seconds=10
            )

        assert result.usage is not None
        assert result.usage.output_tokens == 0
        assert result.usage.cost_usd == 0.0

    async def test_none_usage_maps_to_none(self, tmp_path: Path) -> None:
        with patch(_QUERY, new=_mock_query(_make_result_message(usage=None))):
            result = await _make_agent().run(
                prompt="p", working_dir=tmp_path, timeout_seconds=10
            )

        assert result.usage is None

    async def test_last_result_message_wins(self, tmp_path: Path) -> None:
        first = _make_result_message(subtype="first")
        last = _make_result_message(subtype="last")

        with patch(_QUERY, new=_mock_query(first, last)):
            result = await _make_agent().run(
                prompt="p", working_dir=tmp_path, timeout_seconds=10
            )

        assert result.stop_reason == "last"

    async def test_query_receives_prompt_and_options(self, tmp_path: Path) -> None:
        mock = _mock_query(_make_result_message())
        agent = _make_agent(environment={"API_URL": "http://localhost:3001"})

        with patch(_QUERY, new=mock):
            await agent.run(prompt="Add a route", working_dir=tmp_path, timeout_seconds=10)

        kwargs = mock.call_args.kwargs
        assert kwargs["prompt"] == "Add a route"
        options = kwargs["options"]
        assert options.cwd == str(tmp_path)
        assert options.env == {"API_URL": "http://localhost:3001"}
        assert options.model == "claude-sonnet-4-5"
        assert options.permission_mode == "bypassPermissions"

    async def test_configured_options_reach_query(self, tmp_path: Path) -> None:
        mock = _mock_query(_make_result_message())
        config = AgentConfig(
            model="claude-sonnet-4-5",
            options={
                "allowed_tools": ["Read", "Edit", "Bash"],
                "system_prompt": "Prefer small commits.",
            },
        )
        agent = _make_agent(config=config, environment={"PORT": "3000"})

        with patch(_QUERY, new=mock):
            await agent.run(prompt="Add a route", working_dir=tmp_path, timeout_seconds=10)

        options = mock.call_args.kwargs["options"]
        assert options.allowed_tools == ["Read", "Edit", "Bash"]
        assert options.system_prompt == "Prefer small commits."
        assert options.cwd == str(tmp_path)
        assert options.env == {"PORT": "3000"}


# ---------------------------------------------------------------------------
# run(): failures
# ---------------------------------------------------------------------------


class TestRunFailures:
    async def test_no_result_message_raises(self, tmp_path: Path) -> None:
        with patch(_QUERY, new=_mock_query(_make_assistant_message("partial"))):
            with pytest.raises(AgentInvocationError, match="no ResultMessage"):
                await _make_agent().run(prompt="p", working_dir=tmp_path, timeout_seconds=10)

    async def test_sdk_exception_is_wrapped(self, tmp_path: Path) -> None:
        with patch(_QUERY, new=_mock_query_raising(ClaudeSDKError("CLI not found"))):
            with pytest.raises(AgentInvocationError) as exc_info:
                await _make_agent().run(prompt="p", working_dir=tmp_path, timeout_seconds=10)

        assert str(exc_info.value).startswith("Failed to ")
        assert "CLI not found" in str(exc_info.value)

    async def test_bare_exception_is_wrapped(self, tmp_path: Path) -> None:
        with patch(_QUERY, new=_mock_query_raising(Exception("reader died"))):
            with pytest.raises(AgentInvocationError, match="reader died"):
                await _make_agent().run(prompt="p", working_dir=tmp_path, timeout_seconds=10)

    async def test_timeout_raises_trial_timeout_error(self, tmp_path: Path) -> None:
        with patch(_QUERY, new=_mock_query_hanging()):
            with pytest.raises(TrialTimeoutError, match="agent invocation"):
                await _make_agent().run(
                    prompt="p", working_dir=tmp_path, timeout_seconds=0.05
                )


# ---------------------------------------------------------------------------
# Observer events
# ---------------------------------------------------------------------------


class TestObserverEvents:
    async def test_success_emits_started_received_completed(self, tmp_path: Path) -> None:
        observer = FakeAgentObserver()
        agent = _make_agent(trial_id=4, prompt_id="detailed", observer=observer)

        with patch(
            _QUERY,
            new=_mock_query(_make_assistant_message("hi"), _make_result_message()),
        ):
            await agent.run(prompt="p", working_dir=tmp_path, timeout_seconds=10)

        assert observer.started[0].trial_id == 4
        assert observer.started[0].prompt_id == "detailed"
        assert observer.started[0].model == "claude-sonnet-4-5"
        assert [e.event_type for e in observer.received] == [
            "AssistantMessage",
            "ResultMessage",
        ]
        assert observer.completed[0].num_events == 2
        assert observer.completed[0].cost_usd == pytest.approx(0.005)
        assert observer.failed == []

    async def test_sdk_error_emits_failed(self, tmp_path: Path) -> None:
        observer = FakeAgentObserver()

        with patch(_QUERY, new=_mock_query_raising(ClaudeSDKError("boom"))):
            with pytest.raises(AgentInvocationError):
                await _make_agent(observer=observer).run(
                    prompt="p", working_dir=tmp_path, timeout_seconds=10
                )

        assert len(observer.failed) == 1
        assert observer.failed[0].reason == "boom"
        assert observer.completed == []

    async def test_timeout_emits_failed(self, tmp_path: Path) -> None:
        observer = FakeAgentObserver()

        with patch(_QUERY, new=_mock_query_hanging()):
            with pytest.raises(TrialTimeoutError):
                await _make_agent(observer=observer).run(
                    prompt="p", working_dir=tmp_path, timeout_seconds=0.05
                )

        assert len(observer.failed) == 1
        assert "timed out" in observer.failed[0].reason


# ---------------------------------------------------------------------------
# _build_options
# ---------------------------------------------------------------------------


class TestBuildOptions:
    def test_optional_settings_omitted_when_unset(self, tmp_path: Path) -> None:
        agent = _make_agent(config=AgentConfig())

        options = agent._build_options(working_dir=tmp_path)

        assert options.model is None
        assert options.max_turns is None
        assert options.setting_sources == ["project"]

    def test_max_turns_forwarded(self, tmp_path: Path) -> None:
        agent = _make_agent(config=AgentConfig(max_turns=12))

        options = agent._build_options(working_dir=tmp_path)

        assert options.max_turns == 12

    def test_environment_is_copied(self, tmp_path: Path) -> None:
        env = {"PORT": "3000"}
        agent = _make_agent(environment=env)
        env["PORT"] = "9999"

        options = agent._build_options(working_dir=tmp_path)

        assert options.env == {"PORT": "3000"}

    def test_configured_options_take_precedence(self, tmp_path: Path) -> None:
        agent = _make_agent(
            config=AgentConfig(model="claude-sonnet-4-5", options={"model": "claude-opus-4-1"})
        )

        options = agent._build_options(working_dir=tmp_path)

        assert options.model == "claude-opus-4-1"


class TestValidateSdkOptions:
    def test_known_options_accepted(self) -> None:
        validate_sdk_options({"allowed_tools": ["Read"], "system_prompt": "x"})

    @pytest.mark.parametrize("key", ["cwd", "env"])
    def test_engine_owned_options_rejected(self, key: str) -> None:
        with pytest.raises(AgentOptionsError, match=f"may not set {key}"):
            validate_sdk_options({key: "anything"})

    def test_unknown_options_rejected(self) -> None:
        with pytest.raises(AgentOptionsError) as exc_info:
            validate_sdk_options({"not_an_option": 1})

        assert str(exc_info.value) == (
            "Failed to create agent factory: unknown Claude Agent SDK options: not_an_option"
        )
