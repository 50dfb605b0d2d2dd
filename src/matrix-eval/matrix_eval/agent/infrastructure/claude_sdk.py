"""ClaudeAgentSDKAgent — agent implementation using the Claude Agent SDK."""

import asyncio
import dataclasses
import json
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from claude_agent_sdk import query
from claude_agent_sdk._errors import ClaudeSDKError
from claude_agent_sdk.types import ClaudeAgentOptions, ResultMessage

from matrix_eval.agent.domain.observer import AgentObserver
from matrix_eval.agent.domain.result import AgentResult
from matrix_eval.agent.domain.usage import UsageMetrics
from matrix_eval.agent.infrastructure.errors import (
    AgentInvocationError,
    AgentOptionsError,
)
from matrix_eval.config.domain.agent import AgentConfig
from matrix_eval.core.errors import TrialTimeoutError

# Set per trial by the engine; never taken from configuration.
_ENGINE_OWNED_OPTIONS = frozenset({"cwd", "env"})


class ClaudeAgentSDKAgent:
    """Agent implementation that delegates to the Claude Agent SDK.

    One instance is constructed per trial. The trial id, prompt id and the
    trial's environment values are injected at construction time; the
    environment reaches the agent process only through ``ClaudeAgentOptions.env``.
    """

    def __init__(
        self,
        config: AgentConfig,
        trial_id: int,
        prompt_id: str,
        environment: Mapping[str, str],
        observer: AgentObserver,
    ) -> None:
        self._config = config
        self._trial_id = trial_id
        self._prompt_id = prompt_id
        self._environment = dict(environment)
        self._observer = observer

    async def run(
        self, prompt: str, working_dir: Path, timeout_seconds: float
    ) -> AgentResult:
        """Run the agent in working_dir and drain its event stream.

        Raises:
            TrialTimeoutError: if the stream is not fully drained within timeout_seconds.
            AgentInvocationError: if the SDK raises or no ResultMessage arrives.
        """
        self._observer.agent_invocation_started(
            trial_id=self._trial_id,
            prompt_id=self._prompt_id,
            model=self._config.model,
        )

        options = self._build_options(working_dir=working_dir)
        started = time.monotonic()
        try:
            async with asyncio.timeout(timeout_seconds):
                result_message, events = await self._drain(
                    prompt=prompt, options=options
                )
        except TimeoutError as exc:
            error = TrialTimeoutError(
                operation="agent invocation", timeout_seconds=timeout_seconds
            )
            self._observer.agent_invocation_failed(
                trial_id=self._trial_id, prompt_id=self._prompt_id, reason=str(error)
            )
            raise error from exc
        except AgentInvocationError as exc:
            self._observer.agent_invocation_failed(
                trial_id=self._trial_id,
                prompt_id=self._prompt_id,
                reason=str(exc).removeprefix("Failed to invoke agent: "),
            )
            raise

        duration_ms = int((time.monotonic() - started) * 1000)
        self._observer.agent_invocation_completed(
            trial_id=self._trial_id,
            prompt_id=self._prompt_id,
            duration_ms=duration_ms,
            num_events=len(events),
            cost_usd=result_message.total_cost_usd,
        )

        return AgentResult(
            transcript=json.dumps(events, default=str),
            usage=self._map_usage(
                raw=result_message.usage, cost_usd=result_message.total_cost_usd
            ),
            num_events=len(events),
            duration_ms=duration_ms,
            stop_reason=result_message.subtype,
        )

    async def _drain(
        self, prompt: str, options: ClaudeAgentOptions
    ) -> tuple[ResultMessage, list[dict[str, Any]]]:
        """Consume every event from the SDK stream; keep the last ResultMessage.

        Raises:
            AgentInvocationError: on SDK errors or a stream without a ResultMessage.
        """
        result_message: ResultMessage | None = None
        events: list[dict[str, Any]] = []

        try:
            async for message in query(prompt=prompt, options=options):
                event_type = type(message).__name__
                events.append(_serialize_event(message))
                self._observer.agent_event_received(
                    trial_id=self._trial_id, event_type=event_type
                )
                if isinstance(message, ResultMessage):
                    result_message = message
        except ClaudeSDKError as exc:
            raise AgentInvocationError(reason=str(exc)) from exc
        except Exception as exc:
            # The SDK raises a bare Exception when its subprocess reader fails.
            raise AgentInvocationError(reason=str(exc)) from exc

        if result_message is None:
            raise AgentInvocationError(reason="no ResultMessage in event stream")

        return result_message, events

    def _build_options(self, working_dir: Path) -> ClaudeAgentOptions:
        options: dict[str, Any] = {
            "cwd": str(working_dir),
            "env": dict(self._environment),
            "permission_mode": self._config.permission_mode,
            "setting_sources": list(self._config.setting_sources),
        }
        if self._config.model is not None:
            options["model"] = self._config.model
        if self._config.max_turns is not None:
            options["max_turns"] = self._config.max_turns
        options.update(self._config.options)
        return ClaudeAgentOptions(**options)

    def _map_usage(
        self, raw: dict[str, Any] | None, cost_usd: float | None
    ) -> UsageMetrics | None:
        """Map the SDK's raw usage dict to UsageMetrics; missing counters become 0."""
        if raw is None:
            return None
        return UsageMetrics(
            input_tokens=int(raw.get("input_tokens") or 0),
            output_tokens=int(raw.get("output_tokens") or 0),
            cache_creation_input_tokens=int(raw.get("cache_creation_input_tokens") or 0),
            cache_read_input_tokens=int(raw.get("cache_read_input_tokens") or 0),
            cost_usd=float(cost_usd or 0.0),
        )


def _serialize_event(message: object) -> dict[str, Any]:
    if dataclasses.is_dataclass(message) and not isinstance(message, type):
        return {"type": type(message).__name__, **dataclasses.asdict(message)}
    return {"type": type(message).__name__, "repr": repr(message)}


def validate_sdk_options(options: Mapping[str, Any]) -> None:
    """Check configured pass-through options before any trial starts.

    Raises:
        AgentOptionsError: if an option is owned by the engine or unknown to
            ClaudeAgentOptions.
    """
    owned = sorted(_ENGINE_OWNED_OPTIONS.intersection(options))
    if owned:
        raise AgentOptionsError(
            f"options may not set {', '.join(owned)}; they are set per trial"
        )
    known = {field.name for field in dataclasses.fields(ClaudeAgentOptions)}
    unknown = sorted(set(options) - known)
    if unknown:
        raise AgentOptionsError(f"unknown Claude Agent SDK options: {', '.join(unknown)}")
