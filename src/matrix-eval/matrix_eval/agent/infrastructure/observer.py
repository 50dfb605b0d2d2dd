"""Structlog implementation of the AgentObserver port."""

import structlog


class StructlogAgentObserver:
    """Delegates agent domain events to structlog.

    Satisfies the AgentObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def agent_invocation_started(
        self, trial_id: int, prompt_id: str, model: str | None
    ) -> None:
        self._log.info(
            "agent.invocation_started",
            trial_id=trial_id,
            prompt_id=prompt_id,
            model=model,
        )

    def agent_event_received(self, trial_id: int, event_type: str) -> None:
        self._log.debug("agent.event_received", trial_id=trial_id, event_type=event_type)

    def agent_invocation_completed(
        self,
        trial_id: int,
        prompt_id: str,
        duration_ms: int,
        num_events: int,
        cost_usd: float | None,
    ) -> None:
        self._log.info(
            "agent.invocation_completed",
            trial_id=trial_id,
            prompt_id=prompt_id,
            duration_ms=duration_ms,
            num_events=num_events,
            cost_usd=cost_usd,
        )

    def agent_invocation_failed(
        self, trial_id: int, prompt_id: str, reason: str
    ) -> None:
        self._log.error(
            "agent.invocation_failed",
            trial_id=trial_id,
            prompt_id=prompt_id,
            reason=reason,
        )
