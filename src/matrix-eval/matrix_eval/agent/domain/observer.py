"""Observer port for the agent domain — defines events in domain language."""

from typing import Protocol


class AgentObserver(Protocol):
    def agent_invocation_started(
        self, trial_id: int, prompt_id: str, model: str | None
    ) -> None: ...

    def agent_event_received(self, trial_id: int, event_type: str) -> None: ...

    def agent_invocation_completed(
        self,
        trial_id: int,
        prompt_id: str,
        duration_ms: int,
        num_events: int,
        cost_usd: float | None,
    ) -> None: ...

    def agent_invocation_failed(
        self, trial_id: int, prompt_id: str, reason: str
    ) -> None: ...
