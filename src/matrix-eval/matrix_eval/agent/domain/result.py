"""AgentResult value object — the outcome of a single agent invocation."""

from pydantic import BaseModel, Field

from matrix_eval.agent.domain.usage import UsageMetrics


class AgentResult(BaseModel, frozen=True):
    """Everything the engine keeps from one fully drained agent event stream.

    ``transcript`` is the JSON-serialised event sequence; ``stop_reason`` is the
    terminal event's subtype, recorded but not interpreted.
    """

    transcript: str
    usage: UsageMetrics | None
    num_events: int = Field(ge=0)
    duration_ms: int = Field(ge=0)
    stop_reason: str | None = None
