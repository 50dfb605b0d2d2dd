"""EvalReport and AggregateScore — the self-contained result of a run."""

from datetime import datetime

from pydantic import BaseModel, Field

from matrix_eval.agent.domain.usage import UsageMetrics
from matrix_eval.evaluation.domain.result import TrialResult

OVERALL_KEY = "_overall"


class AggregateScore(BaseModel, frozen=True):
    mean: float
    min: float
    max: float
    std_dev: float = Field(ge=0.0)
    pass_rate: float = Field(ge=0.0, le=1.0)


class EvalReport(BaseModel, frozen=True):
    """Immutable report returned when a run completes.

    Holds plain values only (retained workspaces appear as paths), so it can be
    serialised with ``model_dump_json`` after every workspace is gone.
    """

    name: str
    timestamp: datetime
    overall_success: bool
    total_duration_ms: int = Field(ge=0)
    trials: list[TrialResult]
    aggregates: dict[str, AggregateScore]
    total_usage: UsageMetrics | None = None
    error: str | None = None

    @property
    def pass_rate(self) -> float:
        overall = self.aggregates.get(OVERALL_KEY)
        return overall.pass_rate if overall is not None else 0.0

    def trials_for(self, prompt_id: str) -> list[TrialResult]:
        return [t for t in self.trials if t.prompt_id == prompt_id]
