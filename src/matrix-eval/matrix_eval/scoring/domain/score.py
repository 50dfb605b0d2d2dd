"""ScoreResult — one scorer's verdict on one trial."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ScoreResult(BaseModel):
    """Immutable Pydantic model produced by a scorer for a single trial.

    Used as a cross-layer DTO: produced by scorer implementations, consumed by
    the trial executor, the aggregator, and report writers.
    """

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=1.0)
    reason: str
    metadata: dict[str, Any] | None = None

    @property
    def passed(self) -> bool:
        return self.score >= 1.0
