"""TrialResult — the outcome of exactly one trial."""

from pathlib import Path

from pydantic import BaseModel, Field

from matrix_eval.agent.domain.usage import UsageMetrics
from matrix_eval.scoring.domain.score import ScoreResult


class TrialResult(BaseModel, frozen=True):
    """Immutable record of one trial: agent run in a private workspace, then scored.

    ``success`` is true iff no error occurred and every score equals 1.0
    (vacuously true with no scorers). Use ``TrialResult.build`` to have it
    derived rather than passed in.
    """

    trial_id: int = Field(ge=0)
    prompt_id: str
    iteration: int = Field(ge=0)
    success: bool
    duration_ms: int = Field(ge=0)
    scores: dict[str, ScoreResult] = Field(default_factory=dict)
    change_set: str = ""
    raw_transcript: str = ""
    usage: UsageMetrics | None = None
    retained_workspace_path: Path | None = None
    environment_values: dict[str, str] = Field(default_factory=dict)
    error: str | None = None

    @classmethod
    def build(
        cls,
        trial_id: int,
        prompt_id: str,
        iteration: int,
        duration_ms: int,
        scores: dict[str, ScoreResult] | None = None,
        change_set: str = "",
        raw_transcript: str = "",
        usage: UsageMetrics | None = None,
        retained_workspace_path: Path | None = None,
        environment_values: dict[str, str] | None = None,
        error: str | None = None,
    ) -> "TrialResult":
        scores = scores or {}
        success = error is None and all(s.score == 1.0 for s in scores.values())
        return cls(
            trial_id=trial_id,
            prompt_id=prompt_id,
            iteration=iteration,
            success=success,
            duration_ms=duration_ms,
            scores=scores,
            change_set=change_set,
            raw_transcript=raw_transcript,
            usage=usage,
            retained_workspace_path=retained_workspace_path,
            environment_values=environment_values or {},
            error=error,
        )
