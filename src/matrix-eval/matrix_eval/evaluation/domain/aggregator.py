"""Aggregator — restores canonical order and computes per-scorer statistics."""

import statistics
from collections.abc import Sequence
from datetime import UTC, datetime

from matrix_eval.agent.domain.usage import UsageMetrics
from matrix_eval.evaluation.domain.report import OVERALL_KEY, AggregateScore, EvalReport
from matrix_eval.evaluation.domain.result import TrialResult


def aggregate(
    name: str,
    trials: Sequence[TrialResult],
    total_duration_ms: int = 0,
    timestamp: datetime | None = None,
    error: str | None = None,
) -> EvalReport:
    """Build the EvalReport for a run from results in any order.

    Per scorer name: mean/min/max, population standard deviation and
    ``pass_rate = count(score >= 1.0) / count(trials reporting the scorer)``.
    The ``_overall`` entry is derived from trial-level success only.
    """
    ordered = sorted(trials, key=lambda t: t.trial_id)

    # Scorer names in first-seen order across the canonical trial order.
    scores_by_name: dict[str, list[float]] = {}
    for trial in ordered:
        for scorer_name, result in trial.scores.items():
            scores_by_name.setdefault(scorer_name, []).append(result.score)

    aggregates: dict[str, AggregateScore] = {
        scorer_name: _aggregate_scores(values)
        for scorer_name, values in scores_by_name.items()
    }
    aggregates[OVERALL_KEY] = _overall(ordered)

    return EvalReport(
        name=name,
        timestamp=timestamp or datetime.now(UTC),
        overall_success=all(t.success for t in ordered),
        total_duration_ms=total_duration_ms,
        trials=ordered,
        aggregates=aggregates,
        total_usage=_total_usage(ordered),
        error=error,
    )


def _aggregate_scores(values: list[float]) -> AggregateScore:
    return AggregateScore(
        mean=statistics.fmean(values),
        min=min(values),
        max=max(values),
        std_dev=statistics.pstdev(values),
        pass_rate=sum(1 for v in values if v >= 1.0) / len(values),
    )


def _overall(trials: list[TrialResult]) -> AggregateScore:
    rate = sum(1 for t in trials if t.success) / len(trials) if trials else 0.0
    return AggregateScore(mean=rate, min=rate, max=rate, std_dev=0.0, pass_rate=rate)


def _total_usage(trials: list[TrialResult]) -> UsageMetrics | None:
    """Sum usage across trials that reported it; None when none did."""
    reported = [t.usage for t in trials if t.usage is not None]
    if not reported:
        return None
    total = UsageMetrics()
    for usage in reported:
        total = total + usage
    return total
