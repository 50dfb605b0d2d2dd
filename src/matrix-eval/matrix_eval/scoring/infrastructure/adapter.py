"""ScorerAdapter — runs one scorer and contains every failure to its own score."""

import time

from matrix_eval.scoring.domain.context import ScorerContext
from matrix_eval.scoring.domain.observer import ScoringObserver
from matrix_eval.scoring.domain.score import ScoreResult
from matrix_eval.scoring.domain.scorer import Scorer


class ScorerAdapter:
    """Invokes scorers for one trial.

    A scorer that raises never aborts the trial or its sibling scorers: the
    exception becomes ``ScoreResult(score=0.0, reason=<message>)``.
    """

    def __init__(self, observer: ScoringObserver) -> None:
        self._observer = observer

    async def evaluate(
        self, scorer: Scorer, context: ScorerContext, trial_id: int
    ) -> ScoreResult:
        self._observer.scorer_started(trial_id=trial_id, scorer=scorer.name)
        started = time.monotonic()
        try:
            result = await scorer.evaluate(context)
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            self._observer.scorer_failed(
                trial_id=trial_id, scorer=scorer.name, reason=reason
            )
            return ScoreResult(
                score=0.0, reason=reason, metadata={"error": type(exc).__name__}
            )

        self._observer.scorer_completed(
            trial_id=trial_id,
            scorer=scorer.name,
            score=result.score,
            reason=result.reason,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return result
