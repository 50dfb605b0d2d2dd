"""Structlog implementation of the ScoringObserver port."""

import structlog


class StructlogScoringObserver:
    """Delegates scoring domain events to structlog.

    Satisfies the ScoringObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def scorer_started(self, trial_id: int, scorer: str) -> None:
        self._log.debug("scoring.scorer_started", trial_id=trial_id, scorer=scorer)

    def scorer_completed(
        self, trial_id: int, scorer: str, score: float, reason: str, duration_ms: int
    ) -> None:
        self._log.info(
            "scoring.scorer_completed",
            trial_id=trial_id,
            scorer=scorer,
            score=score,
            reason=reason,
            duration_ms=duration_ms,
        )

    def scorer_failed(self, trial_id: int, scorer: str, reason: str) -> None:
        self._log.error(
            "scoring.scorer_failed", trial_id=trial_id, scorer=scorer, reason=reason
        )
