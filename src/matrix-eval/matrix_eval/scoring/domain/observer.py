"""Observer port for the scoring domain — defines events in domain language."""

from typing import Protocol


class ScoringObserver(Protocol):
    def scorer_started(self, trial_id: int, scorer: str) -> None: ...

    def scorer_completed(
        self, trial_id: int, scorer: str, score: float, reason: str, duration_ms: int
    ) -> None: ...

    def scorer_failed(self, trial_id: int, scorer: str, reason: str) -> None: ...
