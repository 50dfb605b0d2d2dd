"""Observer port for the evaluation domain — defines events in domain language."""

from typing import Protocol


class EvaluationObserver(Protocol):
    """Observer port emitting structured events during an evaluation run.

    Implementations may log to structlog, render progress, or record for tests.
    """

    def evaluation_started(
        self,
        run_id: str,
        name: str,
        prompt_ids: list[str],
        iterations: int,
        total_trials: int,
        mode: str,
        concurrency: int | None,
    ) -> None: ...

    def evaluation_completed(
        self,
        run_id: str,
        total_trials: int,
        passed: int,
        elapsed_seconds: float,
    ) -> None: ...

    def evaluation_progress(
        self,
        run_id: str,
        prompt_id: str,
        completed: int,
        total: int,
    ) -> None: ...

    def trial_started(
        self, run_id: str, trial_id: int, prompt_id: str, iteration: int
    ) -> None: ...

    def trial_completed(
        self,
        run_id: str,
        trial_id: int,
        prompt_id: str,
        iteration: int,
        success: bool,
        duration_ms: int,
    ) -> None: ...

    def trial_failed(
        self,
        run_id: str,
        trial_id: int,
        prompt_id: str,
        iteration: int,
        reason: str,
    ) -> None: ...
