"""StructlogEvaluationObserver — production observer that delegates to structlog."""

import structlog


class StructlogEvaluationObserver:
    """Logs evaluation domain events to structlog.

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def evaluation_started(
        self,
        run_id: str,
        name: str,
        prompt_ids: list[str],
        iterations: int,
        total_trials: int,
        mode: str,
        concurrency: int | None,
    ) -> None:
        self._log.info(
            "evaluation.started",
            run_id=run_id,
            name=name,
            prompt_ids=prompt_ids,
            iterations=iterations,
            total_trials=total_trials,
            mode=mode,
            concurrency=concurrency,
        )

    def evaluation_completed(
        self,
        run_id: str,
        total_trials: int,
        passed: int,
        elapsed_seconds: float,
    ) -> None:
        self._log.info(
            "evaluation.completed",
            run_id=run_id,
            total_trials=total_trials,
            passed=passed,
            elapsed_seconds=round(elapsed_seconds, 2),
        )

    def evaluation_progress(
        self,
        run_id: str,
        prompt_id: str,
        completed: int,
        total: int,
    ) -> None:
        self._log.info(
            "evaluation.progress",
            run_id=run_id,
            prompt_id=prompt_id,
            completed=completed,
            total=total,
            percent=round(100.0 * completed / total, 1) if total else 0.0,
        )

    def trial_started(
        self, run_id: str, trial_id: int, prompt_id: str, iteration: int
    ) -> None:
        self._log.info(
            "trial.started",
            run_id=run_id,
            trial_id=trial_id,
            prompt_id=prompt_id,
            iteration=iteration,
        )

    def trial_completed(
        self,
        run_id: str,
        trial_id: int,
        prompt_id: str,
        iteration: int,
        success: bool,
        duration_ms: int,
    ) -> None:
        self._log.info(
            "trial.completed",
            run_id=run_id,
            trial_id=trial_id,
            prompt_id=prompt_id,
            iteration=iteration,
            success=success,
            duration_ms=duration_ms,
        )

    def trial_failed(
        self,
        run_id: str,
        trial_id: int,
        prompt_id: str,
        iteration: int,
        reason: str,
    ) -> None:
        self._log.error(
            "trial.failed",
            run_id=run_id,
            trial_id=trial_id,
            prompt_id=prompt_id,
            iteration=iteration,
            reason=reason,
        )
