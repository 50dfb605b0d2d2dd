"""CompositeEvaluationObserver — fans out all events to a list of observers."""

from matrix_eval.evaluation.domain.observer import EvaluationObserver


class CompositeEvaluationObserver:
    """Delegates every observer event to each observer in order.

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self, observers: list[EvaluationObserver]) -> None:
        self._observers = observers

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
        for obs in self._observers:
            obs.evaluation_started(
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
        for obs in self._observers:
            obs.evaluation_completed(
                run_id=run_id,
                total_trials=total_trials,
                passed=passed,
                elapsed_seconds=elapsed_seconds,
            )

    def evaluation_progress(
        self,
        run_id: str,
        prompt_id: str,
        completed: int,
        total: int,
    ) -> None:
        for obs in self._observers:
            obs.evaluation_progress(
                run_id=run_id,
                prompt_id=prompt_id,
                completed=completed,
                total=total,
            )

    def trial_started(
        self, run_id: str, trial_id: int, prompt_id: str, iteration: int
    ) -> None:
        for obs in self._observers:
            obs.trial_started(
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
        for obs in self._observers:
            obs.trial_completed(
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
        for obs in self._observers:
            obs.trial_failed(
                run_id=run_id,
                trial_id=trial_id,
                prompt_id=prompt_id,
                iteration=iteration,
                reason=reason,
            )
