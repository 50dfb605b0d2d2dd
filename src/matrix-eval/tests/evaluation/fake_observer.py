"""FakeEvaluationObserver — records evaluation domain events for assertion in tests."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EvaluationStartedEvent:
    run_id: str
    name: str
    prompt_ids: list[str]
    iterations: int
    total_trials: int
    mode: str
    concurrency: int | None


@dataclass(frozen=True)
class EvaluationCompletedEvent:
    run_id: str
    total_trials: int
    passed: int
    elapsed_seconds: float


@dataclass(frozen=True)
class EvaluationProgressEvent:
    run_id: str
    prompt_id: str
    completed: int
    total: int


@dataclass(frozen=True)
class TrialStartedEvent:
    run_id: str
    trial_id: int
    prompt_id: str
    iteration: int


@dataclass(frozen=True)
class TrialCompletedEvent:
    run_id: str
    trial_id: int
    prompt_id: str
    iteration: int
    success: bool
    duration_ms: int


@dataclass(frozen=True)
class TrialFailedEvent:
    run_id: str
    trial_id: int
    prompt_id: str
    iteration: int
    reason: str


class FakeEvaluationObserver:
    """Records all emitted evaluation events as typed frozen dataclasses.

    Use in tests to assert which events were emitted and with what data,
    without mocking or patching.

    Event lists use a leading underscore + public property pattern to avoid
    name collision between the list attributes and the Protocol method names.
    """

    def __init__(self) -> None:
        self._started: list[EvaluationStartedEvent] = []
        self._completed: list[EvaluationCompletedEvent] = []
        self._progress: list[EvaluationProgressEvent] = []
        self._trial_started: list[TrialStartedEvent] = []
        self._trial_completed: list[TrialCompletedEvent] = []
        self._trial_failed: list[TrialFailedEvent] = []

    @property
    def started(self) -> list[EvaluationStartedEvent]:
        return self._started

    @property
    def completed(self) -> list[EvaluationCompletedEvent]:
        return self._completed

    @property
    def progress(self) -> list[EvaluationProgressEvent]:
        return self._progress

    @property
    def trials_started(self) -> list[TrialStartedEvent]:
        return self._trial_started

    @property
    def trials_completed(self) -> list[TrialCompletedEvent]:
        return self._trial_completed

    @property
    def trials_failed(self) -> list[TrialFailedEvent]:
        return self._trial_failed

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
        self._started.append(
            EvaluationStartedEvent(
                run_id=run_id,
                name=name,
                prompt_ids=prompt_ids,
                iterations=iterations,
                total_trials=total_trials,
                mode=mode,
                concurrency=concurrency,
            )
        )

    def evaluation_completed(
        self,
        run_id: str,
        total_trials: int,
        passed: int,
        elapsed_seconds: float,
    ) -> None:
        self._completed.append(
            EvaluationCompletedEvent(
                run_id=run_id,
                total_trials=total_trials,
                passed=passed,
                elapsed_seconds=elapsed_seconds,
            )
        )

    def evaluation_progress(
        self,
        run_id: str,
        prompt_id: str,
        completed: int,
        total: int,
    ) -> None:
        self._progress.append(
            EvaluationProgressEvent(
                run_id=run_id, prompt_id=prompt_id, completed=completed, total=total
            )
        )

    def trial_started(
        self, run_id: str, trial_id: int, prompt_id: str, iteration: int
    ) -> None:
        self._trial_started.append(
            TrialStartedEvent(
                run_id=run_id, trial_id=trial_id, prompt_id=prompt_id, iteration=iteration
            )
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
        self._trial_completed.append(
            TrialCompletedEvent(
                run_id=run_id,
                trial_id=trial_id,
                prompt_id=prompt_id,
                iteration=iteration,
                success=success,
                duration_ms=duration_ms,
            )
        )

    def trial_failed(
        self,
        run_id: str,
        trial_id: int,
        prompt_id: str,
        iteration: int,
        reason: str,
    ) -> None:
        self._trial_failed.append(
            TrialFailedEvent(
                run_id=run_id,
                trial_id=trial_id,
                prompt_id=prompt_id,
                iteration=iteration,
                reason=reason,
            )
        )
