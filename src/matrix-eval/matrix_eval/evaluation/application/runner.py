"""EvaluationRunner — orchestrates generate → schedule → aggregate."""

import asyncio
import time
import uuid

from matrix_eval.config.domain.config import EvalConfig
from matrix_eval.evaluation.application.executor import TrialExecutor
from matrix_eval.evaluation.application.scheduler import (
    TrialScheduler,
    validate_execution,
)
from matrix_eval.evaluation.domain.aggregator import aggregate
from matrix_eval.evaluation.domain.observer import EvaluationObserver
from matrix_eval.evaluation.domain.report import EvalReport
from matrix_eval.evaluation.domain.result import TrialResult
from matrix_eval.matrix.domain.generator import generate
from matrix_eval.matrix.domain.trial import TrialSpec


class EvaluationRunner:
    """Runs the full evaluation matrix and returns an EvalReport.

    The runner is free of infrastructure dependencies: it receives a
    TrialExecutor built from abstract collaborators, so implementations can be
    swapped for testing without touching the orchestration logic.
    """

    def __init__(
        self,
        config: EvalConfig,
        executor: TrialExecutor,
        observer: EvaluationObserver,
        scheduler: TrialScheduler | None = None,
    ) -> None:
        self._config = config
        self._executor = executor
        self._observer = observer
        self._scheduler = scheduler or TrialScheduler()

    async def run(self) -> EvalReport:
        """Execute every (prompt variant, iteration) trial and aggregate the results.

        Configuration problems raise ConfigurationError before any workspace is
        provisioned. Trial failures never raise; they appear in the report.
        """
        validate_execution(self._config.execution)
        specs = generate(
            variants=self._config.prompts,
            iterations=self._config.iterations,
            eval_name=self._config.name,
        )

        run_id = str(uuid.uuid4())
        total = len(specs)
        per_prompt_total = self._config.iterations
        self._observer.evaluation_started(
            run_id=run_id,
            name=self._config.name,
            prompt_ids=[p.id for p in self._config.prompts],
            iterations=self._config.iterations,
            total_trials=total,
            mode=self._config.execution.mode,
            concurrency=self._config.execution.concurrency,
        )
        started_at = time.monotonic()

        completed_per_prompt: dict[str, int] = {}
        progress_lock = asyncio.Lock()

        async def _run_trial(spec: TrialSpec) -> TrialResult:
            self._observer.trial_started(
                run_id=run_id,
                trial_id=spec.trial_id,
                prompt_id=spec.prompt_id,
                iteration=spec.iteration,
            )
            result = await self._executor.execute(spec)
            if result.error is not None:
                self._observer.trial_failed(
                    run_id=run_id,
                    trial_id=spec.trial_id,
                    prompt_id=spec.prompt_id,
                    iteration=spec.iteration,
                    reason=result.error,
                )
            else:
                self._observer.trial_completed(
                    run_id=run_id,
                    trial_id=spec.trial_id,
                    prompt_id=spec.prompt_id,
                    iteration=spec.iteration,
                    success=result.success,
                    duration_ms=result.duration_ms,
                )
            async with progress_lock:
                completed_per_prompt[spec.prompt_id] = (
                    completed_per_prompt.get(spec.prompt_id, 0) + 1
                )
                self._observer.evaluation_progress(
                    run_id=run_id,
                    prompt_id=spec.prompt_id,
                    completed=completed_per_prompt[spec.prompt_id],
                    total=per_prompt_total,
                )
            return result

        results = await self._scheduler.run(
            specs=specs, execution=self._config.execution, run_trial=_run_trial
        )
        elapsed_seconds = time.monotonic() - started_at

        report = aggregate(
            name=self._config.name,
            trials=results,
            total_duration_ms=int(elapsed_seconds * 1000),
        )

        self._observer.evaluation_completed(
            run_id=run_id,
            total_trials=len(results),
            passed=sum(1 for r in results if r.success),
            elapsed_seconds=elapsed_seconds,
        )
        return report
