"""TrialScheduler — runs TrialSpecs under the configured concurrency strategy."""

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence

from matrix_eval.config.domain.execution import ExecutionConfig
from matrix_eval.config.infrastructure.errors import ConfigurationError
from matrix_eval.evaluation.domain.result import TrialResult
from matrix_eval.matrix.domain.trial import TrialSpec

type TrialRunner = Callable[[TrialSpec], Awaitable[TrialResult]]


def validate_execution(execution: ExecutionConfig) -> None:
    """Raise ConfigurationError if the execution strategy cannot be run."""
    if execution.mode == "parallel-limit":
        if execution.concurrency is None:
            raise ConfigurationError(
                "concurrency is required when execution mode is 'parallel-limit'"
            )
        if execution.concurrency < 1:
            raise ConfigurationError(
                f"concurrency must be a positive integer, got {execution.concurrency}"
            )


class TrialScheduler:
    """The only component aware of the concurrency strategy.

    ``run_trial`` is expected to convert trial-scoped failures into
    TrialResults. Anything it still raises is recorded as a failed result for
    that spec, so the scheduler guarantees exactly one result per spec and
    never cancels sibling trials. Results are returned sorted by trial_id
    whatever the completion order.
    """

    async def run(
        self,
        specs: Sequence[TrialSpec],
        execution: ExecutionConfig,
        run_trial: TrialRunner,
    ) -> list[TrialResult]:
        """Execute every spec and return results in canonical order.

        Raises:
            ConfigurationError: before any trial starts, if the strategy is invalid.
        """
        validate_execution(execution)

        if execution.mode == "sequential":
            results = [await _run_contained(run_trial, spec) for spec in specs]
        elif execution.mode == "parallel":
            results = await self._run_concurrently(specs, run_trial, limit=None)
        else:
            results = await self._run_concurrently(
                specs, run_trial, limit=execution.concurrency
            )

        return sorted(results, key=lambda r: r.trial_id)

    async def _run_concurrently(
        self,
        specs: Sequence[TrialSpec],
        run_trial: TrialRunner,
        limit: int | None,
    ) -> list[TrialResult]:
        """Start one task per spec; a semaphore caps in-flight trials when limit is set.

        Tasks are created in generation order and the semaphore wakes waiters
        FIFO, so queued specs are admitted in generation order.
        """
        sem = asyncio.Semaphore(limit) if limit is not None else None
        results: list[TrialResult] = []

        async def _one(spec: TrialSpec) -> None:
            if sem is None:
                results.append(await _run_contained(run_trial, spec))
                return
            async with sem:
                results.append(await _run_contained(run_trial, spec))

        async with asyncio.TaskGroup() as tg:
            for spec in specs:
                tg.create_task(_one(spec))

        return results


async def _run_contained(run_trial: TrialRunner, spec: TrialSpec) -> TrialResult:
    started = time.monotonic()
    try:
        return await run_trial(spec)
    except Exception as exc:
        return TrialResult.build(
            trial_id=spec.trial_id,
            prompt_id=spec.prompt_id,
            iteration=spec.iteration,
            duration_ms=int((time.monotonic() - started) * 1000),
            error=f"Unexpected {type(exc).__name__}: {exc}",
        )
