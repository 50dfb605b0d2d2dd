"""Tests for TrialScheduler concurrency strategies."""

import asyncio

import pytest

from matrix_eval.config.domain.execution import ExecutionConfig
from matrix_eval.config.domain.prompt import PromptVariant
from matrix_eval.config.infrastructure.errors import ConfigurationError
from matrix_eval.evaluation.application.scheduler import (
    TrialScheduler,
    validate_execution,
)
from matrix_eval.evaluation.domain.result import TrialResult
from matrix_eval.matrix.domain.generator import generate
from matrix_eval.matrix.domain.trial import TrialSpec


class _InstrumentedRunner:
    """Records entry order and the peak number of concurrently running trials.

    Later trials finish faster so that completion order differs from
    generation order whenever trials overlap.
    """

    def __init__(self, total: int, failing: set[int] | None = None) -> None:
        self._total = total
        self._failing = failing or set()
        self.active = 0
        self.max_active = 0
        self.entered: list[int] = []
        self.finished: list[int] = []

    async def __call__(self, spec: TrialSpec) -> TrialResult:
        self.entered.append(spec.trial_id)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0.001 * (self._total - spec.trial_id))
        finally:
            self.active -= 1
        self.finished.append(spec.trial_id)
        return TrialResult.build(
            trial_id=spec.trial_id,
            prompt_id=spec.prompt_id,
            iteration=spec.iteration,
            duration_ms=0,
            error="Failed to x" if spec.trial_id in self._failing else None,
        )


def _specs(num_variants: int = 2, iterations: int = 3) -> list[TrialSpec]:
    return generate(
        variants=[PromptVariant(id=f"v{i}", text="t") for i in range(num_variants)],
        iterations=iterations,
    )


def _strip_timing(results: list[TrialResult]) -> list[dict[str, object]]:
    return [r.model_dump(exclude={"duration_ms"}) for r in results]


class TestSequential:
    async def test_runs_one_at_a_time_in_generation_order(self) -> None:
        specs = _specs()
        runner = _InstrumentedRunner(total=len(specs))

        results = await TrialScheduler().run(
            specs=specs, execution=ExecutionConfig(mode="sequential"), run_trial=runner
        )

        assert runner.max_active == 1
        assert runner.entered == list(range(len(specs)))
        assert [r.trial_id for r in results] == list(range(len(specs)))


class TestParallel:
    async def test_all_trials_overlap(self) -> None:
        specs = _specs()
        runner = _InstrumentedRunner(total=len(specs))

        await TrialScheduler().run(
            specs=specs, execution=ExecutionConfig(mode="parallel"), run_trial=runner
        )

        assert runner.max_active == len(specs)

    async def test_results_sorted_despite_reverse_completion(self) -> None:
        specs = _specs()
        runner = _InstrumentedRunner(total=len(specs))

        results = await TrialScheduler().run(
            specs=specs, execution=ExecutionConfig(mode="parallel"), run_trial=runner
        )

        assert runner.finished != sorted(runner.finished)
        assert [r.trial_id for r in results] == list(range(len(specs)))


class TestParallelLimit:
    @pytest.mark.parametrize("limit", [1, 2, 3, 10])
    async def test_never_exceeds_limit(self, limit: int) -> None:
        specs = _specs(num_variants=3, iterations=3)
        runner = _InstrumentedRunner(total=len(specs))

        results = await TrialScheduler().run(
            specs=specs,
            execution=ExecutionConfig(mode="parallel-limit", concurrency=limit),
            run_trial=runner,
        )

        assert runner.max_active <= limit
        assert runner.max_active == min(limit, len(specs))
        assert [r.trial_id for r in results] == list(range(len(specs)))

    async def test_admission_in_generation_order(self) -> None:
        specs = _specs(num_variants=2, iterations=4)
        runner = _InstrumentedRunner(total=len(specs))

        await TrialScheduler().run(
            specs=specs,
            execution=ExecutionConfig(mode="parallel-limit", concurrency=2),
            run_trial=runner,
        )

        assert runner.entered == list(range(len(specs)))

    async def test_limit_one_matches_sequential(self) -> None:
        specs = _specs()
        sequential_runner = _InstrumentedRunner(total=len(specs))
        limited_runner = _InstrumentedRunner(total=len(specs))

        sequential = await TrialScheduler().run(
            specs=specs,
            execution=ExecutionConfig(mode="sequential"),
            run_trial=sequential_runner,
        )
        limited = await TrialScheduler().run(
            specs=specs,
            execution=ExecutionConfig(mode="parallel-limit", concurrency=1),
            run_trial=limited_runner,
        )

        assert _strip_timing(limited) == _strip_timing(sequential)
        assert limited_runner.entered == sequential_runner.entered
        assert limited_runner.finished == sequential_runner.finished

    async def test_missing_concurrency_raises_before_any_trial(self) -> None:
        specs = _specs()
        runner = _InstrumentedRunner(total=len(specs))

        with pytest.raises(ConfigurationError, match="concurrency is required"):
            await TrialScheduler().run(
                specs=specs,
                execution=ExecutionConfig(mode="parallel-limit"),
                run_trial=runner,
            )

        assert runner.entered == []


class TestFailureIsolation:
    @pytest.mark.parametrize(
        "execution",
        [
            ExecutionConfig(mode="sequential"),
            ExecutionConfig(mode="parallel"),
            ExecutionConfig(mode="parallel-limit", concurrency=2),
        ],
        ids=["sequential", "parallel", "parallel-limit"],
    )
    async def test_failed_trials_do_not_affect_siblings(
        self, execution: ExecutionConfig
    ) -> None:
        specs = _specs()
        runner = _InstrumentedRunner(total=len(specs), failing={1, 4})

        results = await TrialScheduler().run(
            specs=specs, execution=execution, run_trial=runner
        )

        assert [r.trial_id for r in results] == list(range(len(specs)))
        assert [r.success for r in results] == [True, False, True, True, False, True]

    @pytest.mark.parametrize(
        "execution",
        [
            ExecutionConfig(mode="sequential"),
            ExecutionConfig(mode="parallel"),
            ExecutionConfig(mode="parallel-limit", concurrency=2),
        ],
        ids=["sequential", "parallel", "parallel-limit"],
    )
    async def test_raising_trial_is_recorded_and_siblings_complete(
        self, execution: ExecutionConfig
    ) -> None:
        specs = _specs()
        runner = _InstrumentedRunner(total=len(specs))

        async def _explodes_on_first(spec: TrialSpec) -> TrialResult:
            if spec.trial_id == 0:
                raise RuntimeError("rmtree hook exploded")
            return await runner(spec)

        results = await TrialScheduler().run(
            specs=specs, execution=execution, run_trial=_explodes_on_first
        )

        assert [r.trial_id for r in results] == list(range(len(specs)))
        assert results[0].success is False
        assert results[0].prompt_id == "v0"
        assert results[0].error == "Unexpected RuntimeError: rmtree hook exploded"
        assert sorted(runner.finished) == list(range(1, len(specs)))
        assert all(r.success for r in results[1:])


class TestValidateExecution:
    def test_sequential_needs_no_concurrency(self) -> None:
        validate_execution(ExecutionConfig(mode="sequential"))

    def test_parallel_limit_with_concurrency_is_valid(self) -> None:
        validate_execution(ExecutionConfig(mode="parallel-limit", concurrency=4))

    def test_non_positive_concurrency_raises(self) -> None:
        execution = ExecutionConfig.model_construct(mode="parallel-limit", concurrency=0)

        with pytest.raises(ConfigurationError, match="positive integer"):
            validate_execution(execution)
