"""Tests for StructlogEvaluationObserver event names and fields."""

from structlog.testing import capture_logs

from matrix_eval.evaluation.infrastructure.observer import StructlogEvaluationObserver


class TestStructlogEvaluationObserver:
    def test_started_event(self) -> None:
        with capture_logs() as logs:
            StructlogEvaluationObserver().evaluation_started(
                run_id="r",
                name="demo",
                prompt_ids=["basic"],
                iterations=3,
                total_trials=3,
                mode="sequential",
                concurrency=None,
            )

        assert logs == [
            {
                "event": "evaluation.started",
                "log_level": "info",
                "run_id": "r",
                "name": "demo",
                "prompt_ids": ["basic"],
                "iterations": 3,
                "total_trials": 3,
                "mode": "sequential",
                "concurrency": None,
            }
        ]

    def test_progress_reports_percent(self) -> None:
        with capture_logs() as logs:
            StructlogEvaluationObserver().evaluation_progress(
                run_id="r", prompt_id="basic", completed=1, total=3
            )

        assert logs[0]["event"] == "evaluation.progress"
        assert logs[0]["percent"] == 33.3

    def test_trial_failed_logs_at_error_level(self) -> None:
        with capture_logs() as logs:
            StructlogEvaluationObserver().trial_failed(
                run_id="r",
                trial_id=2,
                prompt_id="basic",
                iteration=2,
                reason="Failed to invoke agent: boom",
            )

        assert logs[0]["event"] == "trial.failed"
        assert logs[0]["log_level"] == "error"
        assert logs[0]["reason"] == "Failed to invoke agent: boom"

    def test_completed_rounds_elapsed(self) -> None:
        with capture_logs() as logs:
            StructlogEvaluationObserver().evaluation_completed(
                run_id="r", total_trials=3, passed=2, elapsed_seconds=1.23456
            )

        assert logs[0]["event"] == "evaluation.completed"
        assert logs[0]["passed"] == 2
        assert logs[0]["elapsed_seconds"] == 1.23
