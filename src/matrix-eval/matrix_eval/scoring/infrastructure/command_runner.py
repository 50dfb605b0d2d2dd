"""SubprocessCommandRunner — the CommandRunner handed to scorers."""

from collections.abc import Mapping, Sequence
from pathlib import Path

from matrix_eval.core.errors import TrialTimeoutError
from matrix_eval.core.process import run_process
from matrix_eval.scoring.domain.score import ScoreResult

_OUTPUT_TAIL_CHARS = 2000


class SubprocessCommandRunner:
    """Runs commands inside one trial's workspace with that trial's environment.

    Satisfies the CommandRunner protocol structurally.
    """

    def __init__(self, working_dir: Path, environment: Mapping[str, str]) -> None:
        self._working_dir = working_dir
        self._environment = dict(environment)

    async def __call__(
        self,
        command: str,
        args: Sequence[str] = (),
        timeout_seconds: float = 120.0,
        success_message: str | None = None,
        failure_message: str | None = None,
    ) -> ScoreResult:
        display = " ".join([command, *args])
        try:
            outcome = await run_process(
                [command, *args],
                cwd=self._working_dir,
                timeout_seconds=timeout_seconds,
                environment=self._environment,
                operation=display,
            )
        except TrialTimeoutError as exc:
            return ScoreResult(
                score=0.0,
                reason=_failure_reason(display, failure_message, str(exc)),
                metadata={"timed_out": True},
            )
        except OSError as exc:
            return ScoreResult(
                score=0.0,
                reason=_failure_reason(display, failure_message, str(exc)),
            )

        metadata = {
            "exit_code": outcome.returncode,
            "stdout": outcome.stdout[-_OUTPUT_TAIL_CHARS:],
            "stderr": outcome.stderr[-_OUTPUT_TAIL_CHARS:],
        }
        if outcome.ok:
            return ScoreResult(
                score=1.0,
                reason=success_message or f"{display} passed",
                metadata=metadata,
            )
        detail = f"exit code {outcome.returncode}"
        output = (outcome.stderr or outcome.stdout).strip()
        if output:
            detail = f"{detail}: {output[-500:]}"
        return ScoreResult(
            score=0.0,
            reason=_failure_reason(display, failure_message, detail),
            metadata=metadata,
        )


def _failure_reason(display: str, failure_message: str | None, detail: str) -> str:
    if failure_message:
        return f"{failure_message}: {detail}"
    return f"{display} failed: {detail}"
