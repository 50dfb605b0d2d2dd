"""CommandRunner Protocol — bounded-timeout command execution offered to scorers."""

from collections.abc import Sequence
from typing import Protocol

from matrix_eval.scoring.domain.score import ScoreResult


class CommandRunner(Protocol):
    """Runs a command in the trial workspace and scores its exit status.

    Exit code 0 scores 1.0; any failure, including a timeout or a missing
    executable, scores 0.0 with the failure in ``reason``.
    """

    async def __call__(
        self,
        command: str,
        args: Sequence[str] = (),
        timeout_seconds: float = 120.0,
        success_message: str | None = None,
        failure_message: str | None = None,
    ) -> ScoreResult: ...
