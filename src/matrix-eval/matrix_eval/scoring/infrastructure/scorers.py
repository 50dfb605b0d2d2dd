"""Built-in scorers: function-backed scorers and command exit-status scorers."""

import inspect
from collections.abc import Awaitable, Callable, Sequence

from matrix_eval.scoring.domain.context import ScorerContext
from matrix_eval.scoring.domain.score import ScoreResult
from matrix_eval.scoring.infrastructure.errors import ScorerError

type ScorerFn = Callable[[ScorerContext], ScoreResult | Awaitable[ScoreResult]]


class FunctionScorer:
    """Adapts a sync or async function of ScorerContext to the Scorer protocol."""

    def __init__(self, name: str, fn: ScorerFn) -> None:
        self.name = name
        self._fn = fn

    async def evaluate(self, context: ScorerContext) -> ScoreResult:
        produced = self._fn(context)
        if inspect.isawaitable(produced):
            produced = await produced
        if not isinstance(produced, ScoreResult):
            raise ScorerError(
                scorer=self.name,
                reason=f"expected ScoreResult, got {type(produced).__name__}",
            )
        return produced


def create_scorer(name: str, fn: ScorerFn) -> FunctionScorer:
    """Create a scorer from a function.

    The function receives the trial's ScorerContext, including
    ``run_command`` for command-based checks, and returns a ScoreResult
    (directly or as an awaitable)::

        async def diff_size(ctx: ScorerContext) -> ScoreResult:
            lines = ctx.change_set.count("\\n")
            return ScoreResult(score=1.0 if lines < 200 else 0.0, reason=f"{lines} lines")

        scorer = create_scorer("diff-size", diff_size)
    """
    return FunctionScorer(name=name, fn=fn)


class CommandScorer:
    """Scores 1.0 when a command exits 0 inside the trial workspace."""

    def __init__(
        self,
        name: str,
        command: str,
        args: Sequence[str] = (),
        timeout_seconds: float = 120.0,
        success_message: str | None = None,
        failure_message: str | None = None,
    ) -> None:
        self.name = name
        self._command = command
        self._args = list(args)
        self._timeout_seconds = timeout_seconds
        self._success_message = success_message
        self._failure_message = failure_message

    async def evaluate(self, context: ScorerContext) -> ScoreResult:
        return await context.run_command(
            self._command,
            self._args,
            timeout_seconds=self._timeout_seconds,
            success_message=self._success_message,
            failure_message=self._failure_message,
        )


def build_success() -> CommandScorer:
    """``npm run build`` must pass within 5 minutes."""
    return CommandScorer(
        name="build",
        command="npm",
        args=["run", "build"],
        timeout_seconds=300.0,
        success_message="Build passed",
        failure_message="Build failed",
    )


def test_success() -> CommandScorer:
    """``npm run test`` must pass within 5 minutes."""
    return CommandScorer(
        name="test",
        command="npm",
        args=["run", "test"],
        timeout_seconds=300.0,
        success_message="Tests passed",
        failure_message="Tests failed",
    )


# Not a pytest test despite the name.
test_success.__test__ = False  # type: ignore[attr-defined]


def lint_success() -> CommandScorer:
    """``npm run lint`` must pass within 1 minute."""
    return CommandScorer(
        name="lint",
        command="npm",
        args=["run", "lint"],
        timeout_seconds=60.0,
        success_message="Lint passed",
        failure_message="Lint failed",
    )
