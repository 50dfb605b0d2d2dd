"""Error types raised by scorer implementations."""

from matrix_eval.core.errors import MatrixEvalError


class ScorerError(MatrixEvalError):
    """Raised when a scorer cannot produce a ScoreResult.

    Never escapes the scorer adapter: it becomes a 0.0 score for that scorer.
    """

    def __init__(self, scorer: str, reason: str) -> None:
        self.scorer = scorer
        super().__init__(f"Failed to score with '{scorer}': {reason}")
