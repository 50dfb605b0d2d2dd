"""Base exception class for all matrix-eval-specific errors."""


class MatrixEvalError(Exception):
    """Base class for all matrix-eval errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class TrialTimeoutError(MatrixEvalError):
    """Raised when a trial-scoped operation exceeds its timeout.

    Fails only the trial that owns the operation.
    """

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Failed to complete {operation}: timed out after {timeout_seconds:g}s"
        )
