"""Error types raised while producing a trial's environment values."""

from matrix_eval.core.errors import MatrixEvalError


class EnvironmentProviderError(MatrixEvalError):
    """Raised when a provider fails or returns invalid names or values."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to provide environment: {reason}")
