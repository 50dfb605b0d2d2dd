"""Error types raised by workspace infrastructure."""

from matrix_eval.core.errors import MatrixEvalError


class WorkspaceError(MatrixEvalError):
    """Raised when a workspace cannot be copied, baselined, or prepared."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to prepare workspace: {reason}")
