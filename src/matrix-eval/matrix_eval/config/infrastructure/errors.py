"""Error types raised while loading or validating configuration."""

from pathlib import Path

from matrix_eval.core.errors import MatrixEvalError


class ConfigurationError(MatrixEvalError):
    """Raised when the run configuration is invalid.

    Always raised before any trial starts; aborts the whole run.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to validate config: {reason}")


class MissingEnvVarsError(MatrixEvalError):
    """Raised when one or more required environment variables are not set."""

    def __init__(self, missing_vars: list[str]) -> None:
        self.missing_vars = missing_vars
        var_list = ", ".join(sorted(missing_vars))
        super().__init__(
            f"Failed to load config: missing environment variables: {var_list}"
        )


class ConfigLoadError(MatrixEvalError):
    """Raised when the config file cannot be opened or parsed."""

    def __init__(self, path: Path, reason: str = "file not found") -> None:
        self.path = path
        super().__init__(f"Failed to load config: {reason}: {path}")
