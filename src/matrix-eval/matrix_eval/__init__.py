"""matrix-eval — run prompt variants × iterations against isolated project copies."""

from matrix_eval.environment.infrastructure.providers import (
    CallableEnvironmentProvider,
    StaticEnvironmentProvider,
    as_environment_provider,
    validate_environment,
)
from matrix_eval.scoring.infrastructure.scorers import (
    CommandScorer,
    build_success,
    create_scorer,
    lint_success,
    test_success,
)

__all__ = [
    "CallableEnvironmentProvider",
    "CommandScorer",
    "StaticEnvironmentProvider",
    "as_environment_provider",
    "build_success",
    "create_scorer",
    "lint_success",
    "test_success",
    "validate_environment",
]
