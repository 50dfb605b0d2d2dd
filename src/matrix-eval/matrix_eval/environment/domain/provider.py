"""EnvironmentProvider Protocol — one contract for static and generated values."""

from typing import Protocol

from matrix_eval.environment.domain.context import EnvironmentContext


class EnvironmentProvider(Protocol):
    """Produces the environment values for one trial.

    Evaluated exactly once per trial. Values are threaded explicitly into the
    agent and subprocess calls of that trial; providers must not write to the
    process environment.
    """

    async def provide(self, context: EnvironmentContext) -> dict[str, str]: ...
