"""Observer port for the environment domain."""

from typing import Protocol


class EnvironmentObserver(Protocol):
    def environment_critical_var_overridden(self, trial_id: int, name: str) -> None: ...
