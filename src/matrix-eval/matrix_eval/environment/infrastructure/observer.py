"""Structlog implementation of the EnvironmentObserver port."""

import structlog


class StructlogEnvironmentObserver:
    """Satisfies the EnvironmentObserver protocol structurally."""

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def environment_critical_var_overridden(self, trial_id: int, name: str) -> None:
        self._log.warning(
            "environment.critical_var_overridden",
            trial_id=trial_id,
            name=name,
            message="Overriding a system environment variable may cause unexpected behavior",
        )
