"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, name: str, num_prompts: int, iterations: int) -> None:
        self._log.info(
            "config.loaded",
            name=name,
            num_prompts=num_prompts,
            iterations=iterations,
        )

    def config_judge_temperature_warning(
        self, scorer_name: str, temperature: float
    ) -> None:
        self._log.warning(
            "config.judge_temperature_warning",
            scorer_name=scorer_name,
            temperature=temperature,
            message="Judge temperature > 0.0 may produce non-deterministic scoring",
        )
