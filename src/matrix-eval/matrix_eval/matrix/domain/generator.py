"""Task matrix generation — expands prompt variants × iterations into TrialSpecs."""

from collections.abc import Sequence

from matrix_eval.config.domain.prompt import PromptVariant
from matrix_eval.config.infrastructure.errors import ConfigurationError
from matrix_eval.environment.domain.context import EnvironmentContext
from matrix_eval.matrix.domain.trial import TrialSpec


def generate(
    variants: Sequence[PromptVariant],
    iterations: int,
    eval_name: str = "",
) -> list[TrialSpec]:
    """Return ``len(variants) * iterations`` specs in canonical order.

    Variant-major, iteration-minor: trial ids ``[0, N*M)`` are assigned by
    walking variants in the given order and, within each, iterations 0..M-1.

    Raises:
        ConfigurationError: if variants is empty, iterations < 1, or a prompt id repeats.
    """
    if not variants:
        raise ConfigurationError("at least one prompt variant is required")
    if iterations < 1:
        raise ConfigurationError(f"iterations must be >= 1, got {iterations}")

    ids = [variant.id for variant in variants]
    duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
    if duplicates:
        raise ConfigurationError(f"duplicate prompt ids: {', '.join(duplicates)}")

    specs: list[TrialSpec] = []
    for variant in variants:
        for iteration in range(iterations):
            trial_id = len(specs)
            specs.append(
                TrialSpec(
                    trial_id=trial_id,
                    prompt_id=variant.id,
                    prompt_text=variant.text,
                    iteration=iteration,
                    env_context=EnvironmentContext(
                        trial_id=trial_id,
                        prompt_id=variant.id,
                        iteration=iteration,
                        total_iterations=iterations,
                        eval_name=eval_name,
                    ),
                )
            )
    return specs
