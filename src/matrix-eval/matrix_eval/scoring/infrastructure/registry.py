"""Scorer registry — builds Scorer instances from declarative config."""

from collections.abc import Callable, Sequence

from matrix_eval.config.domain.scorer import (
    BuiltinScorerConfig,
    CommandScorerConfig,
    LlmJudgeScorerConfig,
    ScorerConfig,
)
from matrix_eval.scoring.domain.scorer import Scorer
from matrix_eval.scoring.infrastructure import scorers as builtin
from matrix_eval.scoring.infrastructure.llm_judge import LiteLLMJudgeScorer
from matrix_eval.scoring.infrastructure.scorers import CommandScorer

_BUILTIN_SCORERS: dict[str, Callable[[], CommandScorer]] = {
    "build": builtin.build_success,
    "test": builtin.test_success,
    "lint": builtin.lint_success,
}


def create_scorers(configs: Sequence[ScorerConfig]) -> list[Scorer]:
    """Return one Scorer per config entry, in config order."""
    scorers: list[Scorer] = []
    for config in configs:
        if isinstance(config, CommandScorerConfig):
            scorers.append(
                CommandScorer(
                    name=config.name,
                    command=config.command,
                    args=config.args,
                    timeout_seconds=config.timeout_seconds,
                    success_message=config.success_message,
                    failure_message=config.failure_message,
                )
            )
        elif isinstance(config, LlmJudgeScorerConfig):
            scorers.append(
                LiteLLMJudgeScorer(
                    name=config.name,
                    model=config.model,
                    rubric=config.rubric,
                    temperature=config.temperature,
                    max_change_set_chars=config.max_change_set_chars,
                )
            )
        elif isinstance(config, BuiltinScorerConfig):
            scorers.append(_BUILTIN_SCORERS[config.scorer]())
    return scorers
