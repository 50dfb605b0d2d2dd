"""Declarative scorer configuration models, discriminated on ``type``."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class CommandScorerConfig(BaseModel, frozen=True):
    """Scores 1.0 when a command exits 0 inside the trial workspace."""

    type: Literal["command"] = "command"
    name: str = Field(min_length=1)
    command: str = Field(min_length=1)
    args: list[str] = Field(default_factory=list)
    timeout_seconds: float = Field(default=120.0, gt=0)
    success_message: str | None = None
    failure_message: str | None = None


class LlmJudgeScorerConfig(BaseModel, frozen=True):
    """Asks an LLM to grade the change-set against a rubric."""

    type: Literal["llm_judge"] = "llm_judge"
    name: str = Field(min_length=1)
    model: str = Field(min_length=1)
    rubric: str = Field(min_length=1)
    temperature: float = Field(default=0.0, ge=0.0)
    max_change_set_chars: int = Field(default=60_000, ge=1)


class BuiltinScorerConfig(BaseModel, frozen=True):
    """Selects one of the packaged npm script scorers: build, test or lint."""

    type: Literal["builtin"] = "builtin"
    scorer: Literal["build", "test", "lint"]


ScorerConfig = Annotated[
    CommandScorerConfig | LlmJudgeScorerConfig | BuiltinScorerConfig,
    Field(discriminator="type"),
]
