"""Execution configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

type ExecutionMode = Literal["sequential", "parallel", "parallel-limit"]


class ExecutionConfig(BaseModel, frozen=True):
    """Selects the scheduling strategy.

    ``concurrency`` is only read in ``parallel-limit`` mode, where it is required.
    Its absence is reported by the scheduler as a ConfigurationError rather than
    by model validation, so that programmatic callers see the same error type
    as YAML users.
    """

    mode: ExecutionMode = "sequential"
    concurrency: int | None = Field(default=None, ge=1)
