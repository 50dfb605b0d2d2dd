"""Prompt variant configuration model."""

from pydantic import BaseModel, Field


class PromptVariant(BaseModel, frozen=True):
    """A named prompt text. One row of the evaluation matrix."""

    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
