"""Workspace value object — a trial-exclusive copy of the source project."""

from pathlib import Path

from pydantic import BaseModel, Field


class Workspace(BaseModel, frozen=True):
    """An ephemeral directory owned by exactly one trial.

    ``source_dir`` is recorded for diagnostics only; nothing writes to it.
    """

    trial_id: int = Field(ge=0)
    path: Path
    source_dir: Path
