"""Workspace lifecycle configuration model."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

type CleanupPolicy = Literal["always", "on-failure", "never"]

# Reproducible artifacts that are never copied into a trial workspace.
DEFAULT_EXCLUDES: tuple[str, ...] = (
    "node_modules",
    ".venv",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".next",
)


class WorkspaceConfig(BaseModel, frozen=True):
    cleanup: CleanupPolicy = "always"
    exclude: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDES))
    base_dir: Path | None = None
    install_dependencies: bool = False
    install_command: list[str] | None = Field(default=None, min_length=1)
    install_timeout_seconds: float = Field(default=600.0, gt=0)
