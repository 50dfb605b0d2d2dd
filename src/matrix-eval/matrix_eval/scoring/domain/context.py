"""ScorerContext — everything a scorer may look at for one trial."""

from dataclasses import dataclass, field
from pathlib import Path

from matrix_eval.scoring.domain.command import CommandRunner


@dataclass(frozen=True)
class ScorerContext:
    """Read-only inputs handed to every scorer of a trial.

    A stdlib frozen dataclass rather than a Pydantic model because it carries
    a callable (``run_command``) bound to the trial's workspace.
    """

    workspace_dir: Path
    change_set: str
    raw_transcript: str
    prompt_id: str
    run_command: CommandRunner
    environment: dict[str, str] = field(default_factory=dict)
