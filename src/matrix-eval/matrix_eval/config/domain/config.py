"""Top-level EvalConfig aggregate — the root configuration object."""

from pathlib import Path

from pydantic import BaseModel, Field

from matrix_eval.config.domain.agent import AgentConfig
from matrix_eval.config.domain.execution import ExecutionConfig
from matrix_eval.config.domain.prompt import PromptVariant
from matrix_eval.config.domain.scorer import ScorerConfig
from matrix_eval.config.domain.workspace import WorkspaceConfig

type EnvVarName = str


class EvalConfig(BaseModel, frozen=True):
    """Root configuration aggregate for a matrix-eval run.

    ``prompts`` may be empty at the model level; the matrix generator rejects
    an empty variant list with a ConfigurationError before any trial starts.
    """

    name: str = Field(min_length=1)
    project_dir: Path
    prompts: list[PromptVariant]
    iterations: int = Field(default=1, ge=1)
    execution: ExecutionConfig = ExecutionConfig()
    agent: AgentConfig = AgentConfig()
    workspace: WorkspaceConfig = WorkspaceConfig()
    environment: dict[EnvVarName, str] = Field(default_factory=dict)
    scorers: list[ScorerConfig] = Field(default_factory=list)
