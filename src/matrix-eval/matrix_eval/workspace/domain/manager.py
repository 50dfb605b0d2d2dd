"""WorkspaceManager Protocol — lifecycle of a trial's isolated project copy."""

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from matrix_eval.config.domain.workspace import CleanupPolicy
from matrix_eval.workspace.domain.workspace import Workspace


class WorkspaceManager(Protocol):
    """Structural interface for provisioning, diffing, and disposing workspaces.

    Every method is trial-scoped and safe to call concurrently for different
    workspaces.
    """

    async def provision(self, trial_id: int, source_dir: Path) -> Workspace: ...

    async def materialize_env(
        self, workspace: Workspace, values: Mapping[str, str]
    ) -> None: ...

    async def install_dependencies(
        self,
        workspace: Workspace,
        environment: Mapping[str, str],
        timeout_seconds: float,
    ) -> None: ...

    async def change_set(self, workspace: Workspace) -> str: ...

    async def dispose(
        self, workspace: Workspace, policy: CleanupPolicy, success: bool
    ) -> Path | None: ...
