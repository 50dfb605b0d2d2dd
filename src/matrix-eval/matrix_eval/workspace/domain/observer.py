"""Observer port for the workspace domain — defines events in domain language."""

from typing import Protocol


class WorkspaceObserver(Protocol):
    def workspace_provisioned(self, trial_id: int, path: str, initialized_git: bool) -> None: ...

    def workspace_dependencies_installed(
        self, trial_id: int, package_manager: str, duration_ms: int
    ) -> None: ...

    def workspace_disposed(self, trial_id: int, path: str) -> None: ...

    def workspace_retained(self, trial_id: int, path: str) -> None: ...

    def workspace_dispose_failed(self, trial_id: int, path: str, reason: str) -> None: ...
