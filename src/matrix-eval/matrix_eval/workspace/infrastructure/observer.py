"""Structlog implementation of the WorkspaceObserver port."""

import structlog


class StructlogWorkspaceObserver:
    """Delegates workspace domain events to structlog.

    Satisfies the WorkspaceObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def workspace_provisioned(self, trial_id: int, path: str, initialized_git: bool) -> None:
        self._log.info(
            "workspace.provisioned",
            trial_id=trial_id,
            path=path,
            initialized_git=initialized_git,
        )

    def workspace_dependencies_installed(
        self, trial_id: int, package_manager: str, duration_ms: int
    ) -> None:
        self._log.info(
            "workspace.dependencies_installed",
            trial_id=trial_id,
            package_manager=package_manager,
            duration_ms=duration_ms,
        )

    def workspace_disposed(self, trial_id: int, path: str) -> None:
        self._log.debug("workspace.disposed", trial_id=trial_id, path=path)

    def workspace_retained(self, trial_id: int, path: str) -> None:
        self._log.info("workspace.retained", trial_id=trial_id, path=path)

    def workspace_dispose_failed(self, trial_id: int, path: str, reason: str) -> None:
        self._log.warning(
            "workspace.dispose_failed", trial_id=trial_id, path=path, reason=reason
        )
