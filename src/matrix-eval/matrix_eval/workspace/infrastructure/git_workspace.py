"""GitWorkspaceManager — copies the project per trial and diffs it against a git baseline."""

import asyncio
import shutil
import tempfile
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from matrix_eval.config.domain.workspace import DEFAULT_EXCLUDES, CleanupPolicy
from matrix_eval.core.process import ProcessOutcome, run_process
from matrix_eval.workspace.domain.observer import WorkspaceObserver
from matrix_eval.workspace.domain.workspace import Workspace
from matrix_eval.workspace.infrastructure.errors import WorkspaceError
from matrix_eval.workspace.infrastructure.package_manager import (
    detect_package_manager,
    install_command,
)

_GIT_TIMEOUT_SECONDS = 120.0
_ENV_FILE_EXCLUDE = ":(top,exclude).env"

# Passed on every invocation so that commits succeed without a global git
# identity and never run hooks or signing from the copied repository.
_GIT_FLAGS: tuple[str, ...] = (
    "-c",
    "user.name=matrix-eval",
    "-c",
    "user.email=matrix-eval@localhost",
    "-c",
    "commit.gpgsign=false",
    "-c",
    "core.autocrlf=false",
)


class GitWorkspaceManager:
    """Provisions one private project copy per trial.

    The source directory is only ever read (``shutil.copytree``); every git
    command runs inside the copy. A ``.git`` *file* (worktree or submodule
    pointer) is replaced by a fresh repository so that no command can reach
    the source repository's object store or index.
    """

    def __init__(
        self,
        observer: WorkspaceObserver,
        exclude: Sequence[str] = DEFAULT_EXCLUDES,
        base_dir: Path | None = None,
        install_argv: Sequence[str] | None = None,
    ) -> None:
        self._observer = observer
        self._exclude = tuple(exclude)
        self._base_dir = base_dir
        self._install_argv = list(install_argv) if install_argv else None

    async def provision(self, trial_id: int, source_dir: Path) -> Workspace:
        """Copy source_dir into a new uniquely named temp directory and baseline it.

        Raises:
            WorkspaceError: if the source is missing, the copy fails, or the
                git baseline cannot be established. Any partial copy is removed.
        """
        if not source_dir.is_dir():
            raise WorkspaceError(f"source directory does not exist: {source_dir}")

        try:
            path = Path(
                tempfile.mkdtemp(
                    prefix=f"matrix-eval-{trial_id}-",
                    dir=str(self._base_dir) if self._base_dir else None,
                )
            )
        except OSError as exc:
            raise WorkspaceError(f"cannot create temp directory: {exc}") from exc

        try:
            try:
                await asyncio.to_thread(
                    shutil.copytree,
                    source_dir,
                    path,
                    symlinks=True,
                    ignore=shutil.ignore_patterns(*self._exclude),
                    dirs_exist_ok=True,
                )
            except OSError as exc:
                raise WorkspaceError(f"cannot copy {source_dir}: {exc}") from exc
            initialized_git = await self._ensure_baseline(path=path)
        except Exception:
            await asyncio.to_thread(shutil.rmtree, path, ignore_errors=True)
            raise

        self._observer.workspace_provisioned(
            trial_id=trial_id, path=str(path), initialized_git=initialized_git
        )
        return Workspace(trial_id=trial_id, path=path, source_dir=source_dir)

    async def materialize_env(
        self, workspace: Workspace, values: Mapping[str, str]
    ) -> None:
        """Write values to the workspace's .env file. Nothing is written when empty.

        The file is listed in .git/info/exclude so that it never shows up in
        the change-set handed to scorers.
        """
        if not values:
            return
        content = "\n".join(f"{key}={value}" for key, value in values.items()) + "\n"
        try:
            await asyncio.to_thread(_write_env_file, workspace.path, content)
        except OSError as exc:
            raise WorkspaceError(f"cannot write .env: {exc}") from exc

    async def install_dependencies(
        self,
        workspace: Workspace,
        environment: Mapping[str, str],
        timeout_seconds: float,
    ) -> None:
        """Install project dependencies inside the workspace.

        Uses the configured install command when given; otherwise detects the
        package manager from lock files and only runs when package.json exists.

        Raises:
            WorkspaceError: if the installer is missing or exits non-zero.
            TrialTimeoutError: if the install exceeds timeout_seconds.
        """
        if self._install_argv is not None:
            argv = self._install_argv
        elif (workspace.path / "package.json").exists():
            argv = install_command(detect_package_manager(workspace.path))
        else:
            return

        started = time.monotonic()
        try:
            outcome = await run_process(
                argv,
                cwd=workspace.path,
                timeout_seconds=timeout_seconds,
                environment=environment,
                operation="dependency install",
            )
        except FileNotFoundError as exc:
            raise WorkspaceError(f"installer not found: {argv[0]}") from exc
        if not outcome.ok:
            raise WorkspaceError(
                f"{' '.join(argv)} exited with {outcome.returncode}: "
                f"{_tail(outcome.stderr or outcome.stdout)}"
            )

        self._observer.workspace_dependencies_installed(
            trial_id=workspace.trial_id,
            package_manager=argv[0],
            duration_ms=int((time.monotonic() - started) * 1000),
        )

    async def change_set(self, workspace: Workspace) -> str:
        """Return the diff of the workspace against its baseline commit.

        Untracked files are marked intent-to-add first so that newly created
        files appear in the diff. The top-level .env is always left out, even
        when the project tracks one.
        """
        untracked = await self._git(
            workspace.path, "ls-files", "--others", "--exclude-standard", "-z"
        )
        new_files = [name for name in untracked.stdout.split("\0") if name]
        if new_files:
            await self._git(workspace.path, "add", "--intent-to-add", "--", *new_files)
        diff = await self._git(
            workspace.path,
            "diff",
            "--no-color",
            "--no-ext-diff",
            "HEAD",
            "--",
            ".",
            _ENV_FILE_EXCLUDE,
        )
        return diff.stdout

    async def dispose(
        self, workspace: Workspace, policy: CleanupPolicy, success: bool
    ) -> Path | None:
        """Delete the workspace unless the policy retains it; return the retained path.

        Deletion failures are reported to the observer and never raised.
        """
        retain = policy == "never" or (policy == "on-failure" and not success)
        if retain:
            self._observer.workspace_retained(
                trial_id=workspace.trial_id, path=str(workspace.path)
            )
            return workspace.path

        try:
            await asyncio.to_thread(shutil.rmtree, workspace.path)
        except OSError as exc:
            self._observer.workspace_dispose_failed(
                trial_id=workspace.trial_id, path=str(workspace.path), reason=str(exc)
            )
        else:
            self._observer.workspace_disposed(
                trial_id=workspace.trial_id, path=str(workspace.path)
            )
        return None

    async def _ensure_baseline(self, path: Path) -> bool:
        """Commit the copy's current state as the baseline.

        An existing history is kept and the baseline commit goes on top of it,
        so files untracked in the source and tracked files removed by the
        exclude patterns are part of the baseline rather than the change-set.
        Returns True if a fresh repository was initialized.
        """
        git_entry = path / ".git"
        if git_entry.is_file():
            await asyncio.to_thread(git_entry.unlink)

        initialized = not git_entry.is_dir()
        if initialized:
            await self._git(path, "init", "--quiet")

        await self._git(path, "add", "-A")
        await self._git(
            path,
            "commit",
            "--quiet",
            "--no-verify",
            "--allow-empty",
            "-m",
            "matrix-eval baseline",
        )
        return initialized

    async def _git(self, cwd: Path, *args: str) -> ProcessOutcome:
        try:
            outcome = await run_process(
                ["git", *_GIT_FLAGS, *args],
                cwd=cwd,
                timeout_seconds=_GIT_TIMEOUT_SECONDS,
                operation=f"git {args[0]}",
            )
        except FileNotFoundError as exc:
            raise WorkspaceError("git executable not found") from exc
        if not outcome.ok:
            raise WorkspaceError(
                f"git {' '.join(args)} failed: {_tail(outcome.stderr)}"
            )
        return outcome


def _write_env_file(path: Path, content: str) -> None:
    (path / ".env").write_text(content, encoding="utf-8")
    exclude_file = path / ".git" / "info" / "exclude"
    exclude_file.parent.mkdir(parents=True, exist_ok=True)
    existing = exclude_file.read_text(encoding="utf-8") if exclude_file.exists() else ""
    if "/.env" not in existing.splitlines():
        with exclude_file.open("a", encoding="utf-8") as fh:
            if existing and not existing.endswith("\n"):
                fh.write("\n")
            fh.write("/.env\n")


def _tail(text: str, limit: int = 500) -> str:
    text = text.strip()
    return text if len(text) <= limit else "…" + text[-limit:]
