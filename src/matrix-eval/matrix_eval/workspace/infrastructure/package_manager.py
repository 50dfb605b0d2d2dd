"""Package manager detection from lock files."""

from pathlib import Path
from typing import Literal

type PackageManager = Literal["npm", "yarn", "pnpm", "bun"]

# Checked in order; the first lock file present wins.
_LOCK_FILES: tuple[tuple[str, PackageManager], ...] = (
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)


def detect_package_manager(project_dir: Path) -> PackageManager:
    """Return the package manager implied by the project's lock file, or npm."""
    for lock_file, package_manager in _LOCK_FILES:
        if (project_dir / lock_file).exists():
            return package_manager
    return "npm"


def install_command(package_manager: PackageManager) -> list[str]:
    """Return argv for installing dependencies with the given package manager."""
    return [package_manager, "install"]
