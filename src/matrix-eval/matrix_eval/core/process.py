"""Async subprocess execution with a per-call timeout and explicit environment."""

import asyncio
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from matrix_eval.core.errors import TrialTimeoutError


@dataclass(frozen=True)
class ProcessOutcome:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_process(
    argv: Sequence[str],
    cwd: Path,
    timeout_seconds: float,
    environment: Mapping[str, str] | None = None,
    operation: str | None = None,
) -> ProcessOutcome:
    """Run argv in cwd and capture its output.

    ``environment`` is layered over a copy of the current process environment
    for this child only; the parent's environment is never modified. On
    timeout the child is killed and TrialTimeoutError is raised.

    Raises:
        FileNotFoundError: if the executable does not exist.
        TrialTimeoutError: if the process does not finish within timeout_seconds.
    """
    env = {**os.environ, **environment} if environment else None
    proc = await asyncio.create_subprocess_exec(
        *argv,
        cwd=cwd,
        env=env,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        async with asyncio.timeout(timeout_seconds):
            stdout, stderr = await proc.communicate()
    except TimeoutError as exc:
        if proc.returncode is None:
            proc.kill()
        await proc.wait()
        raise TrialTimeoutError(
            operation=operation or " ".join(argv), timeout_seconds=timeout_seconds
        ) from exc

    return ProcessOutcome(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
