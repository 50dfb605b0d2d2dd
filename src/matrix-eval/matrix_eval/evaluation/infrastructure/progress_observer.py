"""ProgressEvaluationObserver — renders per-prompt Rich progress bars to stderr."""

from __future__ import annotations

import sys

from rich.console import Console, Group
from rich.live import Live
from rich.progress import (
    Progress,
    ProgressColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.text import Text

_OVERALL = "Overall"

# Rich markup colours for prompt variant labels.
_PROMPT_COLORS: list[str] = [
    "cyan",
    "green",
    "yellow",
    "magenta",
    "blue",
]


class _CountsColumn(ProgressColumn):
    """Renders passed/failed+inflight/total with colours matching the bar segments."""

    def render(self, task: Task) -> Text:
        passed = int(task.fields.get("passed", 0))
        failed = int(task.fields.get("failed", 0))
        inflight = int(task.fields.get("inflight", 0))
        total = int(task.total or 0)
        return Text.assemble(
            (str(passed), "bright_green"),
            ("/", "dim white"),
            (str(failed), "red"),
            ("+", "dim white"),
            (str(inflight), "grey50"),
            ("/", "dim white"),
            (str(total), "default"),
        )


class _ConditionalEtaColumn(ProgressColumn):
    """Shows ETA for prompt rows only; blank for the Overall row.

    Under parallel execution the Overall rate is the sum of the prompt rates,
    so its naive ETA would undershoot the slowest prompt.
    """

    def __init__(self) -> None:
        super().__init__()
        self._remaining = TimeRemainingColumn()

    def render(self, task: Task) -> Text:
        if task.fields.get("is_overall", False):
            return Text("")
        result = self._remaining.render(task)
        if isinstance(result, Text):
            return result
        return Text(str(result))


class _SegmentedBarColumn(ProgressColumn):
    """Renders four segments: passed, failed, in-flight, remaining."""

    def __init__(self, bar_width: int = 40) -> None:
        super().__init__()
        self.bar_width = bar_width

    def render(self, task: Task) -> Text:
        bar_width = self.bar_width or 40
        total = task.total or 0
        if total > 0:
            passed = int(task.fields.get("passed", 0))
            failed = int(task.fields.get("failed", 0))
            inflight = int(task.fields.get("inflight", 0))
            passed_cells = int(passed / total * bar_width)
            failed_cells = min(int(failed / total * bar_width), bar_width - passed_cells)
            # In-flight fills from where finished trials end; capped to the bar.
            inflight_cells = min(
                int(inflight / total * bar_width),
                bar_width - passed_cells - failed_cells,
            )
        else:
            passed_cells = 0
            failed_cells = 0
            inflight_cells = 0
        remaining_cells = bar_width - passed_cells - failed_cells - inflight_cells

        result = Text()
        result.append("█" * passed_cells, style="bright_green")
        result.append("█" * failed_cells, style="red")
        result.append("▒" * inflight_cells, style="grey50")
        result.append("░" * remaining_cells, style="dim white")
        return result


def _make_progress(console: Console) -> Progress:
    """Create a Progress instance with the standard column layout."""
    return Progress(
        TextColumn("{task.description}"),
        _SegmentedBarColumn(bar_width=40),
        _CountsColumn(),
        TimeElapsedColumn(),
        TextColumn("{task.fields[eta_label]}"),
        _ConditionalEtaColumn(),
        TextColumn("{task.fields[rate]}"),
        console=console,
        refresh_per_second=10,
        transient=False,
    )


class ProgressEvaluationObserver:
    """Renders one progress row per prompt variant plus an Overall row on stderr.

    Only evaluation_started, evaluation_progress, trial_started,
    trial_completed, trial_failed and evaluation_completed produce output.

    Pass ``disabled=True`` to suppress all terminal output (useful in tests);
    the counters are still maintained.

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self, disabled: bool = False) -> None:
        self._disabled = disabled
        self._passed: dict[str, int] = {}
        self._failed: dict[str, int] = {}
        self._inflight: dict[str, int] = {}
        self._total: dict[str, int] = {}
        self._task_ids: dict[str, TaskID] = {}
        self._overall_progress: Progress | None = None
        self._prompt_progress: Progress | None = None
        self._live: Live | None = None

    def counts(self, key: str) -> tuple[int, int, int]:
        """Return (passed, failed, inflight) for a prompt id or "Overall"."""
        return (
            self._passed.get(key, 0),
            self._failed.get(key, 0),
            self._inflight.get(key, 0),
        )

    def _make_desc(self, name: str, index: int, pad_width: int) -> str:
        if name == _OVERALL:
            return f"[bold]{_OVERALL:<{pad_width}}[/bold]"
        if sys.stderr.isatty():
            color = _PROMPT_COLORS[index % len(_PROMPT_COLORS)]
            return f"[{color}]{name:<{pad_width}}[/{color}]"
        return f"{name:<{pad_width}}"

    def _progress_for(self, key: str) -> Progress | None:
        if key == _OVERALL:
            return self._overall_progress
        return self._prompt_progress

    def _rate_str(self, key: str) -> str:
        """Compute a rate string like '2.5s/trial' or '--s/trial'."""
        progress = self._progress_for(key=key)
        task_id = self._task_ids.get(key)
        if progress is None or task_id is None:
            return "--s/trial"
        task = progress.tasks[task_id]
        elapsed = task.elapsed
        if elapsed is not None and elapsed > 0 and task.completed > 0:
            return f"{elapsed / task.completed:.1f}s/trial"
        return "--s/trial"

    def _update_task(self, key: str) -> None:
        """Push the current counters into the Rich task."""
        progress = self._progress_for(key=key)
        if self._disabled or progress is None or key not in self._task_ids:
            return
        passed, failed, inflight = self.counts(key)
        progress.update(
            self._task_ids[key],
            completed=passed + failed,
            passed=passed,
            failed=failed,
            inflight=inflight,
            rate=self._rate_str(key=key),
        )

    def _bump(self, counter: dict[str, int], prompt_id: str, delta: int) -> None:
        for key in (prompt_id, _OVERALL):
            if key in counter:
                counter[key] = max(0, counter[key] + delta)

    def _reset(self) -> None:
        self._passed = {}
        self._failed = {}
        self._inflight = {}
        self._total = {}
        self._task_ids = {}
        self._overall_progress = None
        self._prompt_progress = None
        self._live = None

    def evaluation_started(
        self,
        run_id: str,
        name: str,
        prompt_ids: list[str],
        iterations: int,
        total_trials: int,
        mode: str,
        concurrency: int | None,
    ) -> None:
        self._reset()

        for key in [*prompt_ids, _OVERALL]:
            self._total[key] = total_trials if key == _OVERALL else iterations
            self._passed[key] = 0
            self._failed[key] = 0
            self._inflight[key] = 0

        if self._disabled:
            return

        pad_width = max(len(key) for key in [*prompt_ids, _OVERALL])
        console = Console(stderr=True)

        legend = Text.assemble(
            "  Legend:  ",
            ("█", "bright_green"),
            " passed  ",
            ("█", "red"),
            " failed  ",
            ("▒", "grey50"),
            " in-flight  ",
            ("░", "dim white"),
            " remaining",
        )

        self._overall_progress = _make_progress(console=console)
        self._prompt_progress = _make_progress(console=console)

        self._task_ids[_OVERALL] = self._overall_progress.add_task(
            description=self._make_desc(name=_OVERALL, index=0, pad_width=pad_width),
            total=float(total_trials),
            passed=0,
            failed=0,
            inflight=0,
            rate="--s/trial",
            is_overall=True,
            eta_label="",
        )
        for i, prompt_id in enumerate(prompt_ids):
            self._task_ids[prompt_id] = self._prompt_progress.add_task(
                description=self._make_desc(name=prompt_id, index=i, pad_width=pad_width),
                total=float(iterations),
                passed=0,
                failed=0,
                inflight=0,
                rate="--s/trial",
                is_overall=False,
                eta_label="eta",
            )

        renderable = Group(
            Text(f"  {name} ({mode})", style="bold"),
            self._overall_progress,
            Text(""),
            self._prompt_progress,
            Text(""),
            legend,
        )
        self._live = Live(renderable, console=console, refresh_per_second=10)
        self._live.start()

    def evaluation_completed(
        self,
        run_id: str,
        total_trials: int,
        passed: int,
        elapsed_seconds: float,
    ) -> None:
        if self._live is not None:
            self._live.stop()
        self._reset()

    def evaluation_progress(
        self,
        run_id: str,
        prompt_id: str,
        completed: int,
        total: int,
    ) -> None:
        self._update_task(key=prompt_id)
        self._update_task(key=_OVERALL)

    def trial_started(
        self, run_id: str, trial_id: int, prompt_id: str, iteration: int
    ) -> None:
        self._bump(self._inflight, prompt_id, 1)
        self._update_task(key=prompt_id)
        self._update_task(key=_OVERALL)

    def trial_completed(
        self,
        run_id: str,
        trial_id: int,
        prompt_id: str,
        iteration: int,
        success: bool,
        duration_ms: int,
    ) -> None:
        self._bump(self._inflight, prompt_id, -1)
        self._bump(self._passed if success else self._failed, prompt_id, 1)

    def trial_failed(
        self,
        run_id: str,
        trial_id: int,
        prompt_id: str,
        iteration: int,
        reason: str,
    ) -> None:
        self._bump(self._inflight, prompt_id, -1)
        self._bump(self._failed, prompt_id, 1)
