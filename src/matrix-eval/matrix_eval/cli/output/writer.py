"""Report writers — serialise an EvalReport to JSON, markdown and per-trial logs."""

import json
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from matrix_eval.evaluation.domain.report import OVERALL_KEY, EvalReport
from matrix_eval.evaluation.domain.result import TrialResult

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9_-]", re.IGNORECASE)


@dataclass(frozen=True)
class WrittenReport:
    json_path: Path
    markdown_path: Path
    trial_log_paths: list[Path]


def sanitize_name(name: str) -> str:
    """Replace every character outside [a-z0-9_-] with '-' and lowercase."""
    return _UNSAFE_FILENAME_CHARS.sub("-", name).lower()


def report_stem(name: str, timestamp: datetime) -> str:
    """Build the output file stem: {sanitized-name}-{YYYY-MM-DD-HHMMSS} in local time."""
    return f"{sanitize_name(name)}-{timestamp.astimezone().strftime('%Y-%m-%d-%H%M%S')}"


def write_report(report: EvalReport, output_dir: Path) -> WrittenReport:
    """Write the JSON report, the markdown summary and one log per trial.

    Trial logs go to ``{stem}-trials/trial-{id}.log`` next to the report files.
    When another run already wrote the same stem, a numeric suffix is added
    (``{stem}-2``, ``{stem}-3``, ...) so earlier reports are never overwritten.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    stem, trials_dir = _reserve_stem(
        output_dir, report_stem(name=report.name, timestamp=report.timestamp)
    )

    json_path = output_dir / f"{stem}.json"
    json_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")

    markdown_path = output_dir / f"{stem}.md"
    markdown_path.write_text(format_report_markdown(report), encoding="utf-8")

    trial_log_paths: list[Path] = []
    for trial in report.trials:
        log_path = trials_dir / f"trial-{trial.trial_id}.log"
        log_path.write_text(format_trial_log(trial), encoding="utf-8")
        trial_log_paths.append(log_path)

    return WrittenReport(
        json_path=json_path,
        markdown_path=markdown_path,
        trial_log_paths=trial_log_paths,
    )


def _reserve_stem(output_dir: Path, base: str) -> tuple[str, Path]:
    """Claim the first free stem by creating its trials directory."""
    suffix = 1
    while True:
        stem = base if suffix == 1 else f"{base}-{suffix}"
        suffix += 1
        if (output_dir / f"{stem}.json").exists() or (output_dir / f"{stem}.md").exists():
            continue
        trials_dir = output_dir / f"{stem}-trials"
        try:
            trials_dir.mkdir()
        except FileExistsError:
            continue
        return stem, trials_dir


def format_report_markdown(report: EvalReport) -> str:
    lines: list[str] = [f"# Evaluation Results: {report.name}", ""]

    lines += ["## Summary", ""]
    lines.append(f"- **Date**: {report.timestamp.astimezone().isoformat(timespec='seconds')}")
    lines.append(f"- **Duration**: {report.total_duration_ms / 1000:.2f}s")
    lines.append(f"- **Trials**: {len(report.trials)}")
    lines.append(
        f"- **Overall Status**: {'✓ PASSED' if report.overall_success else '✗ FAILED'}"
    )
    if OVERALL_KEY in report.aggregates:
        lines.append(f"- **Pass Rate**: {report.pass_rate * 100:.1f}%")
    if report.error:
        lines.append(f"- **Error**: {report.error}")
    lines.append("")

    scorer_names = [name for name in report.aggregates if name != OVERALL_KEY]
    if scorer_names:
        lines += [
            "## Aggregate Scores",
            "",
            "| Scorer | Mean | Min | Max | Std Dev | Pass Rate |",
            "|--------|------|-----|-----|---------|-----------|",
        ]
        for name in scorer_names:
            agg = report.aggregates[name]
            lines.append(
                f"| {name} | {agg.mean:.3f} | {agg.min:.3f} | {agg.max:.3f} "
                f"| {agg.std_dev:.3f} | {agg.pass_rate * 100:.1f}% |"
            )
        lines.append("")

    if report.trials:
        lines += _trial_section(report)

    if report.total_usage is not None:
        usage = report.total_usage
        lines += [
            "## Token Usage",
            "",
            "| Metric | Value |",
            "|--------|-------|",
            f"| Input Tokens | {usage.input_tokens:,} |",
            f"| Output Tokens | {usage.output_tokens:,} |",
        ]
        if usage.cache_creation_input_tokens:
            lines.append(
                f"| Cache Creation Input Tokens | {usage.cache_creation_input_tokens:,} |"
            )
        if usage.cache_read_input_tokens:
            lines.append(
                f"| Cache Read Input Tokens | {usage.cache_read_input_tokens:,} |"
            )
        lines.append(f"| Cost (USD) | {usage.cost_usd:.4f} |")
        lines.append(f"| **Total** | **{usage.total_tokens:,}** |")
        lines.append("")

    return "\n".join(lines)


def _trial_section(report: EvalReport) -> list[str]:
    scorer_names = sorted({name for t in report.trials for name in t.scores})
    header = "| Trial | Prompt | Iteration | Status | Duration (s) |"
    separator = "|-------|--------|-----------|--------|--------------|"
    for name in scorer_names:
        header += f" {name} |"
        separator += "------|"

    lines = ["## Trial Results", "", header, separator]
    for trial in report.trials:
        row = (
            f"| {trial.trial_id} | {trial.prompt_id} | {trial.iteration} "
            f"| {'✓ Pass' if trial.success else '✗ Fail'} "
            f"| {trial.duration_ms / 1000:.2f} |"
        )
        for name in scorer_names:
            score = trial.scores.get(name)
            row += f" {score.score:.3f} |" if score is not None else " N/A |"
        lines.append(row)
    lines.append("")

    lines += ["### Detailed Results", ""]
    for trial in report.trials:
        lines += [f"#### Trial {trial.trial_id} ({trial.prompt_id})", ""]
        if trial.error:
            lines += [f"**Error**: {trial.error}", ""]
        if trial.scores:
            lines += ["**Scorer Details**:", ""]
            for name, score in trial.scores.items():
                lines.append(f"- **{name}**: {score.score:.3f}")
                lines.append(f"  - Reason: {score.reason}")
                if score.metadata:
                    lines.append(f"  - Metadata: {json.dumps(score.metadata, default=str)}")
            lines.append("")
        if trial.retained_workspace_path is not None:
            lines += [f"**Working Directory**: `{trial.retained_workspace_path}`", ""]

    if any(t.usage is not None for t in report.trials):
        lines += [
            "### Token Usage Per Trial",
            "",
            "| Trial | Input | Output | Cache Creation | Cache Read | Total |",
            "|-------|-------|--------|----------------|------------|-------|",
        ]
        for trial in report.trials:
            if trial.usage is None:
                continue
            u = trial.usage
            lines.append(
                f"| {trial.trial_id} | {u.input_tokens:,} | {u.output_tokens:,} "
                f"| {u.cache_creation_input_tokens:,} | {u.cache_read_input_tokens:,} "
                f"| {u.total_tokens:,} |"
            )
        lines.append("")

    return lines


def format_trial_log(trial: TrialResult) -> str:
    """Render one trial's transcript and change-set as a plain-text log."""
    lines = [
        f"trial_id: {trial.trial_id}",
        f"prompt_id: {trial.prompt_id}",
        f"iteration: {trial.iteration}",
        f"success: {trial.success}",
        f"duration_ms: {trial.duration_ms}",
    ]
    if trial.error:
        lines.append(f"error: {trial.error}")
    if trial.retained_workspace_path is not None:
        lines.append(f"workspace: {trial.retained_workspace_path}")
    lines += ["", "=== transcript ===", trial.raw_transcript or "(empty)", ""]
    lines += ["=== change-set ===", trial.change_set or "(no changes)", ""]
    return "\n".join(lines)
