"""CLI entrypoint for matrix-eval — typer app with a `run` command."""

import asyncio
import sys
from pathlib import Path

import structlog
import typer

from matrix_eval.agent.infrastructure.observer import StructlogAgentObserver
from matrix_eval.agent.infrastructure.registry import create_agent_factory
from matrix_eval.cli.output.writer import WrittenReport, write_report
from matrix_eval.config.infrastructure.observer import StructlogConfigObserver
from matrix_eval.config.infrastructure.yaml_loader import YamlConfigLoader
from matrix_eval.core.errors import MatrixEvalError
from matrix_eval.environment.infrastructure.observer import StructlogEnvironmentObserver
from matrix_eval.environment.infrastructure.providers import StaticEnvironmentProvider
from matrix_eval.evaluation.application.executor import TrialExecutor
from matrix_eval.evaluation.application.runner import EvaluationRunner
from matrix_eval.evaluation.domain.observer import EvaluationObserver
from matrix_eval.evaluation.domain.report import OVERALL_KEY, EvalReport
from matrix_eval.evaluation.infrastructure.composite_observer import (
    CompositeEvaluationObserver,
)
from matrix_eval.evaluation.infrastructure.observer import StructlogEvaluationObserver
from matrix_eval.evaluation.infrastructure.progress_observer import (
    ProgressEvaluationObserver,
)
from matrix_eval.scoring.infrastructure.adapter import ScorerAdapter
from matrix_eval.scoring.infrastructure.observer import StructlogScoringObserver
from matrix_eval.scoring.infrastructure.registry import create_scorers
from matrix_eval.workspace.infrastructure.git_workspace import GitWorkspaceManager
from matrix_eval.workspace.infrastructure.observer import StructlogWorkspaceObserver

app = typer.Typer(add_completion=False)


@app.callback()
def _main() -> None:
    """Run prompt-variant × iteration evaluation matrices against a project."""


def _configure_structlog(log_format: str) -> None:
    """Configure structlog based on the requested format."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")
        raise typer.Exit(code=1)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


# ---------------------------------------------------------------------------
# ANSI helpers
# ---------------------------------------------------------------------------
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_CYAN = "\033[36m"
_YELLOW = "\033[33m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_BLUE = "\033[34m"
_WHITE = "\033[97m"


def _rate_color(rate: float) -> str:
    if rate >= 1.0:
        return _GREEN
    if rate >= 0.5:
        return _YELLOW
    return _RED


def _rule(width: int = 72, color: str = _DIM) -> None:
    typer.echo(f"{color}{'─' * width}{_RESET}")


def _format_elapsed(elapsed_seconds: float) -> str:
    """Format elapsed seconds as '1m 23.4s' or '5.2s'."""
    minutes, seconds = divmod(elapsed_seconds, 60)
    if minutes >= 1:
        return f"{int(minutes)}m {seconds:.1f}s"
    return f"{elapsed_seconds:.1f}s"


def _print_scorer_table(report: EvalReport) -> None:
    scorer_names = [name for name in report.aggregates if name != OVERALL_KEY]
    if not scorer_names:
        return
    name_w = max(len("Scorer"), *(len(n) for n in scorer_names))

    typer.echo("")
    _rule(color=_BLUE)
    typer.echo(f"{_BLUE}{_BOLD}  Scores{_RESET}")
    typer.echo("")
    typer.echo(
        f"  {_DIM}{'Scorer':<{name_w}}  {'Mean':>6}  {'Min':>6}  {'Max':>6}"
        f"  {'±StdDev':>7}  {'Pass':>6}{_RESET}"
    )
    typer.echo(f"  {'─' * name_w}  {'─' * 6}  {'─' * 6}  {'─' * 6}  {'─' * 7}  {'─' * 6}")
    for name in scorer_names:
        agg = report.aggregates[name]
        color = _rate_color(rate=agg.pass_rate)
        typer.echo(
            f"  {_WHITE}{name:<{name_w}}{_RESET}"
            f"  {agg.mean:>6.2f}  {agg.min:>6.2f}  {agg.max:>6.2f}"
            f"  {_DIM}{agg.std_dev:>7.2f}{_RESET}"
            f"  {color}{agg.pass_rate * 100:>5.1f}%{_RESET}"
        )


def _print_prompt_table(report: EvalReport) -> None:
    prompt_ids = list(dict.fromkeys(t.prompt_id for t in report.trials))
    if len(prompt_ids) < 2:
        return
    id_w = max(len("Prompt"), *(len(p) for p in prompt_ids))

    typer.echo("")
    _rule(color=_BLUE)
    typer.echo(f"{_BLUE}{_BOLD}  Results by Prompt{_RESET}")
    typer.echo("")
    for prompt_id in prompt_ids:
        trials = report.trials_for(prompt_id)
        passed = sum(1 for t in trials if t.success)
        rate = passed / len(trials)
        filled = round(rate * 10)
        color = _rate_color(rate=rate)
        bar = f"{color}{'█' * filled}{_DIM}{'░' * (10 - filled)}{_RESET}"
        typer.echo(
            f"  {_CYAN}{prompt_id:<{id_w}}{_RESET}"
            f"  {color}{passed}/{len(trials)}{_RESET}  {bar}"
        )


def _print_failures(report: EvalReport) -> None:
    failed = [t for t in report.trials if t.error is not None]
    if not failed:
        return
    typer.echo("")
    typer.echo(f"  {_YELLOW}{_BOLD}Trial errors  ({len(failed)} total){_RESET}")
    for trial in failed[:10]:
        short = trial.error[:100] + ("…" if len(trial.error) > 100 else "")
        typer.echo(f"  {_DIM}[{trial.trial_id} {trial.prompt_id}]{_RESET} {short}")
    if len(failed) > 10:
        typer.echo(f"  {_DIM}… and {len(failed) - 10} more — see the report{_RESET}")


def _print_summary(report: EvalReport, written: WrittenReport) -> None:
    """Print a colorized summary to stdout."""
    status = (
        f"{_GREEN}{_BOLD}PASSED{_RESET}"
        if report.overall_success
        else f"{_RED}{_BOLD}FAILED{_RESET}"
    )

    typer.echo("")
    _rule(color=_CYAN)
    typer.echo(f"{_CYAN}{_BOLD}  matrix-eval  ·  Run Complete{_RESET}")
    _rule(color=_CYAN)
    typer.echo("")

    meta_rows: list[tuple[str, str]] = [
        ("Eval", report.name),
        ("Trials", str(len(report.trials))),
        ("Pass rate", f"{report.pass_rate * 100:.1f}%"),
        ("Elapsed", _format_elapsed(elapsed_seconds=report.total_duration_ms / 1000)),
        ("Report JSON", str(written.json_path)),
        ("Report Markdown", str(written.markdown_path)),
    ]
    if report.total_usage is not None:
        meta_rows.append(
            (
                "Tokens",
                f"{report.total_usage.total_tokens:,}"
                f"  (${report.total_usage.cost_usd:.4f})",
            )
        )
    label_w = max(len(label) for label, _ in meta_rows)
    for label, value in meta_rows:
        typer.echo(f"  {_DIM}{label:<{label_w}}{_RESET}  {_WHITE}{value}{_RESET}")
    typer.echo(f"  {_DIM}{'Status':<{label_w}}{_RESET}  {status}")

    _print_scorer_table(report)
    _print_prompt_table(report)
    _print_failures(report)

    typer.echo("")
    _rule(color=_CYAN)
    typer.echo("")


@app.command()
def run(
    config_path: Path = typer.Argument(..., help="Path to evaluation config YAML"),
    output_dir: Path = typer.Option(
        Path("./results"),
        "--output-dir",
        "-o",
        help="Directory for report files",
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
) -> None:
    """Run a matrix-eval evaluation from a YAML config file."""
    try:
        _configure_structlog(log_format=log_format)

        loader = YamlConfigLoader(observer=StructlogConfigObserver())
        config = loader.load(path=config_path)

        workspace_manager = GitWorkspaceManager(
            observer=StructlogWorkspaceObserver(),
            exclude=config.workspace.exclude,
            base_dir=config.workspace.base_dir,
            install_argv=config.workspace.install_command,
        )
        agent_factory = create_agent_factory(
            config=config.agent,
            observer=StructlogAgentObserver(),
        )
        executor = TrialExecutor(
            config=config,
            workspace_manager=workspace_manager,
            agent_factory=agent_factory,
            scorers=create_scorers(configs=config.scorers),
            scorer_adapter=ScorerAdapter(observer=StructlogScoringObserver()),
            environment_provider=StaticEnvironmentProvider(values=config.environment),
            environment_observer=StructlogEnvironmentObserver(),
        )

        observers: list[EvaluationObserver] = [StructlogEvaluationObserver()]
        if log_format != "json":
            observers.append(ProgressEvaluationObserver())
        evaluation_runner = EvaluationRunner(
            config=config,
            executor=executor,
            observer=CompositeEvaluationObserver(observers=observers),
        )

        report = asyncio.run(evaluation_runner.run())
        written = write_report(report=report, output_dir=output_dir)
        _print_summary(report=report, written=written)

    except typer.Exit:
        raise
    except KeyboardInterrupt:
        typer.echo("Evaluation interrupted.")
        sys.exit(1)
    except MatrixEvalError as exc:
        typer.echo(str(exc))
        sys.exit(1)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"Unexpected error: {exc}\nPlease report this bug.")
        sys.exit(1)

    if not report.overall_success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
