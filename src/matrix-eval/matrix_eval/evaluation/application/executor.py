"""TrialExecutor — runs the full lifecycle of one trial and always returns a result."""

import time
from collections.abc import Sequence

from matrix_eval.agent.domain.factory import AgentFactory
from matrix_eval.agent.domain.usage import UsageMetrics
from matrix_eval.config.domain.config import EvalConfig
from matrix_eval.config.infrastructure.errors import ConfigurationError
from matrix_eval.core.errors import MatrixEvalError
from matrix_eval.environment.domain.observer import EnvironmentObserver
from matrix_eval.environment.domain.provider import EnvironmentProvider
from matrix_eval.environment.infrastructure.providers import validate_environment
from matrix_eval.evaluation.domain.result import TrialResult
from matrix_eval.matrix.domain.trial import TrialSpec
from matrix_eval.scoring.domain.context import ScorerContext
from matrix_eval.scoring.domain.score import ScoreResult
from matrix_eval.scoring.domain.scorer import Scorer
from matrix_eval.scoring.infrastructure.adapter import ScorerAdapter
from matrix_eval.scoring.infrastructure.command_runner import SubprocessCommandRunner
from matrix_eval.workspace.domain.manager import WorkspaceManager
from matrix_eval.workspace.domain.workspace import Workspace


class TrialExecutor:
    """Composes workspace, environment, agent and scorers for one TrialSpec.

    Lifecycle: provide env → provision → materialize env → (install) → agent →
    change-set → scorers → dispose. Every trial-scoped failure is recorded on
    the returned TrialResult instead of being raised, so concurrently running
    trials are never affected. The workspace is disposed on every path once
    it exists.
    """

    def __init__(
        self,
        config: EvalConfig,
        workspace_manager: WorkspaceManager,
        agent_factory: AgentFactory,
        scorers: Sequence[Scorer],
        scorer_adapter: ScorerAdapter,
        environment_provider: EnvironmentProvider,
        environment_observer: EnvironmentObserver,
    ) -> None:
        names = [scorer.name for scorer in scorers]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError(f"duplicate scorer names: {', '.join(duplicates)}")

        self._config = config
        self._workspace_manager = workspace_manager
        self._agent_factory = agent_factory
        self._scorers = list(scorers)
        self._scorer_adapter = scorer_adapter
        self._environment_provider = environment_provider
        self._environment_observer = environment_observer

    async def execute(self, spec: TrialSpec) -> TrialResult:
        started = time.monotonic()
        environment: dict[str, str] = {}
        workspace: Workspace | None = None
        scores: dict[str, ScoreResult] = {}
        change_set = ""
        transcript = ""
        usage: UsageMetrics | None = None
        error: str | None = None
        retained_path = None

        try:
            try:
                raw_environment = await self._environment_provider.provide(
                    spec.env_context
                )
                environment = validate_environment(
                    raw_environment,
                    trial_id=spec.trial_id,
                    observer=self._environment_observer,
                )

                workspace = await self._workspace_manager.provision(
                    trial_id=spec.trial_id, source_dir=self._config.project_dir
                )
                await self._workspace_manager.materialize_env(workspace, environment)
                if self._config.workspace.install_dependencies:
                    await self._workspace_manager.install_dependencies(
                        workspace,
                        environment=environment,
                        timeout_seconds=self._config.workspace.install_timeout_seconds,
                    )

                agent = self._agent_factory.create(
                    trial_id=spec.trial_id,
                    prompt_id=spec.prompt_id,
                    environment=environment,
                )
                agent_result = await agent.run(
                    prompt=spec.prompt_text,
                    working_dir=workspace.path,
                    timeout_seconds=self._config.agent.timeout_seconds,
                )
                transcript = agent_result.transcript
                usage = agent_result.usage

                change_set = await self._workspace_manager.change_set(workspace)
                scores = await self._score(
                    spec=spec,
                    workspace=workspace,
                    change_set=change_set,
                    transcript=transcript,
                    environment=environment,
                )
            except MatrixEvalError as exc:
                error = str(exc)
            except Exception as exc:
                # Collaborators supplied by callers may raise anything; it
                # still belongs to this trial alone.
                error = f"Unexpected {type(exc).__name__}: {exc}"
        finally:
            if workspace is not None:
                trial_passed = error is None and all(
                    s.score == 1.0 for s in scores.values()
                )
                try:
                    retained_path = await self._workspace_manager.dispose(
                        workspace,
                        policy=self._config.workspace.cleanup,
                        success=trial_passed,
                    )
                except Exception as exc:
                    dispose_error = f"Failed to dispose workspace: {exc}"
                    error = f"{error}; {dispose_error}" if error else dispose_error

        return TrialResult.build(
            trial_id=spec.trial_id,
            prompt_id=spec.prompt_id,
            iteration=spec.iteration,
            duration_ms=int((time.monotonic() - started) * 1000),
            scores=scores,
            change_set=change_set,
            raw_transcript=transcript,
            usage=usage,
            retained_workspace_path=retained_path,
            environment_values=environment,
            error=error,
        )

    async def _score(
        self,
        spec: TrialSpec,
        workspace: Workspace,
        change_set: str,
        transcript: str,
        environment: dict[str, str],
    ) -> dict[str, ScoreResult]:
        context = ScorerContext(
            workspace_dir=workspace.path,
            change_set=change_set,
            raw_transcript=transcript,
            prompt_id=spec.prompt_id,
            environment=dict(environment),
            run_command=SubprocessCommandRunner(
                working_dir=workspace.path, environment=environment
            ),
        )
        scores: dict[str, ScoreResult] = {}
        for scorer in self._scorers:
            scores[scorer.name] = await self._scorer_adapter.evaluate(
                scorer, context, trial_id=spec.trial_id
            )
        return scores
