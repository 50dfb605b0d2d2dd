"""YAML config loader — parses, interpolates env vars, validates, and emits observer events."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from matrix_eval.config.domain.config import EvalConfig
from matrix_eval.config.domain.observer import ConfigObserver
from matrix_eval.config.domain.scorer import LlmJudgeScorerConfig
from matrix_eval.config.infrastructure.env_interpolation import (
    collect_missing_vars,
    interpolate,
)
from matrix_eval.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigurationError,
    MissingEnvVarsError,
)


class YamlConfigLoader:
    """Loads, interpolates, validates, and returns an EvalConfig from a YAML file."""

    def __init__(self, observer: ConfigObserver) -> None:
        self._observer = observer

    def load(self, path: Path) -> EvalConfig:
        """
        Load, interpolate, validate, and return an EvalConfig from a YAML file.

        A relative ``project_dir`` is resolved against the config file's directory.

        Raises:
            ConfigLoadError: if the file is missing or is not valid YAML.
            MissingEnvVarsError: if any ${ENV_VAR} references are unset (all collected first).
            ConfigurationError: if the schema is violated or prompt ids repeat.
        """
        raw = _parse_yaml(path=path)
        _check_missing_env_vars(raw=raw)
        interpolated = interpolate(raw)
        resolved = _resolve_project_dir(interpolated=interpolated, config_path=path)
        cfg = _build_config(resolved=resolved)
        _check_unique_prompt_ids(cfg=cfg)
        _emit_warnings(cfg=cfg, observer=self._observer)
        self._observer.config_loaded(
            name=cfg.name,
            num_prompts=len(cfg.prompts),
            iterations=cfg.iterations,
        )
        return cfg


def _parse_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise ConfigLoadError(path=path) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path=path, reason="invalid YAML") from exc
    if not isinstance(data, dict):
        raise ConfigLoadError(path=path, reason="top-level mapping expected")
    return data


def _check_missing_env_vars(raw: Any) -> None:
    """Raise MissingEnvVarsError if any ${ENV_VAR} references in raw are unset."""
    missing = collect_missing_vars(raw)
    if missing:
        raise MissingEnvVarsError(missing)


def _resolve_project_dir(interpolated: Any, config_path: Path) -> Any:
    project_dir = interpolated.get("project_dir")
    if not isinstance(project_dir, str):
        return interpolated
    candidate = Path(project_dir).expanduser()
    if not candidate.is_absolute():
        candidate = (config_path.parent / candidate).resolve()
    return {**interpolated, "project_dir": str(candidate)}


def _build_config(resolved: Any) -> EvalConfig:
    try:
        return EvalConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def _check_unique_prompt_ids(cfg: EvalConfig) -> None:
    seen: set[str] = set()
    duplicates: list[str] = []
    for prompt in cfg.prompts:
        if prompt.id in seen and prompt.id not in duplicates:
            duplicates.append(prompt.id)
        seen.add(prompt.id)
    if duplicates:
        raise ConfigurationError(f"duplicate prompt ids: {', '.join(duplicates)}")


def _emit_warnings(cfg: EvalConfig, observer: ConfigObserver) -> None:
    for scorer in cfg.scorers:
        if isinstance(scorer, LlmJudgeScorerConfig) and scorer.temperature > 0.0:
            observer.config_judge_temperature_warning(
                scorer_name=scorer.name, temperature=scorer.temperature
            )
