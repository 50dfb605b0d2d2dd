"""Recursive ${ENV_VAR} interpolation for raw YAML config data."""

import os
import re
from collections.abc import Mapping

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

type RawValue = (
    str | int | float | bool | None | list["RawValue"] | dict[str, "RawValue"]
)


def collect_missing_vars(
    data: RawValue, environ: Mapping[str, str] | None = None
) -> list[str]:
    """
    Walk the data tree and return the names of all referenced env vars that
    are not set in ``environ`` (defaults to ``os.environ``).  Every missing
    var is collected before returning.
    """
    env = os.environ if environ is None else environ
    missing: list[str] = []
    _collect(data, env, missing)
    return missing


def _collect(data: RawValue, env: Mapping[str, str], missing: list[str]) -> None:
    if isinstance(data, str):
        for match in _ENV_VAR_PATTERN.finditer(data):
            var_name = match.group(1)
            if var_name not in env and var_name not in missing:
                missing.append(var_name)
    elif isinstance(data, list):
        for item in data:
            _collect(item, env, missing)
    elif isinstance(data, dict):
        for value in data.values():
            _collect(value, env, missing)


def interpolate(data: RawValue, environ: Mapping[str, str] | None = None) -> RawValue:
    """
    Recursively substitute all ${ENV_VAR} occurrences with their values.

    Reads the environment only; never writes to it. Assumes all referenced
    variables are present — call `collect_missing_vars` first.
    """
    env = os.environ if environ is None else environ
    if isinstance(data, str):
        return _ENV_VAR_PATTERN.sub(lambda m: env[m.group(1)], data)
    if isinstance(data, list):
        return [interpolate(item, env) for item in data]
    if isinstance(data, dict):
        return {key: interpolate(value, env) for key, value in data.items()}
    return data
