"""EnvironmentProvider implementations and name/value validation."""

import inspect
import re
from collections.abc import Awaitable, Callable, Mapping

from matrix_eval.environment.domain.context import EnvironmentContext
from matrix_eval.environment.domain.observer import EnvironmentObserver
from matrix_eval.environment.domain.provider import EnvironmentProvider
from matrix_eval.environment.infrastructure.errors import EnvironmentProviderError

_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_CRITICAL_VARS = frozenset({"PATH", "HOME", "TMPDIR", "NODE_PATH", "NODE_ENV", "PYTHONPATH"})

type EnvironmentFn = Callable[
    [EnvironmentContext], Mapping[str, str] | Awaitable[Mapping[str, str]]
]


class StaticEnvironmentProvider:
    """Returns a copy of the same mapping for every trial."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values = dict(values or {})

    async def provide(self, context: EnvironmentContext) -> dict[str, str]:
        return dict(self._values)


class CallableEnvironmentProvider:
    """Adapts a sync or async function of EnvironmentContext.

    Any exception raised by the function is wrapped in EnvironmentProviderError
    so that it stays scoped to the trial being provisioned.
    """

    def __init__(self, fn: EnvironmentFn) -> None:
        self._fn = fn

    async def provide(self, context: EnvironmentContext) -> dict[str, str]:
        try:
            produced = self._fn(context)
            if inspect.isawaitable(produced):
                produced = await produced
        except Exception as exc:
            raise EnvironmentProviderError(reason=str(exc)) from exc
        if not isinstance(produced, Mapping):
            raise EnvironmentProviderError(
                reason=f"provider returned {type(produced).__name__}, expected a mapping"
            )
        return dict(produced)


def as_environment_provider(
    source: EnvironmentProvider | Mapping[str, str] | EnvironmentFn | None,
) -> EnvironmentProvider:
    """Normalise a mapping, a function, or an existing provider into a provider."""
    if source is None:
        return StaticEnvironmentProvider()
    if isinstance(source, Mapping):
        return StaticEnvironmentProvider(values=source)
    if hasattr(source, "provide"):
        return source  # type: ignore[return-value]
    if callable(source):
        return CallableEnvironmentProvider(fn=source)
    raise TypeError(f"unsupported environment source: {type(source).__name__}")


def validate_environment(
    values: Mapping[str, object],
    trial_id: int,
    observer: EnvironmentObserver,
) -> dict[str, str]:
    """Check variable names and value types; warn on critical system variables.

    Raises:
        EnvironmentProviderError: on the first invalid name or non-string value.
    """
    validated: dict[str, str] = {}
    for name, value in values.items():
        if not isinstance(name, str) or not _NAME_PATTERN.match(name):
            raise EnvironmentProviderError(
                reason=f"invalid environment variable name {name!r}: names must start"
                " with a letter or underscore and contain only letters, digits and"
                " underscores"
            )
        if not isinstance(value, str):
            raise EnvironmentProviderError(
                reason=f"environment variable {name!r} must be a string,"
                f" got {type(value).__name__}"
            )
        if name.upper() in _CRITICAL_VARS:
            observer.environment_critical_var_overridden(trial_id=trial_id, name=name)
        validated[name] = value
    return validated
