"""Error types raised by agent infrastructure."""

from matrix_eval.core.errors import MatrixEvalError


class AgentInvocationError(MatrixEvalError):
    """Raised when the agent cannot be invoked or its event stream is incomplete."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to invoke agent: {reason}")


class AgentTypeNotSupportedError(MatrixEvalError):
    """Raised when the agent type specified in config is not a known agent type."""

    def __init__(self, agent_type: str) -> None:
        super().__init__(
            f"Failed to create agent factory: unsupported agent type '{agent_type}'"
        )


class AgentOptionsError(MatrixEvalError):
    """Raised when configured agent options cannot be forwarded to the SDK."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to create agent factory: {reason}")
