"""Agent configuration model."""

from typing import Any

from pydantic import BaseModel, Field


class AgentConfig(BaseModel, frozen=True):
    """Agent selection plus the knobs forwarded to the agent SDK.

    ``options`` holds further SDK options (plugins, allowed_tools,
    system_prompt, ...) passed through unchanged. They are applied after the
    named fields, so an entry there takes precedence over e.g. ``model``.
    """

    type: str = Field(default="claude_agent_sdk", min_length=1)
    model: str | None = None
    timeout_seconds: float = Field(default=600.0, gt=0)
    permission_mode: str = "bypassPermissions"
    setting_sources: list[str] = Field(default_factory=lambda: ["project"])
    max_turns: int | None = Field(default=None, ge=1)
    options: dict[str, Any] = Field(default_factory=dict)
