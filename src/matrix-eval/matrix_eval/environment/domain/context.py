"""EnvironmentContext — what an environment provider knows about the trial it serves."""

from pydantic import BaseModel, Field


class EnvironmentContext(BaseModel, frozen=True):
    trial_id: int = Field(ge=0)
    prompt_id: str
    iteration: int = Field(ge=0)
    total_iterations: int = Field(ge=1)
    eval_name: str
