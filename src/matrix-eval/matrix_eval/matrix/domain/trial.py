"""TrialSpec — one cell of the evaluation matrix, identified by a stable arena index."""

from pydantic import BaseModel, Field

from matrix_eval.environment.domain.context import EnvironmentContext

type TrialId = int


class TrialSpec(BaseModel, frozen=True):
    """Immutable description of one trial.

    ``trial_id`` is assigned at generation time and is the only ordering key
    used downstream; it never depends on execution or completion order.
    """

    trial_id: TrialId = Field(ge=0)
    prompt_id: str
    prompt_text: str
    iteration: int = Field(ge=0)
    env_context: EnvironmentContext
