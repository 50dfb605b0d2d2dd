"""Scorer Protocol — structural interface for all scorer implementations."""

from typing import Protocol

from matrix_eval.scoring.domain.context import ScorerContext
from matrix_eval.scoring.domain.score import ScoreResult


class Scorer(Protocol):
    """A named evaluation of one trial.

    Implementations must be safe to call concurrently for different trials.
    """

    name: str

    async def evaluate(self, context: ScorerContext) -> ScoreResult: ...
