"""LiteLLMJudgeScorer — grades a trial's change-set against a rubric via LiteLLM."""

import litellm
from pydantic import BaseModel, Field, ValidationError

from matrix_eval.scoring.domain.context import ScorerContext
from matrix_eval.scoring.domain.score import ScoreResult
from matrix_eval.scoring.infrastructure.errors import ScorerError

_SYSTEM_PROMPT = """\
You are an expert code reviewer grading the changes an AI coding agent made to \
a project. You receive a rubric and a unified diff of the agent's changes \
against the original project. Grade how well the changes satisfy the rubric.

Return a score between 0.0 and 1.0:
1.0 - The changes fully satisfy every rubric criterion.
0.5 - The changes partially satisfy the rubric; important criteria are missing \
or wrong.
0.0 - The changes do not address the rubric, break the project, or are empty.

Use intermediate values when appropriate. Give a brief reason grounded in \
specific parts of the diff."""


class _JudgeVerdict(BaseModel):
    score: float = Field(ge=0.0, le=1.0)
    reason: str


class LiteLLMJudgeScorer:
    """Scorer that delegates grading to an LLM through LiteLLM.

    Satisfies the Scorer protocol structurally. Holds no per-trial state, so a
    single instance serves every trial concurrently.
    """

    def __init__(
        self,
        name: str,
        model: str,
        rubric: str,
        temperature: float = 0.0,
        max_change_set_chars: int = 60_000,
    ) -> None:
        self.name = name
        self._model = model
        self._rubric = rubric
        self._temperature = temperature
        self._max_change_set_chars = max_change_set_chars

    async def evaluate(self, context: ScorerContext) -> ScoreResult:
        """Ask the LLM for a verdict on the change-set.

        Raises:
            ScorerError: if the LLM call fails or its response cannot be parsed.
        """
        change_set = context.change_set
        truncated = len(change_set) > self._max_change_set_chars
        if truncated:
            change_set = change_set[: self._max_change_set_chars]

        user_message = (
            f"## Rubric\n{self._rubric}\n\n"
            f"## Prompt variant\n{context.prompt_id}\n\n"
            f"## Diff{' (truncated)' if truncated else ''}\n"
            f"```diff\n{change_set or '(no changes)'}\n```"
        )

        try:
            response = await litellm.acompletion(
                model=self._model,
                temperature=self._temperature,
                response_format=_JudgeVerdict,
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": user_message},
                ],
            )
        except Exception as exc:
            raise ScorerError(scorer=self.name, reason=str(exc)) from exc

        raw_content = response.choices[0].message.content
        try:
            verdict = _JudgeVerdict.model_validate_json(raw_content or "")
        except ValidationError as exc:
            raise ScorerError(
                scorer=self.name, reason=f"unparseable judge response: {exc}"
            ) from exc

        return ScoreResult(
            score=verdict.score,
            reason=verdict.reason,
            metadata={"model": self._model, "change_set_truncated": truncated},
        )
