"""
Arena judge: scores training quest output and converts scores to rewards.

The judge never touches agents. It produces a JudgeResult, and
JudgeResult.to_verdict() is the single place where quality turns into XP.
Applying the verdict is the quest board's job.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Iterable, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from ..llm.base import LLMClient
from ..state.schema import AgentConfig, Payload, Quest
from .errors import ZeroWeightRubricError
from .templates import QuestTemplate


# Quality the baseline judge reports for every training submission
BASELINE_QUALITY = 0.8

# Failed quests lose this fraction of base XP
FAILURE_PENALTY_DIVISOR = 4


class JudgeCriterion(BaseModel):
    """One scored dimension of a rubric."""
    name: str
    description: str = ""
    weight: float = Field(default=1.0, gt=0)
    threshold: float = Field(default=0.7, ge=0, le=1)


class JudgeRubric:
    """
    Ordered criteria with a positive total weight.

    Empty or zero-weight rubrics are rejected here so evaluation can
    always divide by the total.
    """

    def __init__(self, criteria: Iterable[JudgeCriterion | dict]):
        self.criteria: tuple[JudgeCriterion, ...] = tuple(
            c if isinstance(c, JudgeCriterion) else JudgeCriterion.model_validate(c)
            for c in criteria
        )
        self.total_weight = sum(c.weight for c in self.criteria)
        if self.total_weight <= 0:
            raise ZeroWeightRubricError(self.total_weight)

    def __iter__(self):
        return iter(self.criteria)

    def __len__(self) -> int:
        return len(self.criteria)

    @classmethod
    def from_names(cls, names: Iterable[str], threshold: float = 0.7) -> "JudgeRubric":
        """Equal-weight rubric over a template's criteria names."""
        return cls(JudgeCriterion(name=n, threshold=threshold) for n in names)


@dataclass
class Verdict:
    """Reward or penalty for a judged quest. Exactly one side is used."""
    passed: bool
    quality_score: float
    xp_awarded: int = 0
    xp_penalty: int = 0
    feedback: str = ""


@dataclass
class JudgeResult:
    """Evaluation outcome for a quest submission."""
    passed: bool
    quality_score: float
    feedback: str = ""
    criteria: dict[str, bool] = field(default_factory=dict)   # name -> passed
    scores: dict[str, float] = field(default_factory=dict)    # name -> score

    def to_verdict(self, base_xp: int) -> Verdict:
        """
        Convert to XP.

        Passed: base XP scaled by quality, rounded down.
        Failed: a quarter of base XP as a penalty, rounded down.
        """
        if self.passed:
            xp_awarded = math.floor(base_xp * self.quality_score)
            xp_penalty = 0
        else:
            xp_awarded = 0
            xp_penalty = base_xp // FAILURE_PENALTY_DIVISOR

        return Verdict(
            passed=self.passed,
            quality_score=self.quality_score,
            xp_awarded=xp_awarded,
            xp_penalty=xp_penalty,
            feedback=self.feedback,
        )


# -----------------------------------------------------------------------------
# Criterion scorers
# -----------------------------------------------------------------------------

@runtime_checkable
class CriterionScorer(Protocol):
    """Scores one rubric criterion for a submission, in [0, 1]."""

    def score(
        self,
        quest: Quest,
        output: Payload,
        criterion: JudgeCriterion,
        rubric: JudgeRubric,
    ) -> float:
        ...


class SimulatedScorer:
    """
    Deterministic stand-in for a model judge.

    Scores land between 0.75 and 0.95, rising with rubric size.
    """

    def score(self, quest, output, criterion, rubric) -> float:
        n = len(rubric)
        return 0.75 + 0.20 * ((n - 1) / (n + 1))


class FixedScorer:
    """Returns preset scores by criterion name (default for unknown names)."""

    def __init__(self, scores: dict[str, float], default: float = 0.0):
        self.scores = dict(scores)
        self.default = default

    def score(self, quest, output, criterion, rubric) -> float:
        return self.scores.get(criterion.name, self.default)


_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?|\.\d+)")


def parse_score(text: str) -> float:
    """
    First number in a model reply, as a 0-1 score.

    Values above 1 are read as percentages.
    """
    match = _NUMBER_RE.search(text)
    if not match:
        raise ValueError(f"no score found in judge reply: {text[:80]!r}")
    value = float(match.group(1))
    if value > 1:
        value = value / 100.0
    return value


JUDGE_SYSTEM_PROMPT = (
    "You are a strict but fair reviewer grading training quest submissions. "
    "Reply with a single number between 0 and 1 and nothing else."
)


class LLMCriterionScorer:
    """Asks a model to grade each criterion."""

    def __init__(self, client: LLMClient, config: AgentConfig | None = None):
        self.client = client
        self.config = config or AgentConfig()

    def build_prompt(self, quest: Quest, output: Payload, criterion: JudgeCriterion) -> str:
        lines = [
            f"Quest: {quest.title}",
            f"Description: {quest.description}",
            f"Input: {json.dumps(quest.input, default=str)}",
            f"Submission: {json.dumps(output, default=str)}",
            "",
            f"Criterion: {criterion.name}",
        ]
        if criterion.description:
            lines.append(f"Meaning: {criterion.description}")
        lines.append("Score the submission on this criterion from 0 to 1.")
        return "\n".join(lines)

    def score(self, quest, output, criterion, rubric) -> float:
        reply = self.client.ask(
            self.build_prompt(quest, output, criterion),
            system=self.config.system_prompt or JUDGE_SYSTEM_PROMPT,
            temperature=0.0,
            max_tokens=16,
        )
        return parse_score(reply)


# -----------------------------------------------------------------------------
# Judge
# -----------------------------------------------------------------------------

class ArenaJudge:
    """
    Evaluates training quest results.

    evaluate() is the training-mode default used when no rubric is given.
    evaluate_with_rubric() scores each criterion through the pluggable
    scorer and aggregates by weight.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        scorer: CriterionScorer | None = None,
        logger: logging.Logger | None = None,
    ):
        self.config = config or AgentConfig()
        self.scorer = scorer or SimulatedScorer()
        self.logger = logger or logging.getLogger(__name__)

    def evaluate(self, template: QuestTemplate | Quest, output: Payload) -> JudgeResult:
        """Baseline evaluation: a likely pass at fixed moderate quality."""
        return JudgeResult(
            passed=True,
            quality_score=BASELINE_QUALITY,
            feedback="Training quest completed successfully.",
        )

    def evaluate_with_rubric(
        self,
        quest: Quest,
        output: Payload,
        rubric: JudgeRubric | Iterable[JudgeCriterion],
    ) -> JudgeResult:
        """Weighted rubric evaluation. Passing requires every criterion to pass."""
        if not isinstance(rubric, JudgeRubric):
            rubric = JudgeRubric(rubric)

        scores: dict[str, float] = {}
        criteria: dict[str, bool] = {}
        total_score = 0.0
        total_weight = 0.0

        for criterion in rubric:
            score = min(1.0, max(0.0, self.scorer.score(quest, output, criterion, rubric)))
            scores[criterion.name] = score
            criteria[criterion.name] = score >= criterion.threshold
            total_score += score * criterion.weight
            total_weight += criterion.weight

        quality = total_score / total_weight
        passed = all(criteria.values())

        failing = [name for name, ok in criteria.items() if not ok]
        feedback = "Evaluation completed."
        if failing:
            feedback += f" Below threshold: {', '.join(failing)}."

        self.logger.debug(
            f"Judged {quest.title!r}: quality={quality:.3f} passed={passed}"
        )

        return JudgeResult(
            passed=passed,
            quality_score=quality,
            feedback=feedback,
            criteria=criteria,
            scores=scores,
        )

    def review(
        self,
        quest: Quest,
        output: Payload,
        rubric: JudgeRubric | None = None,
    ) -> Verdict:
        """Evaluate (baseline without a rubric) and convert at the quest's base XP."""
        if rubric is None:
            result = self.evaluate(quest, output)
        else:
            result = self.evaluate_with_rubric(quest, output, rubric)
        return result.to_verdict(quest.base_xp)
