"""Tests for the arena judge and reward conversion."""

import pytest

from guildseed.llm import MockLLMClient
from guildseed.seeding import (
    ArenaJudge,
    FixedScorer,
    JudgeCriterion,
    JudgeResult,
    JudgeRubric,
    LLMCriterionScorer,
    SimulatedScorer,
    ZeroWeightRubricError,
)
from guildseed.seeding.judge import parse_score
from guildseed.state import Quest, QuestDifficulty


@pytest.fixture
def quest():
    return Quest(
        title="Refactor for Clarity",
        description="Improve readability",
        difficulty=QuestDifficulty.MODERATE,
        base_xp=100,
        input={"code": "def f(x): ..."},
    )


@pytest.fixture
def two_criteria():
    return JudgeRubric([
        JudgeCriterion(name="correctness", weight=1, threshold=0.7),
        JudgeCriterion(name="readability", weight=1, threshold=0.7),
    ])


class TestJudgeRubric:
    """Test rubric construction."""

    def test_empty_rubric_rejected(self):
        """A rubric with no weight can't be averaged."""
        with pytest.raises(ZeroWeightRubricError):
            JudgeRubric([])

    def test_accepts_dicts(self):
        rubric = JudgeRubric([{"name": "a", "weight": 2}, {"name": "b"}])
        assert len(rubric) == 2
        assert rubric.total_weight == 3

    def test_from_names(self):
        rubric = JudgeRubric.from_names(["a", "b", "c"], threshold=0.5)
        assert [c.name for c in rubric] == ["a", "b", "c"]
        assert all(c.threshold == 0.5 for c in rubric)


class TestEvaluateWithRubric:
    """Test weighted rubric scoring."""

    def test_weighted_mean_passes(self, quest, two_criteria):
        judge = ArenaJudge(scorer=FixedScorer({"correctness": 0.8, "readability": 0.9}))
        result = judge.evaluate_with_rubric(quest, {"response": "ok"}, two_criteria)
        assert result.quality_score == pytest.approx(0.85)
        assert result.passed is True
        assert result.criteria == {"correctness": True, "readability": True}

    def test_one_low_criterion_fails(self, quest, two_criteria):
        """Passing needs every criterion, whatever the average."""
        judge = ArenaJudge(scorer=FixedScorer({"correctness": 0.5, "readability": 0.9}))
        result = judge.evaluate_with_rubric(quest, {"response": "ok"}, two_criteria)
        assert result.quality_score == pytest.approx(0.7)
        assert result.passed is False
        assert result.criteria["correctness"] is False
        assert "correctness" in result.feedback

    def test_weights_applied(self, quest):
        rubric = JudgeRubric([
            JudgeCriterion(name="heavy", weight=3, threshold=0.0),
            JudgeCriterion(name="light", weight=1, threshold=0.0),
        ])
        judge = ArenaJudge(scorer=FixedScorer({"heavy": 1.0, "light": 0.0}))
        result = judge.evaluate_with_rubric(quest, None, rubric)
        assert result.quality_score == pytest.approx(0.75)

    def test_scores_clamped(self, quest, two_criteria):
        judge = ArenaJudge(scorer=FixedScorer({"correctness": 1.7, "readability": -0.2}))
        result = judge.evaluate_with_rubric(quest, None, two_criteria)
        assert result.scores == {"correctness": 1.0, "readability": 0.0}

    def test_plain_criteria_list(self, quest):
        judge = ArenaJudge(scorer=FixedScorer({}, default=0.9))
        result = judge.evaluate_with_rubric(quest, None, [JudgeCriterion(name="only")])
        assert result.passed is True

    def test_scorer_errors_propagate(self, quest, two_criteria):
        class BrokenScorer:
            def score(self, quest, output, criterion, rubric):
                raise RuntimeError("model offline")

        judge = ArenaJudge(scorer=BrokenScorer())
        with pytest.raises(RuntimeError):
            judge.evaluate_with_rubric(quest, None, two_criteria)


class TestScorers:
    """Test the built-in criterion scorers."""

    def test_simulated_scorer_grows_with_rubric(self, quest):
        scorer = SimulatedScorer()
        one = JudgeRubric.from_names(["a"])
        three = JudgeRubric.from_names(["a", "b", "c"])
        assert scorer.score(quest, None, one.criteria[0], one) == pytest.approx(0.75)
        assert scorer.score(quest, None, three.criteria[0], three) == pytest.approx(0.85)

    def test_llm_scorer(self, quest, mock_client):
        rubric = JudgeRubric.from_names(["correctness"])
        scorer = LLMCriterionScorer(mock_client)
        assert scorer.score(quest, {"response": "x"}, rubric.criteria[0], rubric) == pytest.approx(0.9)
        call = mock_client.calls[0]
        assert call["temperature"] == 0.0
        assert call["max_tokens"] == 16
        assert "Criterion: correctness" in call["messages"][0].content

    def test_llm_scorer_in_judge(self, quest, two_criteria):
        client = MockLLMClient(responses=["0.8", "Score: 90"])
        judge = ArenaJudge(scorer=LLMCriterionScorer(client))
        result = judge.evaluate_with_rubric(quest, None, two_criteria)
        assert result.scores == {"correctness": pytest.approx(0.8), "readability": pytest.approx(0.9)}
        assert result.passed is True

    @pytest.mark.parametrize("reply,expected", [
        ("0.75", 0.75),
        ("Score: .5", 0.5),
        ("85", 0.85),
        ("I'd give it 1", 1.0),
    ])
    def test_parse_score(self, reply, expected):
        assert parse_score(reply) == pytest.approx(expected)

    def test_parse_score_without_number(self):
        with pytest.raises(ValueError):
            parse_score("looks fine to me")


class TestVerdict:
    """Test result-to-reward conversion."""

    def test_pass_awards_scaled_xp(self):
        verdict = JudgeResult(passed=True, quality_score=0.8).to_verdict(100)
        assert verdict.xp_awarded == 80
        assert verdict.xp_penalty == 0

    def test_fail_penalizes_quarter(self):
        verdict = JudgeResult(passed=False, quality_score=0.8).to_verdict(100)
        assert verdict.xp_awarded == 0
        assert verdict.xp_penalty == 25

    def test_rounds_down(self):
        assert JudgeResult(passed=True, quality_score=0.85).to_verdict(25).xp_awarded == 21
        assert JudgeResult(passed=False, quality_score=0.0).to_verdict(50).xp_penalty == 12


class TestBaselineJudge:
    """Test the no-rubric path."""

    def test_evaluate(self, quest):
        result = ArenaJudge().evaluate(quest, {"response": "anything"})
        assert result.passed is True
        assert result.quality_score == 0.8
        assert result.feedback == "Training quest completed successfully."

    def test_review_without_rubric(self, quest):
        verdict = ArenaJudge().review(quest, {"response": "anything"})
        assert verdict.passed is True
        assert verdict.xp_awarded == 80

    def test_review_with_rubric(self, quest, two_criteria):
        judge = ArenaJudge(scorer=FixedScorer({"correctness": 0.2, "readability": 0.2}))
        verdict = judge.review(quest, None, two_criteria)
        assert verdict.passed is False
        assert verdict.xp_penalty == 25
