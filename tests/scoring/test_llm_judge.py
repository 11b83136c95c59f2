"""
ModelJudgeScorer のテスト

Rating / Preference のパース、テンプレート解決、evaluator への委譲をテストする。
"""

import pytest
from unittest.mock import MagicMock

from gen_eval_core.domain.constants import MetricType
from gen_eval_core.domain.errors import MetricError, RecordError
from gen_eval_core.domain.value_objects import DataRecord, MetricConfig, PromptTemplate
from gen_eval_core.prompt_templates import get_template
from gen_eval_core.scoring.llm_judge import (
    ModelJudgeError,
    ModelJudgeScorer,
    is_preference_template,
    parse_preference,
    parse_rating,
)


# ---------------------------------------------------------------------------
# MockEvaluator
# ---------------------------------------------------------------------------


class MockEvaluator:
    """テスト用のjudge evaluator"""

    def __init__(self, response_text: str):
        self._response_text = response_text
        self.calls: list[tuple[str, str]] = []

    def evaluate_with_model(self, prompt: str, model_name: str) -> str:
        self.calls.append((prompt, model_name))
        return self._response_text


# ===========================================================================
# parse_rating
# ===========================================================================


class TestParseRating:
    """parse_rating のテスト"""

    def test_rating_with_explanation(self):
        result = parse_rating("Rating: 4\nThe response is clear and well organized.")
        assert result.score == 4.0
        assert result.reason == "The response is clear and well organized."

    def test_case_insensitive(self):
        assert parse_rating("RATING: 3").score == 3.0
        assert parse_rating("rating:5").score == 5.0

    def test_decimal_rating(self):
        assert parse_rating("Rating: 3.5 - mostly fine").score == pytest.approx(3.5)

    def test_negative_rating(self):
        result = parse_rating("Rating: -2\nResponse A is much better.")
        assert result.score == -2.0
        assert result.reason == "Response A is much better."

    def test_rating_after_preamble(self):
        result = parse_rating("After careful review.\nRating: 2\nToo verbose.")
        assert result.score == 2.0
        assert result.reason == "Too verbose."

    def test_leading_number(self):
        # The model continued the template's trailing "Rating:" line
        result = parse_rating("4. The summary captures the key points.")
        assert result.score == 4.0

    def test_unparseable_raises(self):
        with pytest.raises(ModelJudgeError, match="could not parse rating"):
            parse_rating("I cannot rate this response.")

    def test_empty_raises(self):
        with pytest.raises(ModelJudgeError):
            parse_rating("")

    def test_error_is_record_error(self):
        assert issubclass(ModelJudgeError, RecordError)


class TestParsePreference:
    """parse_preference のテスト"""

    @pytest.mark.parametrize("text,expected", [
        ("Preference: A\nA is more accurate.", 0.0),
        ("Preference: B", 1.0),
        ("preference: tie", 0.5),
        ("B\nResponse B follows the instruction.", 1.0),
    ])
    def test_preferences(self, text, expected):
        assert parse_preference(text).score == expected

    def test_explanation(self):
        result = parse_preference("Preference: A\nA is more accurate.")
        assert result.reason == "A is more accurate."

    def test_unparseable_raises(self):
        with pytest.raises(ModelJudgeError, match="could not parse preference"):
            parse_preference("Both have merits.")


class TestIsPreferenceTemplate:
    """is_preference_template のテスト"""

    def test_builtin_templates(self):
        assert is_preference_template(get_template("pairwise", "preference_comparison"))
        assert not is_preference_template(get_template("pairwise", "quality_comparison"))
        assert not is_preference_template(get_template("pointwise", "coherence"))


# ===========================================================================
# ModelJudgeScorer
# ===========================================================================


class TestModelJudgeScorer:
    """ModelJudgeScorer.evaluate のテスト"""

    def test_formats_prompt_and_parses(self):
        evaluator = MockEvaluator("Rating: 5\nExcellent.")
        judge = ModelJudgeScorer(evaluator)
        template = PromptTemplate(template="Q: {{.Input}}\nA: {{.Response}}\nRating:")
        record = DataRecord(input="What is 2+2?", response="4")

        result = judge.evaluate(record, template, "gemini-2.0-flash-001")

        assert result.score == 5.0
        assert result.reason == "Excellent."
        prompt, model_name = evaluator.calls[0]
        assert prompt == "Q: What is 2+2?\nA: 4\nRating:"
        assert model_name == "gemini-2.0-flash-001"

    def test_preference_template_uses_preference_parser(self):
        evaluator = MockEvaluator("Preference: B\nMore complete.")
        judge = ModelJudgeScorer(evaluator)
        template = get_template("pairwise", "preference_comparison")
        record = DataRecord(input="Explain DNS", metadata={"ResponseA": "alpha-answer", "ResponseB": "beta-answer"})

        result = judge.evaluate(record, template, "judge")

        assert result.score == 1.0
        prompt, _ = evaluator.calls[0]
        assert "Response A:\nalpha-answer" in prompt
        assert "Response B:\nbeta-answer" in prompt

    def test_unparseable_response_raises(self):
        judge = ModelJudgeScorer(MockEvaluator("no idea"))
        template = get_template("pointwise", "fluency")
        with pytest.raises(ModelJudgeError):
            judge.evaluate(DataRecord(response="text"), template, "judge")

    def test_evaluator_errors_propagate(self):
        evaluator = MagicMock()
        evaluator.evaluate_with_model.side_effect = ConnectionError("network down")
        judge = ModelJudgeScorer(evaluator)
        with pytest.raises(ConnectionError):
            judge.evaluate(DataRecord(), get_template("pointwise", "safety"), "judge")


class TestResolveTemplate:
    """ModelJudgeScorer.resolve_template のテスト"""

    def test_builtin_metric_uses_registry(self):
        judge = ModelJudgeScorer(MockEvaluator(""))
        template = judge.resolve_template(MetricConfig(type=MetricType.COHERENCE))
        assert template is get_template("pointwise", "coherence")

    def test_raw_string_type(self):
        judge = ModelJudgeScorer(MockEvaluator(""))
        assert judge.resolve_template(MetricConfig(type="helpfulness")) is get_template(
            "pointwise", "helpfulness"
        )

    def test_metric_template_wins(self):
        custom = PromptTemplate(template="Rate {{.Response}}\nRating:")
        judge = ModelJudgeScorer(MockEvaluator(""))
        assert judge.resolve_template(MetricConfig(type=MetricType.FLUENCY, prompt_template=custom)) is custom

    def test_pointwise_without_template_fails(self):
        judge = ModelJudgeScorer(MockEvaluator(""))
        with pytest.raises(MetricError, match="require a prompt_template"):
            judge.resolve_template(MetricConfig(type=MetricType.POINTWISE, name="tone"))

    def test_unknown_type_fails(self):
        judge = ModelJudgeScorer(MockEvaluator(""))
        with pytest.raises(MetricError, match="Unsupported metric type: sarcasm"):
            judge.resolve_template(MetricConfig(type="sarcasm"))

    def test_malformed_template_fails(self):
        broken = PromptTemplate(template="{{if .Context}}Context: {{.Context}}")
        judge = ModelJudgeScorer(MockEvaluator(""))
        with pytest.raises(MetricError):
            judge.resolve_template(MetricConfig(type=MetricType.CUSTOM, prompt_template=broken))
