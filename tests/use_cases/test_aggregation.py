"""
Tests for use_cases.aggregation
"""

import math

import pytest

from gen_eval_core.domain.constants import MetricType
from gen_eval_core.domain.entities import DatasetInfo, EvaluationResult, MetricResult
from gen_eval_core.domain.value_objects import (
    CustomMetric,
    DataRecord,
    Dataset,
    EvalTask,
    MetricConfig,
    ModelConfig,
)
from gen_eval_core.use_cases.aggregation import (
    calculate_overall_score,
    generate_comparison,
    generate_summary,
    metric_weights,
    resolved_weight,
)


def _task(metrics, custom_metrics=None):
    return EvalTask(
        dataset=Dataset(data=[DataRecord()]),
        metrics=metrics,
        custom_metrics=custom_metrics or [],
    )


def _mr(name, score, error=""):
    return MetricResult(metric_name=name, metric_type=name, score=score, error=error)


def _result(model_name, scores, overall):
    return EvaluationResult(
        task_name="t",
        metric_results=[_mr(name, score) for name, score in scores.items()],
        overall_score=overall,
        model_config=ModelConfig(model_name=model_name) if model_name else None,
    )


class TestMetricWeights:
    """Tests for metric_weights"""

    def test_keyed_by_display_name(self):
        task = _task(
            [MetricConfig(type=MetricType.BLEU, weight=2.0), MetricConfig(type=MetricType.BLEU, name="bleu_b")],
            [CustomMetric(name="tone", prompt_template=None, parameters={"weight": 3})],
        )
        assert metric_weights(task) == {"bleu": 2.0, "bleu_b": 1.0, "tone": 3.0}

    def test_non_positive_weight_falls_back(self):
        task = _task([MetricConfig(type="bleu", weight=0), MetricConfig(type="rouge_1", weight=-2)])
        assert metric_weights(task) == {"bleu": 1.0, "rouge_1": 1.0}


class TestCalculateOverallScore:
    """Tests for calculate_overall_score"""

    def test_equal_weights(self):
        task = _task([MetricConfig(type="bleu"), MetricConfig(type="rouge_1")])
        score = calculate_overall_score(task, [_mr("bleu", 0.8), _mr("rouge_1", 0.6)])
        assert score == pytest.approx(0.7)

    def test_weighted(self):
        task = _task([MetricConfig(type="bleu", weight=3.0), MetricConfig(type="rouge_1", weight=1.0)])
        score = calculate_overall_score(task, [_mr("bleu", 1.0), _mr("rouge_1", 0.2)])
        assert score == pytest.approx(0.8)

    def test_order_independent(self):
        task = _task([MetricConfig(type="bleu", weight=3.0), MetricConfig(type="rouge_1", weight=1.0)])
        score = calculate_overall_score(task, [_mr("rouge_1", 0.2), _mr("bleu", 1.0)])
        assert score == pytest.approx(0.8)

    def test_result_weight_wins_over_name_lookup(self):
        task = _task([
            MetricConfig(type="exact_match", name="m", weight=3.0),
            MetricConfig(type="bleu", name="m", weight=1.0),
        ])
        first = _mr("m", 0.5)
        first.details["weight"] = 3.0
        second = _mr("m", 0.75)
        second.details["weight"] = 1.0

        score = calculate_overall_score(task, [first, second])

        assert score == pytest.approx(0.5625)

    def test_custom_metric_named_like_builtin(self):
        task = _task(
            [MetricConfig(type="bleu", weight=1.0)],
            [CustomMetric(name="bleu", prompt_template=None, parameters={"weight": 4})],
        )
        builtin = _mr("bleu", 1.0)
        builtin.details["weight"] = 1.0
        custom = _mr("bleu", 0.0)
        custom.details["weight"] = 4.0

        assert calculate_overall_score(task, [builtin, custom]) == pytest.approx(0.2)

    def test_resolved_weight(self):
        assert resolved_weight(MetricConfig(type="bleu", weight=2.5)) == 2.5
        assert resolved_weight(MetricConfig(type="bleu", weight=0)) == 1.0

    def test_failed_metric_excluded(self):
        task = _task([MetricConfig(type="bleu"), MetricConfig(type="coherence", weight=5.0)])
        score = calculate_overall_score(task, [_mr("bleu", 0.4), _mr("coherence", 0.0, error="judge down")])
        assert score == pytest.approx(0.4)

    def test_nan_metric_excluded(self):
        task = _task([MetricConfig(type="bleu"), MetricConfig(type="rouge_1")])
        score = calculate_overall_score(task, [_mr("bleu", 0.4), _mr("rouge_1", math.nan)])
        assert score == pytest.approx(0.4)

    def test_no_successful_metric(self):
        task = _task([MetricConfig(type="bleu")])
        assert calculate_overall_score(task, [_mr("bleu", 0.0, error="boom")]) == 0.0
        assert calculate_overall_score(task, []) == 0.0


class TestGenerateSummary:
    """Tests for generate_summary"""

    def test_summary_lines(self):
        result = EvaluationResult(
            task_name="t",
            metric_results=[_mr("bleu", 0.5), _mr("coherence", 0.0, error="x")],
            overall_score=0.5,
            dataset_info=DatasetInfo(name="ds", record_count=3),
            duration=1.234,
        )
        assert generate_summary(result) == (
            "Evaluation completed with overall score: 0.500\n"
            "Dataset: 3 records\n"
            "Duration: 1.23s\n"
            "Metrics: 1/2 successful\n"
        )


class TestGenerateComparison:
    """Tests for generate_comparison"""

    def test_fewer_than_two_results(self):
        assert generate_comparison([]) is None
        assert generate_comparison([_result("m1", {"bleu": 0.5}, 0.5)]) is None

    def test_best_worst_and_ranks(self):
        results = [
            _result("m1", {"bleu": 0.9, "rouge_1": 0.4}, 0.65),
            _result("m2", {"bleu": 0.5, "rouge_1": 0.8}, 0.65),
            _result("m3", {"bleu": 0.9, "rouge_1": 0.6}, 0.75),
        ]

        comparison = generate_comparison(results)

        assert comparison.best_model == "m3"
        bleu = comparison.metric_comparisons["bleu"]
        assert bleu.best_score == pytest.approx(0.9)
        assert bleu.worst_score == pytest.approx(0.5)
        assert bleu.score_range == pytest.approx(0.4)
        ranks = {r.model_name: r.rank for r in bleu.rankings}
        assert ranks == {"m1": 1, "m3": 1, "m2": 2}
        rouge_ranks = {r.model_name: r.rank for r in comparison.metric_comparisons["rouge_1"].rankings}
        assert rouge_ranks == {"m2": 1, "m3": 2, "m1": 3}
        assert "best model: m3" in comparison.summary

    def test_failed_results_excluded_from_bounds(self):
        r1 = _result("m1", {"bleu": 0.3}, 0.3)
        r2 = _result("m2", {}, 0.0)
        r2.metric_results.append(_mr("bleu", 0.0, error="boom"))

        comparison = generate_comparison([r1, r2])

        bleu = comparison.metric_comparisons["bleu"]
        assert bleu.best_score == pytest.approx(0.3)
        assert bleu.worst_score == pytest.approx(0.3)
        assert [r.model_name for r in bleu.rankings] == ["m1"]

    def test_metric_without_successes(self):
        r1 = _result("m1", {}, 0.0)
        r1.metric_results.append(_mr("coherence", 0.0, error="x"))
        r2 = _result("m2", {}, 0.0)
        r2.metric_results.append(_mr("coherence", 0.0, error="y"))

        comparison = generate_comparison([r1, r2])

        coherence = comparison.metric_comparisons["coherence"]
        assert coherence.best_score == 0.0
        assert coherence.worst_score == 0.0
        assert coherence.rankings == []

    def test_results_without_model_config_are_not_ranked(self):
        results = [
            _result(None, {"bleu": 1.0}, 1.0),
            _result("m2", {"bleu": 0.5}, 0.5),
        ]

        comparison = generate_comparison(results)

        assert comparison.best_model == "m2"
        bleu = comparison.metric_comparisons["bleu"]
        assert bleu.best_score == pytest.approx(1.0)
        assert [(r.model_name, r.rank) for r in bleu.rankings] == [("m2", 1)]
