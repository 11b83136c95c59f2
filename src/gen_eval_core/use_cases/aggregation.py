"""
Score Aggregation

Combines metric results into an overall score, a text summary, and a
cross-configuration comparison for batch evaluations.
"""

from __future__ import annotations

import math

import pandas as pd

from gen_eval_core.domain.entities import (
    ComparisonResult,
    EvaluationResult,
    MetricComparison,
    MetricResult,
    ModelRanking,
)
from gen_eval_core.domain.value_objects import EvalTask, MetricConfig

_COMPARISON_COLUMNS = ["model_name", "metric_name", "score", "succeeded"]


def resolved_weight(config: MetricConfig) -> float:
    """Aggregation weight of a metric (non-positive weights fall back to 1.0)"""
    return config.weight if config.weight > 0 else 1.0


def metric_weights(task: EvalTask) -> dict[str, float]:
    """
    Weight of every configured metric keyed by display name

    Used for metric results that do not carry their own weight. When two
    metrics share a display name the later one wins here.

    Args:
        task: Evaluation task

    Returns:
        {metric display name: weight}
    """
    configs = list(task.metrics) + [cm.to_metric_config() for cm in task.custom_metrics]
    return {config.display_name: resolved_weight(config) for config in configs}


def calculate_overall_score(task: EvalTask, metric_results: list[MetricResult]) -> float:
    """
    Weighted mean of the successful metric scores

    Metrics with an error or a NaN score are excluded from both the
    numerator and the denominator. Each result's weight comes from its
    details["weight"] (set by the engine per metric unit), falling back to
    the task's weight for the metric name, so result order does not matter
    and metrics sharing a name keep their own weights.

    Args:
        task: Evaluation task (source of fallback weights)
        metric_results: Metric results of the run

    Returns:
        Overall score (0.0 when no metric contributes)
    """
    weights = metric_weights(task)
    weighted_sum = 0.0
    total_weight = 0.0

    for result in metric_results:
        if result.error or math.isnan(result.score):
            continue
        weight = result.details.get("weight") or weights.get(result.metric_name, 1.0)
        weighted_sum += result.score * weight
        total_weight += weight

    if total_weight > 0:
        return weighted_sum / total_weight
    return 0.0


def generate_summary(result: EvaluationResult) -> str:
    """
    Text summary of an evaluation result

    Args:
        result: Evaluation result (overall score and timing already set)

    Returns:
        Multi-line summary
    """
    record_count = result.dataset_info.record_count if result.dataset_info else 0
    successful = sum(1 for mr in result.metric_results if mr.succeeded)

    lines = [
        f"Evaluation completed with overall score: {result.overall_score:.3f}",
        f"Dataset: {record_count} records",
        f"Duration: {result.duration:.2f}s",
        f"Metrics: {successful}/{len(result.metric_results)} successful",
    ]
    return "\n".join(lines) + "\n"


def _comparison_frame(results: list[EvaluationResult]) -> pd.DataFrame:
    """One row per (evaluation, metric result)"""
    rows = []
    for result in results:
        model_name = result.model_config.model_name if result.model_config else None
        for mr in result.metric_results:
            rows.append({
                "model_name": model_name,
                "metric_name": mr.metric_name,
                "score": mr.score,
                "succeeded": mr.succeeded and not math.isnan(mr.score),
            })
    return pd.DataFrame(rows, columns=_COMPARISON_COLUMNS)


def _best_model(results: list[EvaluationResult]) -> str:
    """Model name of the highest overall score among results with a model config"""
    best_score = -math.inf
    best_model = ""
    for result in results:
        if result.model_config is not None and result.overall_score > best_score:
            best_score = result.overall_score
            best_model = result.model_config.model_name
    return best_model


def generate_comparison(results: list[EvaluationResult]) -> ComparisonResult | None:
    """
    Compare evaluation results of several model configurations

    For every metric name seen across the results, best and worst scores
    are taken over successful metric results only. Rankings list each
    configured model's score with a dense rank (1 = best, ties share a
    rank); their order is not significant.

    Args:
        results: Per-configuration evaluation results

    Returns:
        ComparisonResult, or None when fewer than 2 results are given
    """
    if len(results) < 2:
        return None

    best_model = _best_model(results)
    df = _comparison_frame(results)

    succeeded = df[df["succeeded"].astype(bool)].copy()
    succeeded["score"] = succeeded["score"].astype(float)
    bounds = succeeded.groupby("metric_name")["score"].agg(["max", "min"])

    ranked = succeeded[succeeded["model_name"].notna()].copy()
    ranked["rank"] = (
        ranked.groupby("metric_name")["score"]
        .rank(method="dense", ascending=False)
        .astype(int)
    )

    metric_comparisons: dict[str, MetricComparison] = {}
    for metric_name in df["metric_name"].unique():
        if metric_name in bounds.index:
            best_score = float(bounds.at[metric_name, "max"])
            worst_score = float(bounds.at[metric_name, "min"])
        else:
            best_score = worst_score = 0.0

        metric_rows = ranked[ranked["metric_name"] == metric_name]
        rankings = [
            ModelRanking(model_name=row.model_name, score=float(row.score), rank=int(row.rank))
            for row in metric_rows.itertuples(index=False)
        ]

        metric_comparisons[metric_name] = MetricComparison(
            metric_name=metric_name,
            best_score=best_score,
            worst_score=worst_score,
            score_range=best_score - worst_score,
            rankings=rankings,
        )

    summary = f"Compared {len(results)} evaluations across {len(metric_comparisons)} metrics"
    if best_model:
        summary += f"; best model: {best_model}"

    return ComparisonResult(
        best_model=best_model,
        metric_comparisons=metric_comparisons,
        summary=summary,
    )
