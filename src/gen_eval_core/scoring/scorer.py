"""
Scoring dispatch table

Maps computation-based metric types to record scorers. Model-based metric
types are not in the table; they go through the LLM judge.
"""

from __future__ import annotations

import logging
from typing import Callable

from gen_eval_core.domain.constants import MetricType, metric_type_value
from gen_eval_core.domain.errors import MetricError
from gen_eval_core.domain.value_objects import DataRecord
from gen_eval_core.scoring.text_scorers import (
    compute_bleu_score,
    compute_rouge_1,
    compute_rouge_2,
    compute_rouge_l,
    compute_rouge_l_sum,
    compute_tool_call_score,
    score_exact_match,
)

logger = logging.getLogger(__name__)

RecordScorer = Callable[[DataRecord], float]

COMPUTATION_SCORERS: dict[str, RecordScorer] = {
    MetricType.BLEU.value: lambda r: compute_bleu_score(r.response, r.reference),
    MetricType.ROUGE_1.value: lambda r: compute_rouge_1(r.response, r.reference),
    MetricType.ROUGE_2.value: lambda r: compute_rouge_2(r.response, r.reference),
    MetricType.ROUGE_L.value: lambda r: compute_rouge_l(r.response, r.reference),
    MetricType.ROUGE_L_SUM.value: lambda r: compute_rouge_l_sum(r.response, r.reference),
    MetricType.EXACT_MATCH.value: lambda r: score_exact_match(r.response, r.reference),
    MetricType.TOOL_CALL.value: lambda r: compute_tool_call_score(r.tool_calls, r.expected_tool_calls),
}


def is_computation_metric(metric_type: MetricType | str) -> bool:
    """Whether the metric type is scored by a closed-form algorithm"""
    return metric_type_value(metric_type) in COMPUTATION_SCORERS


def score_record(metric_type: MetricType | str, record: DataRecord) -> float:
    """
    Score one record with a computation-based metric

    Args:
        metric_type: Metric type (enum member or raw string)
        record: Record to score

    Returns:
        Score in the range 0.0 to 1.0

    Raises:
        MetricError: When the metric type has no computation scorer
    """
    key = metric_type_value(metric_type)
    scorer = COMPUTATION_SCORERS.get(key)
    if scorer is None:
        raise MetricError(
            f"Unsupported computation metric: {key} (available: {list(COMPUTATION_SCORERS.keys())})"
        )
    return scorer(record)
