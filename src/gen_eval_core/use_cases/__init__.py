"""
Use Cases Layer

Aggregates business logic and provides use cases called from the runner.
"""

from gen_eval_core.use_cases.aggregation import (
    calculate_overall_score,
    generate_comparison,
    generate_summary,
    metric_weights,
    resolved_weight,
)
from gen_eval_core.use_cases.evaluation import EvaluationEngine
from gen_eval_core.use_cases.health_check import (
    HEALTH_CHECK_PROMPT,
    health_check_model,
    run_health_check,
    get_model_based_metrics,
    run_judge_health_check,
)
from gen_eval_core.use_cases.reporting import (
    batch_summary_frame,
    metric_results_frame,
    record_results_frame,
    save_batch_result,
    save_evaluation_result,
)
from gen_eval_core.use_cases.validation import validate_task

__all__ = [
    # aggregation
    "calculate_overall_score",
    "generate_comparison",
    "generate_summary",
    "metric_weights",
    "resolved_weight",
    # evaluation
    "EvaluationEngine",
    # health_check
    "HEALTH_CHECK_PROMPT",
    "health_check_model",
    "run_health_check",
    "get_model_based_metrics",
    "run_judge_health_check",
    # reporting
    "batch_summary_frame",
    "metric_results_frame",
    "record_results_frame",
    "save_batch_result",
    "save_evaluation_result",
    # validation
    "validate_task",
]
