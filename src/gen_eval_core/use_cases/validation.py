"""
Task Validation

Checks an EvalTask before any scoring starts. Validation is read-only and
fails fast with a ValidationError naming the metric and record at fault.
"""

from gen_eval_core.domain.constants import MetricType, REFERENCE_METRICS, metric_type_value
from gen_eval_core.domain.errors import ValidationError
from gen_eval_core.domain.value_objects import EvalTask


def validate_task(task: EvalTask) -> None:
    """
    Validate an evaluation task

    Args:
        task: Task to validate

    Raises:
        ValidationError: When the dataset is missing or empty, no metric is
            configured, or a record lacks a field a configured metric needs
    """
    if task.dataset is None or len(task.dataset) == 0:
        raise ValidationError("dataset is required and must contain at least one record")

    if not task.metrics and not task.custom_metrics:
        raise ValidationError("at least one metric or custom metric is required")

    for metric in task.metrics:
        metric_type = metric_type_value(metric.type)

        if metric_type in REFERENCE_METRICS:
            for i, record in enumerate(task.dataset.data):
                if not record.reference:
                    raise ValidationError(f"record {i}: reference is required for metric {metric_type}")
                if not record.response:
                    raise ValidationError(f"record {i}: response is required for metric {metric_type}")

        elif metric_type == MetricType.TOOL_CALL:
            for i, record in enumerate(task.dataset.data):
                if not record.expected_tool_calls:
                    raise ValidationError(
                        f"record {i}: expected_tool_calls is required for metric {metric_type}"
                    )
