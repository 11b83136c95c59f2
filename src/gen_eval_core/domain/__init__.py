"""
Domain Layer

Defines constants, entities, value objects and errors that form the core of
the evaluation engine. Has no dependencies on external libraries.
"""

from gen_eval_core.domain.constants import (
    CANCELLED_ERROR,
    COMPUTATION_METRICS,
    DEFAULT_JUDGE_MODEL,
    DEFAULT_MAX_CONCURRENCY,
    MODEL_BASED_METRICS,
    REFERENCE_METRICS,
    TEMPLATE_METRICS,
    MetricType,
    ScoreType,
    metric_type_value,
)
from gen_eval_core.domain.entities import (
    BatchEvaluationResult,
    ComparisonResult,
    DatasetInfo,
    EvaluationResult,
    HealthCheckResult,
    MetricComparison,
    MetricResult,
    ModelRanking,
    RecordResult,
)
from gen_eval_core.domain.errors import (
    ConfigurationError,
    EvaluationError,
    MetricError,
    RecordError,
    ValidationError,
)
from gen_eval_core.domain.value_objects import (
    CustomMetric,
    DataRecord,
    Dataset,
    EvalTask,
    MetricConfig,
    ModelConfig,
    ModelResponse,
    PromptTemplate,
    ScoreRange,
    ScoringResult,
    ToolCall,
)

__all__ = [
    # constants
    "CANCELLED_ERROR",
    "COMPUTATION_METRICS",
    "DEFAULT_JUDGE_MODEL",
    "DEFAULT_MAX_CONCURRENCY",
    "MODEL_BASED_METRICS",
    "REFERENCE_METRICS",
    "TEMPLATE_METRICS",
    "MetricType",
    "ScoreType",
    "metric_type_value",
    # entities
    "BatchEvaluationResult",
    "ComparisonResult",
    "DatasetInfo",
    "EvaluationResult",
    "HealthCheckResult",
    "MetricComparison",
    "MetricResult",
    "ModelRanking",
    "RecordResult",
    # errors
    "ConfigurationError",
    "EvaluationError",
    "MetricError",
    "RecordError",
    "ValidationError",
    # value objects
    "CustomMetric",
    "DataRecord",
    "Dataset",
    "EvalTask",
    "MetricConfig",
    "ModelConfig",
    "ModelResponse",
    "PromptTemplate",
    "ScoreRange",
    "ScoringResult",
    "ToolCall",
]
