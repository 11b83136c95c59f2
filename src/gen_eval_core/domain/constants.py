"""
Domain Constants

Centrally manages metric identifiers and defaults shared across the engine.
"""

from enum import Enum


class MetricType(str, Enum):
    """Evaluation metric identifiers"""

    # Computation-based metrics
    BLEU = "bleu"
    ROUGE_1 = "rouge_1"
    ROUGE_2 = "rouge_2"
    ROUGE_L = "rouge_l"
    ROUGE_L_SUM = "rouge_l_sum"
    EXACT_MATCH = "exact_match"
    TOOL_CALL = "tool_call_quality"

    # Model-based metrics
    COHERENCE = "coherence"
    FLUENCY = "fluency"
    SAFETY = "safety"
    GROUNDEDNESS = "groundedness"
    INSTRUCTION_FOLLOWING = "instruction_following"
    VERBOSITY = "verbosity"
    SUMMARIZATION_QUALITY = "summarization_quality"
    FULFILLMENT = "fulfillment"
    HELPFULNESS = "helpfulness"

    # Multi-modal metrics
    IMAGE_DESCRIPTION_QUALITY = "image_description_quality"
    MULTIMODAL_COHERENCE = "multimodal_coherence"

    # Custom metrics
    POINTWISE = "pointwise"
    PAIRWISE = "pairwise"
    CUSTOM = "custom"


class ScoreType(str, Enum):
    """Type of score returned by a metric"""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    BOOLEAN = "boolean"


# Metrics that need reference + response on every record
REFERENCE_METRICS = frozenset({
    MetricType.BLEU,
    MetricType.ROUGE_1,
    MetricType.ROUGE_2,
    MetricType.ROUGE_L,
    MetricType.ROUGE_L_SUM,
    MetricType.EXACT_MATCH,
})

COMPUTATION_METRICS = REFERENCE_METRICS | {MetricType.TOOL_CALL}

# Model-based metrics backed by a built-in pointwise template
MODEL_BASED_METRICS = frozenset({
    MetricType.COHERENCE,
    MetricType.FLUENCY,
    MetricType.SAFETY,
    MetricType.GROUNDEDNESS,
    MetricType.INSTRUCTION_FOLLOWING,
    MetricType.VERBOSITY,
    MetricType.SUMMARIZATION_QUALITY,
    MetricType.FULFILLMENT,
    MetricType.HELPFULNESS,
    MetricType.IMAGE_DESCRIPTION_QUALITY,
    MetricType.MULTIMODAL_COHERENCE,
})

# Metric types whose prompt comes from the metric configuration itself
TEMPLATE_METRICS = frozenset({
    MetricType.POINTWISE,
    MetricType.PAIRWISE,
    MetricType.CUSTOM,
})

# Parallel metric fan-out when the task does not set max_concurrency
DEFAULT_MAX_CONCURRENCY = 5

# Judge model used when neither the metric nor the config names one
DEFAULT_JUDGE_MODEL = "gemini-2.0-flash-001"

# Error text for units skipped after cancellation
CANCELLED_ERROR = "cancelled"


def metric_type_value(metric_type: "MetricType | str") -> str:
    """Plain string form of a metric type (enum member or raw string)"""
    if isinstance(metric_type, Enum):
        return metric_type.value
    return str(metric_type)
