"""
Domain Entities

Defines the result structures populated while an evaluation runs.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from gen_eval_core.domain.constants import ScoreType
from gen_eval_core.domain.value_objects import ModelConfig


@dataclass
class RecordResult:
    """Evaluation result for a single record"""
    index: int
    score: float = 0.0
    explanation: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    error: str = ""


@dataclass
class MetricResult:
    """Result of a single metric over the whole dataset"""
    metric_name: str
    metric_type: str
    score: float = 0.0
    score_type: str = ScoreType.NUMERIC.value
    details: dict[str, Any] = field(default_factory=dict)
    record_results: list[RecordResult] = field(default_factory=list)
    error: str = ""
    compute_time: float = 0.0  # seconds

    @property
    def succeeded(self) -> bool:
        return not self.error


@dataclass
class DatasetInfo:
    """Snapshot of the evaluated dataset"""
    name: str
    record_count: int
    source: str = ""
    source_uri: str = ""
    schema: dict[str, str] = field(default_factory=dict)


@dataclass
class EvaluationResult:
    """Complete result of one task run"""
    task_name: str
    experiment: str = ""
    experiment_run: str = ""
    metric_results: list[MetricResult] = field(default_factory=list)
    overall_score: float = 0.0
    model_config: ModelConfig | None = None
    dataset_info: DatasetInfo | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float = 0.0  # seconds
    summary: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def get_metric_result(self, metric_name: str) -> MetricResult | None:
        for metric_result in self.metric_results:
            if metric_result.metric_name == metric_name:
                return metric_result
        return None

    def get_metric_score(self, metric_name: str) -> float:
        """Score of the named metric (0.0 when absent or failed)"""
        metric_result = self.get_metric_result(metric_name)
        if metric_result is None or not metric_result.succeeded:
            return 0.0
        return metric_result.score

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary"""
        return _jsonable(asdict(self))


@dataclass
class ModelRanking:
    """A model's standing for one metric"""
    model_name: str
    score: float
    rank: int = 0


@dataclass
class MetricComparison:
    """Cross-configuration comparison for one metric"""
    metric_name: str
    best_score: float
    worst_score: float
    score_range: float
    rankings: list[ModelRanking] = field(default_factory=list)


@dataclass
class ComparisonResult:
    """Comparative analysis of several evaluations"""
    best_model: str
    metric_comparisons: dict[str, MetricComparison] = field(default_factory=dict)
    summary: str = ""


@dataclass
class BatchEvaluationResult:
    """Results of evaluating several model configurations"""
    results: list[EvaluationResult] = field(default_factory=list)
    comparison: ComparisonResult | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float = 0.0  # seconds

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary"""
        return _jsonable(asdict(self))


@dataclass
class HealthCheckResult:
    """Health check result"""
    model_name: str
    success: bool
    latency_ms: int | None
    error: str | None


def _jsonable(value: Any) -> Any:
    """Recursively convert datetimes, enums, tuples and non-finite floats into JSON-friendly values"""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value
