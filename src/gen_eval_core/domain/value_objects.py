"""
Domain Value Objects

Defines the immutable inputs of an evaluation (records, datasets, templates,
metric and model configurations) and the small values exchanged with
scorers and model clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from gen_eval_core.domain.constants import (
    MetricType,
    ScoreType,
    metric_type_value,
)


@dataclass(frozen=True)
class ToolCall:
    """A tool call made (or expected to be made) by the model"""
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "ToolCall":
        return cls(name=data["name"], arguments=dict(data.get("arguments") or {}))


@dataclass(frozen=True)
class DataRecord:
    """One evaluation unit"""
    input: str = ""
    response: str = ""
    reference: str = ""
    context: str = ""
    image_url: str = ""
    video_url: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    tool_calls: tuple[ToolCall, ...] = ()
    expected_tool_calls: tuple[ToolCall, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "DataRecord":
        """Create a record from a JSON-style dictionary (missing fields become empty)"""
        return cls(
            input=data.get("input", "") or "",
            response=data.get("response", "") or "",
            reference=data.get("reference", "") or "",
            context=data.get("context", "") or "",
            image_url=data.get("image_url", "") or "",
            video_url=data.get("video_url", "") or "",
            metadata=dict(data.get("metadata") or {}),
            tool_calls=tuple(ToolCall.from_dict(tc) for tc in data.get("tool_calls") or []),
            expected_tool_calls=tuple(
                ToolCall.from_dict(tc) for tc in data.get("expected_tool_calls") or []
            ),
        )


@dataclass(frozen=True)
class Dataset:
    """Ordered evaluation records plus descriptive metadata"""
    data: tuple[DataRecord, ...] = ()
    name: str = ""
    description: str = ""
    source: str = ""
    source_uri: str = ""

    def __post_init__(self):
        # Accept any sequence of records but store a tuple
        if not isinstance(self.data, tuple):
            object.__setattr__(self, "data", tuple(self.data))

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ScoreRange:
    """Expected range for numeric scores"""
    min: float
    max: float


@dataclass(frozen=True)
class PromptTemplate:
    """Evaluation prompt template"""
    template: str
    variables: tuple[str, ...] = ()
    description: str = ""
    score_range: ScoreRange | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "PromptTemplate":
        score_range = data.get("score_range")
        return cls(
            template=data["template"],
            variables=tuple(data.get("variables") or ()),
            description=data.get("description", ""),
            score_range=ScoreRange(**score_range) if score_range else None,
        )


@dataclass
class MetricConfig:
    """Configuration of one built-in metric"""
    type: MetricType | str
    name: str = ""
    weight: float = 1.0
    parameters: dict[str, Any] = field(default_factory=dict)
    prompt_template: PromptTemplate | None = None
    score_type: ScoreType | str = ScoreType.NUMERIC
    threshold: float = 0.0

    @property
    def display_name(self) -> str:
        """Name used in results and for weight lookup"""
        return self.name or metric_type_value(self.type)

    @classmethod
    def from_dict(cls, data: dict) -> "MetricConfig":
        template = data.get("prompt_template")
        return cls(
            type=data["type"],
            name=data.get("name", ""),
            weight=float(data.get("weight", 1.0)),
            parameters=dict(data.get("parameters") or {}),
            prompt_template=PromptTemplate.from_dict(template) if template else None,
            score_type=data.get("score_type", ScoreType.NUMERIC),
            threshold=float(data.get("threshold", 0.0)),
        )


@dataclass
class CustomMetric:
    """User-defined pointwise / pairwise metric"""
    name: str
    prompt_template: PromptTemplate | None
    type: MetricType | str = MetricType.POINTWISE
    description: str = ""
    score_type: ScoreType | str = ScoreType.NUMERIC
    model: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_metric_config(self) -> MetricConfig:
        """Convert to an ad-hoc MetricConfig at dispatch time"""
        weight = self.parameters.get("weight", 1.0)
        return MetricConfig(
            type=self.type,
            name=self.name,
            weight=float(weight) if isinstance(weight, (int, float)) else 1.0,
            parameters=self.parameters,
            prompt_template=self.prompt_template,
            score_type=self.score_type,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "CustomMetric":
        template = data.get("prompt_template")
        return cls(
            name=data["name"],
            prompt_template=PromptTemplate.from_dict(template) if template else None,
            type=data.get("type", MetricType.POINTWISE),
            description=data.get("description", ""),
            score_type=data.get("score_type", ScoreType.NUMERIC),
            model=data.get("model", ""),
            parameters=dict(data.get("parameters") or {}),
        )


@dataclass
class ModelConfig:
    """Model configuration compared in batch evaluation"""
    model_name: str
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    max_tokens: int | None = None
    system_instruction: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "ModelConfig":
        return cls(
            model_name=data["model_name"],
            temperature=data.get("temperature"),
            top_p=data.get("top_p"),
            top_k=data.get("top_k"),
            max_tokens=data.get("max_tokens"),
            system_instruction=data.get("system_instruction", ""),
            parameters=dict(data.get("parameters") or {}),
        )


@dataclass
class EvalTask:
    """Evaluation task: a dataset plus the metrics to compute over it"""
    dataset: Dataset | None
    metrics: list[MetricConfig] = field(default_factory=list)
    custom_metrics: list[CustomMetric] = field(default_factory=list)
    experiment: str = ""
    experiment_run: str = ""
    name: str = ""
    description: str = ""
    model_configs: list[ModelConfig] = field(default_factory=list)
    parallel_execution: bool = False
    max_concurrency: int = 0


@dataclass
class ScoringResult:
    """Scoring result (score + scoring reason)"""

    score: float
    reason: str | None = None


@dataclass
class ModelResponse:
    """Model response"""
    output: str
    latency_ms: int
    model_name: str
    input_tokens: int = 0
    output_tokens: int = 0
