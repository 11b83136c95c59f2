"""
LLM Judge scoring logic

Implements ModelJudgeScorer, which formats a record through a prompt template,
asks an injected model evaluator for a judgement, and parses the rating and
explanation out of the free-text answer.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gen_eval_core.infrastructure.model_evaluator import ModelEvaluator

from gen_eval_core.domain.constants import TEMPLATE_METRICS, metric_type_value
from gen_eval_core.domain.errors import MetricError, RecordError
from gen_eval_core.domain.value_objects import DataRecord, MetricConfig, PromptTemplate, ScoringResult
from gen_eval_core.prompt_builder import build_prompt, validate_template
from gen_eval_core.prompt_templates import DEFAULT_REGISTRY, PromptTemplateRegistry

logger = logging.getLogger(__name__)


class ModelJudgeError(RecordError):
    """Error raised when a judge response cannot be turned into a score"""
    pass


# Regex patterns for rating extraction
_RATING_RE = re.compile(r"rating\s*:\s*(-?\d+(?:\.\d+)?)", re.IGNORECASE)
_PREFERENCE_RE = re.compile(r"preference\s*:\s*(A|B|Tie)\b", re.IGNORECASE)
_LEADING_NUMBER_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)(?!\w)")
_LEADING_PREFERENCE_RE = re.compile(r"^\s*(A|B|Tie)\b", re.IGNORECASE)

# Pairwise preference -> score (share of the comparison won by Response B)
_PREFERENCE_SCORES = {"a": 0.0, "b": 1.0, "tie": 0.5}


def parse_rating(raw: str) -> ScoringResult:
    """
    Extract score and explanation from a judge response

    Parse order:
    1. "Rating: <number>" anywhere (case-insensitive)
    2. A number at the very start (the model continued the template's
       trailing "Rating:" line)
    3. ModelJudgeError

    The explanation is the stripped text after the matched token.

    Args:
        raw: Raw model output

    Returns:
        ScoringResult (score + explanation)

    Raises:
        ModelJudgeError: When no rating can be found
    """
    text = raw or ""

    m = _RATING_RE.search(text) or _LEADING_NUMBER_RE.match(text)
    if m:
        return ScoringResult(score=float(m.group(1)), reason=text[m.end():].strip())

    raise ModelJudgeError(f"could not parse rating from response: {text[:200]}")


def parse_preference(raw: str) -> ScoringResult:
    """
    Extract a pairwise preference from a judge response

    Accepts "Preference: A|B|Tie" anywhere, or A/B/Tie at the very start.
    A scores 0.0, B scores 1.0 and Tie scores 0.5.

    Args:
        raw: Raw model output

    Returns:
        ScoringResult (score + explanation)

    Raises:
        ModelJudgeError: When no preference can be found
    """
    text = raw or ""

    m = _PREFERENCE_RE.search(text) or _LEADING_PREFERENCE_RE.match(text)
    if m:
        return ScoringResult(
            score=_PREFERENCE_SCORES[m.group(1).lower()],
            reason=text[m.end():].strip(),
        )

    raise ModelJudgeError(f"could not parse preference from response: {text[:200]}")


def is_preference_template(template: PromptTemplate) -> bool:
    """Whether the template asks for an A/B/Tie preference instead of a rating"""
    return template.template.rstrip().lower().endswith("preference:")


class ModelJudgeScorer:
    """
    Scorer that uses a generative model as a grader

    The evaluator is the only call in the engine that leaves the process; it
    may block on network I/O and may fail. Failures propagate to the caller,
    which records them against the record being scored.
    """

    def __init__(
        self,
        evaluator: ModelEvaluator,
        registry: PromptTemplateRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self._evaluator = evaluator
        self._registry = registry

    def resolve_template(self, metric: MetricConfig) -> PromptTemplate:
        """
        Pick the prompt template for a model-based metric

        The metric's own template wins; otherwise the registry's built-in
        pointwise template for the metric type is used.

        Raises:
            MetricError: When no usable template exists
        """
        template = metric.prompt_template
        if template is None:
            if metric_type_value(metric.type) in TEMPLATE_METRICS:
                raise MetricError(
                    f"{metric.display_name}: {metric_type_value(metric.type)} metrics require a prompt_template"
                )
            template = self._registry.template_for_metric(metric.type)
        if template is None:
            raise MetricError(f"Unsupported metric type: {metric_type_value(metric.type)}")
        validate_template(template)
        return template

    def evaluate(
        self,
        record: DataRecord,
        template: PromptTemplate,
        model_name: str,
    ) -> ScoringResult:
        """
        Have the judge model score one record

        Args:
            record: Record to score
            template: Evaluation prompt template
            model_name: Judge model to ask

        Returns:
            ScoringResult (score + explanation)

        Raises:
            ModelJudgeError: When the response has no parseable rating
            Exception: Whatever the evaluator raises
        """
        prompt = build_prompt(template, record)
        raw = self._evaluator.evaluate_with_model(prompt, model_name)
        logger.debug("Judge %s answered %d characters", model_name, len(raw or ""))
        if is_preference_template(template):
            return parse_preference(raw)
        return parse_rating(raw)
