"""
Evaluation Execution

Runs an EvalTask: validation, metric dispatch (sequential or parallel),
result collection and aggregation. Batch evaluation repeats this per model
configuration and compares the results.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Callable, Union

from gen_eval_core.domain.constants import CANCELLED_ERROR, DEFAULT_MAX_CONCURRENCY, metric_type_value
from gen_eval_core.domain.entities import (
    BatchEvaluationResult,
    DatasetInfo,
    EvaluationResult,
    MetricResult,
    RecordResult,
)
from gen_eval_core.domain.errors import ConfigurationError, MetricError
from gen_eval_core.domain.value_objects import (
    CustomMetric,
    DataRecord,
    Dataset,
    EvalTask,
    MetricConfig,
    ModelConfig,
)
from gen_eval_core.harness_config import EngineConfig, load_config
from gen_eval_core.infrastructure.model_evaluator import ModelEvaluator, ResponseGenerator
from gen_eval_core.prompt_templates import DEFAULT_REGISTRY, PromptTemplateRegistry
from gen_eval_core.scoring.llm_judge import ModelJudgeScorer
from gen_eval_core.scoring.scorer import COMPUTATION_SCORERS, is_computation_metric
from gen_eval_core.use_cases.aggregation import (
    calculate_overall_score,
    generate_comparison,
    generate_summary,
    resolved_weight,
)
from gen_eval_core.use_cases.validation import validate_task

module_logger = logging.getLogger(__name__)

# (record) -> (score, explanation)
_RecordScorer = Callable[[DataRecord], tuple[float, str]]

ResponseGeneratorLike = Union[ResponseGenerator, Callable[[DataRecord, ModelConfig], str]]


def _is_cancelled(cancel_event: threading.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def _dataset_schema(dataset: Dataset) -> dict[str, str]:
    """Record fields populated in at least one record"""
    schema = {}
    for field_name in ("input", "response", "reference", "context", "image_url", "video_url"):
        if any(getattr(record, field_name) for record in dataset.data):
            schema[field_name] = "string"
    if any(record.tool_calls for record in dataset.data):
        schema["tool_calls"] = "list"
    if any(record.expected_tool_calls for record in dataset.data):
        schema["expected_tool_calls"] = "list"
    return schema


class EvaluationEngine:
    """
    Evaluation task orchestrator

    Dataset and template registry are shared read-only between concurrent
    metric units. The model evaluator is the only collaborator that leaves
    the process.
    """

    def __init__(
        self,
        model_evaluator: ModelEvaluator | None = None,
        registry: PromptTemplateRegistry = DEFAULT_REGISTRY,
        config: EngineConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Args:
            model_evaluator: Judge collaborator (required for model-based metrics)
            registry: Prompt template registry
            config: EngineConfig (loads from env if not provided)
            logger: Logger for progress and failure events
        """
        if config is None:
            config = load_config()
        self._config = config
        self._registry = registry
        self._model_evaluator = model_evaluator
        self._judge = ModelJudgeScorer(model_evaluator, registry) if model_evaluator else None
        self._logger = logger or module_logger

    # ------------------------------------------------------------------
    # Single task
    # ------------------------------------------------------------------

    def evaluate(
        self,
        task: EvalTask,
        run_name: str = "",
        *,
        cancel_event: threading.Event | None = None,
    ) -> EvaluationResult:
        """
        Evaluate a task

        Args:
            task: Evaluation task
            run_name: Experiment run name (task.experiment_run if empty)
            cancel_event: Once set, no new metric or record is started

        Returns:
            EvaluationResult

        Raises:
            ValidationError: When the task is malformed
            ConfigurationError: When model-based metrics are configured
                without a model evaluator
        """
        start_time = datetime.now()
        started = time.time()

        self._logger.info(
            "Starting evaluation: task=%s run=%s records=%d metrics=%d custom_metrics=%d",
            task.name, run_name,
            len(task.dataset) if task.dataset is not None else 0,
            len(task.metrics), len(task.custom_metrics),
        )

        validate_task(task)
        self._check_collaborators(task)

        parallel = task.parallel_execution or self._config.execution.parallel_execution
        max_concurrency = self._max_concurrency(task)

        if parallel:
            metric_results = self._evaluate_parallel(task, max_concurrency, cancel_event)
        else:
            metric_results = self._evaluate_sequential(task, cancel_event)

        dataset = task.dataset
        result = EvaluationResult(
            task_name=task.name,
            experiment=task.experiment,
            experiment_run=run_name or task.experiment_run,
            metric_results=metric_results,
            overall_score=calculate_overall_score(task, metric_results),
            model_config=task.model_configs[0] if len(task.model_configs) == 1 else None,
            dataset_info=DatasetInfo(
                name=dataset.name,
                record_count=len(dataset),
                source=dataset.source,
                source_uri=dataset.source_uri,
                schema=_dataset_schema(dataset),
            ),
            start_time=start_time,
            metadata={
                "parallel_execution": parallel,
                "max_concurrency": max_concurrency if parallel else 1,
                "cancelled": _is_cancelled(cancel_event),
            },
        )
        result.end_time = datetime.now()
        result.duration = time.time() - started
        result.summary = generate_summary(result)

        self._logger.info(
            "Evaluation completed: task=%s overall_score=%.3f duration=%.2fs",
            task.name, result.overall_score, result.duration,
        )
        return result

    def _max_concurrency(self, task: EvalTask) -> int:
        if task.max_concurrency > 0:
            return task.max_concurrency
        if self._config.execution.max_concurrency > 0:
            return self._config.execution.max_concurrency
        return DEFAULT_MAX_CONCURRENCY

    def _check_collaborators(self, task: EvalTask) -> None:
        needs_judge = bool(task.custom_metrics) or any(
            not is_computation_metric(metric.type) for metric in task.metrics
        )
        if needs_judge and self._config.judge.enabled and self._judge is None:
            raise ConfigurationError(
                "model-based metrics are configured but no model evaluator was provided"
            )

    def _run_unit(
        self,
        name: str,
        metric_type: str,
        unit: Callable[[], MetricResult],
        cancel_event: threading.Event | None,
    ) -> MetricResult:
        """Run one metric unit, converting any failure into an errored MetricResult"""
        if _is_cancelled(cancel_event):
            return MetricResult(metric_name=name, metric_type=metric_type, error=CANCELLED_ERROR)
        started = time.time()
        try:
            return unit()
        except Exception as e:
            self._logger.error("Metric %s failed: %s", name, e)
            return MetricResult(
                metric_name=name,
                metric_type=metric_type,
                error=str(e) or type(e).__name__,
                compute_time=time.time() - started,
            )

    def _typed_units(self, task: EvalTask, cancel_event: threading.Event | None):
        for metric in task.metrics:
            yield (
                metric.display_name,
                metric_type_value(metric.type),
                lambda m=metric: self.evaluate_metric(task.dataset, m, cancel_event=cancel_event),
            )
        for custom_metric in task.custom_metrics:
            yield (
                custom_metric.name,
                metric_type_value(custom_metric.type),
                lambda cm=custom_metric: self.evaluate_custom_metric(
                    task.dataset, cm, cancel_event=cancel_event
                ),
            )

    def _evaluate_sequential(
        self,
        task: EvalTask,
        cancel_event: threading.Event | None,
    ) -> list[MetricResult]:
        return [
            self._run_unit(name, metric_type, unit, cancel_event)
            for name, metric_type, unit in self._typed_units(task, cancel_event)
        ]

    def _evaluate_parallel(
        self,
        task: EvalTask,
        max_concurrency: int,
        cancel_event: threading.Event | None,
    ) -> list[MetricResult]:
        """One unit per metric on a bounded pool; results in completion order"""
        results = []
        with ThreadPoolExecutor(max_workers=max_concurrency) as executor:
            futures = {
                executor.submit(self._run_unit, name, metric_type, unit, cancel_event): name
                for name, metric_type, unit in self._typed_units(task, cancel_event)
            }
            for future in as_completed(futures):
                results.append(future.result())
        return results

    # ------------------------------------------------------------------
    # Single metric
    # ------------------------------------------------------------------

    def evaluate_metric(
        self,
        dataset: Dataset,
        metric: MetricConfig,
        *,
        cancel_event: threading.Event | None = None,
    ) -> MetricResult:
        """
        Evaluate one built-in metric over a dataset

        Args:
            dataset: Records to score
            metric: Metric configuration
            cancel_event: Once set, remaining records are marked cancelled

        Returns:
            MetricResult (mean over successfully scored records)

        Raises:
            MetricError: When the metric type is unsupported or has no usable template
        """
        judge_model = metric.parameters.get("model") or self._config.judge.judge_model
        return self._score_dataset(dataset, metric, judge_model, cancel_event)

    def evaluate_custom_metric(
        self,
        dataset: Dataset,
        custom_metric: CustomMetric,
        *,
        cancel_event: threading.Event | None = None,
    ) -> MetricResult:
        """
        Evaluate a user-defined pointwise / pairwise metric

        The judge model is custom_metric.model, falling back to the
        configured judge model.
        """
        judge_model = custom_metric.model or self._config.judge.judge_model
        return self._score_dataset(dataset, custom_metric.to_metric_config(), judge_model, cancel_event)

    def _record_scorer(self, metric: MetricConfig, judge_model: str) -> _RecordScorer:
        """Resolve how each record of the metric is scored"""
        metric_type = metric_type_value(metric.type)

        computation = COMPUTATION_SCORERS.get(metric_type)
        if computation is not None:
            return lambda record: (computation(record), "")

        if not self._config.judge.enabled:
            raise MetricError(f"{metric.display_name}: model-based judging is disabled")
        if self._judge is None:
            raise ConfigurationError(f"{metric.display_name}: no model evaluator configured")

        judge = self._judge
        template = judge.resolve_template(metric)

        def _judge_record(record: DataRecord) -> tuple[float, str]:
            scoring = judge.evaluate(record, template, judge_model)
            return scoring.score, scoring.reason or ""

        return _judge_record

    def _score_dataset(
        self,
        dataset: Dataset,
        metric: MetricConfig,
        judge_model: str,
        cancel_event: threading.Event | None,
    ) -> MetricResult:
        started = time.time()
        scorer = self._record_scorer(metric, judge_model)

        record_results = [
            self._score_record(i, record, scorer, metric, cancel_event)
            for i, record in enumerate(dataset.data)
        ]
        scores = [rr.score for rr in record_results if not rr.error]

        result = MetricResult(
            metric_name=metric.display_name,
            metric_type=metric_type_value(metric.type),
            score=sum(scores) / len(scores) if scores else 0.0,
            score_type=metric_type_value(metric.score_type),
            details={
                "record_count": len(record_results),
                "successful_records": len(scores),
                "failed_records": len(record_results) - len(scores),
                "weight": resolved_weight(metric),
            },
            record_results=record_results,
            compute_time=time.time() - started,
        )
        if metric.threshold:
            result.details["threshold"] = metric.threshold
            result.details["passed"] = result.score >= metric.threshold
        return result

    def _score_record(
        self,
        index: int,
        record: DataRecord,
        scorer: _RecordScorer,
        metric: MetricConfig,
        cancel_event: threading.Event | None,
    ) -> RecordResult:
        """Score one record; any failure is recorded on the record only"""
        if _is_cancelled(cancel_event):
            return RecordResult(index=index, error=CANCELLED_ERROR)
        try:
            score, explanation = scorer(record)
        except Exception as e:
            self._logger.warning(
                "Record %d failed for metric %s: %s", index, metric.display_name, e
            )
            return RecordResult(index=index, error=str(e) or type(e).__name__)

        if math.isnan(score):
            self._logger.warning("Record %d scored NaN for metric %s", index, metric.display_name)
            return RecordResult(index=index, error=f"{metric.display_name} score is NaN")
        return RecordResult(index=index, score=score, explanation=explanation)

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def batch_evaluate(
        self,
        task: EvalTask,
        model_configs: list[ModelConfig],
        *,
        response_generator: ResponseGeneratorLike | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchEvaluationResult:
        """
        Evaluate several model configurations against the same task

        Args:
            task: Base task (dataset and metrics)
            model_configs: Configurations to evaluate
            response_generator: Produces each configuration's responses
                (callable or ResponseGenerator); without it the dataset is
                evaluated as-is for every configuration
            cancel_event: Once set, no further configuration is started

        Returns:
            BatchEvaluationResult (comparison set when at least 2 succeed)
        """
        start_time = datetime.now()
        started = time.time()
        self._logger.info(
            "Starting batch evaluation: task=%s configs=%d", task.name, len(model_configs)
        )

        batch = BatchEvaluationResult(start_time=start_time)

        for i, model_config in enumerate(model_configs):
            if _is_cancelled(cancel_event):
                self._logger.info("Batch evaluation cancelled before %s", model_config.model_name)
                break

            run_name = f"batch_eval_{i}_{model_config.model_name}"
            try:
                config_task = dataclasses.replace(task, model_configs=[model_config])
                if response_generator is not None and task.dataset is not None:
                    config_task = dataclasses.replace(
                        config_task,
                        dataset=self._generate_dataset(task.dataset, model_config, response_generator),
                    )
                result = self.evaluate(config_task, run_name, cancel_event=cancel_event)
            except Exception as e:
                self._logger.error(
                    "Failed to evaluate configuration %s: %s", model_config.model_name, e
                )
                continue

            result.model_config = model_config
            batch.results.append(result)

        if len(batch.results) > 1:
            batch.comparison = generate_comparison(batch.results)

        batch.end_time = datetime.now()
        batch.duration = time.time() - started

        self._logger.info(
            "Batch evaluation completed: successful=%d duration=%.2fs",
            len(batch.results), batch.duration,
        )
        return batch

    def _generate_dataset(
        self,
        dataset: Dataset,
        model_config: ModelConfig,
        response_generator: ResponseGeneratorLike,
    ) -> Dataset:
        """Copy of the dataset whose responses come from the configured model"""
        generate = getattr(response_generator, "generate_response", response_generator)
        records = []
        for i, record in enumerate(dataset.data):
            try:
                response = generate(record, model_config)
                records.append(dataclasses.replace(record, response=response or ""))
            except Exception as e:
                self._logger.warning(
                    "Response generation failed for record %d with %s: %s",
                    i, model_config.model_name, e,
                )
                metadata = dict(record.metadata)
                metadata["generation_error"] = str(e)
                records.append(dataclasses.replace(record, response="", metadata=metadata))
        return dataclasses.replace(dataset, data=tuple(records))
