"""
Result Reporting

Tabular views of evaluation results and writers for the result files read
by the viewer.
"""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from gen_eval_core.domain.entities import BatchEvaluationResult, EvaluationResult

METRIC_COLUMNS = [
    "metric_name", "metric_type", "score", "score_type",
    "successful_records", "failed_records", "compute_time", "error",
]
RECORD_COLUMNS = ["metric_name", "index", "score", "explanation", "error"]


def metric_results_frame(result: EvaluationResult) -> pd.DataFrame:
    """
    One row per metric result

    Args:
        result: Evaluation result

    Returns:
        pd.DataFrame with METRIC_COLUMNS
    """
    rows = []
    for mr in result.metric_results:
        failed = sum(1 for rr in mr.record_results if rr.error)
        rows.append({
            "metric_name": mr.metric_name,
            "metric_type": mr.metric_type,
            "score": mr.score,
            "score_type": mr.score_type,
            "successful_records": len(mr.record_results) - failed,
            "failed_records": failed,
            "compute_time": mr.compute_time,
            "error": mr.error,
        })
    return pd.DataFrame(rows, columns=METRIC_COLUMNS)


def record_results_frame(result: EvaluationResult) -> pd.DataFrame:
    """One row per (metric, record)"""
    rows = [
        {
            "metric_name": mr.metric_name,
            "index": rr.index,
            "score": rr.score,
            "explanation": rr.explanation,
            "error": rr.error,
        }
        for mr in result.metric_results
        for rr in mr.record_results
    ]
    return pd.DataFrame(rows, columns=RECORD_COLUMNS)


def batch_summary_frame(batch: BatchEvaluationResult) -> pd.DataFrame:
    """
    Model x metric score table of a batch evaluation

    Rows are model names, columns are metric names plus "overall_score".
    Failed metrics are left empty (NaN).

    Args:
        batch: Batch evaluation result

    Returns:
        pd.DataFrame indexed by model name
    """
    rows = []
    for result in batch.results:
        model_name = result.model_config.model_name if result.model_config else result.experiment_run
        row = {"model_name": model_name, "overall_score": result.overall_score}
        for mr in result.metric_results:
            row[mr.metric_name] = mr.score if mr.succeeded else float("nan")
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=["overall_score"])
    return pd.DataFrame(rows).set_index("model_name")


def _run_label(result: EvaluationResult) -> str:
    label = result.experiment_run or result.task_name or "evaluation"
    return "".join(c if c.isalnum() or c in "-_." else "_" for c in label)


def save_evaluation_result(result: EvaluationResult, output_dir: str | Path) -> tuple[Path, Path]:
    """
    Save an evaluation result as JSON plus a per-record CSV

    Args:
        result: Evaluation result
        output_dir: Output directory (created if missing)

    Returns:
        (json_path, records_csv_path)
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    label = _run_label(result)
    json_path = output_dir / f"result_{label}.json"
    csv_path = output_dir / f"records_{label}.csv"

    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
    record_results_frame(result).to_csv(csv_path, index=False)

    return json_path, csv_path


def save_batch_result(batch: BatchEvaluationResult, output_dir: str | Path, run_id: str) -> tuple[Path, Path]:
    """
    Save a batch evaluation as JSON plus the model x metric summary CSV

    Args:
        batch: Batch evaluation result
        output_dir: Output directory (created if missing)
        run_id: Suffix for the file names

    Returns:
        (json_path, summary_csv_path)
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    json_path = output_dir / f"batch_{run_id}.json"
    csv_path = output_dir / f"batch_summary_{run_id}.csv"

    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(batch.to_dict(), f, ensure_ascii=False, indent=2)
    batch_summary_frame(batch).to_csv(csv_path)

    return json_path, csv_path
