"""
Task Loader

Loads evaluation tasks and datasets from JSON / JSONL files.

Task file format:
    {
        "name": "...",
        "dataset": {"name": "...", "data": [{"input": ..., "response": ..., ...}]},
        "metrics": [{"type": "bleu", "weight": 1.0}, ...],
        "custom_metrics": [{"name": "...", "prompt_template": {...}}],
        "model_configs": [{"model_name": "..."}],
        "parallel_execution": false,
        "max_concurrency": 5
    }

"dataset_path" (relative to the task file) may be given instead of "dataset".
"""

import json
from pathlib import Path

from gen_eval_core.domain.value_objects import (
    CustomMetric,
    DataRecord,
    Dataset,
    EvalTask,
    MetricConfig,
    ModelConfig,
)


def _parse_dataset(data: dict | list, source_uri: str = "") -> Dataset:
    """
    Create a Dataset from parsed JSON

    Args:
        data: Either a list of records or {"data": [...], "name": ..., ...}
        source_uri: Where the data came from

    Returns:
        Dataset
    """
    if isinstance(data, list):
        records = data
        info = {}
    else:
        if "data" not in data:
            raise KeyError(f"Required field 'data' is missing: {source_uri or 'dataset'}")
        records = data["data"]
        info = data

    return Dataset(
        data=tuple(DataRecord.from_dict(r) for r in records),
        name=info.get("name", Path(source_uri).stem if source_uri else ""),
        description=info.get("description", ""),
        source=info.get("source", "file" if source_uri else "inline"),
        source_uri=info.get("source_uri", source_uri),
    )


def load_dataset(file_path: str | Path) -> Dataset:
    """
    Load a dataset file

    ".jsonl" files hold one record per line; other files are JSON holding a
    record list or an object with a "data" list.

    Args:
        file_path: Path to the dataset file

    Returns:
        Dataset

    Raises:
        FileNotFoundError: If the file does not exist
        KeyError: If an object-form file has no "data" field
    """
    path = Path(file_path)
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix == ".jsonl":
            records = [json.loads(line) for line in f if line.strip()]
            return _parse_dataset(records, str(path))
        return _parse_dataset(json.load(f), str(path))


def load_eval_task(file_path: str | Path) -> EvalTask:
    """
    Load an evaluation task JSON

    Args:
        file_path: Path to the task JSON file

    Returns:
        EvalTask

    Raises:
        FileNotFoundError: If the task or dataset file does not exist
        KeyError: If a required field is missing
    """
    path = Path(file_path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if "dataset" not in data and "dataset_path" not in data:
        raise KeyError(f"Required field 'dataset' or 'dataset_path' is missing: {file_path}")
    if "metrics" not in data and "custom_metrics" not in data:
        raise KeyError(f"Required field 'metrics' or 'custom_metrics' is missing: {file_path}")

    if "dataset" in data:
        dataset = _parse_dataset(data["dataset"])
    else:
        dataset_path = Path(data["dataset_path"])
        if not dataset_path.is_absolute():
            dataset_path = path.parent / dataset_path
        dataset = load_dataset(dataset_path)

    return EvalTask(
        dataset=dataset,
        metrics=[MetricConfig.from_dict(m) for m in data.get("metrics", [])],
        custom_metrics=[CustomMetric.from_dict(cm) for cm in data.get("custom_metrics", [])],
        experiment=data.get("experiment", ""),
        experiment_run=data.get("experiment_run", ""),
        name=data.get("name", path.stem),
        description=data.get("description", ""),
        model_configs=[ModelConfig.from_dict(mc) for mc in data.get("model_configs", [])],
        parallel_execution=bool(data.get("parallel_execution", False)),
        max_concurrency=int(data.get("max_concurrency", 0)),
    )
