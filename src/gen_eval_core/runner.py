"""
gen-eval-core CLI Runner

Minimal CLI for running an evaluation task.

Usage:
    python -m gen_eval_core.runner --task tasks/summarization_task.json
    python -m gen_eval_core.runner --task tasks/summarization_task.json --parallel --max-concurrency 4

Compare model configurations (responses are generated by each model):
    python -m gen_eval_core.runner --task tasks/summarization_task.json --models gemini-2.5-flash,claude-haiku-4-5-20251001
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from functools import partial

from dotenv import load_dotenv

from gen_eval_core.domain.entities import BatchEvaluationResult, EvaluationResult
from gen_eval_core.domain.errors import EvaluationError
from gen_eval_core.domain.value_objects import ModelConfig
from gen_eval_core.harness_config import load_config
from gen_eval_core.infrastructure.model_clients import create_client
from gen_eval_core.infrastructure.model_evaluator import ClientModelEvaluator, ClientResponseGenerator
from gen_eval_core.task_loader import load_eval_task
from gen_eval_core.use_cases.evaluation import EvaluationEngine
from gen_eval_core.use_cases.health_check import (
    get_model_based_metrics,
    run_health_check,
    run_judge_health_check,
)
from gen_eval_core.use_cases.reporting import (
    batch_summary_frame,
    save_batch_result,
    save_evaluation_result,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="gen-eval-core: Evaluate generative model outputs",
    )
    parser.add_argument(
        "--task",
        required=True,
        help="Path to the evaluation task JSON file",
    )
    parser.add_argument(
        "--models",
        default=None,
        help="Comma-separated list of model names for batch evaluation (default: task model_configs)",
    )
    parser.add_argument(
        "--run-name",
        default=None,
        help="Experiment run name (default: timestamp)",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Evaluate metrics in parallel",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum number of metrics evaluated at once (default: EVAL_MAX_CONCURRENCY from .env)",
    )
    parser.add_argument(
        "--output-dir",
        default="results",
        help="Directory for output JSON / CSV files (default: results)",
    )
    parser.add_argument(
        "--skip-health-check",
        action="store_true",
        help="Skip model and judge connectivity checks",
    )
    return parser.parse_args(argv)


def _print_result(result: EvaluationResult) -> None:
    print(f"  {'Metric':<32} {'Type':<24} {'Score':>8} {'Records':>9}  Error")
    print(f"  {'-'*32} {'-'*24} {'-'*8} {'-'*9}  {'-'*5}")
    for mr in result.metric_results:
        ok = sum(1 for rr in mr.record_results if not rr.error)
        print(
            f"  {mr.metric_name:<32} "
            f"{mr.metric_type:<24} "
            f"{mr.score:>8.3f} "
            f"{ok:>4}/{len(mr.record_results):<4}  "
            f"{mr.error[:60]}"
        )
    print()
    print(f"  Overall score: {result.overall_score:.3f}")
    print()


def _print_comparison(batch: BatchEvaluationResult) -> None:
    if batch.comparison is None:
        print("=== Comparison: fewer than 2 successful evaluations ===\n")
        return

    print("=== Model Comparison ===\n")
    print(batch_summary_frame(batch).round(3).to_string())
    print()
    print(f"  Best model: {batch.comparison.best_model}")
    for name, comp in sorted(batch.comparison.metric_comparisons.items()):
        leaders = [r.model_name for r in comp.rankings if r.rank == 1]
        print(
            f"  {name:<32} best={comp.best_score:.3f} worst={comp.worst_score:.3f} "
            f"range={comp.score_range:.3f} leader={', '.join(leaders) or '-'}"
        )
    print()


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Load config
    config = load_config()
    make_client = partial(create_client, config=config)

    # Load task
    print(f"\n=== Loading task: {args.task} ===\n")
    task = load_eval_task(args.task)
    if args.parallel:
        task.parallel_execution = True
    if args.max_concurrency is not None:
        task.max_concurrency = args.max_concurrency

    run_name = args.run_name or datetime.now().strftime("%Y%m%d_%H%M%S")

    if args.models:
        model_configs = [ModelConfig(model_name=m.strip()) for m in args.models.split(",")]
    else:
        model_configs = list(task.model_configs)
    # Explicit --models always run through the batch path, even for one model
    use_batch = bool(args.models) or len(model_configs) > 1

    print(f"  Task: {task.name}")
    print(f"  Records: {len(task.dataset) if task.dataset is not None else 0}")
    print(f"  Metrics: {[m.display_name for m in task.metrics]}")
    print(f"  Custom metrics: {[cm.name for cm in task.custom_metrics]}")
    print(f"  Parallel: {task.parallel_execution}")
    if use_batch:
        print(f"  Models: {[mc.model_name for mc in model_configs]}")
    print(f"  Run name: {run_name}")
    print()

    # Step 1: Health checks
    model_based = get_model_based_metrics(task)
    model_evaluator = None
    if model_based and config.judge.enabled:
        model_evaluator = ClientModelEvaluator(make_client)
        if not args.skip_health_check:
            judge_model = config.judge.judge_model
            print(f"=== Judge Health Check (model-based metrics: {model_based}) ===\n")
            print(f"  Judge model: {judge_model}... ", end="", flush=True)
            judge_ok, judge_err = run_judge_health_check(judge_model, make_client)
            if judge_ok:
                print("OK\n")
            else:
                print("FAILED")
                print(f"  {judge_err}")
                print("  WARNING: model-based metric records will fail.\n")

    if use_batch and not args.skip_health_check:
        available, _ = run_health_check([mc.model_name for mc in model_configs], make_client)
        model_configs = [mc for mc in model_configs if mc.model_name in available]
        if not model_configs:
            print("ERROR: No models available. Exiting.")
            sys.exit(1)

    engine = EvaluationEngine(model_evaluator=model_evaluator, config=config)

    # Step 2: Evaluate
    try:
        if use_batch:
            print(f"=== Running Batch Evaluation ({len(model_configs)} models) ===\n")
            batch = engine.batch_evaluate(
                task,
                model_configs,
                response_generator=ClientResponseGenerator(make_client),
            )
            for result in batch.results:
                print(f"--- {result.experiment_run} ---\n")
                _print_result(result)
            _print_comparison(batch)
            json_path, csv_path = save_batch_result(batch, args.output_dir, run_name)
        else:
            print("=== Running Evaluation ===\n")
            result = engine.evaluate(task, run_name)
            _print_result(result)
            print(result.summary)
            json_path, csv_path = save_evaluation_result(result, args.output_dir)
    except EvaluationError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print("=== Output ===\n")
    print(f"  Result JSON: {json_path}")
    print(f"  CSV:         {csv_path}")
    print()


if __name__ == "__main__":
    main()
