"""
Health Check

Performs connectivity checks for models and the judge model used by
model-based metrics.
"""

from typing import Callable

from gen_eval_core.domain.entities import HealthCheckResult
from gen_eval_core.domain.value_objects import EvalTask
from gen_eval_core.infrastructure.model_clients.base import ModelClient
from gen_eval_core.scoring.scorer import is_computation_metric


HEALTH_CHECK_PROMPT = "Reply with only 'OK' if you can read this message."


def health_check_model(
    model_name: str,
    create_client_fn: Callable[[str], ModelClient],
) -> HealthCheckResult:
    """
    Execute a health check for a single model.

    Args:
        model_name: Name of the model to check
        create_client_fn: Function to create a model client

    Returns:
        HealthCheckResult: Health check result
    """
    try:
        client = create_client_fn(model_name)
        response = client.generate(HEALTH_CHECK_PROMPT)
        return HealthCheckResult(
            model_name=model_name,
            success=True,
            latency_ms=response.latency_ms,
            error=None
        )
    except Exception as e:
        return HealthCheckResult(
            model_name=model_name,
            success=False,
            latency_ms=None,
            error=str(e)
        )


def run_health_check(
    models: list[str],
    create_client_fn: Callable[[str], ModelClient] | None = None,
) -> tuple[list[str], list[HealthCheckResult]]:
    """
    Execute health checks for the models of a batch evaluation.

    Args:
        models: List of model names to check
        create_client_fn: Function to create a model client
            (defaults to gen_eval_core.infrastructure.model_clients.create_client)

    Returns:
        tuple: (list of available models, list of all check results)
    """
    if create_client_fn is None:
        from gen_eval_core.infrastructure.model_clients import create_client
        create_client_fn = create_client

    print("=== Model Health Check ===\n")
    results = []
    available_models = []

    for model_name in models:
        print(f"  {model_name}... ", end="", flush=True)
        result = health_check_model(model_name, create_client_fn)
        results.append(result)

        if result.success:
            print(f"OK ({result.latency_ms}ms)")
            available_models.append(model_name)
        else:
            # Display only the first 100 characters of the error message
            error_short = result.error[:100] if result.error else "Unknown error"
            print("FAILED")
            print(f"    Error: {error_short}")

    print()
    return available_models, results


def get_model_based_metrics(task: EvalTask) -> list[str]:
    """Names of the metrics in a task that need the judge model.

    Args:
        task: Evaluation task

    Returns:
        Display names of model-based metrics followed by custom metric names
    """
    names = [
        metric.display_name
        for metric in task.metrics
        if not is_computation_metric(metric.type)
    ]
    names.extend(custom_metric.name for custom_metric in task.custom_metrics)
    return names


def run_judge_health_check(
    judge_model: str,
    create_client_fn: Callable[[str], ModelClient] | None = None,
) -> tuple[bool, str | None]:
    """Execute a health check for the judge model.

    Args:
        judge_model: Judge model name
        create_client_fn: Function to create a model client (optional)

    Returns:
        (success, error_message): (True, None) on success, (False, error_message) on failure
    """
    if create_client_fn is None:
        from gen_eval_core.infrastructure.model_clients import create_client
        create_client_fn = create_client

    try:
        client = create_client_fn(judge_model)
        response = client.generate("Reply with only 'OK'")
        if response.output:
            return True, None
        else:
            return False, f"Judge ({judge_model}) returned an empty response"
    except Exception as e:
        error_msg = (
            f"Judge ({judge_model}) health check failed.\n"
            f"Error: {str(e)[:200]}\n\n"
            f"Troubleshooting:\n"
            f"- For Gemini: Run `gcloud auth application-default login`\n"
            f"- For Claude: Set the `ANTHROPIC_API_KEY` environment variable\n"
            f"- For LMStudio: Verify LMStudio is running and `LMSTUDIO_BASE_URL` points at it"
        )
        return False, error_msg
