"""
Model client factory

Creates the appropriate client instance based on the model name.
"""

from __future__ import annotations

from gen_eval_core.harness_config import EngineConfig, load_config
from gen_eval_core.infrastructure.model_clients.base import ModelClient
from gen_eval_core.infrastructure.model_clients.claude import ClaudeClient
from gen_eval_core.infrastructure.model_clients.lmstudio import LMStudioClient
from gen_eval_core.infrastructure.model_clients.vertex_ai import VertexAIClient


def create_client(model_name: str, config: EngineConfig | None = None) -> ModelClient:
    """
    Create the appropriate client based on the model name

    Args:
        model_name: Model name ("lmstudio/..." -> LMStudio, "claude..." -> Anthropic,
            anything else -> Vertex AI)
        config: EngineConfig (loads from env if not provided)

    Returns:
        ModelClient: The appropriate client instance
    """
    if config is None:
        config = load_config()

    timeout = config.isolation.timeout_seconds
    retries = config.isolation.max_retries
    retry_delay = config.isolation.retry_delay_seconds

    if model_name.startswith("lmstudio/"):
        return LMStudioClient(
            model_name,
            base_url=config.lmstudio.base_url,
            api_key=config.lmstudio.api_key,
            timeout_seconds=timeout,
            max_retries=retries,
            retry_delay_seconds=retry_delay,
        )
    elif model_name.startswith("claude"):
        return ClaudeClient(
            model_name,
            timeout_seconds=timeout,
            max_retries=retries,
            retry_delay_seconds=retry_delay,
        )
    else:
        return VertexAIClient(
            model_name,
            timeout_seconds=timeout,
            max_retries=retries,
            retry_delay_seconds=retry_delay,
        )
