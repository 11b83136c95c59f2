"""
Model client base class and retry mixin

Defines the abstract base class inherited by all model clients
and the RetryMixin that consolidates shared retry logic.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

from gen_eval_core.domain.value_objects import ModelConfig, ModelResponse


class RetryMixin:
    """Exponential backoff retry. Subclasses set self.max_retries and self.retry_delay_seconds."""

    max_retries: int = 3
    retry_delay_seconds: float = 1.0

    def _with_retry(self, fn, retryable_exceptions=(Exception,)):
        """
        Execute with exponential backoff retry.

        Args:
            fn: The function to retry (a callable with no arguments)
            retryable_exceptions: Tuple of exception types eligible for retry

        Returns:
            The return value of fn()

        Raises:
            ValueError: If max_retries is less than 1
            Exception: The last exception if max retries are exceeded
        """
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1.")

        last_exception: Exception | None = None
        for attempt in range(self.max_retries):
            try:
                return fn()
            except retryable_exceptions as e:
                last_exception = e
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_delay_seconds * (2 ** attempt))

        assert last_exception is not None
        raise last_exception


class ModelClient(ABC):
    """Abstract base class for model clients"""

    model_name: str

    @abstractmethod
    def generate(self, prompt: str, model_config: ModelConfig | None = None) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: Input prompt
            model_config: Sampling settings; None means deterministic defaults
        """
        pass


def sampling_settings(model_config: ModelConfig | None, default_max_tokens: int = 1024) -> dict:
    """
    Resolve the sampling settings shared by all providers

    Args:
        model_config: Model configuration (None for defaults)
        default_max_tokens: Output limit when the configuration sets none

    Returns:
        dict with temperature, top_p, top_k, max_tokens and system_instruction
    """
    if model_config is None:
        return {
            "temperature": 0.0,
            "top_p": None,
            "top_k": None,
            "max_tokens": default_max_tokens,
            "system_instruction": "",
        }
    return {
        "temperature": 0.0 if model_config.temperature is None else model_config.temperature,
        "top_p": model_config.top_p,
        "top_k": model_config.top_k,
        "max_tokens": model_config.max_tokens or default_max_tokens,
        "system_instruction": model_config.system_instruction,
    }
