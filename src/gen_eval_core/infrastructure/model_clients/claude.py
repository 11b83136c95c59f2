"""
Anthropic Claude model client
"""

import os
import time

from anthropic import Anthropic, APIConnectionError, APIStatusError, RateLimitError

from gen_eval_core.domain.value_objects import ModelConfig, ModelResponse
from gen_eval_core.infrastructure.model_clients.base import ModelClient, RetryMixin, sampling_settings


class ClaudeClient(RetryMixin, ModelClient):
    """Claude client using the Anthropic API"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        timeout_seconds: int = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
    ):
        """
        Args:
            model_name: Model name (e.g. claude-haiku-4-5-20251001)
            api_key: Anthropic API key (falls back to ANTHROPIC_API_KEY if not specified)
            timeout_seconds: Request timeout in seconds
            max_retries: Maximum number of retries (default: 3)
            retry_delay_seconds: Base delay of the exponential backoff
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        self.client = Anthropic(api_key=self.api_key, timeout=timeout_seconds)

    def generate(self, prompt: str, model_config: ModelConfig | None = None) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: Input prompt
            model_config: Sampling settings (None for temperature 0)

        Returns:
            ModelResponse: The model's response

        Raises:
            Exception: If the maximum number of retries is exceeded
        """
        settings = sampling_settings(model_config)
        request = {
            "model": self.model_name,
            "max_tokens": settings["max_tokens"],
            "temperature": settings["temperature"],
            "messages": [{"role": "user", "content": prompt}],
        }
        if settings["top_p"] is not None:
            request["top_p"] = settings["top_p"]
        if settings["top_k"] is not None:
            request["top_k"] = settings["top_k"]
        if settings["system_instruction"]:
            request["system"] = settings["system_instruction"]

        def _call():
            start_time = time.time()
            response = self.client.messages.create(**request)
            latency_ms = int((time.time() - start_time) * 1000)

            return ModelResponse(
                output=response.content[0].text.strip(),
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=getattr(response.usage, "input_tokens", 0) or 0,
                output_tokens=getattr(response.usage, "output_tokens", 0) or 0,
            )

        return self._with_retry(
            _call,
            retryable_exceptions=(APIConnectionError, RateLimitError, APIStatusError),
        )
