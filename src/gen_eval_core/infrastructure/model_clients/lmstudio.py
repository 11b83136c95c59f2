"""
LMStudio (OpenAI-compatible API) model client
"""

import os
import time

import openai
from openai import OpenAI

from gen_eval_core.domain.value_objects import ModelConfig, ModelResponse
from gen_eval_core.infrastructure.model_clients.base import ModelClient, RetryMixin, sampling_settings


class LMStudioClient(RetryMixin, ModelClient):
    """Client using LMStudio (OpenAI-compatible API)"""

    def __init__(
        self,
        model_name: str,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: int = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
    ):
        """
        Args:
            model_name: Model name (e.g. lmstudio/qwen2.5-7b)
            base_url: API endpoint (falls back to LMSTUDIO_BASE_URL if not specified)
            api_key: API key (falls back to LMSTUDIO_API_KEY; usually not required for LMStudio)
            timeout_seconds: Request timeout in seconds
            max_retries: Maximum number of retries (default: 3)
            retry_delay_seconds: Base delay of the exponential backoff
        """
        self.model_name = model_name
        # The API expects the model name without the lmstudio/ prefix
        self.api_model_name = model_name.removeprefix("lmstudio/")
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        # Configuration priority: argument > environment variable > default value
        self.base_url = base_url or os.environ.get("LMSTUDIO_BASE_URL", "http://localhost:1234/v1")
        api_key = api_key or os.environ.get("LMSTUDIO_API_KEY", "lm-studio")
        self.client = OpenAI(base_url=self.base_url, api_key=api_key, timeout=timeout_seconds)

    def generate(self, prompt: str, model_config: ModelConfig | None = None) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: Input prompt
            model_config: Sampling settings (None for temperature 0); top_k is not supported

        Returns:
            ModelResponse: The model's response

        Raises:
            Exception: If the maximum number of retries is exceeded
        """
        settings = sampling_settings(model_config)
        messages = []
        if settings["system_instruction"]:
            messages.append({"role": "system", "content": settings["system_instruction"]})
        messages.append({"role": "user", "content": prompt})

        request = {
            "model": self.api_model_name,
            "messages": messages,
            "temperature": settings["temperature"],
            "max_tokens": settings["max_tokens"],
        }
        if settings["top_p"] is not None:
            request["top_p"] = settings["top_p"]

        def _call():
            start_time = time.time()
            response = self.client.chat.completions.create(**request)
            latency_ms = int((time.time() - start_time) * 1000)

            input_tokens = 0
            output_tokens = 0
            if response.usage:
                input_tokens = response.usage.prompt_tokens or 0
                output_tokens = response.usage.completion_tokens or 0

            return ModelResponse(
                output=(response.choices[0].message.content or "").strip(),
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        return self._with_retry(
            _call,
            retryable_exceptions=(
                openai.APIConnectionError,
                openai.RateLimitError,
                openai.APIStatusError,
            ),
        )
