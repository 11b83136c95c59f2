"""
Vertex AI (Google GenAI SDK) model client
"""

import os
import time

from google import genai
from google.api_core import exceptions as google_exceptions
from google.genai.types import GenerateContentConfig, HttpOptions

from gen_eval_core.domain.value_objects import ModelConfig, ModelResponse
from gen_eval_core.infrastructure.model_clients.base import ModelClient, RetryMixin, sampling_settings


class VertexAIClient(RetryMixin, ModelClient):
    """Model client using Google GenAI SDK (via Vertex AI)"""

    def __init__(
        self,
        model_name: str,
        project_id: str | None = None,
        location: str | None = None,
        timeout_seconds: int = 30,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
    ):
        """
        Args:
            model_name: Model name (e.g. gemini-2.0-flash-001)
            project_id: GCP project ID (falls back to GCP_PROJECT_ID if not specified)
            location: Region (falls back to GCP_LOCATION, then "global")
            timeout_seconds: Timeout in seconds (default: 30)
            max_retries: Maximum number of retries (default: 3)
            retry_delay_seconds: Base delay of the exponential backoff
        """
        self.model_name = model_name
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or os.environ.get("GCP_LOCATION", "global")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        if not self.project_id:
            raise ValueError("GCP_PROJECT_ID is not set")

        # Timeout is configured via HttpOptions (milliseconds)
        self.client = genai.Client(
            vertexai=True,
            project=self.project_id,
            location=self.location,
            http_options=HttpOptions(timeout=timeout_seconds * 1000),
        )

    def _generation_config(self, model_config: ModelConfig | None) -> GenerateContentConfig:
        settings = sampling_settings(model_config)
        kwargs = {
            "temperature": settings["temperature"],
            "max_output_tokens": settings["max_tokens"],
        }
        if settings["top_p"] is not None:
            kwargs["top_p"] = settings["top_p"]
        if settings["top_k"] is not None:
            kwargs["top_k"] = settings["top_k"]
        if settings["system_instruction"]:
            kwargs["system_instruction"] = settings["system_instruction"]
        return GenerateContentConfig(**kwargs)

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
        generation_config = self._generation_config(model_config)

        def _call():
            start_time = time.time()
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=generation_config,
            )
            latency_ms = int((time.time() - start_time) * 1000)

            input_tokens = 0
            output_tokens = 0
            if getattr(response, "usage_metadata", None):
                input_tokens = getattr(response.usage_metadata, "prompt_token_count", 0) or 0
                output_tokens = getattr(response.usage_metadata, "candidates_token_count", 0) or 0

            return ModelResponse(
                output=(response.text or "").strip(),
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

        return self._with_retry(
            _call,
            retryable_exceptions=(
                google_exceptions.DeadlineExceeded,
                google_exceptions.ServiceUnavailable,
                google_exceptions.ResourceExhausted,
            ),
        )
