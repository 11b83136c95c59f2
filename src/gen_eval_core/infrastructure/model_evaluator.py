"""
Model evaluator collaborators

The engine reaches generative models only through these interfaces:
- ModelEvaluator: answers a judge prompt (model-based metrics)
- ResponseGenerator: produces the response under test (batch evaluation)

Client-backed implementations sit on top of the provider model clients.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

from gen_eval_core.domain.value_objects import DataRecord, ModelConfig
from gen_eval_core.infrastructure.model_clients.base import ModelClient

logger = logging.getLogger(__name__)


class ModelEvaluator(ABC):
    """Capability to ask a judge model for a free-text evaluation"""

    @abstractmethod
    def evaluate_with_model(self, prompt: str, model_name: str) -> str:
        """Send a judge prompt to the named model and return its raw text"""
        pass


class ResponseGenerator(ABC):
    """Capability to generate the response under test for a record"""

    @abstractmethod
    def generate_response(self, record: DataRecord, model_config: ModelConfig) -> str:
        """Produce the model response to record.input under model_config"""
        pass


class _ClientCache:
    """One client per model name, created on first use"""

    def __init__(self, create_client_fn: Callable[[str], ModelClient]) -> None:
        self._create_client_fn = create_client_fn
        self._clients: dict[str, ModelClient] = {}
        self._lock = threading.Lock()

    def get(self, model_name: str) -> ModelClient:
        with self._lock:
            client = self._clients.get(model_name)
            if client is None:
                logger.debug("Creating client for %s", model_name)
                client = self._create_client_fn(model_name)
                self._clients[model_name] = client
            return client


class ClientModelEvaluator(ModelEvaluator):
    """ModelEvaluator backed by provider model clients"""

    def __init__(self, create_client_fn: Callable[[str], ModelClient] | None = None) -> None:
        """
        Args:
            create_client_fn: Function to create a model client
                (defaults to gen_eval_core.infrastructure.model_clients.create_client)
        """
        if create_client_fn is None:
            from gen_eval_core.infrastructure.model_clients.factory import create_client
            create_client_fn = create_client
        self._clients = _ClientCache(create_client_fn)

    def evaluate_with_model(self, prompt: str, model_name: str) -> str:
        response = self._clients.get(model_name).generate(prompt)
        return response.output


class ClientResponseGenerator(ResponseGenerator):
    """ResponseGenerator backed by provider model clients"""

    def __init__(self, create_client_fn: Callable[[str], ModelClient] | None = None) -> None:
        if create_client_fn is None:
            from gen_eval_core.infrastructure.model_clients.factory import create_client
            create_client_fn = create_client
        self._clients = _ClientCache(create_client_fn)

    def generate_response(self, record: DataRecord, model_config: ModelConfig) -> str:
        client = self._clients.get(model_config.model_name)
        return client.generate(record.input, model_config).output
