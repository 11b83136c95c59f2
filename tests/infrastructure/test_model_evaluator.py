"""
Tests for the client-backed model evaluator and response generator
"""

from unittest.mock import MagicMock

from gen_eval_core.domain.value_objects import DataRecord, ModelConfig, ModelResponse
from gen_eval_core.infrastructure.model_evaluator import (
    ClientModelEvaluator,
    ClientResponseGenerator,
    ModelEvaluator,
    ResponseGenerator,
)


def _client(output="Rating: 5\nGood."):
    client = MagicMock()
    client.generate.return_value = ModelResponse(output=output, latency_ms=10, model_name="judge")
    return client


class TestClientModelEvaluator:
    """Tests for ClientModelEvaluator"""

    def test_is_model_evaluator(self):
        assert isinstance(ClientModelEvaluator(MagicMock()), ModelEvaluator)

    def test_returns_client_output(self):
        client = _client()
        create_fn = MagicMock(return_value=client)
        evaluator = ClientModelEvaluator(create_fn)

        raw = evaluator.evaluate_with_model("judge this", "gemini-2.0-flash-001")

        assert raw == "Rating: 5\nGood."
        create_fn.assert_called_once_with("gemini-2.0-flash-001")
        client.generate.assert_called_once_with("judge this")

    def test_client_is_cached_per_model(self):
        create_fn = MagicMock(side_effect=lambda name: _client())
        evaluator = ClientModelEvaluator(create_fn)

        evaluator.evaluate_with_model("a", "model-a")
        evaluator.evaluate_with_model("b", "model-a")
        evaluator.evaluate_with_model("c", "model-b")

        assert create_fn.call_count == 2

    def test_client_errors_propagate(self):
        client = MagicMock()
        client.generate.side_effect = RuntimeError("quota exceeded")
        evaluator = ClientModelEvaluator(MagicMock(return_value=client))

        try:
            evaluator.evaluate_with_model("p", "m")
        except RuntimeError as e:
            assert "quota" in str(e)
        else:
            raise AssertionError("expected RuntimeError")


class TestClientResponseGenerator:
    """Tests for ClientResponseGenerator"""

    def test_is_response_generator(self):
        assert isinstance(ClientResponseGenerator(MagicMock()), ResponseGenerator)

    def test_generates_from_record_input_with_model_config(self):
        client = _client(output="Paris")
        create_fn = MagicMock(return_value=client)
        generator = ClientResponseGenerator(create_fn)
        config = ModelConfig(model_name="claude-haiku-4-5-20251001", temperature=0.2)

        response = generator.generate_response(DataRecord(input="Capital of France?"), config)

        assert response == "Paris"
        create_fn.assert_called_once_with("claude-haiku-4-5-20251001")
        client.generate.assert_called_once_with("Capital of France?", config)
