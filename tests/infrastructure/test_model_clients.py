"""
モデルクライアントのテスト

RetryMixin._with_retry() のリトライ動作、sampling_settings() の解決、
create_client() のファクトリ分岐をテストする。
"""

import pytest
from unittest.mock import patch, MagicMock

from gen_eval_core.domain.value_objects import ModelConfig
from gen_eval_core.harness_config import EngineConfig, IsolationConfig, LMStudioConfig
from gen_eval_core.infrastructure.model_clients.base import RetryMixin, sampling_settings
from gen_eval_core.infrastructure.model_clients.factory import create_client
from gen_eval_core.infrastructure.model_clients.vertex_ai import VertexAIClient
from gen_eval_core.infrastructure.model_clients.claude import ClaudeClient
from gen_eval_core.infrastructure.model_clients.lmstudio import LMStudioClient


class TestRetryMixin:
    """RetryMixin._with_retry() のテスト"""

    def _make_mixin(self, max_retries=3, retry_delay_seconds=1.0):
        mixin = RetryMixin()
        mixin.max_retries = max_retries
        mixin.retry_delay_seconds = retry_delay_seconds
        return mixin

    @patch("gen_eval_core.infrastructure.model_clients.base.time.sleep")
    def test_success_on_first_attempt(self, mock_sleep):
        """初回で成功する場合、リトライなしで値を返す"""
        mixin = self._make_mixin()
        fn = MagicMock(return_value="ok")

        result = mixin._with_retry(fn)

        assert result == "ok"
        fn.assert_called_once()
        mock_sleep.assert_not_called()

    @patch("gen_eval_core.infrastructure.model_clients.base.time.sleep")
    def test_success_after_two_failures(self, mock_sleep):
        """2回失敗後、3回目で成功する場合"""
        mixin = self._make_mixin(max_retries=3)
        fn = MagicMock(side_effect=[ValueError("1"), ValueError("2"), "ok"])

        result = mixin._with_retry(fn)

        assert result == "ok"
        assert fn.call_count == 3
        # 指数バックオフ: sleep(1), sleep(2)
        assert mock_sleep.call_count == 2
        mock_sleep.assert_any_call(1)
        mock_sleep.assert_any_call(2)

    @patch("gen_eval_core.infrastructure.model_clients.base.time.sleep")
    def test_backoff_scales_with_retry_delay(self, mock_sleep):
        """retry_delay_seconds がバックオフの基準値になる"""
        mixin = self._make_mixin(max_retries=3, retry_delay_seconds=0.5)
        fn = MagicMock(side_effect=[ValueError("1"), ValueError("2"), "ok"])

        mixin._with_retry(fn)

        mock_sleep.assert_any_call(0.5)
        mock_sleep.assert_any_call(1.0)

    @patch("gen_eval_core.infrastructure.model_clients.base.time.sleep")
    def test_raises_after_all_retries_exhausted(self, mock_sleep):
        """全リトライ失敗時、最後の例外をraiseする"""
        mixin = self._make_mixin(max_retries=3)
        fn = MagicMock(
            side_effect=[ValueError("1"), ValueError("2"), ValueError("final")]
        )

        with pytest.raises(ValueError, match="final"):
            mixin._with_retry(fn)

        assert fn.call_count == 3

    def test_max_retries_zero_raises_value_error(self):
        """max_retries=0 の場合、ValueError を即座にraiseする"""
        mixin = self._make_mixin(max_retries=0)
        fn = MagicMock(return_value="ok")

        with pytest.raises(ValueError, match="max_retries must be at least 1"):
            mixin._with_retry(fn)

        fn.assert_not_called()

    @patch("gen_eval_core.infrastructure.model_clients.base.time.sleep")
    def test_retryable_exceptions_filter(self, mock_sleep):
        """retryable_exceptions に含まれない例外は即座にraiseされる"""
        mixin = self._make_mixin(max_retries=3)
        fn = MagicMock(side_effect=TypeError("not retryable"))

        with pytest.raises(TypeError, match="not retryable"):
            mixin._with_retry(fn, retryable_exceptions=(ValueError,))

        fn.assert_called_once()
        mock_sleep.assert_not_called()


class TestSamplingSettings:
    """Tests for sampling_settings"""

    def test_defaults_without_model_config(self):
        settings = sampling_settings(None)
        assert settings["temperature"] == 0.0
        assert settings["top_p"] is None
        assert settings["top_k"] is None
        assert settings["max_tokens"] == 1024
        assert settings["system_instruction"] == ""

    def test_model_config_values(self):
        config = ModelConfig(
            model_name="gemini-2.5-flash",
            temperature=0.7,
            top_p=0.9,
            top_k=40,
            max_tokens=256,
            system_instruction="Be brief.",
        )
        settings = sampling_settings(config)
        assert settings["temperature"] == 0.7
        assert settings["top_p"] == 0.9
        assert settings["top_k"] == 40
        assert settings["max_tokens"] == 256
        assert settings["system_instruction"] == "Be brief."

    def test_unset_fields_fall_back(self):
        settings = sampling_settings(ModelConfig(model_name="m"), default_max_tokens=64)
        assert settings["temperature"] == 0.0
        assert settings["max_tokens"] == 64


class TestCreateClient:
    """create_client() ファクトリのテスト"""

    @patch.dict("os.environ", {"GCP_PROJECT_ID": "test-project"})
    def test_gemini_model_returns_vertex_ai_client(self):
        """geminiモデル名の場合、VertexAIClientを返す"""
        client = create_client("gemini-2.5-flash", EngineConfig())
        assert isinstance(client, VertexAIClient)

    @patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test-key"})
    def test_claude_model_returns_claude_client(self):
        """claudeモデル名の場合、ClaudeClientを返す"""
        client = create_client("claude-sonnet-4-5-20250514", EngineConfig())
        assert isinstance(client, ClaudeClient)

    def test_lmstudio_model_returns_lmstudio_client(self):
        """lmstudio/プレフィックスの場合、LMStudioClientを返す"""
        client = create_client("lmstudio/qwen2.5-7b", EngineConfig())
        assert isinstance(client, LMStudioClient)
        assert client.api_model_name == "qwen2.5-7b"

    def test_config_is_passed_to_client(self):
        """EngineConfig の接続設定がクライアントに渡される"""
        config = EngineConfig(
            isolation=IsolationConfig(max_retries=5, retry_delay_seconds=0.25),
            lmstudio=LMStudioConfig(base_url="http://custom:5678/v1"),
        )
        client = create_client("lmstudio/qwen2.5-7b", config)
        assert client.max_retries == 5
        assert client.retry_delay_seconds == 0.25
        assert client.base_url == "http://custom:5678/v1"


class TestLMStudioGenerate:
    """LMStudioClient.generate() のリクエスト組み立て"""

    def _client_with_response(self, content="Rating: 4"):
        client = LMStudioClient("lmstudio/qwen2.5-7b", max_retries=1)
        completion = MagicMock()
        completion.choices = [MagicMock()]
        completion.choices[0].message.content = content
        completion.usage.prompt_tokens = 12
        completion.usage.completion_tokens = 3
        client.client = MagicMock()
        client.client.chat.completions.create.return_value = completion
        return client

    def test_generate_returns_model_response(self):
        client = self._client_with_response("  Rating: 4  ")
        response = client.generate("prompt")

        assert response.output == "Rating: 4"
        assert response.model_name == "lmstudio/qwen2.5-7b"
        assert response.input_tokens == 12
        assert response.output_tokens == 3

    def test_model_config_is_applied(self):
        client = self._client_with_response()
        config = ModelConfig(
            model_name="lmstudio/qwen2.5-7b",
            temperature=0.3,
            top_p=0.8,
            max_tokens=100,
            system_instruction="You are terse.",
        )

        client.generate("prompt", config)

        kwargs = client.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "qwen2.5-7b"
        assert kwargs["temperature"] == 0.3
        assert kwargs["top_p"] == 0.8
        assert kwargs["max_tokens"] == 100
        assert kwargs["messages"][0] == {"role": "system", "content": "You are terse."}
        assert kwargs["messages"][1] == {"role": "user", "content": "prompt"}
