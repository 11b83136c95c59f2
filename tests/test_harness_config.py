"""
harness_config.pyのテスト
"""

import pytest

from gen_eval_core.harness_config import (
    ExecutionConfig,
    JudgeConfig,
    IsolationConfig,
    LMStudioConfig,
    EngineConfig,
    load_config,
)

ENV_KEYS = [
    "EVAL_PARALLEL_EXECUTION", "EVAL_MAX_CONCURRENCY",
    "EVAL_JUDGE_MODEL", "EVAL_JUDGE_ENABLED",
    "HARNESS_TIMEOUT_SECONDS", "HARNESS_MAX_RETRIES", "HARNESS_RETRY_DELAY_SECONDS",
    "LMSTUDIO_BASE_URL", "LMSTUDIO_API_KEY",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestExecutionConfig:
    """ExecutionConfig dataclassのテスト"""

    def test_defaults(self):
        config = ExecutionConfig()
        assert config.parallel_execution is False
        assert config.max_concurrency == 5

    def test_custom_values(self):
        config = ExecutionConfig(parallel_execution=True, max_concurrency=8)
        assert config.parallel_execution is True
        assert config.max_concurrency == 8


class TestJudgeConfig:
    """JudgeConfig dataclassのテスト"""

    def test_defaults(self):
        config = JudgeConfig()
        assert config.judge_model == "gemini-2.0-flash-001"
        assert config.enabled is True


class TestIsolationConfig:
    """IsolationConfig dataclassのテスト"""

    def test_defaults(self):
        config = IsolationConfig()
        assert config.timeout_seconds == 120
        assert config.max_retries == 3
        assert config.retry_delay_seconds == 1.0


class TestEngineConfig:
    """EngineConfig dataclassのテスト"""

    def test_defaults(self):
        config = EngineConfig()
        assert isinstance(config.execution, ExecutionConfig)
        assert isinstance(config.judge, JudgeConfig)
        assert isinstance(config.isolation, IsolationConfig)
        assert isinstance(config.lmstudio, LMStudioConfig)

    def test_to_dict(self):
        d = EngineConfig().to_dict()
        assert "engine_config" in d
        assert d["engine_config"]["execution"]["max_concurrency"] == 5
        assert d["engine_config"]["judge"]["enabled"] is True
        assert d["engine_config"]["lmstudio"]["api_key"] == "lm-studio"

    def test_from_dict_with_key(self):
        data = {
            "engine_config": {
                "execution": {"parallel_execution": True},
                "judge": {"judge_model": "claude-haiku-4-5-20251001"},
                "isolation": {"timeout_seconds": 60},
            }
        }
        config = EngineConfig.from_dict(data)
        assert config.execution.parallel_execution is True
        assert config.judge.judge_model == "claude-haiku-4-5-20251001"
        assert config.isolation.timeout_seconds == 60
        # デフォルト値は維持される
        assert config.execution.max_concurrency == 5
        assert config.isolation.max_retries == 3

    def test_from_dict_without_key(self):
        config = EngineConfig.from_dict({"execution": {"max_concurrency": 2}})
        assert config.execution.max_concurrency == 2

    def test_from_dict_empty(self):
        config = EngineConfig.from_dict({})
        assert config.judge.judge_model == "gemini-2.0-flash-001"
        assert config.execution.parallel_execution is False

    def test_roundtrip(self):
        original = EngineConfig(
            execution=ExecutionConfig(parallel_execution=True, max_concurrency=3),
            judge=JudgeConfig(enabled=False),
        )
        restored = EngineConfig.from_dict(original.to_dict())
        assert restored == original


class TestLoadConfig:
    """load_config関数のテスト（環境変数ベース）"""

    def test_defaults_without_env(self, clean_env):
        """環境変数未設定時はデフォルト値を返す"""
        config = load_config()
        assert isinstance(config, EngineConfig)
        assert config.execution.parallel_execution is False
        assert config.execution.max_concurrency == 5
        assert config.judge.judge_model == "gemini-2.0-flash-001"
        assert config.judge.enabled is True
        assert config.isolation.timeout_seconds == 120
        assert config.isolation.max_retries == 3
        assert config.isolation.retry_delay_seconds == 1.0
        assert config.lmstudio.base_url == "http://localhost:1234/v1"
        assert config.lmstudio.api_key == "lm-studio"

    def test_custom_env_values(self, clean_env):
        """環境変数から値を読み込む"""
        clean_env.setenv("EVAL_PARALLEL_EXECUTION", "true")
        clean_env.setenv("EVAL_MAX_CONCURRENCY", "10")
        clean_env.setenv("EVAL_JUDGE_MODEL", "claude-haiku-4-5-20251001")
        clean_env.setenv("EVAL_JUDGE_ENABLED", "false")
        clean_env.setenv("HARNESS_TIMEOUT_SECONDS", "60")
        clean_env.setenv("HARNESS_MAX_RETRIES", "5")
        clean_env.setenv("HARNESS_RETRY_DELAY_SECONDS", "2.5")
        clean_env.setenv("LMSTUDIO_BASE_URL", "http://custom:5678/v1")
        clean_env.setenv("LMSTUDIO_API_KEY", "custom-key")

        config = load_config()
        assert config.execution.parallel_execution is True
        assert config.execution.max_concurrency == 10
        assert config.judge.judge_model == "claude-haiku-4-5-20251001"
        assert config.judge.enabled is False
        assert config.isolation.timeout_seconds == 60
        assert config.isolation.max_retries == 5
        assert config.isolation.retry_delay_seconds == 2.5
        assert config.lmstudio.base_url == "http://custom:5678/v1"
        assert config.lmstudio.api_key == "custom-key"

    def test_partial_env_values(self, clean_env):
        """一部の環境変数のみ設定した場合、残りはデフォルト"""
        clean_env.setenv("EVAL_MAX_CONCURRENCY", "2")

        config = load_config()
        assert config.execution.max_concurrency == 2
        # 他はデフォルト
        assert config.execution.parallel_execution is False
        assert config.judge.judge_model == "gemini-2.0-flash-001"

    @pytest.mark.parametrize("raw,expected", [
        ("1", True), ("yes", True), ("TRUE", True), ("false", False), ("0", False),
    ])
    def test_bool_env_variants(self, clean_env, raw, expected):
        """bool環境変数の様々な表記"""
        clean_env.setenv("EVAL_PARALLEL_EXECUTION", raw)
        assert load_config().execution.parallel_execution is expected

    def test_invalid_int_env_raises_error(self, clean_env):
        """不正なint型の環境変数でValueErrorが発生"""
        clean_env.setenv("EVAL_MAX_CONCURRENCY", "abc")
        with pytest.raises(ValueError, match="EVAL_MAX_CONCURRENCY"):
            load_config()

    def test_invalid_float_env_raises_error(self, clean_env):
        """不正なfloat型の環境変数でValueErrorが発生"""
        clean_env.setenv("HARNESS_RETRY_DELAY_SECONDS", "not-a-number")
        with pytest.raises(ValueError, match="HARNESS_RETRY_DELAY_SECONDS"):
            load_config()
