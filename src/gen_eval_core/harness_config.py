"""
Evaluation Engine Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import dataclass, field, asdict

from gen_eval_core.domain.constants import DEFAULT_JUDGE_MODEL, DEFAULT_MAX_CONCURRENCY


def _env_bool(key: str, default: bool) -> bool:
    """Convert an environment variable to bool"""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


@dataclass
class ExecutionConfig:
    """Metric dispatch configuration (used when the task leaves it unset)"""
    parallel_execution: bool = False
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY


@dataclass
class JudgeConfig:
    """Judge model configuration for model-based metrics"""
    judge_model: str = DEFAULT_JUDGE_MODEL
    enabled: bool = True


@dataclass
class IsolationConfig:
    """Model client call configuration"""
    timeout_seconds: int = 120
    max_retries: int = 3
    retry_delay_seconds: float = 1.0


@dataclass
class LMStudioConfig:
    """LMStudio (OpenAI-compatible local LLM) configuration"""
    base_url: str = "http://localhost:1234/v1"
    api_key: str = "lm-studio"


@dataclass
class EngineConfig:
    """Overall evaluation engine configuration"""
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    judge: JudgeConfig = field(default_factory=JudgeConfig)
    isolation: IsolationConfig = field(default_factory=IsolationConfig)
    lmstudio: LMStudioConfig = field(default_factory=LMStudioConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {"engine_config": asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "EngineConfig":
        """Create from dictionary (handles presence/absence of engine_config key)"""
        config_data = data.get("engine_config", data)
        return cls(
            execution=ExecutionConfig(**config_data.get("execution", {})),
            judge=JudgeConfig(**config_data.get("judge", {})),
            isolation=IsolationConfig(**config_data.get("isolation", {})),
            lmstudio=LMStudioConfig(**config_data.get("lmstudio", {})),
        )


def load_config() -> EngineConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        EngineConfig
    """
    execution = ExecutionConfig(
        parallel_execution=_env_bool("EVAL_PARALLEL_EXECUTION", False),
        max_concurrency=_env_int("EVAL_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY),
    )
    judge = JudgeConfig(
        judge_model=_env_str("EVAL_JUDGE_MODEL", DEFAULT_JUDGE_MODEL),
        enabled=_env_bool("EVAL_JUDGE_ENABLED", True),
    )
    isolation = IsolationConfig(
        timeout_seconds=_env_int("HARNESS_TIMEOUT_SECONDS", 120),
        max_retries=_env_int("HARNESS_MAX_RETRIES", 3),
        retry_delay_seconds=_env_float("HARNESS_RETRY_DELAY_SECONDS", 1.0),
    )
    lmstudio = LMStudioConfig(
        base_url=_env_str("LMSTUDIO_BASE_URL", "http://localhost:1234/v1"),
        api_key=_env_str("LMSTUDIO_API_KEY", "lm-studio"),
    )
    return EngineConfig(
        execution=execution,
        judge=judge,
        isolation=isolation,
        lmstudio=lmstudio,
    )
