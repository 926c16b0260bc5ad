"""Configuration management."""

from lumen.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from lumen.config.models import (
    CompactionMode,
    Config,
    ConversationConfig,
    ExecutionConfig,
    LLMConfig,
    LoggingConfig,
    MemoryConfig,
    RetryConfig,
)

__all__ = [
    "CompactionMode",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "ConversationConfig",
    "EnvironmentVariableError",
    "ExecutionConfig",
    "LLMConfig",
    "LoggingConfig",
    "MemoryConfig",
    "RetryConfig",
    "expand_env_vars",
    "load_config",
]
