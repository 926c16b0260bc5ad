"""YAML config loading with environment variable expansion."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

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


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Invalid or missing configuration value."""


class EnvironmentVariableError(ConfigError):
    """Referenced environment variable is not set."""


# ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` references with environment values.

    Args:
        value: String to expand.

    Returns:
        String with environment variables expanded.

    Raises:
        EnvironmentVariableError: A referenced variable is not set.
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """Walk dicts and lists, expanding environment variables in strings."""
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """Return a required field, raising if it is missing.

    Args:
        data: Mapping to read from.
        field: Field name.
        parent: Parent path used in the error message.

    Returns:
        The field value.

    Raises:
        ConfigValidationError: The field is missing or null.
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _positive_int(data: dict[str, Any], field: str, default: int, parent: str) -> int:
    value = data.get(field, default)
    if not isinstance(value, int) or value < 1:
        raise ConfigValidationError(
            f"Field '{parent}.{field}' must be a positive integer, got {value!r}"
        )
    return value


def _load_memory(memory_data: dict[str, Any]) -> MemoryConfig:
    mode_value = memory_data.get("compaction_mode", CompactionMode.SLIDE.value)
    try:
        compaction_mode = CompactionMode(mode_value)
    except ValueError as e:
        raise ConfigValidationError(
            f"Field 'memory.compaction_mode' must be one of "
            f"{[m.value for m in CompactionMode]}, got {mode_value!r}"
        ) from e

    return MemoryConfig(
        window_size=_positive_int(memory_data, "window_size", 21, "memory"),
        max_summaries=_positive_int(memory_data, "max_summaries", 3, "memory"),
        compaction_mode=compaction_mode,
    )


def load_config(path: str | Path) -> Config:
    """Load the configuration file.

    Args:
        path: Path to config.yaml.

    Returns:
        Config object.

    Raises:
        FileNotFoundError: The file does not exist.
        ConfigValidationError: A required field is missing or invalid.
        EnvironmentVariableError: A referenced environment variable is unset.
        yaml.YAMLError: YAML syntax error.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f) or {}

    data = _expand_recursive(raw_data)

    # LLMConfig (default is required)
    llm_data = _validate_required_field(data, "llm")
    _validate_required_field(llm_data, "default", "llm")
    llm: dict[str, LLMConfig] = {}
    for key, llm_item in llm_data.items():
        model = _validate_required_field(llm_item, "model", f"llm.{key}")
        llm[key] = LLMConfig(
            model=model,
            temperature=llm_item.get("temperature", 1.0),
            max_tokens=llm_item.get("max_tokens", 4000),
        )

    retry_data = data.get("retry") or {}
    retry = RetryConfig(
        max_retries=retry_data.get("max_retries", 3),
        base_delay_seconds=retry_data.get("base_delay_seconds", 1.0),
    )

    memory = _load_memory(data.get("memory") or {})

    execution_data = data.get("execution") or {}
    execution = ExecutionConfig(
        shell=execution_data.get("shell", "/bin/bash"),
        timeout_ms=_positive_int(execution_data, "timeout_ms", 30000, "execution"),
        stream_timeout_ms=_positive_int(
            execution_data, "stream_timeout_ms", 300000, "execution"
        ),
        kill_grace_seconds=execution_data.get("kill_grace_seconds", 5.0),
        audit_output_limit=execution_data.get("audit_output_limit", 500),
    )

    conversation_data = data.get("conversation") or {}
    conversation = ConversationConfig(
        max_chain_steps=_positive_int(
            conversation_data, "max_chain_steps", 10, "conversation"
        ),
        feedback_limit=conversation_data.get("feedback_limit", 500),
    )

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
        )

    return Config(
        llm=llm,
        retry=retry,
        memory=memory,
        execution=execution,
        conversation=conversation,
        logging=logging_config,
    )
