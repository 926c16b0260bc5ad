"""Configuration dataclasses."""

from dataclasses import dataclass, field
from enum import Enum


class CompactionMode(Enum):
    """How the memory window is compacted when it overflows.

    SLIDE summarizes the whole window (including the overflow item) and
    then drops only the oldest interaction. BLOCK summarizes the full
    window that existed before the overflow item and evicts it as a
    block, leaving only the newest interaction.
    """

    SLIDE = "slide"
    BLOCK = "block"


@dataclass
class LLMConfig:
    """LLM settings (passed to LiteLLM completion)."""

    model: str
    temperature: float = 1.0
    max_tokens: int = 4000


@dataclass
class RetryConfig:
    """Retry settings for completion calls."""

    max_retries: int = 3
    base_delay_seconds: float = 1.0


@dataclass
class MemoryConfig:
    """Rolling memory settings."""

    window_size: int = 21
    max_summaries: int = 3
    compaction_mode: CompactionMode = CompactionMode.SLIDE


@dataclass
class ExecutionConfig:
    """Command execution settings.

    Attributes:
        shell: Shell used to run commands (invoked as ``shell -c command``).
        timeout_ms: Default timeout for blocking execution.
        stream_timeout_ms: Default timeout for streaming execution.
        kill_grace_seconds: Wait between SIGTERM and SIGKILL on timeout.
        audit_output_limit: Max characters of stdout/stderr in audit entries.
    """

    shell: str = "/bin/bash"
    timeout_ms: int = 30000
    stream_timeout_ms: int = 300000
    kill_grace_seconds: float = 5.0
    audit_output_limit: int = 500


@dataclass
class ConversationConfig:
    """Conversation turn settings."""

    max_chain_steps: int = 10
    feedback_limit: int = 500


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None


@dataclass
class Config:
    """Application configuration."""

    llm: dict[str, LLMConfig]
    retry: RetryConfig = field(default_factory=RetryConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    conversation: ConversationConfig = field(default_factory=ConversationConfig)
    logging: LoggingConfig | None = None
