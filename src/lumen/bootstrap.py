"""Composition root."""

import logging
from dataclasses import dataclass

from lumen.application.services.memory_manager import MemoryManager
from lumen.application.use_cases import HandleUserInputUseCase
from lumen.config import Config, LoggingConfig
from lumen.infrastructure.llm import (
    CompletionClient,
    LLMConversationSummarizer,
    LLMIntentRouter,
    LLMWarRoom,
    RetryPolicy,
)
from lumen.infrastructure.persistence import InMemorySessionStore
from lumen.infrastructure.shell import (
    CommandExecutor,
    LoggingAuditSink,
    StreamingCommandExecutor,
)

logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    A stderr handler is installed on the root logger when it has none, so
    that records from ``lumen.audit`` are written somewhere even when the
    host application has not set up logging.

    Args:
        config: Logging configuration. If None, uses LoggingConfig defaults.
    """
    config = config or LoggingConfig()
    root_logger = logging.getLogger()
    root_logger.setLevel(_parse_level(config.level))

    if not root_logger.handlers:
        root_logger.addHandler(logging.StreamHandler())
    formatter = logging.Formatter(config.format)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)

    for logger_name, logger_level in (config.loggers or {}).items():
        logging.getLogger(logger_name).setLevel(_parse_level(logger_level))
        logger.debug("Set logger '%s' to level %s", logger_name, logger_level.upper())


def _parse_level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


@dataclass
class Application:
    """Wired components for one process."""

    config: Config
    client: CompletionClient
    router: LLMIntentRouter
    war_room: LLMWarRoom
    command_executor: CommandExecutor
    streaming_executor: StreamingCommandExecutor
    session_store: InMemorySessionStore
    handle_user_input: HandleUserInputUseCase


def build_application(config: Config) -> Application:
    """Build every component from configuration.

    The ``summary`` LLM entry is used for memory compaction when present,
    otherwise ``default``.

    Args:
        config: Loaded configuration.

    Returns:
        The wired application.
    """
    retry_policy = RetryPolicy.from_config(config.retry)

    client = CompletionClient(config.llm["default"], retry_policy)
    summary_client = CompletionClient(
        config.llm.get("summary", config.llm["default"]), retry_policy
    )
    summarizer = LLMConversationSummarizer(summary_client)

    def memory_factory() -> MemoryManager:
        return MemoryManager.from_config(summarizer, config.memory)

    audit_sink = LoggingAuditSink()
    command_executor = CommandExecutor(audit_sink, config.execution)
    session_store = InMemorySessionStore(memory_factory)
    router = LLMIntentRouter(client)

    logger.info("Application built with model %s", config.llm["default"].model)
    return Application(
        config=config,
        client=client,
        router=router,
        war_room=LLMWarRoom(client),
        command_executor=command_executor,
        streaming_executor=StreamingCommandExecutor(audit_sink, config.execution),
        session_store=session_store,
        handle_user_input=HandleUserInputUseCase(
            session_repository=session_store,
            router=router,
            command_runner=command_executor,
            config=config.conversation,
        ),
    )
