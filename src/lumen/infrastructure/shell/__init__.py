"""Shell command execution."""

from lumen.infrastructure.shell.audit import AUDIT_LOGGER_NAME, LoggingAuditSink
from lumen.infrastructure.shell.channel import JsonLinesChannel
from lumen.infrastructure.shell.executor import CommandExecutor
from lumen.infrastructure.shell.process import ProcessOutcome, ProcessRunner
from lumen.infrastructure.shell.streaming import StreamingCommandExecutor

__all__ = [
    "AUDIT_LOGGER_NAME",
    "CommandExecutor",
    "JsonLinesChannel",
    "LoggingAuditSink",
    "ProcessOutcome",
    "ProcessRunner",
    "StreamingCommandExecutor",
]
