"""Streaming execution events."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from lumen.domain.entities.command import ExecutionResult


class ExecutionEventType(Enum):
    """Event types emitted by streaming execution."""

    START = "start"
    STDOUT = "stdout"
    STDERR = "stderr"
    COMPLETE = "complete"
    ERROR = "error"
    TIMEOUT = "timeout"


def _epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ExecutionEvent:
    """A discrete event written to a streaming channel.

    Attributes:
        type: Event type.
        command: Command text (start events).
        cwd: Working directory (start events).
        data: Output chunk (stdout/stderr events).
        result: Final result (complete events).
        message: Human-readable message (error/timeout events).
        timestamp: Milliseconds since the epoch.
    """

    type: ExecutionEventType
    command: str | None = None
    cwd: str | None = None
    data: str | None = None
    result: ExecutionResult | None = None
    message: str | None = None
    timestamp: int = field(default_factory=_epoch_ms)

    def to_message(self) -> dict[str, Any]:
        """Render the outbound wire message."""
        message: dict[str, Any] = {"type": self.type.value}
        if self.type == ExecutionEventType.START:
            message["command"] = self.command
            message["cwd"] = self.cwd
        elif self.type in (ExecutionEventType.STDOUT, ExecutionEventType.STDERR):
            message["data"] = self.data
        elif self.type == ExecutionEventType.COMPLETE:
            message["result"] = self.result.to_dict() if self.result else None
        else:
            message["message"] = self.message
            if self.command is not None:
                message["command"] = self.command
        message["timestamp"] = self.timestamp
        return message


def start_event(command: str, cwd: str) -> ExecutionEvent:
    return ExecutionEvent(type=ExecutionEventType.START, command=command, cwd=cwd)


def output_event(event_type: ExecutionEventType, data: str) -> ExecutionEvent:
    return ExecutionEvent(type=event_type, data=data)


def complete_event(result: ExecutionResult) -> ExecutionEvent:
    return ExecutionEvent(type=ExecutionEventType.COMPLETE, result=result)


def error_event(message: str, command: str | None = None) -> ExecutionEvent:
    return ExecutionEvent(
        type=ExecutionEventType.ERROR, message=message, command=command
    )


def timeout_event(timeout_ms: int) -> ExecutionEvent:
    return ExecutionEvent(
        type=ExecutionEventType.TIMEOUT,
        message=f"Command exceeded {timeout_ms}ms timeout",
    )
