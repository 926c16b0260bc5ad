"""Common fixtures for shell execution tests."""

import pytest

from lumen.config import ExecutionConfig
from lumen.domain.entities import AuditEntry, ExecutionEvent
from lumen.domain.exceptions import ChannelClosedError


class RecordingAuditSink:
    """Audit sink keeping entries in memory."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    async def record(self, entry: AuditEntry) -> None:
        self.entries.append(entry)


class RecordingChannel:
    """Event channel keeping wire messages in memory.

    After ``close_after`` successful sends every send raises ``error``.
    """

    def __init__(
        self, close_after: int | None = None, error: Exception | None = None
    ) -> None:
        self.messages: list[dict] = []
        self.close_after = close_after
        self.error = error or ChannelClosedError("peer went away")
        self.rejected = 0

    async def send(self, event: ExecutionEvent) -> None:
        if self.close_after is not None and len(self.messages) >= self.close_after:
            self.rejected += 1
            raise self.error
        self.messages.append(event.to_message())

    @property
    def types(self) -> list[str]:
        return [m["type"] for m in self.messages]

    def data(self, event_type: str) -> str:
        return "".join(m["data"] for m in self.messages if m["type"] == event_type)


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def execution_config() -> ExecutionConfig:
    """Execution config with short timeouts for tests."""
    return ExecutionConfig(
        shell="/bin/bash",
        timeout_ms=5000,
        stream_timeout_ms=5000,
        kill_grace_seconds=0.5,
        audit_output_limit=500,
    )


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def make_channel() -> type[RecordingChannel]:
    """Factory for channels that close partway through."""
    return RecordingChannel
