"""Domain service protocols."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from lumen.domain.entities import (
    AgentResponse,
    AuditEntry,
    CommandProposal,
    ExecutionEvent,
    ExecutionOptions,
    ExecutionResult,
    Interaction,
    SummarizationResult,
)

if TYPE_CHECKING:
    from lumen.application.services.memory_manager import MemoryManager


class ConversationSummarizer(Protocol):
    """Condenses a run of interactions into a summary."""

    async def summarize(self, interactions: Sequence[Interaction]) -> SummarizationResult:
        """Summarize interactions, oldest first.

        Args:
            interactions: Interactions to condense.

        Returns:
            Summary text and reasoning.

        Raises:
            ProviderError: The completion call failed.
        """
        ...


class IntentRouter(Protocol):
    """Routes user input to an agent schema."""

    async def route(self, user_input: str, memory: "MemoryManager") -> AgentResponse:
        ...


class CommandRunner(Protocol):
    """Blocking command execution."""

    async def execute(
        self,
        proposal: CommandProposal,
        options: ExecutionOptions | None = None,
    ) -> ExecutionResult:
        ...


class AuditSink(Protocol):
    """Receives one entry after every execution attempt.

    Where the entry is persisted is up to the implementation.
    """

    async def record(self, entry: AuditEntry) -> None:
        ...


class EventChannel(Protocol):
    """Duplex channel the streaming executor writes events to.

    Implementations raise ChannelClosedError once the peer has gone away.
    """

    async def send(self, event: ExecutionEvent) -> None:
        ...
