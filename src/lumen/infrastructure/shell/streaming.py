"""Streaming command execution over an event channel."""

import asyncio
import json
import logging
import os
from typing import Any

from lumen.domain.entities import (
    CommandProposal,
    ExecutionEvent,
    ExecutionEventType,
    ExecutionOptions,
    ExecutionResult,
    ExecutionStatus,
)
from lumen.domain.entities.execution_event import (
    complete_event,
    error_event,
    output_event,
    start_event,
    timeout_event,
)
from lumen.domain.exceptions import ChannelClosedError, ValidationError
from lumen.domain.services.protocols import EventChannel
from lumen.infrastructure.shell.channel import JsonLinesChannel
from lumen.infrastructure.shell.executor import ShellExecutorBase

logger = logging.getLogger(__name__)


class _EventEmitter:
    """Forwards events until the channel closes, then drops them."""

    def __init__(self, channel: EventChannel) -> None:
        self._channel = channel
        self.closed = False

    async def emit(self, event: ExecutionEvent) -> None:
        if self.closed:
            return
        try:
            await self._channel.send(event)
        except (ChannelClosedError, ConnectionError) as e:
            self.closed = True
            logger.info("Event channel closed, dropping further events: %s", e)

    async def emit_output(self, event_type: ExecutionEventType, data: str) -> None:
        await self.emit(output_event(event_type, data))


class StreamingCommandExecutor(ShellExecutorBase):
    """Runs a command while forwarding its output as events.

    Closing the channel does not cancel the command: it runs on until it
    exits or times out, and its result is still audited and returned.
    """

    async def stream(
        self,
        proposal: CommandProposal,
        channel: EventChannel,
        options: ExecutionOptions | None = None,
    ) -> ExecutionResult:
        """Execute a proposal, emitting events to ``channel``.

        Emits ``start``, then ``stdout``/``stderr`` chunks as they arrive,
        then ``timeout`` if the deadline fired, then ``complete``. Gate
        outcomes and spawn failures emit a single ``error`` event; a dry
        run emits only ``complete``.

        Args:
            proposal: Command to run.
            channel: Destination for events.
            options: Execution switches.

        Returns:
            The execution result.

        Raises:
            ValidationError: The proposal is malformed.
        """
        options = options or ExecutionOptions()
        emitter = _EventEmitter(channel)

        gated = await self._gate(proposal, options)
        if gated is not None:
            if gated.status == ExecutionStatus.DRY_RUN:
                await emitter.emit(complete_event(gated))
            else:
                await emitter.emit(error_event(gated.message or "", proposal.command))
            return gated

        timeout_ms = self._timeout_ms(proposal, options, self._config.stream_timeout_ms)
        await emitter.emit(start_event(proposal.command, proposal.cwd or os.getcwd()))

        result = await self._run(
            proposal, options, timeout_ms, on_output=emitter.emit_output
        )

        if result.status == ExecutionStatus.TIMEOUT:
            await emitter.emit(timeout_event(timeout_ms))
        # Only a spawn failure produces an error result with a message.
        if result.status == ExecutionStatus.ERROR and result.message is not None:
            await emitter.emit(error_event(result.message, proposal.command))
        else:
            await emitter.emit(complete_event(result))
        return result

    async def handle_message(
        self, message: dict[str, Any], channel: EventChannel
    ) -> ExecutionResult | None:
        """Handle one inbound ``{type: "execute", command, cwd?, timeoutMs?}``.

        Malformed messages are answered with an ``error`` event.

        Returns:
            The execution result, or None when the message was rejected.
        """
        emitter = _EventEmitter(channel)
        if not isinstance(message, dict) or message.get("type") != "execute":
            await emitter.emit(error_event("Unsupported message type"))
            return None

        try:
            proposal = CommandProposal(
                command=message.get("command") or "",
                cwd=message.get("cwd"),
                timeout_ms=message.get("timeoutMs"),
            )
            return await self.stream(proposal, channel)
        except ValidationError as e:
            await emitter.emit(error_event(str(e)))
            return None

    async def serve(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Serve newline-delimited JSON messages on one connection.

        Usable as the callback of ``asyncio.start_server``. Messages are
        handled one at a time in arrival order.
        """
        channel = JsonLinesChannel(writer)
        peer = writer.get_extra_info("peername")
        logger.info("Execution client connected: %s", peer)
        try:
            while line := await reader.readline():
                try:
                    message = json.loads(line)
                except json.JSONDecodeError:
                    await _EventEmitter(channel).emit(
                        error_event("Invalid message format")
                    )
                    continue
                await self.handle_message(message, channel)
        finally:
            logger.info("Execution client disconnected: %s", peer)
            writer.close()
