"""Newline-delimited JSON event channel."""

import asyncio
import json

from lumen.domain.entities import ExecutionEvent
from lumen.domain.exceptions import ChannelClosedError


class JsonLinesChannel:
    """Writes each event as one JSON object per line to a stream writer."""

    def __init__(self, writer: asyncio.StreamWriter) -> None:
        self._writer = writer

    async def send(self, event: ExecutionEvent) -> None:
        """Write an event and wait for the transport to drain.

        Raises:
            ChannelClosedError: The writer is closing or the peer went away.
        """
        if self._writer.is_closing():
            raise ChannelClosedError("Channel is closed")

        line = json.dumps(event.to_message(), ensure_ascii=False) + "\n"
        try:
            self._writer.write(line.encode("utf-8"))
            await self._writer.drain()
        except ConnectionError as e:
            raise ChannelClosedError(str(e)) from e
