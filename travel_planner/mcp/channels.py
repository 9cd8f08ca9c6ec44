"""Delivery channels for MCP sessions.

A channel is how JSON-RPC responses reach a session's client. Every session
owns exactly one channel:

- StreamChannel: Server-Sent Events stream opened by GET /mcp
- DirectChannel: single-shot delivery, the response becomes the POST body
- StdioChannel (see stdio.py): one JSON line per message on stdout
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from ..errors import ChannelClosed
from ..models import ChannelKind

logger = logging.getLogger(__name__)

KEEPALIVE_FRAME = ": keep-alive\n\n"


def format_sse_event(event: str, data: str) -> str:
    """Frame a Server-Sent Event.

    Multi-line payloads are split over several ``data:`` lines so the client
    reassembles them with newlines.
    """
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in data.split("\n"))
    return "\n".join(lines) + "\n\n"


class Channel(ABC):
    """Base class for session delivery channels."""

    kind: ChannelKind

    def __init__(self) -> None:
        self._closed = False
        self.session_id: str | None = None
        self.messages_sent = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def streaming(self) -> bool:
        """Whether the channel is a long-lived stream that needs keep-alives."""
        return False

    def bind(self, session_id: str) -> None:
        """Attach the channel to its session once the id is known."""
        self.session_id = session_id

    async def send(self, message: dict[str, Any]) -> None:
        """Deliver one JSON-RPC message.

        Raises:
            ChannelClosed: the channel was closed
        """
        if self._closed:
            raise ChannelClosed(f"Channel for session {self.session_id} is closed")
        await self._write(message)
        self.messages_sent += 1

    async def ping(self) -> None:
        """Send a keep-alive. No-op for non-streaming channels."""
        if self._closed:
            raise ChannelClosed(f"Channel for session {self.session_id} is closed")

    def close(self) -> None:
        """Release the channel. Idempotent."""
        self._closed = True

    @abstractmethod
    async def _write(self, message: dict[str, Any]) -> None: ...


class StreamChannel(Channel):
    """SSE stream. Frames are queued and drained by the HTTP response.

    The queue is unbounded so writers (responses and keep-alives) never wait
    on a slow reader.
    """

    kind = ChannelKind.STREAM

    def __init__(self) -> None:
        super().__init__()
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()

    @property
    def streaming(self) -> bool:
        return True

    def bind(self, session_id: str) -> None:
        super().bind(session_id)
        self._queue.put_nowait(format_sse_event("session", session_id))

    async def _write(self, message: dict[str, Any]) -> None:
        self._queue.put_nowait(format_sse_event("message", json.dumps(message)))

    async def ping(self) -> None:
        await super().ping()
        self._queue.put_nowait(KEEPALIVE_FRAME)

    def close(self) -> None:
        if self._closed:
            return
        super().close()
        self._queue.put_nowait(None)

    async def frames(self) -> AsyncIterator[str]:
        """Yield SSE frames until the channel is closed."""
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame


class DirectChannel(Channel):
    """Single-shot delivery.

    The POST handler returns the delivered message as its own response body,
    so writing only records the delivery; ordering is enforced by the
    session's delivery tickets.
    """

    kind = ChannelKind.DIRECT

    async def _write(self, message: dict[str, Any]) -> None:
        logger.debug(f"Direct delivery for session {self.session_id}: id={message.get('id')}")
