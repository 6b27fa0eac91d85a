"""
Event-stream transport for one client session.

The client holds a long-lived GET stream; the server pushes frames down
it as `message` events. Client-to-server frames arrive out of band (POST)
and are handed to deliver().
"""

import asyncio
import json
import logging
import uuid
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Any], Awaitable[None]]
CloseCallback = Callable[["SseTransport"], None]

# Sentinel pushed onto the outbound queue to end the stream
_CLOSED = object()


class TransportClosed(Exception):
    """Raised when delivering to a transport whose stream has ended."""


class SseTransport:
    """
    One duplex session: outbound event stream plus inbound delivery.

    The session id is minted here, at construction, and never reused.
    """

    def __init__(self, endpoint: str):
        """
        Initialize transport.

        Args:
            endpoint: Path clients POST messages to (sessionId is appended)
        """
        self.session_id = uuid.uuid4().hex
        self.endpoint = endpoint
        self._outbound: asyncio.Queue = asyncio.Queue()
        self._handler: Optional[MessageHandler] = None
        self._pending: List[Any] = []
        self._close_callbacks: List[CloseCallback] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def message_endpoint(self) -> str:
        return f"{self.endpoint}?sessionId={self.session_id}"

    def bind(self, handler: MessageHandler) -> None:
        """
        Attach the inbound handler.

        Messages buffered before binding reach it, in order, ahead of the
        next delivery.
        """
        if self._handler is not None:
            raise RuntimeError(f"Transport {self.session_id[:8]} already has a handler")
        self._handler = handler

    async def deliver(self, message: Any) -> None:
        """
        Hand an inbound message to the bound handler.

        Raises:
            TransportClosed: The stream has already ended
        """
        if self._closed:
            raise TransportClosed(self.session_id)

        if self._handler is None:
            self._pending.append(message)
            return

        while self._pending:
            await self._handler(self._pending.pop(0))
        await self._handler(message)

    async def send(self, message: Dict[str, Any]) -> None:
        """Queue an outbound frame. Frames sent after close are dropped."""
        if self._closed:
            logger.debug(f"Dropping frame for closed session {self.session_id[:8]}")
            return
        await self._outbound.put(message)

    def on_close(self, callback: CloseCallback) -> None:
        self._close_callbacks.append(callback)

    def close(self) -> None:
        """End the session. Idempotent; close callbacks run exactly once."""
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        self._outbound.put_nowait(_CLOSED)

        callbacks, self._close_callbacks = self._close_callbacks, []
        for callback in callbacks:
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Close callback failed for session {self.session_id[:8]}: {e}")

    async def events(self) -> AsyncIterator[Dict[str, str]]:
        """
        Server-sent events for this session.

        Yields the `endpoint` event first, then one `message` event per
        outbound frame until the transport closes. Cancellation (client
        disconnect) closes the transport.
        """
        try:
            yield {"event": "endpoint", "data": self.message_endpoint}

            while True:
                item = await self._outbound.get()
                if item is _CLOSED:
                    break
                yield {"event": "message", "data": json.dumps(item)}
        except asyncio.CancelledError:
            logger.info(f"Session {self.session_id[:8]} stream cancelled")
            raise
        finally:
            self.close()
