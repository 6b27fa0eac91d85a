import logging
from typing import Any, Dict, List, Optional

from .transport import SseTransport, TransportClosed

logger = logging.getLogger(__name__)


class SessionNotFound(Exception):
    """No live session is registered under the given id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionRegistry:
    def __init__(self):
        """
        Initialize session registry.

        The table maps session id to its live transport. It is only ever
        changed through open() and close().
        """
        self._sessions: Dict[str, SseTransport] = {}

    def open(self, endpoint: str) -> SseTransport:
        """
        Create and register a new session.

        Args:
            endpoint: Path the client will POST messages to

        Returns:
            The registered transport

        Logic:
        1. Transport mints its own session id
        2. Register before anyone else sees the transport
        3. Wire the transport's close signal to unregistration
        """
        transport = SseTransport(endpoint)
        session_id = transport.session_id

        if session_id in self._sessions:
            raise ValueError(f"Session {session_id} is already registered")

        self._sessions[session_id] = transport
        transport.on_close(lambda t: self.close(t.session_id))

        logger.info(f"Session {session_id[:8]} opened ({len(self._sessions)} active)")
        return transport

    def close(self, session_id: str) -> bool:
        """
        Unregister a session and close its transport.

        Args:
            session_id: Session identifier

        Returns:
            True if the session was registered, False if already gone
        """
        transport = self._sessions.pop(session_id, None)
        if transport is None:
            return False

        transport.close()
        logger.info(f"Session {session_id[:8]} closed ({len(self._sessions)} active)")
        return True

    async def route(self, session_id: str, message: Any) -> None:
        """
        Deliver an inbound message to the session's transport.

        Raises:
            SessionNotFound: Unknown, closed, or closing session
        """
        transport = self._sessions.get(session_id)
        if transport is None or transport.closed:
            raise SessionNotFound(session_id)

        try:
            await transport.deliver(message)
        except TransportClosed as e:
            raise SessionNotFound(session_id) from e

    def get(self, session_id: str) -> Optional[SseTransport]:
        return self._sessions.get(session_id)

    def session_ids(self) -> List[str]:
        return list(self._sessions)

    def close_all(self) -> int:
        """Close every session (server shutdown). Returns how many were closed."""
        closed = 0
        for session_id in list(self._sessions):
            if self.close(session_id):
                closed += 1
        return closed

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
