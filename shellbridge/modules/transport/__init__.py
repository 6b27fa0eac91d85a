"""
Transport Module - Black Box Interface

Purpose: Track one event-stream connection per client session
Interface: open(), close(), route()
Hidden: Session id minting, outbound queueing, stream framing

Sessions live exactly as long as their connection; there is no idle sweep.
"""

from .registry import SessionNotFound, SessionRegistry
from .transport import SseTransport, TransportClosed

__all__ = ["SessionRegistry", "SessionNotFound", "SseTransport", "TransportClosed"]
