"""
Protocol Module - Black Box Interface

Purpose: Translate tool protocol frames into capability invocations
Interface: ToolProtocolAdapter(transport, capabilities, executor).attach()
Hidden: JSON-RPC method dispatch, result and error envelopes

A fresh adapter is bound to every session.
"""

from .adapter import DEFAULT_PROTOCOL_VERSION, ToolProtocolAdapter

__all__ = ["ToolProtocolAdapter", "DEFAULT_PROTOCOL_VERSION"]
