"""
API Module - Black Box Interface

Purpose: Protocol data models shared by the transport and the adapter
Interface: JSON-RPC envelopes, parse_message(), tool payload models
Hidden: Validation rules, wire field names

The API module only defines shapes - it contains no business logic.
"""

from .models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    CallToolParams,
    CallToolResult,
    ExecutionStatus,
    JSONRPCError,
    JSONRPCErrorResponse,
    JSONRPCMessage,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    ShellArguments,
    TextContent,
    parse_message,
)

__all__ = [
    "JSONRPCRequest",
    "JSONRPCNotification",
    "JSONRPCResponse",
    "JSONRPCError",
    "JSONRPCErrorResponse",
    "JSONRPCMessage",
    "parse_message",
    "CallToolParams",
    "CallToolResult",
    "ShellArguments",
    "TextContent",
    "ExecutionStatus",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
]
