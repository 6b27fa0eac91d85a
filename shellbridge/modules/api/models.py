"""
Shellbridge shared data models.

These models define the frames exchanged with tool protocol clients
(JSON-RPC 2.0 envelopes) and the payloads carried inside them.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

JSONRPC_VERSION = "2.0"

# JSON-RPC error codes
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Union[int, str]


# Enums


class ExecutionStatus(str, Enum):
    """Outcome of a shell command."""

    SUCCESS = "success"
    FAILURE = "failure"


# Envelopes


class JSONRPCRequest(BaseModel):
    """A request expecting a response."""

    model_config = ConfigDict(extra="allow")

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId
    method: str
    params: Optional[Dict[str, Any]] = None


class JSONRPCNotification(BaseModel):
    """A one-way message without an id."""

    model_config = ConfigDict(extra="allow")

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: Optional[Dict[str, Any]] = None


class JSONRPCResponse(BaseModel):
    """A successful response."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId
    result: Dict[str, Any]


class JSONRPCError(BaseModel):
    """Error object carried by an error response."""

    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCErrorResponse(BaseModel):
    """A failed response."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Optional[RequestId] = None
    error: JSONRPCError


JSONRPCMessage = Union[JSONRPCRequest, JSONRPCNotification, JSONRPCResponse, JSONRPCErrorResponse]


def parse_message(payload: Any) -> JSONRPCMessage:
    """
    Classify and validate an inbound JSON-RPC frame.

    Args:
        payload: Decoded JSON body

    Returns:
        The matching envelope model

    Raises:
        ValueError: If the payload is not a valid JSON-RPC 2.0 message
    """
    if not isinstance(payload, dict):
        raise ValueError("JSON-RPC message must be an object")
    if payload.get("jsonrpc") != JSONRPC_VERSION:
        raise ValueError("Unsupported or missing jsonrpc version")

    try:
        if "method" in payload:
            if "id" in payload and payload["id"] is not None:
                return JSONRPCRequest.model_validate(payload)
            return JSONRPCNotification.model_validate(payload)
        if "error" in payload:
            return JSONRPCErrorResponse.model_validate(payload)
        if "result" in payload:
            return JSONRPCResponse.model_validate(payload)
    except ValidationError as e:
        raise ValueError(f"Invalid JSON-RPC message: {e.errors()[0]['msg']}") from e

    raise ValueError("Message is neither a request, a notification nor a response")


# Tool payloads


class CallToolParams(BaseModel):
    """Params of a tools/call request."""

    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def default_arguments(cls, v):
        """Clients may send null for a tool without arguments."""
        return {} if v is None else v


class ShellArguments(BaseModel):
    """Arguments accepted by the shell capability."""

    command: str = Field(..., description="The shell command to execute")
    cwd: Optional[str] = Field(None, description="Working directory")

    @field_validator("command")
    @classmethod
    def validate_command(cls, v):
        """Reject blank commands."""
        if not v.strip():
            raise ValueError("command must not be empty")
        return v


class TextContent(BaseModel):
    """Text content block."""

    type: Literal["text"] = "text"
    text: str


class CallToolResult(BaseModel):
    """Result of a tools/call request."""

    content: List[TextContent]
    isError: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "CallToolResult":
        return cls(content=[TextContent(text=text)], isError=is_error)

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump()
        if not self.isError:
            payload.pop("isError")
        return payload
