"""
Tool protocol adapter.

Speaks JSON-RPC 2.0 (Model Context Protocol flavour) over one session
transport: answers initialize/ping, serves capability discovery and turns
tools/call requests into executor invocations.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from pydantic import ValidationError

from ..api.models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    CallToolParams,
    CallToolResult,
    JSONRPCError,
    JSONRPCErrorResponse,
    JSONRPCMessage,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    ShellArguments,
)
from ..capability import CapabilityModule, UnknownCapability
from ..executor import ProcessExecutor
from ..transport import SseTransport

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL_VERSION = "2024-11-05"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")

Handler = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]


class InvalidParams(Exception):
    """Request params failed validation."""


class ToolProtocolAdapter:
    """Binds one session transport to the capability catalogue and executor."""

    def __init__(
        self,
        transport: SseTransport,
        capabilities: CapabilityModule,
        executor: ProcessExecutor,
        server_name: str = "github-mcp-server",
        server_version: str = "1.0.0",
    ):
        self.transport = transport
        self.capabilities = capabilities
        self.executor = executor
        self.server_name = server_name
        self.server_version = server_version
        self.initialized = False
        self._tasks: Set[asyncio.Task] = set()
        self._handlers: Dict[str, Handler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    def attach(self) -> "ToolProtocolAdapter":
        """Bind to the transport so routed messages reach this adapter."""
        self.transport.bind(self.handle_message)
        return self

    async def handle_message(self, message: JSONRPCMessage) -> None:
        """
        Accept one inbound frame.

        Requests are answered from a background task so delivery (and the
        client's POST) is acknowledged without waiting for a command.
        """
        if isinstance(message, JSONRPCRequest):
            task = asyncio.create_task(self._respond(message))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        elif isinstance(message, JSONRPCNotification):
            if message.method == "notifications/initialized":
                self.initialized = True
            logger.debug(f"Notification {message.method} on session {self._sid}")
        else:
            logger.debug(f"Ignoring client response on session {self._sid}")

    async def _respond(self, request: JSONRPCRequest) -> None:
        try:
            response = await self.handle_request(request)
        except Exception as e:
            logger.exception(f"Unhandled error answering {request.method}: {e}")
            response = self._error(request.id, INTERNAL_ERROR, f"Internal error: {e}")
        await self.transport.send(response)

    async def handle_request(self, request: JSONRPCRequest) -> Dict[str, Any]:
        """Answer a request with a response or error envelope."""
        handler = self._handlers.get(request.method)
        if handler is None:
            return self._error(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

        try:
            result = await handler(request.params or {})
        except InvalidParams as e:
            return self._error(request.id, INVALID_PARAMS, str(e))

        return JSONRPCResponse(id=request.id, result=result).model_dump()

    # Handlers

    async def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else DEFAULT_PROTOCOL_VERSION
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": self.server_name, "version": self.server_version},
        }

    async def _ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    async def _list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": self.capabilities.discover()}

    async def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            call = CallToolParams.model_validate(params)
        except ValidationError as e:
            raise InvalidParams(f"Invalid tools/call params: {e.errors()[0]['msg']}") from e

        result = await self.call_tool(call.name, call.arguments)
        return result.to_payload()

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> CallToolResult:
        """
        Invoke a capability and wrap the outcome.

        Every failure becomes an error result; nothing escapes to the transport.
        """
        try:
            self.capabilities.resolve(name)
        except UnknownCapability as e:
            return CallToolResult.text(str(e), is_error=True)

        try:
            args = ShellArguments.model_validate(arguments)
        except ValidationError as e:
            return CallToolResult.text(f"Invalid arguments: {e.errors()[0]['msg']}", is_error=True)

        logger.info(f"Session {self._sid} running shell command")
        try:
            execution = await self.executor.execute(args.command, args.cwd)
        except Exception as e:
            logger.warning(f"Shell command failed on session {self._sid}: {e}")
            return CallToolResult.text(f"Error: {e}", is_error=True)

        return CallToolResult.text(execution.output)

    # Helpers

    @staticmethod
    def _error(request_id: Any, code: int, message: str, data: Optional[Any] = None) -> Dict[str, Any]:
        response = JSONRPCErrorResponse(
            id=request_id, error=JSONRPCError(code=code, message=message, data=data)
        )
        return response.model_dump(exclude_none=True)

    @property
    def _sid(self) -> str:
        return self.transport.session_id[:8]

    @property
    def pending(self) -> int:
        """Requests still being answered."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight requests to finish (used by tests and shutdown)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
