#!/usr/bin/env python3
"""
Shellbridge - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the HTTP server

All business logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from sse_starlette.sse import EventSourceResponse

from shellbridge import __version__
from shellbridge.config.provider import ConfigProvider, EnvConfigProvider
from shellbridge.logging_config import get_logging_config

# Import modules through their black box interfaces
from shellbridge.modules.api import parse_message
from shellbridge.modules.auth import AccessGate, AuthFactory
from shellbridge.modules.capability import CapabilityModule
from shellbridge.modules.config import get_config
from shellbridge.modules.credentials import CredentialModule
from shellbridge.modules.executor import ProcessExecutor
from shellbridge.modules.middleware import create_secret_path_middleware
from shellbridge.modules.protocol import ToolProtocolAdapter
from shellbridge.modules.storage import StorageModule
from shellbridge.modules.transport import SessionNotFound, SessionRegistry

# Get configuration
config = get_config()

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]
SSE_PING_SECONDS = 15


def method_not_allowed() -> PlainTextResponse:
    return PlainTextResponse("Method not allowed", status_code=405)


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    credentials: Optional[CredentialModule] = None,
    executor: Optional[ProcessExecutor] = None,
    gate: Optional[AccessGate] = None,
) -> FastAPI:
    """
    Build the application.

    Components passed in are used as-is; everything else is built from
    configuration at startup.
    """
    provider = config_provider or EnvConfigProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - initialize and cleanup resources.
        """
        logger.info("Starting Shellbridge...")

        storage: Optional[StorageModule] = None
        redis_client = None
        if config.get("redis_url") and gate is None:
            storage = StorageModule(config.get("redis_url"))
            redis_client = await storage.connect()

        credential_module = credentials or CredentialModule(provider.get_credential_config())
        app.state.credentials = credential_module
        app.state.gate = gate or AuthFactory.build(provider, redis_client)
        app.state.executor = executor or ProcessExecutor(
            credential_module.get_valid_token,
            sandbox_root=config.get("sandbox_root"),
            home_dir=config.get("home_dir"),
            timeout=config.get("command_timeout"),
        )
        app.state.capabilities = CapabilityModule(config.get("sandbox_root"))
        app.state.registry = SessionRegistry()

        logger.info(f"Shellbridge listening on {config.get('host')}:{config.get('port')}")

        yield

        # Shutdown
        logger.info("Shutting down Shellbridge...")
        closed = app.state.registry.close_all()
        logger.info(f"Closed {closed} open session(s)")

        if credentials is None:
            await credential_module.close()
        if storage:
            await storage.disconnect()
        logger.info("Shellbridge shutdown complete")

    app = FastAPI(
        title="Shellbridge",
        description="Streaming shell command gateway with a managed GitHub credential",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Gate runs before routing so unauthorized paths never reach a handler
    app.middleware("http")(create_secret_path_middleware(gate))

    @app.api_route("/health", methods=ALL_METHODS)
    async def health():
        """
        Liveness check. Unauthenticated, any method.

        Returns:
            200: OK
        """
        return PlainTextResponse("OK")

    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def session_endpoint(request: Request, path: str):
        """
        Session entry point on an authorized path.

        GET opens an event stream; POST delivers a message to an open one.
        """
        if request.method == "GET":
            return open_session(request)
        if request.method == "POST":
            return await post_message(request)
        return method_not_allowed()

    def open_session(request: Request) -> EventSourceResponse:
        """
        Open a new session and stream protocol frames for its lifetime.

        The session is registered and bound to a fresh adapter before the
        first event (which tells the client its sessionId) is sent.
        """
        state = request.app.state
        transport = state.registry.open(request.url.path)
        ToolProtocolAdapter(
            transport,
            state.capabilities,
            state.executor,
            server_name=config.get("server_name"),
            server_version=__version__,
        ).attach()

        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Client {client_host} connected as session {transport.session_id[:8]}")

        return EventSourceResponse(transport.events(), ping=SSE_PING_SECONDS)

    async def post_message(request: Request):
        """
        Deliver a client message to its session.

        Returns:
            202: Accepted for delivery
            400: Missing sessionId or malformed message
            404: Session not found
        """
        registry: SessionRegistry = request.app.state.registry

        session_id = request.query_params.get("sessionId")
        if not session_id:
            return PlainTextResponse("Missing sessionId", status_code=400)

        if session_id not in registry:
            return PlainTextResponse("Session not found", status_code=404)

        try:
            message = parse_message(await request.json())
        except ValueError as e:
            logger.warning(f"Invalid message for session {session_id[:8]}: {e}")
            return PlainTextResponse("Invalid message", status_code=400)

        try:
            await registry.route(session_id, message)
        except SessionNotFound:
            return PlainTextResponse("Session not found", status_code=404)

        return PlainTextResponse("Accepted", status_code=202)

    @app.exception_handler(ValueError)
    async def validation_error_handler(request, exc):
        """Handle validation errors."""
        logger.error(f"Validation error: {exc}")
        return JSONResponse(status_code=400, content={"error": str(exc)})

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    secret = EnvConfigProvider().get_gate_config().secret_token
    logging_config = get_logging_config(config.get("log_level"), secret or "")
    log_config.dictConfig(logging_config)

    if secret:
        logger.info(f"Access URL: http://localhost:{config.get('port')}/<SECRET_TOKEN>")

    uvicorn.run(
        app,
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        log_config=logging_config,
    )


if __name__ == "__main__":
    run()
