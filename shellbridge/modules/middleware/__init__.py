"""
Gate Middleware Module - Black Box Interface

Purpose: Enforce the path-secret gate in front of every route
Interface: SecretPathMiddleware, create_secret_path_middleware()
Hidden: Gate evaluation, response formatting

Unauthorized requests get the same 404 an unknown route would, so a
caller cannot tell a wrong secret from a path that does not exist.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import PlainTextResponse

from ..auth import AccessGate, GateDecision

logger = logging.getLogger(__name__)

NOT_FOUND_BODY = "Not found"


def not_found() -> PlainTextResponse:
    return PlainTextResponse(NOT_FOUND_BODY, status_code=404)


class SecretPathMiddleware:
    """
    HTTP middleware that runs the access gate before routing.

    Register with `app.middleware("http")(SecretPathMiddleware())`. The gate
    is taken from the constructor or, when omitted, from `app.state.gate`
    (built during application startup).
    """

    def __init__(self, gate: Optional[AccessGate] = None, log_attempts: bool = True):
        """
        Initialize gate middleware.

        Args:
            gate: Access gate deciding per path
            log_attempts: Whether to log rejected requests
        """
        self.gate = gate
        self.log_attempts = log_attempts

    async def __call__(self, request: Request, call_next):
        """Process the request through the gate."""
        gate = self.gate or getattr(request.app.state, "gate", None)
        if gate is None:
            return PlainTextResponse("Service not initialized", status_code=503)

        try:
            decision = await gate.check(request.url.path)
        except Exception as e:
            logger.error(f"Error during gate check: {e}")
            return not_found()

        if decision == GateDecision.DENY:
            if self.log_attempts:
                client_host = request.client.host if request.client else "unknown"
                logger.warning(f"Rejected {request.method} with invalid path secret from {client_host}")
            return not_found()

        return await call_next(request)


def create_secret_path_middleware(gate: Optional[AccessGate] = None) -> SecretPathMiddleware:
    """
    Factory function to create the gate middleware.

    Args:
        gate: AccessGate built by AuthFactory (defaults to app.state.gate)

    Returns:
        Configured SecretPathMiddleware instance
    """
    return SecretPathMiddleware(gate)


__all__ = [
    "SecretPathMiddleware",
    "create_secret_path_middleware",
    "not_found",
    "NOT_FOUND_BODY",
]
