"""
Shellbridge - Streaming Command Gateway

A server that lets remote tool-calling clients run shell commands in a
sandbox with a GitHub credential that is kept fresh on their behalf.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- credentials: Access/refresh token lifecycle
- executor: Supervised shell command execution
- transport: Event-stream sessions and their registry
- auth: Path-secret access gate
- middleware: Gate enforcement for the HTTP app
- capability: The shell capability descriptor
- protocol: Tool protocol (JSON-RPC) adapter
- api: Protocol data models
- storage: Optional Redis connection
"""

__version__ = "1.0.0"
