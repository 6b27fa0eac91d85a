"""
Executor Module - Black Box Interface

Purpose: Run shell commands in the sandbox on behalf of a session
Interface: ProcessExecutor.execute(command, work_dir) -> ExecutionResult
Hidden: Child process management, output capture, timeout enforcement

Can be replaced with different execution mechanisms (containers, remote runners).
"""

from .executor import (
    CommandTimeout,
    ExecutionResult,
    ExecutorError,
    ProcessExecutor,
    SpawnError,
    format_output,
)
from .latch import CompletionLatch

__all__ = [
    "ProcessExecutor",
    "ExecutionResult",
    "ExecutorError",
    "CommandTimeout",
    "SpawnError",
    "CompletionLatch",
    "format_output",
]
