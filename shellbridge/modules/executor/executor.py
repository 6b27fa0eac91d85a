"""
Process Executor - runs shell commands in a supervised child process.

Each call spawns `sh -c <command>` in the sandbox with the current Git
host credential injected, streams stdout and stderr into per-call
buffers, and enforces a hard wall-clock timeout.
"""

import asyncio
import logging
import os
import signal
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Set, Tuple

from ..api.models import ExecutionStatus
from .latch import CompletionLatch

logger = logging.getLogger(__name__)

DEFAULT_SANDBOX_ROOT = "/workspace"
DEFAULT_TIMEOUT = 5 * 60
READ_CHUNK_SIZE = 64 * 1024

# Environment variables the GitHub CLI and git credential helpers read
TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")

TokenSource = Callable[[], Awaitable[str]]


class ExecutorError(Exception):
    """Base class for executor failures."""


class CommandTimeout(ExecutorError):
    """The command did not finish before the deadline and was killed."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Command timed out after {format_seconds(timeout)}")


class SpawnError(ExecutorError):
    """The operating system could not start the child process."""


@dataclass
class ExecutionResult:
    """Outcome of one command run to completion."""

    output: str
    exit_code: int
    status: ExecutionStatus
    duration_ms: int
    work_dir: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def format_seconds(seconds: float) -> str:
    if seconds >= 60 and seconds % 60 == 0:
        minutes = int(seconds // 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{seconds:g} seconds"


def format_output(stdout: str, stderr: str, exit_code: int) -> str:
    """
    Pick the text reported for a finished command.

    Success reports stdout (stderr when stdout is empty); failure reports
    both streams, or a synthetic message when the command was silent.
    """
    if exit_code == 0:
        return stdout or stderr
    return (stdout + stderr) or f"Command exited with code {exit_code}"


class ProcessExecutor:
    """Spawns and supervises shell commands on behalf of sessions."""

    def __init__(
        self,
        token_source: TokenSource,
        sandbox_root: str = DEFAULT_SANDBOX_ROOT,
        home_dir: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_env: Optional[Dict[str, str]] = None,
        shell: str = "sh",
    ):
        """
        Initialize executor.

        Args:
            token_source: Async callable returning a valid access token
            sandbox_root: Default working directory
            home_dir: HOME for spawned commands (defaults to sandbox_root)
            timeout: Hard limit in seconds for a single command
            base_env: Environment to extend (defaults to this process's environment)
            shell: Shell binary used to interpret commands
        """
        self._token_source = token_source
        self.sandbox_root = sandbox_root
        self.home_dir = home_dir or sandbox_root
        self.timeout = timeout
        self._base_env = base_env
        self.shell = shell
        self._supervisors: Set[asyncio.Task] = set()

    def build_env(self, token: str) -> Dict[str, str]:
        """Parent environment plus the injected credential and HOME."""
        env = dict(os.environ if self._base_env is None else self._base_env)
        for name in TOKEN_ENV_VARS:
            env[name] = token
        env["HOME"] = self.home_dir
        return env

    async def execute(self, command: str, work_dir: Optional[str] = None) -> ExecutionResult:
        """
        Run a command and wait for exactly one terminal outcome.

        Args:
            command: Shell command text
            work_dir: Working directory (defaults to the sandbox root)

        Returns:
            ExecutionResult; a non-zero exit is a result, not an error

        Raises:
            CredentialError: No valid token could be obtained
            SpawnError: The child process could not be started
            CommandTimeout: The command exceeded the timeout and was killed
        """
        work_dir = work_dir or self.sandbox_root
        token = await self._token_source()

        started = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                self.shell,
                "-c",
                command,
                cwd=work_dir,
                env=self.build_env(token),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            logger.error(f"Failed to spawn command in {work_dir}: {e}")
            raise SpawnError(f"Failed to start command: {e}") from e

        logger.info(f"Started command pid={process.pid} cwd={work_dir}")

        latch: CompletionLatch[Tuple[str, str, int]] = CompletionLatch()
        loop = asyncio.get_running_loop()
        timer = loop.call_later(self.timeout, self._on_timeout, process, latch)

        # The supervisor owns the timer; it stays armed if the caller stops waiting
        supervisor = asyncio.create_task(self._supervise(process, latch, timer))
        self._supervisors.add(supervisor)
        supervisor.add_done_callback(self._supervisors.discard)

        try:
            stdout, stderr, exit_code = await latch.wait()
        except asyncio.CancelledError:
            logger.info(f"Caller stopped waiting for pid={process.pid}; timeout still applies")
            latch.detach()
            raise

        duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(f"Command pid={process.pid} exited with code {exit_code} in {duration_ms}ms")

        return ExecutionResult(
            output=format_output(stdout, stderr, exit_code),
            exit_code=exit_code,
            status=ExecutionStatus.SUCCESS if exit_code == 0 else ExecutionStatus.FAILURE,
            duration_ms=duration_ms,
            work_dir=work_dir,
        )

    async def _supervise(
        self,
        process: asyncio.subprocess.Process,
        latch: CompletionLatch,
        timer: asyncio.TimerHandle,
    ) -> None:
        """Drain both pipes, reap the child, disarm the timer, then try to settle the latch."""
        try:
            stdout, stderr = await asyncio.gather(
                self._drain(process.stdout),
                self._drain(process.stderr),
            )
            exit_code = await process.wait()
            timer.cancel()
        except Exception as e:
            logger.error(f"Error supervising pid={process.pid}: {e}")
            latch.fail(ExecutorError(f"Failed to collect command output: {e}"))
            return

        if not latch.resolve((stdout, stderr, exit_code)):
            logger.debug(f"pid={process.pid} exited after its timeout fired; result dropped")

    @staticmethod
    async def _drain(stream: Optional[asyncio.StreamReader]) -> str:
        if stream is None:
            return ""
        chunks: List[bytes] = []
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks).decode("utf-8", errors="replace")

    def _on_timeout(self, process: asyncio.subprocess.Process, latch: CompletionLatch) -> None:
        if not latch.fail(CommandTimeout(self.timeout)):
            return
        logger.warning(f"Command pid={process.pid} timed out after {self.timeout}s, killing")
        self._kill(process)

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        # The shell runs in its own session; take down everything it started
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            try:
                process.kill()
            except ProcessLookupError:
                pass
