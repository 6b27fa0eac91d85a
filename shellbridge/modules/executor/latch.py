"""One-shot completion gate shared by racing event sources."""

import asyncio
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class CompletionLatch(Generic[T]):
    """
    Settles exactly once.

    The first resolve()/fail() wins and returns True; every later call is
    a no-op returning False. Must be created inside a running event loop.
    """

    def __init__(self):
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def settled(self) -> bool:
        return self._future.done()

    def resolve(self, value: T) -> bool:
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    def fail(self, error: BaseException) -> bool:
        if self._future.done():
            return False
        self._future.set_exception(error)
        return True

    def detach(self) -> None:
        """Nobody will wait for the outcome; settle it silently."""
        self._future.add_done_callback(_consume)

    async def wait(self) -> T:
        # shield: a cancelled waiter must not settle the latch for the other side
        return await asyncio.shield(self._future)

    def __repr__(self) -> str:
        state: Any = "pending"
        if self._future.done():
            state = "failed" if self._future.exception() else "resolved"
        return f"<CompletionLatch {state}>"


def _consume(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()
