"""FIFO-fair bound on concurrently running coroutines."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import TYPE_CHECKING, Any, Self

from code_to_prompt.config import DEFAULT_CONCURRENCY

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType


class ConcurrencyLimiter:
    """Admit at most `limit` bodies at once, queueing the rest in arrival order.

    A released slot is handed straight to the oldest waiter, so a newcomer can
    never overtake the queue. Slots are released on exit of the body whether
    it returned or raised.

    Attributes:
        limit: Maximum number of simultaneously running bodies.
        active: Bodies currently holding a slot.
        peak: Highest value `active` has reached.
    """

    def __init__(self, limit: int = DEFAULT_CONCURRENCY) -> None:
        if limit < 1:
            msg = f"Concurrency limit must be at least 1, got {limit}"
            raise ValueError(msg)
        self.limit = limit
        self.active = 0
        self.peak = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    def __repr__(self) -> str:
        return f"ConcurrencyLimiter(limit={self.limit}, active={self.active}, waiting={self.waiting})"

    @property
    def waiting(self) -> int:
        return sum(1 for w in self._waiters if not w.done())

    def _take_slot(self) -> None:
        self.active += 1
        self.peak = max(self.peak, self.active)

    async def acquire(self) -> None:
        """Wait for a free slot."""
        if self.active < self.limit and not self.waiting:
            self._take_slot()
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # The slot was handed over just before cancellation: pass it on.
                self.release()
            else:
                self._waiters.remove(waiter)
            raise

    def release(self) -> None:
        """Give the slot to the oldest live waiter, or free it."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self.active -= 1

    async def __aenter__(self) -> Self:
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    async def run(self, func: Callable[..., Awaitable[Any]], *args: Any) -> Any:  # noqa: ANN401
        """Run `func(*args)` once a slot is available.

        Args:
            func (Callable[..., Awaitable[Any]]): coroutine function to run
            *args (Any): positional arguments for `func`

        Returns:
            Any: whatever `func` returned
        """
        async with self:
            return await func(*args)
