"""Cooperative cancellation for a single exchange.

Each exchange gets a fresh token. Waiting on the network is raced against
the token, so a cancel is observed at the next suspension point even when
the endpoint is slow to deliver the next increment.
"""

import asyncio
import contextlib
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable
from typing import TypeVar

from groq_terminal.chat.errors import ExchangeCancelled

T = TypeVar("T")

_EXHAUSTED = object()


class CancellationToken:
    """One-shot cancellation flag shared between controller and exchange."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ExchangeCancelled()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await `awaitable` unless the token is cancelled first.

        On cancellation the pending work is cancelled and awaited before
        ExchangeCancelled is raised, so the transport stops delivering data.
        A result that arrives together with a cancel is discarded.

        Raises:
            ExchangeCancelled: If the token was or becomes cancelled.
        """
        if self.cancelled:
            close = getattr(awaitable, "close", None)
            if close is not None:
                close()
            raise ExchangeCancelled()
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not work.done():
                work.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await work
        self.raise_if_cancelled()
        return work.result()

    async def iterate(self, stream: AsyncIterator[T]) -> AsyncGenerator[T]:
        """Yield items from `stream` until it ends or the token is cancelled.

        Raises:
            ExchangeCancelled: If the token is cancelled before the stream ends.
        """
        while True:
            item = await self.run(anext(stream, _EXHAUSTED))
            if item is _EXHAUSTED:
                return
            yield item
