import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Fetch = Callable[[], Union[Any, Awaitable[Any]]]


class LiveQuery:
    """
    Cancellable subscription yielding full snapshots of a query.

    The query is polled every ``interval`` seconds and a snapshot is yielded
    the first time and whenever it differs from the previous one. A failing
    fetch is logged and passed to ``on_error``; the previous snapshot stays
    current. Consumers must cancel (or use ``async with``) on teardown.

    Example:
        async with LiveQuery(lambda: ledger.list_products(), interval=2) as feed:
            async for products in feed:
                render(products)
    """

    def __init__(
        self,
        fetch: Fetch,
        interval: float = 2.0,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.fetch = fetch
        self.interval = interval
        self.on_error = on_error
        self.snapshot: Any = None
        self._has_snapshot = False
        self._polled = False
        self._cancelled = False
        self._wake: Optional[asyncio.Event] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop delivering snapshots; a pending wait returns immediately."""
        self._cancelled = True
        if self._wake is not None:
            self._wake.set()

    async def __aenter__(self) -> "LiveQuery":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.cancel()

    def __aiter__(self) -> "LiveQuery":
        return self

    async def __anext__(self) -> Any:
        while not self._cancelled:
            if self._polled:
                await self._wait()
                if self._cancelled:
                    break
            self._polled = True

            try:
                value = self.fetch()
                if inspect.isawaitable(value):
                    value = await value
            except Exception as e:
                logger.error(f"Live query fetch failed; keeping previous snapshot: {e}")
                if self.on_error is not None:
                    self.on_error(e)
                continue

            if not self._has_snapshot or value != self.snapshot:
                self.snapshot = value
                self._has_snapshot = True
                return value

        raise StopAsyncIteration

    async def _wait(self) -> None:
        # Created on first wait so the event belongs to the consuming loop
        if self._wake is None:
            self._wake = asyncio.Event()
        try:
            await asyncio.wait_for(self._wake.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            pass
