from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Iterable

from quoteservice.batch import BatchAggregator
from quoteservice.errors import BatchTooLarge
from quoteservice.schemas.quote import BatchResult

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[BatchResult], Awaitable[None] | None]


class QuoteRefresher:
    """Periodically re-resolves a watched set of symbols, bypassing the cache.

    The loop lives in a single asyncio task owned by this object; ``start``
    replaces any running loop and ``stop`` cancels it.
    """

    def __init__(
        self,
        aggregator: BatchAggregator,
        interval_seconds: float = 600.0,
        on_refresh: RefreshCallback | None = None,
    ) -> None:
        self.aggregator = aggregator
        self.interval_seconds = interval_seconds
        self.on_refresh = on_refresh
        self.symbols: list[str] = []
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, symbols: Iterable[str]) -> None:
        await self.stop()
        symbols = list(dict.fromkeys(symbol.strip().upper() for symbol in symbols))
        if len(symbols) > self.aggregator.max_symbols:
            raise BatchTooLarge(len(symbols), self.aggregator.max_symbols)
        self.symbols = symbols
        if not self.symbols:
            return
        self._task = asyncio.create_task(self._run(), name="quote-refresher")
        logger.info(
            "Quote refresh started for %d symbols every %.0fs",
            len(self.symbols),
            self.interval_seconds,
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Quote refresh stopped")

    async def refresh_once(self) -> BatchResult:
        batch = await self.aggregator.resolve_batch(self.symbols, force_refresh=True)
        if self.on_refresh is not None:
            outcome = self.on_refresh(batch)
            if asyncio.iscoroutine(outcome):
                await outcome
        return batch

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.refresh_once()
            except Exception:
                logger.exception("Scheduled quote refresh failed")
