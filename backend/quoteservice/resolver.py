from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from quoteservice.cache import QuoteCache
from quoteservice.errors import InvalidSymbol, SourceError
from quoteservice.providers.base import QuoteSource
from quoteservice.schemas.quote import Quote
from quoteservice.synthetic import SyntheticEstimator

logger = logging.getLogger(__name__)

MIN_SYMBOL_LENGTH = 2


def normalize_symbol(symbol: str) -> str:
    normalized = (symbol or "").strip().upper()
    if len(normalized) < MIN_SYMBOL_LENGTH:
        raise InvalidSymbol(symbol)
    return normalized


class QuoteResolver:
    """Resolves one symbol: cache, then each live source in order, then a
    synthetic estimate. Only ``InvalidSymbol`` ever escapes ``resolve``.
    """

    def __init__(
        self,
        cache: QuoteCache,
        sources: Sequence[QuoteSource],
        estimator: SyntheticEstimator | None = None,
    ) -> None:
        self.cache = cache
        self.sources = list(sources)
        self.estimator = estimator or SyntheticEstimator()

    async def resolve(self, symbol: str) -> Quote:
        symbol = normalize_symbol(symbol)
        key = self.cache.cache_key(symbol)

        # Cache backends may do blocking I/O (Redis), so keep them off the loop.
        cached = await asyncio.to_thread(self.cache.get, key)
        if cached is not None:
            return cached

        for source in self.sources:
            try:
                quote = await asyncio.to_thread(source.fetch_quote, symbol)
            except SourceError as exc:
                logger.warning("%s", exc)
                continue
            except Exception:
                logger.exception("%s raised unexpectedly for %s", source.name, symbol)
                continue

            await asyncio.to_thread(self.cache.set, key, quote)
            logger.info(
                "%s success: %s = %.2f %s (%+.2f%%)",
                source.name,
                symbol,
                quote.price,
                quote.currency,
                quote.change_percent,
            )
            return quote

        logger.error("All sources failed for %s - using synthetic estimate", symbol)
        quote = self.estimator.estimate(symbol)
        await asyncio.to_thread(self.cache.set, key, quote)
        return quote

    async def refresh(self, symbol: str) -> Quote:
        """Drop any cached quote for ``symbol`` and resolve it again."""
        symbol = normalize_symbol(symbol)
        await asyncio.to_thread(self.cache.delete, self.cache.cache_key(symbol))
        return await self.resolve(symbol)

    def clear_cache(self) -> None:
        self.cache.clear()
