from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from quoteservice.errors import BatchTooLarge, EmptyBatch, QuoteServiceError
from quoteservice.resolver import QuoteResolver
from quoteservice.schemas.quote import BatchResult, Quote, SymbolFailure

logger = logging.getLogger(__name__)

DEFAULT_MAX_SYMBOLS = 20


def parse_symbols_param(raw: str | None) -> list[str]:
    """Split a comma-separated ``symbols`` parameter into unique uppercased tickers."""
    if not raw:
        return []
    cleaned = (part.strip().upper() for part in raw.split(","))
    return list(dict.fromkeys(part for part in cleaned if part))


class BatchAggregator:
    def __init__(self, resolver: QuoteResolver, max_symbols: int = DEFAULT_MAX_SYMBOLS) -> None:
        self.resolver = resolver
        self.max_symbols = max_symbols

    async def resolve_batch(
        self, symbols: Iterable[str], force_refresh: bool = False
    ) -> BatchResult:
        # Invalid entries are kept so they surface as per-symbol failures.
        requested = list(dict.fromkeys((symbol or "").strip().upper() for symbol in symbols))
        if not requested:
            raise EmptyBatch()
        if len(requested) > self.max_symbols:
            raise BatchTooLarge(len(requested), self.max_symbols)

        logger.info("Batch request for %d symbols: %s", len(requested), ", ".join(requested))

        resolve = self.resolver.refresh if force_refresh else self.resolver.resolve
        outcomes = await asyncio.gather(
            *(resolve(symbol) for symbol in requested), return_exceptions=True
        )

        results: dict[str, Quote] = {}
        failures: list[SymbolFailure] = []
        for symbol, outcome in zip(requested, outcomes):
            if isinstance(outcome, Quote):
                results[symbol] = outcome
                continue
            if isinstance(outcome, QuoteServiceError):
                logger.warning("Batch symbol failed: %s: %s", symbol, outcome)
            elif isinstance(outcome, Exception):
                logger.error(
                    "Batch symbol %s raised unexpectedly", symbol, exc_info=outcome
                )
            else:
                raise outcome
            failures.append(SymbolFailure(symbol=symbol, message=str(outcome)))

        batch = BatchResult(requested=requested, results=results, failures=failures)
        logger.info(
            "Batch completed: %d/%d successful", batch.total_successful, batch.total_requested
        )
        return batch
