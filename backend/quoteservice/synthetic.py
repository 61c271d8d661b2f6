from __future__ import annotations

import logging
import random
from typing import Mapping

from quoteservice.config.reference_prices import REFERENCE_PRICES
from quoteservice.config.settings import SyntheticSettings
from quoteservice.providers.base import round2
from quoteservice.schemas.quote import Quote

logger = logging.getLogger(__name__)

SYNTHETIC_SOURCE = "Synthetic estimate"


def _symbol_hash(symbol: str) -> int:
    # 31-multiplier string hash folded to a signed 32-bit integer.
    value = 0
    for char in symbol:
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


class SyntheticEstimator:
    """Builds a stand-in quote when no live source answered.

    Known tickers start from the reference table; unknown ones get a base
    price derived from a hash of the symbol, so the same ticker always maps to
    the same base. A bounded random jitter simulates intraday movement.
    """

    def __init__(
        self,
        reference_prices: Mapping[str, float] = REFERENCE_PRICES,
        config: SyntheticSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.reference_prices = reference_prices
        self.config = config or SyntheticSettings()
        self._rng = rng or random.Random()

    def base_price(self, symbol: str) -> float:
        symbol = symbol.upper()
        known = self.reference_prices.get(symbol)
        if known is not None:
            return known
        # Narrow the band by the jitter so the final price stays inside it.
        low = self.config.min_price / (1 - self.config.jitter)
        high = self.config.max_price / (1 + self.config.jitter)
        band_cents = max(int((high - low) * 100), 1)
        price = low + (abs(_symbol_hash(symbol)) % band_cents) / 100
        logger.info("Unknown symbol %s - estimated base price %.2f", symbol, price)
        return price

    def estimate(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        base = self.base_price(symbol)
        variation = (self._rng.random() - 0.5) * 2 * self.config.jitter
        price = base * (1 + variation)
        change = price - base
        change_percent = (change / base) * 100 if base else 0.0
        return Quote(
            symbol=symbol,
            price=round2(price),
            change=round2(change),
            change_percent=round2(change_percent),
            currency=self.config.currency,
            source=SYNTHETIC_SOURCE,
            is_synthetic=True,
        )
