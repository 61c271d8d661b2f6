from __future__ import annotations

from quoteservice.config.settings import Settings
from quoteservice.providers.base import QuoteSource
from quoteservice.providers.brapi import BrapiSource
from quoteservice.providers.yahoo_proxy import YahooProxySource


def default_sources(config: Settings) -> list[QuoteSource]:
    """Live sources in the order they are tried."""
    currency = config.synthetic.currency
    return [
        BrapiSource.from_settings(config.providers, default_currency=currency),
        YahooProxySource.from_settings(config.providers, default_currency=currency),
    ]
