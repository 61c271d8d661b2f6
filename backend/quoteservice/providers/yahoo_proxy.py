from __future__ import annotations

import json
from urllib.parse import quote

from quoteservice.config.settings import ProviderSettings
from quoteservice.errors import SourceDataInvalid
from quoteservice.providers.base import QuoteSource, change_from_previous, is_number, round2
from quoteservice.schemas.quote import Quote


class YahooProxySource(QuoteSource):
    """Secondary source: Yahoo Finance chart API reached through a CORS proxy.

    The proxy wraps the upstream body as a JSON string under ``contents``.
    """

    name = "Yahoo Finance (proxy)"

    def __init__(
        self,
        proxy_url: str,
        chart_url: str,
        symbol_suffix: str = ".SA",
        timeout: float = 10.0,
        user_agent: str = "Optimus-Trading/1.0",
        default_currency: str = "BRL",
    ) -> None:
        super().__init__(user_agent)
        self.proxy_url = proxy_url
        self.chart_url = chart_url.rstrip("/")
        self.symbol_suffix = symbol_suffix
        self.timeout = timeout
        self.default_currency = default_currency

    @classmethod
    def from_settings(
        cls, config: ProviderSettings, default_currency: str = "BRL"
    ) -> "YahooProxySource":
        return cls(
            config.yahoo_proxy_url,
            config.yahoo_chart_url,
            symbol_suffix=config.yahoo_symbol_suffix,
            timeout=config.yahoo_timeout_seconds,
            user_agent=config.user_agent,
            default_currency=default_currency,
        )

    def _build_url(self, symbol: str) -> str:
        upstream = f"{self.chart_url}/{symbol}{self.symbol_suffix}"
        return f"{self.proxy_url}{quote(upstream, safe='')}"

    def fetch_quote(self, symbol: str) -> Quote:
        symbol = symbol.strip().upper()
        wrapper = self._get_json(self._build_url(symbol), symbol)

        contents = wrapper.get("contents") if isinstance(wrapper, dict) else None
        if not isinstance(contents, str):
            raise SourceDataInvalid(self.name, symbol, "proxy returned no contents")
        try:
            data = json.loads(contents)
        except json.JSONDecodeError as exc:
            raise SourceDataInvalid(self.name, symbol, "proxied body is not valid JSON") from exc

        chart = data.get("chart") if isinstance(data, dict) else None
        results = chart.get("result") if isinstance(chart, dict) else None
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            raise SourceDataInvalid(self.name, symbol, "no chart data found")

        meta = results[0].get("meta")
        if not isinstance(meta, dict):
            raise SourceDataInvalid(self.name, symbol, "no chart metadata")
        price = meta.get("regularMarketPrice")
        if not is_number(price) or price < 0:
            raise SourceDataInvalid(self.name, symbol, "invalid price data")

        price = float(price)
        previous = meta.get("previousClose")
        if not is_number(previous):
            previous = meta.get("chartPreviousClose")
        if not is_number(previous):
            previous = price
        change, change_percent = change_from_previous(price, float(previous))

        return Quote(
            symbol=symbol,
            price=round2(price),
            change=round2(change),
            change_percent=round2(change_percent),
            currency=meta.get("currency") or self.default_currency,
            source=self.name,
        )
