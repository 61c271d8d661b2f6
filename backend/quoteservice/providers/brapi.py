from __future__ import annotations

from urllib.parse import quote, urlencode

from quoteservice.config.settings import ProviderSettings
from quoteservice.errors import SourceDataInvalid
from quoteservice.providers.base import QuoteSource, change_from_previous, is_number, round2
from quoteservice.schemas.quote import Quote


class BrapiSource(QuoteSource):
    """Primary source: brapi.dev quote endpoint, queried directly by ticker.

    When ``regularMarketPreviousClose`` is present the change is derived from
    it. Otherwise ``regularMarketChange`` is used and the percentage is
    recomputed against the implied previous price, falling back to the
    provider's own percentage when that price is zero.
    """

    name = "Brapi Finance"

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 8.0,
        user_agent: str = "Optimus-Trading/1.0",
        default_currency: str = "BRL",
    ) -> None:
        super().__init__(user_agent)
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.default_currency = default_currency

    @classmethod
    def from_settings(cls, config: ProviderSettings, default_currency: str = "BRL") -> "BrapiSource":
        return cls(
            config.brapi_base_url,
            token=config.brapi_token,
            timeout=config.brapi_timeout_seconds,
            user_agent=config.user_agent,
            default_currency=default_currency,
        )

    def _build_url(self, symbol: str) -> str:
        params = {"fundamental": "false", "dividends": "false"}
        if self.token:
            params["token"] = self.token
        return f"{self.base_url}/{quote(symbol, safe='')}?{urlencode(params)}"

    def fetch_quote(self, symbol: str) -> Quote:
        symbol = symbol.strip().upper()
        payload = self._get_json(self._build_url(symbol), symbol)

        if not isinstance(payload, dict):
            raise SourceDataInvalid(self.name, symbol, "unexpected response shape")
        results = payload.get("results")
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            raise SourceDataInvalid(self.name, symbol, "no data found")

        stock = results[0]
        price = stock.get("regularMarketPrice")
        if not is_number(price) or price < 0:
            raise SourceDataInvalid(self.name, symbol, "invalid price data")

        previous = stock.get("regularMarketPreviousClose")
        provider_change = stock.get("regularMarketChange")
        provider_percent = stock.get("regularMarketChangePercent")
        if is_number(previous):
            change, change_percent = change_from_previous(price, previous)
        elif is_number(provider_change):
            change = float(provider_change)
            implied_previous = price - change
            if implied_previous != 0:
                change_percent = 100 * change / implied_previous
            elif is_number(provider_percent):
                change_percent = float(provider_percent)
            else:
                change_percent = 0.0
        else:
            change, change_percent = 0.0, 0.0

        return Quote(
            symbol=symbol,
            price=round2(price),
            change=round2(change),
            change_percent=round2(change_percent),
            currency=stock.get("currency") or self.default_currency,
            source=self.name,
        )
