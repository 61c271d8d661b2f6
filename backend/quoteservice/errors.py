from __future__ import annotations


class QuoteServiceError(Exception):
    """Base class for every error raised by the quote pipeline."""


class InvalidSymbol(QuoteServiceError):
    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"Invalid or missing stock symbol: {symbol!r}")


class SourceError(QuoteServiceError):
    """A single upstream provider could not produce a quote."""

    def __init__(self, source: str, symbol: str, message: str) -> None:
        self.source = source
        self.symbol = symbol
        super().__init__(f"{source} failed for {symbol}: {message}")


class SourceTimeout(SourceError):
    pass


class SourceUnavailable(SourceError):
    def __init__(
        self, source: str, symbol: str, message: str, status_code: int | None = None
    ) -> None:
        self.status_code = status_code
        super().__init__(source, symbol, message)


class SourceDataInvalid(SourceError):
    pass


class BatchError(QuoteServiceError):
    pass


class EmptyBatch(BatchError):
    def __init__(self) -> None:
        super().__init__("No valid symbols provided")


class BatchTooLarge(BatchError):
    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Too many symbols requested ({size}). Maximum {limit} portfolio stocks allowed."
        )
