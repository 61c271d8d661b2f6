from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    symbol: str = Field(min_length=2)
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    currency: str = "BRL"
    timestamp: datetime.datetime = Field(default_factory=_utcnow)
    source: str
    is_synthetic: bool = False


class SymbolFailure(BaseModel):
    symbol: str
    message: str


class BatchResult(BaseModel):
    requested: list[str] = Field(default_factory=list)
    results: dict[str, Quote] = Field(default_factory=dict)
    failures: list[SymbolFailure] = Field(default_factory=list)

    @computed_field
    @property
    def total_requested(self) -> int:
        return len(self.requested)

    @computed_field
    @property
    def total_successful(self) -> int:
        return len(self.results)

    @computed_field
    @property
    def errors(self) -> list[str] | None:
        if not self.failures:
            return None
        return [f"{failure.symbol}: {failure.message}" for failure in self.failures]


class BatchResponse(BaseModel):
    results: dict[str, Quote]
    total_requested: int
    total_successful: int
    errors: list[str] | None = None
    data_source: str
    cache_duration_minutes: int
    timestamp: datetime.datetime


class CacheClearResponse(BaseModel):
    message: str
    timestamp: datetime.datetime


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    timestamp: datetime.datetime
    cache_ttl_seconds: float
    features: list[str] = Field(default_factory=list)


class MarketStatus(BaseModel):
    is_open: bool
    status: str
    checked_at: datetime.datetime
