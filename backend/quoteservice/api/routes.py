import datetime
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from quoteservice.batch import BatchAggregator, parse_symbols_param
from quoteservice.config.settings import Settings
from quoteservice.errors import BatchError, InvalidSymbol
from quoteservice.market import market_status
from quoteservice.resolver import QuoteResolver
from quoteservice.schemas.quote import (
    BatchResponse,
    CacheClearResponse,
    HealthResponse,
    MarketStatus,
    Quote,
)

logger = logging.getLogger(__name__)

router = APIRouter()

FEATURES = [
    "brapi primary source",
    "yahoo proxy fallback",
    "synthetic estimate fallback",
    "10min cache",
    "portfolio batch lookup",
]


def get_config(request: Request) -> Settings:
    return request.app.state.config


def get_resolver(request: Request) -> QuoteResolver:
    return request.app.state.resolver


def get_aggregator(request: Request) -> BatchAggregator:
    return request.app.state.aggregator


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _bad_request(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": message},
    )


@router.get("/health", response_model=HealthResponse)
def health(config: Settings = Depends(get_config)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service=config.service_name,
        version=config.service_version,
        environment=config.environment,
        timestamp=_utcnow(),
        cache_ttl_seconds=config.cache_ttl_seconds,
        features=FEATURES,
    )


@router.get("/market/status", response_model=MarketStatus)
def market_status_endpoint() -> MarketStatus:
    return market_status()


@router.get("/stock/{symbol}", response_model=Quote)
async def stock_endpoint(
    symbol: str, resolver: QuoteResolver = Depends(get_resolver)
) -> Quote:
    logger.info("Stock quote requested for %s", symbol)
    try:
        return await resolver.resolve(symbol)
    except InvalidSymbol as exc:
        raise _bad_request(str(exc)) from exc


@router.get("/stocks", response_model=BatchResponse)
async def stocks_endpoint(
    symbols: str | None = Query(default=None),
    aggregator: BatchAggregator = Depends(get_aggregator),
    config: Settings = Depends(get_config),
) -> BatchResponse:
    if not symbols:
        raise _bad_request("Missing symbols parameter - provide only portfolio stocks")

    try:
        batch = await aggregator.resolve_batch(parse_symbols_param(symbols))
    except BatchError as exc:
        raise _bad_request(str(exc)) from exc

    return BatchResponse(
        results=batch.results,
        total_requested=batch.total_requested,
        total_successful=batch.total_successful,
        errors=batch.errors,
        data_source=config.service_name,
        cache_duration_minutes=int(aggregator.resolver.cache.ttl_seconds // 60),
        timestamp=_utcnow(),
    )


@router.api_route("/cache/clear", methods=["POST", "DELETE"], response_model=CacheClearResponse)
def cache_clear_endpoint(resolver: QuoteResolver = Depends(get_resolver)) -> CacheClearResponse:
    logger.info("Cache clear requested")
    resolver.clear_cache()
    return CacheClearResponse(message="Cache cleared successfully", timestamp=_utcnow())
