from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quoteservice.api.routes import router
from quoteservice.batch import BatchAggregator
from quoteservice.cache import build_cache
from quoteservice.config.settings import Settings, settings
from quoteservice.logging_config import configure_logging
from quoteservice.providers.selector import default_sources
from quoteservice.refresh import QuoteRefresher
from quoteservice.resolver import QuoteResolver
from quoteservice.synthetic import SyntheticEstimator

logger = logging.getLogger(__name__)


def create_app(config: Settings = settings) -> FastAPI:
    configure_logging(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cache = build_cache(config)
        resolver = QuoteResolver(
            cache,
            default_sources(config),
            SyntheticEstimator(config=config.synthetic),
        )
        aggregator = BatchAggregator(resolver, max_symbols=config.batch_max_symbols)
        refresher = QuoteRefresher(aggregator, interval_seconds=config.refresh_interval_seconds)

        app.state.cache = cache
        app.state.resolver = resolver
        app.state.aggregator = aggregator
        app.state.refresher = refresher

        logger.info(
            "%s %s starting (cache=%s, ttl=%.0fs)",
            config.service_name,
            config.service_version,
            config.cache_backend,
            config.cache_ttl_seconds,
        )
        if config.refresh_symbols:
            await refresher.start(config.refresh_symbols)

        yield

        await refresher.stop()

    app = FastAPI(title=config.service_name, version=config.service_version, lifespan=lifespan)
    app.state.config = config
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix="/api")
    return app


def serve() -> None:
    uvicorn.run(
        "quoteservice.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8888,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    serve()
