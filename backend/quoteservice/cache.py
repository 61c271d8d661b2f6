from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

from pydantic import ValidationError
from redis import Redis
from redis.exceptions import RedisError

from quoteservice.config.settings import Settings
from quoteservice.schemas.quote import Quote

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600.0


def build_cache_key(symbol: str, namespace: str = "") -> str:
    normalized = symbol.strip().upper()
    if namespace:
        return f"{namespace}:{normalized}"
    return normalized


class QuoteCache(Protocol):
    ttl_seconds: float

    def cache_key(self, symbol: str) -> str: ...

    def get(self, key: str) -> Quote | None: ...

    def set(self, key: str, quote: Quote) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryQuoteCache:
    """Process-wide quote cache with lazy expiry.

    Entries older than ``ttl_seconds`` are reported as absent but are only
    dropped when overwritten or when the cache is cleared.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        namespace: str = "",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[Quote, float]] = {}

    def cache_key(self, symbol: str) -> str:
        return build_cache_key(symbol, self.namespace)

    def get(self, key: str) -> Quote | None:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        quote, stored_at = entry
        age = self._clock() - stored_at
        if age >= self.ttl_seconds:
            return None
        logger.debug("Cache hit for %s (age: %.0fs)", key, age)
        return quote

    def set(self, key: str, quote: Quote) -> None:
        stored_at = self._clock()
        with self._lock:
            self._entries[key] = (quote, stored_at)
        logger.debug("Cached %s (%.0fs TTL)", key, self.ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries = {}
        logger.info("Quote cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisQuoteCache:
    """Quote cache shared between processes through Redis.

    Redis owns expiry (``PX``), so a key that outlived the TTL is simply gone.
    Connection problems degrade to a miss; the pipeline keeps working without
    a cache.
    """

    def __init__(
        self,
        client: Redis,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        namespace: str = "stock",
    ) -> None:
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace

    def cache_key(self, symbol: str) -> str:
        return build_cache_key(symbol, self.namespace)

    def get(self, key: str) -> Quote | None:
        try:
            raw = self.client.get(key)
        except RedisError as exc:
            logger.warning("Redis get failed for %s: %s", key, exc)
            return None

        if not raw:
            return None

        try:
            return Quote.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable cache entry %s", key)
            return None

    def set(self, key: str, quote: Quote) -> None:
        try:
            self.client.set(
                key, quote.model_dump_json(by_alias=True), px=int(self.ttl_seconds * 1000)
            )
        except RedisError as exc:
            logger.warning("Redis set failed for %s: %s", key, exc)

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except RedisError as exc:
            logger.warning("Redis delete failed for %s: %s", key, exc)

    def clear(self) -> None:
        pattern = f"{self.namespace}:*" if self.namespace else "*"
        try:
            keys = list(self.client.scan_iter(match=pattern))
            if keys:
                self.client.delete(*keys)
        except RedisError as exc:
            logger.warning("Redis clear failed: %s", exc)
            return
        logger.info("Quote cache cleared (%d keys)", len(keys))


def build_cache(config: Settings) -> QuoteCache:
    if config.cache_backend == "redis":
        return RedisQuoteCache(
            Redis.from_url(
                config.redis_url,
                socket_timeout=config.redis_socket_timeout_seconds,
                socket_connect_timeout=config.redis_socket_timeout_seconds,
            ),
            ttl_seconds=config.cache_ttl_seconds,
            namespace=config.cache_namespace,
        )
    return MemoryQuoteCache(
        ttl_seconds=config.cache_ttl_seconds, namespace=config.cache_namespace
    )
