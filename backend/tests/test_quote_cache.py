import fnmatch
import threading

from redis.exceptions import ConnectionError as RedisConnectionError

from quoteservice.cache import MemoryQuoteCache, RedisQuoteCache, build_cache, build_cache_key
from quoteservice.config.settings import Settings
from quoteservice.schemas.quote import Quote


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expirations: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self.store.get(key)

    def set(self, key: str, value: str, px: int | None = None) -> None:
        self.store[key] = value
        self.expirations[key] = px

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    def scan_iter(self, match: str = "*"):
        return [key for key in list(self.store) if fnmatch.fnmatch(key, match)]


class BrokenRedis:
    def get(self, key: str):
        raise RedisConnectionError("down")

    def set(self, key: str, value: str, px: int | None = None):
        raise RedisConnectionError("down")


def make_quote(symbol: str = "PETR4", price: float = 38.45) -> Quote:
    return Quote(symbol=symbol, price=price, source="Brapi Finance")


def test_cache_key_is_uppercased_and_namespaced() -> None:
    assert build_cache_key(" petr4 ") == "PETR4"
    assert build_cache_key("petr4", "stock") == "stock:PETR4"
    assert MemoryQuoteCache(namespace="prod").cache_key("vale3") == "prod:VALE3"


def test_memory_cache_expires_at_ttl_boundary() -> None:
    clock = FakeClock()
    cache = MemoryQuoteCache(ttl_seconds=600, clock=clock)
    quote = make_quote()
    cache.set("PETR4", quote)

    clock.now = 1599.999
    assert cache.get("PETR4") == quote

    clock.now = 1600.0
    assert cache.get("PETR4") is None

    clock.now = 1600.001
    assert cache.get("PETR4") is None


def test_memory_cache_last_writer_wins() -> None:
    cache = MemoryQuoteCache(clock=FakeClock())
    cache.set("PETR4", make_quote(price=38.45))
    cache.set("PETR4", make_quote(price=39.10))

    cached = cache.get("PETR4")
    assert cached is not None
    assert cached.price == 39.10
    assert len(cache) == 1


def test_memory_cache_overwrite_resets_age() -> None:
    clock = FakeClock()
    cache = MemoryQuoteCache(ttl_seconds=600, clock=clock)
    cache.set("PETR4", make_quote())
    clock.now += 500
    cache.set("PETR4", make_quote(price=40.0))
    clock.now += 500
    assert cache.get("PETR4") is not None


def test_memory_cache_clear_and_delete() -> None:
    cache = MemoryQuoteCache(clock=FakeClock())
    cache.set("PETR4", make_quote())
    cache.set("VALE3", make_quote("VALE3", 58.82))

    cache.delete("PETR4")
    cache.delete("MISSING")
    assert cache.get("PETR4") is None
    assert cache.get("VALE3") is not None

    cache.clear()
    cache.clear()
    assert cache.get("VALE3") is None
    assert len(cache) == 0


def test_redis_cache_roundtrip() -> None:
    fake = FakeRedis()
    cache = RedisQuoteCache(fake, ttl_seconds=600, namespace="stock")
    quote = make_quote()
    key = cache.cache_key("petr4")

    cache.set(key, quote)
    cached = cache.get(key)

    assert key == "stock:PETR4"
    assert cached == quote
    assert fake.expirations[key] == 600_000
    assert '"changePercent"' in fake.store[key]


def test_redis_cache_clear_only_touches_namespace() -> None:
    fake = FakeRedis()
    fake.store["other:thing"] = "keep"
    cache = RedisQuoteCache(fake, namespace="stock")
    cache.set(cache.cache_key("PETR4"), make_quote())
    cache.set(cache.cache_key("VALE3"), make_quote("VALE3", 58.82))

    cache.clear()

    assert list(fake.store) == ["other:thing"]


def test_redis_cache_discards_unreadable_entries() -> None:
    fake = FakeRedis()
    fake.store["stock:PETR4"] = "not json"
    cache = RedisQuoteCache(fake, namespace="stock")
    assert cache.get("stock:PETR4") is None


def test_redis_cache_degrades_to_miss_when_unreachable() -> None:
    cache = RedisQuoteCache(BrokenRedis(), namespace="stock")
    cache.set("stock:PETR4", make_quote())
    assert cache.get("stock:PETR4") is None


def test_build_cache_selects_backend() -> None:
    memory = build_cache(Settings(cache_backend="memory", cache_ttl_seconds=30))
    assert isinstance(memory, MemoryQuoteCache)
    assert memory.ttl_seconds == 30

    redis_cache = build_cache(Settings(cache_backend="redis", cache_namespace="dev"))
    assert isinstance(redis_cache, RedisQuoteCache)
    assert redis_cache.namespace == "dev"


def test_memory_cache_concurrent_writes_leave_one_winner() -> None:
    cache = MemoryQuoteCache(clock=FakeClock())
    written = [make_quote(price=float(index + 1)) for index in range(50)]
    barrier = threading.Barrier(len(written))

    def write(quote: Quote) -> None:
        barrier.wait()
        cache.set("PETR4", quote)

    threads = [threading.Thread(target=write, args=(quote,)) for quote in written]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 1
    assert cache.get("PETR4") in written


def test_build_cache_bounds_redis_socket_waits() -> None:
    redis_cache = build_cache(
        Settings(cache_backend="redis", redis_socket_timeout_seconds=0.5)
    )
    connection_kwargs = redis_cache.client.connection_pool.connection_kwargs
    assert connection_kwargs["socket_timeout"] == 0.5
    assert connection_kwargs["socket_connect_timeout"] == 0.5
