from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTESERVICE_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )
    brapi_base_url: str = "https://brapi.dev/api/quote"
    brapi_token: str | None = None
    brapi_timeout_seconds: float = 8.0
    yahoo_proxy_url: str = "https://api.allorigins.win/get?url="
    yahoo_chart_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    yahoo_symbol_suffix: str = ".SA"
    yahoo_timeout_seconds: float = 10.0
    user_agent: str = "Optimus-Trading/1.0"


class SyntheticSettings(BaseModel):
    min_price: float = 5.0
    max_price: float = 80.0
    jitter: float = 0.02
    currency: str = "BRL"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTESERVICE_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = "Optimus Trading Quote API"
    service_version: str = "1.0.0"
    environment: str = "production"
    log_level: str = "INFO"

    cache_backend: Literal["memory", "redis"] = "memory"
    cache_ttl_seconds: float = 600.0
    cache_namespace: str = "stock"
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "QUOTESERVICE_REDIS_URL"),
    )
    redis_socket_timeout_seconds: float = 1.0

    batch_max_symbols: int = 20
    refresh_interval_seconds: float = 600.0
    refresh_symbols: List[str] = Field(default_factory=list)
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    synthetic: SyntheticSettings = Field(default_factory=SyntheticSettings)


settings = Settings()
