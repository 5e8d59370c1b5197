"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from oracle_gateway.models import ProviderId


class ProviderSettings(BaseSettings):
    """Upstream price provider connection settings."""

    model_config = SettingsConfigDict(env_prefix="PROVIDER_")

    timeout_seconds: float = 4.0  # Bounds every upstream call
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_api_key: SecretStr = SecretStr("")  # Optional demo key
    defillama_base_url: str = "https://coins.llama.fi"
    binance_enable_rate_limit: bool = True


class VariantSettings(BaseModel):
    """One deployment variant of the gateway: TTL, provider chain, symbol overrides."""

    ttl_seconds: float = 300.0
    providers: list[ProviderId] = Field(
        default_factory=lambda: [ProviderId.COINGECKO, ProviderId.DEFILLAMA]
    )
    # provider -> {asset -> provider symbol}; merged over the built-in tables
    symbol_overrides: dict[ProviderId, dict[str, str]] = Field(default_factory=dict)


def _default_variants() -> dict[str, VariantSettings]:
    return {
        "binance": VariantSettings(
            ttl_seconds=30.0,
            providers=[ProviderId.BINANCE, ProviderId.COINGECKO],
        ),
        "coingecko": VariantSettings(
            ttl_seconds=300.0,
            providers=[ProviderId.COINGECKO, ProviderId.DEFILLAMA],
        ),
    }


class GatewaySettings(BaseSettings):
    """Gateway variants exposed over HTTP.

    Each variant becomes its own PriceGateway instance with an independent
    cache and in-flight map. ``default_variant`` backs ``GET /price``.
    """

    model_config = SettingsConfigDict(env_prefix="GATEWAY_")

    default_variant: str = "coingecko"
    variants: dict[str, VariantSettings] = Field(default_factory=_default_variants)


class MarketSettings(BaseSettings):
    """Market overview proxy configuration."""

    model_config = SettingsConfigDict(env_prefix="MARKETS_")

    coin_ids: list[str] = Field(
        default_factory=lambda: ["bitcoin", "ethereum", "solana", "cardano", "polkadot"]
    )
    cache_control: str = "public, s-maxage=10, stale-while-revalidate=30"


class ServerSettings(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    providers: ProviderSettings = ProviderSettings()
    gateway: GatewaySettings = GatewaySettings()
    markets: MarketSettings = MarketSettings()
    server: ServerSettings = ServerSettings()
