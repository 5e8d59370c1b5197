"""Entry point for the price oracle gateway.

Wires components together and serves the FastAPI app with uvicorn on a
single asyncio event loop.

Component wiring order (in build_components):
1. Provider clients (one shared instance per upstream)
2. Symbol mapper and provider chain per configured variant
3. PriceGateway per variant, each with its own cache and in-flight map
4. MarketOverviewService (reuses the CoinGecko client)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from oracle_gateway.config import AppSettings
from oracle_gateway.logging import get_logger, setup_logging
from oracle_gateway.markets import MarketOverviewService
from oracle_gateway.models import ProviderId
from oracle_gateway.pricing.cache import PriceCache
from oracle_gateway.pricing.chain import ProviderChain
from oracle_gateway.pricing.gateway import PriceGateway
from oracle_gateway.pricing.symbols import SymbolMapper
from oracle_gateway.providers import PriceProvider, build_providers
from oracle_gateway.providers.coingecko import CoinGeckoProvider
from oracle_gateway.server.app import create_app


def build_gateways(
    settings: AppSettings, providers: dict[ProviderId, PriceProvider]
) -> dict[str, PriceGateway]:
    """Create one PriceGateway per configured variant."""
    gateways: dict[str, PriceGateway] = {}
    for name, variant in settings.gateway.variants.items():
        mapper = SymbolMapper(variant.symbol_overrides)
        chain = ProviderChain(
            [providers[p] for p in variant.providers],
            mapper,
            timeout_seconds=settings.providers.timeout_seconds,
        )
        gateways[name] = PriceGateway(
            name=name,
            chain=chain,
            mapper=mapper,
            cache=PriceCache(ttl_seconds=variant.ttl_seconds),
        )
    return gateways


def build_components(settings: AppSettings) -> dict[str, Any]:
    """Build providers, gateways and the market overview from settings."""
    providers = build_providers(settings.providers)
    coingecko = providers[ProviderId.COINGECKO]
    assert isinstance(coingecko, CoinGeckoProvider)
    return {
        "providers": providers,
        "gateways": build_gateways(settings, providers),
        "markets": MarketOverviewService(coingecko, settings.markets),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup; on shutdown close every provider's HTTP client."""
    logger = get_logger("oracle_gateway.main")
    providers: dict[ProviderId, PriceProvider] = app.state.providers

    logger.info(
        "gateway_started",
        variants=sorted(app.state.gateways),
        default_variant=app.state.default_variant,
    )

    yield

    for provider_id, provider in providers.items():
        try:
            await provider.close()
        except Exception:
            logger.warning("provider_close_failed", provider=provider_id.value, exc_info=True)

    logger.info("gateway_stopped")


async def run() -> None:
    """Load settings, build components and serve until shutdown."""
    settings = AppSettings()

    setup_logging(settings.log_level)
    logger = get_logger("oracle_gateway.main")

    components = build_components(settings)

    app = create_app(
        gateways=components["gateways"],
        default_variant=settings.gateway.default_variant,
        markets=components["markets"],
        lifespan=lifespan,
    )
    app.state.providers = components["providers"]

    logger.info(
        "starting_gateway_server",
        host=settings.server.host,
        port=settings.server.port,
        timeout_seconds=settings.providers.timeout_seconds,
    )

    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
