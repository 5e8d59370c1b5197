"""FastAPI application factory for the price gateway."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from oracle_gateway.markets import MarketOverviewService
from oracle_gateway.pricing.gateway import PriceGateway
from oracle_gateway.server import routes


def create_app(
    gateways: dict[str, PriceGateway],
    default_variant: str,
    markets: MarketOverviewService | None = None,
    lifespan: Any = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        gateways: Gateway instances keyed by variant name (``binance``,
                  ``coingecko``); each is served at ``/api/<name>-price``.
        default_variant: Variant served at ``/price``.
        markets: Market overview service backing ``/api/crypto-prices``.
        lifespan: Optional async context manager for startup/shutdown.
                  Used by main.py to close provider clients on exit.

    Raises:
        ValueError: If ``default_variant`` is not one of ``gateways``.
    """
    if default_variant not in gateways:
        raise ValueError(
            f"default variant {default_variant!r} not in configured variants {sorted(gateways)}"
        )

    app = FastAPI(title="Price Oracle Feed Gateway", lifespan=lifespan)

    app.state.gateways = gateways
    app.state.default_variant = default_variant
    app.state.markets = markets

    app.include_router(routes.router)

    return app
