"""JSON endpoints: oracle-format prices per gateway variant, market overview, status."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from oracle_gateway.exceptions import (
    AllSourcesFailedError,
    AssetNotSupportedError,
    ProviderError,
)
from oracle_gateway.pricing.gateway import PriceGateway, price_payload

log = structlog.get_logger(__name__)

router = APIRouter()

ASSET_NOT_SUPPORTED = "Asset not supported"
ALL_SOURCES_FAILED = "Failed to fetch price from all sources"
MARKETS_FAILED = "Failed to fetch crypto prices"


async def _serve_price(gateway: PriceGateway, asset: str | None) -> JSONResponse:
    with structlog.contextvars.bound_contextvars(gateway=gateway.name, asset=asset):
        try:
            result = await gateway.get_price(asset)
        except AssetNotSupportedError:
            log.info("asset_not_supported")
            return JSONResponse(content={"error": ASSET_NOT_SUPPORTED}, status_code=400)
        except AllSourcesFailedError:
            return JSONResponse(content={"error": ALL_SOURCES_FAILED}, status_code=500)
    return JSONResponse(content=price_payload(result))


@router.get("/price")
async def get_price(request: Request, asset: str | None = None) -> JSONResponse:
    """Oracle-format price from the default gateway variant."""
    gateways: dict[str, PriceGateway] = request.app.state.gateways
    return await _serve_price(gateways[request.app.state.default_variant], asset)


@router.get("/api/crypto-prices")
async def get_crypto_prices(request: Request) -> JSONResponse:
    """Market overview rows (price, market cap, sparkline) for the markets table."""
    markets = request.app.state.markets
    if markets is None:
        return JSONResponse(content={"error": "Market overview disabled"}, status_code=404)
    try:
        rows = await markets.fetch_markets()
    except ProviderError as e:
        log.error("market_overview_failed", error=str(e))
        return JSONResponse(content={"error": MARKETS_FAILED}, status_code=500)
    return JSONResponse(content=rows, headers={"Cache-Control": markets.cache_control})


@router.get("/api/status")
async def get_status(request: Request) -> JSONResponse:
    """Per-variant configuration and cache contents."""
    gateways: dict[str, PriceGateway] = request.app.state.gateways
    return JSONResponse(
        content={
            "default_variant": request.app.state.default_variant,
            "variants": {name: gw.status() for name, gw in gateways.items()},
        }
    )


@router.get("/api/{variant}-price")
async def get_variant_price(
    request: Request, variant: str, asset: str | None = None
) -> JSONResponse:
    """Oracle-format price from a named gateway variant (e.g. /api/binance-price)."""
    gateway = request.app.state.gateways.get(variant)
    if gateway is None:
        return JSONResponse(content={"error": f"Unknown price source: {variant}"}, status_code=404)
    return await _serve_price(gateway, asset)
