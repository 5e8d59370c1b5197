"""Binance USDⓈ-M futures price provider via ccxt async.

Uses the raw ``GET /fapi/v1/ticker/price`` endpoint, keyed by the exchange
trading pair (``BTCUSDT``), so no market loading is needed before the first
request.
"""

import time
from collections.abc import Callable

import ccxt.async_support as ccxt_async

from oracle_gateway.config import ProviderSettings
from oracle_gateway.exceptions import (
    MalformedPayloadError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from oracle_gateway.logging import get_logger
from oracle_gateway.models import ProviderId
from oracle_gateway.providers.base import PriceProvider, parse_price

logger = get_logger(__name__)


class BinanceProvider(PriceProvider):
    """Futures last-price provider wrapping ccxt.async_support.binanceusdm."""

    provider_id = ProviderId.BINANCE

    def __init__(
        self,
        settings: ProviderSettings,
        exchange: ccxt_async.Exchange | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock)
        self._exchange = exchange or ccxt_async.binanceusdm(
            {
                "enableRateLimit": settings.binance_enable_rate_limit,
                "timeout": int(settings.timeout_seconds * 1000),  # ccxt uses ms
            }
        )

    @property
    def exchange(self) -> ccxt_async.Exchange:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def _request_price(self, symbol: str) -> float:
        try:
            data = await self._exchange.fapiPublicGetTickerPrice({"symbol": symbol})
        except (ccxt_async.RateLimitExceeded, ccxt_async.DDoSProtection) as e:
            raise ProviderRateLimitedError(f"Binance rate limited: {e}") from e
        except ccxt_async.RequestTimeout as e:
            raise ProviderTimeoutError(f"Binance timeout: {e}") from e
        except ccxt_async.BaseError as e:
            raise ProviderUnavailableError(f"{type(e).__name__}: {e}") from e

        if not isinstance(data, dict):
            raise MalformedPayloadError("Binance ticker response is not an object")
        return parse_price(data.get("price"))

    async def close(self) -> None:
        """Clean up ccxt async resources. Must be called to avoid leaked sessions."""
        await self._exchange.close()
        logger.info("binance_connection_closed")
