"""CoinGecko price provider via the public simple-price API."""

import time
from collections.abc import Callable
from typing import Any

import httpx

from oracle_gateway.config import ProviderSettings
from oracle_gateway.exceptions import MalformedPayloadError
from oracle_gateway.logging import get_logger
from oracle_gateway.models import ProviderId
from oracle_gateway.providers.base import PriceProvider, get_json, parse_price

logger = get_logger(__name__)


class CoinGeckoProvider(PriceProvider):
    """Fetches USD prices keyed by CoinGecko coin id.

    ``GET /simple/price?ids=<id>&vs_currencies=usd`` answers
    ``{"bitcoin": {"usd": 65000.12}}``. The same client also serves the
    market overview (``/coins/markets``).

    Args:
        settings: Provider settings (base URL, timeout, optional demo API key).
        transport: Optional httpx transport, used by tests to mock the upstream.
    """

    provider_id = ProviderId.COINGECKO

    def __init__(
        self,
        settings: ProviderSettings,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock)
        headers = {"Accept": "application/json"}
        api_key = settings.coingecko_api_key.get_secret_value()
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self._client = httpx.AsyncClient(
            base_url=settings.coingecko_base_url,
            headers=headers,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    async def _request_price(self, symbol: str) -> float:
        data = await get_json(
            self._client,
            "/simple/price",
            params={"ids": symbol, "vs_currencies": "usd"},
        )
        entry = data.get(symbol) if isinstance(data, dict) else None
        if not isinstance(entry, dict):
            raise MalformedPayloadError(f"no entry for {symbol} in CoinGecko response")
        return parse_price(entry.get("usd"))

    async def fetch_markets(self, coin_ids: list[str]) -> list[dict[str, Any]]:
        """Return CoinGecko market rows (price, market cap, 7d sparkline).

        Raises:
            ProviderError: On any upstream failure or a non-list payload.
        """
        data = await get_json(
            self._client,
            "/coins/markets",
            params={
                "vs_currency": "usd",
                "ids": ",".join(coin_ids),
                "order": "market_cap_desc",
                "sparkline": "true",
            },
        )
        if not isinstance(data, list):
            raise MalformedPayloadError("CoinGecko markets response is not a list")
        logger.debug("coingecko_markets_fetched", count=len(data))
        return data

    async def close(self) -> None:
        await self._client.aclose()
