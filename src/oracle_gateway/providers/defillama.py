"""DefiLlama price provider, used as the last-resort fallback."""

import time
from collections.abc import Callable

import httpx

from oracle_gateway.config import ProviderSettings
from oracle_gateway.exceptions import MalformedPayloadError
from oracle_gateway.models import ProviderId
from oracle_gateway.providers.base import PriceProvider, get_json, parse_price


class DefiLlamaProvider(PriceProvider):
    """Fetches USD prices from ``/prices/current/<coin key>``.

    Coin keys are namespaced (``coingecko:bitcoin``); the response nests the
    price under the same key: ``{"coins": {"coingecko:bitcoin": {"price": ...}}}``.
    """

    provider_id = ProviderId.DEFILLAMA

    def __init__(
        self,
        settings: ProviderSettings,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock)
        self._client = httpx.AsyncClient(
            base_url=settings.defillama_base_url,
            headers={"Accept": "application/json"},
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    async def _request_price(self, symbol: str) -> float:
        data = await get_json(self._client, f"/prices/current/{symbol}")
        coins = data.get("coins") if isinstance(data, dict) else None
        entry = coins.get(symbol) if isinstance(coins, dict) else None
        if not isinstance(entry, dict):
            raise MalformedPayloadError(f"no entry for {symbol} in DefiLlama response")
        return parse_price(entry.get("price"))

    async def close(self) -> None:
        await self._client.aclose()
