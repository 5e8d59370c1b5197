"""Market overview proxy for the front end's markets table.

Passes CoinGecko market rows through unchanged. Caching is delegated to
the HTTP layer via a Cache-Control header rather than held in process.
"""

from typing import Any

from oracle_gateway.config import MarketSettings
from oracle_gateway.logging import get_logger
from oracle_gateway.providers.coingecko import CoinGeckoProvider

logger = get_logger(__name__)


class MarketOverviewService:
    """Fetches the configured coin list's market data from CoinGecko."""

    def __init__(self, coingecko: CoinGeckoProvider, settings: MarketSettings) -> None:
        self._coingecko = coingecko
        self._settings = settings

    @property
    def cache_control(self) -> str:
        return self._settings.cache_control

    async def fetch_markets(self) -> list[dict[str, Any]]:
        """Return market rows for the configured coins.

        Raises:
            ProviderError: When CoinGecko is unreachable or answers badly.
        """
        rows = await self._coingecko.fetch_markets(self._settings.coin_ids)
        logger.debug("market_overview_fetched", coins=len(rows))
        return rows
