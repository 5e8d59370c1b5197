"""Static mapping from internal asset tickers to each provider's identifier.

Each provider names assets differently: Binance uses futures trading pairs,
CoinGecko uses catalog coin ids, DefiLlama uses namespaced coin keys.
"""

from collections.abc import Iterable, Mapping

from oracle_gateway.models import ProviderId

BINANCE_SYMBOLS: dict[str, str] = {
    "BTC": "BTCUSDT",
    "ETH": "ETHUSDT",
    "SOL": "SOLUSDT",
    "AVAX": "AVAXUSDT",
    "ADA": "ADAUSDT",
    "XRP": "XRPUSDT",
    "DOT": "DOTUSDT",
    "LINK": "LINKUSDT",
}

COINGECKO_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "BNB": "binancecoin",
    "XRP": "ripple",
    "ADA": "cardano",
    "DOGE": "dogecoin",
    "MATIC": "matic-network",
    "DOT": "polkadot",
    "AVAX": "avalanche-2",
    "LINK": "chainlink",
    "UNI": "uniswap",
}

# DefiLlama resolves CoinGecko ids under the "coingecko:" namespace
DEFILLAMA_IDS: dict[str, str] = {
    asset: f"coingecko:{coin_id}" for asset, coin_id in COINGECKO_IDS.items()
}

DEFAULT_TABLES: dict[ProviderId, dict[str, str]] = {
    ProviderId.BINANCE: BINANCE_SYMBOLS,
    ProviderId.COINGECKO: COINGECKO_IDS,
    ProviderId.DEFILLAMA: DEFILLAMA_IDS,
}


class SymbolMapper:
    """Pure lookup from (asset, provider) to the provider's symbol.

    Args:
        overrides: Optional per-provider entries merged over the built-in
            tables (an override replaces or adds a single asset's mapping).
    """

    def __init__(
        self, overrides: Mapping[ProviderId, Mapping[str, str]] | None = None
    ) -> None:
        self._tables: dict[ProviderId, dict[str, str]] = {
            provider: dict(table) for provider, table in DEFAULT_TABLES.items()
        }
        for provider, entries in (overrides or {}).items():
            self._tables.setdefault(provider, {}).update(entries)

    def map_symbol(self, asset: str, provider: ProviderId) -> str | None:
        """Return the provider's identifier for ``asset``, or None if unmapped."""
        return self._tables.get(provider, {}).get(asset)

    def is_supported(self, asset: str | None, providers: Iterable[ProviderId]) -> bool:
        """True iff at least one of ``providers`` maps ``asset``. Case-sensitive."""
        if not asset:
            return False
        return any(self.map_symbol(asset, p) is not None for p in providers)

    def supported_assets(self, providers: Iterable[ProviderId]) -> list[str]:
        """Return every asset mapped by at least one of ``providers``, sorted."""
        assets: set[str] = set()
        for provider in providers:
            assets.update(self._tables.get(provider, {}))
        return sorted(assets)
