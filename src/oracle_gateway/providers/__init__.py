"""Upstream price providers -- Binance futures (ccxt), CoinGecko and DefiLlama (httpx)."""

from oracle_gateway.config import ProviderSettings
from oracle_gateway.models import ProviderId
from oracle_gateway.providers.base import PriceProvider
from oracle_gateway.providers.binance import BinanceProvider
from oracle_gateway.providers.coingecko import CoinGeckoProvider
from oracle_gateway.providers.defillama import DefiLlamaProvider


def build_providers(settings: ProviderSettings) -> dict[ProviderId, PriceProvider]:
    """Create one shared client per provider; gateway variants reuse them."""
    return {
        ProviderId.BINANCE: BinanceProvider(settings),
        ProviderId.COINGECKO: CoinGeckoProvider(settings),
        ProviderId.DEFILLAMA: DefiLlamaProvider(settings),
    }


__all__ = [
    "BinanceProvider",
    "CoinGeckoProvider",
    "DefiLlamaProvider",
    "PriceProvider",
    "build_providers",
]
