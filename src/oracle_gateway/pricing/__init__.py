"""Price pipeline -- symbol mapping, oracle encoding, TTL cache, in-flight dedup, fallback chain."""

from oracle_gateway.pricing.cache import PriceCache, is_fresh
from oracle_gateway.pricing.chain import ProviderChain
from oracle_gateway.pricing.dedup import InFlightDeduplicator
from oracle_gateway.pricing.encoding import from_oracle_format, to_oracle_format
from oracle_gateway.pricing.gateway import PriceGateway, price_payload
from oracle_gateway.pricing.symbols import SymbolMapper

__all__ = [
    "InFlightDeduplicator",
    "PriceCache",
    "PriceGateway",
    "ProviderChain",
    "SymbolMapper",
    "from_oracle_format",
    "is_fresh",
    "price_payload",
    "to_oracle_format",
]
