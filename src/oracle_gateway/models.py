"""Shared data models for the price oracle gateway.

Quotes are immutable: the cache replaces them on refresh, never mutates them.
Provider attempts produce tagged results so the fallback chain can fold over
them without relying on exceptions to pick the next provider.
"""

import time
from dataclasses import dataclass, field
from enum import Enum


class ProviderId(str, Enum):
    """Upstream price providers known to the gateway."""

    BINANCE = "binance"
    COINGECKO = "coingecko"
    DEFILLAMA = "defillama"


class FailureReason(str, Enum):
    """Why a single provider attempt did not produce a price."""

    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    MALFORMED = "malformed"
    NOT_MAPPED = "not_mapped"


@dataclass(frozen=True)
class PriceQuote:
    """One provider's observation of an asset's USD price."""

    price_decimal: float
    fetched_at: float = field(default_factory=time.time)  # Unix seconds
    source: ProviderId | None = None


@dataclass(frozen=True)
class ProviderSuccess:
    quote: PriceQuote


@dataclass(frozen=True)
class ProviderFailure:
    provider: ProviderId
    reason: FailureReason
    detail: str = ""


ProviderResult = ProviderSuccess | ProviderFailure


@dataclass(frozen=True)
class ChainResult:
    """Outcome of one pass through the provider fallback chain.

    ``quote`` is set on success; ``failures`` lists every attempt that failed
    before the first success (or all attempts when the chain is exhausted).
    """

    quote: PriceQuote | None
    failures: tuple[ProviderFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return self.quote is not None


@dataclass(frozen=True)
class GatewayPrice:
    """A price served by the gateway, plus how it was obtained."""

    asset: str
    quote: PriceQuote
    cached: bool = False
    deduped: bool = False
    stale: bool = False
