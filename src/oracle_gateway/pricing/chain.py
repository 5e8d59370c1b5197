"""Ordered provider fallback chain.

A single pass over the configured providers, stopping at the first success.
Rate limiting, timeouts, HTTP errors and malformed payloads all count as a
provider failure and move the chain to the next provider; there is no
retry against the same provider and no backoff.
"""

import asyncio
from collections.abc import Sequence

from oracle_gateway.logging import get_logger
from oracle_gateway.models import (
    ChainResult,
    FailureReason,
    ProviderFailure,
    ProviderId,
    ProviderResult,
    ProviderSuccess,
)
from oracle_gateway.pricing.symbols import SymbolMapper
from oracle_gateway.providers.base import PriceProvider

logger = get_logger(__name__)


class ProviderChain:
    """Tries providers strictly in priority order.

    Args:
        providers: Providers in priority order (primary first).
        mapper: Resolves each asset to the provider's own symbol.
        timeout_seconds: Upper bound on a single provider attempt, on top of
            whatever timeout the provider's HTTP client enforces.
    """

    def __init__(
        self,
        providers: Sequence[PriceProvider],
        mapper: SymbolMapper,
        timeout_seconds: float = 4.0,
    ) -> None:
        self._providers = list(providers)
        self._mapper = mapper
        self._timeout = timeout_seconds

    @property
    def provider_ids(self) -> list[ProviderId]:
        return [p.provider_id for p in self._providers]

    async def fetch_price(self, asset: str) -> ChainResult:
        """Return the first provider's quote, or every provider's failure."""
        failures: list[ProviderFailure] = []
        for provider in self._providers:
            result = await self._attempt(provider, asset)
            if isinstance(result, ProviderSuccess):
                logger.debug(
                    "provider_succeeded",
                    asset=asset,
                    provider=provider.provider_id.value,
                    price=result.quote.price_decimal,
                    attempts=len(failures) + 1,
                )
                return ChainResult(quote=result.quote, failures=tuple(failures))

            failures.append(result)
            if result.reason is not FailureReason.NOT_MAPPED:
                logger.warning(
                    "provider_failed",
                    asset=asset,
                    provider=result.provider.value,
                    reason=result.reason.value,
                    detail=result.detail,
                )

        return ChainResult(quote=None, failures=tuple(failures))

    async def _attempt(self, provider: PriceProvider, asset: str) -> ProviderResult:
        symbol = self._mapper.map_symbol(asset, provider.provider_id)
        if symbol is None:
            return ProviderFailure(
                provider=provider.provider_id,
                reason=FailureReason.NOT_MAPPED,
                detail=f"{asset} has no {provider.provider_id.value} symbol",
            )
        try:
            return await asyncio.wait_for(provider.fetch(symbol), self._timeout)
        except asyncio.TimeoutError:
            return ProviderFailure(
                provider=provider.provider_id,
                reason=FailureReason.TIMEOUT,
                detail=f"no response within {self._timeout}s",
            )
