"""Price gateway: cache, in-flight dedup and provider fallback per request.

Request flow for an asset:

1. Reject assets no provider in the chain maps (before any network call).
2. Fresh cache entry: serve it (``cached``).
3. A fetch already in flight: wait for it (``deduped``). If it fails, carry
   on as if this request had to fetch.
4. Start (or join) a fetch through the provider chain; on success the
   cache is updated before the in-flight entry is released.
5. Every provider failed: serve the cached entry even if expired
   (``stale``), else raise AllSourcesFailedError.
"""

from functools import partial
from typing import Any

from oracle_gateway.exceptions import AllSourcesFailedError, AssetNotSupportedError
from oracle_gateway.logging import get_logger
from oracle_gateway.models import GatewayPrice, PriceQuote, ProviderId
from oracle_gateway.pricing.cache import PriceCache
from oracle_gateway.pricing.chain import ProviderChain
from oracle_gateway.pricing.dedup import InFlightDeduplicator
from oracle_gateway.pricing.encoding import format_oracle_price, to_oracle_format
from oracle_gateway.pricing.symbols import SymbolMapper

logger = get_logger(__name__)


def price_payload(result: GatewayPrice) -> dict[str, Any]:
    """Shape a served price into the JSON body returned to clients.

    ``deduped`` and ``stale`` are only present when true.
    """
    price = result.quote.price_decimal
    payload: dict[str, Any] = {
        "price8": format_oracle_price(to_oracle_format(price)),
        "priceDecimal": price,
        "cached": result.cached,
    }
    if result.deduped:
        payload["deduped"] = True
    if result.stale:
        payload["stale"] = True
    return payload


class PriceGateway:
    """One deployment variant of the price gateway.

    Owns its cache and in-flight map; nothing is shared between instances,
    so two variants with different TTLs never see each other's quotes.
    """

    def __init__(
        self,
        name: str,
        chain: ProviderChain,
        mapper: SymbolMapper,
        cache: PriceCache,
        inflight: InFlightDeduplicator | None = None,
    ) -> None:
        self.name = name
        self._chain = chain
        self._mapper = mapper
        self._cache = cache
        self._inflight = inflight or InFlightDeduplicator()

    @property
    def providers(self) -> list[ProviderId]:
        return self._chain.provider_ids

    @property
    def cache(self) -> PriceCache:
        return self._cache

    def supports(self, asset: str | None) -> bool:
        return self._mapper.is_supported(asset, self.providers)

    async def get_price(self, asset: str | None) -> GatewayPrice:
        """Return a price for ``asset``, preferring a stale price to an error.

        Raises:
            AssetNotSupportedError: No provider in the chain maps the asset.
            AllSourcesFailedError: Every provider failed and nothing is cached.
        """
        if asset is None or not self.supports(asset):
            raise AssetNotSupportedError(asset)

        fresh = self._cache.get_fresh(asset)
        if fresh is not None:
            logger.debug("price_cache_hit", gateway=self.name, asset=asset)
            return GatewayPrice(asset=asset, quote=fresh, cached=True)

        refresh = partial(self._refresh, asset)

        if self._inflight.is_pending(asset):
            try:
                quote = await self._inflight.get_or_start(asset, refresh)
            except AllSourcesFailedError:
                logger.info("deduped_fetch_failed", gateway=self.name, asset=asset)
            else:
                return GatewayPrice(asset=asset, quote=quote, deduped=True)

        try:
            quote = await self._inflight.get_or_start(asset, refresh)
        except AllSourcesFailedError:
            stale = self._cache.get(asset)
            if stale is None:
                logger.error("all_price_sources_failed", gateway=self.name, asset=asset)
                raise
            logger.warning(
                "price_served_stale",
                gateway=self.name,
                asset=asset,
                age_seconds=round(self._cache.age(stale), 3),
            )
            return GatewayPrice(asset=asset, quote=stale, cached=True, stale=True)

        return GatewayPrice(asset=asset, quote=quote, cached=False)

    async def _refresh(self, asset: str) -> PriceQuote:
        result = await self._chain.fetch_price(asset)
        if result.quote is None:
            raise AllSourcesFailedError(asset, result.failures)
        self._cache.put(asset, result.quote)
        logger.info(
            "price_refreshed",
            gateway=self.name,
            asset=asset,
            price=result.quote.price_decimal,
            source=result.quote.source.value if result.quote.source else None,
        )
        return result.quote

    def status(self) -> dict[str, Any]:
        """Configuration and cache contents, for the status endpoint."""
        return {
            "ttl_seconds": self._cache.ttl_seconds,
            "providers": [p.value for p in self.providers],
            "supported_assets": self._mapper.supported_assets(self.providers),
            "inflight": self._inflight.pending_assets(),
            "cache": self._cache.snapshot(),
        }
