"""In-memory TTL price cache.

Entries are judged by age, never evicted: the asset universe is fixed and
small, and an expired entry is still valuable as a stale fallback when every
upstream fails. All operations are synchronous so a check-then-act sequence
in the gateway cannot be interleaved with another coroutine.
"""

import time
from collections.abc import Callable

from oracle_gateway.models import PriceQuote


def is_fresh(quote: PriceQuote, ttl_seconds: float, now: float) -> bool:
    """True iff the quote is younger than ``ttl_seconds`` at time ``now``."""
    return now - quote.fetched_at < ttl_seconds


class PriceCache:
    """Latest quote per asset, with freshness checks against a TTL.

    Args:
        ttl_seconds: Age below which a cached quote is served without refetching.
        clock: Returns the current Unix time in seconds. Injected for tests.
    """

    def __init__(
        self, ttl_seconds: float, clock: Callable[[], float] = time.time
    ) -> None:
        self._quotes: dict[str, PriceQuote] = {}
        self._ttl = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, asset: str) -> PriceQuote | None:
        """Return the cached quote regardless of age, or None."""
        return self._quotes.get(asset)

    def put(self, asset: str, quote: PriceQuote) -> None:
        """Replace the cached quote for an asset."""
        self._quotes[asset] = quote

    def age(self, quote: PriceQuote) -> float:
        """Seconds since the quote was fetched."""
        return self._clock() - quote.fetched_at

    def get_fresh(self, asset: str, now: float | None = None) -> PriceQuote | None:
        """Return the cached quote only if it is within the TTL at ``now``."""
        quote = self._quotes.get(asset)
        if now is None:
            now = self._clock()
        if quote is None or not is_fresh(quote, self._ttl, now):
            return None
        return quote

    def snapshot(
        self, now: float | None = None
    ) -> dict[str, dict[str, float | bool | str | None]]:
        """Return price, age and freshness for every cached asset."""
        if now is None:
            now = self._clock()
        return {
            asset: {
                "price": quote.price_decimal,
                "age_seconds": round(now - quote.fetched_at, 3),
                "fresh": is_fresh(quote, self._ttl, now),
                "source": quote.source.value if quote.source else None,
            }
            for asset, quote in sorted(self._quotes.items())
        }

    def __len__(self) -> int:
        return len(self._quotes)
