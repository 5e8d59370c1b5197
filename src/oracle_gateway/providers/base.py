"""Abstract price provider interface.

Concrete adapters implement ``_request_price`` and raise ``ProviderError``
subclasses on failure. ``fetch`` converts those into tagged
``ProviderFailure`` results so the fallback chain never has to unwind
exceptions to pick the next provider. Anything else an adapter lets
through (a raw ``OSError`` from the socket layer, say) is logged and
tagged ``unavailable``.
"""

import math
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import httpx

from oracle_gateway.exceptions import (
    MalformedPayloadError,
    ProviderError,
    ProviderRateLimitedError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from oracle_gateway.logging import get_logger
from oracle_gateway.models import (
    FailureReason,
    PriceQuote,
    ProviderFailure,
    ProviderId,
    ProviderResult,
    ProviderSuccess,
)

logger = get_logger(__name__)


def parse_price(raw: Any) -> float:
    """Coerce an upstream price field to a positive finite float.

    Accepts numbers and numeric strings (Binance returns prices as strings).

    Raises:
        MalformedPayloadError: If the value is missing, non-numeric, or not > 0.
    """
    if raw is None or isinstance(raw, bool):
        raise MalformedPayloadError(f"missing price field: {raw!r}")
    try:
        price = float(raw)
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"non-numeric price: {raw!r}") from e
    if not math.isfinite(price) or price <= 0:
        raise MalformedPayloadError(f"unusable price: {raw!r}")
    return price


async def get_json(client: httpx.AsyncClient, path: str, **kwargs: Any) -> Any:
    """GET ``path`` and return the decoded JSON body.

    Maps httpx failures onto the provider error taxonomy: HTTP 429 is
    rate limiting, any other non-2xx or transport error is unavailability.
    """
    try:
        response = await client.get(path, **kwargs)
    except httpx.TimeoutException as e:
        raise ProviderTimeoutError(f"timeout requesting {path}") from e
    except httpx.HTTPError as e:
        raise ProviderUnavailableError(f"{type(e).__name__} requesting {path}") from e

    if response.status_code == 429:
        raise ProviderRateLimitedError(f"HTTP 429 from {path}")
    if not response.is_success:
        raise ProviderUnavailableError(f"HTTP {response.status_code} from {path}")

    try:
        return response.json()
    except ValueError as e:
        raise MalformedPayloadError(f"invalid JSON from {path}") from e


class PriceProvider(ABC):
    """Abstract base class for upstream USD price providers."""

    provider_id: ProviderId

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    @abstractmethod
    async def _request_price(self, symbol: str) -> float:
        """Fetch the USD price for a provider-specific symbol."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP client."""
        ...

    async def fetch(self, symbol: str) -> ProviderResult:
        """Fetch a quote for ``symbol``; never raises for upstream failures."""
        try:
            price = await self._request_price(symbol)
        except ProviderRateLimitedError as e:
            return self._failure(FailureReason.RATE_LIMITED, e)
        except ProviderTimeoutError as e:
            return self._failure(FailureReason.TIMEOUT, e)
        except MalformedPayloadError as e:
            return self._failure(FailureReason.MALFORMED, e)
        except ProviderError as e:
            return self._failure(FailureReason.UNAVAILABLE, e)
        except Exception as e:
            logger.warning(
                "provider_unexpected_error",
                provider=self.provider_id.value,
                symbol=symbol,
                exc_info=True,
            )
            return self._failure(FailureReason.UNAVAILABLE, e)
        return ProviderSuccess(
            PriceQuote(price_decimal=price, fetched_at=self._clock(), source=self.provider_id)
        )

    def _failure(self, reason: FailureReason, error: Exception) -> ProviderFailure:
        return ProviderFailure(provider=self.provider_id, reason=reason, detail=str(error))
