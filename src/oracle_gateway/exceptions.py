"""Custom exceptions for the price oracle gateway.

Provider-level errors are raised inside provider adapters and converted to
tagged ``ProviderFailure`` results at the adapter boundary; they never reach
HTTP callers. Only ``AssetNotSupportedError`` and ``AllSourcesFailedError``
surface as request-level errors.
"""

from oracle_gateway.models import ProviderFailure


class GatewayError(Exception):
    """Base exception for all gateway errors."""


class AssetNotSupportedError(GatewayError):
    """Raised when an asset has no mapping for any provider in the chain."""

    def __init__(self, asset: str | None) -> None:
        super().__init__(f"Asset not supported: {asset!r}")
        self.asset = asset


class AllSourcesFailedError(GatewayError):
    """Raised when every provider in the chain failed for an asset."""

    def __init__(self, asset: str, failures: tuple[ProviderFailure, ...] = ()) -> None:
        reasons = ", ".join(f"{f.provider.value}={f.reason.value}" for f in failures)
        super().__init__(f"All price sources failed for {asset}: {reasons or 'no providers'}")
        self.asset = asset
        self.failures = failures


class ProviderError(GatewayError):
    """Raised by a provider adapter when an upstream call fails."""


class ProviderRateLimitedError(ProviderError):
    """Raised when an upstream answers HTTP 429 or signals rate limiting."""


class ProviderUnavailableError(ProviderError):
    """Raised on network errors or a non-success upstream status."""


class ProviderTimeoutError(ProviderUnavailableError):
    """Raised when an upstream call exceeds its timeout."""


class MalformedPayloadError(ProviderUnavailableError):
    """Raised when an upstream response lacks a usable numeric price."""
