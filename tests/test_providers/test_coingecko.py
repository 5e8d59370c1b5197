"""Tests for CoinGeckoProvider.

The upstream is replaced with httpx.MockTransport; no real API calls.
"""

import httpx
import pytest

from oracle_gateway.config import ProviderSettings
from oracle_gateway.exceptions import ProviderUnavailableError
from oracle_gateway.models import FailureReason, ProviderFailure, ProviderId, ProviderSuccess
from oracle_gateway.providers.coingecko import CoinGeckoProvider


def _provider(settings: ProviderSettings, handler, clock) -> CoinGeckoProvider:
    return CoinGeckoProvider(settings, transport=httpx.MockTransport(handler), clock=clock)


class TestSimplePrice:
    @pytest.mark.asyncio
    async def test_parses_usd_price(self, provider_settings, clock) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"bitcoin": {"usd": 65000.12345678}})

        provider = _provider(provider_settings, handler, clock)
        result = await provider.fetch("bitcoin")
        await provider.close()

        assert isinstance(result, ProviderSuccess)
        assert result.quote.price_decimal == 65000.12345678
        assert result.quote.fetched_at == clock()
        assert result.quote.source is ProviderId.COINGECKO
        assert seen[0].url.path == "/api/v3/simple/price"
        assert seen[0].url.params["ids"] == "bitcoin"
        assert seen[0].url.params["vs_currencies"] == "usd"

    @pytest.mark.asyncio
    async def test_429_is_rate_limited(self, provider_settings, clock) -> None:
        provider = _provider(provider_settings, lambda r: httpx.Response(429), clock)
        result = await provider.fetch("bitcoin")

        assert isinstance(result, ProviderFailure)
        assert result.reason is FailureReason.RATE_LIMITED

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self, provider_settings, clock) -> None:
        provider = _provider(provider_settings, lambda r: httpx.Response(502), clock)
        result = await provider.fetch("bitcoin")

        assert result.reason is FailureReason.UNAVAILABLE
        assert "502" in result.detail

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"bitcoin": {}},
            {"bitcoin": {"usd": None}},
            {"bitcoin": {"usd": "not-a-number"}},
            {"bitcoin": {"usd": 0}},
            {"bitcoin": {"usd": True}},
            ["bitcoin"],
        ],
    )
    async def test_unusable_payload_is_malformed(self, provider_settings, clock, body) -> None:
        provider = _provider(provider_settings, lambda r: httpx.Response(200, json=body), clock)
        result = await provider.fetch("bitcoin")

        assert result.reason is FailureReason.MALFORMED

    @pytest.mark.asyncio
    async def test_invalid_json_is_malformed(self, provider_settings, clock) -> None:
        provider = _provider(
            provider_settings, lambda r: httpx.Response(200, text="<html>"), clock
        )
        result = await provider.fetch("bitcoin")

        assert result.reason is FailureReason.MALFORMED

    @pytest.mark.asyncio
    async def test_read_timeout_is_timeout(self, provider_settings, clock) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        result = await _provider(provider_settings, handler, clock).fetch("bitcoin")

        assert result.reason is FailureReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_connect_error_is_unavailable(self, provider_settings, clock) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _provider(provider_settings, handler, clock).fetch("bitcoin")

        assert result.reason is FailureReason.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_demo_api_key_sent_as_header(self, clock) -> None:
        settings = ProviderSettings(
            coingecko_base_url="https://cg.test/api/v3",
            coingecko_api_key="demo-key",  # type: ignore[arg-type]
        )
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ethereum": {"usd": 3000}})

        await _provider(settings, handler, clock).fetch("ethereum")

        assert seen[0].headers["x-cg-demo-api-key"] == "demo-key"


class TestMarkets:
    @pytest.mark.asyncio
    async def test_fetch_markets_passes_rows_through(self, provider_settings, clock) -> None:
        rows = [{"id": "bitcoin", "current_price": 65000, "sparkline_in_7d": {"price": [1, 2]}}]
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=rows)

        result = await _provider(provider_settings, handler, clock).fetch_markets(
            ["bitcoin", "ethereum"]
        )

        assert result == rows
        params = seen[0].url.params
        assert seen[0].url.path == "/api/v3/coins/markets"
        assert params["ids"] == "bitcoin,ethereum"
        assert params["sparkline"] == "true"
        assert params["order"] == "market_cap_desc"

    @pytest.mark.asyncio
    async def test_fetch_markets_raises_on_error(self, provider_settings, clock) -> None:
        provider = _provider(provider_settings, lambda r: httpx.Response(500), clock)

        with pytest.raises(ProviderUnavailableError):
            await provider.fetch_markets(["bitcoin"])
