"""Shared test fixtures for the price oracle gateway."""

import asyncio
from collections.abc import Callable

import pytest

from oracle_gateway.config import ProviderSettings
from oracle_gateway.exceptions import MalformedPayloadError
from oracle_gateway.models import ProviderId
from oracle_gateway.pricing.cache import PriceCache
from oracle_gateway.pricing.chain import ProviderChain
from oracle_gateway.pricing.gateway import PriceGateway
from oracle_gateway.pricing.symbols import SymbolMapper
from oracle_gateway.providers.base import PriceProvider

NOW = 1_700_000_000.0


class FakeClock:
    """Manually advanced Unix clock."""

    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider(PriceProvider):
    """Scripted provider that records every symbol it is asked for.

    Raises ``error`` for the first ``fail_times`` calls (every call when
    ``fail_times`` is None), then answers from ``prices``. When ``gate`` is
    set, each call waits on it before answering.
    """

    def __init__(
        self,
        provider_id: ProviderId,
        prices: dict[str, float] | None = None,
        error: Exception | None = None,
        fail_times: int | None = None,
        gate: asyncio.Event | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        super().__init__(clock or FakeClock())
        self.provider_id = provider_id
        self.prices = prices or {}
        self.error = error
        self.fail_times = fail_times
        self.gate = gate
        self.calls: list[str] = []
        self.closed = False

    async def _request_price(self, symbol: str) -> float:
        self.calls.append(symbol)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None and (
            self.fail_times is None or len(self.calls) <= self.fail_times
        ):
            raise self.error
        if symbol not in self.prices:
            raise MalformedPayloadError(f"no price for {symbol}")
        return self.prices[symbol]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    """Fresh fake clock at a fixed instant."""
    return FakeClock()


@pytest.fixture
def provider_settings() -> ProviderSettings:
    return ProviderSettings(
        timeout_seconds=2.5,
        coingecko_base_url="https://cg.test/api/v3",
        defillama_base_url="https://llama.test",
    )


@pytest.fixture
def make_provider(clock: FakeClock) -> Callable[..., StubProvider]:
    """Factory for StubProvider instances sharing the test clock."""

    def _make(provider_id: ProviderId, **kwargs) -> StubProvider:
        kwargs.setdefault("clock", clock)
        return StubProvider(provider_id, **kwargs)

    return _make


@pytest.fixture
def make_gateway(clock: FakeClock) -> Callable[..., PriceGateway]:
    """Factory building a PriceGateway over the given providers."""

    def _make(
        providers: list[PriceProvider],
        ttl_seconds: float = 30.0,
        name: str = "test",
        overrides: dict[ProviderId, dict[str, str]] | None = None,
        timeout_seconds: float = 4.0,
    ) -> PriceGateway:
        mapper = SymbolMapper(overrides)
        chain = ProviderChain(providers, mapper, timeout_seconds=timeout_seconds)
        return PriceGateway(
            name=name,
            chain=chain,
            mapper=mapper,
            cache=PriceCache(ttl_seconds=ttl_seconds, clock=clock),
        )

    return _make
