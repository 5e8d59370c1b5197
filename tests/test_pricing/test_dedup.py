"""Tests for the in-flight request deduplicator."""

import asyncio

import pytest

from oracle_gateway.models import PriceQuote
from oracle_gateway.pricing.dedup import InFlightDeduplicator


async def _settle() -> None:
    """Let every ready task run up to its next suspension point."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch() -> None:
    dedup = InFlightDeduplicator()
    gate = asyncio.Event()
    calls = 0

    async def fetch() -> PriceQuote:
        nonlocal calls
        calls += 1
        await gate.wait()
        return PriceQuote(100.0, fetched_at=1.0)

    tasks = [asyncio.create_task(dedup.get_or_start("BTC", fetch)) for _ in range(5)]
    await _settle()
    assert dedup.is_pending("BTC")

    gate.set()
    results = await asyncio.gather(*tasks)

    assert calls == 1
    assert all(r is results[0] for r in results)
    assert not dedup.is_pending("BTC")


@pytest.mark.asyncio
async def test_different_assets_fetch_independently() -> None:
    dedup = InFlightDeduplicator()
    seen: list[str] = []

    def make_fetch(asset: str):
        async def fetch() -> PriceQuote:
            seen.append(asset)
            return PriceQuote(1.0)

        return fetch

    await asyncio.gather(
        dedup.get_or_start("BTC", make_fetch("BTC")),
        dedup.get_or_start("ETH", make_fetch("ETH")),
    )
    assert sorted(seen) == ["BTC", "ETH"]


@pytest.mark.asyncio
async def test_failure_propagates_to_all_waiters_and_clears_entry() -> None:
    dedup = InFlightDeduplicator()
    gate = asyncio.Event()

    async def fetch() -> PriceQuote:
        await gate.wait()
        raise RuntimeError("upstream down")

    tasks = [asyncio.create_task(dedup.get_or_start("SOL", fetch)) for _ in range(3)]
    await _settle()
    gate.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert all(isinstance(r, RuntimeError) for r in results)
    assert not dedup.is_pending("SOL")


@pytest.mark.asyncio
async def test_entry_removed_after_success_allows_new_fetch() -> None:
    dedup = InFlightDeduplicator()
    calls = 0

    async def fetch() -> PriceQuote:
        nonlocal calls
        calls += 1
        return PriceQuote(float(calls))

    first = await dedup.get_or_start("BTC", fetch)
    second = await dedup.get_or_start("BTC", fetch)

    assert calls == 2
    assert first.price_decimal == 1.0
    assert second.price_decimal == 2.0
    assert dedup.pending_assets() == []


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_fetch() -> None:
    dedup = InFlightDeduplicator()
    gate = asyncio.Event()

    async def fetch() -> PriceQuote:
        await gate.wait()
        return PriceQuote(42.0)

    starter = asyncio.create_task(dedup.get_or_start("ETH", fetch))
    joiner = asyncio.create_task(dedup.get_or_start("ETH", fetch))
    await _settle()

    starter.cancel()
    await _settle()
    assert dedup.is_pending("ETH")

    gate.set()
    result = await joiner
    assert result.price_decimal == 42.0
    assert starter.cancelled()
