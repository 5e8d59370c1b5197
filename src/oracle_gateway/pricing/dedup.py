"""Collapse concurrent fetches for the same asset into one upstream call."""

import asyncio
from collections.abc import Awaitable, Callable

from oracle_gateway.logging import get_logger
from oracle_gateway.models import PriceQuote

logger = get_logger(__name__)


def _mark_retrieved(task: asyncio.Task[PriceQuote]) -> None:
    # Every caller may have been cancelled before the fetch failed
    if not task.cancelled():
        task.exception()


class InFlightDeduplicator:
    """At most one pending fetch per asset; concurrent callers share its outcome.

    The pending-check and registration in ``get_or_start`` contain no await,
    so on a single event loop two callers can never both observe "nothing
    pending" and start redundant fetches. The registration is removed inside
    the task itself, before it settles, so no caller resumes while a finished
    fetch is still registered.
    """

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task[PriceQuote]] = {}

    def is_pending(self, asset: str) -> bool:
        return asset in self._pending

    def pending_assets(self) -> list[str]:
        return sorted(self._pending)

    async def get_or_start(
        self, asset: str, fetch_fn: Callable[[], Awaitable[PriceQuote]]
    ) -> PriceQuote:
        """Join the pending fetch for ``asset`` or start one with ``fetch_fn``.

        Exceptions raised by the fetch propagate to every caller attached to
        it. Callers are shielded: cancelling one (e.g. a client disconnect)
        does not cancel the shared fetch other callers are waiting on.
        """
        task = self._pending.get(asset)
        if task is None:
            task = asyncio.create_task(self._run(asset, fetch_fn))
            task.add_done_callback(_mark_retrieved)
            self._pending[asset] = task
            logger.debug("inflight_fetch_started", asset=asset)
        else:
            logger.debug("inflight_fetch_joined", asset=asset)
        return await asyncio.shield(task)

    async def _run(
        self, asset: str, fetch_fn: Callable[[], Awaitable[PriceQuote]]
    ) -> PriceQuote:
        try:
            return await fetch_fn()
        finally:
            self._pending.pop(asset, None)
