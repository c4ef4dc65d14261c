"""High-level pipeline orchestration."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from ..cache import CacheFreshness, ResultCache, now_ms
from ..clients import BatchReadError
from ..domain import MarketEntry
from ..registry import MARKETS
from ..report import CacheEntry, ResultRecord
from ..state import AppState
from .collect import collect_market_data
from .context import RefreshContext
from .pricing import price_markets
from .report import build_results, persist_results


@dataclass
class LoadResult:
    """Records to display and where they came from."""

    records: list[ResultRecord]
    fetched_at: int | None  # epoch ms; None when nothing could be loaded
    freshness: CacheFreshness | None = None  # None when fetched this call
    background_refresh: asyncio.Task[list[ResultRecord] | None] | None = None


async def run_refresh(
    state: AppState,
    cache: ResultCache | None = None,
    markets: Sequence[MarketEntry] = MARKETS,
) -> list[ResultRecord]:
    """Execute one refresh cycle.

    This is a thin orchestrator that sequences the pipeline steps:
    1. Batched on-chain read (concurrently with the reward feed)
    2. Price resolution and valuation
    3. Result assembly
    4. Cache write

    Args:
        state: Application state containing settings and logger
        cache: Cache to write on success; defaults to the configured one
        markets: Markets to refresh

    Raises:
        BatchReadError: If the batched read fails; the cache is left untouched.
    """
    log = state.logger
    cache = cache or ResultCache.from_settings(state.settings)

    log.info("Starting refresh", extra={"markets": len(markets)})
    ctx = RefreshContext(state=state, markets=tuple(markets))

    await collect_market_data(ctx)
    await price_markets(ctx)
    await build_results(ctx)
    await persist_results(ctx, cache)

    log.info("Refresh completed", extra={"markets": len(ctx.records_required)})
    return ctx.records_required


async def refresh_quietly(
    state: AppState, cache: ResultCache | None = None
) -> list[ResultRecord] | None:
    """Run a refresh cycle, logging a failed batch instead of raising."""
    try:
        return await run_refresh(state, cache)
    except BatchReadError as exc:
        state.logger.error("Refresh failed, keeping previous results: %s", exc)
        return None


async def _refresh_or_fallback(
    state: AppState, cache: ResultCache, previous: CacheEntry | None
) -> LoadResult:
    records = await refresh_quietly(state, cache)
    if records is not None:
        return LoadResult(records=records, fetched_at=now_ms())
    if previous is not None:
        return LoadResult(
            records=previous.data,
            fetched_at=previous.timestamp,
            freshness=cache.freshness(previous),
        )
    return LoadResult(records=[], fetched_at=None)


async def load_markets(
    state: AppState,
    cache: ResultCache | None = None,
    now: int | None = None,
) -> LoadResult:
    """Load records, honouring the cache freshness policy.

    - fresh cache: served as-is, no network
    - stale cache: served immediately, a background refresh task is started
    - expired, missing or unreadable cache: refreshed before returning

    A failed refresh never raises here; the previous records (if any) are
    returned and the error is logged.
    """
    log = state.logger
    cache = cache or ResultCache.from_settings(state.settings)

    entry = cache.load()
    if entry is None:
        log.info("No usable cache, refreshing")
        return await _refresh_or_fallback(state, cache, None)

    freshness = cache.freshness(entry, now)
    if freshness is CacheFreshness.EXPIRED:
        log.info("Cache expired, refreshing before display")
        return await _refresh_or_fallback(state, cache, entry)

    result = LoadResult(
        records=entry.data, fetched_at=entry.timestamp, freshness=freshness
    )
    if freshness is CacheFreshness.STALE:
        log.info("Cache is stale, refreshing in the background")
        result.background_refresh = asyncio.create_task(refresh_quietly(state, cache))
    else:
        log.debug("Serving fresh cache from %s", cache.path)
    return result


async def watch(
    state: AppState,
    on_update: Callable[[LoadResult], None],
    on_tick: Callable[[int], None] | None = None,
    iterations: int | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    cache: ResultCache | None = None,
) -> None:
    """Poll on the configured interval, calling ``on_update`` with each result.

    ``on_tick`` receives the seconds left until the next poll, once per second.
    """
    interval = state.settings.refresh_interval_seconds
    cache = cache or ResultCache.from_settings(state.settings)
    polls = 0

    while True:
        result = await load_markets(state, cache)
        on_update(result)
        if result.background_refresh is not None:
            refreshed = await result.background_refresh
            if refreshed is not None:
                on_update(LoadResult(records=refreshed, fetched_at=now_ms()))

        polls += 1
        if iterations is not None and polls >= iterations:
            return

        for remaining in range(interval, 0, -1):
            if on_tick is not None:
                on_tick(remaining)
            await sleep(1)
