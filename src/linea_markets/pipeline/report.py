"""Result assembly and cache persistence."""

from __future__ import annotations

from ..cache import ResultCache
from ..processors import assemble_results
from .context import RefreshContext


async def build_results(ctx: RefreshContext) -> None:
    """Merge valuations with rewards into result records."""
    ctx.records = assemble_results(ctx.valued_required, ctx.rewards_required)


async def persist_results(ctx: RefreshContext, cache: ResultCache) -> None:
    """Write the records of a successful cycle to the cache."""
    log = ctx.state.logger
    try:
        cache.store(ctx.records_required)
    except OSError as exc:
        log.warning("Could not write cache %s: %s", cache.path, exc)
