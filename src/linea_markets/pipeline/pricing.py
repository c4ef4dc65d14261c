"""Price resolution and per-market valuation."""

from __future__ import annotations

from ..processors import resolve_prices, value_markets
from .context import RefreshContext


async def price_markets(ctx: RefreshContext) -> None:
    """Resolve token prices and value every market.

    Sets the price table and valued markets in the context.
    """
    log = ctx.state.logger
    reads = ctx.reads_required

    prices = resolve_prices(reads)
    log.info("Resolved USD prices for %d tokens", len(prices.prices))

    valued = value_markets(ctx.markets, reads, prices)
    total_tvl = sum(v.tvl_usd for v in valued)
    log.info("Valued %d markets, total TVL %.2f USD", len(valued), total_tvl)

    ctx.prices = prices
    ctx.valued = valued
