"""Batched on-chain read and reward feed fetch."""

from __future__ import annotations

import asyncio

from ..clients import BatchedReader, RewardFeedClient
from ..processors import build_read_plan, decode_reads
from .context import RefreshContext


async def collect_market_data(ctx: RefreshContext) -> None:
    """Run the batched read and the reward fetch concurrently.

    Args:
        ctx: Refresh context holding state and the markets to read

    Sets the read plan, decoded chain reads and rewards in the context.

    Raises:
        BatchReadError: If the batched read fails. Reward failures never raise.
    """
    s = ctx.state.settings
    log = ctx.state.logger

    plan = build_read_plan(ctx.markets, s.price_feed_address)
    log.info(
        "Reading %d values for %d markets in one batch...",
        len(plan.calls),
        len(plan.markets),
    )

    reader = BatchedReader(s)
    rewards_client = RewardFeedClient(s)

    results, rewards = await asyncio.gather(
        reader.read(plan.calls),
        rewards_client.fetch(),
    )

    ctx.plan = plan
    ctx.reads = decode_reads(plan, results)
    ctx.rewards = rewards
    log.debug(
        "Decoded %d token decimals and %d market snapshots",
        len(ctx.reads.token_decimals),
        len(ctx.reads.snapshots),
    )
