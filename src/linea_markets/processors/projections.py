"""Profit calculator and FDV simulator arithmetic.

Everything here is a pure function of the result records and the user's
inputs (deposit and reward token price); nothing touches the network.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..constants import LINEA_TOTAL_SUPPLY, REWARD_PERIODS_PER_YEAR
from ..report.records import ResultRecord

BILLION = 1_000_000_000


@dataclass(frozen=True)
class MarketProjection:
    """A result record with the user's projected rewards."""

    record: ResultRecord
    apr: float  # percent
    user_weekly_rewards: float  # reward tokens
    user_weekly_profit: float  # USD


def reward_apr(tvl: float, weekly_reward: float) -> float:
    """Annualised reward rate in percent, using the reward token count as its USD value."""
    if tvl <= 0 or weekly_reward <= 0:
        return 0.0
    return weekly_reward / tvl * REWARD_PERIODS_PER_YEAR * 100


def user_weekly_rewards(tvl: float, weekly_reward: float, deposit_usd: float) -> float:
    """The deposit's pro-rata share of the market's weekly rewards."""
    if tvl <= 0 or deposit_usd <= 0:
        return 0.0
    return deposit_usd / tvl * weekly_reward


def project_market(
    record: ResultRecord, deposit_usd: float, token_price_usd: float
) -> MarketProjection:
    weekly_reward = record.reward_last_period_raw or 0.0
    rewards = user_weekly_rewards(record.tvl_raw, weekly_reward, deposit_usd)
    return MarketProjection(
        record=record,
        apr=reward_apr(record.tvl_raw, weekly_reward),
        user_weekly_rewards=rewards,
        user_weekly_profit=rewards * max(token_price_usd, 0.0),
    )


def project_markets(
    records: Sequence[ResultRecord], deposit_usd: float, token_price_usd: float
) -> list[MarketProjection]:
    return [project_market(r, deposit_usd, token_price_usd) for r in records]


def effective_token_price(override: float | None, spot_price: float | None) -> float:
    """The manual price when set, else the automatic spot price, else 0."""
    if override is not None:
        return override
    if spot_price is not None:
        return spot_price
    return 0.0


def fdv_levels() -> list[int]:
    """FDV ladder: $1B to $20B in $1B steps, then $25B to $100B in $5B steps."""
    levels = [b * BILLION for b in range(1, 21)]
    levels.extend(b * BILLION for b in range(25, 101, 5))
    return levels


def price_at_fdv(fdv: float, total_supply: int = LINEA_TOTAL_SUPPLY) -> float:
    if total_supply <= 0:
        raise ValueError("total_supply must be positive")
    return fdv / total_supply


def fdv_profit(
    weekly_rewards: float, fdv: float, total_supply: int = LINEA_TOTAL_SUPPLY
) -> float:
    """Weekly USD profit of ``weekly_rewards`` tokens if the token traded at ``fdv``."""
    if weekly_rewards <= 0:
        return 0.0
    return weekly_rewards * price_at_fdv(fdv, total_supply)
