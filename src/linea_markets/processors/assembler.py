"""Merge valuations and reward amounts into display-ready result records."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from collections.abc import Mapping, Sequence

from ..addresses import is_zero_address
from ..constants import (
    AAVE_RESERVE_URL,
    ETHEREX_LIQUIDITY_URL,
    EULER_VAULT_URL,
    LINEASCAN_ADDRESS_URL,
)
from ..domain import Category, MarketEntry, ValuedMarket
from ..logger import get_logger
from ..report.records import ResultRecord

logger = get_logger(__name__)

PLACEHOLDER = "—"


def parse_reward_amount(value: str | None) -> float:
    """Parse a reward feed string such as ``"1,234.50"``.

    Missing, empty and unparseable values count as zero rewards.
    """
    if not value:
        return 0.0
    try:
        amount = float(str(value).replace(",", "").strip())
    except ValueError:
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return amount


def _trim_fraction(text: str, min_fraction_digits: int) -> str:
    if "." not in text:
        return text
    whole, fraction = text.split(".")
    fraction = fraction.rstrip("0").ljust(min_fraction_digits, "0")
    return f"{whole}.{fraction}" if fraction else whole


def format_number(
    value: float, min_fraction_digits: int = 0, max_fraction_digits: int = 2
) -> str:
    """Format like en-US ``toLocaleString``: grouped thousands, bounded fraction digits.

    Ties round half away from zero on the exact binary value, so ``0.125``
    gives ``0.13`` while ``1.005`` (stored just below) gives ``1.00``.
    """
    quantum = Decimal(1).scaleb(-max_fraction_digits)
    amount = Decimal(abs(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{amount:,.{max_fraction_digits}f}"
    text = _trim_fraction(text, min_fraction_digits)
    if value < 0 and any(ch not in "0.," for ch in text):
        return f"-{text}"
    return text


def format_usd(
    value: float, min_fraction_digits: int = 0, max_fraction_digits: int = 2
) -> str:
    """Format ``value`` as en-US USD currency, e.g. ``$1,234.5``."""
    text = format_number(value, min_fraction_digits, max_fraction_digits)
    if text.startswith("-"):
        return f"-${text[1:]}"
    return f"${text}"


def market_url(market: MarketEntry, underlying: str | None = None) -> str:
    """Link to the protocol page for ``market``."""
    if market.category is Category.MONEY_MARKET:
        if underlying and not is_zero_address(underlying):
            return AAVE_RESERVE_URL.format(underlying=underlying)
        return LINEASCAN_ADDRESS_URL.format(address=market.address)
    if market.category is Category.LIQUIDITY:
        return ETHEREX_LIQUIDITY_URL.format(address=market.address)
    if market.category is Category.LENDING:
        return EULER_VAULT_URL.format(address=market.address)
    return LINEASCAN_ADDRESS_URL.format(address=market.address)


def assemble_record(valued: ValuedMarket, rewards: Mapping[str, str]) -> ResultRecord:
    market = valued.market
    reward_string = rewards.get(market.id) or "0"
    return ResultRecord(
        id=market.id,
        name=market.name,
        category=market.category,
        method=market.method,
        address=market.address,
        url=market_url(market, valued.underlying),
        underlying_asset=valued.underlying,
        tvl_raw=valued.tvl_usd,
        tvl_formatted=format_usd(valued.tvl_usd),
        reward_last_period_raw=parse_reward_amount(reward_string),
        reward_last_period_formatted=reward_string,
    )


def assemble_results(
    valued: Sequence[ValuedMarket], rewards: Mapping[str, str]
) -> list[ResultRecord]:
    """Build one output record per valued market, in registry order.

    Markets missing from ``rewards`` get zero rewards.
    """
    missing = [v.market.id for v in valued if v.market.id not in rewards]
    if rewards and missing:
        logger.debug("No reward entry for markets: %s", ", ".join(missing))
    return [assemble_record(v, rewards) for v in valued]
