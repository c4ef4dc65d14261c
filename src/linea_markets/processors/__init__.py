from __future__ import annotations

from .assembler import assemble_results, format_usd, parse_reward_amount
from .price_resolver import PriceTable, resolve_prices
from .projections import MarketProjection, fdv_levels, fdv_profit, project_markets
from .read_plan import ReadPlan, build_read_plan, decode_reads
from .valuation import value_market, value_markets

__all__ = [
    "MarketProjection",
    "PriceTable",
    "ReadPlan",
    "assemble_results",
    "build_read_plan",
    "decode_reads",
    "fdv_levels",
    "fdv_profit",
    "format_usd",
    "parse_reward_amount",
    "project_markets",
    "resolve_prices",
    "value_market",
    "value_markets",
]
