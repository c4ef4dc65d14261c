"""Rich console formatter for the markets dashboard."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..cache import CacheFreshness
from ..constants import LINEA_TOTAL_SUPPLY
from ..processors.assembler import PLACEHOLDER, format_number, format_usd
from ..processors.projections import (
    MarketProjection,
    fdv_levels,
    fdv_profit,
    price_at_fdv,
)
from .records import ResultRecord
from .view import SortDirection, SortState, ViewState, format_countdown

DISCLAIMER = (
    "Figures are estimates from on-chain reads and last week's reward "
    "distribution. Rewards change weekly and past rewards do not predict "
    "future ones. Not financial advice."
)

# (label, sort column)
MARKET_COLUMNS: list[tuple[str, str | None]] = [
    ("Market", None),
    ("Type", None),
    ("TVL", "tvl"),
    ("APR", "apr"),
    ("Reward Last Week", "reward"),
    ("Your Rewards", "user_rewards"),
    ("Your Profit", "user_profit"),
]

_FRESHNESS_STYLE = {
    CacheFreshness.FRESH: "green",
    CacheFreshness.STALE: "yellow",
    CacheFreshness.EXPIRED: "red",
}


def _or_placeholder(value: float, text: str) -> str:
    return text if value > 0 else PLACEHOLDER


def _sort_icon(sort: SortState, column: str) -> str:
    if sort.column != column or sort.direction is None:
        return "↕"
    return "▲" if sort.direction is SortDirection.ASC else "▼"


def _header(label: str, column: str | None, sort: SortState) -> str:
    if column is None:
        return label
    return f"{label} {_sort_icon(sort, column)}"


def format_fdv(fdv: float) -> str:
    return format_usd(fdv, 0, 0)


def build_disclaimer() -> Panel:
    return Panel(
        Text(DISCLAIMER, style="dim"),
        title="[bold yellow]Disclaimer[/]",
        border_style="yellow",
    )


def build_markets_table(
    projections: Sequence[MarketProjection], sort: SortState
) -> Table:
    """Build the markets table for already-sorted ``projections``."""
    table = Table(expand=True, show_lines=False)
    for label, column in MARKET_COLUMNS:
        justify = "left" if column is None else "right"
        style = "cyan" if label == "Market" else None
        table.add_column(
            _header(label, column, sort), justify=justify, style=style, no_wrap=True
        )

    for p in projections:
        record = p.record
        table.add_row(
            record.name,
            record.category.label,
            _or_placeholder(record.tvl_raw, record.tvl_formatted),
            _or_placeholder(p.apr, f"{p.apr:.2f}%"),
            _or_placeholder(
                record.reward_last_period_raw,
                format_number(record.reward_last_period_raw, 2, 2),
            ),
            _or_placeholder(p.user_weekly_rewards, f"{p.user_weekly_rewards:.2f}"),
            _or_placeholder(p.user_weekly_profit, format_usd(p.user_weekly_profit, 2, 2)),
        )
    return table


def build_fdv_table(
    projection: MarketProjection, total_supply: int = LINEA_TOTAL_SUPPLY
) -> Table:
    """Weekly profit of one market's projected rewards across the FDV ladder."""
    table = Table(title=f"FDV Profit — {projection.record.name}", expand=False)
    table.add_column("FDV", justify="right", style="dim")
    table.add_column("Token Price", justify="right")
    table.add_column("Your Profit", justify="right", style="green")

    for fdv in fdv_levels():
        profit = fdv_profit(projection.user_weekly_rewards, fdv, total_supply)
        table.add_row(
            format_fdv(fdv),
            format_usd(price_at_fdv(fdv, total_supply), 2, 4),
            _or_placeholder(profit, format_usd(profit, 2, 2)),
        )
    return table


def build_fdv_matrix(
    projections: Sequence[MarketProjection], total_supply: int = LINEA_TOTAL_SUPPLY
) -> Table:
    """Weekly profit per market (columns) across the FDV ladder (rows)."""
    table = Table(title="FDV Profit — All Markets", expand=False)
    table.add_column("FDV", justify="right", style="dim", no_wrap=True)
    for p in projections:
        table.add_column(p.record.name, justify="right")

    for fdv in fdv_levels():
        cells = [format_fdv(fdv)]
        for p in projections:
            profit = fdv_profit(p.user_weekly_rewards, fdv, total_supply)
            cells.append(_or_placeholder(profit, format_usd(profit, 2, 2)))
        table.add_row(*cells)
    return table


def build_status(
    view: ViewState,
    token_price: float,
    fetched_at: int | None,
    freshness: CacheFreshness | None = None,
    seconds_to_refresh: int | None = None,
) -> Table:
    """Key/value summary of the calculator inputs and data age."""
    status = Table(show_header=False, box=None, padding=(0, 1))
    status.add_column("Key", style="dim")
    status.add_column("Value", style="cyan")

    status.add_row("Deposit", format_usd(view.deposit_usd, 0, 2))
    source = "manual" if view.token_price_override is not None else "spot"
    price_text = format_usd(token_price, 2, 4) if token_price > 0 else PLACEHOLDER
    status.add_row("LINEA Price", f"{price_text} ({source})")

    if fetched_at is None:
        updated = "[red]no data[/]"
    else:
        updated = datetime.fromtimestamp(fetched_at / 1000).strftime("%Y-%m-%d %H:%M:%S")
        if freshness is not None:
            updated += f" [{_FRESHNESS_STYLE[freshness]}]({freshness.value})[/]"
    status.add_row("Updated", updated)

    if seconds_to_refresh is not None:
        status.add_row("Next refresh in", format_countdown(seconds_to_refresh))
    return status


def render_dashboard(
    projections: Sequence[MarketProjection],
    view: ViewState,
    token_price: float,
    fetched_at: int | None,
    freshness: CacheFreshness | None = None,
    seconds_to_refresh: int | None = None,
) -> Panel:
    """Assemble the full dashboard renderable."""
    status_panel = Panel(
        build_status(view, token_price, fetched_at, freshness, seconds_to_refresh),
        title="[bold]Profit Calculator[/]",
        border_style="blue",
    )
    if projections:
        markets = build_markets_table(projections, view.sort)
    else:
        markets = Text("No market data available.", style="red")
    markets_panel = Panel(markets, title="[bold]Markets[/]", border_style="cyan")

    return Panel(
        Group(build_disclaimer(), "", status_panel, "", markets_panel),
        title="[bold white]Linea Markets[/]",
        border_style="white",
        padding=(1, 2),
    )


def print_dashboard(console: Console, *args, **kwargs) -> None:
    """Print :func:`render_dashboard` output surrounded by blank lines."""
    console.print()
    console.print(render_dashboard(*args, **kwargs))
    console.print()


def dump_json(records: Sequence[ResultRecord]) -> str:
    """Serialize result records as a JSON array."""
    return json.dumps([r.model_dump(mode="json") for r in records], indent=2)
