"""CLI entrypoint for the Linea markets dashboard."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.live import Live

from .cache import CacheFreshness, now_ms
from .clients import BatchReadError, SpotPriceClient
from .logger import setup_logging
from .processors.projections import effective_token_price, project_markets
from .registry import get_market
from .report.formatter import (
    build_fdv_matrix,
    build_fdv_table,
    dump_json,
    print_dashboard,
    render_dashboard,
)
from .report.records import ResultRecord
from .report.view import SORTABLE_COLUMNS, SortState, ViewState, sort_rows
from .settings import DashboardSettings, OutputFormat
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Linea DeFi markets dashboard: TVL, weekly rewards and profit projections.",
)


@dataclass
class CliContext:
    state: AppState
    view: ViewState


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("linea_markets")


async def _token_price(state: AppState, view: ViewState) -> float:
    """Manual price when given, else the spot price when enabled, else 0."""
    spot = None
    if view.token_price_override is None and state.settings.spot_price_enabled:
        spot = await SpotPriceClient(state.settings).fetch_price()
    return effective_token_price(view.token_price_override, spot)


def _emit(
    console: Console,
    state: AppState,
    view: ViewState,
    records: list[ResultRecord],
    token_price: float,
    fetched_at: int | None,
    freshness: CacheFreshness | None = None,
) -> None:
    if state.settings.output_format is OutputFormat.JSON:
        typer.echo(dump_json(records))
        return
    projections = sort_rows(
        project_markets(records, view.deposit_usd, token_price), view.sort
    )
    print_dashboard(console, projections, view, token_price, fetched_at, freshness)


async def _show(state: AppState, view: ViewState) -> None:
    from .pipeline.run import load_markets

    result, token_price = await asyncio.gather(
        load_markets(state), _token_price(state, view)
    )
    _emit(
        Console(),
        state,
        view,
        result.records,
        token_price,
        result.fetched_at,
        result.freshness,
    )
    if result.background_refresh is not None:
        # Let the background refresh finish so the cache is updated before exit.
        await result.background_refresh


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [linea_markets] table).",
        ),
    ] = None,
    rpc_url: Annotated[
        str | None,
        typer.Option("--rpc-url", help="Linea RPC endpoint; overrides the default."),
    ] = None,
    block_number: Annotated[
        int | None,
        typer.Option(
            "--block-number",
            help="Block number to read at. If not provided, the latest block is used.",
        ),
    ] = None,
    deposit: Annotated[
        float | None,
        typer.Option("--deposit", help="Deposit in USD for the profit calculator."),
    ] = None,
    token_price: Annotated[
        float | None,
        typer.Option(
            "--token-price",
            help="LINEA price in USD; overrides the spot price.",
        ),
    ] = None,
    sort: Annotated[
        str | None,
        typer.Option(
            "--sort",
            help=f"Sort column[:asc|desc] ({', '.join(SORTABLE_COLUMNS)}).",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat | None,
        typer.Option("--format", help="Output format."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Show the markets dashboard.

    This is the default command: it loads configuration, serves the cached
    results (refreshing them when stale or expired) and renders the table.
    """
    if config_path:
        os.environ["LINEA_MARKETS_CONFIG"] = str(config_path)

    init_kwargs: dict[str, float | int | str | OutputFormat] = {}
    if rpc_url is not None:
        init_kwargs["rpc_url"] = rpc_url
    if block_number is not None:
        init_kwargs["block_number"] = block_number
    if deposit is not None:
        init_kwargs["deposit_usd"] = deposit
    if token_price is not None:
        init_kwargs["token_price_usd"] = token_price
    if output_format is not None:
        init_kwargs["output_format"] = output_format
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    try:
        settings = DashboardSettings(**init_kwargs)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        sort_state = SortState.parse(sort)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--sort") from exc

    setup_logging(settings.log_level)
    state = AppState(settings=settings, logger=_build_logger())

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    view = ViewState(
        sort=sort_state,
        deposit_usd=settings.deposit_usd,
        token_price_override=settings.token_price_usd,
    )
    ctx.obj = CliContext(state=state, view=view)

    if ctx.invoked_subcommand is None:
        asyncio.run(_show(state, view))


@app.command()
def refresh(ctx: typer.Context) -> None:
    """Force a refresh, update the cache and show the result."""
    from .pipeline.run import run_refresh

    cli: CliContext = ctx.obj

    async def _refresh() -> tuple[list[ResultRecord], float]:
        return await asyncio.gather(
            run_refresh(cli.state), _token_price(cli.state, cli.view)
        )

    try:
        records, price = asyncio.run(_refresh())
    except BatchReadError as exc:
        cli.state.logger.error("Refresh failed: %s", exc)
        raise typer.Exit(code=1) from exc

    _emit(Console(), cli.state, cli.view, records, price, now_ms())


@app.command()
def watch(
    ctx: typer.Context,
    iterations: Annotated[
        int | None,
        typer.Option(
            "--iterations",
            min=1,
            help="Stop after this many polls (default: run until interrupted).",
        ),
    ] = None,
) -> None:
    """Poll every refresh interval and keep the dashboard on screen."""
    from .pipeline.run import LoadResult, watch as watch_markets

    cli: CliContext = ctx.obj
    state, view = cli.state, cli.view
    console = Console()

    async def _watch() -> None:
        if state.settings.output_format is OutputFormat.JSON:

            def on_json_update(result: LoadResult) -> None:
                typer.echo(dump_json(result.records))

            await watch_markets(state, on_json_update, iterations=iterations)
            return

        token_price = await _token_price(state, view)
        latest: LoadResult | None = None

        def render(seconds_to_refresh: int | None = None):
            records = latest.records if latest else []
            projections = sort_rows(
                project_markets(records, view.deposit_usd, token_price), view.sort
            )
            return render_dashboard(
                projections,
                view,
                token_price,
                latest.fetched_at if latest else None,
                latest.freshness if latest else None,
                seconds_to_refresh,
            )

        with Live(render(), console=console, refresh_per_second=1) as live:

            def on_update(result: LoadResult) -> None:
                nonlocal latest
                latest = result
                live.update(render())

            def on_tick(remaining: int) -> None:
                live.update(render(remaining))

            await watch_markets(state, on_update, on_tick, iterations=iterations)

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        state.logger.info("Stopped watching")


@app.command()
def fdv(
    ctx: typer.Context,
    market_id: Annotated[
        str | None,
        typer.Argument(help="Market id; omit for all markets."),
    ] = None,
) -> None:
    """Show projected weekly profit across token FDV levels."""
    from .pipeline.run import load_markets

    cli: CliContext = ctx.obj
    state, view = cli.state, cli.view

    if market_id is not None:
        try:
            get_market(market_id)
        except KeyError as exc:
            raise typer.BadParameter(
                f"Unknown market {market_id!r}", param_hint="MARKET_ID"
            ) from exc
        view = replace(view, selected_market=market_id)

    async def _load():
        result, price = await asyncio.gather(
            load_markets(state), _token_price(state, view)
        )
        if result.background_refresh is not None:
            await result.background_refresh
        return result, price

    result, token_price = asyncio.run(_load())
    projections = sort_rows(
        project_markets(result.records, view.deposit_usd, token_price), view.sort
    )
    supply = state.settings.token_total_supply
    console = Console()

    if view.selected_market is None:
        console.print(build_fdv_matrix(projections, supply))
        return

    selected = next(
        (p for p in projections if p.record.id == view.selected_market), None
    )
    if selected is None:
        state.logger.error("No data for market %s", view.selected_market)
        raise typer.Exit(code=1)
    console.print(build_fdv_table(selected, supply))


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
