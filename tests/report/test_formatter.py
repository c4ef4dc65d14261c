from __future__ import annotations

import json

import pytest
from rich.console import Console

from linea_markets.cache import CacheFreshness
from linea_markets.domain import Category, ValuationMethod
from linea_markets.processors.projections import project_markets
from linea_markets.report.formatter import (
    build_fdv_matrix,
    build_fdv_table,
    build_markets_table,
    dump_json,
    render_dashboard,
)
from linea_markets.report.records import ResultRecord
from linea_markets.report.view import SortDirection, SortState, ViewState


def _render(renderable) -> str:
    console = Console(record=True, width=240, color_system=None)
    console.print(renderable)
    return console.export_text()


@pytest.fixture
def records() -> list[ResultRecord]:
    return [
        ResultRecord(
            id="re7-usdc",
            name="Euler USDC (Re7 Labs)",
            category=Category.LENDING,
            method=ValuationMethod.VAULT_TOTAL_SUPPLY,
            address="0xVault",
            url="https://app.euler.finance/vault/0xVault?network=lineamainnet",
            tvl_raw=1_000_000.0,
            tvl_formatted="$1,000,000",
            reward_last_period_raw=10_000.0,
            reward_last_period_formatted="10,000",
        ),
        ResultRecord(
            id="aave-eth",
            name="AAVE ETH",
            category=Category.MONEY_MARKET,
            method=ValuationMethod.WRAPPED_ASSET_TOTAL_SUPPLY,
            address="0xAToken",
            url="https://lineascan.build/address/0xAToken",
        ),
    ]


def test_markets_table(records):
    projections = project_markets(records, 1_000, 0.05)

    text = _render(build_markets_table(projections, SortState("tvl", SortDirection.DESC)))

    for header in ("Market", "Type", "TVL ▼", "APR ↕", "Reward Last Week ↕", "Your Rewards", "Your Profit"):
        assert header in text
    assert "Euler USDC (Re7 Labs)" in text
    assert "Money Market" in text
    assert "$1,000,000" in text
    assert "52.00%" in text
    assert "10,000.00" in text
    assert "10.00" in text
    assert "$0.50" in text


def test_zero_values_render_placeholder(records):
    projections = project_markets(records[1:], 1_000, 0.05)

    text = _render(build_markets_table(projections, SortState()))

    row = next(line for line in text.splitlines() if "AAVE ETH" in line)
    assert row.count("—") == 5
    assert "$0" not in row


def test_fdv_table_for_one_market(records):
    (projection, _) = project_markets(records, 1_000, 0.0)

    table = build_fdv_table(projection)
    text = _render(table)

    assert table.row_count == 36
    assert "FDV Profit — Euler USDC (Re7 Labs)" in text
    assert "$1,000,000,000" in text
    assert "$100,000,000,000" in text


def test_fdv_matrix_has_a_column_per_market(records):
    projections = project_markets(records, 1_000, 0.0)

    table = build_fdv_matrix(projections)

    assert [c.header for c in table.columns] == ["FDV", "Euler USDC (Re7 Labs)", "AAVE ETH"]
    assert table.row_count == 36


def test_render_dashboard(records):
    view = ViewState(deposit_usd=1_000, token_price_override=0.05)
    projections = project_markets(records, view.deposit_usd, 0.05)

    text = _render(
        render_dashboard(
            projections,
            view,
            0.05,
            fetched_at=1_760_000_000_000,
            freshness=CacheFreshness.STALE,
            seconds_to_refresh=125,
        )
    )

    assert "Disclaimer" in text
    assert "Not financial advice" in text
    assert "(manual)" in text
    assert "(stale)" in text
    assert "02:05" in text


def test_render_dashboard_without_data():
    text = _render(render_dashboard([], ViewState(), 0.0, fetched_at=None))

    assert "No market data available." in text
    assert "no data" in text


def test_dump_json(records):
    data = json.loads(dump_json(records))

    assert [d["id"] for d in data] == ["re7-usdc", "aave-eth"]
    assert data[1]["category"] == "MoneyMarket"
    assert data[0]["method"] == "vault-total-supply"
