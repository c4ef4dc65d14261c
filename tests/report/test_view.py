from __future__ import annotations

import pytest

from linea_markets.domain import Category, ValuationMethod
from linea_markets.processors.projections import MarketProjection
from linea_markets.report.records import ResultRecord
from linea_markets.report.view import (
    SortDirection,
    SortState,
    format_countdown,
    sort_rows,
)


def _row(market_id: str, tvl: float, reward: float = 0.0) -> MarketProjection:
    record = ResultRecord(
        id=market_id,
        name=market_id,
        category=Category.LIQUIDITY,
        method=ValuationMethod.TOKEN_BALANCES,
        address="0xPool",
        url="https://www.etherex.finance/liquidity/0xPool",
        tvl_raw=tvl,
        reward_last_period_raw=reward,
    )
    return MarketProjection(record, apr=0.0, user_weekly_rewards=0.0, user_weekly_profit=0.0)


ROWS = [_row("b", 200.0), _row("a", 100.0, reward=5.0), _row("c", 300.0), _row("d", 100.0)]


def _ids(rows: list[MarketProjection]) -> list[str]:
    return [r.record.id for r in rows]


def test_toggle_cycles_asc_desc_unsorted():
    state = SortState()

    state = state.toggle("tvl")
    assert (state.column, state.direction) == ("tvl", SortDirection.ASC)
    state = state.toggle("tvl")
    assert (state.column, state.direction) == ("tvl", SortDirection.DESC)
    state = state.toggle("tvl")
    assert not state.active
    assert state.toggle("tvl").direction is SortDirection.ASC


def test_toggle_other_column_starts_ascending():
    state = SortState("tvl", SortDirection.DESC).toggle("reward")

    assert (state.column, state.direction) == ("reward", SortDirection.ASC)


def test_sort_rows():
    assert _ids(sort_rows(ROWS, SortState("tvl", SortDirection.ASC))) == ["a", "d", "b", "c"]
    assert _ids(sort_rows(ROWS, SortState("tvl", SortDirection.DESC))) == ["c", "b", "a", "d"]


def test_unsorted_restores_original_order():
    state = SortState().toggle("tvl").toggle("tvl").toggle("tvl")

    assert _ids(sort_rows(ROWS, state)) == ["b", "a", "c", "d"]


def test_sort_by_reward():
    rows = sort_rows(ROWS, SortState("reward", SortDirection.DESC))

    assert _ids(rows)[0] == "a"


def test_parse():
    assert SortState.parse(None) == SortState()
    assert SortState.parse("apr") == SortState("apr", SortDirection.ASC)
    assert SortState.parse("user_profit:DESC") == SortState(
        "user_profit", SortDirection.DESC
    )


@pytest.mark.parametrize("value", ["name", "tvl:sideways"])
def test_parse_rejects_unknown(value):
    with pytest.raises(ValueError):
        SortState.parse(value)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(600, "10:00"), (61, "01:01"), (9, "00:09"), (0, "00:00"), (-5, "00:00")],
)
def test_format_countdown(seconds, expected):
    assert format_countdown(seconds) == expected
