from __future__ import annotations

import pytest

from linea_markets.constants import LINEA_TOTAL_SUPPLY
from linea_markets.domain import Category, ValuationMethod
from linea_markets.processors.projections import (
    BILLION,
    effective_token_price,
    fdv_levels,
    fdv_profit,
    price_at_fdv,
    project_markets,
    reward_apr,
    user_weekly_rewards,
)
from linea_markets.report.records import ResultRecord


def _record(tvl: float, reward: float) -> ResultRecord:
    return ResultRecord(
        id="re7-usdc",
        name="Euler USDC",
        category=Category.LENDING,
        method=ValuationMethod.VAULT_TOTAL_SUPPLY,
        address="0xVault",
        url="https://app.euler.finance/vault/0xVault?network=lineamainnet",
        tvl_raw=tvl,
        reward_last_period_raw=reward,
    )


def test_reward_apr():
    assert reward_apr(1_000_000, 10_000) == pytest.approx(52.0)


@pytest.mark.parametrize(("tvl", "reward"), [(0, 10_000), (1_000_000, 0)])
def test_reward_apr_needs_tvl_and_reward(tvl, reward):
    assert reward_apr(tvl, reward) == 0.0


def test_user_weekly_rewards_is_pro_rata():
    assert user_weekly_rewards(1_000_000, 10_000, 1_000) == pytest.approx(10.0)
    assert user_weekly_rewards(0, 10_000, 1_000) == 0.0
    assert user_weekly_rewards(1_000_000, 10_000, 0) == 0.0


def test_project_markets():
    (projection,) = project_markets([_record(1_000_000, 10_000)], 1_000, 0.05)

    assert projection.apr == pytest.approx(52.0)
    assert projection.user_weekly_rewards == pytest.approx(10.0)
    assert projection.user_weekly_profit == pytest.approx(0.5)


def test_project_markets_without_price_has_no_profit():
    (projection,) = project_markets([_record(1_000_000, 10_000)], 1_000, 0.0)

    assert projection.user_weekly_rewards == pytest.approx(10.0)
    assert projection.user_weekly_profit == 0.0


def test_fdv_levels():
    levels = fdv_levels()

    assert len(levels) == 36
    assert levels[0] == 1 * BILLION
    assert levels[19] == 20 * BILLION
    assert levels[20] == 25 * BILLION
    assert levels[-1] == 100 * BILLION
    assert levels == sorted(set(levels))


def test_price_at_fdv():
    assert price_at_fdv(LINEA_TOTAL_SUPPLY) == pytest.approx(1.0)
    with pytest.raises(ValueError):
        price_at_fdv(BILLION, 0)


def test_fdv_profit():
    assert fdv_profit(100, 10 * BILLION) == pytest.approx(100 * 10 * BILLION / LINEA_TOTAL_SUPPLY)
    assert fdv_profit(0, 10 * BILLION) == 0.0


def test_effective_token_price():
    assert effective_token_price(0.1, 0.03) == 0.1
    assert effective_token_price(None, 0.03) == 0.03
    assert effective_token_price(None, None) == 0.0
