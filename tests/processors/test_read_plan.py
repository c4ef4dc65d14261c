from __future__ import annotations

import pytest

from linea_markets.addresses import canonical_address
from linea_markets.clients import BatchReadError
from linea_markets.constants import ETH_USD_PRICE_FEED
from linea_markets.domain import (
    BalancesSnapshot,
    ReservesSnapshot,
    TotalSupplySnapshot,
    WrappedSupplySnapshot,
)
from linea_markets.processors import build_read_plan, decode_reads
from linea_markets.registry import MARKETS, REX, USDC, USDT, WBTC, WETH, get_market


@pytest.fixture
def plan():
    return build_read_plan(MARKETS, ETH_USD_PRICE_FEED)


def test_plan_starts_with_feed_then_token_decimals(plan):
    head = [(c.address, c.function) for c in plan.calls[:7]]

    assert head[:2] == [
        (ETH_USD_PRICE_FEED, "latestAnswer"),
        (ETH_USD_PRICE_FEED, "decimals"),
    ]
    assert [fn for _, fn in head[2:]] == ["decimals"] * 5
    assert [addr for addr, _ in head[2:]] == plan.tokens
    assert plan.tokens == [canonical_address(t) for t in (USDC, USDT, WETH, WBTC, REX)]


def test_plan_call_count(plan):
    # 2 feed + 5 decimals + pools (2 + 2 + 2 + 3) + 10 vaults + 3 aTokens * 2
    assert len(plan.calls) == 2 + 5 + 9 + 10 + 6


def test_market_calls_follow_registry_order(plan):
    functions = [c.function for c in plan.calls[7:]]

    assert functions[:9] == [
        "balanceOf", "balanceOf",
        "balanceOf", "balanceOf",
        "balanceOf", "balanceOf",
        "token0", "token1", "getReserves",
    ]
    assert functions[9:19] == ["totalSupply"] * 10
    assert functions[19:] == ["totalSupply", "UNDERLYING_ASSET_ADDRESS"] * 3


def test_balance_calls_target_tokens_with_pool_argument(plan):
    pool = get_market("usdc-usdt")
    first = plan.calls[7]

    assert first.address == USDC
    assert first.args == (canonical_address(pool.address),)


def test_decode_reads(plan, fake_chain):
    reads = decode_reads(plan, fake_chain(plan.calls))

    assert reads.feed_answer == 250_000_000_000
    assert reads.feed_decimals == 8
    assert reads.decimals_of(USDC.lower()) == 6
    assert reads.decimals_of(WBTC) == 8
    assert len(reads.snapshots) == len(MARKETS)

    balances = reads.snapshot_for("usdc-usdt")
    assert isinstance(balances, BalancesSnapshot)
    assert balances.balance_of(USDT) == 1_000 * 10**6

    reserves = reads.snapshot_for("rex-eth")
    assert isinstance(reserves, ReservesSnapshot)
    assert reserves.token0 == canonical_address(WETH)
    assert reserves.reserve_of(REX) == 20_000 * 10**18

    assert isinstance(reads.snapshot_for("re7-usdc"), TotalSupplySnapshot)

    wrapped = reads.snapshot_for("aave-usdc")
    assert isinstance(wrapped, WrappedSupplySnapshot)
    assert wrapped.underlying == canonical_address(WETH)


def test_decode_reads_rejects_short_results(plan, fake_chain):
    results = fake_chain(plan.calls)[:-1]

    with pytest.raises(BatchReadError):
        decode_reads(plan, results)


def test_empty_registry_reads_only_the_feed():
    plan = build_read_plan([], ETH_USD_PRICE_FEED)

    assert [c.function for c in plan.calls] == ["latestAnswer", "decimals"]
    reads = decode_reads(plan, [1, 8])
    assert reads.snapshots == {}
