from __future__ import annotations

import pytest

from linea_markets.addresses import canonical_address, same_address
from linea_markets.domain import (
    Category,
    PoolReservesMarket,
    TokenBalancesMarket,
    ValuationMethod,
)
from linea_markets.registry import (
    MARKETS,
    PRICING_RULES,
    REX,
    USDC,
    USDT,
    WBTC,
    WETH,
    distinct_tokens,
    get_market,
    token_symbol,
)


def test_registry_has_unique_ids():
    ids = [m.id for m in MARKETS]
    assert len(ids) == 17
    assert len(set(ids)) == len(ids)


def test_registry_categories():
    by_category = {c: [m for m in MARKETS if m.category is c] for c in Category}
    assert len(by_category[Category.LIQUIDITY]) == 4
    assert len(by_category[Category.LENDING]) == 10
    assert len(by_category[Category.MONEY_MARKET]) == 3


def test_rex_pool_uses_reserve_accounting():
    market = get_market("rex-eth")
    assert market.method is ValuationMethod.POOL_RESERVES


def test_distinct_tokens_are_canonical_and_ordered():
    tokens = distinct_tokens(MARKETS)

    assert tokens == [canonical_address(t) for t in (USDC, USDT, WETH, WBTC, REX)]


def test_distinct_tokens_merges_case_variants():
    markets = [
        TokenBalancesMarket("a", "A", "0x01", (USDC.lower(), WETH)),
        TokenBalancesMarket("b", "B", "0x02", (USDC.upper().replace("0X", "0x"),)),
    ]
    assert len(distinct_tokens(markets)) == 2


def test_get_market_unknown_id():
    with pytest.raises(KeyError):
        get_market("does-not-exist")


def test_token_symbol():
    assert token_symbol(WETH.lower()) == "ETH"
    assert token_symbol("0x000000000000000000000000000000000000dEaD") == "0x0000...dEaD"


def test_bootstrap_pools_pair_token_with_reference():
    for bootstrap in PRICING_RULES.bootstraps:
        market = get_market(bootstrap.market_id)
        tokens = [t.lower() for t in market.tokens]
        assert bootstrap.token.lower() in tokens
        assert PRICING_RULES.reference.lower() in tokens


def test_stablecoins_are_not_the_reference():
    assert not any(same_address(s, PRICING_RULES.reference) for s in PRICING_RULES.stablecoins)


def test_market_token_count_is_validated():
    with pytest.raises(ValueError):
        TokenBalancesMarket("x", "X", "0x01", (USDC, USDT, WETH))
    with pytest.raises(ValueError):
        PoolReservesMarket("y", "Y", "0x02", (REX,))  # type: ignore[arg-type]
