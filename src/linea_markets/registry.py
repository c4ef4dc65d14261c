"""Static registry of tracked Linea markets and the rules used to price their tokens."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .addresses import canonical_address
from .constants import TOKENS
from .domain import (
    MarketEntry,
    PoolReservesMarket,
    TokenBalancesMarket,
    VaultTotalSupplyMarket,
    WrappedAssetTotalSupplyMarket,
)

USDC = TOKENS["USDC"]
USDT = TOKENS["USDT"]
WETH = TOKENS["ETH"]
WBTC = TOKENS["WBTC"]
REX = TOKENS["REX"]

TOKEN_SYMBOLS: dict[str, str] = {
    canonical_address(address): symbol for symbol, address in TOKENS.items()
}

POOLS: tuple[MarketEntry, ...] = (
    TokenBalancesMarket(
        id="usdc-usdt",
        name="Etherex USDC/USDT",
        address="0x35521ec62d91375ac9510d1feefe254b4b582ea0",
        tokens=(USDC, USDT),
    ),
    TokenBalancesMarket(
        id="usdc-eth",
        name="Etherex USDC/ETH",
        address="0x90E8a5b881D211f418d77Ba8978788b62544914B",
        tokens=(USDC, WETH),
    ),
    TokenBalancesMarket(
        id="wbtc-eth",
        name="Etherex WBTC/ETH",
        address="0xc0cd56e070e25913d631876218609f2191da1c2a",
        tokens=(WBTC, WETH),
    ),
    PoolReservesMarket(
        id="rex-eth",
        name="Etherex REX/ETH",
        address="0x5C1Bf4B7563C460282617a0304E3cDE133200f70",
        tokens=(REX, WETH),
    ),
)

LENDING_VAULTS: tuple[MarketEntry, ...] = (
    VaultTotalSupplyMarket(
        id="re7-usdc",
        name="Euler USDC (Re7 Labs)",
        address="0xfB6448B96637d90FcF2E4Ad2c622A487d0496e6f",
        asset=USDC,
    ),
    VaultTotalSupplyMarket(
        id="zerolend-usdc",
        name="Euler USDC (ZeroLend)",
        address="0x14EfcC1Ae56e2fF75204Ef2Fb0DE43378d0beaDA",
        asset=USDC,
    ),
    VaultTotalSupplyMarket(
        id="re7-usdt",
        name="Euler USDT (Re7 Labs)",
        address="0xCBeF9be95738290188B25ca9A6Dd2bEc417a578c",
        asset=USDT,
    ),
    VaultTotalSupplyMarket(
        id="zerolend-usdt",
        name="Euler USDT (ZeroLend)",
        address="0x085f80Df643307e04f23281F6fdbfAA13865E852",
        asset=USDT,
    ),
    VaultTotalSupplyMarket(
        id="re7-weth",
        name="Euler WETH (Re7 Labs)",
        address="0xb135dcF653DAFB5ddAa93F926D7000Aa3222EFEE",
        asset=WETH,
    ),
    VaultTotalSupplyMarket(
        id="zerolend-weth",
        name="Euler WETH (ZeroLend)",
        address="0x9aC2F0A564B7396A8692E1558d23a12d5a2aBb1F",
        asset=WETH,
    ),
    VaultTotalSupplyMarket(
        id="ezeth-cluster",
        name="Euler WETH (ezETH)",
        address="0x8bf8EdC911Ab3f0ea4a27c51Cb88b57ccE5356f1",
        asset=WETH,
    ),
    VaultTotalSupplyMarket(
        id="weeth-cluster",
        name="Euler WETH (weETH)",
        address="0xF4712fC5E6483DE9e1Ff661D95DD686664327086",
        asset=WETH,
    ),
    VaultTotalSupplyMarket(
        id="wrseth-cluster",
        name="Euler WETH (wrsETH)",
        address="0x179DfD3eCDC6f5B8F8788584F3289D10c6F1afb8",
        asset=WETH,
    ),
    VaultTotalSupplyMarket(
        id="wsteth-cluster",
        name="Euler WETH (wstETH)",
        address="0xa8A02E6a894a490D04B6cd480857A19477854968",
        asset=WETH,
    ),
)

AAVE_MARKETS: tuple[MarketEntry, ...] = (
    WrappedAssetTotalSupplyMarket(
        id="aave-usdc",
        name="AAVE USDC",
        address="0x374D7860c4f2f604De0191298dD393703Cce84f3",
        expected_underlying=USDC,
    ),
    WrappedAssetTotalSupplyMarket(
        id="aave-usdt",
        name="AAVE USDT",
        address="0x88231dfEC71D4FF5c1e466D08C321944A7adC673",
        expected_underlying=USDT,
    ),
    WrappedAssetTotalSupplyMarket(
        id="aave-eth",
        name="AAVE ETH",
        address="0x787897dF92703BB3Fc4d9Ee98e15C0b8130Bf163",
        expected_underlying=WETH,
    ),
)

MARKETS: tuple[MarketEntry, ...] = (*POOLS, *LENDING_VAULTS, *AAVE_MARKETS)


@dataclass(frozen=True)
class Bootstrap:
    """Price ``token`` through the pool ``market_id`` that pairs it with the reference asset."""

    token: str
    market_id: str


@dataclass(frozen=True)
class PricingRules:
    stablecoins: tuple[str, ...]
    reference: str
    bootstraps: tuple[Bootstrap, ...]


PRICING_RULES = PricingRules(
    stablecoins=(USDC, USDT),
    reference=WETH,
    bootstraps=(
        Bootstrap(token=WBTC, market_id="wbtc-eth"),
        Bootstrap(token=REX, market_id="rex-eth"),
    ),
)


def distinct_tokens(markets: Iterable[MarketEntry]) -> list[str]:
    """Every token referenced by ``markets``, canonicalised, in first-seen order."""
    seen: dict[str, None] = {}
    for market in markets:
        for token in market.tokens:
            seen.setdefault(canonical_address(token), None)
    return list(seen)


def get_market(market_id: str, markets: Sequence[MarketEntry] = MARKETS) -> MarketEntry:
    for market in markets:
        if market.id == market_id:
            return market
    raise KeyError(f"Unknown market id: {market_id}")


def token_symbol(address: str) -> str:
    """Symbol for a known token, or a truncated address."""
    return TOKEN_SYMBOLS.get(
        canonical_address(address), f"{address[:6]}...{address[-4:]}"
    )


def _check_unique_ids(markets: Sequence[MarketEntry]) -> None:
    ids = [market.id for market in markets]
    duplicates = {market_id for market_id in ids if ids.count(market_id) > 1}
    if duplicates:
        raise ValueError(f"Duplicate market ids in registry: {sorted(duplicates)}")


_check_unique_ids(MARKETS)
