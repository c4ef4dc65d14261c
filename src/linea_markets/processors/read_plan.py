"""Ordered on-chain call list for one refresh cycle, and its positional decoding."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, assert_never

from ..abi import (
    load_aggregator_abi,
    load_atoken_abi,
    load_erc20_abi,
    load_euler_vault_abi,
    load_uniswap_v2_pair_abi,
)
from ..addresses import canonical_address
from ..clients.multicall import BatchReadError, ContractCall
from ..domain import (
    BalancesSnapshot,
    ChainReads,
    MarketEntry,
    PoolReservesMarket,
    RawMarketSnapshot,
    ReservesSnapshot,
    TokenBalancesMarket,
    TotalSupplySnapshot,
    VaultTotalSupplyMarket,
    WrappedAssetTotalSupplyMarket,
    WrappedSupplySnapshot,
)
from ..registry import distinct_tokens


@dataclass(frozen=True)
class ReadPlan:
    """The calls to batch, plus what is needed to decode their results."""

    calls: list[ContractCall]
    tokens: list[str]
    markets: tuple[MarketEntry, ...]


def _market_calls(market: MarketEntry) -> list[ContractCall]:
    match market:
        case WrappedAssetTotalSupplyMarket():
            abi = load_atoken_abi()
            return [
                ContractCall(market.address, abi, "totalSupply"),
                ContractCall(market.address, abi, "UNDERLYING_ASSET_ADDRESS"),
            ]
        case TokenBalancesMarket():
            abi = load_erc20_abi()
            pool = canonical_address(market.address)
            return [
                ContractCall(token, abi, "balanceOf", (pool,))
                for token in market.tokens
            ]
        case PoolReservesMarket():
            abi = load_uniswap_v2_pair_abi()
            return [
                ContractCall(market.address, abi, "token0"),
                ContractCall(market.address, abi, "token1"),
                ContractCall(market.address, abi, "getReserves"),
            ]
        case VaultTotalSupplyMarket():
            return [ContractCall(market.address, load_euler_vault_abi(), "totalSupply")]
        case _:
            assert_never(market)


def build_read_plan(
    markets: Sequence[MarketEntry], price_feed_address: str
) -> ReadPlan:
    """Build the ordered call list for ``markets``.

    Order: reference feed answer and decimals, decimals of every distinct
    token (first-seen order), then each market's raw reads in registry order.
    """
    feed_abi = load_aggregator_abi()
    erc20_abi = load_erc20_abi()
    tokens = distinct_tokens(markets)

    calls: list[ContractCall] = [
        ContractCall(price_feed_address, feed_abi, "latestAnswer"),
        ContractCall(price_feed_address, feed_abi, "decimals"),
    ]
    calls.extend(ContractCall(token, erc20_abi, "decimals") for token in tokens)
    for market in markets:
        calls.extend(_market_calls(market))

    return ReadPlan(calls=calls, tokens=tokens, markets=tuple(markets))


def _decode_snapshot(market: MarketEntry, results: Iterator[Any]) -> RawMarketSnapshot:
    match market:
        case WrappedAssetTotalSupplyMarket():
            total_supply = int(next(results))
            underlying = canonical_address(str(next(results)))
            return WrappedSupplySnapshot(total_supply=total_supply, underlying=underlying)
        case TokenBalancesMarket():
            return BalancesSnapshot(
                balances={
                    canonical_address(token): int(next(results))
                    for token in market.tokens
                }
            )
        case PoolReservesMarket():
            token0 = canonical_address(str(next(results)))
            token1 = canonical_address(str(next(results)))
            reserve0, reserve1, _ = next(results)
            return ReservesSnapshot(
                token0=token0,
                token1=token1,
                reserve0=int(reserve0),
                reserve1=int(reserve1),
            )
        case VaultTotalSupplyMarket():
            return TotalSupplySnapshot(total_supply=int(next(results)))
        case _:
            assert_never(market)


def decode_reads(plan: ReadPlan, results: Sequence[Any]) -> ChainReads:
    """Consume ``results`` positionally, in the order ``plan.calls`` was built.

    Raises:
        BatchReadError: If the number of results does not match the plan.
    """
    if len(results) != len(plan.calls):
        raise BatchReadError(
            f"Expected {len(plan.calls)} results for the read plan, got {len(results)}"
        )

    it = iter(results)
    reads = ChainReads(feed_answer=int(next(it)), feed_decimals=int(next(it)))
    for token in plan.tokens:
        reads.token_decimals[token] = int(next(it))
    for market in plan.markets:
        reads.snapshots[market.id] = _decode_snapshot(market, it)
    return reads
