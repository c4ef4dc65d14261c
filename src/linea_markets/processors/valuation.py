from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar, assert_never

from ..domain import (
    BalancesSnapshot,
    ChainReads,
    MarketEntry,
    PoolReservesMarket,
    RawMarketSnapshot,
    ReservesSnapshot,
    TokenBalancesMarket,
    TotalSupplySnapshot,
    ValuedMarket,
    VaultTotalSupplyMarket,
    WrappedAssetTotalSupplyMarket,
    WrappedSupplySnapshot,
)
from ..logger import get_logger
from ..units import to_units
from .price_resolver import PriceTable

logger = get_logger(__name__)

SnapshotT = TypeVar("SnapshotT", bound=RawMarketSnapshot)


def _value_holdings(
    holdings: Iterable[tuple[str, int | None]],
    reads: ChainReads,
    prices: PriceTable,
) -> float | None:
    """Sum ``amount * price`` over raw holdings; None if any input is missing."""
    total = 0.0
    for token, amount in holdings:
        decimals = reads.decimals_of(token)
        price = prices.get(token)
        if amount is None or decimals is None or price is None:
            logger.debug(
                "Missing input for %s (amount=%s decimals=%s price=%s)",
                token,
                amount,
                decimals,
                price,
            )
            return None
        total += to_units(amount, decimals) * price
    return total


def value_token_balances(
    market: TokenBalancesMarket,
    snapshot: BalancesSnapshot,
    reads: ChainReads,
    prices: PriceTable,
) -> float | None:
    return _value_holdings(
        ((token, snapshot.balance_of(token)) for token in market.tokens),
        reads,
        prices,
    )


def value_pool_reserves(
    market: PoolReservesMarket,
    snapshot: ReservesSnapshot,
    reads: ChainReads,
    prices: PriceTable,
) -> float | None:
    return _value_holdings(snapshot.slots, reads, prices)


def value_vault_total_supply(
    market: VaultTotalSupplyMarket,
    snapshot: TotalSupplySnapshot,
    reads: ChainReads,
    prices: PriceTable,
) -> float | None:
    return _value_holdings([(market.asset, snapshot.total_supply)], reads, prices)


def value_wrapped_asset_total_supply(
    market: WrappedAssetTotalSupplyMarket,
    snapshot: WrappedSupplySnapshot,
    reads: ChainReads,
    prices: PriceTable,
) -> float | None:
    return _value_holdings([(snapshot.underlying, snapshot.total_supply)], reads, prices)


def _expect(
    market: MarketEntry, snapshot: RawMarketSnapshot, kind: type[SnapshotT]
) -> SnapshotT:
    if not isinstance(snapshot, kind):
        raise TypeError(
            f"Market {market.id} ({market.method.value}) needs a {kind.__name__}, "
            f"got {type(snapshot).__name__}"
        )
    return snapshot


def value_market(
    market: MarketEntry,
    snapshot: RawMarketSnapshot,
    reads: ChainReads,
    prices: PriceTable,
) -> ValuedMarket:
    """Compute the USD TVL of one market with the handler for its method.

    Unresolved prices or missing decimals yield a TVL of 0.
    """
    underlying: str | None = None
    match market:
        case WrappedAssetTotalSupplyMarket():
            wrapped = _expect(market, snapshot, WrappedSupplySnapshot)
            underlying = wrapped.underlying
            tvl = value_wrapped_asset_total_supply(market, wrapped, reads, prices)
        case TokenBalancesMarket():
            tvl = value_token_balances(
                market, _expect(market, snapshot, BalancesSnapshot), reads, prices
            )
        case PoolReservesMarket():
            tvl = value_pool_reserves(
                market, _expect(market, snapshot, ReservesSnapshot), reads, prices
            )
        case VaultTotalSupplyMarket():
            tvl = value_vault_total_supply(
                market, _expect(market, snapshot, TotalSupplySnapshot), reads, prices
            )
        case _:
            assert_never(market)

    if tvl is None:
        logger.debug("No TVL for %s: a required price or decimals is missing", market.id)
        tvl = 0.0

    return ValuedMarket(
        market=market, snapshot=snapshot, tvl_usd=tvl, underlying=underlying
    )


def value_markets(
    markets: Sequence[MarketEntry], reads: ChainReads, prices: PriceTable
) -> list[ValuedMarket]:
    """Value every market in registry order.

    Raises:
        KeyError: If a market has no snapshot in ``reads``.
    """
    valued: list[ValuedMarket] = []
    for market in markets:
        snapshot = reads.snapshot_for(market.id)
        if snapshot is None:
            raise KeyError(f"No on-chain snapshot for market {market.id}")
        valued.append(value_market(market, snapshot, reads, prices))
    return valued
