"""Domain models for the market dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, TypeAlias

from ..addresses import canonical_address, same_address


class Category(str, Enum):
    LIQUIDITY = "Liquidity"
    LENDING = "Lending"
    MONEY_MARKET = "MoneyMarket"

    @property
    def label(self) -> str:
        return "Money Market" if self is Category.MONEY_MARKET else self.value


class ValuationMethod(str, Enum):
    TOKEN_BALANCES = "token-balances"
    POOL_RESERVES = "pool-reserves"
    VAULT_TOTAL_SUPPLY = "vault-total-supply"
    WRAPPED_ASSET_TOTAL_SUPPLY = "wrapped-asset-total-supply"


@dataclass(frozen=True)
class TokenBalancesMarket:
    """Two-sided pool valued by the token balances its contract holds."""

    id: str
    name: str
    address: str
    tokens: tuple[str, ...]

    category: ClassVar[Category] = Category.LIQUIDITY
    method: ClassVar[ValuationMethod] = ValuationMethod.TOKEN_BALANCES

    def __post_init__(self) -> None:
        if not 1 <= len(self.tokens) <= 2:
            raise ValueError(f"{self.id}: token-balances markets hold 1 or 2 tokens")


@dataclass(frozen=True)
class PoolReservesMarket:
    """Two-sided pool valued by its own reserve accounting (getReserves)."""

    id: str
    name: str
    address: str
    tokens: tuple[str, str]

    category: ClassVar[Category] = Category.LIQUIDITY
    method: ClassVar[ValuationMethod] = ValuationMethod.POOL_RESERVES

    def __post_init__(self) -> None:
        if len(self.tokens) != 2:
            raise ValueError(f"{self.id}: pool-reserves markets hold exactly 2 tokens")


@dataclass(frozen=True)
class VaultTotalSupplyMarket:
    """Single-asset lending vault valued by its share supply."""

    id: str
    name: str
    address: str
    asset: str

    category: ClassVar[Category] = Category.LENDING
    method: ClassVar[ValuationMethod] = ValuationMethod.VAULT_TOTAL_SUPPLY

    @property
    def tokens(self) -> tuple[str, ...]:
        return (self.asset,)


@dataclass(frozen=True)
class WrappedAssetTotalSupplyMarket:
    """Money-market deposit token; the underlying asset is read on-chain.

    ``expected_underlying`` only makes sure the asset's decimals are part of
    the batch. Valuation always uses the address the contract reports.
    """

    id: str
    name: str
    address: str
    expected_underlying: str

    category: ClassVar[Category] = Category.MONEY_MARKET
    method: ClassVar[ValuationMethod] = ValuationMethod.WRAPPED_ASSET_TOTAL_SUPPLY

    @property
    def tokens(self) -> tuple[str, ...]:
        return (self.expected_underlying,)


MarketEntry: TypeAlias = (
    TokenBalancesMarket
    | PoolReservesMarket
    | VaultTotalSupplyMarket
    | WrappedAssetTotalSupplyMarket
)


@dataclass(frozen=True)
class BalancesSnapshot:
    balances: dict[str, int]  # token_address -> raw balance held by the pool

    def balance_of(self, token: str) -> int | None:
        return self.balances.get(canonical_address(token))


@dataclass(frozen=True)
class ReservesSnapshot:
    token0: str
    token1: str
    reserve0: int
    reserve1: int

    def reserve_of(self, token: str) -> int | None:
        """Return the reserve for ``token``, matching slots case-insensitively."""
        if same_address(self.token0, token):
            return self.reserve0
        if same_address(self.token1, token):
            return self.reserve1
        return None

    @property
    def slots(self) -> tuple[tuple[str, int], tuple[str, int]]:
        return (self.token0, self.reserve0), (self.token1, self.reserve1)


@dataclass(frozen=True)
class TotalSupplySnapshot:
    total_supply: int


@dataclass(frozen=True)
class WrappedSupplySnapshot:
    total_supply: int
    underlying: str


RawMarketSnapshot: TypeAlias = (
    BalancesSnapshot | ReservesSnapshot | TotalSupplySnapshot | WrappedSupplySnapshot
)


@dataclass
class ChainReads:
    """Everything one batched read returned, decoded and keyed."""

    feed_answer: int
    feed_decimals: int
    token_decimals: dict[str, int] = field(default_factory=dict)
    snapshots: dict[str, RawMarketSnapshot] = field(default_factory=dict)

    def decimals_of(self, token: str) -> int | None:
        return self.token_decimals.get(canonical_address(token))

    def snapshot_for(self, market_id: str) -> RawMarketSnapshot | None:
        return self.snapshots.get(market_id)


@dataclass(frozen=True)
class ValuedMarket:
    """A market's snapshot with its USD valuation for one refresh cycle."""

    market: MarketEntry
    snapshot: RawMarketSnapshot
    tvl_usd: float
    underlying: str | None = None


__all__ = [
    "BalancesSnapshot",
    "Category",
    "ChainReads",
    "MarketEntry",
    "PoolReservesMarket",
    "RawMarketSnapshot",
    "ReservesSnapshot",
    "TokenBalancesMarket",
    "TotalSupplySnapshot",
    "ValuationMethod",
    "ValuedMarket",
    "VaultTotalSupplyMarket",
    "WrappedAssetTotalSupplyMarket",
    "WrappedSupplySnapshot",
]
