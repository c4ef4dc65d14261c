from __future__ import annotations

from dataclasses import dataclass, field

from ..addresses import canonical_address
from ..domain import BalancesSnapshot, ChainReads, RawMarketSnapshot, ReservesSnapshot
from ..logger import get_logger
from ..registry import PRICING_RULES, PricingRules, token_symbol
from ..units import to_units

logger = get_logger(__name__)


@dataclass
class PriceTable:
    """USD prices resolved during one refresh cycle."""

    prices: dict[str, float] = field(default_factory=dict)  # token_address -> USD

    def set(self, token: str, price: float | None) -> None:
        if price is None:
            return
        self.prices[canonical_address(token)] = price

    def get(self, token: str) -> float | None:
        return self.prices.get(canonical_address(token))

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and canonical_address(token) in self.prices


def feed_price(answer: int, decimals: int) -> float | None:
    """Convert a fixed-point price feed answer to a float.

    Non-positive answers mean the feed has no usable price.
    """
    if answer <= 0:
        return None
    return to_units(answer, decimals)


def _pair_amounts(
    snapshot: RawMarketSnapshot | None, token: str, reference: str
) -> tuple[int, int] | None:
    """Raw ``(token_amount, reference_amount)`` held by a two-asset pool."""
    match snapshot:
        case ReservesSnapshot():
            token_amount = snapshot.reserve_of(token)
            reference_amount = snapshot.reserve_of(reference)
        case BalancesSnapshot():
            token_amount = snapshot.balance_of(token)
            reference_amount = snapshot.balance_of(reference)
        case _:
            return None
    if token_amount is None or reference_amount is None:
        return None
    return token_amount, reference_amount


def bootstrap_price(
    snapshot: RawMarketSnapshot | None,
    token: str,
    reference: str,
    reads: ChainReads,
    reference_price: float | None,
) -> float | None:
    """Price ``token`` from a pool that pairs it with the reference asset.

    price = (reference amount / token amount) * reference price, with both
    amounts converted to whole units using their on-chain decimals.
    """
    if reference_price is None:
        return None
    amounts = _pair_amounts(snapshot, token, reference)
    if amounts is None:
        return None
    token_decimals = reads.decimals_of(token)
    reference_decimals = reads.decimals_of(reference)
    if token_decimals is None or reference_decimals is None:
        return None

    token_amount, reference_amount = amounts
    if token_amount <= 0 or reference_amount <= 0:
        return None

    token_units = to_units(token_amount, token_decimals)
    reference_units = to_units(reference_amount, reference_decimals)
    return reference_units / token_units * reference_price


def resolve_prices(reads: ChainReads, rules: PricingRules = PRICING_RULES) -> PriceTable:
    """Resolve a USD price for every token the registry references.

    1. Stablecoins are pinned to 1.0.
    2. The reference asset is priced from the reference feed.
    3. Each bootstrapped token is priced through its pool with the reference asset.

    Missing or zero inputs leave the dependent price unresolved.
    """
    table = PriceTable()
    for stablecoin in rules.stablecoins:
        table.set(stablecoin, 1.0)

    reference_price = feed_price(reads.feed_answer, reads.feed_decimals)
    if reference_price is None:
        logger.warning(
            "Reference feed returned %d; %s and bootstrapped tokens stay unpriced",
            reads.feed_answer,
            token_symbol(rules.reference),
        )
    table.set(rules.reference, reference_price)

    for bootstrap in rules.bootstraps:
        price = bootstrap_price(
            reads.snapshot_for(bootstrap.market_id),
            bootstrap.token,
            rules.reference,
            reads,
            reference_price,
        )
        if price is None:
            logger.warning(
                "Could not bootstrap %s price from pool %s",
                token_symbol(bootstrap.token),
                bootstrap.market_id,
            )
        table.set(bootstrap.token, price)

    logger.debug(
        "Resolved prices: %s",
        {token_symbol(token): price for token, price in table.prices.items()},
    )
    return table
