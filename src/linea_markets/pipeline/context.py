from __future__ import annotations

from dataclasses import dataclass

from ..domain import ChainReads, MarketEntry, ValuedMarket
from ..processors import PriceTable, ReadPlan
from ..report import ResultRecord
from ..state import AppState


@dataclass
class RefreshContext:
    state: AppState
    markets: tuple[MarketEntry, ...]
    plan: ReadPlan | None = None
    reads: ChainReads | None = None
    rewards: dict[str, str] | None = None
    prices: PriceTable | None = None
    valued: list[ValuedMarket] | None = None
    records: list[ResultRecord] | None = None

    @property
    def reads_required(self) -> ChainReads:
        if self.reads is None:
            raise RuntimeError(
                "Chain reads have not been set. Ensure collect_market_data() is called before accessing this property."
            )
        return self.reads

    @property
    def rewards_required(self) -> dict[str, str]:
        if self.rewards is None:
            raise RuntimeError(
                "Rewards have not been set. Ensure collect_market_data() is called before accessing this property."
            )
        return self.rewards

    @property
    def prices_required(self) -> PriceTable:
        if self.prices is None:
            raise RuntimeError(
                "Prices have not been set. Ensure price_markets() is called before accessing this property."
            )
        return self.prices

    @property
    def valued_required(self) -> list[ValuedMarket]:
        if self.valued is None:
            raise RuntimeError(
                "Valuations have not been set. Ensure price_markets() is called before accessing this property."
            )
        return self.valued

    @property
    def records_required(self) -> list[ResultRecord]:
        if self.records is None:
            raise RuntimeError(
                "Result records have not been set. Ensure build_results() is called before accessing this property."
            )
        return self.records
