"""Display state for the markets table: sorting and the calculator inputs."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from ..processors.projections import MarketProjection


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


SORTABLE_COLUMNS: dict[str, Callable[[MarketProjection], float]] = {
    "tvl": lambda p: p.record.tvl_raw,
    "reward": lambda p: p.record.reward_last_period_raw,
    "user_rewards": lambda p: p.user_weekly_rewards,
    "user_profit": lambda p: p.user_weekly_profit,
    "apr": lambda p: p.apr,
}


@dataclass(frozen=True)
class SortState:
    column: str | None = None
    direction: SortDirection | None = None

    def __post_init__(self) -> None:
        if self.column is not None and self.column not in SORTABLE_COLUMNS:
            raise ValueError(
                f"Unknown sort column {self.column!r}; "
                f"expected one of {', '.join(SORTABLE_COLUMNS)}"
            )

    @property
    def active(self) -> bool:
        return self.column is not None and self.direction is not None

    def toggle(self, column: str) -> "SortState":
        """Cycle ``column`` through ascending, descending, unsorted.

        Toggling a column other than the current one starts at ascending.
        """
        if column != self.column or self.direction is None:
            return SortState(column, SortDirection.ASC)
        if self.direction is SortDirection.ASC:
            return SortState(column, SortDirection.DESC)
        return SortState()

    @classmethod
    def parse(cls, value: str | None) -> "SortState":
        """Parse ``column`` or ``column:asc|desc`` (ascending when omitted)."""
        if not value:
            return cls()
        column, _, direction = value.partition(":")
        return cls(column.strip(), SortDirection(direction.strip().lower() or "asc"))


def sort_rows(
    rows: Sequence[MarketProjection], sort: SortState
) -> list[MarketProjection]:
    """Return ``rows`` ordered by ``sort``; original order when unsorted.

    Ties keep their original relative order.
    """
    if not sort.active:
        return list(rows)
    key = SORTABLE_COLUMNS[sort.column]  # type: ignore[index]
    return sorted(rows, key=key, reverse=sort.direction is SortDirection.DESC)


@dataclass
class ViewState:
    """User-controlled inputs of the dashboard, passed to the renderers."""

    sort: SortState = field(default_factory=SortState)
    deposit_usd: float = 0.0
    token_price_override: float | None = None
    selected_market: str | None = None  # None: FDV table for all markets


def format_countdown(seconds: int) -> str:
    """Render seconds as ``mm:ss``."""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{secs:02d}"
