"""Serializable output records, shared by the renderer and the cache."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..domain import Category, ValuationMethod


class ResultRecord(BaseModel):
    """One market row as produced by a refresh cycle."""

    id: str
    name: str
    category: Category
    method: ValuationMethod
    address: str
    url: str
    underlying_asset: str | None = None
    tvl_raw: float = 0.0
    tvl_formatted: str = "$0"
    reward_last_period_raw: float = 0.0
    reward_last_period_formatted: str = "0"

    model_config = ConfigDict(extra="ignore")


class CacheEntry(BaseModel):
    """Persisted result of the last successful refresh."""

    timestamp: int = Field(description="Epoch milliseconds of the refresh.")
    data: list[ResultRecord]

    model_config = ConfigDict(extra="ignore")
