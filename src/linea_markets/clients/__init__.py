from __future__ import annotations

from .multicall import BatchedReader, BatchReadError, ContractCall
from .rewards import RewardFeedClient
from .spot_price import SpotPriceClient

__all__ = [
    "BatchReadError",
    "BatchedReader",
    "ContractCall",
    "RewardFeedClient",
    "SpotPriceClient",
]
