"""Client for the externally hosted weekly reward document."""

from __future__ import annotations

import asyncio

import requests

from ..logger import get_logger
from ..settings import DashboardSettings

logger = get_logger(__name__)


class RewardFeedClient:
    """Fetches the market-id -> reward-amount mapping for the latest period.

    Rewards are supplementary: every failure is logged and turned into an
    empty mapping instead of propagating.
    """

    def __init__(self, config: DashboardSettings):
        self.url = config.rewards_url
        self.timeout = config.rewards_timeout

    async def fetch(self) -> dict[str, str]:
        """Return reward amounts keyed by market id, or ``{}`` on any failure."""
        logger.debug(f"Calling {self.url}")
        try:
            response = await asyncio.to_thread(
                requests.get, self.url, timeout=self.timeout
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("Reward feed request failed: %s", exc)
            return {}

        if response.status_code != 200:
            logger.warning(
                "Reward feed returned HTTP %d; continuing without rewards",
                response.status_code,
            )
            return {}

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Reward feed returned invalid JSON: %s", exc)
            return {}

        if not isinstance(data, dict):
            logger.warning(
                "Unexpected reward feed payload of type %s; ignoring it",
                type(data).__name__,
            )
            return {}

        rewards = {
            str(market_id): str(amount)
            for market_id, amount in data.items()
            if amount is not None
        }
        logger.info("Loaded rewards for %d markets", len(rewards))
        return rewards
