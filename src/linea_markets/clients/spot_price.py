"""Reward token spot price from the CoinGecko simple price API."""

from __future__ import annotations

import asyncio
import math
from typing import Any

import backoff
import requests

from ..logger import get_logger
from ..settings import DashboardSettings

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def _is_permanent_http_error(exc: Exception) -> bool:
    return (
        isinstance(exc, requests.exceptions.HTTPError)
        and exc.response is not None
        and exc.response.status_code not in RETRYABLE_STATUS_CODES
    )


class SpotPriceClient:
    """Default value for the token-price input of the profit calculator."""

    def __init__(self, config: DashboardSettings):
        self.url = config.spot_price_url
        self.token_id = config.spot_price_token_id
        self.timeout = config.spot_price_timeout
        self.max_tries = config.spot_price_retries
        self.api_key = config.spot_price_api_key

    def _headers(self) -> dict[str, str]:
        if self.api_key is None:
            return {}
        return {"x-cg-demo-api-key": self.api_key.get_secret_value()}

    async def _get(self) -> requests.Response:
        response = await asyncio.to_thread(
            requests.get,
            self.url,
            params={"ids": self.token_id, "vs_currencies": "usd"},
            headers=self._headers(),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response

    def _parse(self, data: Any) -> float | None:
        if not isinstance(data, dict):
            logger.warning("Unexpected spot price payload: %s", data)
            return None
        entry = data.get(self.token_id)
        if not isinstance(entry, dict) or "usd" not in entry:
            logger.warning("Spot price response has no USD price for %s", self.token_id)
            return None
        try:
            price = float(entry["usd"])
        except (TypeError, ValueError):
            logger.warning("Invalid spot price value: %s", entry["usd"])
            return None
        if not math.isfinite(price) or price <= 0:
            logger.warning("Ignoring non-positive spot price %s", price)
            return None
        return price

    async def fetch_price(self) -> float | None:
        """Fetch the USD price of the reward token.

        Returns:
            The price, or None when the API stays unavailable after retries
            or answers with something unusable.
        """

        def _on_backoff(details: Any) -> None:
            logger.warning(
                "Spot price request failed (attempt %d of %d): %s",
                details["tries"],
                self.max_tries,
                details.get("exception"),
            )

        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.max_tries,
            giveup=_is_permanent_http_error,
            jitter=backoff.full_jitter,
            on_backoff=_on_backoff,
        )
        async def _get_with_retry() -> requests.Response:
            return await self._get()

        try:
            response = await _get_with_retry()
        except requests.exceptions.RequestException as exc:
            logger.warning("Spot price unavailable for %s: %s", self.token_id, exc)
            return None

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Spot price API returned invalid JSON: %s", exc)
            return None

        price = self._parse(data)
        if price is not None:
            logger.debug("Spot price for %s: %s USD", self.token_id, price)
        return price
