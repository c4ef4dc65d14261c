from __future__ import annotations

from unittest.mock import Mock

import backoff._async
import pytest
import requests

from linea_markets.clients.spot_price import SpotPriceClient
from linea_markets.settings import DashboardSettings


def _response(status_code: int = 200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} error", response=response
        )
    return response


@pytest.fixture(autouse=True)
def no_backoff_wait(monkeypatch):
    async def _sleep(_seconds):
        return None

    monkeypatch.setattr(backoff._async.asyncio, "sleep", _sleep)


@pytest.fixture
def patch_get(monkeypatch):
    def _patch(*outcomes) -> list[dict]:
        """Each outcome is a response or an exception, consumed per request."""
        calls: list[dict] = []
        pending = list(outcomes)

        def _get(url, **kwargs):
            calls.append({"url": url, **kwargs})
            outcome = pending.pop(0) if len(pending) > 1 else pending[0]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        monkeypatch.setattr(requests, "get", _get)
        return calls

    return _patch


@pytest.fixture
def client(settings) -> SpotPriceClient:
    return SpotPriceClient(settings)


@pytest.mark.asyncio
async def test_fetch_price(client, patch_get):
    calls = patch_get(_response(payload={"linea": {"usd": 0.0275}}))

    assert await client.fetch_price() == 0.0275
    assert calls[0]["params"] == {"ids": "linea", "vs_currencies": "usd"}
    assert calls[0]["headers"] == {}


@pytest.mark.asyncio
async def test_api_key_header(monkeypatch, patch_get):
    monkeypatch.setenv("LINEA_MARKETS_SPOT_PRICE_API_KEY", "CG-demo")
    calls = patch_get(_response(payload={"linea": {"usd": 1}}))

    await SpotPriceClient(DashboardSettings()).fetch_price()

    assert calls[0]["headers"] == {"x-cg-demo-api-key": "CG-demo"}


@pytest.mark.asyncio
async def test_retries_rate_limit_then_succeeds(client, patch_get):
    calls = patch_get(
        _response(status_code=429),
        requests.exceptions.ConnectionError("reset"),
        _response(payload={"linea": {"usd": 0.03}}),
    )

    assert await client.fetch_price() == 0.03
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_gives_up_after_max_tries(client, patch_get):
    calls = patch_get(_response(status_code=503))

    assert await client.fetch_price() is None
    assert len(calls) == client.max_tries


@pytest.mark.asyncio
async def test_permanent_error_is_not_retried(client, patch_get):
    calls = patch_get(_response(status_code=404))

    assert await client.fetch_price() is None
    assert len(calls) == 1


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"linea": {}},
        {"linea": {"usd": "n/a"}},
        {"linea": {"usd": 0}},
        [1, 2],
    ],
)
@pytest.mark.asyncio
async def test_unusable_payload(client, patch_get, payload):
    patch_get(_response(payload=payload))

    assert await client.fetch_price() is None
