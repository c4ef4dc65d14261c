from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any

import pytest

from linea_markets.clients.multicall import ContractCall
from linea_markets.constants import ETH_USD_PRICE_FEED
from linea_markets.registry import REX, USDC, USDT, WBTC, WETH
from linea_markets.settings import DashboardSettings
from linea_markets.state import AppState

DECIMALS = {USDC: 6, USDT: 6, WETH: 18, WBTC: 8, REX: 18}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep user config files and LINEA_MARKETS_* variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for key in list(os.environ):
        if key.startswith("LINEA_MARKETS_"):
            monkeypatch.delenv(key)


@pytest.fixture
def settings(tmp_path) -> DashboardSettings:
    return DashboardSettings(
        cache_path=tmp_path / "cache" / "markets.json",
        spot_price_enabled=False,
    )


@pytest.fixture
def state(settings) -> AppState:
    return AppState(settings=settings, logger=logging.getLogger("test"))


def _fake_value(call: ContractCall) -> Any:
    address = call.address.lower()
    match call.function:
        case "latestAnswer":
            return 250_000_000_000  # 2500 USD, 8 decimals
        case "decimals" if address == ETH_USD_PRICE_FEED.lower():
            return 8
        case "decimals":
            return next(d for t, d in DECIMALS.items() if t.lower() == address)
        case "balanceOf":
            return 1_000 * 10 ** next(
                d for t, d in DECIMALS.items() if t.lower() == address
            )
        case "token0":
            return WETH
        case "token1":
            return REX
        case "getReserves":
            # 10 WETH against 20,000 REX
            return (10 * 10**18, 20_000 * 10**18, 1_700_000_000)
        case "totalSupply":
            return 2 * 10**18
        case "UNDERLYING_ASSET_ADDRESS":
            return WETH
    raise AssertionError(f"unexpected call {call.describe()}")


@pytest.fixture
def fake_chain() -> Callable[[list[ContractCall]], list[Any]]:
    """Decoded results for a read plan, as a successful batch would return them."""

    def _results(calls: list[ContractCall]) -> list[Any]:
        return [_fake_value(call) for call in calls]

    return _results
