from __future__ import annotations

import pytest

from linea_markets.units import to_units


def test_to_units_scales_by_decimals():
    assert to_units(250_000_000_000, 8) == 2500.0
    assert to_units(1_500_000, 6) == 1.5
    assert to_units(10**18, 18) == 1.0


def test_to_units_zero_decimals():
    assert to_units(42, 0) == 42.0


def test_to_units_keeps_large_balances():
    assert to_units(123_456_789 * 10**18, 18) == 123_456_789.0


def test_to_units_rejects_negative_decimals():
    with pytest.raises(ValueError):
        to_units(1, -1)
