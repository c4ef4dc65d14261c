from __future__ import annotations

from decimal import Decimal


def to_units(value: int, decimals: int) -> float:
    """Convert a raw integer token amount to whole units.

    Args:
        value: Integer amount expressed with ``decimals`` decimal places.
        decimals: Decimal precision reported by the token contract.

    Returns:
        The amount in whole token units as a float.

    Notes:
        - The division is done in ``Decimal`` so large 18-decimal balances
          keep their leading digits before the float conversion.
        - Intended for display arithmetic, not settlement amounts.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    return float(Decimal(value) / (Decimal(10) ** decimals))
