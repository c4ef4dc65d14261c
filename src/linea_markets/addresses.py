"""Address normalisation helpers."""

from __future__ import annotations

from web3 import Web3

ZERO_ADDRESSES = {
    "0x0000000000000000000000000000000000000000",
    "0x0",
}


def canonical_address(address: str) -> str:
    """Return the EIP-55 form of ``address``, or its lowercase form if it is not a valid address."""
    try:
        return Web3.to_checksum_address(address)
    except ValueError:
        return address.lower()


def same_address(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def is_zero_address(address: str) -> bool:
    return address.lower() in ZERO_ADDRESSES
