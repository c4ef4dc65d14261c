from __future__ import annotations

import json
from functools import cache
from pathlib import Path

ABIS_DIR = Path(__file__).parent / "abis"

AGGREGATOR_ABI_PATH = ABIS_DIR / "AggregatorV3Interface.json"
ATOKEN_ABI_PATH = ABIS_DIR / "AToken.json"
ERC20_ABI_PATH = ABIS_DIR / "ERC20.json"
EULER_VAULT_ABI_PATH = ABIS_DIR / "EulerVault.json"
MULTICALL_ABI_PATH = ABIS_DIR / "Multicall3.json"
UNISWAP_V2_PAIR_ABI_PATH = ABIS_DIR / "UniswapV2Pair.json"


@cache
def _load_abi_cached(path: Path) -> tuple[dict, ...]:
    with path.open() as f:
        data = json.load(f)
    return tuple(data["abi"])


def load_abi(path: str | Path) -> list[dict]:
    """Load an ABI from a JSON file and return its "abi" field.

    Args:
        path: Path to the JSON file containing an "abi" field.

    Returns:
        ABI as a list of dictionaries.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        KeyError: If the JSON does not contain an "abi" field.
    """
    return list(_load_abi_cached(Path(path)))


def load_aggregator_abi() -> list[dict]:
    """Load the Chainlink aggregator ABI."""
    return load_abi(AGGREGATOR_ABI_PATH)


def load_atoken_abi() -> list[dict]:
    """Load the Aave aToken ABI."""
    return load_abi(ATOKEN_ABI_PATH)


def load_erc20_abi() -> list[dict]:
    """Load the ERC20 ABI."""
    return load_abi(ERC20_ABI_PATH)


def load_euler_vault_abi() -> list[dict]:
    """Load the Euler vault ABI."""
    return load_abi(EULER_VAULT_ABI_PATH)


def load_multicall_abi() -> list[dict]:
    """Load the Multicall3 ABI."""
    return load_abi(MULTICALL_ABI_PATH)


def load_uniswap_v2_pair_abi() -> list[dict]:
    """Load the UniswapV2-style pair ABI."""
    return load_abi(UNISWAP_V2_PAIR_ABI_PATH)


def output_types(abi: list[dict], function: str) -> list[str]:
    """Return the ABI output types of ``function``.

    Raises:
        ValueError: If ``function`` is not in ``abi``.
    """
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == function:
            return [output["type"] for output in entry.get("outputs", [])]
    raise ValueError(f"Function {function!r} not found in ABI")
