"""Single-round-trip batched contract reads through Multicall3."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import requests
from eth_abi.abi import decode
from eth_abi.exceptions import DecodingError
from eth_typing import URI
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import Web3Exception

from ..abi import load_multicall_abi, output_types
from ..logger import get_logger
from ..settings import DashboardSettings

logger = get_logger(__name__)


class BatchReadError(Exception):
    """Raised when the batched read fails as a whole. No partial results exist."""

    def __init__(self, message: str):
        super().__init__(message)


@dataclass(frozen=True)
class ContractCall:
    """One read in a batch: ``function(*args)`` on the contract at ``address``."""

    address: str
    abi: list[dict] = field(repr=False, compare=False)
    function: str
    args: tuple[Any, ...] = ()

    def describe(self) -> str:
        return f"{self.function}() on {self.address}"


class BatchedReader:
    """Runs a list of contract reads as one Multicall3 ``aggregate`` call.

    ``aggregate`` reverts when any inner call reverts, so either every result
    comes back, read at the same block, or the whole batch fails.
    """

    w3: Web3
    multicall: Contract

    def __init__(self, config: DashboardSettings):
        self.config = config
        self.w3 = Web3(
            Web3.HTTPProvider(
                URI(config.rpc_url), request_kwargs={"timeout": config.rpc_timeout}
            )
        )
        self.block_identifier = config.block_identifier
        self.multicall = self.w3.eth.contract(
            address=Web3.to_checksum_address(config.multicall_address),
            abi=load_multicall_abi(),
        )

    def encode(self, call: ContractCall) -> tuple[str, str]:
        """Return the ``(target, calldata)`` pair Multicall3 expects."""
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(call.address), abi=call.abi
        )
        return contract.address, contract.encode_abi(call.function, args=list(call.args))

    @staticmethod
    def decode(call: ContractCall, data: bytes) -> Any:
        """Decode one return blob; single-output functions are unwrapped."""
        types = output_types(call.abi, call.function)
        values = decode(types, data)
        if len(values) == 1:
            return values[0]
        return tuple(values)

    async def _aggregate(self, encoded_calls: list[tuple[str, str]]) -> list[bytes]:
        _, return_data = await asyncio.to_thread(
            self.multicall.functions.aggregate(encoded_calls).call,
            block_identifier=self.block_identifier,
        )
        return list(return_data)

    async def read(self, calls: list[ContractCall]) -> list[Any]:
        """Execute ``calls`` atomically and return their decoded results in order.

        Args:
            calls: Ordered reads; results are consumed positionally by callers.

        Returns:
            One decoded value per call, in call order.

        Raises:
            BatchReadError: If any call reverts, the transport fails, or a
                result cannot be decoded.
        """
        if not calls:
            return []

        encoded_calls = [self.encode(call) for call in calls]
        logger.debug(
            "Submitting %d calls to Multicall3 at %s (block %s)",
            len(encoded_calls),
            self.multicall.address,
            self.block_identifier,
        )

        try:
            return_data = await self._aggregate(encoded_calls)
        except (
            Web3Exception,
            requests.exceptions.RequestException,
            # non-JSON RPC bodies surface as JSONDecodeError
            ValueError,
        ) as exc:
            raise BatchReadError(
                f"Batched read of {len(calls)} calls failed: {exc}"
            ) from exc

        if len(return_data) != len(calls):
            raise BatchReadError(
                f"Multicall returned {len(return_data)} results for {len(calls)} calls"
            )

        results: list[Any] = []
        for call, data in zip(calls, return_data):
            try:
                results.append(self.decode(call, data))
            except DecodingError as exc:
                raise BatchReadError(
                    f"Could not decode result of {call.describe()}: {exc}"
                ) from exc

        logger.debug("Batched read returned %d results", len(results))
        return results
