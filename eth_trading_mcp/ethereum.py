"""Shared read-only Ethereum RPC client and the simulated-call outcome type."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests
from web3 import Web3
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractLogicError,
    MismatchedABI,
    Web3RPCError,
    Web3ValidationError,
)

from .errors import ContractCallError, RpcTransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SimulationStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class SimulationOutcome:
    """Result of an ``eth_call`` that is allowed to revert.

    A revert is data, not an exception: ``message`` holds the decoded reason
    verbatim and ``revert_data`` the raw bytes returned with it.
    """
    status: SimulationStatus
    return_data: bytes = b""
    message: Optional[str] = None
    revert_data: bytes = b""

    @classmethod
    def success(cls, return_data: bytes) -> "SimulationOutcome":
        return cls(status=SimulationStatus.SUCCESS, return_data=bytes(return_data))

    @classmethod
    def error(cls, message: str, revert_data: bytes = b"") -> "SimulationOutcome":
        return cls(status=SimulationStatus.ERROR, message=message, revert_data=bytes(revert_data))

    @property
    def ok(self) -> bool:
        return self.status is SimulationStatus.SUCCESS

    @property
    def payload(self) -> bytes:
        """Return data on success, revert data otherwise."""
        return self.return_data if self.ok else self.revert_data

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"status": self.status.value}
        if self.ok:
            result["return_data"] = "0x" + self.return_data.hex()
        else:
            result["message"] = self.message
            if self.revert_data:
                result["revert_data"] = "0x" + self.revert_data.hex()
        return result


def revert_message(error: ContractLogicError) -> str:
    message = getattr(error, "message", None)
    if not message and error.args:
        message = error.args[0]
    return str(message) if message else "execution reverted"


def revert_data(error: ContractLogicError) -> bytes:
    data = getattr(error, "data", None)
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str) and data.startswith("0x"):
        try:
            return bytes.fromhex(data[2:])
        except ValueError:
            return b""
    return b""


class EthereumClient:
    """Read-only access to a JSON-RPC endpoint shared by every tool call.

    The client keeps no per-request state. Blocking web3 calls are pushed to
    the default executor so concurrent tool invocations do not block each
    other. Nothing is retried.
    """

    def __init__(self, web3: Web3, signer_address: str):
        self.web3 = web3
        self.signer_address = Web3.to_checksum_address(signer_address)

    @classmethod
    def from_settings(cls, settings) -> "EthereumClient":
        provider = Web3.HTTPProvider(
            settings.rpc_url,
            request_kwargs={"timeout": settings.rpc_timeout},
        )
        return cls(Web3(provider), settings.signer_address)

    async def _run(self, fn: Callable[[], T]) -> T:
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, fn)
        except ContractLogicError:
            raise
        except Web3RPCError as e:
            raise RpcTransportError(f"RPC error: {e}") from e
        except (requests.exceptions.RequestException, OSError) as e:
            raise RpcTransportError(f"RPC request failed: {e}") from e

    async def read(self, address: str, abi: List[Dict[str, Any]], fn_name: str, *args: Any) -> Any:
        """Call a view function and return its decoded result.

        Raises:
            ContractCallError: the arguments do not match the ABI, the call
                reverted or the address returned no data.
            RpcTransportError: the endpoint could not be reached.
        """
        try:
            contract = self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
            call = getattr(contract.functions, fn_name)(*args)
        except (MismatchedABI, Web3ValidationError) as e:
            raise ContractCallError(f"Invalid arguments for {fn_name}() on {address}: {e}") from e

        try:
            return await self._run(call.call)
        except ContractLogicError as e:
            raise ContractCallError(f"{fn_name}() reverted on {address}: {revert_message(e)}") from e
        except BadFunctionCallOutput as e:
            raise ContractCallError(f"{fn_name}() returned no data from {address}") from e

    async def simulate(self, to: str, data: bytes, from_address: Optional[str] = None,
                       value: int = 0) -> SimulationOutcome:
        """Run ``eth_call`` with raw calldata; reverts come back as an error outcome."""
        tx: Dict[str, Any] = {
            "to": Web3.to_checksum_address(to),
            "data": Web3.to_hex(data),
            "value": value,
        }
        if from_address:
            tx["from"] = Web3.to_checksum_address(from_address)

        try:
            result = await self._run(lambda: self.web3.eth.call(tx))
        except ContractLogicError as e:
            message = revert_message(e)
            logger.debug(f"eth_call to {to} reverted: {message}")
            return SimulationOutcome.error(message, revert_data(e))
        return SimulationOutcome.success(bytes(result))

    async def get_balance(self, address: str) -> int:
        checksum = Web3.to_checksum_address(address)
        return await self._run(lambda: self.web3.eth.get_balance(checksum))
