"""ABI encoding of SwapRouter ``exactInputSingle`` calls."""

from dataclasses import dataclass
from typing import Optional

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from .contracts import (
    EXACT_INPUT_SINGLE_INPUT_TYPES,
    EXACT_INPUT_SINGLE_OUTPUT_TYPES,
    EXACT_INPUT_SINGLE_SIGNATURE,
    MAX_UINT256,
)

EXACT_INPUT_SINGLE_SELECTOR = bytes(Web3.keccak(text=EXACT_INPUT_SINGLE_SIGNATURE)[:4])

DEFAULT_DEADLINE_BUFFER = 1200  # seconds


@dataclass(frozen=True)
class ExactInputSingleParams:
    token_in: str
    token_out: str
    fee: int
    recipient: str
    deadline: int
    amount_in: int
    amount_out_minimum: int
    sqrt_price_limit_x96: int = 0  # no limit

    def as_tuple(self):
        return (
            Web3.to_checksum_address(self.token_in),
            Web3.to_checksum_address(self.token_out),
            self.fee,
            Web3.to_checksum_address(self.recipient),
            self.deadline,
            self.amount_in,
            self.amount_out_minimum,
            self.sqrt_price_limit_x96,
        )


def build_params(token_in: str, token_out: str, fee: int, recipient: str, amount_in: int,
                 amount_out_minimum: int, now: int,
                 deadline_buffer: int = DEFAULT_DEADLINE_BUFFER) -> ExactInputSingleParams:
    """Swap parameters with ``deadline = now + deadline_buffer``.

    ``now`` is passed in rather than read from the clock so the result is
    reproducible.
    """
    if deadline_buffer <= 0:
        raise ValueError(f"Deadline buffer must be positive, got {deadline_buffer}")
    for name, value in (("amount_in", amount_in), ("amount_out_minimum", amount_out_minimum)):
        if value < 0 or value > MAX_UINT256:
            raise OverflowError(f"{name} {value} is outside the uint256 range")

    return ExactInputSingleParams(
        token_in=token_in,
        token_out=token_out,
        fee=fee,
        recipient=recipient,
        deadline=int(now) + deadline_buffer,
        amount_in=amount_in,
        amount_out_minimum=amount_out_minimum,
    )


def encode_exact_input_single(params: ExactInputSingleParams) -> bytes:
    """Selector plus ABI-encoded params; identical params give identical bytes."""
    return EXACT_INPUT_SINGLE_SELECTOR + encode(EXACT_INPUT_SINGLE_INPUT_TYPES, [params.as_tuple()])


def decode_amount_out(return_data: bytes) -> Optional[int]:
    """The router's ``amountOut`` return value, or None if there is none."""
    if len(return_data) < 32:
        return None
    try:
        (amount_out,) = decode(EXACT_INPUT_SINGLE_OUTPUT_TYPES, return_data)
    except DecodingError:
        return None
    return amount_out
