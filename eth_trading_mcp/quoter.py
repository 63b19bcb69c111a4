"""Uniswap V3 QuoterV2 exact-input-single quotes."""

import logging
from dataclasses import dataclass

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from .contracts import (
    DEFAULT_FEE_TIER,
    FEE_TIERS,
    MAX_UINT256,
    QUOTE_EXACT_INPUT_SINGLE_INPUT_TYPES,
    QUOTE_EXACT_INPUT_SINGLE_OUTPUT_TYPES,
    QUOTE_EXACT_INPUT_SINGLE_SIGNATURE,
    UNISWAP_V3_QUOTER_V2,
)
from .errors import InvalidAmountError, InvalidFeeTierError, QuoteFailedError
from .ethereum import SimulationOutcome
from .tokens import TokenInfo

logger = logging.getLogger(__name__)

QUOTE_EXACT_INPUT_SINGLE_SELECTOR = bytes(Web3.keccak(text=QUOTE_EXACT_INPUT_SINGLE_SIGNATURE)[:4])

ERROR_STRING_SELECTOR = bytes.fromhex("08c379a0")  # Error(string)
PANIC_SELECTOR = bytes.fromhex("4e487b71")  # Panic(uint256)

# four 32-byte words: amountOut, sqrtPriceX96After, initializedTicksCrossed, gasEstimate
QUOTE_RESULT_SIZE = 4 * 32


@dataclass(frozen=True)
class PoolQuote:
    amount_out: int
    sqrt_price_x96_after: int
    initialized_ticks_crossed: int
    gas_estimate: int
    fee: int


def validate_fee_tier(fee: int) -> int:
    if isinstance(fee, bool) or not isinstance(fee, int) or fee not in FEE_TIERS:
        raise InvalidFeeTierError(
            f"Unsupported fee tier {fee!r}. Supported tiers: {', '.join(str(t) for t in FEE_TIERS)}"
        )
    return fee


def encode_quote_call(token_in: str, token_out: str, amount_in: int, fee: int) -> bytes:
    params = (
        Web3.to_checksum_address(token_in),
        Web3.to_checksum_address(token_out),
        amount_in,
        fee,
        0,  # sqrtPriceLimitX96: no limit
    )
    return QUOTE_EXACT_INPUT_SINGLE_SELECTOR + encode(QUOTE_EXACT_INPUT_SINGLE_INPUT_TYPES, [params])


def decode_quote_result(data: bytes, fee: int) -> PoolQuote:
    """Decode QuoterV2's return tuple.

    Raises:
        DecodingError: ``data`` does not have the quote result shape.
    """
    if data[:4] in (ERROR_STRING_SELECTOR, PANIC_SELECTOR):
        raise DecodingError("Payload is a revert reason, not a quote result")
    if len(data) < QUOTE_RESULT_SIZE:
        raise DecodingError(f"Quote result needs {QUOTE_RESULT_SIZE} bytes, got {len(data)}")
    amount_out, sqrt_price_after, ticks_crossed, gas_estimate = decode(
        QUOTE_EXACT_INPUT_SINGLE_OUTPUT_TYPES, data
    )
    return PoolQuote(
        amount_out=amount_out,
        sqrt_price_x96_after=sqrt_price_after,
        initialized_ticks_crossed=ticks_crossed,
        gas_estimate=gas_estimate,
        fee=fee,
    )


class SwapQuoter:
    """Quotes a single-pool swap with a read-only call to QuoterV2.

    The quoter computes its result by reverting internally, so a payload that
    decodes into the quote tuple counts as a quote whether the call reverted
    or not.
    """

    def __init__(self, client, quoter_address: str = UNISWAP_V3_QUOTER_V2):
        self.client = client
        self.quoter_address = Web3.to_checksum_address(quoter_address)

    async def quote(self, token_in: TokenInfo, token_out: TokenInfo, amount_in_raw: int,
                    fee: int = DEFAULT_FEE_TIER) -> PoolQuote:
        validate_fee_tier(fee)
        if amount_in_raw <= 0:
            raise InvalidAmountError("Amount must be positive")
        if amount_in_raw > MAX_UINT256:
            raise OverflowError(f"Amount {amount_in_raw} does not fit in uint256")

        calldata = encode_quote_call(token_in.address, token_out.address, amount_in_raw, fee)
        outcome = await self.client.simulate(self.quoter_address, calldata)
        quote = self._parse(outcome, token_in, token_out, fee)

        logger.debug(
            f"Quote {amount_in_raw} {token_in.symbol or token_in.address} -> "
            f"{quote.amount_out} {token_out.symbol or token_out.address} (fee {fee}, gas {quote.gas_estimate})"
        )
        return quote

    def _parse(self, outcome: SimulationOutcome, token_in: TokenInfo, token_out: TokenInfo,
               fee: int) -> PoolQuote:
        pair = f"{token_in.symbol or token_in.address}/{token_out.symbol or token_out.address}"
        try:
            quote = decode_quote_result(outcome.payload, fee)
        except DecodingError as e:
            if outcome.ok:
                reason = f"unexpected quoter response: {e}"
            else:
                reason = outcome.message
            raise QuoteFailedError(f"Quote failed for {pair} at fee tier {fee}: {reason}") from e

        if quote.amount_out == 0:
            raise QuoteFailedError(f"Quote failed for {pair} at fee tier {fee}: zero output")
        return quote
