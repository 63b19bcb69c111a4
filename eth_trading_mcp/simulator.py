"""Swap quotation, transaction construction and router simulation."""

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Union

from web3 import Web3

from .calldata import DEFAULT_DEADLINE_BUFFER, build_params, decode_amount_out, encode_exact_input_single
from .contracts import DEFAULT_FEE_TIER, UNISWAP_V3_SWAP_ROUTER
from .decimal_math import Amount, plain
from .errors import InvalidAddressError, InvalidAmountError
from .ethereum import SimulationOutcome
from .quoter import PoolQuote, SwapQuoter, validate_fee_tier
from .slippage import DEFAULT_SLIPPAGE_TOLERANCE, SlippageCalculator
from .tokens import TokenInfo, TokenMetadataResolver

logger = logging.getLogger(__name__)

SIMULATION_NOTE = (
    "Gas estimate is from the Quoter. The router eth_call is read-only; actual execution "
    "still depends on token approval and balance."
)


@dataclass(frozen=True)
class SwapPlan:
    token_in: TokenInfo
    token_out: TokenInfo
    fee: int
    amount_in: int
    minimum_output: int
    recipient: str
    deadline: int
    router_address: str
    calldata: bytes
    value: int = 0  # ERC20 to ERC20 swaps carry no ETH

    def transaction(self) -> Dict[str, str]:
        return {
            "to": self.router_address,
            "data": "0x" + self.calldata.hex(),
            "value": str(self.value),
            "description": "Uniswap V3 SwapRouter.exactInputSingle",
        }


@dataclass(frozen=True)
class SwapResponse:
    from_token: TokenInfo
    to_token: TokenInfo
    amount_in: Amount
    slippage_tolerance: Decimal
    quote: PoolQuote
    minimum_output: Amount
    plan: SwapPlan
    simulation: SimulationOutcome

    @property
    def estimated_output(self) -> Amount:
        return Amount(raw=self.quote.amount_out, decimals=self.to_token.decimals)

    def router_call_simulation(self) -> Dict[str, Any]:
        result = self.simulation.to_dict()
        if self.simulation.ok:
            amount_out = decode_amount_out(self.simulation.return_data)
            if amount_out is not None:
                result["simulated_amount_out"] = str(amount_out)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_token": self.from_token.to_dict(),
            "to_token": self.to_token.to_dict(),
            "amount_in": str(self.amount_in.raw),
            "amount_in_formatted": str(self.amount_in),
            "fee": self.quote.fee,
            "slippage_tolerance": plain(self.slippage_tolerance),
            "estimated_output": str(self.estimated_output.raw),
            "estimated_output_formatted": str(self.estimated_output),
            "minimum_output": str(self.minimum_output.raw),
            "minimum_output_formatted": str(self.minimum_output),
            "gas_estimate_simulation": str(self.quote.gas_estimate),
            "transaction": self.plan.transaction(),
            "router_call_simulation": self.router_call_simulation(),
            "simulation_note": SIMULATION_NOTE,
        }


class SwapSimulator:
    """Runs the quote -> minimum output -> calldata -> router simulation pipeline.

    Token resolution, amount and quote failures raise. A router revert does not:
    it is returned in ``SwapResponse.simulation``.
    """

    def __init__(self, client, resolver: TokenMetadataResolver, quoter: SwapQuoter,
                 router_address: str = UNISWAP_V3_SWAP_ROUTER,
                 deadline_buffer: int = DEFAULT_DEADLINE_BUFFER,
                 clock: Callable[[], float] = time.time):
        self.client = client
        self.resolver = resolver
        self.quoter = quoter
        self.router_address = Web3.to_checksum_address(router_address)
        self.deadline_buffer = deadline_buffer
        self.clock = clock

    async def simulate(self, from_token: str, to_token: str, amount: Union[str, Decimal],
                       slippage_tolerance: Union[str, float, Decimal] = DEFAULT_SLIPPAGE_TOLERANCE,
                       fee: int = DEFAULT_FEE_TIER) -> SwapResponse:
        """Quote and simulate swapping ``amount`` of ``from_token`` into ``to_token``.

        Args:
            from_token: Symbol or address of the ERC20 to sell.
            to_token: Symbol or address of the ERC20 to buy.
            amount: Amount to sell in the from token's human units (e.g. "1.5").
            slippage_tolerance: Fraction in [0, 1), e.g. 0.005 for 0.5%.
            fee: Pool fee tier (100, 500, 3000 or 10000).
        """
        tolerance = SlippageCalculator.parse_tolerance(slippage_tolerance)
        validate_fee_tier(fee)

        token_in, token_out = await self.resolver.resolve_pair(from_token, to_token)
        if token_in.address == token_out.address:
            raise InvalidAddressError("from_token and to_token must be different tokens")

        amount_in = Amount.from_human(amount, token_in.decimals)
        if amount_in.raw == 0:
            raise InvalidAmountError("Amount must be positive")

        quote = await self.quoter.quote(token_in, token_out, amount_in.raw, fee)
        minimum_output = Amount(
            raw=SlippageCalculator.minimum_output(quote.amount_out, tolerance),
            decimals=token_out.decimals,
        )

        plan = self.build_plan(token_in, token_out, amount_in.raw, minimum_output.raw, fee)
        simulation = await self.client.simulate(
            plan.router_address,
            plan.calldata,
            from_address=self.client.signer_address,
            value=plan.value,
        )
        if not simulation.ok:
            logger.warning(f"Router simulation reverted: {simulation.message}")

        return SwapResponse(
            from_token=token_in,
            to_token=token_out,
            amount_in=amount_in,
            slippage_tolerance=tolerance,
            quote=quote,
            minimum_output=minimum_output,
            plan=plan,
            simulation=simulation,
        )

    def build_plan(self, token_in: TokenInfo, token_out: TokenInfo, amount_in: int,
                   minimum_output: int, fee: int) -> SwapPlan:
        recipient = self.client.signer_address
        params = build_params(
            token_in=token_in.address,
            token_out=token_out.address,
            fee=fee,
            recipient=recipient,
            amount_in=amount_in,
            amount_out_minimum=minimum_output,
            now=int(self.clock()),
            deadline_buffer=self.deadline_buffer,
        )
        calldata = encode_exact_input_single(params)
        logger.debug(f"Built exactInputSingle calldata ({len(calldata)} bytes) deadline {params.deadline}")
        return SwapPlan(
            token_in=token_in,
            token_out=token_out,
            fee=fee,
            amount_in=amount_in,
            minimum_output=minimum_output,
            recipient=recipient,
            deadline=params.deadline,
            router_address=self.router_address,
            calldata=calldata,
        )
