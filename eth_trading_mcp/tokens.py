"""Token reference resolution: symbol or address to address plus decimals."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from web3 import Web3

from .contracts import ERC20_ABI
from .errors import (
    ContractCallError,
    InvalidAddressError,
    NativeTokenNotSupportedError,
    UnknownSymbolError,
)

logger = logging.getLogger(__name__)

NATIVE_SYMBOL = "ETH"
NATIVE_DECIMALS = 18

# Well-known Ethereum mainnet tokens
KNOWN_TOKENS = {
    "WETH": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    "USDC": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    "USDT": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
    "DAI": "0x6B175474E89094C44Da98b954EedeAC495271d0F",
    "WBTC": "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
    "UNI": "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984",
    "LINK": "0x514910771AF9Ca656af840dff83E8264EcF986CA",
}

WETH_ADDRESS = KNOWN_TOKENS["WETH"]


@dataclass(frozen=True)
class TokenInfo:
    """A resolved token. ``address`` is None only for native ETH."""
    address: Optional[str]
    decimals: int
    symbol: Optional[str] = None

    @property
    def is_native(self) -> bool:
        return self.address is None

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "symbol": self.symbol, "decimals": self.decimals}


NATIVE_ETH = TokenInfo(address=None, decimals=NATIVE_DECIMALS, symbol=NATIVE_SYMBOL)


def checksum_address(value: str) -> str:
    """Validate a 20-byte hex address and return its checksum form."""
    if not isinstance(value, str) or not Web3.is_address(value.strip()):
        raise InvalidAddressError(f"Invalid address: {value}")
    return Web3.to_checksum_address(value.strip())


def _looks_like_address(ref: str) -> bool:
    return ref.lower().startswith("0x")


class TokenMetadataResolver:
    """Resolves token references against a small static table and the chain.

    Nothing is cached: every resolution reads ``decimals()`` again.
    """

    def __init__(self, client, known_tokens: Optional[Dict[str, str]] = None):
        self.client = client
        self.known_tokens = {
            symbol.upper(): address
            for symbol, address in (known_tokens or KNOWN_TOKENS).items()
        }

    def lookup_symbol(self, symbol: str) -> Optional[str]:
        return self.known_tokens.get(symbol.strip().upper())

    async def resolve(self, ref: str, address: Optional[str] = None,
                      allow_native: bool = False) -> TokenInfo:
        """Resolve ``ref`` (symbol or address) to a TokenInfo.

        Args:
            ref: Token symbol (e.g. USDC) or contract address.
            address: Explicit contract address; takes precedence over the symbol table.
            allow_native: Accept ETH as the native pseudo-token.

        Raises:
            UnknownSymbolError: symbol not in the table and no address given.
            InvalidAddressError: malformed address or not an ERC20 contract.
            NativeTokenNotSupportedError: ETH requested where only ERC20s are allowed.
        """
        if ref is None or not str(ref).strip():
            if not address:
                raise InvalidAddressError("Token reference is empty")
            ref = address
        ref = str(ref).strip()

        symbol: Optional[str] = None
        if _looks_like_address(ref):
            token_address = checksum_address(ref)
        else:
            symbol = ref.upper()
            if address:
                token_address = checksum_address(address)
            elif symbol == NATIVE_SYMBOL:
                if not allow_native:
                    raise NativeTokenNotSupportedError(
                        "Native ETH cannot be swapped directly; use WETH instead."
                    )
                return NATIVE_ETH
            else:
                known = self.lookup_symbol(symbol)
                if known is None:
                    raise UnknownSymbolError(symbol)
                token_address = Web3.to_checksum_address(known)

        decimals = await self.read_decimals(token_address)
        logger.debug(f"Resolved token {symbol or token_address} -> {token_address} ({decimals} decimals)")
        return TokenInfo(address=token_address, decimals=decimals, symbol=symbol)

    async def read_decimals(self, token_address: str) -> int:
        try:
            decimals = await self.client.read(token_address, ERC20_ABI, "decimals")
        except ContractCallError as e:
            raise InvalidAddressError(f"Address {token_address} is not an ERC20 token: {e}") from e

        if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= 255:
            raise InvalidAddressError(
                f"Address {token_address} returned invalid decimals: {decimals!r}"
            )
        return decimals

    async def resolve_pair(self, ref_a: str, ref_b: str) -> Tuple[TokenInfo, TokenInfo]:
        """Resolve two ERC20 references concurrently."""
        token_a, token_b = await asyncio.gather(self.resolve(ref_a), self.resolve(ref_b))
        return token_a, token_b
