"""Instantaneous Uniswap V3 pool prices read from ``slot0``."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from web3 import Web3

from . import decimal_math
from .contracts import (
    DEFAULT_FEE_TIER,
    UNISWAP_V3_FACTORY,
    UNISWAP_V3_FACTORY_ABI,
    UNISWAP_V3_POOL_ABI,
    ZERO_ADDRESS,
)
from .errors import InvalidAddressError, NoPoolFoundError
from .quoter import validate_fee_tier
from .tokens import TokenInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolPrice:
    """Price of one ``base`` unit expressed in ``quote`` units."""
    pool: str
    fee: int
    base: TokenInfo
    quote: TokenInfo
    price: Decimal
    sqrt_price_x96: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool": self.pool,
            "fee": self.fee,
            "base": self.base.to_dict(),
            "quote": self.quote.to_dict(),
            "price": str(self.price),
            "sqrt_price_x96": str(self.sqrt_price_x96),
        }


def sort_tokens(token_a: TokenInfo, token_b: TokenInfo):
    """Order two tokens the way Uniswap orders token0/token1 (lower address first)."""
    if int(token_a.address, 16) < int(token_b.address, 16):
        return token_a, token_b
    return token_b, token_a


class PoolPriceReader:
    """Reads pool prices without accounting for trade size or slippage."""

    def __init__(self, client, factory_address: str = UNISWAP_V3_FACTORY):
        self.client = client
        self.factory_address = Web3.to_checksum_address(factory_address)

    async def find_pool(self, token_a: TokenInfo, token_b: TokenInfo, fee: int = DEFAULT_FEE_TIER) -> str:
        validate_fee_tier(fee)
        pool = await self.client.read(
            self.factory_address, UNISWAP_V3_FACTORY_ABI, "getPool",
            token_a.address, token_b.address, fee,
        )
        if not pool or int(pool, 16) == int(ZERO_ADDRESS, 16):
            raise NoPoolFoundError(
                f"No Uniswap V3 pool found for {token_a.symbol or token_a.address}/"
                f"{token_b.symbol or token_b.address} ({fee / 10000}%)"
            )
        return Web3.to_checksum_address(pool)

    async def read_sqrt_price(self, pool: str) -> int:
        slot0 = await self.client.read(pool, UNISWAP_V3_POOL_ABI, "slot0")
        sqrt_price_x96 = int(slot0[0])
        if sqrt_price_x96 == 0:
            raise NoPoolFoundError(f"Pool {pool} is not initialized")
        return sqrt_price_x96

    async def get_price(self, base: TokenInfo, quote: TokenInfo, fee: int = DEFAULT_FEE_TIER) -> PoolPrice:
        """Current price of ``base`` in ``quote`` units from the pool for ``fee``."""
        if base.is_native or quote.is_native:
            raise InvalidAddressError("Pool prices need ERC20 tokens; use WETH for ETH")
        if base.address == quote.address:
            raise InvalidAddressError("Base and quote tokens must differ")

        pool = await self.find_pool(base, quote, fee)
        sqrt_price_x96 = await self.read_sqrt_price(pool)

        token0, token1 = sort_tokens(base, quote)
        price = decimal_math.sqrt_price_x96_to_price(sqrt_price_x96, token0.decimals, token1.decimals)
        if base.address != token0.address:
            # slot0 prices token0 in token1; flip when base is token1
            price = decimal_math.invert_price(price)

        logger.debug(f"Pool {pool} price {base.symbol or base.address}/{quote.symbol or quote.address} = {price}")
        return PoolPrice(
            pool=pool,
            fee=fee,
            base=base,
            quote=quote,
            price=price,
            sqrt_price_x96=sqrt_price_x96,
        )
