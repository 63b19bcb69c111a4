"""Native ETH and ERC20 balance reads."""

import asyncio
from typing import Any, Dict, Optional

from . import decimal_math
from .contracts import ERC20_ABI
from .tokens import NATIVE_DECIMALS, NATIVE_SYMBOL, checksum_address


class BalanceReader:
    def __init__(self, client):
        self.client = client

    async def get_balance(self, address: str, token_address: Optional[str] = None) -> Dict[str, Any]:
        """Balance of ``address`` in ETH, or in the ERC20 at ``token_address``."""
        owner = checksum_address(address)

        if not token_address:
            raw = await self.client.get_balance(owner)
            symbol, decimals, token = NATIVE_SYMBOL, NATIVE_DECIMALS, None
        else:
            token = checksum_address(token_address)
            raw, decimals, symbol = await asyncio.gather(
                self.client.read(token, ERC20_ABI, "balanceOf", owner),
                self.client.read(token, ERC20_ABI, "decimals"),
                self.client.read(token, ERC20_ABI, "symbol"),
            )

        return {
            "address": owner,
            "token_address": token,
            "balance": decimal_math.format_units(raw, decimals),
            "raw_balance": str(raw),
            "symbol": symbol,
            "decimals": decimals,
        }
