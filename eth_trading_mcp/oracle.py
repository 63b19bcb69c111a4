"""Chainlink ETH/USD price feed."""

import asyncio
import logging
from decimal import Decimal

from web3 import Web3

from . import decimal_math
from .contracts import CHAINLINK_AGGREGATOR_ABI, CHAINLINK_ETH_USD_FEED
from .errors import OracleError

logger = logging.getLogger(__name__)


class EthUsdPriceFeed:
    def __init__(self, client, feed_address: str = CHAINLINK_ETH_USD_FEED):
        self.client = client
        self.feed_address = Web3.to_checksum_address(feed_address)

    async def latest_price(self) -> Decimal:
        """Latest ETH price in USD, scaled by the aggregator's decimals."""
        round_data, decimals = await asyncio.gather(
            self.client.read(self.feed_address, CHAINLINK_AGGREGATOR_ABI, "latestRoundData"),
            self.client.read(self.feed_address, CHAINLINK_AGGREGATOR_ABI, "decimals"),
        )
        answer = int(round_data[1])
        if answer <= 0:
            raise OracleError(f"Chainlink feed {self.feed_address} returned a non-positive answer: {answer}")

        price = decimal_math.to_decimal(answer, int(decimals))
        logger.debug(f"Chainlink ETH/USD = {price}")
        return price
