"""Shared fixtures: an in-memory stand-in for EthereumClient.

The fake serves canned view-function results keyed by (address, function)
and canned eth_call outcomes keyed by target address, so no test touches
the network.
"""

from math import isqrt
from types import SimpleNamespace

import pytest
from eth_abi import encode

from eth_trading_mcp.contracts import (
    CHAINLINK_ETH_USD_FEED,
    UNISWAP_V3_FACTORY,
    UNISWAP_V3_QUOTER_V2,
    UNISWAP_V3_SWAP_ROUTER,
)
from eth_trading_mcp.ethereum import SimulationOutcome
from eth_trading_mcp.tokens import KNOWN_TOKENS

# Hardhat default account #0
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
SIGNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

WETH = KNOWN_TOKENS["WETH"]
USDC = KNOWN_TOKENS["USDC"]
USDT = KNOWN_TOKENS["USDT"]
UNI = KNOWN_TOKENS["UNI"]
AAVE = "0x7Fc66500c84A76Ad7e9c93437bFc5Ac33E2DDaE9"

WETH_USDC_POOL = "0x8ad599c3a0ff1de082011efddc58f1908eb6e6d8"
UNI_WETH_POOL = "0x1d42064fc4beb5f8aaf85f4617ae8b3b5b8bd801"


class FakeEthereumClient:
    def __init__(self, signer_address: str = SIGNER):
        self.signer_address = signer_address
        self.reads = {}
        self.outcomes = {}
        self.balances = {}
        self.read_calls = []
        self.simulate_calls = []

    def set_read(self, address, fn_name, value):
        self.reads[(address.lower(), fn_name)] = value

    def set_outcome(self, address, outcome):
        self.outcomes[address.lower()] = outcome

    async def read(self, address, abi, fn_name, *args):
        self.read_calls.append((address, fn_name, args))
        value = self.reads[(address.lower(), fn_name)]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(*args)
        return value

    async def simulate(self, to, data, from_address=None, value=0):
        self.simulate_calls.append(SimpleNamespace(to=to, data=data, from_address=from_address, value=value))
        outcome = self.outcomes[to.lower()]
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(data)
        return outcome

    async def get_balance(self, address):
        return self.balances[address.lower()]


def quote_payload(amount_out: int, sqrt_price_after: int = 2**96, ticks: int = 1, gas: int = 120000) -> bytes:
    return encode(["uint256", "uint160", "uint32", "uint256"], [amount_out, sqrt_price_after, ticks, gas])


def sqrt_price_for(price_token0_in_token1: int, decimals0: int, decimals1: int, inverse: bool = False) -> int:
    """sqrtPriceX96 for a human price (or its inverse when ``inverse``)."""
    if inverse:
        raw_num, raw_den = 10**decimals1, price_token0_in_token1 * 10**decimals0
    else:
        raw_num, raw_den = price_token0_in_token1 * 10**decimals1, 10**decimals0
    return isqrt(raw_num * 2**192 // raw_den)


@pytest.fixture
def fake_client():
    client = FakeEthereumClient()
    for address, decimals in ((WETH, 18), (USDC, 6), (USDT, 6), (UNI, 18), (AAVE, 18)):
        client.set_read(address, "decimals", decimals)
    return client


@pytest.fixture
def router_address():
    return UNISWAP_V3_SWAP_ROUTER


@pytest.fixture
def quoter_address():
    return UNISWAP_V3_QUOTER_V2


@pytest.fixture
def factory_address():
    return UNISWAP_V3_FACTORY


@pytest.fixture
def feed_address():
    return CHAINLINK_ETH_USD_FEED


@pytest.fixture
def revert_outcome():
    return SimulationOutcome.error("execution reverted: TransferHelper: TRANSFER_FROM_FAILED")
