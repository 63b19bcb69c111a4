#!/usr/bin/env python3
"""
Ethereum Trading MCP Server (FastMCP Implementation)
Provides AI agents with tools to read balances and prices and to simulate
Uniswap V3 swaps on Ethereum mainnet. Nothing is signed or broadcast.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Dict, Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from .balance import BalanceReader
from .config import Settings, configure_logging, load_settings
from .contracts import DEFAULT_FEE_TIER
from .decimal_math import plain
from .errors import EthTradingError
from .ethereum import EthereumClient
from .oracle import EthUsdPriceFeed
from .pool_price import PoolPriceReader
from .quoter import SwapQuoter
from .simulator import SwapSimulator
from .tokens import WETH_ADDRESS, TokenMetadataResolver

logger = logging.getLogger(__name__)

# set by main() so the lifespan reuses the settings read at startup
_settings: Optional[Settings] = None


@dataclass
class TradingContext:
    """Components shared by every tool call; all read-only."""
    settings: Settings
    client: EthereumClient
    resolver: TokenMetadataResolver
    balances: BalanceReader
    price_reader: PoolPriceReader
    eth_usd_feed: EthUsdPriceFeed
    simulator: SwapSimulator


def build_context(settings: Settings, client: EthereumClient) -> TradingContext:
    """Wire every component to the one shared client."""
    resolver = TokenMetadataResolver(client)
    quoter = SwapQuoter(client, settings.quoter_address)
    return TradingContext(
        settings=settings,
        client=client,
        resolver=resolver,
        balances=BalanceReader(client),
        price_reader=PoolPriceReader(client, settings.factory_address),
        eth_usd_feed=EthUsdPriceFeed(client, settings.eth_usd_feed_address),
        simulator=SwapSimulator(
            client,
            resolver,
            quoter,
            router_address=settings.router_address,
            deadline_buffer=settings.deadline_seconds,
        ),
    )


@asynccontextmanager
async def trading_lifespan(server: FastMCP) -> AsyncIterator[TradingContext]:
    """Manages the Ethereum client lifecycle."""
    settings = _settings if _settings is not None else load_settings()
    client = EthereumClient.from_settings(settings)

    logger.info(f"Initialized Ethereum trading server for signer: {settings.signer_address}")
    logger.info(f"Using RPC endpoint: {settings.rpc_url}")

    try:
        yield build_context(settings, client)
    finally:
        logger.info("Ethereum trading server shutdown complete")


# Initialize FastMCP server
mcp = FastMCP(
    "ethereum-trading",
    instructions=(
        "Query Ethereum balances and token prices, and simulate Uniswap V3 swaps. "
        "Swaps are only simulated with eth_call; nothing is signed or broadcast."
    ),
    lifespan=trading_lifespan,
)


@mcp.tool()
async def get_balance(ctx: Context, address: str, token_address: Optional[str] = None) -> Dict[str, Any]:
    """Get the ETH or ERC20 token balance of an address.

    Args:
        address: Wallet address to check
        token_address: Optional ERC20 contract address. If omitted, returns the ETH balance.

    Returns:
        Balance in human units, raw base units, token symbol and decimals.
    """
    trading_ctx = ctx.request_context.lifespan_context
    try:
        return await trading_ctx.balances.get_balance(address, token_address)
    except EthTradingError as e:
        logger.error(f"Error getting balance: {e}")
        raise ToolError(str(e)) from e


@mcp.tool()
async def get_token_price(ctx: Context, token_symbol: str, token_address: Optional[str] = None,
                          fee: int = DEFAULT_FEE_TIER) -> Dict[str, Any]:
    """Get the current price of a token in ETH and USD.

    ETH is priced with the Chainlink ETH/USD feed. Other tokens are priced from
    their Uniswap V3 pool against WETH, then converted to USD.

    Args:
        token_symbol: Token symbol (e.g. ETH, USDC, UNI)
        token_address: Token contract address (required for tokens outside the built-in list)
        fee: Fee tier of the WETH pool to read (default: 3000, i.e. 0.3%)

    Returns:
        Price in ETH and USD with the data source used.
    """
    trading_ctx = ctx.request_context.lifespan_context
    try:
        return await _token_price(trading_ctx, token_symbol, token_address, fee)
    except EthTradingError as e:
        logger.error(f"Error getting token price: {e}")
        raise ToolError(str(e)) from e


async def _token_price(trading_ctx: TradingContext, token_symbol: str, token_address: Optional[str],
                       fee: int) -> Dict[str, Any]:
    token = await trading_ctx.resolver.resolve(token_symbol, address=token_address, allow_native=True)

    if token.is_native:
        eth_price_usd = await trading_ctx.eth_usd_feed.latest_price()
        return {
            "symbol": token.symbol,
            "price_usd": plain(eth_price_usd),
            "price_eth": "1",
            "source": "Chainlink Oracle",
        }

    if token.address == WETH_ADDRESS:
        eth_price_usd = await trading_ctx.eth_usd_feed.latest_price()
        return {
            "symbol": token.symbol or "WETH",
            "address": token.address,
            "price_usd": plain(eth_price_usd),
            "price_eth": "1",
            "source": "Chainlink Oracle (WETH is 1:1 with ETH)",
        }

    weth, eth_price_usd = await asyncio.gather(
        trading_ctx.resolver.resolve(WETH_ADDRESS),
        trading_ctx.eth_usd_feed.latest_price(),
    )
    pool_price = await trading_ctx.price_reader.get_price(token, weth, fee)
    price_usd = pool_price.price * eth_price_usd

    return {
        "symbol": token.symbol,
        "address": token.address,
        "price_eth": plain(pool_price.price),
        "price_usd": plain(price_usd),
        "source": "Uniswap V3 (derived from WETH pair) + Chainlink ETH/USD",
        "pool_fee": fee,
        "pool": pool_price.pool,
    }


@mcp.tool()
async def swap_tokens(ctx: Context, from_token: str, to_token: str, amount: str,
                      slippage_tolerance: float = 0.005, fee: int = DEFAULT_FEE_TIER) -> Dict[str, Any]:
    """Simulate a Uniswap V3 swap between two ERC20 tokens and build its transaction.

    Nothing is signed or sent. The router call is simulated with eth_call; a
    revert (e.g. missing approval or balance) is reported in
    router_call_simulation instead of failing the tool call.

    Args:
        from_token: Symbol or address of the token to sell (e.g. WETH)
        to_token: Symbol or address of the token to buy (e.g. USDC)
        amount: Amount of from_token to sell in human units (e.g. "1.5" for 1.5 WETH)
        slippage_tolerance: Maximum output reduction as a fraction in [0, 1) (default: 0.005 = 0.5%)
        fee: Pool fee tier: 100, 500, 3000 or 10000 (default: 3000)

    Returns:
        Estimated and minimum output, the router transaction (to, data, value) and the simulation result.
    """
    trading_ctx = ctx.request_context.lifespan_context
    try:
        response = await trading_ctx.simulator.simulate(
            from_token, to_token, amount, slippage_tolerance=slippage_tolerance, fee=fee
        )
    except (EthTradingError, OverflowError) as e:
        logger.error(f"Error simulating swap: {e}")
        raise ToolError(str(e)) from e
    return response.to_dict()


async def main():
    """Main function to run the MCP server."""
    global _settings
    _settings = load_settings()
    configure_logging(_settings.log_level)
    logger.info("Starting Ethereum Trading MCP Server...")

    transport = _settings.transport

    if transport == "stdio":
        await mcp.run_stdio_async()
    elif transport == "sse":
        await mcp.run_sse_async()
    else:
        logger.error(f"Unsupported transport: {transport}")
        return


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
