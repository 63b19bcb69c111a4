"""Ethereum trading MCP server: balances, prices and simulated Uniswap V3 swaps."""

__version__ = "0.1.0"
