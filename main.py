import asyncio
from eth_trading_mcp.server import main as run_server

def main():
    """Launch the Ethereum Trading MCP Server"""
    asyncio.run(run_server())

if __name__ == "__main__":
    main()
