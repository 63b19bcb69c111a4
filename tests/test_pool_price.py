from decimal import Decimal

import pytest

from eth_trading_mcp.contracts import ZERO_ADDRESS
from eth_trading_mcp.errors import InvalidAddressError, InvalidFeeTierError, NoPoolFoundError
from eth_trading_mcp.pool_price import PoolPriceReader, sort_tokens
from eth_trading_mcp.tokens import NATIVE_ETH, TokenInfo

from conftest import USDC, WETH, WETH_USDC_POOL, sqrt_price_for

WETH_TOKEN = TokenInfo(address=WETH, decimals=18, symbol="WETH")
USDC_TOKEN = TokenInfo(address=USDC, decimals=6, symbol="USDC")


@pytest.fixture
def pool_client(fake_client, factory_address):
    # mainnet ordering: USDC is token0, WETH is token1; 1 WETH = 1800 USDC
    sqrt_price = sqrt_price_for(1800, 6, 18, inverse=True)
    fake_client.set_read(factory_address, "getPool", lambda a, b, fee: WETH_USDC_POOL if fee == 3000 else ZERO_ADDRESS)
    fake_client.set_read(WETH_USDC_POOL, "slot0", (sqrt_price, 201000, 0, 1, 1, 0, True))
    return fake_client


def test_sort_tokens_by_address():
    assert sort_tokens(WETH_TOKEN, USDC_TOKEN) == (USDC_TOKEN, WETH_TOKEN)
    assert sort_tokens(USDC_TOKEN, WETH_TOKEN) == (USDC_TOKEN, WETH_TOKEN)


@pytest.mark.asyncio
async def test_price_of_weth_in_usdc_is_inverted(pool_client):
    reader = PoolPriceReader(pool_client)
    result = await reader.get_price(WETH_TOKEN, USDC_TOKEN)
    assert abs(result.price - Decimal(1800)) < Decimal("1e-6")
    assert result.pool.lower() == WETH_USDC_POOL
    assert result.fee == 3000


@pytest.mark.asyncio
async def test_price_of_usdc_in_weth(pool_client):
    reader = PoolPriceReader(pool_client)
    result = await reader.get_price(USDC_TOKEN, WETH_TOKEN)
    assert abs(result.price - Decimal(1) / Decimal(1800)) < Decimal("1e-15")


@pytest.mark.asyncio
async def test_missing_pool(pool_client):
    reader = PoolPriceReader(pool_client)
    with pytest.raises(NoPoolFoundError) as exc_info:
        await reader.get_price(WETH_TOKEN, USDC_TOKEN, fee=500)
    assert "WETH/USDC" in str(exc_info.value)


@pytest.mark.asyncio
async def test_uninitialized_pool(pool_client):
    pool_client.set_read(WETH_USDC_POOL, "slot0", (0, 0, 0, 0, 0, 0, False))
    reader = PoolPriceReader(pool_client)
    with pytest.raises(NoPoolFoundError):
        await reader.get_price(WETH_TOKEN, USDC_TOKEN)


@pytest.mark.asyncio
async def test_native_and_identical_tokens_rejected(pool_client):
    reader = PoolPriceReader(pool_client)
    with pytest.raises(InvalidAddressError):
        await reader.get_price(NATIVE_ETH, USDC_TOKEN)
    with pytest.raises(InvalidAddressError):
        await reader.get_price(USDC_TOKEN, USDC_TOKEN)


@pytest.mark.asyncio
async def test_to_dict(pool_client):
    reader = PoolPriceReader(pool_client)
    result = (await reader.get_price(WETH_TOKEN, USDC_TOKEN)).to_dict()
    assert result["base"]["symbol"] == "WETH"
    assert result["quote"]["decimals"] == 6
    assert Decimal(result["price"]) > 1799


@pytest.mark.asyncio
@pytest.mark.parametrize("fee", [2**24, 2500, -1])
async def test_unsupported_fee_tier_rejected_before_reads(pool_client, fee):
    reader = PoolPriceReader(pool_client)
    with pytest.raises(InvalidFeeTierError):
        await reader.get_price(WETH_TOKEN, USDC_TOKEN, fee=fee)
    assert pool_client.read_calls == []
