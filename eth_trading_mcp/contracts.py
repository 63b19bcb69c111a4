"""Contract ABIs, function signatures and mainnet addresses."""

# Uniswap V3 (Ethereum mainnet)
UNISWAP_V3_FACTORY = "0x1F98431c8aD98523631AE4a59f267346ea31F984"
UNISWAP_V3_QUOTER_V2 = "0x61fFE0149A332c47d847296F720a48855e9cb754"
UNISWAP_V3_SWAP_ROUTER = "0xE592427A0AEce92De3Edee1F18E0157C05861564"

# Chainlink ETH/USD aggregator (Ethereum mainnet)
CHAINLINK_ETH_USD_FEED = "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Pool fee tiers in hundredths of a basis point
FEE_TIERS = (100, 500, 3000, 10000)
DEFAULT_FEE_TIER = 3000

MAX_UINT256 = 2**256 - 1
MAX_UINT160 = 2**160 - 1

# Raw ABI signatures for calls encoded with eth_abi
QUOTE_EXACT_INPUT_SINGLE_SIGNATURE = "quoteExactInputSingle((address,address,uint256,uint24,uint160))"
QUOTE_EXACT_INPUT_SINGLE_INPUT_TYPES = ["(address,address,uint256,uint24,uint160)"]
QUOTE_EXACT_INPUT_SINGLE_OUTPUT_TYPES = ["uint256", "uint160", "uint32", "uint256"]

EXACT_INPUT_SINGLE_SIGNATURE = (
    "exactInputSingle((address,address,uint24,address,uint256,uint256,uint256,uint160))"
)
EXACT_INPUT_SINGLE_INPUT_TYPES = ["(address,address,uint24,address,uint256,uint256,uint256,uint160)"]
EXACT_INPUT_SINGLE_OUTPUT_TYPES = ["uint256"]

# ERC-20 ABI (minimal)
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "type": "function"
    }
]

UNISWAP_V3_FACTORY_ABI = [
    {
        "name": "getPool",
        "type": "function",
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
            {"name": "fee", "type": "uint24"}
        ],
        "outputs": [{"name": "pool", "type": "address"}],
        "stateMutability": "view"
    }
]

UNISWAP_V3_POOL_ABI = [
    {
        "name": "slot0",
        "type": "function",
        "inputs": [],
        "outputs": [
            {"name": "sqrtPriceX96", "type": "uint160"},
            {"name": "tick", "type": "int24"},
            {"name": "observationIndex", "type": "uint16"},
            {"name": "observationCardinality", "type": "uint16"},
            {"name": "observationCardinalityNext", "type": "uint16"},
            {"name": "feeProtocol", "type": "uint8"},
            {"name": "unlocked", "type": "bool"}
        ],
        "stateMutability": "view"
    }
]

CHAINLINK_AGGREGATOR_ABI = [
    {
        "name": "latestRoundData",
        "type": "function",
        "inputs": [],
        "outputs": [
            {"name": "roundId", "type": "uint80"},
            {"name": "answer", "type": "int256"},
            {"name": "startedAt", "type": "uint256"},
            {"name": "updatedAt", "type": "uint256"},
            {"name": "answeredInRound", "type": "uint80"}
        ],
        "stateMutability": "view"
    },
    {
        "name": "decimals",
        "type": "function",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view"
    }
]
