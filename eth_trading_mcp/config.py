"""Environment driven settings for the Ethereum trading MCP server."""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv
from eth_account import Account
from web3 import Web3

from .contracts import (
    CHAINLINK_ETH_USD_FEED,
    UNISWAP_V3_FACTORY,
    UNISWAP_V3_QUOTER_V2,
    UNISWAP_V3_SWAP_ROUTER,
)
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://eth.llamarpc.com"
DEFAULT_RPC_TIMEOUT = 30
DEFAULT_DEADLINE_SECONDS = 1200  # 20 minutes


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from the environment."""
    rpc_url: str
    private_key: str
    signer_address: str
    router_address: str = UNISWAP_V3_SWAP_ROUTER
    quoter_address: str = UNISWAP_V3_QUOTER_V2
    factory_address: str = UNISWAP_V3_FACTORY
    eth_usd_feed_address: str = CHAINLINK_ETH_USD_FEED
    rpc_timeout: int = DEFAULT_RPC_TIMEOUT
    deadline_seconds: int = DEFAULT_DEADLINE_SECONDS
    transport: str = "stdio"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            ConfigurationError: if PRIVATE_KEY is missing or any value is malformed.
        """
        env = os.environ if environ is None else environ

        private_key = env.get("PRIVATE_KEY", "").strip()
        if not private_key:
            raise ConfigurationError("PRIVATE_KEY environment variable is required")

        try:
            signer_address = Account.from_key(private_key).address
        except Exception as e:
            raise ConfigurationError(f"PRIVATE_KEY is not a valid private key: {e}") from e

        return cls(
            rpc_url=env.get("ETHEREUM_RPC_URL", DEFAULT_RPC_URL),
            private_key=private_key,
            signer_address=signer_address,
            router_address=_address(env, "UNISWAP_V3_ROUTER", UNISWAP_V3_SWAP_ROUTER),
            quoter_address=_address(env, "UNISWAP_V3_QUOTER", UNISWAP_V3_QUOTER_V2),
            factory_address=_address(env, "UNISWAP_V3_FACTORY", UNISWAP_V3_FACTORY),
            eth_usd_feed_address=_address(env, "CHAINLINK_ETH_USD_FEED", CHAINLINK_ETH_USD_FEED),
            rpc_timeout=_positive_int(env, "RPC_TIMEOUT", DEFAULT_RPC_TIMEOUT),
            deadline_seconds=_positive_int(env, "SWAP_DEADLINE_SECONDS", DEFAULT_DEADLINE_SECONDS),
            transport=env.get("TRANSPORT", "stdio"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

    def __repr__(self) -> str:
        # keep the key out of logs and tracebacks
        return (
            f"Settings(rpc_url={self.rpc_url!r}, signer_address={self.signer_address!r}, "
            f"router_address={self.router_address!r}, transport={self.transport!r})"
        )


def _address(env: Mapping[str, str], name: str, default: str) -> str:
    value = env.get(name) or default
    if not Web3.is_address(value):
        raise ConfigurationError(f"{name} is not a valid address: {value}")
    return Web3.to_checksum_address(value)


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def load_settings() -> Settings:
    """Load ``.env`` into the process environment and read settings from it."""
    load_dotenv()
    return Settings.from_env()


def configure_logging(level: str = "INFO") -> None:
    # stdout carries the MCP stdio stream, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
