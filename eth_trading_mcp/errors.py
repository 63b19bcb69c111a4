"""Error types raised by the trading tools.

Anything deriving from EthTradingError is turned into a tool-level error by
the MCP server. Router simulation reverts are not errors; they travel back
to the caller as SimulationOutcome data.
"""


class EthTradingError(Exception):
    """Base class for all domain errors."""


class ConfigurationError(EthTradingError):
    pass


class UnknownSymbolError(EthTradingError):
    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__("Unknown token symbol. Please provide token_address.")


class InvalidAddressError(EthTradingError):
    pass


class NativeTokenNotSupportedError(EthTradingError):
    pass


class InvalidAmountError(EthTradingError):
    pass


class InvalidSlippageError(EthTradingError):
    pass


class InvalidFeeTierError(EthTradingError):
    pass


class NoPoolFoundError(EthTradingError):
    pass


class QuoteFailedError(EthTradingError):
    pass


class ContractCallError(EthTradingError):
    """A read-only contract call reverted or returned no data."""


class OracleError(EthTradingError):
    pass


class RpcTransportError(EthTradingError):
    """The RPC endpoint could not be reached or returned a non-revert error."""
