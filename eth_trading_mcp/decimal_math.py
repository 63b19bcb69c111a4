"""Fixed-point helpers for token amounts and Uniswap V3 prices.

All amount math runs on ``int`` or ``decimal.Decimal`` inside a local
context wide enough for 256-bit values. ``float`` never enters the
arithmetic: a float argument is converted through ``str()`` first.
"""

from dataclasses import dataclass
from decimal import Context, Decimal, Inexact, InvalidOperation, Overflow, localcontext
from typing import Union

from .contracts import MAX_UINT160, MAX_UINT256
from .errors import InvalidAmountError

# 2**256 has 78 decimal digits
PRECISION = 78
Q96 = 2**96
Q192 = 2**192
MAX_DECIMALS = 255

Numeric = Union[str, int, float, Decimal]


def _context(exact: bool = False) -> Context:
    traps = [InvalidOperation, Overflow]
    if exact:
        traps.append(Inexact)
    return Context(prec=PRECISION, traps=traps)


def _check_decimals(decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise TypeError(f"decimals must be an int, got {type(decimals).__name__}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ValueError(f"decimals must be within 0..{MAX_DECIMALS}, got {decimals}")


def as_decimal(value: Numeric) -> Decimal:
    """Convert user input to Decimal without going through binary floating point."""
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidAmountError(f"Invalid amount: {value!r}")
    else:
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    if not result.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return result


def fractional_digits(value: Decimal) -> int:
    """Significant digits after the decimal point, ignoring trailing zeros."""
    _, digits, exponent = value.as_tuple()
    while exponent < 0 and len(digits) > 1 and digits[-1] == 0:
        digits = digits[:-1]
        exponent += 1
    if digits == (0,):
        return 0
    return max(0, -exponent)


def plain(value: Decimal) -> str:
    """Plain notation with trailing zeros stripped (never ``1E-7``)."""
    if value == 0:
        return "0"
    with localcontext(_context()):
        return format(value.normalize(), "f")


def to_raw(amount: Numeric, decimals: int) -> int:
    """Convert a human-unit amount to base units.

    Raises:
        InvalidAmountError: for negative, non-numeric amounts or amounts with
            more fractional digits than ``decimals`` allows.
        OverflowError: if the base-unit value does not fit in a uint256.
    """
    _check_decimals(decimals)
    value = as_decimal(amount)
    if value < 0:
        raise InvalidAmountError(f"Amount must not be negative: {amount}")
    if fractional_digits(value) > decimals:
        raise InvalidAmountError(
            f"Amount {amount} has more than {decimals} decimal places"
        )

    try:
        with localcontext(_context(exact=True)):
            scaled = value.scaleb(decimals)
    except Inexact:
        raise OverflowError(f"Amount {amount} exceeds {PRECISION} digits of precision")

    raw = int(scaled)
    if raw > MAX_UINT256:
        raise OverflowError(f"Amount {amount} does not fit in uint256")
    return raw


def to_decimal(raw: int, decimals: int) -> Decimal:
    """Convert base units to a human-unit Decimal."""
    _check_decimals(decimals)
    if raw < 0:
        raise InvalidAmountError(f"Raw amount must not be negative: {raw}")
    if raw > MAX_UINT256:
        raise OverflowError(f"Raw amount {raw} does not fit in uint256")
    with localcontext(_context()):
        return Decimal(raw).scaleb(-decimals)


def format_units(raw: int, decimals: int) -> str:
    """Human-readable amount in plain notation with trailing zeros stripped."""
    return plain(to_decimal(raw, decimals))


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) with uint256 bounds on inputs and result."""
    for operand in (a, b, denominator):
        if operand < 0 or operand > MAX_UINT256:
            raise OverflowError(f"Operand {operand} is outside the uint256 range")
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")

    result = a * b // denominator
    if result > MAX_UINT256:
        raise OverflowError("mul_div result does not fit in uint256")
    return result


def sqrt_price_x96_to_price(sqrt_price_x96: int, decimals0: int, decimals1: int) -> Decimal:
    """Price of token0 in token1 human units from a pool's ``sqrtPriceX96``.

    price = (sqrtPriceX96 / 2**96)**2 * 10**(decimals0 - decimals1)
    """
    _check_decimals(decimals0)
    _check_decimals(decimals1)
    if sqrt_price_x96 <= 0:
        raise ValueError(f"sqrtPriceX96 must be positive, got {sqrt_price_x96}")
    if sqrt_price_x96 > MAX_UINT160:
        raise OverflowError(f"sqrtPriceX96 {sqrt_price_x96} does not fit in uint160")

    # exact integer numerator, one rounding step in the division
    numerator = sqrt_price_x96 * sqrt_price_x96
    with localcontext(_context()):
        ratio = Decimal(numerator) / Decimal(Q192)
        return ratio.scaleb(decimals0 - decimals1)


def invert_price(price: Decimal) -> Decimal:
    if price == 0:
        raise ZeroDivisionError("Cannot invert a zero price")
    with localcontext(_context()):
        return Decimal(1) / price


@dataclass(frozen=True)
class Amount:
    """A token quantity in base units together with its token's decimals."""
    raw: int
    decimals: int

    @classmethod
    def from_human(cls, value: Numeric, decimals: int) -> "Amount":
        return cls(raw=to_raw(value, decimals), decimals=decimals)

    def __str__(self) -> str:
        return format_units(self.raw, self.decimals)
