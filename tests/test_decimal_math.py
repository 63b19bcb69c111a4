from decimal import Decimal

import pytest

from eth_trading_mcp import decimal_math
from eth_trading_mcp.decimal_math import Amount
from eth_trading_mcp.errors import InvalidAmountError

from conftest import sqrt_price_for


@pytest.mark.parametrize("decimals", [0, 6, 8, 18])
@pytest.mark.parametrize("amount", ["0", "1", "42", "123456789", "1000000000000"])
def test_raw_decimal_round_trip_integers(amount, decimals):
    raw = decimal_math.to_raw(amount, decimals)
    assert decimal_math.to_raw(decimal_math.to_decimal(raw, decimals), decimals) == raw


@pytest.mark.parametrize(
    "amount,decimals,expected",
    [
        ("1.5", 18, 1_500_000_000_000_000_000),
        ("0.000001", 6, 1),
        ("2500.123456", 6, 2_500_123_456),
        ("0.12345678", 8, 12_345_678),
        ("7", 0, 7),
    ],
)
def test_to_raw_fractional_amounts(amount, decimals, expected):
    raw = decimal_math.to_raw(amount, decimals)
    assert raw == expected
    assert decimal_math.to_raw(decimal_math.to_decimal(raw, decimals), decimals) == raw
    assert decimal_math.to_decimal(raw, decimals) == Decimal(amount)


def test_to_raw_rejects_precision_loss():
    with pytest.raises(InvalidAmountError):
        decimal_math.to_raw("1.0000001", 6)
    with pytest.raises(InvalidAmountError):
        decimal_math.to_raw("0.5", 0)


@pytest.mark.parametrize("bad", ["-1", "abc", "", "NaN", "Infinity", True, None])
def test_to_raw_rejects_invalid_amounts(bad):
    with pytest.raises(InvalidAmountError):
        decimal_math.to_raw(bad, 18)


def test_to_raw_overflow():
    with pytest.raises(OverflowError):
        decimal_math.to_raw("1e80", 0)
    with pytest.raises(OverflowError):
        decimal_math.to_raw(str(2**256), 0)


def test_to_raw_float_goes_through_str():
    assert decimal_math.to_raw(0.1, 18) == 100_000_000_000_000_000


def test_format_units():
    assert decimal_math.format_units(1_234_500, 6) == "1.2345"
    assert decimal_math.format_units(0, 18) == "0"
    assert decimal_math.format_units(10**21, 18) == "1000"
    assert decimal_math.format_units(1, 18) == "0.000000000000000001"


def test_to_raw_long_fraction_is_a_decimal_places_error():
    # 80 significant digits, more than the 78-digit context holds
    amount = "0." + "1" * 80
    with pytest.raises(InvalidAmountError) as exc_info:
        decimal_math.to_raw(amount, 18)
    assert "decimal places" in str(exc_info.value)


def test_fractional_digits_ignores_trailing_zeros():
    assert decimal_math.fractional_digits(Decimal("1.500000")) == 1
    assert decimal_math.fractional_digits(Decimal("0.000")) == 0
    assert decimal_math.fractional_digits(Decimal("1E+5")) == 0
    assert decimal_math.to_raw("2.500000000", 6) == 2_500_000


def test_plain_never_uses_exponent_form():
    assert decimal_math.plain(Decimal("1E-7")) == "0.0000001"
    assert decimal_math.plain(Decimal("2435.12000000")) == "2435.12"
    assert decimal_math.plain(Decimal("2.4E+3")) == "2400"
    assert decimal_math.plain(Decimal("0E-8")) == "0"


def test_mul_div():
    assert decimal_math.mul_div(10**30, 10**30, 10**20) == 10**40
    assert decimal_math.mul_div(7, 3, 2) == 10
    with pytest.raises(ZeroDivisionError):
        decimal_math.mul_div(1, 1, 0)
    with pytest.raises(OverflowError):
        decimal_math.mul_div(2**255, 4, 1)
    with pytest.raises(OverflowError):
        decimal_math.mul_div(2**256, 1, 1)


def test_sqrt_price_reference_1800_usdc_per_eth():
    # token0 = an 18-decimal ETH token, token1 = a 6-decimal USD token
    sqrt_price = sqrt_price_for(1800, 18, 6)
    price = decimal_math.sqrt_price_x96_to_price(sqrt_price, 18, 6)
    assert abs(price - Decimal(1800)) < Decimal("1e-9")


def test_sqrt_price_usdc_weth_pool_orientation():
    # mainnet ordering: token0 = USDC (6), token1 = WETH (18)
    sqrt_price = sqrt_price_for(1800, 6, 18, inverse=True)
    price = decimal_math.sqrt_price_x96_to_price(sqrt_price, 6, 18)
    assert abs(price - Decimal(1) / Decimal(1800)) < Decimal("1e-15")
    assert abs(decimal_math.invert_price(price) - Decimal(1800)) < Decimal("1e-6")


def test_sqrt_price_equal_decimals_unit_price():
    assert decimal_math.sqrt_price_x96_to_price(2**96, 18, 18) == Decimal(1)


def test_sqrt_price_bounds():
    with pytest.raises(ValueError):
        decimal_math.sqrt_price_x96_to_price(0, 18, 6)
    with pytest.raises(OverflowError):
        decimal_math.sqrt_price_x96_to_price(2**160, 18, 6)


def test_invert_zero_price():
    with pytest.raises(ZeroDivisionError):
        decimal_math.invert_price(Decimal(0))


def test_decimals_out_of_range():
    with pytest.raises(ValueError):
        decimal_math.to_decimal(1, 256)


def test_amount_value_object():
    amount = Amount.from_human("2.5", 6)
    assert amount.raw == 2_500_000
    assert str(amount) == "2.5"
