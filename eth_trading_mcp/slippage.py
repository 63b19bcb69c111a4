"""Slippage tolerance handling."""

from decimal import Decimal, InvalidOperation
from typing import Union

from .decimal_math import mul_div
from .errors import InvalidSlippageError

DEFAULT_SLIPPAGE_TOLERANCE = Decimal("0.005")  # 0.5%


class SlippageCalculator:
    """Minimum-output math for a slippage tolerance given as a fraction in [0, 1)."""

    @staticmethod
    def parse_tolerance(value: Union[str, int, float, Decimal]) -> Decimal:
        """Validate a tolerance and return it as an exact Decimal.

        Floats are converted through ``str()``, so ``0.005`` stays ``0.005``.
        """
        if isinstance(value, bool) or value is None:
            raise InvalidSlippageError(f"Invalid slippage tolerance: {value!r}")
        try:
            tolerance = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidSlippageError(f"Invalid slippage tolerance: {value!r}")

        if not tolerance.is_finite() or tolerance < 0 or tolerance >= 1:
            raise InvalidSlippageError(
                f"Slippage tolerance must be a fraction in [0, 1) (e.g. 0.005 for 0.5%), got {value}"
            )
        return tolerance

    @staticmethod
    def minimum_output(estimated_output_raw: int, tolerance: Union[str, int, float, Decimal]) -> int:
        """floor(estimated_output_raw * (1 - tolerance)), computed on integers.

        Raises:
            OverflowError: if the estimate does not fit in a uint256.
        """
        if estimated_output_raw < 0:
            raise ValueError(f"Estimated output must not be negative: {estimated_output_raw}")
        tolerance = SlippageCalculator.parse_tolerance(tolerance)
        numerator, denominator = tolerance.as_integer_ratio()
        return mul_div(estimated_output_raw, denominator - numerator, denominator)
