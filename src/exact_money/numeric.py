"""
numeric.py — Decimal value engine

================================================================================
DESIGN PRINCIPLES
================================================================================

1. REPRESENTATION
   decimal.Decimal: sign, unbounded coefficient, power-of-ten exponent.
   Never float internally. Floats are accepted at the boundary only, and are
   read through their shortest round-trip string (8.165 stays 8.165).

2. EXACTNESS
   add, subtract and multiply run in a private context with maximum
   precision and the Inexact signal trapped: if a digit were ever dropped the
   operation raises instead of rounding silently.

3. EXPLICIT ROUNDING
   Only round_decimal() and divide() discard digits. divide() keeps
   DIVISION_DECIMALS fractional digits, or division_decimals(scale) when the
   caller works at a finer scale; the caller then rounds once to its own
   scale.

4. CANONICAL ZERO
   Every result is sign-free when zero. Decimal("-0.00") never leaks out.

5. NO GLOBAL STATE
   The thread-local decimal context is never read or modified. Callers may
   customize getcontext() freely without changing results here.

================================================================================
"""

from __future__ import annotations

import math
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    ROUND_CEILING,
    ROUND_DOWN,
    ROUND_FLOOR,
    ROUND_HALF_DOWN,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    ROUND_UP,
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
)
from enum import Enum
from functools import lru_cache, reduce
from typing import Iterable, Optional, Union

from .config import DIVISION_DECIMALS
from .errors import InvalidAmount, PrecisionLoss


NumberInput = Union[Decimal, int, float, str]


# ==============================================================================
# ROUNDING STRATEGIES
# ==============================================================================

class RoundingMode(Enum):
    """
    Rounding strategies, backed by the decimal module's constants.

    - HALF_UP: ties away from zero (1.5 -> 2, -1.5 -> -2). Default.
    - HALF_EVEN: banker's rounding, ties to the even neighbour
    - HALF_DOWN: ties toward zero
    - UP: always away from zero
    - DOWN: always toward zero (truncation)
    - FLOOR: toward negative infinity
    - CEILING: toward positive infinity
    """
    HALF_UP = ROUND_HALF_UP
    HALF_EVEN = ROUND_HALF_EVEN
    HALF_DOWN = ROUND_HALF_DOWN
    UP = ROUND_UP
    DOWN = ROUND_DOWN
    FLOOR = ROUND_FLOOR
    CEILING = ROUND_CEILING


DEFAULT_ROUNDING = RoundingMode.HALF_UP


# ==============================================================================
# CONTEXTS
# ==============================================================================

_EXACT = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    rounding=ROUND_HALF_UP,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact],
)

# quantize() signals Inexact whenever it drops digits, so rounding needs a
# context that does not trap it.
_ROUNDING = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    rounding=ROUND_HALF_UP,
    traps=[InvalidOperation, Overflow],
)

_ZERO = Decimal(0)


def _canonical(value: Decimal) -> Decimal:
    return value.copy_abs() if value.is_zero() else value


@lru_cache(maxsize=64)
def _quantum(scale: int) -> Decimal:
    """1 at the given scale: 1, 0.1, 0.01, ..."""
    return Decimal((0, (1,), -scale))


# ==============================================================================
# CONVERSION
# ==============================================================================

def to_decimal(value: NumberInput) -> Decimal:
    """
    Convert a native number or string to Decimal without losing digits.

    Floats go through repr(), which yields the shortest string that maps back
    to the same double: 0.1 becomes Decimal("0.1"), not the binary expansion
    0.1000000000000000055511151231257827...

    Raises:
        InvalidAmount: non-numeric string, NaN, infinity, bool or any other type
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise InvalidAmount(f"Cannot use a bool as an amount: {value!r}")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise InvalidAmount(f"Not a number: {value!r}") from exc
    else:
        raise InvalidAmount(
            f"Amount must be Decimal, int, float or str, not {type(value).__name__}"
        )

    if not result.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")
    return _canonical(result)


def to_fixed(value: NumberInput, scale: int) -> str:
    """Fixed-point string with exactly `scale` fractional digits, no exponent."""
    return format(round_decimal(value, scale), "f")


def to_float(value: NumberInput, scale: Optional[int] = None) -> float:
    """
    Validated conversion to float.

    The float is accepted only if it prints back to the same fixed-point
    string at `scale` (default: the value's own number of fractional digits).

    Raises:
        PrecisionLoss: the double nearest to the value is a different number
    """
    value = to_decimal(value)
    if scale is None:
        scale = max(0, -value.as_tuple().exponent)

    text = to_fixed(value, scale)
    number = float(text)
    if not math.isfinite(number) or to_fixed(to_decimal(number), scale) != text:
        raise PrecisionLoss(f"Converting {text} to float was imprecise")
    return number


# ==============================================================================
# ROUNDING
# ==============================================================================

def round_decimal(
    value: NumberInput,
    scale: int,
    mode: Optional[RoundingMode] = None,
) -> Decimal:
    """
    Round to `scale` fractional digits.

    Idempotent: rounding a value already at `scale` returns an equal value.
    The result always carries exactly `scale` fractional digits, so
    Decimal("1.5") at scale 0 with HALF_UP is Decimal("2") and Decimal("3")
    at scale 2 is Decimal("3.00").
    """
    if scale < 0:
        raise InvalidAmount(f"Scale must be >= 0, got {scale}")
    mode = mode or DEFAULT_ROUNDING
    result = to_decimal(value).quantize(
        _quantum(scale), rounding=mode.value, context=_ROUNDING
    )
    return _canonical(result)


# ==============================================================================
# ARITHMETIC
# ==============================================================================

def add(a: NumberInput, b: NumberInput) -> Decimal:
    return _canonical(_EXACT.add(to_decimal(a), to_decimal(b)))


def subtract(a: NumberInput, b: NumberInput) -> Decimal:
    return _canonical(_EXACT.subtract(to_decimal(a), to_decimal(b)))


def multiply(value: NumberInput, factor: NumberInput) -> Decimal:
    return _canonical(_EXACT.multiply(to_decimal(value), to_decimal(factor)))


def divide(
    dividend: NumberInput,
    divisor: NumberInput,
    decimals: int = DIVISION_DECIMALS,
) -> Decimal:
    """
    Quotient rounded HALF_UP to `decimals` fractional digits.

    Division is the one arithmetic operation that cannot be exact (10 / 3).
    The quotient is first truncated with a couple of guard digits beyond
    `decimals`, then rounded once; truncation followed by HALF_UP gives the
    same result as rounding the exact quotient directly.

    `decimals` defaults to DIVISION_DECIMALS. Callers rounding the quotient
    to a finer scale afterwards pass a larger working scale.

    Raises:
        InvalidAmount: divisor is zero
    """
    a = to_decimal(dividend)
    b = to_decimal(divisor)
    if b.is_zero():
        raise InvalidAmount(f"Cannot divide {a} by zero")

    # Integer digits of the quotient are at most adjusted(a) - adjusted(b) + 1.
    integer_digits = max(0, a.adjusted() - b.adjusted() + 1)
    context = Context(
        prec=integer_digits + decimals + 2,
        Emax=MAX_EMAX,
        Emin=MIN_EMIN,
        rounding=ROUND_DOWN,
        traps=[InvalidOperation, DivisionByZero, Overflow],
    )
    quotient = context.divide(a, b)
    return round_decimal(quotient, decimals, RoundingMode.HALF_UP)


def division_decimals(scale: int) -> int:
    """Working scale for a quotient that is rounded to `scale` afterwards."""
    return max(DIVISION_DECIMALS, scale + 2)


def absolute(value: NumberInput) -> Decimal:
    return to_decimal(value).copy_abs()


def negate(value: NumberInput) -> Decimal:
    return _canonical(to_decimal(value).copy_negate())


# ==============================================================================
# COMPARISON
# ==============================================================================

def compare(a: NumberInput, b: NumberInput) -> int:
    """-1, 0 or 1, usable with functools.cmp_to_key."""
    return int(to_decimal(a).compare(to_decimal(b)))


def is_zero(value: NumberInput) -> bool:
    return to_decimal(value).is_zero()


def is_positive(value: NumberInput) -> bool:
    """Positive and not zero."""
    return to_decimal(value) > _ZERO


def is_negative(value: NumberInput) -> bool:
    """Negative and not zero."""
    return to_decimal(value) < _ZERO


# ==============================================================================
# HELPERS
# ==============================================================================

def percent_to_multiplier(percent: NumberInput) -> Decimal:
    """25 -> 1.25 (the factor that adds 25% to an amount)."""
    return _EXACT.scaleb(add(percent, 100), -2)


def percent_to_rate(percent: NumberInput) -> Decimal:
    """25 -> 0.25"""
    return _EXACT.scaleb(to_decimal(percent), -2)


def sum_decimals(values: Iterable[NumberInput]) -> Decimal:
    """Exact sum. An empty iterable sums to 0."""
    return reduce(add, values, _ZERO)
