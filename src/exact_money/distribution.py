"""
distribution.py — Splitting Money into parts that sum exactly to the whole

================================================================================
ALGORITHM
================================================================================

    total  = sum(weights)                      (must be > 0, weights >= 0)
    p_i    = round(amount * w_i / total, scale)
    rest   = amount - sum(p_i)                 (exact)
    unit   = +/- 1 / 10**scale                 (sign of rest)

    Walk the parts in index order, skipping zero weights, moving one unit
    from rest to each part until rest is zero.

WHY ONE PASS IS ENOUGH

    Every p_i is within one unit of its exact share, so |rest| < N * unit
    where N is the number of non-zero weights (a zero weight contributes an
    exact 0). rest is a whole number of units, because amount and every p_i
    carry the same scale. Moving one unit per weighted part therefore
    exhausts rest before the walk wraps around.

    If rest is not exhausted after one pass, rounding or subtraction is
    broken. That is raised as DistributionError instead of looping again.

================================================================================
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Sequence

from .errors import DistributionError, InvalidAmount, InvalidWeights
from .numeric import (
    NumberInput,
    add,
    divide,
    division_decimals,
    is_negative,
    is_positive,
    is_zero,
    multiply,
    subtract,
    sum_decimals,
    to_decimal,
)

if TYPE_CHECKING:
    from .core import Money


logger = logging.getLogger(__name__)


def _smallest_unit(scale: int, negative: bool) -> Decimal:
    return Decimal((1 if negative else 0, (1,), -scale))


def distribute_by(money: Money, weights: Sequence[NumberInput]) -> list[Money]:
    """
    Split `money` proportionally to `weights`.

    INVARIANTS:
    - sum(parts) == money, exactly
    - len(parts) == len(weights)
    - a zero weight yields an exact zero part and never receives a unit
    - parts keep the scale, rounding mode and tags of `money`

    Raises:
        InvalidWeights: empty list, a negative weight, or total weight <= 0
        InvalidAmount: a weight that is not a number
    """
    parsed = [to_decimal(w) for w in weights]
    if not parsed:
        raise InvalidWeights("At least one weight is required")
    if any(is_negative(w) for w in parsed):
        raise InvalidWeights("Cannot distribute by negative weights")

    total_weight = sum_decimals(parsed)
    if not is_positive(total_weight):
        raise InvalidWeights("Total weight must be greater than 0")

    # Shares carry guard digits beyond the scale; Money.merge() rounds them
    # once to the amount's own scale and mode.
    working = division_decimals(money.get_decimals())
    amounts = [
        money.merge(
            amount=divide(multiply(money.amount, w), total_weight, working)
        ).amount
        for w in parsed
    ]
    rest = subtract(money.amount, sum_decimals(amounts))

    if not is_zero(rest):
        eligible = [i for i, w in enumerate(parsed) if not is_zero(w)]
        unit = _smallest_unit(money.get_decimals(), is_negative(rest))
        logger.debug(
            "Reconciling rest %s over %d weighted parts in steps of %s",
            rest, len(eligible), unit,
        )

        for index in eligible:
            if is_zero(rest):
                break
            amounts[index] = add(amounts[index], unit)
            rest = subtract(rest, unit)

        if not is_zero(rest):
            raise DistributionError(
                f"Rest {rest} left after one pass over {len(eligible)} parts "
                f"distributing {money!r}"
            )

    return [money.merge(amount=a) for a in amounts]


def distribute(money: Money, n_parts: NumberInput) -> list[Money]:
    """
    Split `money` into `n_parts` equal shares.

    Any rest goes one unit at a time to the first parts:
    Money.of(10, "NOK").distribute(3) -> [3.34, 3.33, 3.33]

    Raises:
        InvalidAmount: n_parts is not a positive whole number
    """
    count = to_decimal(n_parts)
    if count != count.to_integral_value() or not is_positive(count):
        raise InvalidAmount(
            f"Number of parts must be a positive whole number, got {n_parts!r}"
        )
    return distribute_by(money, [1] * int(count))
