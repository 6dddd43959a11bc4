"""
errors.py — Exceptions raised by exact_money

Every error also derives from the matching builtin (TypeError for mixed
currencies, ValueError for bad input), so callers catching builtins keep
working.
"""

from __future__ import annotations


class MoneyError(Exception):
    """Base class for all exact_money errors."""


class UnsupportedCurrency(MoneyError, KeyError):
    """The currency code has no known scale."""

    def __init__(self, currency: str):
        super().__init__(currency)
        self.currency = currency

    def __str__(self) -> str:
        return f"Currency {self.currency!r} is not supported"


class CurrencyMismatch(MoneyError, TypeError):
    """A binary operation was attempted across two currencies."""

    def __init__(self, left: str, right: str):
        super().__init__(f"Currencies must be the same: {left} vs {right}")
        self.left = left
        self.right = right


class InvalidAmount(MoneyError, ValueError):
    """Unparseable numeric input or an invalid part count."""


class InvalidWeights(MoneyError, ValueError):
    """Distribution weights are negative or do not sum to a positive total."""


class PrecisionLoss(MoneyError, ArithmeticError):
    """Conversion to float would not round-trip exactly."""


class DistributionError(MoneyError, RuntimeError):
    """
    Reconciliation did not exhaust the rest within one pass.

    Never caused by user input: it means the rounding or subtraction
    underneath produced a residue larger than one unit per part.
    """


class TagAssertionError(MoneyError, AssertionError):
    """Money.assert_tag() failed."""
