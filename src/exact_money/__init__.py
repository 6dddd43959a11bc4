"""
exact_money — Currency-aware decimal money with exact distribution

An immutable money primitive on top of decimal.Decimal: no binary floating
point in the arithmetic, one explicit rounding point per operation, and a
distribution algorithm whose parts always add up to the original amount.

================================================================================
QUICK START
================================================================================

Basic usage:

    from exact_money import Money

    # 0.1 + 0.2 is 0.30, not 0.30000000000000004
    total = Money.of(0.1, "NOK").add(Money.of(0.2, "NOK"))
    str(total)  # "0.30"

    # Distribute (sum ALWAYS equals original)
    parts = Money.of(1, "NOK").distribute(3)        # 0.34, 0.33, 0.33
    Money.sum(parts) == Money.of(1, "NOK")          # True

    # By weights, zero weights get exactly zero
    Money.of(-1, "NOK").distribute_by([1, 1, 0])    # -0.50, -0.50, 0.00

    # Prices carry 10 decimals until reset
    Money.from_price_and_quantity("0.0005", 30, "NOK")  # 0.02 NOK

    # Currency conversion rounds once, in the destination currency
    Money.of("2090.5", "EUR").to_currency("NOK", "8.61")  # 17999.21 NOK

    # Tax helpers
    Money.of(10, "NOK").add_vat(25)                 # 12.50, includes_tax=True

================================================================================
"""

import logging

from .config import (
    DEFAULT_PRICE_DECIMALS,
    DIVISION_DECIMALS,
    UNKNOWN_CURRENCY,
)
from .core import Money
from .currency import Currency, resolve_scale
from .errors import (
    CurrencyMismatch,
    DistributionError,
    InvalidAmount,
    InvalidWeights,
    MoneyError,
    PrecisionLoss,
    TagAssertionError,
    UnsupportedCurrency,
)
from .numeric import RoundingMode

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    # Core
    "Money",
    "Currency",
    "RoundingMode",
    "resolve_scale",
    # Constants
    "DEFAULT_PRICE_DECIMALS",
    "DIVISION_DECIMALS",
    "UNKNOWN_CURRENCY",
    # Errors
    "MoneyError",
    "UnsupportedCurrency",
    "CurrencyMismatch",
    "InvalidAmount",
    "InvalidWeights",
    "PrecisionLoss",
    "DistributionError",
    "TagAssertionError",
]
