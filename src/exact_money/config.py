"""
config.py — Library constants

Nothing here is configurable at runtime: these values are part of the
numeric contract of the package.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping


# Fractional digits kept by divide() before the caller rounds to a money
# scale. Repeating quotients (10 / 3) are cut here, so this bounds the
# accuracy of every division-based result.
DIVISION_DECIMALS: Final[int] = 20

# Scale used by Money.from_price() until reset_decimals() is called.
DEFAULT_PRICE_DECIMALS: Final[int] = 10

# Sentinel currency code for "no known currency".
UNKNOWN_CURRENCY: Final[str] = "UNKNOWN"
UNKNOWN_CURRENCY_DECIMALS: Final[int] = 2

DEFAULT_TAGS: Final[Mapping[str, object]] = MappingProxyType({
    "includes_tax": False,
    "is_tax": False,
})
