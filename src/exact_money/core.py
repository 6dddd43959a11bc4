"""
core.py — Money: a currency-bound, scale-aware decimal value

================================================================================
DESIGN PRINCIPLES
================================================================================

1. INTERNAL REPRESENTATION
   decimal.Decimal, rounded at construction to the money's scale.
   Never float internally. See numeric.py for the arithmetic rules.

2. SCALE
   The scale is the currency's minor unit (EUR=2, JPY=0, KWD=3) unless an
   explicit `decimals` override is set. A Money can never hold more digits
   than its own scale: every derived value is rounded again on construction.

3. TYPE SAFETY
   Operations between different currencies raise CurrencyMismatch (a
   TypeError) before any arithmetic runs.

4. IMMUTABILITY
   Frozen dataclass. Every operation returns a new instance built by
   copy-with-override (merge()). No side effects, safe to share across
   threads without locks.

5. SINGLE ROUNDING POINT
   Intermediate results are exact (or carry DIVISION_DECIMALS digits after a
   division). Rounding to the money's scale happens once, when the new
   instance is built. to_currency() converts before rounding, never after.

6. VERIFIABLE INVARIANTS
   distribute(n) and distribute_by(weights) guarantee sum(parts) == original.

================================================================================
USAGE
================================================================================

    from exact_money import Money

    budget = Money.of(2026, "EUR")
    monthly = budget.distribute(12)
    assert Money.sum(monthly) == budget

    price = Money.from_price("0.0005", "NOK")     # 10 decimals
    total = price.multiply(30).reset_decimals()   # 0.02 NOK

================================================================================
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass, field, replace
from decimal import Decimal
from functools import reduce
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from . import distribution
from .config import DEFAULT_PRICE_DECIMALS, DEFAULT_TAGS
from .currency import CurrencyLike, currency_code, resolve_scale
from .errors import CurrencyMismatch, InvalidAmount, TagAssertionError
from .numeric import (
    NumberInput,
    RoundingMode,
    absolute,
    add as add_decimals,
    compare as compare_decimals,
    divide as divide_decimals,
    division_decimals,
    multiply as multiply_decimals,
    negate,
    percent_to_multiplier,
    percent_to_rate,
    round_decimal,
    subtract as subtract_decimals,
    to_decimal,
    to_fixed,
    to_float,
)
from .parsing import normalize_number


logger = logging.getLogger(__name__)

TagValue = Union[bool, int, float, str, None]


# ==============================================================================
# MONEY CLASS
# ==============================================================================

@dataclass(frozen=True, slots=True, order=False)
class Money:
    """
    Domain Primitive for monetary amounts.

    INVARIANTS:
    1. amount is always a Decimal at exactly get_decimals() fractional digits
    2. currency is always a code string (Currency members are normalized)
    3. Operations across currencies raise CurrencyMismatch
    4. distribute(n) guarantees sum(parts) == self

    Equality compares currency and numeric amount only: scale, rounding mode
    and tags are not part of a value's identity.

    Options accepted by every constructor:
        decimals: overrides the currency's scale, here and in derived values
        rounding_mode: overrides RoundingMode.HALF_UP
        tags: merged over {"includes_tax": False, "is_tax": False}
    """
    amount: Decimal
    currency: str
    decimals: Optional[int] = None
    rounding_mode: Optional[RoundingMode] = None
    tags: Mapping[str, TagValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.decimals is not None and (
            isinstance(self.decimals, bool) or not isinstance(self.decimals, int)
        ):
            raise TypeError(
                f"decimals must be an int or None, not {type(self.decimals).__name__}"
            )
        if self.rounding_mode is not None and not isinstance(
            self.rounding_mode, RoundingMode
        ):
            raise TypeError(
                "rounding_mode must be a RoundingMode or None, "
                f"not {type(self.rounding_mode).__name__}"
            )

        code = currency_code(self.currency)
        scale = self.decimals if self.decimals is not None else resolve_scale(code)
        amount = round_decimal(to_decimal(self.amount), scale, self.rounding_mode)

        object.__setattr__(self, "currency", code)
        object.__setattr__(self, "amount", amount)
        object.__setattr__(
            self, "tags", MappingProxyType({**DEFAULT_TAGS, **(self.tags or {})})
        )

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def of(
        cls,
        amount: NumberInput,
        currency: CurrencyLike,
        *,
        decimals: Optional[int] = None,
        rounding_mode: Optional[RoundingMode] = None,
        tags: Optional[Mapping[str, TagValue]] = None,
    ) -> Money:
        """
        Create a money object from a number, a decimal string or a Decimal.

        `currency` is a 3-letter ISO 4217 code, or UNKNOWN for a precision
        of 2 decimals.

        Raises:
            InvalidAmount: the amount is not a number
            UnsupportedCurrency: the currency has no known scale and no
                `decimals` override was given
        """
        return cls(
            amount=amount,
            currency=currency,
            decimals=decimals,
            rounding_mode=rounding_mode,
            tags=tags or {},
        )

    @classmethod
    def zero(cls, currency: CurrencyLike, **options: Any) -> Money:
        """Zero in a given currency. Useful as the start value of a sum."""
        return cls.of(0, currency, **options)

    @classmethod
    def from_locale_string(
        cls,
        text: str,
        currency: CurrencyLike,
        decimal_sign: str = ".",
        **options: Any,
    ) -> Money:
        """
        Instantiate from a string formatted in a certain locale.

        Examples (decimal_sign in parentheses):
            nb-NO (","): "11 111,11 kr"  -> 11111.11
            en-GB ("."): "-£11,111.11"   -> -11111.11
            de-DE (","): "11.111,11"     -> 11111.11
        """
        return cls.of(normalize_number(text, decimal_sign), currency, **options)

    @classmethod
    def from_fractionless_amount(
        cls, amount: int, currency: CurrencyLike, **options: Any
    ) -> Money:
        """
        Instantiate from a whole number of minor units (e.g. cents).

        Money.from_fractionless_amount(1000, "NOK") -> 10.00 NOK
        Money.from_fractionless_amount(1000, "NOK", decimals=3) -> 1.000 NOK
        """
        money = cls.of(amount, currency, **options)
        return money.divide(10 ** money.get_decimals())

    @classmethod
    def from_price(
        cls, price: NumberInput, currency: CurrencyLike, **options: Any
    ) -> Money:
        """
        A price has arbitrary precision: DEFAULT_PRICE_DECIMALS (10) by default.

        Call reset_decimals() to go back to a proper monetary amount.
        """
        options.setdefault("decimals", DEFAULT_PRICE_DECIMALS)
        return cls.of(price, currency, **options)

    @classmethod
    def from_price_and_quantity(
        cls,
        price: NumberInput,
        quantity: NumberInput,
        currency: CurrencyLike,
        **options: Any,
    ) -> Money:
        """Total for a price and a quantity, rounded once at the end."""
        return (
            cls.from_price(price, currency, **options)
            .multiply(quantity)
            .reset_decimals()
        )

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------

    @classmethod
    def sum(
        cls,
        moneys: Iterable[Money],
        currency: Optional[CurrencyLike] = None,
        **options: Any,
    ) -> Money:
        """
        Sum a list of moneys.

        Scale, rounding mode and tags come from the first item. An empty list
        needs `currency` (and optionally `options`) to build the zero.
        """
        items = list(moneys)
        if not items:
            if currency is None:
                raise InvalidAmount("Currency must be set when summing an empty list")
            return cls.zero(currency, **options)

        first = items[0]
        if currency is not None and currency_code(currency) != first.currency:
            raise CurrencyMismatch(currency_code(currency), first.currency)
        return reduce(Money.add, items[1:], first)

    @classmethod
    def max(cls, moneys: Iterable[Money]) -> Money:
        items = list(moneys)
        if not items:
            raise InvalidAmount("Need at least one money for comparison")
        return reduce(lambda best, m: m if m.greater_than(best) else best, items)

    @classmethod
    def min(cls, moneys: Iterable[Money]) -> Money:
        items = list(moneys)
        if not items:
            raise InvalidAmount("Need at least one money for comparison")
        return reduce(lambda best, m: m if m.less_than(best) else best, items)

    @staticmethod
    def compare(money1: Money, money2: Money) -> int:
        """
        1 if money1 > money2, 0 if equal, -1 if money1 < money2.

        sorted(moneys, key=functools.cmp_to_key(Money.compare)) sorts ascending.
        """
        money1.assert_same_currency(money2)
        return compare_decimals(money1.amount, money2.amount)

    # -------------------------------------------------------------------------
    # Copy-with-override
    # -------------------------------------------------------------------------

    def merge(self, **changes: Any) -> Money:
        """New instance with some fields replaced, rounded again on construction."""
        return replace(self, **changes)

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def get_tags(self) -> Mapping[str, TagValue]:
        return self.tags

    def get_tag(self, name: str, default: TagValue = None) -> TagValue:
        value = self.tags.get(name)
        return default if value is None else value

    def set_tag(self, name: str, value: TagValue) -> Money:
        return self.merge(tags={**self.tags, name: value})

    def assert_tag(
        self,
        name: str,
        value: TagValue,
        cmp: Callable[[TagValue, TagValue], bool] = operator.eq,
    ) -> Money:
        """
        Check a tag before using the amount for a given purpose.

            gross.assert_tag("includes_tax", True)
        """
        actual = self.get_tag(name)
        if not cmp(actual, value):
            raise TagAssertionError(
                f"Tag assertion failed. {name} should be {value!r} but was {actual!r}"
            )
        return self

    # -------------------------------------------------------------------------
    # Currency guard and scale
    # -------------------------------------------------------------------------

    def assert_same_currency(self, other: Money) -> Money:
        if not isinstance(other, Money):
            raise TypeError(
                f"Operation not allowed between Money and {type(other).__name__}"
            )
        if other.currency != self.currency:
            raise CurrencyMismatch(self.currency, other.currency)
        return self

    def get_decimals(self) -> int:
        """The scale in use: the override, or the currency's minor unit."""
        return self.decimals if self.decimals is not None else resolve_scale(self.currency)

    def set_decimals(self, decimals: int) -> Money:
        """Override the currency's scale. Useful while working with a price."""
        return self.merge(decimals=decimals)

    def reset_decimals(self) -> Money:
        """Back to the currency's scale, e.g. to turn a price into an amount."""
        return self.merge(decimals=None)

    def to_currency(
        self,
        currency: CurrencyLike,
        rate: NumberInput = 1,
        unit: NumberInput = 1,
    ) -> Money:
        """
        Convert using `rate` units of `currency` per `unit` units of self.

        The product is computed in the decimal engine and rounded only once,
        at the destination's scale. Rounding at the source scale first would
        compound the error.

            Money.of("2090.5", "EUR").to_currency("NOK", "8.61")  -> 17999.21 NOK
        """
        amount = multiply_decimals(self.amount, rate)
        if compare_decimals(unit, 1) != 0:
            target = self.decimals
            if target is None:
                target = resolve_scale(currency)
            amount = divide_decimals(amount, unit, division_decimals(target))
        logger.debug(
            "Converting %s %s to %s at %s per %s",
            self.to_string(), self.currency, currency_code(currency), rate, unit,
        )
        return self.merge(amount=amount, currency=currency)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def add(self, other: Money) -> Money:
        self.assert_same_currency(other)
        return self.merge(amount=add_decimals(self.amount, other.amount))

    def subtract(self, other: Money) -> Money:
        self.assert_same_currency(other)
        return self.merge(amount=subtract_decimals(self.amount, other.amount))

    def multiply(self, factor: NumberInput) -> Money:
        """Exact product, then rounded to this money's scale."""
        return self.merge(amount=multiply_decimals(self.amount, factor))

    def divide(self, divisor: NumberInput) -> Money:
        """
        Division cannot be exact in all cases: 10 NOK / 3 = 3.33 NOK.
        Use distribute() or distribute_by() when the parts must add up.

        The quotient is computed with DIVISION_DECIMALS (20) fractional digits,
        or two more than this money's scale when that is finer, before
        rounding back to this money's scale.
        """
        quotient = divide_decimals(
            self.amount, divisor, division_decimals(self.get_decimals())
        )
        return self.merge(amount=quotient)

    def round(
        self, decimals: int, rounding_mode: Optional[RoundingMode] = None
    ) -> Money:
        """Round to fewer digits while keeping this money's scale."""
        amount = round_decimal(self.amount, decimals, rounding_mode or self.rounding_mode)
        return self.merge(amount=amount)

    def abs(self) -> Money:
        return self.merge(amount=absolute(self.amount))

    def negate(self) -> Money:
        return self.merge(amount=negate(self.amount))

    def __add__(self, other: Money) -> Money:
        return self.add(other)

    def __sub__(self, other: Money) -> Money:
        return self.subtract(other)

    def __neg__(self) -> Money:
        return self.negate()

    def __abs__(self) -> Money:
        return self.abs()

    def __mul__(self, factor: NumberInput) -> Money:
        if isinstance(factor, Money):
            raise TypeError("Money can only be multiplied by a number, not by Money")
        return self.multiply(factor)

    def __rmul__(self, factor: NumberInput) -> Money:
        return self.__mul__(factor)

    def __truediv__(self, divisor: NumberInput) -> Money:
        if isinstance(divisor, Money):
            raise TypeError("Money can only be divided by a number, not by Money")
        return self.divide(divisor)

    # -------------------------------------------------------------------------
    # Distribution
    # -------------------------------------------------------------------------

    def distribute(self, n_parts: int) -> list[Money]:
        """
        Divide into n parts whose sum is exactly self.

        Money.of(10, "NOK").distribute(3) -> [3.34, 3.33, 3.33]
        """
        return distribution.distribute(self, n_parts)

    def distribute_by(self, weights: Iterable[NumberInput]) -> list[Money]:
        """
        Divide into parts defined by weights, with an exact sum.

        Each weight must be >= 0 and the total must be > 0.
        Money.of(10, "NOK").distribute_by([1, 1, 1]) -> [3.34, 3.33, 3.33]
        """
        return distribution.distribute_by(self, list(weights))

    # -------------------------------------------------------------------------
    # Tax
    # -------------------------------------------------------------------------

    def add_vat(self, vat_percentage: NumberInput) -> Money:
        """10 NOK + 25% -> 12.50 NOK, tagged includes_tax."""
        return self.multiply(percent_to_multiplier(vat_percentage)).set_tag(
            "includes_tax", True
        )

    def remove_vat(self, vat_percentage: NumberInput) -> Money:
        """12.50 NOK - 25% -> 10.00 NOK, tagged as not including tax."""
        return self.divide(percent_to_multiplier(vat_percentage)).set_tag(
            "includes_tax", False
        )

    def get_vat(
        self, vat_percentage: NumberInput, includes_vat: Optional[bool] = None
    ) -> Money:
        """
        The tax part of this amount, tagged is_tax.

        When `includes_vat` is None the includes_tax tag decides whether the
        tax is extracted from a gross amount or computed on a net one.
        """
        if includes_vat is None:
            includes_vat = bool(self.get_tag("includes_tax", False))
        net = self.remove_vat(vat_percentage) if includes_vat else self
        return net.multiply(percent_to_rate(vat_percentage)).set_tag("is_tax", True)

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def equals(self, other: Money) -> bool:
        return self.currency == other.currency and self.amount == other.amount

    def greater_than(self, other: Money) -> bool:
        return Money.compare(self, other) > 0

    def greater_than_or_equal(self, other: Money) -> bool:
        return Money.compare(self, other) >= 0

    def less_than(self, other: Money) -> bool:
        return Money.compare(self, other) < 0

    def less_than_or_equal(self, other: Money) -> bool:
        return Money.compare(self, other) <= 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Money):
            return self.equals(other)
        return NotImplemented

    def __lt__(self, other: Money) -> bool:
        return self.less_than(other)

    def __le__(self, other: Money) -> bool:
        return self.less_than_or_equal(other)

    def __gt__(self, other: Money) -> bool:
        return self.greater_than(other)

    def __ge__(self, other: Money) -> bool:
        return self.greater_than_or_equal(other)

    def __hash__(self) -> int:
        return hash((self.amount, self.currency))

    def is_zero(self) -> bool:
        return self.amount.is_zero()

    def is_positive(self) -> bool:
        """Positive and not 0."""
        return self.amount > 0

    def is_negative(self) -> bool:
        """Negative and not 0."""
        return self.amount < 0

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def to_string(self) -> str:
        """Fixed-point string at the current scale: "10.00", "-2", "1.500"."""
        return to_fixed(self.amount, self.get_decimals())

    def to_float(self) -> float:
        """
        Convert to a float, refusing to lose precision.

        Raises:
            PrecisionLoss: the float would print back as a different amount,
                e.g. "1234567891234567.25" NOK
        """
        return to_float(self.amount, self.get_decimals())

    def to_fractionless_amount(self) -> int:
        """Whole number of minor units at the current scale: 10.00 NOK -> 1000."""
        return int(self.multiply(10 ** self.get_decimals()).round(0).amount)

    def __float__(self) -> float:
        return self.to_float()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Money('{self.to_string()}', '{self.currency}')"
