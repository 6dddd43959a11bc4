#!/usr/bin/env python3
"""
budget_split.py — Splitting a yearly budget into months

================================================================================
THE BUG
================================================================================

    >>> 2026.0 / 12 * 12
    2025.9999999999998

Floats cannot hold 168.8333... and every later step inherits the error.
Rounding each month to cents does not help either: 12 x 168.83 is 2025.96,
and four cents are gone.

================================================================================
THE FIX
================================================================================

    from exact_money import Money

    budget = Money.of(2026, "EUR")
    monthly = budget.distribute(12)

    assert Money.sum(monthly) == budget

The parts are rounded to cents, then the leftover cents are handed out one
at a time, so nothing is lost and nothing is invented.

Run after `pip install -e .`:

    python examples/budget_split.py
"""

from exact_money import CurrencyMismatch, Money

MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def demonstrate_bug():
    """Show the floating-point drift."""
    print("=" * 60)
    print("THE BUG")
    print("=" * 60)
    print()
    result = 2026.0 / 12 * 12
    print(">>> 2026.0 / 12 * 12")
    print(result)
    print()
    rounded = round(2026.0 / 12, 2)
    print(f"Rounded month: {rounded}")
    print(f"12 x rounded:  {rounded * 12:.2f}")
    print()


def demonstrate_distribution():
    """Split the budget exactly, evenly and by working days."""
    print("=" * 60)
    print("EXACT DISTRIBUTION")
    print("=" * 60)
    print()

    budget = Money.of(2026, "EUR")
    print(f"Budget: {budget!r}")
    print()

    monthly = budget.distribute(12)
    for name, part in zip(MONTHS, monthly):
        print(f"  {name}: {part}")
    print()
    print(f"Sum of parts: {Money.sum(monthly)}")
    print(f"Equal?        {Money.sum(monthly) == budget}")
    print()

    working_days = [21, 20, 21, 22, 20, 22, 23, 21, 22, 22, 21, 0]
    print("Weighted by working days (December closed):")
    by_days = budget.distribute_by(working_days)
    for name, days, part in zip(MONTHS, working_days, by_days):
        print(f"  {name} ({days:2d} days): {part}")
    print()
    print(f"Sum of parts: {Money.sum(by_days)}")
    print()


def demonstrate_currency_guard():
    """Show that mixing currencies fails instead of guessing."""
    print("=" * 60)
    print("CURRENCY GUARD")
    print("=" * 60)
    print()

    eur = Money.of(100, "EUR")
    nok = Money.of(100, "NOK")

    print(">>> eur + nok")
    try:
        eur + nok
    except CurrencyMismatch as e:
        print(f"CurrencyMismatch: {e}")
    print()

    rate = "11.7215"
    converted = eur.to_currency("NOK", rate)
    print(f">>> eur.to_currency('NOK', {rate!r})")
    print(repr(converted))
    print()


def demonstrate_vat():
    """Show tax helpers and tags."""
    print("=" * 60)
    print("VAT")
    print("=" * 60)
    print()

    net = Money.of(100, "EUR")
    gross = net.add_vat(25)
    vat = gross.get_vat(25)

    print(f"Net:   {net}")
    print(f"Gross: {gross}  tags={dict(gross.get_tags())}")
    print(f"VAT:   {vat}  tags={dict(vat.get_tags())}")
    print(f"Net + VAT == Gross: {net + vat == gross}")
    print()


def main():
    demonstrate_bug()
    demonstrate_distribution()
    demonstrate_currency_guard()
    demonstrate_vat()


if __name__ == "__main__":
    main()
