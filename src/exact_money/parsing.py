"""
parsing.py — Locale-formatted number strings

Only normalization lives here: the caller knows the locale and passes its
decimal separator ("," for de-DE or nb-NO, "." for en-US). Grouping
separators, currency symbols and words are dropped.

Locales that write digits outside 0-9 (e.g. Arabic-Indic) are not supported.
"""

from __future__ import annotations

import re

from .errors import InvalidAmount


def normalize_number(text: str, decimal_sign: str = ".") -> str:
    """
    Reduce a locale-formatted number to a plain decimal string.

    Everything except ASCII digits, "-" and `decimal_sign` is removed, then
    the first `decimal_sign` becomes ".".

        >>> normalize_number("-$11,111.11")
        '-11111.11'
        >>> normalize_number("11 111,11 kr", decimal_sign=",")
        '11111.11'
    """
    if len(decimal_sign) != 1:
        raise InvalidAmount(f"Decimal sign must be a single character, got {decimal_sign!r}")

    cleaned = re.sub(rf"[^-0-9{re.escape(decimal_sign)}]", "", text)
    return cleaned.replace(decimal_sign, ".", 1)
