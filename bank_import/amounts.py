"""Amount parsing and display formatting.

Bank exports disagree on how money is written: ``1,250.00``, ``£45.99``,
``-45.99``, ``45.99-``, ``(45.99)`` and ``-(£1,234.56)`` all occur in the wild.
Parsing is fixed-point (:class:`~decimal.Decimal`) throughout; floats are never
involved.

Rules
-----
- Leading ``+``/``-``, a trailing ``-``, a currency symbol and surrounding
  parentheses may appear in any order; parentheses and ``-`` both mean
  negative.
- Values too large to hold at cent precision are rejected.
- Thousands separators (``,`` by default) and inner spaces are removed.
- Empty or whitespace-only input is an error, not zero.
- The result keeps at least two decimal places (``"1250"`` -> ``1250.00``).
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import ParseError

_CURRENCY_SYMBOLS = ("£", "$", "€")
_NUMBER_RE = re.compile(r"^(\d+(\.\d*)?|\.\d+)$")
_CENT = Decimal("0.01")


def parse_amount(raw: str | None, *, thousands_separator: str = ",") -> Decimal:
    """Parse a cell string into a signed :class:`Decimal`.

    Raises :class:`~bank_import.errors.ParseError` (kind ``NOT_NUMERIC``) when
    the value is missing, blank, or not a plain decimal number once sign,
    currency and grouping markers are removed.
    """

    if raw is None:
        raise ParseError(raw)
    s = raw.strip()
    if not s:
        raise ParseError(raw)

    negative = False
    # Strip signs, currency symbol and surrounding parentheses until stable so
    # any ordering of these markers is accepted.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if len(s) >= 2 and s.endswith("-"):
            negative = True
            s = s[:-1].rstrip()
            changed = True
        if s.startswith(_CURRENCY_SYMBOLS):
            s = s[1:].lstrip()
            changed = True
        if len(s) >= 2 and s.startswith("(") and s.endswith(")"):
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(thousands_separator, "").replace(" ", "")
    if not _NUMBER_RE.fullmatch(s):
        raise ParseError(raw)

    try:
        d = Decimal(s)
        if d.as_tuple().exponent > -2:
            d = d.quantize(_CENT)
    except InvalidOperation as exc:
        # Too many digits to hold at cent precision.
        raise ParseError(raw) from exc
    if d == 0:
        return abs(d)
    return -d if negative else d


def format_amount(value: Decimal) -> str:
    """Format the absolute value with two decimals and comma grouping.

    The sign is deliberately dropped; callers convey direction separately
    (income vs expense columns, ``+``/``-`` prefixes).
    """

    q = abs(value).quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{q:,.2f}"


def format_signed(value: Decimal) -> str:
    """Format with an explicit ``+``/``-`` prefix, e.g. ``"-45.99"``."""

    prefix = "-" if value < 0 else "+"
    return f"{prefix}{format_amount(value)}"


__all__ = ["format_amount", "format_signed", "parse_amount"]
