"""Date pattern handling for statement rows.

Users pick date formats the way bank documentation writes them
(``dd/MM/yyyy``, ``d MMM yyyy``); strptime directives (``%d/%m/%Y``) are
accepted as well. Patterns containing ``%`` are passed to
:func:`datetime.strptime` unchanged.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from functools import lru_cache

# Choices offered when the user has to pick a format by hand.
COMMON_DATE_FORMATS: tuple[str, ...] = (
    "dd/MM/yyyy",
    "MM/dd/yyyy",
    "yyyy-MM-dd",
    "d MMM yyyy",
    "dd-MM-yyyy",
)

_TOKENS: dict[str, str] = {
    "yyyy": "%Y",
    "yy": "%y",
    "MMMM": "%B",
    "MMM": "%b",
    "MM": "%m",
    "M": "%m",
    "dd": "%d",
    "d": "%d",
    "HH": "%H",
    "H": "%H",
    "mm": "%M",
    "ss": "%S",
    "EEEE": "%A",
    "EEE": "%a",
}

# Longest tokens first so "MMMM" wins over "MM"; quoted text is literal.
_TOKEN_RE = re.compile(
    "'[^']*'|" + "|".join(sorted((re.escape(t) for t in _TOKENS), key=len, reverse=True))
)


@lru_cache(maxsize=64)
def to_strptime(pattern: str) -> str:
    """Translate a ``dd/MM/yyyy``-style pattern into a strptime format."""

    if "%" in pattern:
        return pattern

    def _sub(m: re.Match[str]) -> str:
        tok = m.group(0)
        if tok.startswith("'"):
            return tok[1:-1] or "'"
        return _TOKENS[tok]

    return _TOKEN_RE.sub(_sub, pattern)


def parse_date(value: str | None, pattern: str) -> date:
    """Parse ``value`` with ``pattern``; raise ``ValueError`` when it does not fit."""

    if value is None or not value.strip():
        raise ValueError("date is empty")
    if not pattern or not pattern.strip():
        raise ValueError("date format is empty")
    return datetime.strptime(value.strip(), to_strptime(pattern.strip())).date()


__all__ = ["COMMON_DATE_FORMATS", "parse_date", "to_strptime"]
