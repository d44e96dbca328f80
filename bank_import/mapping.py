"""Generic column auto-detection for exports from unrecognised banks.

Used when :func:`bank_import.formats.detect_bank_format` returns ``UNKNOWN``.
Each role has a short keyword list; headers are scanned in file order and the
first header containing any keyword (case-insensitive) claims the role. The
date format is never guessed, so an auto-detected mapping is incomplete until
the caller supplies one.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType

from .formats import normalize_header
from .logging_setup import get_logger
from .models import ColumnMapping, ColumnRole

_logger = get_logger("bank_import.mapping")

ROLE_KEYWORDS: Mapping[ColumnRole, tuple[str, ...]] = MappingProxyType(
    {
        ColumnRole.DATE: ("date",),
        ColumnRole.DESCRIPTION: ("description", "desc", "narrative"),
        ColumnRole.AMOUNT: ("amount", "value"),
    }
)


def find_column(headers: Sequence[str], keywords: Sequence[str]) -> str | None:
    """First header (in file order) that contains any of ``keywords``."""

    for header in headers:
        norm = normalize_header(header)
        if not norm:
            continue
        if any(kw in norm for kw in keywords):
            return header.strip()
    return None


def auto_detect_columns(
    headers: Sequence[str], mapping: ColumnMapping | None = None
) -> ColumnMapping:
    """Fill the date, description and amount roles from header keywords.

    Roles already bound in ``mapping`` are left alone. A header already
    claimed by an earlier role is not offered to later ones.
    """

    result = mapping or ColumnMapping()
    claimed = {col.strip().lower() for col in result.roles().values()}
    for role, keywords in ROLE_KEYWORDS.items():
        if result.column_for(role):
            continue
        available = [h for h in headers if h.strip().lower() not in claimed]
        column = find_column(available, keywords)
        if column is None:
            _logger.debug("no header matched %s keywords %s", role, keywords)
            continue
        claimed.add(column.lower())
        result = result.assign(role, column)
    return result


def describe_conflicts(mapping: ColumnMapping) -> list[str]:
    """Human-readable lines for columns bound to more than one role."""

    lines: list[str] = []
    for column, roles in mapping.conflicts().items():
        names = ", ".join(r.name.lower() for r in roles)
        lines.append(f"column {column!r} is used for: {names}")
    return lines


def unknown_columns(mapping: ColumnMapping, headers: Sequence[str]) -> list[str]:
    """Bound columns that do not appear in ``headers`` (case-insensitive)."""

    present = {normalize_header(h) for h in headers}
    return [col for col in mapping.roles().values() if normalize_header(col) not in present]


__all__ = [
    "ROLE_KEYWORDS",
    "auto_detect_columns",
    "describe_conflicts",
    "find_column",
    "unknown_columns",
]
