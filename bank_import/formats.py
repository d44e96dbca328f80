"""Header-signature detection of known UK bank export layouts.

Each supported bank has a fixed signature: a set of header substrings that
must *all* be present (case-insensitive substring match, so minor header
variants such as ``"Money Out"`` vs ``"Money out"`` still match). Layouts are
tried in :data:`DETECTION_ORDER`; the first full match wins. Layouts whose
headers are a superset of another bank's signature are tried first (Monzo
exports also carry ``Money In``/``Money Out``/``Description``; Nationwide's
``Transaction type`` also contains ``type``).

A match yields a pre-populated :class:`~bank_import.models.ColumnMapping`
whose column names are resolved against the actual headers, so the mapping
always refers to headers as spelled in the file.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from .logging_setup import get_logger
from .models import AmountInterpretation, BankFormat, ColumnMapping, ColumnRole

_logger = get_logger("bank_import.formats")


@dataclass(frozen=True, slots=True)
class BankLayout:
    """Known export layout for one bank.

    ``signature`` entries are lowercase substrings. ``columns`` maps roles to
    the canonical header names the bank uses.
    """

    bank_format: BankFormat
    display_name: str
    signature: tuple[str, ...]
    columns: Mapping[ColumnRole, str]
    date_format: str

    @property
    def interpretation(self) -> AmountInterpretation:
        if ColumnRole.INCOME in self.columns and ColumnRole.EXPENSE in self.columns:
            return AmountInterpretation.SEPARATE_COLUMNS
        return AmountInterpretation.STANDARD


def _layout(
    fmt: BankFormat,
    name: str,
    signature: Sequence[str],
    columns: Mapping[ColumnRole, str],
    date_format: str = "dd/MM/yyyy",
) -> BankLayout:
    return BankLayout(
        bank_format=fmt,
        display_name=name,
        signature=tuple(s.lower() for s in signature),
        columns=MappingProxyType(dict(columns)),
        date_format=date_format,
    )


LAYOUTS: Mapping[BankFormat, BankLayout] = MappingProxyType(
    {
        BankFormat.BARCLAYS: _layout(
            BankFormat.BARCLAYS,
            "Barclays",
            ("money out", "money in", "description"),
            {
                ColumnRole.DATE: "Date",
                ColumnRole.DESCRIPTION: "Description",
                ColumnRole.INCOME: "Money in",
                ColumnRole.EXPENSE: "Money out",
            },
        ),
        BankFormat.HSBC: _layout(
            BankFormat.HSBC,
            "HSBC",
            ("paid out", "paid in", "description"),
            {
                ColumnRole.DATE: "Date",
                ColumnRole.DESCRIPTION: "Description",
                ColumnRole.INCOME: "Paid in",
                ColumnRole.EXPENSE: "Paid out",
            },
        ),
        BankFormat.LLOYDS: _layout(
            BankFormat.LLOYDS,
            "Lloyds",
            ("transaction date", "debit amount", "credit amount"),
            {
                ColumnRole.DATE: "Transaction Date",
                ColumnRole.DESCRIPTION: "Transaction Description",
                ColumnRole.INCOME: "Credit Amount",
                ColumnRole.EXPENSE: "Debit Amount",
            },
        ),
        BankFormat.NATIONWIDE: _layout(
            BankFormat.NATIONWIDE,
            "Nationwide",
            ("transaction type", "paid out", "paid in"),
            {
                ColumnRole.DATE: "Date",
                ColumnRole.DESCRIPTION: "Description",
                ColumnRole.INCOME: "Paid in",
                ColumnRole.EXPENSE: "Paid out",
            },
            date_format="dd MMM yyyy",
        ),
        BankFormat.STARLING: _layout(
            BankFormat.STARLING,
            "Starling",
            ("counter party", "amount (gbp)"),
            {
                ColumnRole.DATE: "Date",
                ColumnRole.DESCRIPTION: "Counter Party",
                ColumnRole.AMOUNT: "Amount (GBP)",
                ColumnRole.REFERENCE: "Reference",
            },
        ),
        BankFormat.MONZO: _layout(
            BankFormat.MONZO,
            "Monzo",
            ("transaction id", "name", "category", "amount"),
            {
                ColumnRole.DATE: "Date",
                ColumnRole.DESCRIPTION: "Name",
                ColumnRole.AMOUNT: "Amount",
                ColumnRole.CATEGORY: "Category",
                ColumnRole.REFERENCE: "Transaction ID",
            },
        ),
    }
)

DETECTION_ORDER: tuple[BankFormat, ...] = (
    BankFormat.MONZO,
    BankFormat.STARLING,
    BankFormat.LLOYDS,
    BankFormat.NATIONWIDE,
    BankFormat.HSBC,
    BankFormat.BARCLAYS,
)


@dataclass(frozen=True, slots=True)
class FormatDetection:
    """Outcome of :func:`detect_bank_format`; ``mapping`` is ``None`` for UNKNOWN."""

    bank_format: BankFormat
    mapping: ColumnMapping | None = None

    @property
    def is_known(self) -> bool:
        return self.bank_format is not BankFormat.UNKNOWN


def normalize_header(header: str | None) -> str:
    """Lowercase, trim, and drop surrounding quotes and a UTF-8 BOM."""

    if header is None:
        return ""
    return header.replace("﻿", "").strip().strip('"').strip().lower()


def _find_header(headers: Sequence[str], wanted: str) -> str | None:
    key = wanted.lower()
    normalized = [normalize_header(h) for h in headers]
    for raw, norm in zip(headers, normalized, strict=True):
        if norm == key:
            return raw.strip()
    for raw, norm in zip(headers, normalized, strict=True):
        if key in norm:
            return raw.strip()
    return None


def matches_signature(layout: BankLayout, headers: Sequence[str]) -> bool:
    normalized = [normalize_header(h) for h in headers]
    return all(any(sig in h for h in normalized) for sig in layout.signature)


def mapping_for_format(
    bank_format: BankFormat, headers: Sequence[str] | None = None
) -> ColumnMapping | None:
    """Pre-populated mapping for ``bank_format``.

    With ``headers``, role columns are resolved to the header text as it
    appears in the file (exact match first, then substring). Without, the
    bank's canonical header names are used. ``UNKNOWN`` yields ``None``.
    """

    layout = LAYOUTS.get(bank_format)
    if layout is None:
        return None

    mapping = ColumnMapping(
        date_format=layout.date_format,
        amount_interpretation=layout.interpretation,
    )
    for role, canonical in layout.columns.items():
        column = canonical if headers is None else _find_header(headers, canonical)
        mapping = mapping.assign(role, column)
    return mapping


def detect_bank_format(headers: Sequence[str]) -> FormatDetection:
    """Match ``headers`` against the known bank signatures."""

    if not headers:
        return FormatDetection(BankFormat.UNKNOWN)
    for fmt in DETECTION_ORDER:
        layout = LAYOUTS[fmt]
        if matches_signature(layout, headers):
            _logger.debug("headers matched %s signature %s", fmt, layout.signature)
            return FormatDetection(fmt, mapping_for_format(fmt, headers))
    _logger.debug("no bank signature matched headers %s", list(headers))
    return FormatDetection(BankFormat.UNKNOWN)


def available_bank_names() -> list[str]:
    return [LAYOUTS[fmt].display_name for fmt in DETECTION_ORDER]


__all__ = [
    "DETECTION_ORDER",
    "LAYOUTS",
    "BankLayout",
    "FormatDetection",
    "available_bank_names",
    "detect_bank_format",
    "mapping_for_format",
    "normalize_header",
]
