"""Transaction Classifier: raw rows to dated, signed, classified transactions.

The amount interpretation is applied exactly once, here. Every
:class:`~bank_import.models.ClassifiedTransaction` leaving this module uses
the standard convention (income positive, expense negative) no matter how the
source wrote it.

Row failures are returned as :class:`~bank_import.errors.ClassificationError`
values next to the good rows; a bad row never aborts the batch. An incomplete
mapping is the one fatal condition and is raised before any row is read.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from .amounts import parse_amount
from .categories import CategorySuggester
from .config import ImportSettings
from .dates import parse_date
from .errors import (
    ClassificationError,
    ClassificationErrorKind,
    MappingIncompleteError,
    ParseError,
)
from .formats import normalize_header
from .logging_setup import get_logger
from .models import AmountInterpretation, ClassifiedTransaction, ColumnMapping, TransactionType

_logger = get_logger("bank_import.classifier")


@dataclass(frozen=True, slots=True)
class ClassificationBatch:
    """Classified rows and row errors, each in source row order."""

    transactions: tuple[ClassifiedTransaction, ...]
    errors: tuple[ClassificationError, ...]

    @property
    def income_count(self) -> int:
        return sum(1 for t in self.transactions if t.is_income)

    @property
    def expense_count(self) -> int:
        return sum(1 for t in self.transactions if t.is_expense)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


# ---- helpers ------------------------------------------------------------------


def transaction_fingerprint(
    *, row_index: int, txn_date: date, amount: Decimal, description: str
) -> str:
    """Stable SHA-256 id over the fields that identify a row in its batch."""

    payload = {
        "row": row_index,
        "date": txn_date.isoformat(),
        "amount": f"{amount:.2f}",
        "description": description.strip(),
    }
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def classify_amount(
    amount: Decimal, interpretation: AmountInterpretation
) -> tuple[Decimal, TransactionType]:
    """Resolve a single-column source amount to (signed amount, type).

    Zero is INCOME under every interpretation.
    """

    if interpretation is AmountInterpretation.INVERTED:
        amount = -amount
    if amount == 0:
        return abs(amount), TransactionType.INCOME
    if amount > 0:
        return amount, TransactionType.INCOME
    return amount, TransactionType.EXPENSE


def _header_index(headers: Sequence[str]) -> dict[str, int]:
    index: dict[str, int] = {}
    for i, header in enumerate(headers):
        index.setdefault(normalize_header(header), i)
    return index


def _resolve_columns(
    headers: Sequence[str], mapping: ColumnMapping
) -> dict[str, int]:
    """Map each bound role column to its header position.

    Only the amount source selected by the interpretation is resolved.
    """

    index = _header_index(headers)
    separate = mapping.amount_interpretation is AmountInterpretation.SEPARATE_COLUMNS
    wanted = [mapping.date_column, mapping.description_column]
    if separate:
        wanted += [mapping.income_column, mapping.expense_column]
    else:
        wanted.append(mapping.amount_column)
    optional = [mapping.category_column, mapping.reference_column]

    positions: dict[str, int] = {}
    missing: list[str] = []
    for column in wanted:
        pos = index.get(normalize_header(column))
        if pos is None:
            missing.append(f"column {column!r} not found in headers")
        else:
            positions[column] = pos
    if missing:
        raise MappingIncompleteError(missing)
    for column in optional:
        if column:
            pos = index.get(normalize_header(column))
            if pos is not None:
                positions[column] = pos
    return positions


def _cell(row: Sequence[str], positions: Mapping[str, int], column: str | None) -> str | None:
    if not column or column not in positions:
        return None
    value = row[positions[column]]
    if value is None:
        return None
    value = value.strip()
    return value or None


# ---- per-row -------------------------------------------------------------------


def _read_amount(
    row: Sequence[str],
    positions: Mapping[str, int],
    mapping: ColumnMapping,
    *,
    row_index: int,
    settings: ImportSettings,
) -> tuple[Decimal, TransactionType]:
    sep = settings.thousands_separator

    if mapping.amount_interpretation is AmountInterpretation.SEPARATE_COLUMNS:
        income_raw = _cell(row, positions, mapping.income_column)
        expense_raw = _cell(row, positions, mapping.expense_column)
        if (income_raw is None) == (expense_raw is None):
            state = "both are empty" if income_raw is None else "both are filled"
            raise ClassificationError(
                ClassificationErrorKind.MISSING_REQUIRED_FIELD,
                row_index=row_index,
                message=f"exactly one of income/expense must be set; {state}",
            )
        if income_raw is not None:
            column, raw, kind = mapping.income_column, income_raw, TransactionType.INCOME
        else:
            column, raw, kind = mapping.expense_column, expense_raw, TransactionType.EXPENSE
        try:
            magnitude = abs(parse_amount(raw, thousands_separator=sep))
        except ParseError as exc:
            raise ClassificationError(
                ClassificationErrorKind.UNPARSEABLE_AMOUNT,
                row_index=row_index,
                column=column,
                message=str(exc),
            ) from exc
        return (magnitude if kind is TransactionType.INCOME else -magnitude), kind

    raw = _cell(row, positions, mapping.amount_column)
    if raw is None:
        raise ClassificationError(
            ClassificationErrorKind.MISSING_REQUIRED_FIELD,
            row_index=row_index,
            column=mapping.amount_column,
            message="amount is empty",
        )
    try:
        parsed = parse_amount(raw, thousands_separator=sep)
    except ParseError as exc:
        raise ClassificationError(
            ClassificationErrorKind.UNPARSEABLE_AMOUNT,
            row_index=row_index,
            column=mapping.amount_column,
            message=str(exc),
        ) from exc
    return classify_amount(parsed, mapping.amount_interpretation)


def _classify(
    row: Sequence[str],
    row_index: int,
    headers_len: int,
    positions: Mapping[str, int],
    mapping: ColumnMapping,
    settings: ImportSettings,
    suggester: CategorySuggester | None,
) -> ClassifiedTransaction:
    if len(row) != headers_len:
        raise ClassificationError(
            ClassificationErrorKind.MISSING_REQUIRED_FIELD,
            row_index=row_index,
            message=f"row has {len(row)} cells, expected {headers_len}",
        )

    raw_date = _cell(row, positions, mapping.date_column)
    if raw_date is None:
        raise ClassificationError(
            ClassificationErrorKind.MISSING_REQUIRED_FIELD,
            row_index=row_index,
            column=mapping.date_column,
            message="date is empty",
        )
    try:
        txn_date = parse_date(raw_date, mapping.date_format)
    except ValueError as exc:
        raise ClassificationError(
            ClassificationErrorKind.UNPARSEABLE_DATE,
            row_index=row_index,
            column=mapping.date_column,
            message=f"{raw_date!r} does not match {mapping.date_format!r}",
        ) from exc

    description = _cell(row, positions, mapping.description_column)
    if description is None:
        raise ClassificationError(
            ClassificationErrorKind.MISSING_REQUIRED_FIELD,
            row_index=row_index,
            column=mapping.description_column,
            message="description is empty",
        )

    amount, kind = _read_amount(
        row, positions, mapping, row_index=row_index, settings=settings
    )

    category = _cell(row, positions, mapping.category_column)
    confidence: float | None = None
    if category is None and suggester is not None:
        suggestion = suggester.suggest(description, kind)
        if suggestion is not None:
            category, confidence = suggestion.category, suggestion.confidence

    return ClassifiedTransaction(
        id=transaction_fingerprint(
            row_index=row_index, txn_date=txn_date, amount=amount, description=description
        ),
        row_index=row_index,
        date=txn_date,
        description=description,
        amount=amount,
        classification=kind,
        suggested_category=category,
        confidence=confidence,
        reference=_cell(row, positions, mapping.reference_column),
    )


def _prepare(headers: Sequence[str], mapping: ColumnMapping) -> dict[str, int]:
    missing = mapping.missing_requirements()
    if missing:
        raise MappingIncompleteError(missing)
    for column, roles in mapping.conflicts().items():
        _logger.warning(
            "column %r is mapped to several roles: %s",
            column,
            ", ".join(r.name for r in roles),
        )
    return _resolve_columns(headers, mapping)


def classify_row(
    headers: Sequence[str],
    row: Sequence[str],
    mapping: ColumnMapping,
    *,
    row_index: int = 0,
    settings: ImportSettings | None = None,
    suggester: CategorySuggester | None = None,
) -> ClassifiedTransaction:
    """Classify a single row.

    Raises
    ------
    MappingIncompleteError
        When ``mapping`` is not complete or names a column absent from ``headers``.
    ClassificationError
        When the row itself cannot be classified.
    """

    positions = _prepare(headers, mapping)
    return _classify(
        row, row_index, len(headers), positions, mapping, settings or ImportSettings(), suggester
    )


def classify_rows(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    mapping: ColumnMapping,
    *,
    settings: ImportSettings | None = None,
    suggester: CategorySuggester | None = None,
) -> ClassificationBatch:
    """Classify every row, collecting row errors instead of raising them.

    ``row_index`` on results and errors is the zero-based position in ``rows``
    (the header line is not counted).
    """

    positions = _prepare(headers, mapping)
    cfg = settings or ImportSettings()

    transactions: list[ClassifiedTransaction] = []
    errors: list[ClassificationError] = []
    for i, row in enumerate(rows):
        try:
            txn = _classify(row, i, len(headers), positions, mapping, cfg, suggester)
        except ClassificationError as exc:
            _logger.warning("row %d skipped: %s (%s)", i, exc.kind, exc.message)
            errors.append(exc)
            continue
        _logger.debug(
            "row %d: %s %s %s", i, txn.classification, txn.amount, txn.description
        )
        transactions.append(txn)

    batch = ClassificationBatch(tuple(transactions), tuple(errors))
    _logger.info(
        "classified %d rows (%d income, %d expense, %d failed)",
        len(rows),
        batch.income_count,
        batch.expense_count,
        len(errors),
    )
    return batch


__all__ = [
    "ClassificationBatch",
    "classify_amount",
    "classify_row",
    "classify_rows",
    "transaction_fingerprint",
]
