"""End-to-end import: headers and rows in, review and reconciliation out.

``run_import`` chains the stages in order (format detection, column mapping,
classification, duplicate matching, review, reconciliation). It does no I/O
and is deterministic for the same inputs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .categories import CategorySuggester
from .classifier import ClassificationBatch, classify_rows
from .config import ImportSettings, load_settings
from .formats import detect_bank_format
from .logging_setup import get_logger
from .mapping import auto_detect_columns
from .matching import build_candidates
from .models import BankFormat, ColumnMapping, LedgerRecord
from .reconciliation import ReconciliationReport, analyze, find_month_gaps
from .review import ImportReview

_logger = get_logger("bank_import.pipeline")


@dataclass(frozen=True, slots=True)
class ImportResult:
    bank_format: BankFormat
    mapping: ColumnMapping
    batch: ClassificationBatch
    review: ImportReview
    report: ReconciliationReport


def resolve_mapping(
    headers: Sequence[str], mapping: ColumnMapping | None = None
) -> tuple[BankFormat, ColumnMapping]:
    """Use ``mapping`` as given, else a detected bank layout, else keyword auto-detection."""

    if mapping is not None:
        return BankFormat.UNKNOWN, mapping
    detection = detect_bank_format(headers)
    if detection.mapping is not None:
        _logger.info("detected %s export", detection.bank_format)
        return detection.bank_format, detection.mapping
    _logger.info("unrecognised export; falling back to keyword column detection")
    return BankFormat.UNKNOWN, auto_detect_columns(headers)


def run_import(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    mapping: ColumnMapping | None = None,
    *,
    ledger: Sequence[LedgerRecord] = (),
    settings: ImportSettings | None = None,
    suggester: CategorySuggester | None = None,
    date_gaps: Sequence[str] | None = None,
) -> ImportResult:
    """Run the whole pipeline over one batch.

    Raises :class:`~bank_import.errors.MappingIncompleteError` before any row
    is processed when the (given or detected) mapping is incomplete. Row
    errors are returned in ``result.batch.errors``.
    """

    cfg = settings or load_settings()
    bank_format, resolved = resolve_mapping(headers, mapping)
    snapshot = tuple(ledger)

    batch = classify_rows(headers, rows, resolved, settings=cfg, suggester=suggester)
    review = ImportReview(build_candidates(batch.transactions, snapshot, settings=cfg))
    gaps = (
        list(date_gaps)
        if date_gaps is not None
        else find_month_gaps(t.date for t in batch.transactions)
    )
    report = analyze(
        review.candidates,
        existing_income_count=sum(1 for r in snapshot if r.is_income),
        existing_expense_count=sum(1 for r in snapshot if not r.is_income),
        date_gaps=gaps,
    )
    return ImportResult(
        bank_format=bank_format,
        mapping=resolved,
        batch=batch,
        review=review,
        report=report,
    )


__all__ = ["ImportResult", "resolve_mapping", "run_import"]
