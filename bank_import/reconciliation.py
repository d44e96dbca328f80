"""Reconciliation Analyzer: data-quality issues over a matched batch.

Issues are ordered by severity (HIGH first) and, for equal severity, by
:class:`~bank_import.models.IssueType` declaration order. A report is an
immutable value; dismissing an issue returns a new report and leaves the
other issues as they were.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date

from .amounts import format_amount
from .logging_setup import get_logger
from .models import (
    ImportCandidate,
    IssueSeverity,
    IssueType,
    MatchType,
    ReconciliationIssue,
)

_logger = get_logger("bank_import.reconciliation")

MAX_SAMPLE_DETAILS = 3

_TYPE_ORDER = {t: i for i, t in enumerate(IssueType)}


def _sort_key(issue: ReconciliationIssue) -> tuple[int, int]:
    return issue.severity.rank, _TYPE_ORDER[issue.type]


def _describe(candidate: ImportCandidate) -> str:
    return f"{candidate.date.isoformat()} {candidate.description} {format_amount(candidate.amount)}"


def _month_index(d: date) -> int:
    return d.year * 12 + (d.month - 1)


def find_month_gaps(dates: Iterable[date]) -> list[str]:
    """Months (``YYYY-MM``) strictly between the first and last date with no entries."""

    seen = {_month_index(d) for d in dates}
    if not seen:
        return []
    first, last = min(seen), max(seen)
    return [
        f"{m // 12:04d}-{m % 12 + 1:02d}" for m in range(first + 1, last) if m not in seen
    ]


@dataclass(frozen=True, slots=True)
class ReconciliationReport:
    issues: tuple[ReconciliationIssue, ...] = ()
    existing_income_count: int = 0
    existing_expense_count: int = 0
    duplicate_count: int = 0
    uncategorized_count: int = 0

    @property
    def issue_count(self) -> int:
        return len(self.issues)

    def is_all_clear(self) -> bool:
        return not self.issues

    def has_duplicates(self) -> bool:
        return any(i.type is IssueType.POTENTIAL_DUPLICATES for i in self.issues)

    def has_uncategorized(self) -> bool:
        return any(i.type is IssueType.MISSING_CATEGORIES for i in self.issues)

    def issues_by_severity(self, severity: IssueSeverity) -> list[ReconciliationIssue]:
        return [i for i in self.issues if i.severity is severity]

    def dismiss(self, issue_type: IssueType) -> ReconciliationReport:
        """Report without the issue of ``issue_type``; a no-op when absent."""

        return replace(self, issues=tuple(i for i in self.issues if i.type is not issue_type))


def analyze(
    candidates: Sequence[ImportCandidate],
    *,
    existing_income_count: int = 0,
    existing_expense_count: int = 0,
    date_gaps: Sequence[str] = (),
) -> ReconciliationReport:
    """Detect duplicates, missing categories and date gaps.

    Parameters
    ----------
    candidates:
        The matched batch, in source order.
    existing_income_count, existing_expense_count:
        Sizes of the existing ledger, carried through for display.
    date_gaps:
        Periods with no transactions, as reported by the caller
        (e.g. :func:`find_month_gaps`).
    """

    duplicates = [c for c in candidates if c.match_type in (MatchType.EXACT, MatchType.LIKELY)]
    uncategorized = [c for c in candidates if not (c.category and c.category.strip())]
    gaps = list(date_gaps)

    issues: list[ReconciliationIssue] = []
    if duplicates:
        issues.append(
            ReconciliationIssue(
                IssueType.POTENTIAL_DUPLICATES,
                len(duplicates),
                tuple(_describe(c) for c in duplicates[:MAX_SAMPLE_DETAILS]),
            )
        )
    if uncategorized:
        issues.append(
            ReconciliationIssue(
                IssueType.MISSING_CATEGORIES,
                len(uncategorized),
                tuple(_describe(c) for c in uncategorized[:MAX_SAMPLE_DETAILS]),
            )
        )
    if gaps:
        issues.append(
            ReconciliationIssue(
                IssueType.DATE_GAPS, len(gaps), tuple(gaps[:MAX_SAMPLE_DETAILS])
            )
        )
    issues.sort(key=_sort_key)

    _logger.info(
        "reconciliation found %d issue(s): %s",
        len(issues),
        ", ".join(f"{i.type}={i.count}" for i in issues) or "none",
    )
    return ReconciliationReport(
        issues=tuple(issues),
        existing_income_count=existing_income_count,
        existing_expense_count=existing_expense_count,
        duplicate_count=len(duplicates),
        uncategorized_count=len(uncategorized),
    )


__all__ = [
    "MAX_SAMPLE_DETAILS",
    "ReconciliationReport",
    "analyze",
    "find_month_gaps",
]
