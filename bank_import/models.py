"""Data models for the bank-statement import pipeline.

Internal records are frozen ``dataclass`` values; they are created per import
batch and never mutated (user overrides produce new values). The ledger
snapshot handed in by the caller is validated with pydantic
(:class:`LedgerRecord`) because it originates outside this package.

Amounts are :class:`~decimal.Decimal` and always signed by the standard
convention: income positive, expense negative. Source-specific sign policies
(inverted exports, separate money-in/money-out columns) are resolved once, at
classification time.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import StrEnum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class AmountInterpretation(StrEnum):
    """How the sign of a source amount maps to income/expense."""

    STANDARD = "STANDARD"  # positive = income, negative = expense
    INVERTED = "INVERTED"  # positive = expense, negative = income
    SEPARATE_COLUMNS = "SEPARATE_COLUMNS"  # money-in / money-out columns


class TransactionType(StrEnum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class BankFormat(StrEnum):
    BARCLAYS = "BARCLAYS"
    HSBC = "HSBC"
    LLOYDS = "LLOYDS"
    NATIONWIDE = "NATIONWIDE"
    STARLING = "STARLING"
    MONZO = "MONZO"
    UNKNOWN = "UNKNOWN"


class ColumnRole(StrEnum):
    """Semantic role a source column can play in a :class:`ColumnMapping`."""

    DATE = "date_column"
    DESCRIPTION = "description_column"
    AMOUNT = "amount_column"
    INCOME = "income_column"
    EXPENSE = "expense_column"
    CATEGORY = "category_column"
    REFERENCE = "reference_column"


class MatchType(StrEnum):
    NEW = "NEW"
    LIKELY = "LIKELY"
    EXACT = "EXACT"


class ImportAction(StrEnum):
    IMPORT = "IMPORT"
    UPDATE = "UPDATE"
    SKIP = "SKIP"


class IssueType(StrEnum):
    # Declaration order is the tie-break order for equal severities.
    POTENTIAL_DUPLICATES = "POTENTIAL_DUPLICATES"
    MISSING_CATEGORIES = "MISSING_CATEGORIES"
    DATE_GAPS = "DATE_GAPS"


class IssueSeverity(StrEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """0 for HIGH, 1 for MEDIUM, 2 for LOW (lower sorts first)."""

        return list(IssueSeverity).index(self)


# Closed variant -> value tables.
DEFAULT_ACTIONS: Mapping[MatchType, ImportAction] = MappingProxyType(
    {
        MatchType.NEW: ImportAction.IMPORT,
        MatchType.LIKELY: ImportAction.IMPORT,  # imported, but flagged for review
        MatchType.EXACT: ImportAction.SKIP,
    }
)

ISSUE_SEVERITY: Mapping[IssueType, IssueSeverity] = MappingProxyType(
    {
        IssueType.POTENTIAL_DUPLICATES: IssueSeverity.HIGH,
        IssueType.MISSING_CATEGORIES: IssueSeverity.MEDIUM,
        IssueType.DATE_GAPS: IssueSeverity.LOW,
    }
)


def default_action(match_type: MatchType) -> ImportAction:
    return DEFAULT_ACTIONS[match_type]


# ---------------------------------------------------------------------------
# Column mapping
# ---------------------------------------------------------------------------


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Assignment of semantic roles to source column headers.

    Either ``amount_column`` or the ``income_column``/``expense_column`` pair
    supplies the amount. Setting a role performs no cross-validation; use
    :meth:`is_complete`, :meth:`missing_requirements` and :meth:`conflicts`
    to check the result.
    """

    date_column: str | None = None
    description_column: str | None = None
    amount_column: str | None = None
    income_column: str | None = None
    expense_column: str | None = None
    category_column: str | None = None
    reference_column: str | None = None
    date_format: str | None = None
    amount_interpretation: AmountInterpretation = AmountInterpretation.STANDARD

    # ---- role access -------------------------------------------------------

    def column_for(self, role: ColumnRole) -> str | None:
        return getattr(self, role.value)

    def assign(self, role: ColumnRole, column: str | None) -> ColumnMapping:
        """Return a copy with ``role`` bound to ``column`` (``None`` clears it)."""

        return replace(self, **{role.value: column})

    def with_date_format(self, date_format: str | None) -> ColumnMapping:
        return replace(self, date_format=date_format)

    def with_interpretation(self, interpretation: AmountInterpretation) -> ColumnMapping:
        return replace(self, amount_interpretation=interpretation)

    def roles(self) -> dict[ColumnRole, str]:
        """Bound roles only, in :class:`ColumnRole` order."""

        out: dict[ColumnRole, str] = {}
        for role in ColumnRole:
            col = self.column_for(role)
            if not _is_blank(col):
                out[role] = col  # type: ignore[assignment]
        return out

    # ---- checks ------------------------------------------------------------

    @property
    def has_single_amount(self) -> bool:
        return not _is_blank(self.amount_column)

    @property
    def has_separate_amounts(self) -> bool:
        return not _is_blank(self.income_column) and not _is_blank(self.expense_column)

    def is_complete(self) -> bool:
        """Date, description, exactly one amount source and a date format are set."""

        if _is_blank(self.date_column) or _is_blank(self.description_column):
            return False
        if _is_blank(self.date_format):
            return False
        return self.has_single_amount != self.has_separate_amounts

    def missing_requirements(self) -> list[str]:
        """What still prevents classification, as short human-readable items.

        The amount source is checked against ``amount_interpretation``: the
        income/expense pair for ``SEPARATE_COLUMNS``, the single amount column
        otherwise. Setting both a single amount column and the full pair is
        reported as ambiguous, matching :meth:`is_complete`.
        """

        missing: list[str] = []
        if _is_blank(self.date_column):
            missing.append("date column")
        if _is_blank(self.description_column):
            missing.append("description column")
        if _is_blank(self.date_format):
            missing.append("date format")
        if self.amount_interpretation is AmountInterpretation.SEPARATE_COLUMNS:
            if _is_blank(self.income_column):
                missing.append("income column")
            if _is_blank(self.expense_column):
                missing.append("expense column")
        elif not self.has_single_amount:
            missing.append("amount column")
        if self.has_single_amount and self.has_separate_amounts:
            missing.append("more than one amount source")
        return missing

    def conflicts(self) -> dict[str, tuple[ColumnRole, ...]]:
        """Columns bound to more than one role, mapped to those roles."""

        by_column: dict[str, list[ColumnRole]] = {}
        for role, col in self.roles().items():
            by_column.setdefault(col.strip().lower(), []).append(role)
        return {col: tuple(rs) for col, rs in by_column.items() if len(rs) > 1}


# ---------------------------------------------------------------------------
# Classified rows and the ledger snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClassifiedTransaction:
    """A source row resolved to a dated, signed, classified transaction."""

    id: str
    row_index: int
    date: date
    description: str
    amount: Decimal
    classification: TransactionType
    suggested_category: str | None = None
    confidence: float | None = None
    reference: str | None = None

    @property
    def is_income(self) -> bool:
        return self.classification is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.classification is TransactionType.EXPENSE

    @property
    def absolute_amount(self) -> Decimal:
        return abs(self.amount)


class LedgerRecord(BaseModel):
    """An already-recorded income or expense, used only for duplicate checks.

    ``amount`` follows the standard sign convention (expenses negative).
    Stores that keep expenses as positive numbers should build records with
    :meth:`expense`.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    id: str
    date: date
    amount: Decimal
    description: str
    category: str | None = None

    @field_validator("amount")
    @classmethod
    def _finite_amount(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("amount must be a finite number")
        return v

    @property
    def is_income(self) -> bool:
        return self.amount >= 0

    @classmethod
    def income(
        cls, id: str, date: date, amount: Decimal, description: str, category: str | None = None
    ) -> LedgerRecord:
        return cls(id=id, date=date, amount=abs(amount), description=description, category=category)

    @classmethod
    def expense(
        cls, id: str, date: date, amount: Decimal, description: str, category: str | None = None
    ) -> LedgerRecord:
        return cls(
            id=id, date=date, amount=-abs(amount), description=description, category=category
        )


# ---------------------------------------------------------------------------
# Review and reconciliation values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ImportCandidate:
    """A classified transaction paired with its duplicate-match outcome.

    ``action`` starts at :func:`default_action` for the match type and is
    changed only by explicit user operations. ``selected`` is a review-table
    flag with no effect on what gets imported.
    """

    id: str
    date: date
    description: str
    amount: Decimal
    classification: TransactionType
    match_type: MatchType
    action: ImportAction
    category: str | None = None
    matched_record_id: str | None = None
    matched_record: LedgerRecord | None = None
    selected: bool = False

    def __post_init__(self) -> None:
        if self.action is ImportAction.UPDATE and self.matched_record_id is None:
            raise ValueError(f"candidate {self.id}: UPDATE requires a matched record")

    def with_action(self, action: ImportAction) -> ImportCandidate:
        return replace(self, action=action)

    def with_selected(self, selected: bool) -> ImportCandidate:
        return replace(self, selected=selected)

    @property
    def will_be_imported(self) -> bool:
        return self.action in (ImportAction.IMPORT, ImportAction.UPDATE)

    @property
    def is_income(self) -> bool:
        return self.classification is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.classification is TransactionType.EXPENSE


@dataclass(frozen=True, slots=True)
class ReconciliationIssue:
    """A data-quality finding with a severity fixed by its type."""

    type: IssueType
    count: int
    sample_details: tuple[str, ...] = field(default=())

    @property
    def severity(self) -> IssueSeverity:
        return ISSUE_SEVERITY[self.type]

    @property
    def summary(self) -> str:
        n = self.count
        if self.type is IssueType.POTENTIAL_DUPLICATES:
            return f"{n} potential duplicate transaction{'' if n == 1 else 's'}"
        if self.type is IssueType.MISSING_CATEGORIES:
            return f"{n} transaction{'' if n == 1 else 's'} without a category"
        return f"{n} month{'' if n == 1 else 's'} with no transactions"


__all__ = [
    "DEFAULT_ACTIONS",
    "ISSUE_SEVERITY",
    "AmountInterpretation",
    "BankFormat",
    "ClassifiedTransaction",
    "ColumnMapping",
    "ColumnRole",
    "ImportAction",
    "ImportCandidate",
    "IssueSeverity",
    "IssueType",
    "LedgerRecord",
    "MatchType",
    "ReconciliationIssue",
    "TransactionType",
    "default_action",
]
