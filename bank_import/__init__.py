"""Public interface for the ``bank_import`` package.

This module exposes the pipeline entry points and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .amounts import format_amount, format_signed, parse_amount
from .categories import CategorySuggester, CategorySuggestion, KeywordCategorizer
from .classifier import ClassificationBatch, classify_row, classify_rows
from .config import ImportSettings, load_settings
from .errors import (
    BankImportError,
    ClassificationError,
    ClassificationErrorKind,
    MappingIncompleteError,
    ParseError,
    ParseErrorKind,
)
from .formats import FormatDetection, detect_bank_format, mapping_for_format
from .mapping import auto_detect_columns
from .matching import MatchResult, build_candidates, match_transaction
from .models import (
    AmountInterpretation,
    BankFormat,
    ClassifiedTransaction,
    ColumnMapping,
    ColumnRole,
    ImportAction,
    ImportCandidate,
    IssueSeverity,
    IssueType,
    LedgerRecord,
    MatchType,
    ReconciliationIssue,
    TransactionType,
)
from .pipeline import ImportResult, run_import
from .reconciliation import ReconciliationReport, analyze, find_month_gaps
from .review import ImportReview, ImportSummary
from .wizard import MappingWizard, WizardStep

__all__ = [
    # Pipeline
    "run_import",
    "ImportResult",
    # Stages
    "parse_amount",
    "format_amount",
    "format_signed",
    "detect_bank_format",
    "mapping_for_format",
    "FormatDetection",
    "auto_detect_columns",
    "classify_row",
    "classify_rows",
    "ClassificationBatch",
    "match_transaction",
    "build_candidates",
    "MatchResult",
    "ImportReview",
    "ImportSummary",
    "analyze",
    "find_month_gaps",
    "ReconciliationReport",
    "MappingWizard",
    "WizardStep",
    # Categories
    "CategorySuggester",
    "CategorySuggestion",
    "KeywordCategorizer",
    # Settings
    "ImportSettings",
    "load_settings",
    # Models / types
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
    # Errors
    "BankImportError",
    "ClassificationError",
    "ClassificationErrorKind",
    "MappingIncompleteError",
    "ParseError",
    "ParseErrorKind",
]
