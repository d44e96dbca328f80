"""Error taxonomy for the import pipeline.

Row-level errors (:class:`ClassificationError`) are collected by the batch
classifier and returned next to the successfully classified rows. A
:class:`MappingIncompleteError` is fatal to the whole call and is raised before
any row is read.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum


class ParseErrorKind(StrEnum):
    NOT_NUMERIC = "NOT_NUMERIC"


class ClassificationErrorKind(StrEnum):
    UNPARSEABLE_DATE = "UNPARSEABLE_DATE"
    UNPARSEABLE_AMOUNT = "UNPARSEABLE_AMOUNT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"


class BankImportError(Exception):
    """Base class for all errors raised by ``bank_import``."""


class ParseError(BankImportError, ValueError):
    """An amount cell could not be read as a decimal number."""

    def __init__(self, raw: str | None, kind: ParseErrorKind = ParseErrorKind.NOT_NUMERIC):
        self.raw = raw
        self.kind = kind
        super().__init__(f"{kind}: {raw!r}")


class ClassificationError(BankImportError, ValueError):
    """A single row could not be turned into a classified transaction."""

    def __init__(
        self,
        kind: ClassificationErrorKind,
        *,
        row_index: int,
        message: str,
        column: str | None = None,
    ):
        self.kind = kind
        self.row_index = row_index
        self.column = column
        self.message = message
        where = f" (column {column!r})" if column else ""
        super().__init__(f"row {row_index}: {kind}{where}: {message}")


class MappingIncompleteError(BankImportError, ValueError):
    """Classification was requested with a mapping that is not complete."""

    def __init__(self, missing: Sequence[str]):
        self.missing = tuple(missing)
        super().__init__("column mapping is incomplete; missing: " + ", ".join(self.missing))


__all__ = [
    "BankImportError",
    "ClassificationError",
    "ClassificationErrorKind",
    "MappingIncompleteError",
    "ParseError",
    "ParseErrorKind",
]
