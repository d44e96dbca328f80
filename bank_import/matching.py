"""Duplicate Matcher: compare classified transactions with the ledger snapshot.

Rules, strongest first:

EXACT
    Same date, same signed amount, and equal normalized description.
LIKELY
    Same signed amount with a date 1..``date_window_days`` days away, or same
    date and amount with a description that is similar but not equal (one
    contains the other, or the ``difflib`` ratio reaches
    ``description_similarity``).
NEW
    Anything else.

When several ledger records match, EXACT beats LIKELY and, within a tier, the
earliest record in snapshot order wins.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from difflib import SequenceMatcher

from .categories import normalize_description
from .config import ImportSettings
from .logging_setup import get_logger
from .models import (
    ClassifiedTransaction,
    ImportCandidate,
    LedgerRecord,
    MatchType,
    default_action,
)

_logger = get_logger("bank_import.matching")


@dataclass(frozen=True, slots=True)
class MatchResult:
    match_type: MatchType
    record: LedgerRecord | None = None

    @property
    def record_id(self) -> str | None:
        return self.record.id if self.record is not None else None


def description_similarity(a: str, b: str) -> float:
    """``difflib`` ratio of the normalized descriptions (1.0 when equal)."""

    na, nb = normalize_description(a), normalize_description(b)
    if na == nb:
        return 1.0
    if not na or not nb:
        return 0.0
    return SequenceMatcher(None, na, nb).ratio()


def descriptions_similar(a: str, b: str, threshold: float) -> bool:
    na, nb = normalize_description(a), normalize_description(b)
    if not na or not nb:
        return False
    if na in nb or nb in na:
        return True
    return SequenceMatcher(None, na, nb).ratio() >= threshold


def _classify_pair(
    txn: ClassifiedTransaction, record: LedgerRecord, settings: ImportSettings
) -> MatchType:
    if txn.amount != record.amount:
        return MatchType.NEW
    gap = abs((txn.date - record.date).days)
    if gap == 0:
        if normalize_description(txn.description) == normalize_description(record.description):
            return MatchType.EXACT
        if descriptions_similar(
            txn.description, record.description, settings.description_similarity
        ):
            return MatchType.LIKELY
        return MatchType.NEW
    if gap <= settings.date_window_days:
        return MatchType.LIKELY
    return MatchType.NEW


def match_transaction(
    txn: ClassifiedTransaction,
    ledger: Iterable[LedgerRecord],
    *,
    settings: ImportSettings | None = None,
) -> MatchResult:
    """Find the best ledger match for ``txn``."""

    cfg = settings or ImportSettings()
    likely: LedgerRecord | None = None
    for record in ledger:
        kind = _classify_pair(txn, record, cfg)
        if kind is MatchType.EXACT:
            return MatchResult(MatchType.EXACT, record)
        if kind is MatchType.LIKELY and likely is None:
            likely = record
    if likely is not None:
        return MatchResult(MatchType.LIKELY, likely)
    return MatchResult(MatchType.NEW)


def to_candidate(txn: ClassifiedTransaction, result: MatchResult) -> ImportCandidate:
    return ImportCandidate(
        id=txn.id,
        date=txn.date,
        description=txn.description,
        amount=txn.amount,
        classification=txn.classification,
        match_type=result.match_type,
        action=default_action(result.match_type),
        category=txn.suggested_category,
        matched_record_id=result.record_id,
        matched_record=result.record,
    )


def build_candidates(
    transactions: Sequence[ClassifiedTransaction],
    ledger: Sequence[LedgerRecord] = (),
    *,
    settings: ImportSettings | None = None,
) -> tuple[ImportCandidate, ...]:
    """Match every transaction, preserving input order."""

    cfg = settings or ImportSettings()
    snapshot = tuple(ledger)
    candidates: list[ImportCandidate] = []
    for txn in transactions:
        result = match_transaction(txn, snapshot, settings=cfg)
        if result.match_type is not MatchType.NEW:
            _logger.debug(
                "row %d %s matched ledger record %s",
                txn.row_index,
                result.match_type,
                result.record_id,
            )
        candidates.append(to_candidate(txn, result))

    counts = {mt: 0 for mt in MatchType}
    for c in candidates:
        counts[c.match_type] += 1
    _logger.info(
        "matched %d candidates against %d ledger records: %d new, %d likely, %d exact",
        len(candidates),
        len(snapshot),
        counts[MatchType.NEW],
        counts[MatchType.LIKELY],
        counts[MatchType.EXACT],
    )
    return tuple(candidates)


__all__ = [
    "MatchResult",
    "build_candidates",
    "description_similarity",
    "descriptions_similar",
    "match_transaction",
    "to_candidate",
]
