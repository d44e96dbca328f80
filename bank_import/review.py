"""Import Review Aggregator.

:class:`ImportReview` is an immutable collection of
:class:`~bank_import.models.ImportCandidate` values in source order. Every
user operation returns a new review; nothing is re-run implicitly, so a
manual override made after a bulk operation is kept until the user changes
that row again.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from decimal import Decimal

from .amounts import format_amount
from .logging_setup import get_logger
from .models import ImportAction, ImportCandidate, MatchType

_logger = get_logger("bank_import.review")

_ZERO = Decimal("0.00")


@dataclass(frozen=True, slots=True)
class ImportSummary:
    """Counts and absolute totals over the candidates that will be imported."""

    income_count: int
    expense_count: int
    income_total: Decimal
    expense_total: Decimal
    skip_count: int

    @property
    def import_count(self) -> int:
        return self.income_count + self.expense_count

    @property
    def net_total(self) -> Decimal:
        return self.income_total - self.expense_total

    @property
    def formatted_income_total(self) -> str:
        return format_amount(self.income_total)

    @property
    def formatted_expense_total(self) -> str:
        return format_amount(self.expense_total)


@dataclass(frozen=True, slots=True)
class ImportReview:
    candidates: tuple[ImportCandidate, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for c in self.candidates:
            if c.id in seen:
                raise ValueError(f"duplicate candidate id {c.id!r}")
            seen.add(c.id)

    def __iter__(self) -> Iterator[ImportCandidate]:
        return iter(self.candidates)

    def __len__(self) -> int:
        return len(self.candidates)

    # ---- lookups -----------------------------------------------------------

    def get(self, candidate_id: str) -> ImportCandidate:
        for c in self.candidates:
            if c.id == candidate_id:
                return c
        raise ValueError(f"unknown candidate id {candidate_id!r}")

    def by_match_type(self, match_type: MatchType | None = None) -> list[ImportCandidate]:
        """Candidates of ``match_type``; all candidates when ``None``."""

        if match_type is None:
            return list(self.candidates)
        return [c for c in self.candidates if c.match_type is match_type]

    def count(self, match_type: MatchType) -> int:
        return sum(1 for c in self.candidates if c.match_type is match_type)

    @property
    def new_count(self) -> int:
        return self.count(MatchType.NEW)

    @property
    def likely_count(self) -> int:
        return self.count(MatchType.LIKELY)

    @property
    def exact_count(self) -> int:
        return self.count(MatchType.EXACT)

    @property
    def selected_count(self) -> int:
        return sum(1 for c in self.candidates if c.selected)

    def has_no_duplicates(self) -> bool:
        return self.exact_count == 0 and self.likely_count == 0

    def is_all_new(self) -> bool:
        return self.new_count == len(self.candidates)

    # ---- updates -----------------------------------------------------------

    def _map(
        self,
        predicate: Callable[[ImportCandidate], bool],
        update: Callable[[ImportCandidate], ImportCandidate],
    ) -> ImportReview:
        return ImportReview(tuple(update(c) if predicate(c) else c for c in self.candidates))

    def set_action(self, candidate_id: str, action: ImportAction) -> ImportReview:
        """Override one candidate's action.

        Raises ``ValueError`` for an unknown id, or for ``UPDATE`` on a
        candidate that has no matched ledger record.
        """

        target = self.get(candidate_id)
        updated = target.with_action(action)
        _logger.debug("candidate %s: %s -> %s", candidate_id, target.action, action)
        return self._map(lambda c: c.id == candidate_id, lambda _c: updated)

    def set_action_for_selected(self, action: ImportAction) -> ImportReview:
        """Apply ``action`` to every selected candidate.

        All-or-nothing: if any selected candidate cannot take the action, the
        ``ValueError`` is raised and no candidate is changed.
        """

        return self._map(lambda c: c.selected, lambda c: c.with_action(action))

    def import_all_new(self) -> ImportReview:
        return self._map(
            lambda c: c.match_type is MatchType.NEW,
            lambda c: c.with_action(ImportAction.IMPORT),
        )

    def skip_all_duplicates(self) -> ImportReview:
        return self._map(
            lambda c: c.match_type is MatchType.EXACT,
            lambda c: c.with_action(ImportAction.SKIP),
        )

    def select(self, candidate_ids: Iterable[str], selected: bool = True) -> ImportReview:
        ids = set(candidate_ids)
        known = {c.id for c in self.candidates}
        unknown = ids - known
        if unknown:
            raise ValueError(f"unknown candidate ids: {sorted(unknown)}")
        return self._map(lambda c: c.id in ids, lambda c: c.with_selected(selected))

    def select_all(self) -> ImportReview:
        return self._map(lambda _c: True, lambda c: c.with_selected(True))

    def deselect_all(self) -> ImportReview:
        return self._map(lambda _c: True, lambda c: c.with_selected(False))

    # ---- results -----------------------------------------------------------

    def final_import_set(self) -> tuple[ImportCandidate, ...]:
        """Candidates whose action is IMPORT or UPDATE, in source order."""

        return tuple(c for c in self.candidates if c.will_be_imported)

    def has_items_to_import(self) -> bool:
        return any(c.will_be_imported for c in self.candidates)

    def summary(self) -> ImportSummary:
        income_count = expense_count = 0
        income_total = expense_total = _ZERO
        for c in self.final_import_set():
            if c.is_income:
                income_count += 1
                income_total += abs(c.amount)
            else:
                expense_count += 1
                expense_total += abs(c.amount)
        return ImportSummary(
            income_count=income_count,
            expense_count=expense_count,
            income_total=income_total,
            expense_total=expense_total,
            skip_count=len(self.candidates) - income_count - expense_count,
        )


__all__ = ["ImportReview", "ImportSummary"]
