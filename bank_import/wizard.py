"""Step gate for building a column mapping interactively.

:class:`MappingWizard` is an immutable state value. Each call returns a new
wizard, so the caller threads it through its interaction loop instead of
mutating a shared object. The wizard orders user input; all parsing and
classification happens elsewhere.

Steps
-----
1. Column selection: date, description, date format and exactly one amount
   source (the amount column or the income/expense pair) set, no column
   bound to two roles.
2. Amount interpretation: an interpretation is selected; ``SEPARATE_COLUMNS``
   needs both income and expense columns, the others need the amount column.
3. Summary: :meth:`MappingWizard.confirm_mapping` commits the mapping.

Moving past an unmet gate, before the first step or after the last is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum

from .logging_setup import get_logger
from .models import AmountInterpretation, ColumnMapping, ColumnRole

_logger = get_logger("bank_import.wizard")


class WizardStep(IntEnum):
    COLUMN_SELECTION = 1
    AMOUNT_INTERPRETATION = 2
    SUMMARY = 3


_FIRST = min(WizardStep)
_LAST = max(WizardStep)


def _columns_selected(mapping: ColumnMapping) -> bool:
    return mapping.is_complete() and not mapping.conflicts()


@dataclass(frozen=True, slots=True)
class MappingWizard:
    step: WizardStep = WizardStep.COLUMN_SELECTION
    mapping: ColumnMapping = ColumnMapping()
    interpretation: AmountInterpretation | None = None
    confirmed: bool = False

    @classmethod
    def start(
        cls,
        mapping: ColumnMapping | None = None,
        interpretation: AmountInterpretation | None = None,
    ) -> MappingWizard:
        """New wizard at step 1, optionally seeded with a detected mapping."""

        return cls(mapping=mapping or ColumnMapping(), interpretation=interpretation)

    # ---- gates ---------------------------------------------------------------

    def _gate(self, step: WizardStep) -> bool:
        if step is WizardStep.COLUMN_SELECTION:
            return _columns_selected(self.mapping)
        if step is WizardStep.AMOUNT_INTERPRETATION:
            if self.interpretation is None:
                return False
            if self.interpretation is AmountInterpretation.SEPARATE_COLUMNS:
                return self.mapping.has_separate_amounts
            return self.mapping.has_single_amount
        return True

    def can_proceed(self) -> bool:
        """Whether :meth:`next_step` would advance from the current step."""

        if self.confirmed or self.step is _LAST:
            return False
        return self._gate(self.step)

    def can_confirm(self) -> bool:
        return (
            self.step is WizardStep.SUMMARY
            and self._gate(WizardStep.COLUMN_SELECTION)
            and self._gate(WizardStep.AMOUNT_INTERPRETATION)
        )

    # ---- navigation ------------------------------------------------------------

    def next_step(self) -> MappingWizard:
        if not self.can_proceed():
            return self
        return replace(self, step=WizardStep(self.step + 1))

    def previous_step(self) -> MappingWizard:
        if self.confirmed or self.step is _FIRST:
            return self
        return replace(self, step=WizardStep(self.step - 1))

    # ---- edits -----------------------------------------------------------------

    def _check_editable(self) -> None:
        if self.confirmed:
            raise ValueError("mapping is already confirmed")

    def with_mapping(self, mapping: ColumnMapping) -> MappingWizard:
        self._check_editable()
        return replace(self, mapping=mapping)

    def set_column(self, role: ColumnRole, column: str | None) -> MappingWizard:
        self._check_editable()
        return replace(self, mapping=self.mapping.assign(role, column))

    def set_date_format(self, date_format: str | None) -> MappingWizard:
        self._check_editable()
        return replace(self, mapping=self.mapping.with_date_format(date_format))

    def select_interpretation(self, interpretation: AmountInterpretation) -> MappingWizard:
        self._check_editable()
        return replace(
            self,
            interpretation=interpretation,
            mapping=self.mapping.with_interpretation(interpretation),
        )

    # ---- commit ----------------------------------------------------------------

    def build_mapping(self) -> ColumnMapping:
        """The mapping carrying the selected interpretation."""

        if self.interpretation is None:
            return self.mapping
        return self.mapping.with_interpretation(self.interpretation)

    def confirm_mapping(self) -> MappingWizard:
        """Commit the mapping. Confirming again returns the wizard unchanged.

        Raises ``ValueError`` when called before the summary step or with an
        unmet gate.
        """

        if self.confirmed:
            return self
        if not self.can_confirm():
            raise ValueError(f"cannot confirm mapping at step {self.step.name}")
        mapping = self.build_mapping()
        _logger.info("column mapping confirmed: %s", mapping.roles())
        return replace(self, mapping=mapping, confirmed=True)

    def is_mapping_confirmed(self) -> bool:
        return self.confirmed


__all__ = ["MappingWizard", "WizardStep"]
