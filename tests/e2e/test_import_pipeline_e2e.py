from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from bank_import import (
    AmountInterpretation,
    BankFormat,
    ColumnMapping,
    ColumnRole,
    ImportAction,
    IssueSeverity,
    IssueType,
    KeywordCategorizer,
    LedgerRecord,
    MappingIncompleteError,
    MappingWizard,
    MatchType,
    TransactionType,
    run_import,
)

HEADERS = ["Date", "Description", "Amount"]
ROWS = [["15/01/2026", "AMAZON UK", "-45.99"], ["14/01/2026", "PAYPAL", "1250.00"]]
MAPPING = ColumnMapping(
    date_column="Date",
    description_column="Description",
    amount_column="Amount",
    date_format="dd/MM/yyyy",
    amount_interpretation=AmountInterpretation.STANDARD,
)


def test_two_row_statement():
    result = run_import(HEADERS, ROWS, MAPPING)

    amazon, paypal = result.batch.transactions
    assert (amazon.classification, amazon.absolute_amount) == (
        TransactionType.EXPENSE,
        Decimal("45.99"),
    )
    assert (paypal.classification, paypal.absolute_amount) == (
        TransactionType.INCOME,
        Decimal("1250.00"),
    )

    summary = result.review.summary()
    assert (summary.income_count, summary.expense_count) == (1, 1)
    assert summary.formatted_income_total == "1,250.00"
    assert summary.formatted_expense_total == "45.99"
    assert [c.description for c in result.review.final_import_set()] == ["AMAZON UK", "PAYPAL"]

    # Nothing suggested categories, so both rows are flagged.
    (issue,) = result.report.issues
    assert issue.type is IssueType.MISSING_CATEGORIES
    assert issue.count == 2


def test_rerun_against_ledger_skips_the_known_expense():
    ledger = [
        LedgerRecord.expense(
            id="L1", date=date(2026, 1, 15), amount=Decimal("45.99"), description="Amazon UK"
        ),
        LedgerRecord.income(
            id="L2", date=date(2025, 12, 1), amount=Decimal("900"), description="Client"
        ),
    ]
    result = run_import(HEADERS, ROWS, MAPPING, ledger=ledger, suggester=KeywordCategorizer())

    amazon, paypal = result.review.candidates
    assert (amazon.match_type, amazon.action, amazon.matched_record_id) == (
        MatchType.EXACT,
        ImportAction.SKIP,
        "L1",
    )
    assert (paypal.match_type, paypal.action) == (MatchType.NEW, ImportAction.IMPORT)
    assert amazon.category == "OFFICE_COSTS"
    assert paypal.category == "SALES"

    assert [c.id for c in result.review.final_import_set()] == [paypal.id]
    assert result.review.summary().formatted_expense_total == "0.00"

    report = result.report
    assert [(i.type, i.severity) for i in report.issues] == [
        (IssueType.POTENTIAL_DUPLICATES, IssueSeverity.HIGH)
    ]
    assert (report.existing_income_count, report.existing_expense_count) == (1, 1)

    # The user decides to re-import the duplicate anyway.
    review = result.review.set_action(amazon.id, ImportAction.IMPORT)
    assert review.summary().formatted_expense_total == "45.99"


def test_detected_bank_layout_runs_without_a_mapping():
    headers = ["Date", "Type", "Description", "Money out", "Money in", "Balance"]
    rows = [
        ["03/01/2026", "DEB", "TRAINLINE", "35.20", "", "964.80"],
        ["28/03/2026", "CR", "INVOICE 12", "", "1,500.00", "2464.80"],
    ]
    result = run_import(headers, rows, suggester=KeywordCategorizer())

    assert result.bank_format is BankFormat.BARCLAYS
    assert result.mapping.amount_interpretation is AmountInterpretation.SEPARATE_COLUMNS
    trainline, invoice = result.batch.transactions
    assert trainline.amount == Decimal("-35.20")
    assert trainline.suggested_category == "TRAVEL"
    assert invoice.amount == Decimal("1500.00")

    (gaps,) = result.report.issues
    assert gaps.type is IssueType.DATE_GAPS
    assert gaps.sample_details == ("2026-02",)


def test_unknown_layout_needs_a_date_format():
    with pytest.raises(MappingIncompleteError):
        run_import(["Posted", "Narrative", "Value"], [["15/01/2026", "X", "1.00"]])


def test_wizard_built_mapping_feeds_the_pipeline():
    headers = ["Posted", "Narrative", "Paid in", "Paid out"]
    rows = [["15/01/2026", "CLIENT", "10.00", ""], ["16/01/2026", "SHOP", "", "4.50"]]
    wizard = (
        MappingWizard.start()
        .set_column(ColumnRole.DATE, "Posted")
        .set_column(ColumnRole.DESCRIPTION, "Narrative")
        .set_column(ColumnRole.INCOME, "Paid in")
        .set_column(ColumnRole.EXPENSE, "Paid out")
        .set_date_format("dd/MM/yyyy")
        .next_step()
        .select_interpretation(AmountInterpretation.SEPARATE_COLUMNS)
        .next_step()
        .confirm_mapping()
    )
    result = run_import(headers, rows, wizard.mapping, date_gaps=[])
    assert [t.amount for t in result.batch.transactions] == [Decimal("10.00"), Decimal("-4.50")]
    assert result.review.is_all_new()
