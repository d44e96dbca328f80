import pytest

from bank_import import (
    AmountInterpretation,
    BankFormat,
    ColumnRole,
    detect_bank_format,
    mapping_for_format,
)
from bank_import.formats import DETECTION_ORDER, LAYOUTS, available_bank_names

BARCLAYS = ["Date", "Type", "Description", "Money out", "Money in", "Balance"]
LLOYDS = [
    "Transaction Date",
    "Transaction Type",
    "Sort Code",
    "Account Number",
    "Transaction Description",
    "Debit Amount",
    "Credit Amount",
    "Balance",
]
NATIONWIDE = ["Date", "Transaction type", "Description", "Paid out", "Paid in", "Balance"]
HSBC = ["Date", "Description", "Paid out", "Paid in", "Balance"]
STARLING = [
    "Date",
    "Counter Party",
    "Reference",
    "Type",
    "Amount (GBP)",
    "Balance (GBP)",
    "Spending Category",
    "Notes",
]
MONZO = [
    "Transaction ID",
    "Date",
    "Time",
    "Type",
    "Name",
    "Emoji",
    "Category",
    "Amount",
    "Currency",
    "Local amount",
    "Local currency",
    "Notes and #tags",
    "Address",
    "Receipt",
    "Description",
    "Category split",
    "Money Out",
    "Money In",
]


def test_barclays_is_detected_with_separate_columns():
    result = detect_bank_format(BARCLAYS)
    assert result.bank_format is BankFormat.BARCLAYS
    assert result.is_known
    mapping = result.mapping
    assert mapping is not None
    assert mapping.income_column == "Money in"
    assert mapping.expense_column == "Money out"
    assert mapping.date_column == "Date"
    assert mapping.description_column == "Description"
    assert mapping.amount_interpretation is AmountInterpretation.SEPARATE_COLUMNS
    assert mapping.date_format == "dd/MM/yyyy"
    assert mapping.is_complete()


def test_unknown_headers_give_no_mapping():
    result = detect_bank_format(["Col1", "Col2", "Col3"])
    assert result.bank_format is BankFormat.UNKNOWN
    assert result.mapping is None
    assert not result.is_known


def test_empty_headers_are_unknown():
    assert detect_bank_format([]).bank_format is BankFormat.UNKNOWN


def test_signature_match_is_case_insensitive_and_keeps_file_spelling():
    headers = ["DATE", "DESCRIPTION", "MONEY OUT", "MONEY IN", "BALANCE"]
    result = detect_bank_format(headers)
    assert result.bank_format is BankFormat.BARCLAYS
    assert result.mapping.income_column == "MONEY IN"
    assert result.mapping.expense_column == "MONEY OUT"


def test_partial_signature_does_not_match():
    assert detect_bank_format(["Date", "Description", "Money out"]).bank_format is (
        BankFormat.UNKNOWN
    )


@pytest.mark.parametrize(
    "headers, expected",
    [
        (LLOYDS, BankFormat.LLOYDS),
        (NATIONWIDE, BankFormat.NATIONWIDE),
        (HSBC, BankFormat.HSBC),
        (STARLING, BankFormat.STARLING),
        (MONZO, BankFormat.MONZO),
    ],
)
def test_other_banks(headers, expected):
    result = detect_bank_format(headers)
    assert result.bank_format is expected
    assert result.mapping is not None
    assert result.mapping.is_complete()


def test_lloyds_mapping_uses_transaction_columns():
    mapping = detect_bank_format(LLOYDS).mapping
    assert mapping.date_column == "Transaction Date"
    assert mapping.description_column == "Transaction Description"
    assert mapping.income_column == "Credit Amount"
    assert mapping.expense_column == "Debit Amount"


def test_nationwide_wins_over_hsbc_and_uses_month_names():
    mapping = detect_bank_format(NATIONWIDE).mapping
    assert mapping.date_format == "dd MMM yyyy"


def test_single_amount_banks_are_standard():
    starling = detect_bank_format(STARLING).mapping
    assert starling.amount_column == "Amount (GBP)"
    assert starling.description_column == "Counter Party"
    assert starling.reference_column == "Reference"
    assert starling.amount_interpretation is AmountInterpretation.STANDARD

    monzo = detect_bank_format(MONZO).mapping
    assert monzo.amount_column == "Amount"
    assert monzo.category_column == "Category"
    assert monzo.description_column == "Name"
    assert monzo.income_column is None


def test_mapping_for_format_without_headers_uses_canonical_names():
    mapping = mapping_for_format(BankFormat.BARCLAYS)
    assert mapping.column_for(ColumnRole.INCOME) == "Money in"
    assert mapping_for_format(BankFormat.UNKNOWN) is None


def test_every_known_format_has_a_layout():
    assert set(DETECTION_ORDER) == set(LAYOUTS)
    assert BankFormat.UNKNOWN not in LAYOUTS
    assert "Barclays" in available_bank_names()
