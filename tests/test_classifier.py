from decimal import Decimal

import pytest

from bank_import import (
    AmountInterpretation,
    CategorySuggestion,
    ClassificationError,
    ClassificationErrorKind,
    ColumnMapping,
    ColumnRole,
    ImportSettings,
    MappingIncompleteError,
    ParseError,
    TransactionType,
    classify_row,
    classify_rows,
)

HEADERS = ["Date", "Description", "Amount"]
MAPPING = ColumnMapping(
    date_column="Date",
    description_column="Description",
    amount_column="Amount",
    date_format="dd/MM/yyyy",
)

ROWS = [
    ["15/01/2026", "AMAZON UK", "-45.99"],
    ["14/01/2026", "PAYPAL", "1250.00"],
    ["16/01/2026", "TESCO", "(12.30)"],
    ["17/01/2026", "CLIENT A", "1,000.00"],
    ["18/01/2026", "REFUND", "0.00"],
]

SEPARATE_HEADERS = ["Date", "Description", "Money in", "Money out"]
SEPARATE_MAPPING = ColumnMapping(
    date_column="Date",
    description_column="Description",
    income_column="Money in",
    expense_column="Money out",
    date_format="dd/MM/yyyy",
    amount_interpretation=AmountInterpretation.SEPARATE_COLUMNS,
)


class _FixedSuggester:
    def __init__(self) -> None:
        self.calls: list[tuple[str, TransactionType]] = []

    def suggest(self, description, transaction_type):
        self.calls.append((description, transaction_type))
        return CategorySuggestion("TRAVEL", 0.9)


def test_standard_interpretation():
    batch = classify_rows(HEADERS, ROWS[:2], MAPPING)
    assert not batch.errors
    amazon, paypal = batch.transactions
    assert amazon.classification is TransactionType.EXPENSE
    assert amazon.amount == Decimal("-45.99")
    assert amazon.absolute_amount == Decimal("45.99")
    assert paypal.classification is TransactionType.INCOME
    assert paypal.amount == Decimal("1250.00")


def test_inverted_interpretation_swaps_types_and_signs():
    inverted = MAPPING.with_interpretation(AmountInterpretation.INVERTED)
    amazon, paypal = classify_rows(HEADERS, ROWS[:2], inverted).transactions
    assert amazon.classification is TransactionType.INCOME
    assert amazon.amount == Decimal("45.99")
    assert paypal.classification is TransactionType.EXPENSE
    assert paypal.amount == Decimal("-1250.00")


def test_standard_and_inverted_counts_are_complementary():
    nonzero = ROWS[:4]
    standard = classify_rows(HEADERS, nonzero, MAPPING)
    inverted = classify_rows(
        HEADERS, nonzero, MAPPING.with_interpretation(AmountInterpretation.INVERTED)
    )
    assert inverted.income_count == standard.expense_count
    assert inverted.expense_count == standard.income_count


@pytest.mark.parametrize(
    "interpretation", [AmountInterpretation.STANDARD, AmountInterpretation.INVERTED]
)
def test_zero_amount_is_income(interpretation):
    txn = classify_row(HEADERS, ROWS[4], MAPPING.with_interpretation(interpretation))
    assert txn.classification is TransactionType.INCOME
    assert txn.amount == 0
    assert not txn.amount.is_signed()


def test_separate_columns():
    rows = [
        ["15/01/2026", "CLIENT", "100.00", ""],
        ["16/01/2026", "RENT", "", "500.00"],
        ["17/01/2026", "CARD", " ", "-20.00"],
    ]
    batch = classify_rows(SEPARATE_HEADERS, rows, SEPARATE_MAPPING)
    assert not batch.errors
    client, rent, card = batch.transactions
    assert (client.classification, client.amount) == (TransactionType.INCOME, Decimal("100.00"))
    assert (rent.classification, rent.amount) == (TransactionType.EXPENSE, Decimal("-500.00"))
    assert (card.classification, card.amount) == (TransactionType.EXPENSE, Decimal("-20.00"))


@pytest.mark.parametrize("cells", [["", ""], ["10.00", "5.00"]])
def test_separate_columns_need_exactly_one_value(cells):
    batch = classify_rows(SEPARATE_HEADERS, [["15/01/2026", "X", *cells]], SEPARATE_MAPPING)
    assert not batch.transactions
    (err,) = batch.errors
    assert err.kind is ClassificationErrorKind.MISSING_REQUIRED_FIELD


def test_row_errors_do_not_abort_the_batch():
    rows = [
        ["15/01/2026", "AMAZON UK", "-45.99"],
        ["2026-01-15", "BAD DATE", "1.00"],
        ["16/01/2026", "BAD AMOUNT", "abc"],
        ["17/01/2026", "", "1.00"],
        ["18/01/2026", "SHORT ROW"],
        ["19/01/2026", "NO AMOUNT", "  "],
        ["14/01/2026", "PAYPAL", "1250.00"],
    ]
    batch = classify_rows(HEADERS, rows, MAPPING)

    assert [t.description for t in batch.transactions] == ["AMAZON UK", "PAYPAL"]
    assert [t.row_index for t in batch.transactions] == [0, 6]
    assert batch.has_errors
    assert [(e.row_index, e.kind) for e in batch.errors] == [
        (1, ClassificationErrorKind.UNPARSEABLE_DATE),
        (2, ClassificationErrorKind.UNPARSEABLE_AMOUNT),
        (3, ClassificationErrorKind.MISSING_REQUIRED_FIELD),
        (4, ClassificationErrorKind.MISSING_REQUIRED_FIELD),
        (5, ClassificationErrorKind.MISSING_REQUIRED_FIELD),
    ]


def test_oversized_amount_is_a_row_error():
    rows = [
        ["15/01/2026", "AMAZON UK", "-45.99"],
        ["16/01/2026", "TYPO", "1" * 27],
        ["14/01/2026", "PAYPAL", "1250.00"],
    ]
    batch = classify_rows(HEADERS, rows, MAPPING)

    assert [t.description for t in batch.transactions] == ["AMAZON UK", "PAYPAL"]
    (error,) = batch.errors
    assert (error.row_index, error.kind, error.column) == (
        1,
        ClassificationErrorKind.UNPARSEABLE_AMOUNT,
        "Amount",
    )


def test_errors_carry_column_and_cause():
    with pytest.raises(ClassificationError) as date_err:
        classify_row(HEADERS, ["2026-01-15", "X", "1.00"], MAPPING, row_index=7)
    assert date_err.value.row_index == 7
    assert date_err.value.column == "Date"
    assert isinstance(date_err.value.__cause__, ValueError)

    with pytest.raises(ClassificationError) as amount_err:
        classify_row(HEADERS, ["15/01/2026", "X", "abc"], MAPPING)
    assert amount_err.value.kind is ClassificationErrorKind.UNPARSEABLE_AMOUNT
    assert amount_err.value.column == "Amount"
    assert isinstance(amount_err.value.__cause__, ParseError)


def test_incomplete_mapping_is_fatal():
    incomplete = MAPPING.with_date_format(None)
    with pytest.raises(MappingIncompleteError) as exc:
        classify_rows(HEADERS, ROWS, incomplete)
    assert exc.value.missing == ("date format",)


def test_mapping_with_two_amount_sources_is_fatal():
    ambiguous = MAPPING.assign(ColumnRole.INCOME, "Money in").assign(
        ColumnRole.EXPENSE, "Money out"
    )
    assert not ambiguous.is_complete()
    with pytest.raises(MappingIncompleteError) as exc:
        classify_rows(HEADERS + ["Money in", "Money out"], [], ambiguous)
    assert exc.value.missing == ("more than one amount source",)


def test_mapping_naming_absent_header_is_fatal():
    with pytest.raises(MappingIncompleteError) as exc:
        classify_rows(["Date", "Memo", "Amount"], ROWS, MAPPING)
    assert "'Description'" in exc.value.missing[0]


def test_header_lookup_ignores_case_and_padding():
    batch = classify_rows([" date ", "DESCRIPTION", "amount"], ROWS[:1], MAPPING)
    assert len(batch.transactions) == 1


def test_category_column_wins_over_suggester():
    headers = [*HEADERS, "Category"]
    mapping = MAPPING.assign(ColumnRole.CATEGORY, "Category")
    suggester = _FixedSuggester()
    rows = [
        ["15/01/2026", "AMAZON UK", "-45.99", "Office"],
        ["16/01/2026", "UBER", "-12.00", ""],
    ]
    amazon, uber = classify_rows(headers, rows, mapping, suggester=suggester).transactions

    assert (amazon.suggested_category, amazon.confidence) == ("Office", None)
    assert (uber.suggested_category, uber.confidence) == ("TRAVEL", 0.9)
    assert suggester.calls == [("UBER", TransactionType.EXPENSE)]


def test_no_suggester_leaves_category_empty():
    (txn,) = classify_rows(HEADERS, ROWS[:1], MAPPING).transactions
    assert txn.suggested_category is None
    assert txn.confidence is None


def test_thousands_separator_setting():
    settings = ImportSettings(thousands_separator="'")
    txn = classify_row(HEADERS, ["15/01/2026", "X", "1'250.00"], MAPPING, settings=settings)
    assert txn.amount == Decimal("1250.00")


def test_ids_are_deterministic_and_unique():
    first = classify_rows(HEADERS, ROWS, MAPPING).transactions
    second = classify_rows(HEADERS, ROWS, MAPPING).transactions
    assert [t.id for t in first] == [t.id for t in second]
    assert len({t.id for t in first}) == len(first)

    same_content = classify_rows(HEADERS, [ROWS[0], ROWS[0]], MAPPING).transactions
    assert same_content[0].id != same_content[1].id


def test_conflicting_mapping_logs_warning(pkg_caplog):
    conflicting = MAPPING.assign(ColumnRole.DESCRIPTION, "Date")
    batch = classify_rows(HEADERS, [["15/01/2026", "ignored", "1.00"]], conflicting)
    assert batch.transactions[0].description == "15/01/2026"
    assert any(
        r.levelname == "WARNING" and "several roles" in r.getMessage() for r in pkg_caplog.records
    )
