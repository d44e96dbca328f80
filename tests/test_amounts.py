from decimal import Decimal

import pytest

from bank_import import ParseError, ParseErrorKind, format_amount, format_signed, parse_amount


def test_parenthesised_value_is_negative():
    assert parse_amount("(45.99)") == Decimal("-45.99")


def test_thousands_separator_is_stripped():
    assert parse_amount("1,250.00") == Decimal("1250.00")


@pytest.mark.parametrize("raw", ["", "   ", "abc", "12abc", "1.2.3", None])
def test_not_numeric(raw):
    with pytest.raises(ParseError) as exc:
        parse_amount(raw)
    assert exc.value.kind is ParseErrorKind.NOT_NUMERIC
    assert exc.value.raw == raw


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("-45.99", "-45.99"),
        ("+45.99", "45.99"),
        ("£45.99", "45.99"),
        ("-£1,234.56", "-1234.56"),
        ("£-1,234.56", "-1234.56"),
        ("-(£1,234.56)", "-1234.56"),
        ("(£1,234.56)", "-1234.56"),
        (" 12.5 ", "12.50"),
        (".5", "0.50"),
        ("45.99-", "-45.99"),
        ("£1,234.56 -", "-1234.56"),
    ],
)
def test_sign_and_currency_markers(raw, expected):
    assert parse_amount(raw) == Decimal(expected)


def test_scale_is_at_least_two_places():
    assert str(parse_amount("1250")) == "1250.00"
    assert str(parse_amount("1.5")) == "1.50"
    # Extra precision is kept, not rounded away.
    assert parse_amount("12.345") == Decimal("12.345")


def test_negative_zero_is_plain_zero():
    value = parse_amount("-0.00")
    assert value == 0
    assert not value.is_signed()


def test_custom_thousands_separator():
    assert parse_amount("1'250.00", thousands_separator="'") == Decimal("1250.00")
    with pytest.raises(ParseError):
        parse_amount("1'250.00")


def test_format_amount_drops_sign_and_groups_thousands():
    assert format_amount(Decimal("1250")) == "1,250.00"
    assert format_amount(Decimal("-45.99")) == "45.99"
    assert format_amount(Decimal("1234567.891")) == "1,234,567.89"
    assert format_amount(Decimal("0.005")) == "0.01"


def test_format_signed():
    assert format_signed(Decimal("-45.99")) == "-45.99"
    assert format_signed(Decimal("1250")) == "+1,250.00"
    assert format_signed(Decimal("0")) == "+0.00"


def test_value_too_large_for_cent_precision():
    raw = "1" * 27
    with pytest.raises(ParseError) as exc:
        parse_amount(raw)
    assert exc.value.kind is ParseErrorKind.NOT_NUMERIC
    assert exc.value.raw == raw
