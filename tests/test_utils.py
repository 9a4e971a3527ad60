from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from lottery_notify.sources.utils import (
    parse_decimal,
    parse_int,
    parse_long,
    parse_roc_date,
    parse_text,
    split_csv_line,
)


def test_split_csv_line_handles_quotes_and_escapes():
    assert split_csv_line('a,"b,c","d""e",f') == ["a", "b,c", 'd"e', "f"]


def test_split_csv_line_trims_fields():
    assert split_csv_line('  a , "b" ,c  ') == ["a", "b", "c"]


def test_split_csv_line_unterminated_quote_runs_to_end_of_line():
    assert split_csv_line('a,"b,c,d') == ["a", "b,c,d"]


def test_split_csv_line_keeps_empty_fields():
    assert split_csv_line("a,,b,") == ["a", "", "b", ""]
    assert split_csv_line("") == [""]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("115/02/25", date(2026, 2, 25)),
        ("115-02-25", date(2026, 2, 25)),
        (" 115 / 2 / 5 ", date(2026, 2, 5)),
        ("115//02/25", date(2026, 2, 25)),
        ("113/02/29", date(2024, 2, 29)),
    ],
)
def test_parse_roc_date_valid(raw, expected):
    assert parse_roc_date(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["115/13/01", "115/02/30", "abc/01/01", "", "   ", None, "115/02", "115/02/25/1", "20260225"],
)
def test_parse_roc_date_invalid(raw):
    assert parse_roc_date(raw) is None


def test_parse_decimal():
    assert parse_decimal("1,234.50") == Decimal("1234.50")
    assert parse_decimal("-0.5") == Decimal("-0.5")
    assert parse_decimal(" 36 ") == Decimal("36")
    assert parse_decimal("") is None
    assert parse_decimal(None) is None
    assert parse_decimal("abc") is None
    assert parse_decimal("NaN") is None
    assert parse_decimal("Infinity") is None


def test_parse_int():
    assert parse_int("1,200") == 1200
    assert parse_int(" -7 ") == -7
    assert parse_int("") is None
    assert parse_int("12abc") is None
    assert parse_int("1.5") is None
    assert parse_int("１２") is None
    assert parse_int("2147483648") is None


def test_parse_long_accepts_64_bit_values():
    assert parse_long("2,147,483,648") == 2147483648
    assert parse_long("9223372036854775808") is None
    assert parse_long(None) is None


def test_parse_text():
    assert parse_text("  元大 ") == "元大"
    assert parse_text("   ") is None
    assert parse_text(None) is None


def test_oversized_digit_strings_are_absent():
    assert parse_int("9" * 5000) is None
    assert parse_long("9" * 5000) is None
    assert parse_roc_date("1" * 5000 + "/01/01") is None
    assert parse_roc_date("115/" + "0" * 5000 + "1/01") is None
