"""
Formatting and coercion helper tests.
"""
from datetime import date, datetime

import pytest

from inventory_report.core.utils import (
    default_billing_date,
    format_currency,
    format_date,
    format_number,
    get_filename_date,
    round_half_up,
    to_number,
)


# ===================== NUMBERS =====================


@pytest.mark.parametrize(
    "value, expected",
    [
        (10, 10.0),
        (2.5, 2.5),
        ("12.5", 12.5),
        ("  7 ", 7.0),
        ("", 0.0),
        ("abc", 0.0),
        ("1,234", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ([1], 0.0),
    ],
)
def test_to_number_is_lenient(value, expected):
    assert to_number(value) == expected


def test_round_half_up_matches_display_rounding():
    assert round_half_up(1234.5) == 1235
    assert round_half_up(2.5) == 3
    assert round_half_up(1234.49) == 1234
    assert round_half_up(0) == 0


def test_format_number_groups_thousands():
    assert format_number(1234.5) == "1,234.50"
    assert format_number(0) == "0.00"
    assert format_number("x") == "0.00"
    assert format_number(1000000) == "1,000,000.00"


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-5) == "-$5.00"
    assert format_currency(None) == "$0.00"


# ===================== DATES =====================


def test_format_date_day_month_year():
    assert format_date(date(2024, 3, 15)) == "15-03-2024"
    assert format_date(datetime(2024, 3, 15, 10, 30)) == "15-03-2024"
    assert format_date("2024-03-15") == "15-03-2024"


def test_format_date_missing_and_unparseable():
    assert format_date(None) == ""
    assert format_date("") == ""
    assert format_date("next week") == "next week"


def test_filename_date_token():
    assert get_filename_date("2024-03-15") == "15-03-2024"
    assert get_filename_date(date(2024, 12, 1)) == "01-12-2024"
    assert "/" not in get_filename_date(date(2024, 12, 1))
    assert get_filename_date(None) == "NO-DATE"


def test_default_billing_date_is_today():
    assert default_billing_date() == date.today()
