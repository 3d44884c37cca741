# inventory_report/core/utils.py

import math
from datetime import date, datetime
from typing import Any, Optional, Union

DateLike = Union[date, datetime, str, None]

DISPLAY_DATE_FORMAT = "%d-%m-%Y"
FILENAME_DATE_FORMAT = "%d-%m-%Y"
MISSING_FILENAME_DATE = "NO-DATE"


def to_number(value: Any) -> float:
    """
    Leniently converts a quantity/price value to a float.

    Anything that is not a finite number (blank strings, text, None, NaN, inf)
    becomes 0.0. This never raises.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
    return number if math.isfinite(number) else 0.0


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positives, the way the filename total is displayed."""
    return int(math.floor(to_number(value) + 0.5))


def format_number(value: Any) -> str:
    """Two decimals with thousands grouping, e.g. 1234.5 -> '1,234.50'."""
    return f"{to_number(value):,.2f}"


def format_currency(value: Any) -> str:
    amount = to_number(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def _coerce_date(value: DateLike) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def format_date(value: DateLike) -> str:
    """
    Day-month-year display form used on both reports.

    Args:
        value: a date, a datetime or an ISO 'YYYY-MM-DD' string.

    Returns:
        str: e.g. '15-03-2024'. Empty for missing values; strings that are not
        ISO dates are returned unchanged.
    """
    parsed = _coerce_date(value)
    if parsed is None:
        return "" if value is None else str(value).strip()
    return parsed.strftime(DISPLAY_DATE_FORMAT)


def get_filename_date(value: DateLike) -> str:
    """Filename-safe date token for the billing date (no slashes)."""
    parsed = _coerce_date(value)
    if parsed is None:
        return MISSING_FILENAME_DATE
    return parsed.strftime(FILENAME_DATE_FORMAT)


def default_billing_date() -> date:
    return date.today()
