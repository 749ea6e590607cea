"""
Cell interpretation for decoded spreadsheet values.
Turns untyped cells into calendar dates and exact decimal amounts,
following Brazilian numeric/date conventions with an ISO fallback.

Both parsers signal failure by returning None and never raise.
"""
import math
import numbers
import re
import warnings
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

import pandas as pd

# Serial day 0 in spreadsheet date systems (accounts for the 1900 leap-year bug)
SPREADSHEET_EPOCH = date(1899, 12, 30)

# (pattern, group order) - order names which captured group is day/month/year
DATE_PATTERNS = [
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), "dmy"),  # DD/MM/YYYY
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), "dmy"),  # DD-MM-YYYY
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), "ymd"),  # YYYY-MM-DD
]

CURRENCY_MARKERS = re.compile(r"R\$|[R$]|\s")
NEGATIVE_MARKERS = re.compile(r"[-()]")
UNSIGNED_DECIMAL = re.compile(r"^(\d+(\.\d*)?|\.\d+)$")


class CellKind(str, Enum):
    """Variants a decoded spreadsheet cell can take."""
    ABSENT = "absent"
    NUMERIC = "numeric"
    TEXT = "text"
    TEMPORAL = "temporal"


def cell_kind(value: Any) -> CellKind:
    """
    Classify a raw cell value.

    Args:
        value: Cell value as produced by the spreadsheet decoder

    Returns:
        The CellKind variant of the value
    """
    if value is None or value is pd.NaT or value is pd.NA:
        return CellKind.ABSENT
    if isinstance(value, bool):
        return CellKind.TEXT
    if isinstance(value, (datetime, date)):
        return CellKind.TEMPORAL
    if isinstance(value, Decimal):
        return CellKind.ABSENT if value.is_nan() else CellKind.NUMERIC
    if isinstance(value, numbers.Real):
        return CellKind.ABSENT if math.isnan(float(value)) else CellKind.NUMERIC
    return CellKind.TEXT


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a numeric cell to Decimal without binary float artifacts.
    Floats go through their shortest round-trip repr, so 10.01 stays 10.01.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, numbers.Integral):
        result = Decimal(int(value))
    else:
        result = Decimal(repr(float(value)))
    if not result.is_finite():
        return None
    return result


def _date_from_serial(value: Any) -> Optional[date]:
    serial = float(value)
    # A zero serial is an empty date cell
    if serial == 0 or not math.isfinite(serial):
        return None
    try:
        return SPREADSHEET_EPOCH + timedelta(days=math.floor(serial))
    except (OverflowError, ValueError):
        return None


def _date_from_text(text: str) -> Optional[date]:
    for pattern, order in DATE_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue
        first, second, third = (int(part) for part in match.groups())
        try:
            if order == "ymd":
                return date(first, second, third)
            return date(third, second, first)
        except ValueError:
            # Matched the shape but not a real calendar date
            break

    try:
        with warnings.catch_warnings():
            # pandas warns when it falls back to dateutil for a single value
            warnings.simplefilter("ignore", UserWarning)
            parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def parse_date(value: Any) -> Optional[date]:
    """
    Interpret a cell as a calendar date.

    Numeric cells are spreadsheet serial day counts (0 counts as empty); text is tried as
    DD/MM/YYYY, DD-MM-YYYY and YYYY-MM-DD before a generic parse.

    Args:
        value: Raw cell value

    Returns:
        Parsed date or None if the cell is not a valid date
    """
    kind = cell_kind(value)
    if kind is CellKind.ABSENT:
        return None
    if kind is CellKind.TEMPORAL:
        return value.date() if isinstance(value, datetime) else value
    if kind is CellKind.NUMERIC:
        return _date_from_serial(value)

    text = str(value).strip()
    if not text:
        return None
    return _date_from_text(text)


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Interpret a cell as a signed monetary amount.

    Text follows the Brazilian convention: "." groups thousands and ","
    is the decimal separator. A "-" or "(" anywhere marks a negative value.

    Args:
        value: Raw cell value

    Returns:
        Exact Decimal amount or None if the cell is not a valid amount
    """
    kind = cell_kind(value)
    if kind is CellKind.NUMERIC:
        return to_decimal(value)
    if kind is not CellKind.TEXT:
        return None

    text = str(value).strip()
    if not text:
        return None

    normalized = CURRENCY_MARKERS.sub("", text)
    normalized = normalized.replace(".", "").replace(",", ".", 1)

    is_negative = "-" in normalized or "(" in normalized
    normalized = NEGATIVE_MARKERS.sub("", normalized)

    if not UNSIGNED_DECIMAL.match(normalized):
        return None
    try:
        amount = Decimal(normalized)
    except InvalidOperation:
        return None
    return -amount if is_negative else amount
