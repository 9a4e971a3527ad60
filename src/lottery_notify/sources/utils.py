"""Field-level parsing helpers for the public offering CSV."""
from __future__ import annotations

import csv
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

INTEGER = re.compile(r"[+-]?\d+", re.ASCII)
DECIMAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)

ROC_YEAR_OFFSET = 1911


def split_csv_line(line: str) -> list[str]:
    """Split one physical CSV line into trimmed field values.

    Quoted fields may contain commas and ``""`` escapes. An unterminated quote
    runs to the end of the line. A quote inside an unquoted field is kept as a
    literal character.
    """

    try:
        row = next(csv.reader([line], skipinitialspace=True), [])
    except csv.Error:
        row = line.split(",")
    if not row:
        return [""]
    return [value.strip() for value in row]


def _strip_number(value: str | None) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.replace(",", "").strip()
    return cleaned or None


def _parse_bounded(value: str | None, bounds: tuple[int, int]) -> Optional[int]:
    cleaned = _strip_number(value)
    if cleaned is None or not INTEGER.fullmatch(cleaned):
        return None
    try:
        number = int(cleaned)
    except ValueError:
        return None
    low, high = bounds
    if not low <= number <= high:
        return None
    return number


def parse_int(value: str | None) -> Optional[int]:
    """Parse a 32-bit integer with optional thousands separators."""

    return _parse_bounded(value, INT32_RANGE)


def parse_long(value: str | None) -> Optional[int]:
    """Parse a 64-bit integer with optional thousands separators."""

    return _parse_bounded(value, INT64_RANGE)


def parse_decimal(value: str | None) -> Optional[Decimal]:
    """Parse an invariant-culture decimal such as ``1,234.50``."""

    cleaned = _strip_number(value)
    if cleaned is None or not DECIMAL.fullmatch(cleaned):
        return None
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def parse_text(value: str | None) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def parse_roc_date(value: str | None) -> Optional[date]:
    """Parse a minguo date such as ``115/02/25`` (or ``115-02-25``)."""

    if value is None:
        return None
    parts = [part.strip() for part in value.replace("-", "/").split("/")]
    parts = [part for part in parts if part]
    if len(parts) != 3 or not all(INTEGER.fullmatch(part) for part in parts):
        return None
    try:
        roc_year, month, day = (int(part) for part in parts)
        return date(roc_year + ROC_YEAR_OFFSET, month, day)
    except (ValueError, OverflowError):
        return None


__all__ = [
    "parse_decimal",
    "parse_int",
    "parse_long",
    "parse_roc_date",
    "parse_text",
    "split_csv_line",
]
