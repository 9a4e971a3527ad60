"""Public offering (公開抽籤) CSV source.

The exchange publishes the lottery table as a loosely structured CSV: a few
title lines precede the header row, the header names are in Chinese, dates use
the minguo calendar and numbers carry thousands separators. This module turns
that text into ordered :class:`~lottery_notify.models.PublicOfferingRecord`
values.
"""
from __future__ import annotations

import codecs
import logging
import re
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence

import requests

from ..models import PublicOfferingRecord, in_subscribe_period
from .base import OfferingSource
from .utils import (
    parse_decimal,
    parse_int,
    parse_long,
    parse_roc_date,
    parse_text,
    split_csv_line,
)

LOGGER = logging.getLogger(__name__)

STOCK_CODE_HEADER = "證券代號"
SUBSCRIBE_END_HEADER = "申購結束日"

STOCK_CODE = re.compile(r"\d{4}", re.ASCII)
LINE_BREAK = re.compile(r"\r\n|\r|\n")

# Header text -> (record attribute, coercion). The stock code and the
# subscription end date are read first by build_record and are not listed.
OPTIONAL_FIELDS: tuple[tuple[str, str, Callable[[Optional[str]], Any]], ...] = (
    ("序號", "sequence_number", parse_int),
    ("抽籤日期", "draw_date", parse_roc_date),
    ("證券名稱", "security_name", parse_text),
    ("發行市場", "market", parse_text),
    ("申購開始日", "subscribe_start_date", parse_roc_date),
    ("承銷股數", "underwrite_shares", parse_long),
    ("實際承銷股數", "actual_underwrite_shares", parse_long),
    ("承銷價(元)", "underwrite_price", parse_decimal),
    ("實際承銷價(元)", "actual_underwrite_price", parse_decimal),
    ("撥券日期(上市、上櫃日期)", "allocate_date", parse_roc_date),
    ("主辦券商", "lead_underwriter", parse_text),
    ("申購股數", "subscribe_shares", parse_long),
    ("總承銷金額(元)", "total_amount", parse_decimal),
    ("總合格件", "total_qualified", parse_long),
    ("中籤率(%)", "winning_rate", parse_decimal),
    ("取消公開抽籤", "cancel_remark", parse_text),
)

DEFAULT_ENCODING = "cp950"

_BOMS = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


@dataclass(frozen=True)
class HeaderIndex:
    """Case-insensitive mapping of header text to column position."""

    positions: Mapping[str, int]

    @classmethod
    def from_fields(cls, fields: Sequence[str]) -> "HeaderIndex":
        positions: dict[str, int] = {}
        for idx, header in enumerate(fields):
            key = header.strip().casefold()
            if key and key not in positions:
                positions[key] = idx
        return cls(MappingProxyType(positions))

    def __contains__(self, header: object) -> bool:
        return isinstance(header, str) and header.casefold() in self.positions

    def position(self, header: str) -> Optional[int]:
        return self.positions.get(header.casefold())

    def value(self, fields: Sequence[str], header: str) -> Optional[str]:
        """Return the raw value of ``header`` in ``fields`` or ``None``."""

        idx = self.position(header)
        if idx is None or idx >= len(fields):
            return None
        return fields[idx].strip()


def locate_header(lines: Iterator[str]) -> tuple[Optional[HeaderIndex], int]:
    """Consume ``lines`` up to and including the header row.

    Returns the header index (``None`` when no usable header was found) and
    the number of lines consumed.
    """

    consumed = 0
    for line in lines:
        consumed += 1
        if STOCK_CODE_HEADER not in line:
            continue
        index = HeaderIndex.from_fields(split_csv_line(line))
        LOGGER.info("CSV headers: %s", ", ".join(index.positions))
        if STOCK_CODE_HEADER not in index:
            LOGGER.error("CSV missing required header: %s", STOCK_CODE_HEADER)
            return None, consumed
        return index, consumed
    LOGGER.warning("CSV header row containing %s not found", STOCK_CODE_HEADER)
    return None, consumed


def build_record(
    line: str, row_number: int, index: HeaderIndex, today: date
) -> Optional[PublicOfferingRecord]:
    """Build a record from one data line, or ``None`` when the row is not eligible."""

    fields = split_csv_line(line)

    stock_code = parse_text(index.value(fields, STOCK_CODE_HEADER))
    if stock_code is None or not STOCK_CODE.fullmatch(stock_code):
        LOGGER.debug("Row %d skipped: stock code %r is not 4 digits", row_number, stock_code)
        return None

    subscribe_end_date = parse_roc_date(index.value(fields, SUBSCRIBE_END_HEADER))
    if subscribe_end_date is not None and subscribe_end_date <= today:
        LOGGER.debug(
            "Row %d skipped: subscription for %s ended %s", row_number, stock_code, subscribe_end_date
        )
        return None

    values = {
        attribute: coerce(index.value(fields, header))
        for header, attribute, coerce in OPTIONAL_FIELDS
    }
    return PublicOfferingRecord(
        row_number=row_number,
        stock_code=stock_code,
        subscribe_end_date=subscribe_end_date,
        is_in_subscribe_period=in_subscribe_period(
            values["subscribe_start_date"], subscribe_end_date, today
        ),
        **values,
    )


def _draw_date_key(record: PublicOfferingRecord) -> tuple[bool, date]:
    # Absent draw dates sort first.
    return record.draw_date is not None, record.draw_date or date.min


def parse_public_form(lines: Iterable[str], today: date) -> list[PublicOfferingRecord]:
    """Parse decoded CSV lines into eligible records ordered by draw date."""

    iterator = iter(lines)
    index, row_number = locate_header(iterator)
    if index is None:
        return []

    records: list[PublicOfferingRecord] = []
    for line in iterator:
        row_number += 1
        if not line.strip():
            continue
        record = build_record(line, row_number, index, today)
        if record is not None:
            records.append(record)

    LOGGER.debug("Accepted %d rows from public offering CSV", len(records))
    return sorted(records, key=_draw_date_key)


def decode_csv(content: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    """Decode the CSV body, honouring a byte order mark when present."""

    for bom, bom_encoding in _BOMS:
        if content.startswith(bom):
            return content.decode(bom_encoding, errors="replace")
    return content.decode(encoding, errors="replace")


def read_public_form(
    content: bytes, today: date, encoding: str = DEFAULT_ENCODING
) -> list[PublicOfferingRecord]:
    # Only CR, LF and CRLF end a line; other separators stay inside cells.
    return parse_public_form(LINE_BREAK.split(decode_csv(content, encoding)), today)


class PublicFormSource(OfferingSource):
    """Downloads and parses the public offering CSV."""

    def __init__(
        self,
        url: str,
        encoding: str = DEFAULT_ENCODING,
        session: requests.Session | None = None,
        timeout: float = 120,
    ) -> None:
        super().__init__(url)
        self.encoding = encoding
        self.timeout = timeout
        self.session = session or requests.Session()

    def resolve_url(self, today: date) -> str:
        return self.url.replace("{year}", str(today.year))

    def _download(self, url: str) -> bytes:
        LOGGER.info("Downloading CSV from: %s", url)
        response = self.session.get(url, headers={"Accept": "text/csv"}, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    def fetch_offerings(self, today: date) -> list[PublicOfferingRecord]:
        content = self._download(self.resolve_url(today))
        return read_public_form(content, today, self.encoding)


__all__ = [
    "HeaderIndex",
    "OPTIONAL_FIELDS",
    "PublicFormSource",
    "STOCK_CODE_HEADER",
    "build_record",
    "decode_csv",
    "locate_header",
    "parse_public_form",
    "read_public_form",
]
