"""Domain models representing public offering data."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True, slots=True)
class PublicOfferingRecord:
    """One lottery-eligible security taken from a single CSV data row."""

    row_number: int
    stock_code: str
    sequence_number: Optional[int] = None
    draw_date: Optional[date] = None
    security_name: Optional[str] = None
    market: Optional[str] = None
    subscribe_start_date: Optional[date] = None
    subscribe_end_date: Optional[date] = None
    underwrite_shares: Optional[int] = None
    actual_underwrite_shares: Optional[int] = None
    underwrite_price: Optional[Decimal] = None
    actual_underwrite_price: Optional[Decimal] = None
    allocate_date: Optional[date] = None
    lead_underwriter: Optional[str] = None
    subscribe_shares: Optional[int] = None
    total_amount: Optional[Decimal] = None
    total_qualified: Optional[int] = None
    winning_rate: Optional[Decimal] = None
    cancel_remark: Optional[str] = None
    is_in_subscribe_period: bool = False


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """Daily closing price for a listed security."""

    stock_code: str
    trade_date: date
    close: Decimal


@dataclass(frozen=True, slots=True)
class Opportunity:
    """An offering whose latest close clears the ROI threshold."""

    record: PublicOfferingRecord
    quote: PriceQuote
    roi: Decimal  # percent


def in_subscribe_period(start: Optional[date], end: Optional[date], today: date) -> bool:
    """Return whether ``today`` falls inside the inclusive subscription window."""

    if start is None or end is None:
        return False
    return start <= today <= end


__all__ = ["Opportunity", "PriceQuote", "PublicOfferingRecord", "in_subscribe_period"]
