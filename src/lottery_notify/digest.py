"""ROI evaluation and digest message rendering."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from .models import Opportunity

IN_WINDOW_TITLE = "今日公開抽籤申購中股票"
UPCOMING_TITLE = "即將公開抽籤申購股票"


def compute_roi(close: Decimal, price: Optional[Decimal]) -> Optional[Decimal]:
    """Percentage gain of ``close`` over the underwriting ``price``."""

    if price is None or price == 0:
        return None
    return (close - price) / price * 100


def _md(value: Optional[date]) -> str:
    return value.strftime("%m/%d") if value else "--"


def _pct(roi: Decimal) -> str:
    return str(roi.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def render_in_window(item: Opportunity) -> str:
    record = item.record
    return (
        f"{record.stock_code} {record.security_name or ''}\n"
        f"抽籤日 {_md(record.draw_date)}   價差 +{_pct(item.roi)}%\n"
        f"最新價 {item.quote.close}    承銷價 {record.actual_underwrite_price}"
    )


def render_upcoming(item: Opportunity) -> str:
    record = item.record
    return (
        f"{record.stock_code} {record.security_name or ''}\n"
        f"申購開始日 {_md(record.subscribe_start_date)}\n"
        f"申購結束日 {_md(record.subscribe_end_date)}\n"
        f"抽籤日 {_md(record.draw_date)}    價差 +{_pct(item.roi)}%\n"
        f"最新價 {item.quote.close}    承銷價 {record.actual_underwrite_price}"
    )


@dataclass
class Digest:
    """Opportunities split into the two broadcast sections."""

    in_window: list[Opportunity] = field(default_factory=list)
    upcoming: list[Opportunity] = field(default_factory=list)

    @classmethod
    def from_opportunities(cls, opportunities: Iterable[Opportunity]) -> "Digest":
        digest = cls()
        for item in opportunities:
            if item.record.is_in_subscribe_period:
                digest.in_window.append(item)
            else:
                digest.upcoming.append(item)
        return digest

    def __len__(self) -> int:
        return len(self.in_window) + len(self.upcoming)

    def messages(self) -> list[str]:
        """Render one message per non-empty section."""

        rendered = []
        if self.in_window:
            entries = [render_in_window(item) for item in self.in_window]
            rendered.append("\n\n".join([IN_WINDOW_TITLE, *entries]))
        if self.upcoming:
            entries = [render_upcoming(item) for item in self.upcoming]
            rendered.append("\n\n".join([UPCOMING_TITLE, *entries]))
        return rendered


__all__ = ["Digest", "compute_roi", "render_in_window", "render_upcoming"]
