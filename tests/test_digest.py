from __future__ import annotations

from datetime import date
from decimal import Decimal

from lottery_notify.digest import Digest, compute_roi, render_upcoming
from lottery_notify.models import Opportunity, PriceQuote, PublicOfferingRecord


def _opportunity(code: str, in_window: bool, roi: str = "45.5") -> Opportunity:
    record = PublicOfferingRecord(
        row_number=2,
        stock_code=code,
        security_name="測試",
        draw_date=date(2026, 3, 10),
        subscribe_start_date=date(2026, 3, 2),
        subscribe_end_date=date(2026, 3, 4),
        actual_underwrite_price=Decimal("40"),
        is_in_subscribe_period=in_window,
    )
    quote = PriceQuote(stock_code=code, trade_date=date(2026, 2, 27), close=Decimal("58.2"))
    return Opportunity(record=record, quote=quote, roi=Decimal(roi))


def test_compute_roi():
    assert compute_roi(Decimal("52"), Decimal("40")) == Decimal("30")
    assert compute_roi(Decimal("30"), Decimal("40")) == Decimal("-25")
    assert compute_roi(Decimal("52"), None) is None
    assert compute_roi(Decimal("52"), Decimal("0")) is None


def test_digest_partitions_by_subscription_window():
    digest = Digest.from_opportunities(
        [_opportunity("1111", True), _opportunity("2222", False), _opportunity("3333", True)]
    )
    assert [o.record.stock_code for o in digest.in_window] == ["1111", "3333"]
    assert [o.record.stock_code for o in digest.upcoming] == ["2222"]
    assert len(digest) == 3


def test_messages_render_each_non_empty_section():
    digest = Digest.from_opportunities([_opportunity("1111", True)])
    messages = digest.messages()
    assert len(messages) == 1
    assert messages[0] == (
        "今日公開抽籤申購中股票\n\n"
        "1111 測試\n"
        "抽籤日 03/10   價差 +46%\n"
        "最新價 58.2    承銷價 40"
    )


def test_render_upcoming_includes_window_dates():
    text = render_upcoming(_opportunity("2222", False, roi="30.4"))
    assert "申購開始日 03/02" in text
    assert "申購結束日 03/04" in text
    assert "價差 +30%" in text


def test_empty_digest_has_no_messages():
    assert Digest().messages() == []
