from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
import requests

from conftest import TODAY, response
from lottery_notify.market_data import FinMindClient, MarketDataError, latest_quote


def _bars(*pairs):
    return [{"date": d, "stock_id": "2345", "close": c, "open": c} for d, c in pairs]


def test_client_sets_auth_header(session):
    FinMindClient("https://finmind.test/", token="secret", session=session)
    assert session.headers["Authorization"] == "Bearer secret"
    assert session.headers["Accept"] == "application/json"


def test_latest_close_queries_trailing_window(session):
    session.get.return_value = response(
        json_data={"status": 200, "msg": "success", "data": _bars(("2026-02-26", 50.5), ("2026-02-27", 52))}
    )
    client = FinMindClient("https://finmind.test/", session=session, lookback_days=5, timeout=9)

    quote = client.latest_close("2345", TODAY)

    assert quote.trade_date == date(2026, 2, 27)
    assert quote.close == Decimal("52")
    session.get.assert_called_once_with(
        "https://finmind.test/api/v4/data",
        params={
            "dataset": "TaiwanStockPrice",
            "data_id": "2345",
            "start_date": "2026-02-24",
            "end_date": "2026-03-01",
        },
        timeout=9,
    )


def test_latest_close_without_data_returns_none(session):
    session.get.return_value = response(json_data={"status": 200, "data": []})
    assert FinMindClient(session=session).latest_close("2345", TODAY) is None


def test_latest_close_raises_on_http_error(session):
    session.get.return_value = response(500)
    with pytest.raises(requests.HTTPError):
        FinMindClient(session=session).latest_close("2345", TODAY)


def test_latest_close_raises_on_api_status(session):
    session.get.return_value = response(json_data={"status": 402, "msg": "Requests reach the upper limit."})
    with pytest.raises(MarketDataError, match="402"):
        FinMindClient(session=session).latest_close("2345", TODAY)


def test_latest_quote_picks_most_recent_and_skips_bad_rows():
    rows = _bars(("2026-02-27", 60.1), ("2026-02-25", 58)) + [
        {"date": "not-a-date", "close": 99},
        {"date": "2026-02-28"},
    ]
    quote = latest_quote("2345", rows)
    assert quote.trade_date == date(2026, 2, 27)
    assert quote.close == Decimal("60.1")


def test_latest_quote_empty():
    assert latest_quote("2345", []) is None


@pytest.mark.parametrize(
    "payload",
    [["unexpected"], "oops", {"status": 200, "data": {"close": 1}}],
)
def test_malformed_payload_raises_market_data_error(session, payload):
    session.get.return_value = response(json_data=payload)
    with pytest.raises(MarketDataError):
        FinMindClient(session=session).latest_close("2345", TODAY)
