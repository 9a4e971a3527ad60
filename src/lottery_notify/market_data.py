"""FinMind market data client."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

import requests
from dateutil import parser

from .models import PriceQuote

LOGGER = logging.getLogger(__name__)

PRICE_DATASET = "TaiwanStockPrice"


class MarketDataError(RuntimeError):
    """Raised when FinMind reports a failure inside a successful response."""


def _parse_bar(stock_code: str, row: dict[str, Any]) -> Optional[PriceQuote]:
    try:
        trade_date = parser.parse(str(row["date"])).date()
        close = Decimal(str(row["close"]))
    except (KeyError, TypeError, ValueError, OverflowError, InvalidOperation):
        LOGGER.debug("Ignoring malformed price row for %s: %r", stock_code, row)
        return None
    if not close.is_finite():
        return None
    return PriceQuote(stock_code=stock_code, trade_date=trade_date, close=close)


def latest_quote(stock_code: str, rows: Iterable[dict[str, Any]]) -> Optional[PriceQuote]:
    """Pick the bar with the most recent trade date."""

    quotes = [quote for quote in (_parse_bar(stock_code, row) for row in rows) if quote]
    if not quotes:
        return None
    return max(quotes, key=lambda quote: quote.trade_date)


class FinMindClient:
    """Looks up recent daily prices through the FinMind v4 data API."""

    DEFAULT_BASE_URL = "https://api.finmindtrade.com"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: str | None = None,
        lookback_days: int = 5,
        session: requests.Session | None = None,
        timeout: float = 120,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.lookback_days = lookback_days
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def fetch_prices(self, stock_code: str, start: date, end: date) -> list[dict[str, Any]]:
        """Return the raw FinMind price rows between ``start`` and ``end``."""

        params = {
            "dataset": PRICE_DATASET,
            "data_id": stock_code,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        }
        LOGGER.debug("Requesting FinMind prices for %s (%s..%s)", stock_code, start, end)
        response = self.session.get(
            f"{self.base_url}/api/v4/data", params=params, timeout=self.timeout
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise MarketDataError(f"FinMind returned a non-object payload for {stock_code}")
        status = payload.get("status", 200)
        if status != 200:
            raise MarketDataError(
                f"FinMind returned status {status} for {stock_code}: {payload.get('msg')}"
            )
        data = payload.get("data") or []
        if not isinstance(data, list):
            raise MarketDataError(f"FinMind returned malformed data for {stock_code}")
        return data

    def latest_close(self, stock_code: str, today: date) -> Optional[PriceQuote]:
        start = today - timedelta(days=self.lookback_days)
        rows = self.fetch_prices(stock_code, start, today)
        quote = latest_quote(stock_code, rows)
        if quote is None:
            LOGGER.warning("FinMind no data. Stock=%s", stock_code)
        return quote


__all__ = ["FinMindClient", "MarketDataError", "latest_quote"]
