"""Command line entry point for the public offering notification job."""
from __future__ import annotations

import argparse
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

import requests

from .config import Settings
from .digest import Digest, compute_roi
from .logging_utils import configure_logging
from .market_data import FinMindClient, MarketDataError
from .models import Opportunity, PublicOfferingRecord
from .notifier import LineBroadcaster
from .sources import PublicFormSource

LOGGER = logging.getLogger(__name__)


def today_in(timezone: str) -> date:
    """Return the civil date in ``timezone``."""

    return datetime.now(ZoneInfo(timezone)).date()


def evaluate_offering(
    record: PublicOfferingRecord,
    client: FinMindClient,
    today: date,
    threshold: Decimal,
) -> Optional[Opportunity]:
    """Look up the latest close for ``record`` and keep it if the ROI clears ``threshold``."""

    LOGGER.info(
        "Stock=%s Name=%s DrawDate=%s Rate=%s",
        record.stock_code,
        record.security_name,
        record.draw_date,
        record.winning_rate,
    )
    quote = client.latest_close(record.stock_code, today)
    if quote is None:
        return None
    roi = compute_roi(quote.close, record.actual_underwrite_price)
    if roi is None:
        LOGGER.warning("Stock=%s has no actual underwrite price; skipped", record.stock_code)
        return None
    if roi < threshold:
        LOGGER.debug("Stock=%s ROI %.2f%% below threshold", record.stock_code, roi)
        return None
    return Opportunity(record=record, quote=quote, roi=roi)


def gather_opportunities(
    records: Iterable[PublicOfferingRecord],
    client: FinMindClient,
    today: date,
    threshold: Decimal,
) -> list[Opportunity]:
    """Evaluate every record, skipping those whose price lookup fails."""

    opportunities: list[Opportunity] = []
    for record in records:
        try:
            opportunity = evaluate_offering(record, client, today, threshold)
        except (requests.RequestException, MarketDataError, ValueError):
            LOGGER.exception("Price lookup failed for %s (row %d)", record.stock_code, record.row_number)
            continue
        if opportunity is not None:
            opportunities.append(opportunity)
    return opportunities


def run_job(
    settings: Settings,
    today: date | None = None,
    *,
    dry_run: bool = False,
    source: PublicFormSource | None = None,
    client: FinMindClient | None = None,
    broadcaster: LineBroadcaster | None = None,
) -> Digest:
    """Run the notification job once and return the digest that was built."""

    today = today or today_in(settings.timezone)
    source = source or PublicFormSource(
        settings.csv_url, encoding=settings.csv_encoding, timeout=settings.http_timeout
    )
    records = source.fetch_offerings(today)
    if not records:
        LOGGER.info("No subscription stocks found today.")
        return Digest()
    LOGGER.info("Parsed rows (4-digit stock code only): %d", len(records))

    client = client or FinMindClient(
        settings.finmind_base_url,
        token=settings.finmind_token,
        lookback_days=settings.price_lookback_days,
        timeout=settings.http_timeout,
    )
    digest = Digest.from_opportunities(
        gather_opportunities(records, client, today, settings.roi_threshold)
    )
    messages = digest.messages()
    if not messages:
        LOGGER.info("No offering cleared the %s%% ROI threshold.", settings.roi_threshold)
        return digest

    if dry_run:
        for message in messages:
            LOGGER.info("Dry run, not broadcasting:\n%s", message)
        return digest

    broadcaster = broadcaster or LineBroadcaster(
        settings.line_base_url, token=settings.line_token, timeout=settings.http_timeout
    )
    for message in messages:
        broadcaster.broadcast_text(message)
    LOGGER.info("Job done.")
    return digest


def parse_args(args: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging output",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the digest instead of broadcasting it",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Evaluate offerings as of this date (YYYY-MM-DD)",
    )
    return parser.parse_args(args=args)


def main(argv: Sequence[str] | None = None) -> int:
    options = parse_args(argv)
    configure_logging(verbose=options.verbose)
    try:
        settings = Settings.load()
    except RuntimeError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 1
    try:
        run_job(settings, options.date, dry_run=options.dry_run)
    except Exception:
        LOGGER.exception("Notification job failed")
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
