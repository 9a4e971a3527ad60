"""FastAPI service hosting the daily notification schedule."""
from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi import FastAPI, Form, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import RedirectResponse

from .config import Settings, parse_schedule_time
from .db import create_db_engine, ensure_schema, get_or_create_schedule, update_schedule
from .logging_utils import configure_logging
from .runner import run_job, today_in
from .sources import PublicFormSource

configure_logging()

LOGGER = logging.getLogger(__name__)

settings = Settings.load()
engine = create_db_engine(settings.database_url)

scheduler = AsyncIOScheduler()
JOB_ID = "daily-notification"
MANUAL_JOB_ID = "manual-notification"

DEFAULT_SCHEDULE = {
    "hour": settings.schedule_hour,
    "minute": settings.schedule_minute,
    "timezone": settings.timezone,
}


def _notification_job() -> None:
    """Wrapper for running the notification job within the scheduler."""

    LOGGER.info("Running scheduled notification job")
    try:
        run_job(settings)
    except Exception:  # pragma: no cover - defensive logging
        LOGGER.exception("Scheduled notification run failed")
    else:
        LOGGER.info("Scheduled notification job completed successfully")


def _configure_job(schedule: dict[str, Any]) -> None:
    """Ensure the APScheduler job reflects the configured schedule."""

    trigger = CronTrigger(
        hour=schedule["hour"],
        minute=schedule["minute"],
        timezone=ZoneInfo(schedule["timezone"]),
    )
    if scheduler.get_job(JOB_ID):
        scheduler.reschedule_job(JOB_ID, trigger=trigger)
        LOGGER.info(
            "Rescheduled daily notification job for %02d:%02d %s",
            schedule["hour"],
            schedule["minute"],
            schedule["timezone"],
        )
    else:
        scheduler.add_job(_notification_job, trigger=trigger, id=JOB_ID, replace_existing=True)
        LOGGER.info(
            "Scheduled daily notification job for %02d:%02d %s",
            schedule["hour"],
            schedule["minute"],
            schedule["timezone"],
        )


def _describe_schedule(schedule: dict[str, Any]) -> dict[str, Any]:
    job = scheduler.get_job(JOB_ID)
    next_run = getattr(job, "next_run_time", None) if job else None
    return {
        "time": f"{int(schedule['hour']):02d}:{int(schedule['minute']):02d}",
        "timezone": schedule["timezone"],
        "next_run": next_run.isoformat() if next_run else None,
    }


app = FastAPI(title="Public Offering Notifications")


@app.on_event("startup")
async def startup_event() -> None:
    LOGGER.info("Starting FastAPI application")
    ensure_schema(engine)
    schedule = get_or_create_schedule(engine, DEFAULT_SCHEDULE)
    _configure_job(schedule)
    if not scheduler.running:
        scheduler.start()
        LOGGER.info("Scheduler started")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    if scheduler.running:
        scheduler.shutdown()
        LOGGER.info("Scheduler shut down")


@app.get("/")
async def status_view() -> dict[str, Any]:
    schedule = get_or_create_schedule(engine, DEFAULT_SCHEDULE)
    return {"schedule": _describe_schedule(schedule), "today": today_in(settings.timezone)}


@app.get("/offerings")
def list_offerings() -> list[dict[str, Any]]:
    """Today's eligible offerings, without price enrichment."""

    source = PublicFormSource(
        settings.csv_url, encoding=settings.csv_encoding, timeout=settings.http_timeout
    )
    records = source.fetch_offerings(today_in(settings.timezone))
    return jsonable_encoder([asdict(record) for record in records])


@app.get("/schedule")
async def show_schedule(updated: bool = False) -> dict[str, Any]:
    schedule = get_or_create_schedule(engine, DEFAULT_SCHEDULE)
    return {**_describe_schedule(schedule), "updated": updated}


@app.post("/schedule")
async def update_schedule_view(time: str = Form(...)) -> RedirectResponse:
    try:
        hour, minute = parse_schedule_time(time)
    except ValueError as exc:
        LOGGER.warning("Invalid schedule submitted: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    schedule = update_schedule(engine, hour, minute, settings.timezone)
    _configure_job(schedule)
    return RedirectResponse(url="/schedule?updated=1", status_code=status.HTTP_303_SEE_OTHER)


@app.post("/run", status_code=status.HTTP_202_ACCEPTED)
async def trigger_run() -> dict[str, str]:
    scheduler.add_job(_notification_job, id=MANUAL_JOB_ID, replace_existing=True)
    LOGGER.info("Queued manual notification run")
    return {"status": "queued"}


__all__ = ["app"]
