"""Persistence for the notification schedule."""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

LOGGER = logging.getLogger(__name__)

SCHEDULE_ID = 1

notify_schedule = Table(
    "notify_schedule",
    metadata,
    Column("id", Integer, primary_key=True, default=SCHEDULE_ID),
    Column("hour", Integer, nullable=False),
    Column("minute", Integer, nullable=False),
    Column("timezone", String(64), nullable=False),
    Column("created_at", DateTime, nullable=False, default=datetime.utcnow),
    Column(
        "updated_at", DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    ),
)


def create_db_engine(database_url: str) -> Engine:
    """Create a SQLAlchemy engine for the configured database."""

    LOGGER.debug("Creating database engine for %s", database_url.split("@")[-1])
    return create_engine(database_url, future=True)


def ensure_schema(engine: Engine) -> None:
    metadata.create_all(engine)


def _as_dict(row) -> dict[str, int | str]:
    return {"hour": row.hour, "minute": row.minute, "timezone": row.timezone}


def get_or_create_schedule(
    engine: Engine, default: dict[str, int | str]
) -> dict[str, int | str]:
    """Fetch the current notification schedule, seeding ``default`` when missing."""

    LOGGER.debug("Fetching notification schedule")
    with engine.begin() as conn:
        row = conn.execute(
            select(notify_schedule).where(notify_schedule.c.id == SCHEDULE_ID)
        ).first()
        if row is not None:
            return _as_dict(row)
        conn.execute(insert(notify_schedule).values(id=SCHEDULE_ID, **default))
    LOGGER.info(
        "Seeded default schedule %02d:%02d %s",
        default["hour"],
        default["minute"],
        default["timezone"],
    )
    return dict(default)


def update_schedule(engine: Engine, hour: int, minute: int, timezone: str) -> dict[str, int | str]:
    """Persist a new notification schedule."""

    LOGGER.info("Persisting schedule change to %02d:%02d %s", hour, minute, timezone)
    values = {"hour": hour, "minute": minute, "timezone": timezone}
    with engine.begin() as conn:
        result = conn.execute(
            update(notify_schedule).where(notify_schedule.c.id == SCHEDULE_ID).values(**values)
        )
        if result.rowcount == 0:
            conn.execute(insert(notify_schedule).values(id=SCHEDULE_ID, **values))
    return values


__all__ = [
    "create_db_engine",
    "ensure_schema",
    "get_or_create_schedule",
    "metadata",
    "notify_schedule",
    "update_schedule",
]
