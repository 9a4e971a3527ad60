"""Logging setup for the lottery notification job and service."""
from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Chatty libraries: one line per HTTP request or scheduler tick.
NOISY_LOGGERS = ("urllib3", "apscheduler")


def resolve_level(level: str | int | None = None, *, verbose: bool = False) -> int:
    """Pick the job's log level.

    ``verbose`` wins, then an explicit ``level``, then ``LOTTERY_NOTIFY_LOG_LEVEL``.
    Unknown names fall back to INFO.
    """

    if verbose:
        return logging.DEBUG
    raw = os.getenv("LOTTERY_NOTIFY_LOG_LEVEL", "INFO") if level is None else level
    if isinstance(raw, int):
        return raw
    resolved = logging.getLevelName(raw.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: str | int | None = None, *, verbose: bool = False, force: bool = False
) -> None:
    """Configure console logging.

    Per-row parse rejections are logged at DEBUG, so ``verbose`` is what the
    CLI's ``--verbose`` flag maps to. HTTP and scheduler libraries stay at
    WARNING unless ``verbose`` is set.
    """

    resolved_level = resolve_level(level, verbose=verbose)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        root_logger.setLevel(resolved_level)
        return
    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, force=force)


__all__ = ["configure_logging", "resolve_level"]
