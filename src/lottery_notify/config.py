"""Application configuration helpers."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import os
from pathlib import Path
from typing import Mapping

DEFAULT_TIMEZONE = "Asia/Taipei"
DEFAULT_SCHEDULE = "18:00"


def _resolve_env_file(candidate: str) -> Path | None:
    """Return the first matching environment file path if it exists."""

    path = Path(candidate)
    if path.is_absolute() and path.exists():
        return path

    search_roots = [Path.cwd(), Path(__file__).resolve().parent]
    search_roots.extend(Path(__file__).resolve().parents)

    seen: set[Path] = set()
    for root in search_roots:
        root = root.resolve()
        if root in seen:
            continue
        seen.add(root)
        potential = root / candidate
        if potential.exists():
            return potential
    return None


def _parse_env_file(path: Path) -> dict[str, str]:
    """Parse a dotenv-style file into a mapping."""

    variables: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        variables[key.strip()] = value.strip().strip('"').strip("'")
    return variables


def _load_profile_env(env: Mapping[str, str]) -> dict[str, str]:
    """Load environment variables from the selected profile file."""

    explicit_file = env.get("LOTTERY_NOTIFY_ENV_FILE")
    profile = env.get("LOTTERY_NOTIFY_ENV", "local")
    candidate = explicit_file or f".env.{profile}"

    path = _resolve_env_file(candidate)
    if path is not None:
        return _parse_env_file(path)
    return {}


def parse_schedule_time(value: str) -> tuple[int, int]:
    """Parse an ``HH:MM`` time of day."""

    value = value.strip()
    if not value or ":" not in value:
        raise ValueError("Time must be in HH:MM format")
    hour_str, minute_str = value.split(":", 1)
    hour = int(hour_str)
    minute = int(minute_str)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError("Hours must be 0-23 and minutes 0-59")
    return hour, minute


def _number(env: Mapping[str, str], key: str, default: str, cast):
    raw = env.get(key) or default
    try:
        return cast(raw)
    except (ValueError, InvalidOperation) as exc:
        raise RuntimeError(f"{key} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Runtime configuration."""

    csv_url: str
    csv_encoding: str = "cp950"
    finmind_base_url: str = "https://api.finmindtrade.com"
    finmind_token: str | None = None
    line_base_url: str = "https://api.line.me"
    line_token: str | None = None
    timezone: str = DEFAULT_TIMEZONE
    roi_threshold: Decimal = Decimal("30")
    price_lookback_days: int = 5
    http_timeout: float = 120.0
    database_url: str = "sqlite:///lottery_notify.db"
    schedule_hour: int = 18
    schedule_minute: int = 0

    @staticmethod
    def load(env: Mapping[str, str] | None = None) -> "Settings":
        """Load settings from environment variables."""

        base_env = dict(os.environ if env is None else env)
        file_env = _load_profile_env(base_env)
        # Environment variables set in the shell take precedence over the file.
        merged_env = {**file_env, **base_env}

        csv_url = merged_env.get("LOTTERY_NOTIFY_CSV_URL", "").strip()
        if not csv_url:
            raise RuntimeError("LOTTERY_NOTIFY_CSV_URL must be set")

        schedule = merged_env.get("LOTTERY_NOTIFY_SCHEDULE") or DEFAULT_SCHEDULE
        try:
            hour, minute = parse_schedule_time(schedule)
        except ValueError as exc:
            raise RuntimeError(f"LOTTERY_NOTIFY_SCHEDULE is invalid: {exc}") from exc

        return Settings(
            csv_url=csv_url,
            csv_encoding=merged_env.get("LOTTERY_NOTIFY_CSV_ENCODING") or "cp950",
            finmind_base_url=merged_env.get("LOTTERY_NOTIFY_FINMIND_BASE_URL")
            or "https://api.finmindtrade.com",
            finmind_token=merged_env.get("LOTTERY_NOTIFY_FINMIND_TOKEN") or None,
            line_base_url=merged_env.get("LOTTERY_NOTIFY_LINE_BASE_URL") or "https://api.line.me",
            line_token=merged_env.get("LOTTERY_NOTIFY_LINE_TOKEN") or None,
            timezone=merged_env.get("LOTTERY_NOTIFY_TIMEZONE") or DEFAULT_TIMEZONE,
            roi_threshold=_number(merged_env, "LOTTERY_NOTIFY_ROI_THRESHOLD", "30", Decimal),
            price_lookback_days=_number(merged_env, "LOTTERY_NOTIFY_PRICE_LOOKBACK_DAYS", "5", int),
            http_timeout=_number(merged_env, "LOTTERY_NOTIFY_HTTP_TIMEOUT", "120", float),
            database_url=merged_env.get("LOTTERY_NOTIFY_DATABASE_URL")
            or "sqlite:///lottery_notify.db",
            schedule_hour=hour,
            schedule_minute=minute,
        )


__all__ = ["Settings", "parse_schedule_time"]
