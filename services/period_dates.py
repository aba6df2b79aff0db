from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Tuple

from config_constants import APP_TZ_OFFSET_MINUTES

APP_TZ_OFFSET = timedelta(minutes=APP_TZ_OFFSET_MINUTES)


def is_date_only(value: Any) -> bool:
    if isinstance(value, str):
        return len(value.strip()) == 10
    return isinstance(value, date) and not isinstance(value, datetime)


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a request/stored date into a naive UTC datetime (how pymongo stores it).

    Accepts datetime, date, "YYYY-MM-DD" and ISO-8601 strings with or without
    offset / trailing "Z". A bare calendar date means midnight in the app
    timezone. Returns None if parsing fails.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min) - APP_TZ_OFFSET
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
        if len(raw) == 10:
            return dt - APP_TZ_OFFSET
    else:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def end_of_day(dt: datetime) -> datetime:
    """Last millisecond of the app-timezone day that starts at `dt`."""
    return dt + timedelta(days=1) - timedelta(milliseconds=1)


def app_year_month(value: Any) -> Optional[Tuple[int, int]]:
    """(year, month 1-12) of a UTC instant as seen in the app timezone."""
    dt = parse_date(value)
    if dt is None:
        return None
    local = dt + APP_TZ_OFFSET
    return local.year, local.month


def month_range_utc(year: Any, month: Any) -> Optional[Tuple[datetime, datetime]]:
    """
    UTC bounds of an app-timezone calendar month: [local 1st 00:00, next 1st 00:00 - 1ms].
    """
    try:
        y = int(year)
        m = int(month)
    except (TypeError, ValueError):
        return None
    if not (1 <= m <= 12) or y < 1900:
        return None

    start_local = datetime(y, m, 1)
    next_local = datetime(y + 1, 1, 1) if m == 12 else datetime(y, m + 1, 1)
    start = start_local - APP_TZ_OFFSET
    end = next_local - APP_TZ_OFFSET - timedelta(milliseconds=1)
    return start, end


def month_start_utc(value: Any) -> Optional[datetime]:
    """Normalize a date to the first instant of its app-timezone month."""
    ym = app_year_month(value)
    if ym is None:
        return None
    rng = month_range_utc(*ym)
    return rng[0] if rng else None


def local_day_label(value: Any) -> str:
    dt = parse_date(value)
    if dt is None:
        return str(value or "")
    return (dt + APP_TZ_OFFSET).strftime("%Y-%m-%d")


def today_utc_range() -> Tuple[datetime, datetime]:
    """UTC bounds of today in the app timezone."""
    local_today = (datetime.utcnow() + APP_TZ_OFFSET).date()
    start = datetime.combine(local_today, time.min) - APP_TZ_OFFSET
    return start, start + timedelta(days=1) - timedelta(milliseconds=1)


def to_iso(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat(timespec="milliseconds") + "Z"
    return value
