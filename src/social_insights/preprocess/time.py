from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any, Callable

import pandas as pd

from social_insights.config import TIME_RANGE_PRESETS

_DAY_FIRST_MINUTES = re.compile(r"^(\d{2})-(\d{2})-(\d{4})\s+(\d{2}):(\d{2})$")
_ISO_SPACE_SECONDS = re.compile(r"^(\d{4})-(\d{2})-(\d{2})\s+(\d{2}):(\d{2}):(\d{2})$")
_ISO_WITH_TIME = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_US_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")

PRESET_DAYS = {"7days": 7, "30days": 30, "90days": 90}


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _parse_day_first_minutes(text: str) -> datetime | None:
    match = _DAY_FIRST_MINUTES.match(text)
    if not match:
        return None
    day, month, year, hour, minute = (int(part) for part in match.groups())
    return datetime(year, month, day, hour, minute)


def _parse_iso_space_seconds(text: str) -> datetime | None:
    match = _ISO_SPACE_SECONDS.match(text)
    if not match:
        return None
    year, month, day, hour, minute, second = (int(part) for part in match.groups())
    return datetime(year, month, day, hour, minute, second)


def _parse_iso_with_time(text: str) -> datetime | None:
    if not _ISO_WITH_TIME.match(text):
        return None
    return _to_local_naive(datetime.fromisoformat(text))


def _parse_iso_date(text: str) -> datetime | None:
    match = _ISO_DATE.match(text)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    return datetime(year, month, day)


def _parse_us_date(text: str) -> datetime | None:
    match = _US_DATE.match(text)
    if not match:
        return None
    month, day, year = (int(part) for part in match.groups())
    return datetime(year, month, day)


# Tried in order; the first parser that returns a value wins.
DATE_PARSERS: tuple[tuple[str, Callable[[str], datetime | None]], ...] = (
    ("DD-MM-YYYY HH:MM", _parse_day_first_minutes),
    ("YYYY-MM-DD HH:MM:SS", _parse_iso_space_seconds),
    ("ISO-8601", _parse_iso_with_time),
    ("YYYY-MM-DD", _parse_iso_date),
    ("MM/DD/YYYY", _parse_us_date),
)


def parse_date(value: Any) -> datetime | None:
    """Normalize a date value to a naive local datetime.

    Strings are matched against ``DATE_PARSERS`` in order. Offset-aware
    timestamps are converted to the local zone. Empty, unmatched, or
    out-of-calendar input (month 13, Feb 30) yields None.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return _to_local_naive(value.to_pydatetime())
    if isinstance(value, datetime):
        return _to_local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    for _label, parser in DATE_PARSERS:
        try:
            parsed = parser(text)
        except ValueError:
            # Matched the shape but not a real calendar value.
            parsed = None
        if parsed is not None:
            return parsed
    return None


def parse_range_end(value: Any) -> datetime | None:
    """Parse an inclusive upper bound; a date without a time covers that whole day."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        date_only = bool(_ISO_DATE.match(text) or _US_DATE.match(text))
    else:
        date_only = isinstance(value, date) and not isinstance(value, datetime)
    if date_only:
        return parsed + timedelta(days=1, microseconds=-1)
    return parsed


def is_date_in_range(
    value: datetime | None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> bool:
    if value is None:
        return False
    moment = _to_local_naive(value)
    if start is not None and moment < _to_local_naive(start):
        return False
    if end is not None and moment > _to_local_naive(end):
        return False
    return True


def parse_in_range(
    value: Any,
    start: datetime | None = None,
    end: datetime | None = None,
) -> datetime | None:
    """Parse ``value`` and return it only when it falls inside [start, end]."""
    parsed = parse_date(value)
    if parsed is None or not is_date_in_range(parsed, start, end):
        return None
    return parsed


def day_key(value: datetime) -> str:
    return value.date().isoformat()


def resolve_time_range(
    preset: str,
    now: datetime | None = None,
) -> tuple[datetime | None, datetime | None]:
    """Translate a dashboard time-range preset into (start, end) bounds."""
    if preset not in TIME_RANGE_PRESETS:
        raise ValueError(f"Unknown time range preset: {preset}")
    if preset == "all":
        return None, None

    reference = _to_local_naive(now or datetime.now())
    if preset == "1year":
        start = (pd.Timestamp(reference) - pd.DateOffset(years=1)).to_pydatetime()
        return start, None
    return reference - timedelta(days=PRESET_DAYS[preset]), None
