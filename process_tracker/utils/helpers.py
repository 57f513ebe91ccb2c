"""Shared utility functions — date parsing, timestamp formatting, flag parsing.

parse_date:          calendar date from YYYY-MM-DD / ISO datetime / DD.MM.YYYY
to_timestamp:        datetime -> stored timestamp string (UTC, ms, ``Z``)
utc_now:             the clock used by request handlers and scripts
midday_utc_timestamp: calendar date anchored at 12:00 UTC, as a timestamp
parse_bool:          ``"true"``/``"false"`` form values -> bool
"""
from datetime import date, datetime, time, timezone


def parse_date(value):
    """Parse a date string (ISO or DD.MM.YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD (ISO format)
    - YYYY-MM-DDTHH:MM:SS (datetime ISO → .date())
    - DD.MM.YYYY (European format)
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except (ValueError, TypeError):
        pass
    try:
        return datetime.strptime(str(value), "%d.%m.%Y").date()
    except (ValueError, TypeError):
        return None


def to_timestamp(moment: datetime) -> str:
    """Format a datetime the way history timestamps are stored.

    ``2024-03-15T12:00:00.000Z`` — UTC, millisecond precision. Naive datetimes
    are taken to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def midday_utc_timestamp(value) -> str | None:
    """Anchor a calendar date at 12:00 UTC and format it as a timestamp.

    Plain dates parsed at midnight UTC render as the previous day in western
    timezones; midday keeps the calendar date stable everywhere.
    Returns None when ``value`` is not a recognisable date.
    """
    day = parse_date(value)
    if day is None:
        return None
    return to_timestamp(datetime.combine(day, time(12, 0), tzinfo=timezone.utc))


def parse_bool(value, default: bool = False) -> bool:
    """Normalise a boolean-like wire value.

    Accepts native bools and the strings ``true/false``, ``1/0``, ``yes/no``,
    ``on/off`` (case-insensitive). ``None`` and ``""`` yield ``default``.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    text = str(value).strip().lower()
    if not text:
        return default
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off"):
        return False
    raise ValueError(f"Not a boolean value: {value!r}")
