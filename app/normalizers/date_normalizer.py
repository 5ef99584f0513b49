"""
app/normalizers/date_normalizer.py

Tolerant date/datetime normalization for spreadsheet exports.

Every value is rewritten to ``YYYY-MM-DD HH:MM:SS`` or to an empty string.
Parsers are tried in a fixed order and the first one that succeeds wins:

    1. ISO-8601 timestamps carrying ``Z`` or a UTC offset (converted to UTC)
    2. date + time of day (``T`` or space separator)
    3. date only (midnight)
    4. spreadsheet serial day numbers

Bare times of day (no date component) normalize to an empty string.
No function in this module raises for malformed input.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Final

logger = logging.getLogger(__name__)

OUTPUT_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

_TIME_ONLY_PATTERN = re.compile(r"^\d{1,2}:\d{2}(:\d{2})?(\.\d+)?$")
_SERIAL_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")
_ZONED_PATTERN = re.compile(r"(Z|[+-]\d{2}:?\d{2})$", re.IGNORECASE)
_DATE_TIME_PATTERN = re.compile(
    r"^(?P<date>[^\sT]+)[ T]"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,9}))?)?$"
)

# Spreadsheet serial 1 is 1900-01-01; serials >= 60 carry the 1900 leap-year bug.
_SERIAL_EPOCH: Final[date] = date(1899, 12, 31)
_SERIAL_LEAP_BUG_THRESHOLD: Final[int] = 60
_SECONDS_PER_DAY: Final[float] = 24.0 * 60.0 * 60.0

# Day-first variants precede month-first ones, so "03/04/2024" is 3 April.
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y%m%d",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%m-%d-%Y",
    "%d.%m.%Y",
    "%m.%d.%Y",
)


def is_date_column(header: str | None) -> bool:
    """
    Return True when *header* names a date column (contains ``"date"``).
    """

    return header is not None and "date" in header.lower()


def normalize_date(value: str | None) -> str:
    """
    Normalize a free-form date or datetime string to ``YYYY-MM-DD HH:MM:SS``.

    Returns an empty string for blank, time-only, or unparsable input.
    """

    if value is None:
        return ""
    trimmed = str(value).strip()
    if not trimmed or _TIME_ONLY_PATTERN.match(trimmed):
        return ""

    for parser in _PARSERS:
        parsed = parser(trimmed)
        if parsed is not None:
            return format_timestamp(parsed)

    logger.debug("Unparsable date value %r normalized to empty string", trimmed)
    return ""


def format_timestamp(value: datetime) -> str:
    """Render *value* as ``YYYY-MM-DD HH:MM:SS`` with a zero-padded year."""

    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )


def parse_date_only(value: str) -> date | None:
    """
    Parse *value* with the date-only pattern list; None when nothing matches.
    """

    for fmt in DATE_FORMATS:
        if fmt == "%Y%m%d" and len(value) != 8:
            continue
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _parse_zoned(value: str) -> datetime | None:
    if not _ZONED_PATTERN.search(value):
        return None
    candidate = value[:-1] + "+00:00" if value[-1] in "Zz" else value
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    try:
        return parsed.astimezone(timezone.utc).replace(tzinfo=None)
    except OverflowError:
        return None


def _parse_date_time(value: str) -> datetime | None:
    match = _DATE_TIME_PATTERN.match(value)
    if match is None:
        return None
    day = parse_date_only(match.group("date"))
    if day is None:
        return None

    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    second = int(match.group("second") or 0)
    if hour > 23 or minute > 59 or second > 59:
        return None
    return datetime(day.year, day.month, day.day, hour, minute, second)


def _parse_date(value: str) -> datetime | None:
    day = parse_date_only(value)
    if day is None:
        return None
    return datetime(day.year, day.month, day.day)


def _parse_serial(value: str) -> datetime | None:
    if not _SERIAL_PATTERN.match(value):
        return None
    try:
        numeric = float(value)
    except ValueError:
        return None
    if not math.isfinite(numeric) or numeric < 1:
        return None

    whole_days = math.floor(numeric)
    fraction = numeric - whole_days
    if whole_days >= _SERIAL_LEAP_BUG_THRESHOLD:
        whole_days -= 1
    seconds = math.floor(fraction * _SECONDS_PER_DAY + 0.5)
    try:
        start = datetime.combine(_SERIAL_EPOCH, datetime.min.time())
        return start + timedelta(days=whole_days, seconds=seconds)
    except OverflowError:
        return None


_PARSERS: tuple[Callable[[str], datetime | None], ...] = (
    _parse_zoned,
    _parse_date_time,
    _parse_date,
    _parse_serial,
)
