"""
Time arithmetic shared by every hours calculation.

All figures that end up on a screen pass through `truncate`, never `round`:
1.236 hours is displayed and credited as 1.23.
"""

import logging
import math
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Optional, Tuple, Union

import pytz
from pytz import UTC

from internhours.config import settings

logger = logging.getLogger(__name__)

TimestampLike = Union[datetime, str, int, float, None]


def _parse(timestamp: TimestampLike) -> Optional[datetime]:
    if timestamp is None:
        return None

    if isinstance(timestamp, datetime):
        parsed = timestamp
    elif isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        if math.isnan(timestamp) or math.isinf(timestamp):
            return None
        # Epoch milliseconds, as stored by the clock-in screens
        parsed = datetime.fromtimestamp(timestamp / 1000, tz=UTC)
    elif isinstance(timestamp, str):
        text = timestamp.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        return None

    # Assume UTC if tzinfo is missing
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def try_parse(timestamp: TimestampLike) -> Optional[datetime]:
    """Parse a timestamp, returning None when it is missing or malformed."""
    try:
        return _parse(timestamp)
    except (ValueError, TypeError, OverflowError, OSError):
        logger.warning("Ignoring malformed timestamp %r", timestamp)
        return None


def parse_safe(timestamp: TimestampLike, fallback: Optional[datetime] = None) -> datetime:
    """
    Parse a persisted timestamp without ever raising.

    Args:
        timestamp: datetime, ISO-8601 string or epoch milliseconds.
        fallback: instant returned when the value cannot be parsed. Defaults
            to the current time.
    Returns:
        datetime: a timezone-aware instant.
    """
    parsed = try_parse(timestamp)
    if parsed is not None:
        return parsed

    logger.warning("Could not parse timestamp %r, falling back to %s", timestamp, fallback or "now")
    return fallback if fallback is not None else datetime.now(UTC)


def local_calendar_day(instant: TimestampLike, tz: Optional[str] = None) -> str:
    """Return the owner-local YYYY-MM-DD day an instant belongs to, or "" if it is invalid."""
    parsed = try_parse(instant)
    if parsed is None:
        return ""
    zone = pytz.timezone(tz or settings.LOCAL_TIMEZONE)
    return parsed.astimezone(zone).strftime("%Y-%m-%d")


def truncate(value: float, precision: Optional[int] = None) -> float:
    """Truncate toward zero at `precision` decimal digits. truncate(1.2399) == 1.23."""
    if precision is None:
        precision = settings.HOURS_PRECISION
    if value is None or math.isnan(value) or math.isinf(value):
        return 0.0

    # repr() gives the shortest decimal form, so 0.29 is not seen as 0.2899999...
    try:
        exact = Decimal(repr(float(value)))
    except InvalidOperation:
        return 0.0
    quantum = Decimal(1).scaleb(-precision)
    return float(exact.quantize(quantum, rounding=ROUND_DOWN))


def duration_hours(start: TimestampLike, end: TimestampLike) -> float:
    """Hours between two instants. Negative, NaN or unparseable spans count as 0."""
    start_time = try_parse(start)
    end_time = try_parse(end)
    if start_time is None or end_time is None:
        return 0.0

    hours = (end_time - start_time).total_seconds() / 3600
    if math.isnan(hours) or hours <= 0:
        return 0.0
    return hours


def format_duration(hours: float) -> str:
    """Format hours as "Xh YYm" using completed minutes only."""
    total_minutes = int(truncate(max(hours, 0.0) * 60, 0))
    return f"{total_minutes // 60}h {total_minutes % 60:02d}m"


def format_hours(hours: float, precision: Optional[int] = None) -> str:
    if precision is None:
        precision = settings.HOURS_PRECISION
    return f"{truncate(hours, precision):.{precision}f}h"


def _exact(value: float) -> Decimal:
    return Decimal(repr(float(value)))


def sum_hours(values) -> float:
    """Add hour figures in decimal so that 0.1 + 0.2 is exactly 0.3."""
    return float(sum((_exact(value) for value in values), Decimal(0)))


def subtract_hours(minuend: float, subtrahend: float) -> float:
    return float(_exact(minuend) - _exact(subtrahend))


def interval_bounds(time_in: TimestampLike, time_out: TimestampLike) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Return the (start, end) instants of a clock-in/clock-out pair. end is None while open.

    A clock-out that is present but malformed is pinned to the clock-in so the
    pair contributes zero hours instead of reopening the session.
    """
    start = try_parse(time_in)
    end = try_parse(time_out)
    if time_out not in (None, "") and end is None:
        end = start
    if start is None:
        start = end
    return start, end
