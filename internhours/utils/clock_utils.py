"""
Live measurement of open sessions.

Time is always passed in: `as_of` is the caller's "now" and `freeze_at` is
the instant a live session stopped advancing (the daily cap was crossed and
the automatic time-out is being written). An open session is measured up to
whichever of the two comes first.
"""

from datetime import datetime, timedelta
from typing import Optional

from pytz import UTC

from internhours.config import settings
from internhours.models.sessions import Session
from internhours.utils.time_utils import parse_safe, try_parse, interval_bounds, duration_hours, subtract_hours


def effective_end(as_of=None, freeze_at=None) -> datetime:
    """Return the instant an open session is measured up to."""
    end = parse_safe(as_of) if as_of is not None else datetime.now(UTC)
    frozen = try_parse(freeze_at)
    if frozen is not None and frozen < end:
        return frozen
    return end


def session_raw_hours(session: Session, as_of=None, freeze_at=None) -> float:
    """
    Untruncated hours worked in a session.

    Completed records count from time in to time out. The open record of an
    active session counts up to `effective_end(as_of, freeze_at)`, or up to the
    session's own `measured_until` when no instant is passed.
    """
    if as_of is None and freeze_at is None and session.measured_until is not None:
        open_end = session.measured_until
    else:
        open_end = None

    total = 0.0
    for record in session.logs:
        start, end = interval_bounds(record.time_in, record.time_out)
        if end is None:
            if open_end is None:
                open_end = effective_end(as_of, freeze_at)
            end = open_end
        total += duration_hours(start, end)
    return total


def cap_reached_at(time_in, regular_consumed: float = 0.0, cap: Optional[float] = None) -> datetime:
    """Instant at which a session started at `time_in` uses up the rest of the daily cap."""
    if cap is None:
        cap = settings.DAILY_REGULAR_CAP_HOURS
    remaining = max(0.0, subtract_hours(cap, regular_consumed))
    return parse_safe(time_in) + timedelta(hours=remaining)


def overtime_limit_reached_at(
    time_in,
    regular_consumed: float = 0.0,
    cap: Optional[float] = None,
    max_overtime: Optional[float] = None,
) -> datetime:
    """Instant after which further time in the session is extended overtime."""
    if max_overtime is None:
        max_overtime = settings.MAX_OVERTIME_HOURS
    return cap_reached_at(time_in, regular_consumed, cap) + timedelta(hours=max_overtime)
