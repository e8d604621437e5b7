"""
Regular/overtime split of a day's sessions under the daily cap.

The split is a fold over the day's completed sessions in time-in order,
followed by the live session. The accumulator is the regular time already credited that day, updated with the
capped and truncated figure so truncation error cannot compound.
"""

from functools import reduce
from typing import List, Optional, Tuple

from internhours.config import settings
from internhours.models.sessions import Session, SessionDuration, SessionAccounting, DailyAccounting, OvertimeBreakdown
from internhours.models.time_logs import OvertimeStatus
from internhours.utils.clock_utils import session_raw_hours
from internhours.utils.time_utils import truncate, sum_hours, subtract_hours


def _policy(cap: Optional[float], precision: Optional[int]) -> Tuple[float, int]:
    if cap is None:
        cap = settings.DAILY_REGULAR_CAP_HOURS
    if precision is None:
        precision = settings.HOURS_PRECISION
    return cap, precision


def overtime_status_for(session: Session, overtime_hours: float) -> OvertimeStatus:
    # Time past the cap in a regular-tagged session is overtime awaiting approval
    if session.overtime_status != OvertimeStatus.NONE:
        return session.overtime_status
    return OvertimeStatus.PENDING if overtime_hours > 0 else OvertimeStatus.NONE


def split_session(
    session: Session,
    regular_consumed: float = 0.0,
    as_of=None,
    freeze_at=None,
    cap: Optional[float] = None,
    precision: Optional[int] = None,
) -> Tuple[SessionAccounting, float]:
    """
    Split one session into its accurate and raw durations.

    Args:
        session: the session to measure.
        regular_consumed: regular hours already credited earlier the same day.
        as_of, freeze_at: instants an active session is measured up to.
        cap: daily regular cap in hours, defaults to settings.
        precision: decimal digits kept by truncation, defaults to settings.
    Returns:
        Tuple[SessionAccounting, float]: the session's accounting and the
            regular hours consumed once this session is included.
    """
    cap, precision = _policy(cap, precision)
    raw_hours = session_raw_hours(session, as_of, freeze_at)

    allowance = max(0.0, subtract_hours(cap, regular_consumed))
    regular_hours = truncate(max(0.0, min(raw_hours, allowance)), precision)
    overtime_hours = truncate(max(0.0, subtract_hours(raw_hours, regular_hours)), precision)
    status = overtime_status_for(session, overtime_hours)

    accounting = SessionAccounting(
        session=session,
        raw_hours=raw_hours,
        accurate=SessionDuration(regular_hours=regular_hours, overtime_hours=overtime_hours, overtime_status=status),
        raw=SessionDuration(regular_hours=truncate(raw_hours, precision), overtime_hours=overtime_hours, overtime_status=status),
    )
    return accounting, sum_hours([regular_consumed, regular_hours])


def overtime_breakdown(accounted: List[SessionAccounting]) -> OvertimeBreakdown:
    by_status = {status: [] for status in OvertimeStatus}
    for accounting in accounted:
        by_status[accounting.raw.overtime_status].append(accounting.raw.overtime_hours)
    return OvertimeBreakdown(
        total=sum_hours(accounting.raw.overtime_hours for accounting in accounted),
        approved=sum_hours(by_status[OvertimeStatus.APPROVED]),
        pending=sum_hours(by_status[OvertimeStatus.PENDING]),
        rejected=sum_hours(by_status[OvertimeStatus.REJECTED]),
    )


def split_day(
    sessions: List[Session],
    as_of=None,
    freeze_at=None,
    cap: Optional[float] = None,
    precision: Optional[int] = None,
) -> DailyAccounting:
    """
    Account every session of one owner/day, threading the regular allowance in time-in order.

    Completed sessions are folded first. The live session, if any, is accounted
    last against what they leave of the cap, so completed figures never depend
    on how far the live session has been measured. Accountings are returned in
    time-in order.
    """
    ordered = sorted(sessions, key=lambda session: session.time_in)
    completed = [session for session in ordered if not session.is_active]
    live = [session for session in ordered if session.is_active]

    def fold(state, session):
        regular_consumed, accounted = state
        accounting, regular_consumed = split_session(session, regular_consumed, as_of, freeze_at, cap, precision)
        return regular_consumed, accounted + [accounting]

    regular_consumed, accounted = reduce(fold, completed + live, (0.0, []))
    accounted.sort(key=lambda accounting: accounting.session.time_in)

    first = ordered[0] if ordered else None
    return DailyAccounting(
        owner_id=first.owner_id if first else "",
        day=first.day if first else "",
        sessions=accounted,
        regular_hours=regular_consumed,
        overtime_hours=overtime_breakdown(accounted),
    )
