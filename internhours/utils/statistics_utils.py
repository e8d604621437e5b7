"""
Owner-level hours statistics.

`compute_progress` is the one place "hours completed" and "% progress" are
calculated. The overview, DTR, certificate and completion-request screens
all call it with the same arguments instead of summing logs themselves.
"""

import logging
from typing import Iterable, List, Optional, Union

from internhours.config import settings
from internhours.models.sessions import ClockState, DailyAccounting, SessionAccounting
from internhours.models.statistics import InternshipProgress, TimeStatistics
from internhours.models.time_logs import (TimeLogRecord, EditRequest, EditRequestStatus,
                                          LogStatus, OvertimeStatus)
from internhours.utils.clock_utils import effective_end
from internhours.utils.duration_utils import split_day, overtime_breakdown
from internhours.utils.session_utils import coerce_logs, build_sessions_by_day
from internhours.utils.time_utils import truncate, sum_hours, subtract_hours, local_calendar_day

logger = logging.getLogger(__name__)


def coerce_edit_requests(edit_requests: Iterable[Union[EditRequest, dict]]) -> List[EditRequest]:
    return [
        request if isinstance(request, EditRequest) else EditRequest.model_validate(request)
        for request in edit_requests or []
    ]


def request_order(request_id: str):
    # Numeric ids compare as numbers so that "10" comes after "9"
    if request_id.isdigit():
        return 0, int(request_id), request_id
    return 1, 0, request_id


def apply_edit_requests(
    logs: Iterable[Union[TimeLogRecord, dict]],
    edit_requests: Iterable[Union[EditRequest, dict]],
    tz: Optional[str] = None,
) -> List[TimeLogRecord]:
    """
    Overlay approved edit requests onto the records they target.

    Each record is replaced at most once. When several approved requests
    target the same record, the one with the highest id wins. Pending,
    rejected and reverted requests are ignored.
    """
    approved = {}
    for request in sorted(coerce_edit_requests(edit_requests), key=lambda request: request_order(request.id)):
        if request.status == EditRequestStatus.APPROVED:
            approved[request.log_id] = request

    corrected_logs = []
    for log in coerce_logs(logs):
        request = approved.get(log.id)
        if request is None:
            corrected_logs.append(log)
            continue

        update = {}
        if request.requested_time_in is not None:
            update["time_in"] = request.requested_time_in
        if request.requested_time_out is not None:
            update["time_out"] = request.requested_time_out
            update["status"] = LogStatus.COMPLETED
        corrected = log.model_copy(update=update)

        previous_day = local_calendar_day(log.time_in or log.time_out, tz)
        corrected_day = local_calendar_day(corrected.time_in or corrected.time_out, tz)
        if previous_day != corrected_day:
            logger.warning(
                "Edit request %s moves time log %s from %s to %s; hours are attributed to %s",
                request.id, log.id, previous_day, corrected_day, corrected_day,
            )
        corrected_logs.append(corrected)

    return corrected_logs


def is_credited(accounting: SessionAccounting) -> bool:
    """Whether a session's regular hours count toward the internship."""
    session = accounting.session
    if session.is_active:
        return False
    # Rejected overtime sessions are shown but never credited
    return not (session.is_overtime_session and session.overtime_status == OvertimeStatus.REJECTED)


def day_clock_state(day: Optional[DailyAccounting], cap: Optional[float] = None) -> ClockState:
    """Observed clock state of an owner on one day. Transitions are driven by the caller."""
    if cap is None:
        cap = settings.DAILY_REGULAR_CAP_HOURS
    if day is None or not day.sessions:
        return ClockState.NOT_CLOCKED_IN

    active = next((accounting for accounting in reversed(day.sessions) if accounting.session.is_active), None)
    if active is not None:
        if active.session.is_overtime_session:
            return ClockState.OVERTIME_CLOCKED_IN
        if day.regular_hours >= cap:
            return ClockState.AUTO_TIMED_OUT
        return ClockState.CLOCKED_IN

    if any(accounting.session.is_overtime_session for accounting in day.sessions):
        return ClockState.OVERTIME_CLOCKED_OUT
    if day.regular_hours >= cap:
        return ClockState.OVERTIME_ELIGIBLE
    return ClockState.CLOCKED_OUT


def account_days(
    logs: Iterable[Union[TimeLogRecord, dict]],
    owner_id,
    include_edit_requests: bool = False,
    edit_requests: Optional[Iterable[Union[EditRequest, dict]]] = None,
    as_of=None,
    freeze_at=None,
    cap: Optional[float] = None,
    precision: Optional[int] = None,
    tz: Optional[str] = None,
) -> List[DailyAccounting]:
    """Per-day accounting of one owner's history, oldest day first."""
    owner_id = str(owner_id)
    records = [log for log in coerce_logs(logs) if log.owner_id == owner_id]
    if include_edit_requests and edit_requests:
        records = apply_edit_requests(records, edit_requests, tz)

    sessions_by_day = build_sessions_by_day(records, as_of, freeze_at, tz)
    return [
        split_day(sessions, as_of, freeze_at, cap, precision)
        for sessions in sessions_by_day.values()
    ]


def compute_time_statistics(
    logs: Iterable[Union[TimeLogRecord, dict]],
    owner_id,
    required_hours: Optional[float] = None,
    include_edit_requests: bool = False,
    edit_requests: Optional[Iterable[Union[EditRequest, dict]]] = None,
    as_of=None,
    freeze_at=None,
    cap: Optional[float] = None,
    precision: Optional[int] = None,
    tz: Optional[str] = None,
) -> TimeStatistics:
    """
    Full hours statistics for one owner.

    Args:
        logs: the raw log snapshot, may include other owners.
        owner_id: the intern whose hours are computed.
        required_hours: hours the internship requires. 0 or None gives 0 %.
        include_edit_requests: overlay approved edit requests first.
        edit_requests: the edit requests to overlay.
        as_of, freeze_at: instants an active session is measured up to.
            Active sessions never count toward completed hours.
        cap, precision, tz: policy overrides, default to settings.
    Returns:
        TimeStatistics: credited progress plus the regular/overtime breakdown
            and the per-day accounting it was derived from.
    """
    if precision is None:
        precision = settings.HOURS_PRECISION
    days = account_days(logs, owner_id, include_edit_requests, edit_requests, as_of, freeze_at, cap, precision, tz)

    completed = [accounting for day in days for accounting in day.sessions if not accounting.session.is_active]
    credited = [accounting for accounting in completed if is_credited(accounting)]

    regular_hours = truncate(sum_hours(accounting.accurate.regular_hours for accounting in credited), precision)
    overtime = overtime_breakdown(completed)
    internship_progress = truncate(sum_hours([regular_hours, overtime.approved]), precision)

    required = float(required_hours or 0)
    progress_percentage = (internship_progress / required) * 100 if required > 0 else 0.0
    remaining_hours = truncate(max(0.0, subtract_hours(required, internship_progress)), precision) if required > 0 else 0.0

    all_regular = sum_hours(accounting.accurate.regular_hours for accounting in completed)
    today = local_calendar_day(effective_end(as_of), tz)

    return TimeStatistics(
        owner_id=str(owner_id),
        internship_progress=internship_progress,
        progress_percentage=progress_percentage,
        regular_hours=regular_hours,
        overtime_hours=overtime,
        total_hours_rendered=truncate(sum_hours([all_regular, overtime.total]), precision),
        required_hours=required,
        remaining_hours=remaining_hours,
        days_worked=len({accounting.session.day for accounting in completed}),
        active_session=any(accounting.session.is_active for day in days for accounting in day.sessions),
        clock_state=day_clock_state(next((day for day in days if day.day == today), None), cap),
        days=days,
    )


def compute_progress(
    logs: Iterable[Union[TimeLogRecord, dict]],
    owner_id,
    required_hours: Optional[float] = None,
    include_edit_requests: bool = False,
    edit_requests: Optional[Iterable[Union[EditRequest, dict]]] = None,
) -> InternshipProgress:
    """Hours credited toward the internship and the matching percentage."""
    return compute_time_statistics(
        logs,
        owner_id,
        required_hours=required_hours,
        include_edit_requests=include_edit_requests,
        edit_requests=edit_requests,
    ).to_progress()


def clock_state(logs: Iterable[Union[TimeLogRecord, dict]], owner_id, as_of=None, freeze_at=None,
                cap: Optional[float] = None, tz: Optional[str] = None) -> ClockState:
    """Observed clock state of an owner on the local day of `as_of`."""
    today = local_calendar_day(effective_end(as_of), tz)
    days = account_days(logs, owner_id, as_of=as_of, freeze_at=freeze_at, cap=cap, tz=tz)
    return day_clock_state(next((day for day in days if day.day == today), None), cap)
