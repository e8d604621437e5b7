"""
Session reconstruction from raw clock-in/clock-out records.

Records are grouped per owner and owner-local calendar day, ordered by
time in, and stitched into one continuous session whenever a record's
time out is exactly the next record's time in and both carry the same
log type and overtime status.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple, Union

from internhours.models.sessions import Session
from internhours.models.time_logs import TimeLogRecord, OvertimeStatus
from internhours.utils.clock_utils import effective_end
from internhours.utils.time_utils import interval_bounds, local_calendar_day

logger = logging.getLogger(__name__)

DayKey = Tuple[str, str]
BoundedRecord = Tuple[TimeLogRecord, datetime, Optional[datetime]]


def coerce_logs(logs: Iterable[Union[TimeLogRecord, dict]]) -> List[TimeLogRecord]:
    return [log if isinstance(log, TimeLogRecord) else TimeLogRecord.model_validate(log) for log in logs or []]


def record_bounds(record: TimeLogRecord) -> Tuple[Optional[datetime], Optional[datetime]]:
    return interval_bounds(record.time_in, record.time_out)


def session_overtime_status(record: TimeLogRecord) -> OvertimeStatus:
    if record.overtime_status and record.overtime_status != OvertimeStatus.NONE:
        return record.overtime_status
    if record.is_overtime:
        return OvertimeStatus.PENDING
    return OvertimeStatus.NONE


def _is_continuous(previous: BoundedRecord, following: BoundedRecord) -> bool:
    previous_record, _, previous_end = previous
    following_record, following_start, _ = following
    if previous_end is None or previous_end != following_start:
        return False
    return (
        previous_record.log_type == following_record.log_type
        and session_overtime_status(previous_record) == session_overtime_status(following_record)
    )


def _make_session(owner_id: str, day: str, group: List[BoundedRecord], measured_until: Optional[datetime]) -> Session:
    first_record, time_in, _ = group[0]
    _, _, time_out = group[-1]
    is_active = time_out is None
    return Session(
        owner_id=owner_id,
        day=day,
        time_in=time_in,
        time_out=time_out,
        session_type=first_record.log_type,
        overtime_status=session_overtime_status(first_record),
        is_continuous_session=len(group) > 1,
        is_active=is_active,
        measured_until=measured_until if is_active else None,
        logs=[record for record, _, _ in group],
    )


def group_logs_by_day(logs: Iterable[Union[TimeLogRecord, dict]], tz: Optional[str] = None) -> Dict[DayKey, List[TimeLogRecord]]:
    """Group records by (owner_id, local day of time_in, or of time_out when time_in is unusable)."""
    groups = defaultdict(list)
    for log in coerce_logs(logs):
        start, end = record_bounds(log)
        anchor = start or end
        if anchor is None:
            logger.warning("Skipping time log %s of owner %s: no usable timestamps", log.id, log.owner_id)
            continue
        groups[(log.owner_id, local_calendar_day(anchor, tz))].append(log)
    return dict(groups)


def build_day_sessions(
    owner_id: str,
    day: str,
    records: List[TimeLogRecord],
    measured_until: Optional[datetime] = None,
) -> List[Session]:
    """Build the chronologically ordered sessions of one owner on one day."""
    bounded = []
    for record in records:
        start, end = record_bounds(record)
        if start is not None:
            bounded.append((record, start, end))
    bounded.sort(key=lambda item: (item[1], item[0].id))

    open_records = [item for item in bounded if item[2] is None]
    if len(open_records) > 1:
        # Only one session can be running; the latest clock-in is the live one
        kept = open_records[-1]
        logger.warning(
            "Owner %s has %d open time logs on %s, keeping %s",
            owner_id, len(open_records), day, kept[0].id,
        )
        bounded = [item for item in bounded if item[2] is not None or item is kept]
        open_records = [kept]

    if open_records and bounded[-1] is not open_records[0]:
        logger.warning("Owner %s has completed time logs after open log %s on %s", owner_id, open_records[0][0].id, day)

    groups: List[List[BoundedRecord]] = []
    for item in bounded:
        if groups and _is_continuous(groups[-1][-1], item):
            groups[-1].append(item)
        else:
            groups.append([item])

    return [_make_session(owner_id, day, group, measured_until) for group in groups]


def build_sessions_by_day(
    logs: Iterable[Union[TimeLogRecord, dict]],
    as_of=None,
    freeze_at=None,
    tz: Optional[str] = None,
) -> Dict[DayKey, List[Session]]:
    """
    Build sessions for every owner/day in the snapshot, ordered by day.

    Every record in the snapshot is used whatever `as_of` says, so totals do
    not depend on the instant they are computed at. Active sessions are
    measured until `effective_end(as_of, freeze_at)`.
    """
    measured_until = effective_end(as_of, freeze_at)
    grouped = group_logs_by_day(logs, tz)
    return {
        key: build_day_sessions(key[0], key[1], grouped[key], measured_until)
        for key in sorted(grouped, key=lambda key: (key[1], key[0]))
    }


def build_sessions(
    logs: Iterable[Union[TimeLogRecord, dict]],
    as_of,
    freeze_at=None,
    tz: Optional[str] = None,
) -> List[Session]:
    """
    Reconstruct sessions from a raw log snapshot.

    Args:
        logs: TimeLogRecord objects or dicts for one or more owners.
        as_of: the instant the snapshot was taken.
        freeze_at: instant at which a live session stopped advancing, e.g. when
            the daily cap was crossed and the automatic time-out is pending.
        tz: owner timezone used for the calendar day, defaults to settings.
    Returns:
        List[Session]: sessions ordered by time in. Active sessions carry
            `measured_until`, the instant their live duration runs to.
    """
    sessions = [
        session
        for day_sessions in build_sessions_by_day(logs, as_of, freeze_at, tz).values()
        for session in day_sessions
    ]
    sessions.sort(key=lambda session: (session.time_in, session.owner_id))
    return sessions
