from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Union

from internhours.config import settings
from internhours.models.statistics import LongLogSummary
from internhours.models.time_logs import TimeLogRecord, LogType, LogStatus, OvertimeStatus
from internhours.utils.session_utils import coerce_logs, record_bounds
from internhours.utils.time_utils import duration_hours, sum_hours


def long_log_threshold(log_type: LogType, cap: float, max_overtime: float) -> float:
    """Longest span a single record of this type may cover before it should be split."""
    if log_type == LogType.OVERTIME:
        return max_overtime
    if log_type == LogType.EXTENDED_OVERTIME:
        return sum_hours([cap, max_overtime])
    return cap


def find_long_logs(
    logs: Iterable[Union[TimeLogRecord, dict]],
    cap: Optional[float] = None,
    max_overtime: Optional[float] = None,
) -> LongLogSummary:
    """
    Find completed records longer than their tier allows.

    Regular records longer than the daily cap, overtime records longer than
    the standard overtime limit, and extended overtime records longer than
    both combined were written before logs were split per tier.
    """
    if cap is None:
        cap = settings.DAILY_REGULAR_CAP_HOURS
    if max_overtime is None:
        max_overtime = settings.MAX_OVERTIME_HOURS

    log_ids = []
    for log in coerce_logs(logs):
        start, end = record_bounds(log)
        if end is None:
            continue
        if duration_hours(start, end) > long_log_threshold(log.log_type, cap, max_overtime):
            log_ids.append(log.id)

    return LongLogSummary(has_long_logs=bool(log_ids), count=len(log_ids), log_ids=log_ids)


def _to_minute(instant: datetime) -> datetime:
    return instant.replace(second=0, microsecond=0)


def split_long_log(
    log: Union[TimeLogRecord, dict],
    cap: Optional[float] = None,
    max_overtime: Optional[float] = None,
) -> List[TimeLogRecord]:
    """
    Cut a completed record that runs past the daily cap into per-tier records.

    Regular and overtime records longer than the cap are cut, on whole
    minutes, at `cap` hours after time in and again at `cap + max_overtime`.
    The pieces are back to back: regular, then overtime, then extended
    overtime. The piece whose tier matches the record's log type keeps its id
    and the others get derived ids. New overtime pieces are pending approval
    unless the record already carried an overtime status.

    Nothing is written anywhere; the caller replaces the record with the
    returned ones. Records that are open, within the cap, or already extended
    overtime come back unchanged as a one-element list.
    """
    if cap is None:
        cap = settings.DAILY_REGULAR_CAP_HOURS
    if max_overtime is None:
        max_overtime = settings.MAX_OVERTIME_HOURS

    log = coerce_logs([log])[0]
    start, end = record_bounds(log)
    if end is None or log.log_type == LogType.EXTENDED_OVERTIME:
        return [log]

    start, end = _to_minute(start), _to_minute(end)
    if duration_hours(start, end) <= cap:
        return [log]

    regular_end = _to_minute(start + timedelta(hours=cap))
    overtime_end = min(end, _to_minute(regular_end + timedelta(hours=max_overtime)))
    pieces = [(LogType.REGULAR, start, regular_end), (LogType.OVERTIME, regular_end, overtime_end)]
    if overtime_end < end:
        pieces.append((LogType.EXTENDED_OVERTIME, overtime_end, end))

    if log.overtime_status and log.overtime_status != OvertimeStatus.NONE:
        overtime_status = log.overtime_status
    else:
        overtime_status = OvertimeStatus.PENDING

    records = []
    for log_type, time_in, time_out in pieces:
        records.append(log.model_copy(update={
            "id": log.id if log_type == log.log_type else f"{log.id}-{log_type.value}",
            "time_in": time_in,
            "time_out": time_out,
            "status": LogStatus.COMPLETED,
            "log_type": log_type,
            "overtime_status": None if log_type == LogType.REGULAR else overtime_status,
        }))
    return records
