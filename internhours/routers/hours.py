import logging
from datetime import datetime
from pytz import UTC
from fastapi import APIRouter
from internhours.schemas.hours import SessionsRequest, ProgressRequest, LongLogsRequest
from internhours.models.statistics import InternshipProgress, TimeStatistics, LongLogSummary
from internhours.utils.session_utils import build_sessions_by_day
from internhours.utils.duration_utils import split_day
from internhours.utils.statistics_utils import compute_progress, compute_time_statistics
from internhours.utils.long_log_utils import find_long_logs, split_long_log
from internhours.exceptions import get_invalid_hours_exception, get_unknown_owner_exception

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sessions")
async def list_sessions(payload: SessionsRequest):
    """
    Rebuild sessions from a log snapshot and split each day into regular and overtime hours.
    Args:
        payload (SessionsRequest): the raw logs, the snapshot instant (defaults to now) and
            an optional freeze instant for a live session.
    Returns:
        dict: A dictionary containing:
            - as_of (datetime): the snapshot instant used
            - days (list): per owner and day, the sessions in time-in order, each with its
              accurate (capped) and raw durations
    """
    as_of = payload.as_of or datetime.now(UTC)
    sessions_by_day = build_sessions_by_day(payload.logs, as_of, payload.freeze_at)
    days = [split_day(sessions, as_of, payload.freeze_at) for sessions in sessions_by_day.values()]
    return {"as_of": as_of, "days": days}


@router.post("/progress", response_model=InternshipProgress)
async def get_progress(payload: ProgressRequest):
    """
    Hours credited toward the internship and the progress percentage.
    Every screen showing completed hours should use this figure as-is.
    Raises:
        HTTPException: 400 if required_hours is negative
    """
    if payload.required_hours is not None and payload.required_hours < 0:
        raise get_invalid_hours_exception()

    return compute_progress(
        payload.logs,
        payload.owner_id,
        required_hours=payload.required_hours,
        include_edit_requests=payload.include_edit_requests,
        edit_requests=payload.edit_requests,
    )


@router.post("/statistics", response_model=TimeStatistics)
async def get_statistics(payload: ProgressRequest):
    """
    Full hours statistics for one intern: credited progress, regular hours, overtime by
    approval status and the per-day accounting behind them.
    Raises:
        HTTPException:
            - 400 if required_hours is negative
            - 404 if the snapshot holds no logs for the intern
    """
    if payload.required_hours is not None and payload.required_hours < 0:
        raise get_invalid_hours_exception()
    if not any(log.owner_id == payload.owner_id for log in payload.logs):
        raise get_unknown_owner_exception()

    statistics = compute_time_statistics(
        payload.logs,
        payload.owner_id,
        required_hours=payload.required_hours,
        include_edit_requests=payload.include_edit_requests,
        edit_requests=payload.edit_requests,
        as_of=datetime.now(UTC),
    )
    logger.info("Computed statistics for intern %s: %s hours", payload.owner_id, statistics.internship_progress)
    return statistics


@router.post("/long-logs", response_model=LongLogSummary)
async def check_long_logs(payload: LongLogsRequest):
    """Report completed logs that exceed the hours their log type allows."""
    return find_long_logs(payload.logs)


@router.post("/long-logs/split")
async def split_long_logs(payload: LongLogsRequest):
    """
    Cut every log that runs past the daily cap into regular, overtime and extended overtime records.
    Nothing is stored; the caller replaces its records with the ones returned.
    Returns:
        dict: A dictionary containing:
            - logs (list): the snapshot with every long log replaced by its pieces
            - split_log_ids (list): ids of the logs that were cut
    """
    logs, split_log_ids = [], []
    for log in payload.logs:
        pieces = split_long_log(log)
        if len(pieces) > 1:
            split_log_ids.append(log.id)
        logs.extend(pieces)
    if split_log_ids:
        logger.info("Split %d long time logs", len(split_log_ids))
    return {"logs": logs, "split_log_ids": split_log_ids}
