import logging

import pytest

from internhours import compute_progress, compute_time_statistics
from internhours.models.sessions import ClockState
from internhours.models.statistics import InternshipProgress
from internhours.models.time_logs import EditRequest, OvertimeStatus
from internhours.utils.statistics_utils import apply_edit_requests, clock_state


def test_end_to_end_overtime_counts_only_once_approved(make_log):
    pending = [make_log("09:00", "18:30")]
    approved = [make_log("09:00", "18:30", overtime_status="approved")]

    before = compute_progress(pending, "7", required_hours=520)
    after = compute_progress(approved, "7", required_hours=520)

    assert before.internship_progress == 9.0
    assert before.progress_percentage == pytest.approx(9.0 / 520 * 100)
    assert after.internship_progress == 9.5
    assert after.progress_percentage == pytest.approx(9.5 / 520 * 100)


def test_rejected_overtime_contributes_nothing(make_log):
    logs = [
        make_log("09:00", "18:00"),
        make_log("18:00", "20:00", log_type="overtime", overtime_status="rejected"),
    ]

    statistics = compute_time_statistics(logs, "7", required_hours=520)

    assert statistics.internship_progress == 9.0
    assert statistics.overtime_hours.rejected == 2.0
    rejected = statistics.days[0].sessions[1]
    assert rejected.raw.overtime_hours == 2.0
    assert rejected.raw.overtime_status == OvertimeStatus.REJECTED


def test_lone_rejected_overtime_session_is_not_credited(make_log):
    logs = [make_log("10:00", "12:00", log_type="overtime", overtime_status="rejected")]

    assert compute_progress(logs, "7", required_hours=520).internship_progress == 0.0


def test_approved_overtime_session_is_credited(make_log):
    logs = [
        make_log("09:00", "18:00"),
        make_log("18:00", "20:00", log_type="overtime", overtime_status="approved"),
    ]

    assert compute_progress(logs, "7", required_hours=520).internship_progress == 11.0


def test_approved_edit_request_is_counted_exactly_once(make_log, at):
    log = make_log("09:00", "17:00")
    request = EditRequest(id="1", log_id=log.id, requested_time_in=at("09:00"),
                          requested_time_out=at("18:00"), original_time_in=log.time_in,
                          original_time_out=log.time_out, status="approved")

    with_edits = compute_progress([log], "7", 520, include_edit_requests=True, edit_requests=[request])
    without_edits = compute_progress([log], "7", 520, include_edit_requests=False, edit_requests=[request])

    assert with_edits.internship_progress == 9.0
    assert without_edits.internship_progress == 8.0
    assert len(apply_edit_requests([log], [request])) == 1


@pytest.mark.parametrize("status", ["pending", "rejected", "reverted"])
def test_unapproved_edit_requests_change_nothing(make_log, at, status):
    log = make_log("09:00", "17:00")
    request = {"id": 1, "log_id": log.id, "requested_time_in": at("09:00"),
               "requested_time_out": at("18:00"), "status": status}

    progress = compute_progress([log], "7", 520, include_edit_requests=True, edit_requests=[request])

    assert progress.internship_progress == 8.0


def test_approved_edit_request_with_highest_id_wins(make_log, at):
    log = make_log("09:00", "17:00")
    requests = [
        {"id": 2, "log_id": log.id, "requested_time_out": at("16:00"), "status": "approved"},
        {"id": 1, "log_id": log.id, "requested_time_out": at("18:00"), "status": "approved"},
    ]

    corrected = apply_edit_requests([log], requests)

    assert len(corrected) == 1
    assert corrected[0].time_out == at("16:00")
    assert corrected[0].time_in == log.time_in


def test_numeric_edit_request_ids_are_ordered_as_numbers(make_log, at):
    log = make_log("09:00", "17:00")
    requests = [
        {"id": 10, "log_id": log.id, "requested_time_out": at("16:00"), "status": "approved"},
        {"id": 9, "log_id": log.id, "requested_time_out": at("18:00"), "status": "approved"},
    ]

    assert apply_edit_requests([log], requests)[0].time_out == at("16:00")


def test_edit_request_can_close_an_open_log(make_log, at):
    log = make_log("09:00")
    request = {"id": 1, "log_id": log.id, "requested_time_out": at("17:00"), "status": "approved"}

    progress = compute_progress([log], "7", 520, include_edit_requests=True, edit_requests=[request])

    assert progress.internship_progress == 8.0


def test_edit_request_moving_day_is_logged(make_log, at, caplog):
    log = make_log("09:00", "17:00")
    request = {"id": 1, "log_id": log.id, "requested_time_in": at("09:00", "2025-03-04"),
               "requested_time_out": at("17:00", "2025-03-04"), "status": "approved"}

    with caplog.at_level(logging.WARNING):
        statistics = compute_time_statistics([log], "7", 520, include_edit_requests=True, edit_requests=[request])

    assert statistics.days[0].day == "2025-03-04"
    assert "moves time log" in caplog.text


def test_compute_progress_is_idempotent(make_log):
    logs = [make_log("09:00", "18:30"), make_log("09:00", "12:00", day="2025-03-04"), make_log("13:00")]

    assert compute_progress(logs, "7", 520) == compute_progress(logs, "7", 520)


@pytest.mark.parametrize("required_hours", [0, None])
def test_missing_required_hours_gives_zero_percent(make_log, required_hours):
    progress = compute_progress([make_log("09:00", "17:00")], "7", required_hours)

    assert progress.internship_progress == 8.0
    assert progress.progress_percentage == 0


def test_percentage_is_not_clamped(make_log):
    progress = compute_progress([make_log("09:00", "18:00")], "7", 5)

    assert progress.progress_percentage == pytest.approx(180.0)
    assert progress.display_percentage == 100.0


def test_open_sessions_do_not_count_as_completed(make_log, at):
    logs = [make_log("09:00", "12:00"), make_log("13:00")]

    statistics = compute_time_statistics(logs, "7", 520, as_of=at("15:00"))

    assert statistics.internship_progress == 3.0
    assert statistics.active_session
    assert statistics.days[0].sessions[1].accurate.regular_hours == 2.0


def test_open_record_before_a_completed_one_leaves_its_allowance(make_log, at):
    logs = [make_log("09:00"), make_log("10:00", "12:00")]

    progress = compute_progress(logs, "7", required_hours=520)
    statistics = compute_time_statistics(logs, "7", 520, as_of=at("20:00"))

    assert progress.internship_progress == 2.0
    assert statistics.internship_progress == 2.0
    live, completed = statistics.days[0].sessions
    assert live.session.is_active
    assert completed.accurate.regular_hours == 2.0
    assert live.accurate.regular_hours == 7.0
    assert live.raw.overtime_hours == 4.0


def test_progress_does_not_depend_on_as_of(make_log, at):
    logs = [make_log("09:00"), make_log("10:00", "12:00"), make_log("13:00", "15:00")]

    early = compute_time_statistics(logs, "7", 520, as_of=at("12:30"))
    late = compute_time_statistics(logs, "7", 520, as_of=at("23:00"))

    assert early.to_progress() == late.to_progress() == compute_progress(logs, "7", 520)


def test_future_dated_records_count_in_every_entry_point(make_log, at):
    logs = [make_log("09:00", "17:00"), make_log("09:00", "17:00", day="2099-01-01")]

    statistics = compute_time_statistics(logs, "7", 520, as_of=at("20:00"))

    assert statistics.internship_progress == 16.0
    assert statistics.to_progress() == compute_progress(logs, "7", 520)


def test_totals_across_days(make_log):
    logs = [
        make_log("09:00", "18:30"),
        make_log("09:00", "18:30", day="2025-03-04"),
        make_log("09:00", "12:00", owner_id="8"),
    ]

    statistics = compute_time_statistics(logs, 7, required_hours=520)

    assert statistics.owner_id == "7"
    assert statistics.internship_progress == 18.0
    assert statistics.regular_hours == 18.0
    assert statistics.overtime_hours.pending == 1.0
    assert statistics.total_hours_rendered == 19.0
    assert statistics.days_worked == 2
    assert statistics.remaining_hours == 502.0
    assert len(statistics.days) == 2


def test_malformed_record_does_not_break_the_total(make_log, at):
    logs = [
        make_log("09:00", "12:00"),
        {"id": 99, "user_id": 7, "time_in": "not-a-date", "time_out": at("17:00")},
        {"id": 100, "user_id": 7, "time_in": at("13:00"), "time_out": "garbage"},
    ]

    assert compute_progress(logs, "7", 520).internship_progress == 3.0


def test_to_progress_matches_compute_progress(make_log):
    logs = [make_log("09:00", "18:30", overtime_status="approved")]

    statistics = compute_time_statistics(logs, "7", 520)

    assert statistics.to_progress() == compute_progress(logs, "7", 520)
    assert isinstance(statistics.to_progress(), InternshipProgress)


def test_clock_state_transitions(make_log, at):
    assert clock_state([], "7", as_of=at("08:00")) == ClockState.NOT_CLOCKED_IN
    assert clock_state([make_log("09:00")], "7", as_of=at("10:00")) == ClockState.CLOCKED_IN
    assert clock_state([make_log("09:00")], "7", as_of=at("18:30"), freeze_at=at("18:00")) == ClockState.AUTO_TIMED_OUT
    assert clock_state([make_log("09:00", "12:00")], "7", as_of=at("13:00")) == ClockState.CLOCKED_OUT
    assert clock_state([make_log("09:00", "18:00")], "7", as_of=at("18:05")) == ClockState.OVERTIME_ELIGIBLE

    overtime_in = [make_log("09:00", "18:00"), make_log("18:10", log_type="overtime")]
    assert clock_state(overtime_in, "7", as_of=at("19:00")) == ClockState.OVERTIME_CLOCKED_IN

    overtime_out = [make_log("09:00", "18:00"), make_log("18:10", "20:00", log_type="overtime")]
    assert clock_state(overtime_out, "7", as_of=at("20:30")) == ClockState.OVERTIME_CLOCKED_OUT


def test_clock_state_only_looks_at_today(make_log, at):
    logs = [make_log("09:00", "18:00", day="2025-03-02")]

    assert clock_state(logs, "7", as_of=at("08:00")) == ClockState.NOT_CLOCKED_IN


def test_statistics_report_clock_state(make_log, at):
    statistics = compute_time_statistics([make_log("09:00")], "7", 520, as_of=at("10:00"))

    assert statistics.clock_state == ClockState.CLOCKED_IN
