"""Tests for cool-off date arithmetic."""

from datetime import date, datetime, timedelta

import pytest

from cooloff_tracker.tracking.eligibility import (
    add_months,
    compute_cool_off_end,
    cool_off_after_status_change,
    days_remaining,
    is_cool_off_active,
)
from cooloff_tracker.tracking.models import ApplicationStatus, CoolOffStartType, JobApplication


def make_record(start_type=CoolOffStartType.APPLICATION, status=ApplicationStatus.APPLIED) -> JobApplication:
    return JobApplication(
        id=1,
        company="Acme",
        job_title="Engineer",
        location="NY",
        status=status,
        applied_date=date(2024, 1, 1),
        cool_off_ends=date(2024, 7, 1),
        cool_off_start_type=start_type,
    )


@pytest.mark.parametrize("start, expected", [
    (date(2024, 1, 1), date(2024, 7, 1)),
    (date(2024, 1, 15), date(2024, 7, 15)),
    (date(2024, 9, 30), date(2025, 3, 30)),
    (date(2024, 12, 31), date(2025, 6, 30)),
])
def test_cool_off_is_six_calendar_months(start, expected):
    assert compute_cool_off_end(start) == expected


def test_month_end_clamps_to_last_day_of_target_month():
    assert compute_cool_off_end(date(2024, 8, 31)) == date(2025, 2, 28)
    assert compute_cool_off_end(date(2023, 8, 31)) == date(2024, 2, 29)
    assert compute_cool_off_end(date(2024, 3, 31)) == date(2024, 9, 30)


def test_compute_cool_off_end_accepts_datetime():
    assert compute_cool_off_end(datetime(2024, 1, 1, 18, 30)) == date(2024, 7, 1)


def test_add_months_custom_length():
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
    assert add_months(date(2024, 5, 10), 12) == date(2025, 5, 10)


def test_days_remaining_with_dates():
    end = date(2024, 7, 1)
    assert days_remaining(end, date(2024, 6, 21)) == 10
    assert days_remaining(end, date(2024, 7, 1)) == 0
    assert days_remaining(end, date(2024, 7, 4)) == -3


def test_days_remaining_rounds_up_partial_days():
    end = date(2024, 7, 1)
    assert days_remaining(end, datetime(2024, 6, 30, 12, 0)) == 1
    assert days_remaining(end, datetime(2024, 6, 29, 0, 1)) == 2
    assert days_remaining(end, datetime(2024, 7, 1, 0, 0)) == 0


def test_days_remaining_decreases_and_crosses_zero_on_end_date():
    end = date(2024, 7, 1)
    today = date(2024, 6, 1)
    previous = None
    while today <= end + timedelta(days=3):
        remaining = days_remaining(end, today)
        if previous is not None:
            assert remaining < previous
        assert is_cool_off_active(end, today) == (today < end)
        previous = remaining
        today += timedelta(days=1)


def test_rejection_restarts_cool_off_when_started_on_rejection():
    record = make_record(start_type=CoolOffStartType.REJECTION)
    assert cool_off_after_status_change(
        record, ApplicationStatus.REJECTED, date(2024, 3, 10)
    ) == date(2024, 9, 10)


def test_rejection_keeps_cool_off_when_started_on_application():
    record = make_record(start_type=CoolOffStartType.APPLICATION)
    assert cool_off_after_status_change(
        record, ApplicationStatus.REJECTED, date(2024, 3, 10)
    ) == record.cool_off_ends


@pytest.mark.parametrize("status", [
    ApplicationStatus.APPLIED,
    ApplicationStatus.INTERVIEWING,
    ApplicationStatus.OFFER,
    ApplicationStatus.WITHDRAWN,
])
def test_other_transitions_keep_cool_off(status):
    record = make_record(start_type=CoolOffStartType.REJECTION)
    assert cool_off_after_status_change(record, status, date(2024, 3, 10)) == record.cool_off_ends
