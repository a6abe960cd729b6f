"""Cool-off period arithmetic.

An application's cool-off ends a fixed number of calendar months after its
triggering event (applying, or being rejected). When the target month is
shorter than the start day, the end date is clamped to the last day of that
month: Aug 31 + 6 months is Feb 28 (Feb 29 in leap years).
"""

import calendar
import math
from datetime import date, datetime, timedelta
from typing import Optional, Union

from .models import ApplicationStatus, CoolOffStartType, JobApplication

COOL_OFF_MONTHS = 6

DateLike = Union[date, datetime]


def add_months(start: date, months: int) -> date:
    """Add calendar months to a date, clamping to the target month's last day."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def compute_cool_off_end(event_date: DateLike, months: int = COOL_OFF_MONTHS) -> date:
    """Date on which the cool-off that started on `event_date` ends."""
    if isinstance(event_date, datetime):
        event_date = event_date.date()
    return add_months(event_date, months)


def days_remaining(cool_off_end: date, today: Optional[DateLike] = None) -> int:
    """Whole days left until `cool_off_end`, rounded up.

    Positive means the cool-off is still running; zero or negative means the
    company can be applied to again. A `datetime` for `today` counts from that
    instant to the start of the end date.
    """
    if today is None:
        today = date.today()

    if isinstance(today, datetime):
        end = datetime.combine(cool_off_end, datetime.min.time(), tzinfo=today.tzinfo)
        return math.ceil((end - today) / timedelta(days=1))

    return (cool_off_end - today).days


def is_cool_off_active(cool_off_end: date, today: Optional[DateLike] = None) -> bool:
    return days_remaining(cool_off_end, today) > 0


def cool_off_after_status_change(
    record: JobApplication,
    new_status: ApplicationStatus,
    today: date,
    months: int = COOL_OFF_MONTHS
) -> date:
    """Cool-off end date after moving `record` to `new_status`.

    Only a rejection of an application whose cool-off starts on rejection
    restarts the clock, from `today`. Every other transition keeps the
    current end date.
    """
    if (
        new_status == ApplicationStatus.REJECTED
        and record.cool_off_start_type == CoolOffStartType.REJECTION
    ):
        return compute_cool_off_end(today, months)
    return record.cool_off_ends
