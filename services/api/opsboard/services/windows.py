"""Date windows for dashboard aggregates.

All windows are inclusive [start, end] calendar-date ranges derived from a
single reference day:

- MTD:          1st of the month .. today
- last month:   whole previous calendar month
- prior MTD:    1st of previous month .. same day-of-month (capped at its length)
- SMLY:         same month last year, 1st .. same day (capped at its length)
- this week:    today-6 .. today
- last week:    today-13 .. today-7
- YTD / prior YTD
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta


def days_in_month(year: int, month: int) -> int:
    """Number of days in a calendar month."""
    return calendar.monthrange(year, month)[1]


def _capped_day(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, days_in_month(year, month)))


@dataclass(frozen=True)
class DateWindows:
    """Reference-day date windows."""

    today: date

    month_start: date
    day_of_month: int
    days_in_current_month: int

    last_month_start: date
    last_month_end: date
    days_in_last_month: int
    prior_month_same_day: date

    smly_start: date
    smly_same_day: date
    smly_end_capped_28: date

    this_week_start: date
    last_week_start: date
    last_week_end: date

    ytd_start: date
    prior_ytd_start: date
    prior_ytd_end: date


def compute_windows(today: date) -> DateWindows:
    """Compute every dashboard window for a reference day.

    Args:
        today: Reference day (inclusive end of MTD/YTD windows).

    Returns:
        DateWindows with all boundaries resolved.
    """
    year, month, day = today.year, today.month, today.day

    month_start = today.replace(day=1)
    last_month_end = month_start - timedelta(days=1)
    last_month_start = last_month_end.replace(day=1)

    smly_year = year - 1

    return DateWindows(
        today=today,
        month_start=month_start,
        day_of_month=max(day, 1),
        days_in_current_month=days_in_month(year, month),
        last_month_start=last_month_start,
        last_month_end=last_month_end,
        days_in_last_month=last_month_end.day,
        prior_month_same_day=_capped_day(last_month_start.year, last_month_start.month, day),
        smly_start=date(smly_year, month, 1),
        smly_same_day=_capped_day(smly_year, month, day),
        smly_end_capped_28=date(smly_year, month, min(day, 28)),
        this_week_start=today - timedelta(days=6),
        last_week_start=today - timedelta(days=13),
        last_week_end=today - timedelta(days=7),
        ytd_start=date(year, 1, 1),
        prior_ytd_start=date(smly_year, 1, 1),
        prior_ytd_end=_capped_day(smly_year, month, day),
    )


def months_back_start(today: date, months: int) -> date:
    """First day of the month `months` calendar months before today's month."""
    index = today.year * 12 + (today.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)
