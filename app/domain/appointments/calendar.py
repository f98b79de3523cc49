"""
Calendar arithmetic for the appointments screen
Month grids, day ranges and day-view time slots
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

GRID_DAYS = 42  # six weeks
FIRST_DAY_OF_WEEK = 6  # Sunday, in date.weekday() numbering

DAY_VIEW_START_MINUTES = 8 * 60
DAY_VIEW_END_MINUTES = 17 * 60
DAY_VIEW_SLOT_MINUTES = 15


def parse_month(value: Optional[str], today: Optional[date] = None) -> date:
    """
    Parse "YYYY-MM" into the first day of that month; None means the current month.

    Raises:
        ValueError: If the value is not a valid year-month
    """
    if not value:
        today = today or date.today()
        return today.replace(day=1)
    try:
        return datetime.strptime(value.strip(), "%Y-%m").date()
    except ValueError as e:
        raise ValueError("month must be formatted as YYYY-MM") from e


def month_bounds(month_start: date) -> tuple[datetime, datetime]:
    """First and last instant of the month"""
    if month_start.month == 12:
        next_month = date(month_start.year + 1, 1, 1)
    else:
        next_month = date(month_start.year, month_start.month + 1, 1)
    start = datetime.combine(month_start.replace(day=1), time.min)
    end = datetime.combine(next_month - timedelta(days=1), time.max)
    return start, end


def month_grid(month_start: date) -> list[date]:
    """42 consecutive days starting on the Sunday on or before the 1st"""
    first = month_start.replace(day=1)
    offset = (first.weekday() - FIRST_DAY_OF_WEEK) % 7
    grid_start = first - timedelta(days=offset)
    return [grid_start + timedelta(days=i) for i in range(GRID_DAYS)]


def date_range(first: date, second: date) -> list[date]:
    """Every day between the two dates inclusive, whichever was picked first"""
    start, end = sorted((first, second))
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def day_slots() -> list[int]:
    """Slot start times in minutes after midnight"""
    return list(range(DAY_VIEW_START_MINUTES, DAY_VIEW_END_MINUTES, DAY_VIEW_SLOT_MINUTES))


def slot_label(total_minutes: int) -> str:
    """Hour label for a slot; quarter-hour slots are unlabelled"""
    # The last slot closes the day
    if total_minutes == DAY_VIEW_END_MINUTES - DAY_VIEW_SLOT_MINUTES:
        return "5:00 PM"

    if total_minutes % 60 != 0:
        return ""

    hour = total_minutes // 60
    suffix = "PM" if hour >= 12 else "AM"
    display = hour % 12 or 12
    return f"{display}:00 {suffix}"
