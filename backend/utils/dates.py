"""
Calendar helpers for placing plan items on a week/day grid.

Source dates are ``YYYY-MM-DD`` strings, optionally followed by a time
part. Weeks run Monday to Sunday; week 1 is the week containing the plan
start date.
"""

import re
from datetime import date, timedelta
from typing import Optional

from domain.models.enums import TrainingPhase

DATE_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")

DAY_KEYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def parse_source_date(value: Optional[str]) -> Optional[date]:
    """Parse the date part of a source timestamp, or None if it has none."""
    if not isinstance(value, str):
        return None
    match = DATE_PREFIX.match(value)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def day_of_week(day: date) -> int:
    """0 for Monday through 6 for Sunday."""
    return day.weekday()


def week_monday(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_number(day: date, start: date) -> int:
    """
    1-indexed plan week of ``day``.

    Both dates are normalized to their Monday first, so any day in the
    start date's week is week 1. Days in earlier weeks give 0 or less.
    """
    diff_days = (week_monday(day) - week_monday(start)).days
    return diff_days // 7 + 1


def infer_week_phase(week: int, total_weeks: int) -> TrainingPhase:
    """Training phase of a plan week from its position in the plan."""
    if total_weeks <= 1:
        return TrainingPhase.BASE
    if week == total_weeks:
        return TrainingPhase.RECOVERY

    progress = week / total_weeks
    if progress <= 0.5:
        return TrainingPhase.BASE
    if progress >= 0.85:
        return TrainingPhase.PEAK
    return TrainingPhase.BUILD
