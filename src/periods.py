"""
Day / week / month ranges for date navigation.
"""

from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Optional

from models import TimeRange


class Period(Enum):
    DAY = 'day'
    WEEK = 'week'
    MONTH = 'month'

    @classmethod
    def parse(cls, value: str) -> 'Period':
        try:
            return cls(value.lower())
        except ValueError:
            return cls.DAY


def _midnight(day: date, tz: Optional[tzinfo]) -> int:
    return int(datetime.combine(day, time(0, 0), tzinfo=tz).timestamp())


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    # Clamp to the last day of the target month
    next_month = date(year + (month // 12), month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(day.day, last_day))


def period_bounds(reference: date, period: Period) -> tuple:
    """First day of the period and first day of the next one."""
    if period == Period.WEEK:
        start = reference - timedelta(days=reference.weekday())  # Monday
        return start, start + timedelta(days=7)
    if period == Period.MONTH:
        start = reference.replace(day=1)
        return start, _add_months(start, 1)
    return reference, reference + timedelta(days=1)


def period_range(reference: date, period: Period, tz: Optional[tzinfo] = None) -> TimeRange:
    """Absolute range (Unix seconds) covering the period around `reference`."""
    start, end = period_bounds(reference, period)
    return TimeRange(_midnight(start, tz), _midnight(end, tz))


def shift(reference: date, period: Period, direction: int) -> date:
    """Move the reference date one period back (-1) or forward (+1)."""
    if period == Period.WEEK:
        return reference + timedelta(days=7 * direction)
    if period == Period.MONTH:
        return _add_months(reference, direction)
    return reference + timedelta(days=direction)


def period_label(reference: date, period: Period) -> str:
    if period == Period.DAY:
        return reference.strftime('%A, %B %d, %Y')
    if period == Period.WEEK:
        start, end = period_bounds(reference, period)
        end = end - timedelta(days=1)
        if start.month == end.month:
            return f"{start.strftime('%b %d')} - {end.strftime('%d, %Y')}"
        return f"{start.strftime('%b %d')} - {end.strftime('%b %d, %Y')}"
    return reference.strftime('%B %Y')
