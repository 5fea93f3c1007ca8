"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Optional, Union

import holidays
from dateutil.relativedelta import relativedelta

from mca_servicing.config import settings


def parse_date(value: Union[date, str, None]) -> Optional[date]:
    """Coerce a date, datetime or ISO string to a date; None when empty or unparseable"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def weekday_index(day: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6 (payday list convention)"""
    return day.isoweekday() % 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, pulling day-of-month back to the month's last day if needed"""
    return date(year, month, min(day, days_in_month(year, month)))


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the last day of the target month"""
    return from_date + relativedelta(months=months)


@lru_cache(maxsize=8)
def holiday_calendar(country: str) -> holidays.HolidayBase:
    return holidays.country_holidays(country)


def is_holiday(day: date, country: Optional[str] = None) -> bool:
    return day in holiday_calendar(country or settings.holiday_country)


def roll_past_holidays(day: date, skip_weekends: bool = False) -> date:
    """Move forward until the date is not a holiday (and optionally not a weekend)"""
    while is_holiday(day) or (skip_weekends and day.weekday() >= 5):
        day += timedelta(days=1)
    return day
