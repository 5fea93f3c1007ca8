"""Payback plan schedule calculator: next payback date and scheduled end date"""

import math
from datetime import date, timedelta
from typing import Iterable, List, Optional, Union

from mca_servicing.domain.models import PaybackFrequency, ScheduleResult
from mca_servicing.utils.date_utils import (
    add_months,
    days_in_month,
    parse_date,
    weekday_index,
)

DateInput = Union[date, str, None]

# Longest plan the calculator projects; larger counts run past the calendar
MAX_PAYBACK_COUNT = 10_000

# Raised by date arithmetic past date.max and by non-integer selectors
_UNCOMPUTABLE = (OverflowError, ValueError, TypeError)


def parse_frequency(frequency: Union[PaybackFrequency, str, None]) -> Optional[PaybackFrequency]:
    """Accept enum members or case-insensitive names ("Daily", "DAILY")"""
    if not frequency:
        return None
    if isinstance(frequency, PaybackFrequency):
        return frequency
    try:
        return PaybackFrequency(str(frequency).upper())
    except ValueError:
        return None


def normalize_payday_list(frequency: PaybackFrequency, payday_list: Optional[Iterable[int]]) -> List[int]:
    """Sorted, de-duplicated selectors that are in range for the frequency"""
    if not payday_list:
        return []
    if frequency == PaybackFrequency.MONTHLY:
        valid = range(1, 32)
    else:
        valid = range(0, 7)
    return sorted({int(day) for day in payday_list if int(day) in valid})


def _monthly_payday(day: date, selector: int) -> bool:
    # Selectors past the end of a short month fire on its last day
    return day.day == min(selector, days_in_month(day.year, day.month))


def get_next_payback_date(
    start_date: DateInput,
    frequency: Union[PaybackFrequency, str, None],
    payday_list: Optional[Iterable[int]],
    today: Optional[date] = None,
) -> str:
    """
    First payday on or after both the start date and today.

    DAILY matches any weekday in payday_list, WEEKLY the single weekday in
    payday_list[0], MONTHLY the day of month in payday_list[0].

    Returns:
        ISO date string, or "" when the inputs cannot produce a date
    """
    start = parse_date(start_date)
    freq = parse_frequency(frequency)
    if start is None or freq is None:
        return ""

    try:
        paydays = normalize_payday_list(freq, payday_list)
        if not paydays:
            return ""
        return _walk_to_payday(max(start, today or date.today()), freq, paydays).isoformat()
    except _UNCOMPUTABLE:
        return ""


def _walk_to_payday(next_date: date, freq: PaybackFrequency, paydays: List[int]) -> date:
    if freq == PaybackFrequency.DAILY:
        while weekday_index(next_date) not in paydays:
            next_date += timedelta(days=1)
    elif freq == PaybackFrequency.WEEKLY:
        target_day = paydays[0]
        while weekday_index(next_date) != target_day:
            next_date += timedelta(days=1)
    else:
        target_day = paydays[0]
        while not _monthly_payday(next_date, target_day):
            next_date += timedelta(days=1)
    return next_date


def get_scheduled_end_date(
    start_date: DateInput,
    frequency: Union[PaybackFrequency, str, None],
    payday_list: Optional[Iterable[int]],
    payback_count: Optional[int],
) -> str:
    """
    Projected end date of a plan with payback_count payments from start_date.

    - DAILY: count paydays from start_date; the end date is the day after
      the last counted payday
    - WEEKLY: ceil(payback_count / len(payday_list)) weeks after start_date
    - MONTHLY: payback_count calendar months after start_date (clamped)

    Returns:
        ISO date string, or "" when the inputs cannot produce a date
        (including counts above MAX_PAYBACK_COUNT)
    """
    start = parse_date(start_date)
    freq = parse_frequency(frequency)
    if start is None or freq is None:
        return ""

    try:
        if not payback_count or not 0 < int(payback_count) <= MAX_PAYBACK_COUNT:
            return ""
        paydays = normalize_payday_list(freq, payday_list)
        if not paydays:
            return ""
        return _project_end_date(start, freq, paydays, int(payback_count)).isoformat()
    except _UNCOMPUTABLE:
        return ""


def _project_end_date(start: date, freq: PaybackFrequency, paydays: List[int], payback_count: int) -> date:
    if freq == PaybackFrequency.DAILY:
        counted = 0
        current = start
        while counted < payback_count:
            if weekday_index(current) in paydays:
                counted += 1
            current += timedelta(days=1)
        return current
    if freq == PaybackFrequency.WEEKLY:
        weeks = math.ceil(payback_count / len(paydays))
        return start + timedelta(weeks=weeks)
    return add_months(start, payback_count)



def calculate_schedule(
    start_date: DateInput,
    frequency: Union[PaybackFrequency, str, None],
    payday_list: Optional[Iterable[int]],
    payback_count: Optional[int],
    today: Optional[date] = None,
) -> ScheduleResult:
    """Main entry point: both calculated dates for a payback plan form"""
    try:
        paydays = list(payday_list) if payday_list else []
    except TypeError:
        paydays = []
    return ScheduleResult(
        next_payback_date=get_next_payback_date(start_date, frequency, paydays, today=today),
        scheduled_end_date=get_scheduled_end_date(start_date, frequency, paydays, payback_count),
    )
