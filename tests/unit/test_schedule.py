"""Unit tests for the payback schedule calculator"""

from datetime import date, timedelta
from mca_servicing.domain.models import PaybackFrequency, ScheduleResult
from mca_servicing.domain.schedule import (
    MAX_PAYBACK_COUNT,
    calculate_schedule,
    get_next_payback_date,
    get_scheduled_end_date,
    normalize_payday_list,
)

MONDAY = date(2024, 1, 1)
SATURDAY = date(2024, 1, 6)
WEEKDAYS = [1, 2, 3, 4, 5]


def test_daily_next_payback_skips_weekend():
    """Saturday start with Mon-Fri paydays lands on the following Monday"""
    next_date = get_next_payback_date(SATURDAY, "DAILY", WEEKDAYS, today=SATURDAY)
    assert next_date == "2024-01-08"


def test_weekly_next_payback_on_selected_weekday():
    """Wednesday payday from a Monday start is 2 days later"""
    next_date = get_next_payback_date(MONDAY, "WEEKLY", [3], today=MONDAY)
    assert next_date == (MONDAY + timedelta(days=2)).isoformat()


def test_monthly_next_payback_clamps_to_short_month():
    """Day 31 in a 30-day month falls on the 30th instead of an invalid date"""
    start = date(2024, 4, 10)
    assert get_next_payback_date(start, "MONTHLY", [31], today=start) == "2024-04-30"


def test_monthly_next_payback_clamps_to_february():
    start = date(2024, 2, 1)
    assert get_next_payback_date(start, "MONTHLY", [30], today=start) == "2024-02-29"


def test_next_payback_never_before_today():
    """Start dates in the past roll forward to the first payday on/after today"""
    today = date(2024, 1, 10)  # Wednesday
    assert get_next_payback_date(MONDAY, "DAILY", WEEKDAYS, today=today) == "2024-01-10"
    assert get_next_payback_date(MONDAY, "WEEKLY", [1], today=today) == "2024-01-15"
    assert get_next_payback_date(MONDAY, "MONTHLY", [5], today=today) == "2024-02-05"


def test_next_payback_on_start_date_when_it_is_a_payday():
    assert get_next_payback_date(MONDAY, "DAILY", WEEKDAYS, today=MONDAY) == "2024-01-01"


def test_daily_scheduled_end_date_ten_business_days():
    """10 Mon-Fri paybacks from a Monday end the day after the second Friday"""
    end_date = get_scheduled_end_date(MONDAY, "DAILY", WEEKDAYS, 10)

    assert end_date == "2024-01-13"
    assert date.fromisoformat(end_date) < MONDAY + timedelta(weeks=2)


def test_weekly_scheduled_end_date():
    assert get_scheduled_end_date(MONDAY, "WEEKLY", [1], 4) == "2024-01-29"


def test_monthly_scheduled_end_date_clamps_month_end():
    assert get_scheduled_end_date(date(2024, 1, 31), "MONTHLY", [31], 1) == "2024-02-29"
    assert get_scheduled_end_date(date(2024, 1, 15), "MONTHLY", [15], 12) == "2025-01-15"


def test_missing_inputs_yield_empty_string():
    assert get_next_payback_date(None, "DAILY", WEEKDAYS) == ""
    assert get_next_payback_date("", "DAILY", WEEKDAYS) == ""
    assert get_next_payback_date(MONDAY, None, WEEKDAYS) == ""
    assert get_next_payback_date(MONDAY, "DAILY", []) == ""
    assert get_scheduled_end_date(None, "DAILY", WEEKDAYS, 10) == ""
    assert get_scheduled_end_date(MONDAY, "DAILY", [], 10) == ""


def test_zero_payback_count_only_blanks_end_date():
    result = calculate_schedule(MONDAY, "DAILY", WEEKDAYS, 0, today=MONDAY)
    assert result == ScheduleResult(next_payback_date="2024-01-01", scheduled_end_date="")


def test_unusable_inputs_yield_empty_string():
    """Unknown frequencies and out-of-range selectors never loop or raise"""
    assert get_next_payback_date(MONDAY, "YEARLY", WEEKDAYS) == ""
    assert get_next_payback_date(MONDAY, "DAILY", [9]) == ""
    assert get_scheduled_end_date(MONDAY, "MONTHLY", [0], 3) == ""
    assert get_next_payback_date("not-a-date", "DAILY", WEEKDAYS) == ""


def test_inputs_accept_iso_strings_and_any_case():
    result = calculate_schedule("2024-01-06", "daily", WEEKDAYS, 5, today=SATURDAY)
    assert result.next_payback_date == "2024-01-08"
    assert result.scheduled_end_date == "2024-01-13"


def test_normalize_payday_list():
    assert normalize_payday_list(PaybackFrequency.DAILY, [5, 1, 3, 1, 7]) == [1, 3, 5]
    assert normalize_payday_list(PaybackFrequency.MONTHLY, [0, 31, 15]) == [15, 31]
    assert normalize_payday_list(PaybackFrequency.WEEKLY, None) == []


def test_payback_count_above_limit_yields_empty_string():
    assert get_scheduled_end_date(MONDAY, "MONTHLY", [1], MAX_PAYBACK_COUNT + 1) == ""
    assert get_scheduled_end_date(MONDAY, "DAILY", WEEKDAYS, MAX_PAYBACK_COUNT) != ""


def test_dates_past_the_calendar_yield_empty_string():
    """Arithmetic beyond year 9999 never escapes the calculator"""
    assert get_scheduled_end_date(date(9999, 6, 1), "MONTHLY", [1], 12) == ""
    assert get_scheduled_end_date(date(9999, 12, 1), "WEEKLY", [1], 10) == ""
    assert get_scheduled_end_date(date(9999, 12, 30), "DAILY", WEEKDAYS, 10) == ""
    assert get_next_payback_date(date(9999, 12, 31), "MONTHLY", [15], today=MONDAY) == ""


def test_malformed_paydays_yield_empty_string():
    assert get_next_payback_date(MONDAY, "DAILY", ["x"]) == ""
    assert get_next_payback_date(MONDAY, "DAILY", [None]) == ""
    assert calculate_schedule(MONDAY, "DAILY", 5, 3, today=MONDAY) == ScheduleResult("", "")
