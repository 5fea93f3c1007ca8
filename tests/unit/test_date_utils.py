"""Unit tests for date utilities"""

from datetime import date, datetime
from mca_servicing.utils.date_utils import (
    add_months,
    clamp_day,
    is_holiday,
    parse_date,
    roll_past_holidays,
    weekday_index,
)


def test_weekday_index_starts_on_sunday():
    assert weekday_index(date(2024, 1, 7)) == 0
    assert weekday_index(date(2024, 1, 1)) == 1
    assert weekday_index(date(2024, 1, 6)) == 6


def test_parse_date():
    assert parse_date("2024-01-06") == date(2024, 1, 6)
    assert parse_date("2024-01-06T10:30:00Z") == date(2024, 1, 6)
    assert parse_date(datetime(2024, 1, 6, 10, 30)) == date(2024, 1, 6)
    assert parse_date("") is None
    assert parse_date("06/01/2024") is None


def test_month_arithmetic_clamps():
    assert clamp_day(2023, 2, 31) == date(2023, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 15)


def test_us_holidays():
    assert is_holiday(date(2024, 7, 4))
    assert is_holiday(date(2024, 12, 25))
    assert not is_holiday(date(2024, 7, 5))


def test_roll_past_holidays():
    assert roll_past_holidays(date(2024, 1, 15)) == date(2024, 1, 16)
    assert roll_past_holidays(date(2024, 1, 6)) == date(2024, 1, 6)
    assert roll_past_holidays(date(2024, 1, 6), skip_weekends=True) == date(2024, 1, 8)
