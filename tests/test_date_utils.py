"""Tests for date helpers."""

from datetime import date, datetime

import pytz

from holiday_calendars.utils.date_utils import ensure_utc, format_day, get_holiday_window, shift_years


def test_plain_date_is_midnight_utc():
    assert ensure_utc(date(2025, 12, 25)) == datetime(2025, 12, 25, tzinfo=pytz.utc)


def test_aware_datetime_is_converted():
    berlin = pytz.timezone("Europe/Berlin").localize(datetime(2025, 12, 25, 0, 30))

    assert ensure_utc(berlin) == datetime(2025, 12, 24, 23, 30, tzinfo=pytz.utc)


def test_leap_day_shift_clamps():
    assert shift_years(datetime(2024, 2, 29), 1) == datetime(2025, 2, 28)


def test_holiday_window():
    now = datetime(2025, 6, 1, tzinfo=pytz.utc)

    assert get_holiday_window(now) == (
        datetime(2024, 6, 1, tzinfo=pytz.utc),
        datetime(2028, 6, 1, tzinfo=pytz.utc),
    )


def test_format_day():
    assert format_day(datetime(2025, 1, 5, 23, 0)) == "2025-01-05"
    assert format_day(date(999, 1, 5)) == "0999-01-05"
