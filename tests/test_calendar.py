"""
Tests for the business-hours calendar.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

from datetime import date, datetime, time

import pytest
from pydantic import ValidationError

from orderseed.errors import NoOpenDayInRangeError
from orderseed.sampling.calendar import (
    BusinessCalendar,
    DailyHours,
    default_weekly_hours,
)
from orderseed.sampling.weighted import WeightedSampler


class TestDailyHours:
    """Tests for DailyHours validation."""

    def test_valid_hours(self):
        """Test a normal opening window."""
        hours = DailyHours(opens=time(9), closes=time(17))
        assert hours.opens < hours.closes

    def test_close_before_open_rejected(self):
        """Test rejection of an inverted window."""
        with pytest.raises(ValidationError):
            DailyHours(opens=time(17), closes=time(9))


class TestWeeklySchedule:
    """Tests for the default weekly schedule."""

    def test_closed_sunday(self, calendar):
        """Test Sunday has no window."""
        assert calendar.hours_for(date(2025, 6, 15)) is None
        assert not calendar.is_open(date(2025, 6, 15))

    def test_weekday_window(self, calendar):
        """Test Monday through Thursday hours."""
        window = calendar.hours_for(date(2025, 6, 11))
        assert window.open == datetime(2025, 6, 11, 10, 30)
        assert window.close == datetime(2025, 6, 11, 22, 0)

    def test_friday_late_close(self, calendar):
        """Test Friday closes at 22:30."""
        window = calendar.hours_for(date(2025, 6, 13))
        assert window.close == datetime(2025, 6, 13, 22, 30)

    def test_saturday_early_close(self, calendar):
        """Test Saturday closes at 20:00."""
        window = calendar.hours_for(datetime(2025, 6, 14, 8, 0))
        assert window.open == datetime(2025, 6, 14, 10, 30)
        assert window.close == datetime(2025, 6, 14, 20, 0)

    def test_default_covers_all_weekdays(self):
        """Test every weekday number is present."""
        assert set(default_weekly_hours()) == set(range(7))

    def test_open_days_between(self, calendar):
        """Test enumeration skips Sundays."""
        days = calendar.open_days_between(date(2025, 6, 9), date(2025, 6, 22))
        assert len(days) == 12
        assert all(d.weekday() != 6 for d in days)

    def test_last_open_day(self, calendar):
        """Test walking back from a closed day."""
        assert calendar.last_open_day(date(2025, 6, 15)) == date(2025, 6, 14)
        assert calendar.last_open_day(date(2025, 6, 11)) == date(2025, 6, 11)

    def test_last_open_day_never_open(self):
        """Test a schedule with no open day."""
        calendar = BusinessCalendar(weekly_hours={})
        with pytest.raises(NoOpenDayInRangeError):
            calendar.last_open_day(date(2025, 6, 11))


class TestRandomTimestamp:
    """Tests for BusinessCalendar.random_timestamp."""

    def test_always_inside_business_hours(self, calendar):
        """Test every draw falls inside its day's window."""
        start = datetime(2025, 6, 2, 10, 30)
        end = datetime(2025, 6, 28, 20, 0)

        for _ in range(2000):
            instant = calendar.random_timestamp(start, end)
            window = calendar.hours_for(instant)

            assert window is not None
            assert window.contains(instant)
            assert start.date() <= instant.date() <= end.date()

    def test_spreads_over_open_days(self, calendar):
        """Test draws reach every weekday except Sunday."""
        start = datetime(2025, 6, 2, 0, 0)
        end = datetime(2025, 6, 29, 23, 59)
        weekdays = {calendar.random_timestamp(start, end).weekday() for _ in range(2000)}

        assert weekdays == {0, 1, 2, 3, 4, 5}

    def test_single_window(self, calendar):
        """Test a range equal to one day's window."""
        window = calendar.hours_for(date(2025, 6, 11))
        for _ in range(200):
            assert window.contains(calendar.random_timestamp(window.open, window.close))

    def test_closed_range_raises(self, calendar):
        """Test a range covering only a Sunday."""
        with pytest.raises(NoOpenDayInRangeError):
            calendar.random_timestamp(
                datetime(2025, 6, 15, 0, 0), datetime(2025, 6, 15, 23, 59)
            )

    def test_enumeration_fallback(self):
        """Test a sparse schedule still yields its only open day."""
        monday_only = {0: DailyHours(opens=time(9), closes=time(17))}
        calendar = BusinessCalendar(
            weekly_hours=monday_only, sampler=WeightedSampler(seed=1), max_attempts=1
        )
        start = datetime(2025, 6, 3, 0, 0)  # Tuesday
        end = datetime(2025, 6, 9, 23, 59)  # following Monday

        for _ in range(50):
            instant = calendar.random_timestamp(start, end)
            assert instant.date() == date(2025, 6, 9)
            assert time(9) <= instant.time() <= time(17)

    def test_inverted_range_raises(self, calendar):
        """Test end before start."""
        with pytest.raises(ValueError):
            calendar.random_timestamp(datetime(2025, 6, 12), datetime(2025, 6, 11))

    def test_invalid_max_attempts(self):
        """Test max_attempts must be positive."""
        with pytest.raises(ValueError):
            BusinessCalendar(max_attempts=0)
