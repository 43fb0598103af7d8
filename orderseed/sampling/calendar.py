"""
Weekly business-hours calendar and timestamp sampling.

Order timestamps are drawn in two stages: first a calendar day (rejecting
days the business is closed), then an instant inside that day's opening
window. Opening hours vary by day of week, so a single flat draw over
the whole range would not respect them.

Author: Seon Sivasathan
Institution: Computer Science @ Western University
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, model_validator

from orderseed.errors import NoOpenDayInRangeError
from orderseed.sampling.weighted import WeightedSampler

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 1000

# Python weekday numbering: Monday == 0, Sunday == 6
WEEKDAY_NAMES = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]


class DailyHours(BaseModel):
    """Opening and closing time of day for one weekday."""

    model_config = ConfigDict(frozen=True)

    opens: time
    closes: time

    @model_validator(mode="after")
    def closes_after_opening(self) -> "DailyHours":
        """Closing time must come after opening time."""
        if self.closes <= self.opens:
            raise ValueError(
                f"Closing time ({self.closes}) must be after opening time ({self.opens})"
            )
        return self


class BusinessHoursWindow(BaseModel):
    """Concrete open/close instants for one calendar day."""

    model_config = ConfigDict(frozen=True)

    open: datetime
    close: datetime

    def contains(self, instant: datetime) -> bool:
        """Check whether an instant falls inside the window (inclusive)."""
        return self.open <= instant <= self.close


WeeklyHours = Mapping[int, Optional[DailyHours]]


def default_weekly_hours() -> Dict[int, Optional[DailyHours]]:
    """Closed Sunday, late close Friday, early close Saturday."""
    weekday = DailyHours(opens=time(10, 30), closes=time(22, 0))
    return {
        0: weekday,
        1: weekday,
        2: weekday,
        3: weekday,
        4: DailyHours(opens=time(10, 30), closes=time(22, 30)),
        5: DailyHours(opens=time(10, 30), closes=time(20, 0)),
        6: None,
    }


class BusinessCalendar:
    """
    Weekly opening schedule with a bounded rejection sampler.

    The schedule is keyed by Python weekday number. A weekday mapped to
    None (or missing) is closed.
    """

    def __init__(
        self,
        weekly_hours: Optional[WeeklyHours] = None,
        sampler: Optional[WeightedSampler] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """
        Initialize the calendar.

        Args:
            weekly_hours: Weekday number -> DailyHours, None when closed
            sampler: Source of randomness for timestamp draws
            max_attempts: Rejection draws before falling back to enumeration
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.weekly_hours = dict(
            weekly_hours if weekly_hours is not None else default_weekly_hours()
        )
        self.sampler = sampler or WeightedSampler()
        self.max_attempts = max_attempts

    def hours_for(self, day: Union[date, datetime]) -> Optional[BusinessHoursWindow]:
        """
        Get the opening window for a calendar day.

        Args:
            day: Date (or datetime, whose date part is used)

        Returns:
            BusinessHoursWindow, or None if the business is closed that day
        """
        if isinstance(day, datetime):
            day = day.date()

        hours = self.weekly_hours.get(day.weekday())
        if hours is None:
            return None

        return BusinessHoursWindow(
            open=datetime.combine(day, hours.opens),
            close=datetime.combine(day, hours.closes),
        )

    def is_open(self, day: Union[date, datetime]) -> bool:
        """Check whether the business opens on a given day."""
        return self.hours_for(day) is not None

    def open_days_between(self, start: date, end: date) -> List[date]:
        """
        List every open day in [start, end].

        Args:
            start: First day (inclusive)
            end: Last day (inclusive)

        Returns:
            Open days in ascending order
        """
        days = []
        current = start
        while current <= end:
            if self.is_open(current):
                days.append(current)
            current += timedelta(days=1)
        return days

    def last_open_day(self, day: Union[date, datetime]) -> date:
        """
        Walk backward from a day until an open day is found.

        Args:
            day: Day to start from (returned as-is if open)

        Returns:
            The latest open day on or before day

        Raises:
            NoOpenDayInRangeError: If no weekday is open at all
        """
        if isinstance(day, datetime):
            day = day.date()

        for offset in range(7):
            candidate = day - timedelta(days=offset)
            if self.is_open(candidate):
                return candidate

        raise NoOpenDayInRangeError(
            f"No open day in the week ending {day.isoformat()}"
        )

    def random_timestamp(self, range_start: datetime, range_end: datetime) -> datetime:
        """
        Draw a timestamp within business hours.

        A uniform instant between range_start and range_end picks the day;
        closed days are rejected and redrawn. A second uniform draw inside
        the chosen day's window gives the returned instant. After
        max_attempts rejections the open days in the range are enumerated
        directly and one is selected uniformly.

        Args:
            range_start: Earliest instant for the day draw
            range_end: Latest instant for the day draw

        Returns:
            Timestamp inside an open day's [open, close] window

        Raises:
            ValueError: If range_end is before range_start
            NoOpenDayInRangeError: If the range contains no open day
        """
        if range_end < range_start:
            raise ValueError(
                f"range_end ({range_end}) must not be before range_start ({range_start})"
            )

        span = (range_end - range_start).total_seconds()

        for _ in range(self.max_attempts):
            instant = range_start + timedelta(seconds=self.sampler.uniform(0, span))
            window = self.hours_for(instant)
            if window is not None:
                return self._instant_within(window)

        logger.debug(
            f"No open day after {self.max_attempts} draws in "
            f"{range_start} - {range_end}; enumerating open days"
        )
        open_days = self.open_days_between(range_start.date(), range_end.date())
        if not open_days:
            raise NoOpenDayInRangeError(
                f"No open day between {range_start.date().isoformat()} "
                f"and {range_end.date().isoformat()}"
            )

        window = self.hours_for(self.sampler.select(open_days))
        return self._instant_within(window)

    def _instant_within(self, window: BusinessHoursWindow) -> datetime:
        length = (window.close - window.open).total_seconds()
        instant = window.open + timedelta(seconds=self.sampler.uniform(0, length))
        # Guard against float rounding pushing past close
        return min(instant, window.close)
