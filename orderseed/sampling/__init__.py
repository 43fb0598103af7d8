"""Weighted sampling and business-hours calendar."""

from orderseed.sampling.calendar import BusinessCalendar, BusinessHoursWindow, DailyHours
from orderseed.sampling.weighted import WeightedOption, WeightedSampler

__all__ = [
    "BusinessCalendar",
    "BusinessHoursWindow",
    "DailyHours",
    "WeightedOption",
    "WeightedSampler",
]
