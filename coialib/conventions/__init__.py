"""Day count conventions and interest types."""

from .daycount import (
    COIA_ACTUAL,
    CourtOrderActual,
    DayCountConvention,
    days_between,
    days_in_year,
    get_day_count_convention,
    is_leap_year,
)
from .types import InterestType

__all__ = [
    "COIA_ACTUAL",
    "CourtOrderActual",
    "DayCountConvention",
    "InterestType",
    "days_between",
    "days_in_year",
    "get_day_count_convention",
    "is_leap_year",
]
