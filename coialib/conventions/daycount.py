"""
QuantLib-backed day count conventions for court order interest.

Court order interest is simple interest on actual days, divided by the
number of days in the calendar year in which the accrual period starts
(366 in leap years). Segments of one calculation range share their boundary
dates, so only the final segment of a range counts its end date.
"""

import calendar
from datetime import date, datetime
from typing import Optional, Union

import QuantLib as ql

from coialib.utils.date import to_date


# Years QuantLib dates can represent
QL_MIN_YEAR = 1901
QL_MAX_YEAR = 2199


def _to_ql_date(dt: Union[date, datetime]) -> ql.Date:
    """Convert Python date/datetime to QuantLib Date."""
    py_date = to_date(dt)
    return ql.Date(py_date.day, py_date.month, py_date.year)


def _ql_supported(*dates: date) -> bool:
    return all(QL_MIN_YEAR <= d.year <= QL_MAX_YEAR for d in dates)


def is_leap_year(year: int) -> bool:
    return calendar.isleap(int(year))


def days_in_year(year: int) -> int:
    """Number of days in a calendar year (365 or 366)."""
    return 366 if is_leap_year(year) else 365


class DayCountConvention:
    """Simple-interest accrual basis: actual days over a year divisor.

    Days come from the QuantLib day counter for dates QuantLib supports and
    from plain date arithmetic otherwise; subclasses choose the divisor for
    the year in which the accrual starts.
    """

    def __init__(self, name: str, ql_daycount: ql.DayCounter):
        self.name = name
        self.ql_daycount = ql_daycount

    def divisor(self, start: date) -> int:
        raise NotImplementedError

    def day_count(self, start: Union[date, datetime], end: Union[date, datetime]) -> int:
        """Actual days from ``start`` to ``end`` (negative when reversed)."""
        start_date = to_date(start)
        end_date = to_date(end)
        if _ql_supported(start_date, end_date):
            return self.ql_daycount.dayCount(_to_ql_date(start_date), _to_ql_date(end_date))
        return (end_date - start_date).days

    def accrual_days(
        self,
        start: Union[date, datetime],
        end: Union[date, datetime],
        include_end: bool = False,
    ) -> int:
        """Days of accrual between two dates, never negative.

        The end date is counted only when ``include_end`` is set (the final
        segment of a calculation range).
        """
        days = self.day_count(start, end)
        if days < 0:
            return 0
        return days + 1 if include_end else days

    def year_fraction(
        self,
        start: Union[date, datetime],
        end: Union[date, datetime],
        include_end: bool = False,
    ) -> float:
        days = self.accrual_days(start, end, include_end)
        return days / self.divisor(to_date(start))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def __str__(self) -> str:
        return self.name


class CourtOrderActual(DayCountConvention):
    """Court order interest basis (ACT/ACT-COIA).

    Divides by the days in the calendar year of the accrual start, so a
    segment starting in a leap year uses 366 even where it runs into the
    next year. Segments never cross a rate change, and BC rate periods are
    half-years, so in practice a segment stays inside one year.
    """

    def __init__(self):
        super().__init__("ACT/ACT-COIA", ql.Actual365Fixed())

    def divisor(self, start: date) -> int:
        return days_in_year(start.year)


COIA_ACTUAL = CourtOrderActual()

_ALIASES = {
    "ACT/ACT-COIA": COIA_ACTUAL,
    "COIA": COIA_ACTUAL,
}


def get_day_count_convention(name: str) -> DayCountConvention:
    """Look up a convention by name or alias (case-insensitive)."""
    key = name.strip().upper()
    try:
        return _ALIASES[key]
    except KeyError:
        raise ValueError(
            f"Unknown day count convention: {name}. Available: {sorted(_ALIASES)}"
        )


def days_between(
    start: Optional[Union[date, datetime]], end: Optional[Union[date, datetime]]
) -> int:
    """
    Inclusive day count between two dates.

    Returns 0 when either date is missing or ``end`` is not after ``start``,
    otherwise the number of calendar days from ``start`` to ``end`` counting
    both endpoints.
    """
    if start is None or end is None:
        return 0
    start_date = to_date(start)
    end_date = to_date(end)
    if end_date <= start_date:
        return 0
    return COIA_ACTUAL.accrual_days(start_date, end_date, include_end=True)
