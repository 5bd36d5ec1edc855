"""
Rate periods and the rate table lookup.

A jurisdiction's rate periods are sorted by start date and cover half-open
``[start, end)`` intervals. The end of the last period is an inclusive
terminus, so the table covers its final published day.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np

from coialib.conventions.types import InterestType
from coialib.utils.date import parse_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatePeriod:
    """A published rate period.

    Attributes:
        start: First day of the period
        end: Exclusive end of the period (start of the next period)
        prejudgment: Prejudgment rate in percent
        postjudgment: Postjudgment rate in percent
    """

    start: date
    end: date
    prejudgment: Optional[float] = None
    postjudgment: Optional[float] = None

    def rate(self, interest_type: Union[InterestType, str]) -> Optional[float]:
        if InterestType.coerce(interest_type) is InterestType.PREJUDGMENT:
            return self.prejudgment
        return self.postjudgment

    def contains(self, on: date, is_last: bool = False) -> bool:
        if is_last:
            return self.start <= on <= self.end
        return self.start <= on < self.end


class RateTable(Mapping[str, List[RatePeriod]]):
    """
    Read-only mapping of jurisdiction code to sorted rate periods.

    Period starts are cached as numpy ordinal arrays so a date lookup is a
    single ``searchsorted`` call.
    """

    def __init__(self, periods: Mapping[str, List[RatePeriod]]):
        self._periods: Dict[str, Tuple[RatePeriod, ...]] = {}
        self._starts: Dict[str, np.ndarray] = {}
        for jurisdiction, items in periods.items():
            ordered = tuple(sorted(items, key=lambda p: p.start))
            self._periods[jurisdiction] = ordered
            self._starts[jurisdiction] = np.array(
                [p.start.toordinal() for p in ordered], dtype=np.int64
            )

    def __getitem__(self, jurisdiction: str) -> List[RatePeriod]:
        return list(self._periods[jurisdiction])

    def __iter__(self) -> Iterator[str]:
        return iter(self._periods)

    def __len__(self) -> int:
        return len(self._periods)

    def __contains__(self, jurisdiction: object) -> bool:
        return jurisdiction in self._periods and len(self._periods[jurisdiction]) > 0

    def periods(self, jurisdiction: str) -> Tuple[RatePeriod, ...]:
        return self._periods.get(jurisdiction, ())

    def locate(
        self, on: Optional[date], jurisdiction: str
    ) -> Optional[Tuple[int, RatePeriod]]:
        """
        Find the period containing a date.

        Args:
            on: Date to look up
            jurisdiction: Jurisdiction code

        Returns:
            (index, period) tuple, or None for a missing jurisdiction or a
            date outside all periods
        """
        periods = self._periods.get(jurisdiction)
        if not periods or on is None:
            return None
        idx = int(np.searchsorted(self._starts[jurisdiction], on.toordinal(), side="right")) - 1
        if idx < 0:
            return None
        period = periods[idx]
        if period.contains(on, is_last=idx == len(periods) - 1):
            return idx, period
        return None

    def coverage(self, jurisdiction: str) -> Optional[Tuple[date, date]]:
        """First and last covered day for a jurisdiction."""
        periods = self._periods.get(jurisdiction)
        if not periods:
            return None
        return periods[0].start, periods[-1].end


def as_rate_table(table: Mapping[str, List[RatePeriod]]) -> RateTable:
    """Wrap a plain jurisdiction mapping in a RateTable."""
    if isinstance(table, RateTable):
        return table
    return RateTable(table)


def rate_for(
    on,
    interest_type: Union[InterestType, str],
    jurisdiction: str,
    table: Mapping[str, List[RatePeriod]],
) -> float:
    """
    Rate in percent applicable on a date.

    Misses are not errors: a missing jurisdiction, an invalid date, a date in
    a gap or outside the table, or a period without a rate for the requested
    type all return 0.0 and log a warning.
    """
    on_date = parse_date(on)
    if on_date is None:
        logger.warning("Invalid date %r for %s rate lookup", on, jurisdiction)
        return 0.0
    table = as_rate_table(table)
    if jurisdiction not in table:
        logger.warning("No interest rates found for jurisdiction %s", jurisdiction)
        return 0.0

    located = table.locate(on_date, jurisdiction)
    if located is None:
        logger.warning(
            "No rate period covers %s for jurisdiction %s", on_date, jurisdiction
        )
        return 0.0

    _, period = located
    rate = period.rate(interest_type)
    if rate is None:
        logger.warning(
            "No %s rate in period starting %s for jurisdiction %s",
            InterestType.coerce(interest_type).value,
            period.start,
            jurisdiction,
        )
        return 0.0
    return float(rate)
