"""
Base abstractions for rate data loading.

Defines the interface for rate sources and the shared conversion from
published (inclusive-end) rate rows to half-open rate periods.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Iterable, List, Protocol, runtime_checkable

from dateutil.relativedelta import relativedelta

from coialib.utils.date import parse_date

from .core import RatePeriod, RateTable

logger = logging.getLogger(__name__)

END_CONVENTIONS = ("exclusive", "inclusive")


@runtime_checkable
class RateSource(Protocol):
    """
    Protocol for rate data sources.

    Defines interface for loading COIA rate periods from any source
    (bundled JSON, CSV export, in-memory frame, etc.).
    """

    def jurisdictions(self) -> List[str]:
        """
        List the jurisdiction codes available from this source.

        Returns:
            Jurisdiction codes (e.g., ["BC"])
        """
        ...

    def load_periods(self, jurisdiction: str) -> List[RatePeriod]:
        """
        Load the sorted half-open rate periods for one jurisdiction.

        Args:
            jurisdiction: Jurisdiction code

        Returns:
            List of RatePeriod objects
        """
        ...


class BaseRateSource(ABC):
    """
    Abstract base class for rate sources.

    Subclasses provide raw rows per jurisdiction; this class converts them to
    half-open periods and assembles the RateTable.
    """

    def __init__(self, end_convention: str = "exclusive"):
        if end_convention not in END_CONVENTIONS:
            raise ValueError(
                f"Unknown end convention: {end_convention}. "
                f"Available: {list(END_CONVENTIONS)}"
            )
        self.end_convention = end_convention

    @abstractmethod
    def jurisdictions(self) -> List[str]:
        """List jurisdiction codes."""
        pass

    @abstractmethod
    def _fetch_rows(self, jurisdiction: str) -> List[Dict]:
        """Fetch raw rows (start, end, prejudgment, postjudgment)."""
        pass

    def load_periods(self, jurisdiction: str) -> List[RatePeriod]:
        rows = self._fetch_rows(jurisdiction)
        periods = rows_to_periods(rows, self.end_convention)
        logger.debug(
            "Loaded %d rate periods for %s (%s ends)",
            len(periods),
            jurisdiction,
            self.end_convention,
        )
        return periods

    def load_table(self) -> RateTable:
        return RateTable({code: self.load_periods(code) for code in self.jurisdictions()})


def _parse_rate(value, row: Dict, field: str):
    if value is None or value == "":
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {field} rate {value!r} in rate row {row}")
    # NaN from empty CSV cells
    if rate != rate:
        return None
    return rate


def rows_to_periods(rows: Iterable[Dict], end_convention: str = "exclusive") -> List[RatePeriod]:
    """
    Convert raw rate rows into sorted half-open RatePeriods.

    Published tables list inclusive end dates (``2023-06-30``). With
    ``end_convention="inclusive"`` each end moves forward one day so it equals
    the next period's start; the last period keeps its published end, which
    the lookup treats as the inclusive terminus of coverage.

    Args:
        rows: Mappings with start, end, prejudgment, postjudgment keys
        end_convention: "exclusive" (half-open) or "inclusive" (published form)

    Returns:
        List of RatePeriod objects sorted by start

    Raises:
        ValueError: If a row has an invalid date or rate, or ends before it starts
    """
    parsed = []
    for row in rows:
        start = parse_date(row.get("start"))
        end = parse_date(row.get("end"))
        if start is None or end is None:
            raise ValueError(f"Invalid start/end date in rate row {row}")
        if end < start:
            raise ValueError(f"Rate period ends before it starts: {row}")
        parsed.append(
            (
                start,
                end,
                _parse_rate(row.get("prejudgment"), row, "prejudgment"),
                _parse_rate(row.get("postjudgment"), row, "postjudgment"),
            )
        )
    parsed.sort(key=lambda item: item[0])

    periods = []
    last = len(parsed) - 1
    for i, (start, end, prejudgment, postjudgment) in enumerate(parsed):
        if end_convention == "inclusive" and i < last:
            end = end + relativedelta(days=1)
        periods.append(RatePeriod(start, end, prejudgment, postjudgment))

    _warn_on_gaps(periods)
    return periods


def _warn_on_gaps(periods: List[RatePeriod]) -> None:
    for previous, current in zip(periods, periods[1:]):
        if previous.end < current.start:
            logger.warning(
                "Gap in rate table between %s and %s", previous.end, current.start
            )
        elif previous.end > current.start:
            logger.warning(
                "Overlapping rate periods starting %s and %s",
                previous.start,
                current.start,
            )
