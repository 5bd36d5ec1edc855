"""
Segment generation over rate periods.
"""

import logging
from datetime import date, datetime
from typing import List, Mapping, Optional, Union

from dateutil.relativedelta import relativedelta

from coialib.conventions.types import InterestType
from coialib.rates.core import RatePeriod, RateTable, as_rate_table
from coialib.utils.date import parse_date

from .core import Segment

logger = logging.getLogger(__name__)


class SegmentGenerator:
    """Partitions a date range into constant-rate segments."""

    def __init__(self, table: Mapping[str, List[RatePeriod]]):
        self.table: RateTable = as_rate_table(table)

    def generate(
        self,
        start: Union[date, datetime, str, None],
        end: Union[date, datetime, str, None],
        interest_type: Union[InterestType, str],
        jurisdiction: str,
    ) -> List[Segment]:
        """
        Generate the segments covering ``start`` to ``end``.

        Each segment ends at the next rate change or at the range end,
        whichever comes first. A range that ends exactly on a rate change
        closes with a one-day segment at the new rate. Days that no rate
        period covers are skipped.

        Args:
            start: First day of the range
            end: Last day of the range (inclusive)
            interest_type: Prejudgment or postjudgment
            jurisdiction: Jurisdiction code

        Returns:
            List of segments with zero principal and interest
        """
        start_date = parse_date(start)
        end_date = parse_date(end)
        if start_date is None or end_date is None:
            logger.warning("Cannot generate segments: invalid dates %r to %r", start, end)
            return []
        if end_date < start_date:
            logger.warning(
                "Cannot generate segments: end %s is before start %s", end_date, start_date
            )
            return []

        interest_type = InterestType.coerce(interest_type)
        periods = self.table.periods(jurisdiction)
        if not periods:
            logger.warning("No interest rates found for jurisdiction %s", jurisdiction)
            return []

        segments: List[Segment] = []
        cursor = start_date
        gap_start: Optional[date] = None
        # Every iteration advances the cursor by at least one day
        max_steps = (end_date - start_date).days + 1

        for _ in range(max_steps):
            if cursor > end_date:
                break

            located = self.table.locate(cursor, jurisdiction)
            if located is None:
                if gap_start is None:
                    gap_start = cursor
                cursor = cursor + relativedelta(days=1)
                continue
            if gap_start is not None:
                self._log_gap(gap_start, cursor, jurisdiction)
                gap_start = None

            idx, period = located
            rate = self._rate(period, interest_type, jurisdiction)
            is_last = idx == len(periods) - 1
            # The last period covers its end date as well
            boundary = period.end + relativedelta(days=1) if is_last else period.end

            if boundary > end_date:
                segments.append(Segment(cursor, end_date, rate, is_final_segment=True))
                break

            segments.append(Segment(cursor, boundary, rate, is_final_segment=False))
            cursor = boundary

        if gap_start is not None:
            self._log_gap(gap_start, cursor, jurisdiction)

        logger.debug(
            "Generated %d %s segments from %s to %s",
            len(segments),
            interest_type.value,
            start_date,
            end_date,
        )
        return segments

    @staticmethod
    def _rate(period: RatePeriod, interest_type: InterestType, jurisdiction: str) -> float:
        rate = period.rate(interest_type)
        if rate is None:
            logger.warning(
                "No %s rate in period starting %s for jurisdiction %s",
                interest_type.value,
                period.start,
                jurisdiction,
            )
            return 0.0
        return float(rate)

    @staticmethod
    def _log_gap(gap_start: date, resume: date, jurisdiction: str) -> None:
        logger.warning(
            "No rate period covers %s to %s for jurisdiction %s; skipping %d days",
            gap_start,
            resume - relativedelta(days=1),
            jurisdiction,
            (resume - gap_start).days,
        )


def segments_for(
    start: Union[date, datetime, str, None],
    end: Union[date, datetime, str, None],
    interest_type: Union[InterestType, str],
    jurisdiction: str,
    table: Mapping[str, List[RatePeriod]],
) -> List[Segment]:
    """Partition ``start``..``end`` into constant-rate segments."""
    return SegmentGenerator(table).generate(start, end, interest_type, jurisdiction)
