"""
Special damages: running principal across segments and final-period interest.
"""

import logging
from datetime import date
from typing import List, Mapping, Optional, Union

from coialib.conventions.daycount import days_between, days_in_year
from coialib.conventions.types import InterestType
from coialib.rates.core import RatePeriod, rate_for
from coialib.schedule.core import Segment

from .types import (
    DamageAccumulation,
    FinalPeriodDamageDetail,
    FinalPeriodDamageInterest,
    SpecialDamage,
    valid_damages,
)

logger = logging.getLogger(__name__)


def apply_damages(
    segments: List[Segment],
    initial_principal: float,
    damages: Optional[List[SpecialDamage]] = None,
    end: Optional[date] = None,
) -> DamageAccumulation:
    """
    Price segments on a principal that grows as special damages are incurred.

    A segment accrues on the principal entering it. Damages dated on or
    before a segment's end join the principal of the next segment, so a
    damage on a shared boundary affects the segment starting there. Damages
    dated on or before the first segment's start join the opening principal.

    Args:
        segments: Segments in date order
        initial_principal: Principal at the start of the range
        damages: Special damages in any order
        end: Range end for the final principal (defaults to the last segment's end)

    Returns:
        DamageAccumulation with priced copies of the segments
    """
    ordered = valid_damages(damages)
    principal = initial_principal
    pending = 0

    if segments:
        first_start = segments[0].start
        while pending < len(ordered) and ordered[pending].date <= first_start:
            principal += ordered[pending].amount
            pending += 1

    priced: List[Segment] = []
    total_interest = 0.0
    for segment in segments:
        current = segment.priced(principal)
        priced.append(current)
        total_interest += current.interest

        while pending < len(ordered) and ordered[pending].date <= segment.end:
            logger.debug(
                "Adding special damage %.2f dated %s after segment ending %s",
                ordered[pending].amount,
                ordered[pending].date,
                segment.end,
            )
            principal += ordered[pending].amount
            pending += 1

    end_date = end or (segments[-1].end if segments else None)
    final_principal = initial_principal + sum(
        d.amount for d in ordered if end_date is None or d.date <= end_date
    )
    return DamageAccumulation(priced, total_interest, final_principal)


def final_period_damage_interest(
    damages: Optional[List[SpecialDamage]],
    final_segment: Segment,
    end_date: date,
    interest_type: Union[InterestType, str],
    jurisdiction: str,
    table: Mapping[str, List[RatePeriod]],
) -> FinalPeriodDamageInterest:
    """
    Interest on damages incurred during the last segment, priced individually.

    Damages strictly between the final segment's start and ``end_date`` accrue
    from their own date to ``end_date`` at the rate in force on ``end_date``.
    A damage on the final segment's start is already part of that segment's
    principal; a damage on ``end_date`` accrues nothing.

    Returns:
        FinalPeriodDamageInterest with one detail per qualifying damage
    """
    result = FinalPeriodDamageInterest()
    candidates = [
        d for d in valid_damages(damages) if final_segment.start < d.date < end_date
    ]
    if not candidates:
        return result

    rate = rate_for(end_date, interest_type, jurisdiction, table)
    year_days = days_in_year(end_date.year)
    for damage in candidates:
        days = days_between(damage.date, end_date)
        interest = damage.amount * (rate / 100.0) * days / year_days
        result.details.append(
            FinalPeriodDamageDetail(
                damage_date=damage.date,
                principal=damage.amount,
                rate=rate,
                interest=interest,
                days=days,
                description=f"{damage.description} ({days} days)",
            )
        )
        result.total_interest += interest
    return result
