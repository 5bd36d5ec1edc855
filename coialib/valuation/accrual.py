"""
Gross interest accrual for one range, before payments.
"""

import logging
from datetime import date
from typing import List, Mapping, Optional, Union

from coialib.conventions.types import InterestType
from coialib.rates.core import RatePeriod, as_rate_table
from coialib.schedule.generator import segments_for
from coialib.utils.date import latest, parse_date

from .damages import apply_damages, final_period_damage_interest
from .types import CalculatorInputs, CalculatorState, InterestResult, SpecialDamage, valid_damages

logger = logging.getLogger(__name__)


def accrue_interest(
    state: CalculatorState,
    interest_type: Union[InterestType, str],
    start,
    end,
    initial_principal: float,
    table: Mapping[str, List[RatePeriod]],
) -> InterestResult:
    """
    Gross interest over ``start``..``end`` with special damages and no payments.

    Invalid ranges and unknown jurisdictions return an empty result carrying
    ``initial_principal``.
    """
    interest_type = InterestType.coerce(interest_type)
    table = as_rate_table(table)
    jurisdiction = state.inputs.jurisdiction
    start_date = parse_date(start)
    end_date = parse_date(end)

    if start_date is None or end_date is None:
        logger.warning(
            "Invalid %s dates %r to %r; returning empty result",
            interest_type.value,
            start,
            end,
        )
        return InterestResult(principal=initial_principal)
    if end_date < start_date:
        logger.warning(
            "%s end %s is before start %s; returning empty result",
            interest_type.value,
            end_date,
            start_date,
        )
        return InterestResult(principal=initial_principal)
    if jurisdiction not in table:
        logger.warning("No interest rates found for jurisdiction %s", jurisdiction)
        return InterestResult(principal=initial_principal)

    damages: List[SpecialDamage] = []
    if interest_type is InterestType.PREJUDGMENT:
        damages = valid_damages(state.results.special_damages)

    if initial_principal == 0 and not damages:
        return InterestResult(principal=0.0)

    segments = segments_for(start_date, end_date, interest_type, jurisdiction, table)
    accumulation = apply_damages(segments, initial_principal, damages, end=end_date)
    result = InterestResult(
        details=list(accumulation.segments),
        total=accumulation.total_interest,
        principal=accumulation.final_principal,
    )

    if interest_type is InterestType.PREJUDGMENT and damages and accumulation.segments:
        final = final_period_damage_interest(
            damages,
            accumulation.segments[-1],
            end_date,
            interest_type,
            jurisdiction,
            table,
        )
        result.final_period_damage_interest_details = final.details
        result.total += final.total_interest

    logger.debug(
        "%s interest %s to %s: %d segments, total %.2f, principal %.2f",
        interest_type.value,
        start_date,
        end_date,
        len(result.details),
        result.total,
        result.principal,
    )
    return result


def special_damages_total(damages: Optional[List[SpecialDamage]]) -> float:
    return sum(d.amount for d in valid_damages(damages))


def postjudgment_start(inputs: CalculatorInputs) -> Optional[date]:
    """Postjudgment interest runs from the latest of the judgment and award dates."""
    return latest(
        inputs.date_of_judgment,
        inputs.non_pecuniary_judgment_date,
        inputs.costs_awarded_date,
    )


def gross_postjudgment_principal(state: CalculatorState) -> float:
    """Postjudgment principal before payments (prejudgment interest excluded)."""
    inputs = state.inputs
    return (
        inputs.judgment_awarded
        + special_damages_total(state.results.special_damages)
        + inputs.non_pecuniary_awarded
        + inputs.costs_awarded
    )
