"""
Interest periods for one range, and per diem accrual.
"""

import logging
from datetime import date
from typing import List, Mapping, Union

from coialib.conventions.daycount import days_in_year
from coialib.conventions.types import InterestType
from coialib.rates.core import RatePeriod, rate_for
from coialib.utils.date import parse_date

from .accrual import accrue_interest
from .payments import allocate_payments
from .splitter import insert_payments
from .types import CalculatorState, InterestResult, Payment

logger = logging.getLogger(__name__)


def payments_in_range(
    payments: List[Payment],
    interest_type: InterestType,
    start: date,
    end: date,
) -> List[Payment]:
    """
    Payments that belong to a range.

    A payment on the judgment date belongs to the prejudgment range, so the
    postjudgment range excludes its own start date.
    """
    if interest_type is InterestType.PREJUDGMENT:
        return [p for p in payments if start <= p.date <= end]
    return [p for p in payments if start < p.date <= end]


def calculate_interest_periods(
    state: CalculatorState,
    interest_type: Union[InterestType, str],
    start,
    end,
    initial_principal: float,
    table: Mapping[str, List[RatePeriod]],
) -> InterestResult:
    """
    Calculate the interest breakdown for one range.

    Segments the range by rate period, folds in special damages (prejudgment
    only) and final-period damage interest, then inserts the state's payments
    that fall in the range.

    Args:
        state: Case state supplying jurisdiction, special damages and payments
        interest_type: Prejudgment or postjudgment
        start: First day of the range
        end: Last day of the range
        initial_principal: Principal at the start of the range
        table: Rate table

    Returns:
        InterestResult; empty (zero total) for invalid input
    """
    interest_type = InterestType.coerce(interest_type)
    result = accrue_interest(state, interest_type, start, end, initial_principal, table)
    if not result.details:
        return result

    start_date = parse_date(start)
    end_date = parse_date(end)
    payments = payments_in_range(
        allocate_payments(state, table), interest_type, start_date, end_date
    )
    if not payments:
        return result

    details, unapplied = insert_payments(result.details, payments)
    for payment in unapplied:
        logger.error(
            "Payment of %.2f on %s does not fall in any %s segment",
            payment.amount,
            payment.date,
            interest_type.value,
        )
    applied = [p for p in payments if p not in unapplied]

    result.details = details
    result.total = sum(row.interest for row in details if not row.is_payment) + sum(
        d.interest for d in result.final_period_damage_interest_details
    )
    result.interest_paid = sum(p.interest_applied or 0.0 for p in applied)
    result.principal -= sum(p.principal_applied or 0.0 for p in applied)
    result.unapplied_payments = unapplied
    return result


def calculate_per_diem(
    state: CalculatorState,
    table: Mapping[str, List[RatePeriod]],
) -> float:
    """
    Daily postjudgment interest on the total owing at the final calculation date.

    Returns 0.0 when nothing is owing, the date is missing or invalid, or no
    positive postjudgment rate applies on that date.
    """
    total_owing = state.results.total_owing or 0.0
    if total_owing <= 0:
        return 0.0

    on = parse_date(state.results.final_calculation_date)
    if on is None:
        logger.warning("Per diem needs a valid final calculation date")
        return 0.0

    rate = rate_for(on, InterestType.POSTJUDGMENT, state.inputs.jurisdiction, table)
    if rate <= 0:
        logger.warning(
            "Could not find a valid postjudgment rate for %s on %s",
            state.inputs.jurisdiction,
            on,
        )
        return 0.0

    return total_owing * (rate / 100.0) / days_in_year(on.year)
