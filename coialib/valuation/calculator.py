"""
Case recalculation.

Combines prejudgment interest, the judgment total, postjudgment interest,
payments and per diem into the case results. Every call starts from the
recorded inputs, special damages and payments and returns a new state.
"""

import logging
from typing import List, Mapping, Optional

from coialib.config import Settings, load_settings
from coialib.conventions.types import InterestType
from coialib.rates.core import RatePeriod, as_rate_table
from coialib.utils.date import format_date

from .accrual import gross_postjudgment_principal, postjudgment_start, special_damages_total
from .payments import allocate_payments
from .periods import calculate_interest_periods, calculate_per_diem
from .types import CalculatorState, InterestResult, Payment

logger = logging.getLogger(__name__)

MISSING_DATES_MESSAGE = "One or more required dates are missing or invalid."
MISSING_RATES_MESSAGE = "Interest rates are not available for the selected jurisdiction: {}."
MAX_DATE_MESSAGE = "Calculation dates cannot be after {}."
UNAPPLIED_PAYMENT_MESSAGE = "Payment dated {} is outside the calculation period."


def _validation_message(
    state: CalculatorState, table, settings: Settings
) -> Optional[str]:
    inputs = state.inputs
    required = [inputs.date_of_judgment]
    if inputs.show_prejudgment:
        required.append(inputs.prejudgment_start_date)
    if inputs.show_postjudgment:
        required.append(inputs.postjudgment_end_date)
    if any(d is None for d in required):
        return MISSING_DATES_MESSAGE
    if inputs.show_prejudgment and inputs.prejudgment_start_date > inputs.date_of_judgment:
        return MISSING_DATES_MESSAGE

    if inputs.jurisdiction not in table:
        return MISSING_RATES_MESSAGE.format(inputs.jurisdiction)

    max_date = settings.max_calculation_date
    if max_date is not None:
        dates = [d for d in required if d is not None]
        if any(d > max_date for d in dates):
            return MAX_DATE_MESSAGE.format(format_date(max_date))
    return None


def recalculate(
    state: CalculatorState,
    table: Mapping[str, List[RatePeriod]],
    settings: Optional[Settings] = None,
) -> CalculatorState:
    """
    Recalculate every case result from the inputs and recorded events.

    Args:
        state: Case state
        table: Rate table
        settings: Settings for the date limit (defaults to load_settings())

    Returns:
        New CalculatorState with results filled in; on invalid input the
        results carry ``validation_error`` and a message, with zero interest
    """
    settings = settings or load_settings()
    table = as_rate_table(table)
    new_state = state.copy()
    inputs = new_state.inputs
    results = new_state.results
    if not inputs.jurisdiction:
        inputs.jurisdiction = settings.default_jurisdiction

    results.special_damages_total = special_damages_total(results.special_damages)
    base_total = (
        inputs.judgment_awarded
        + results.special_damages_total
        + inputs.non_pecuniary_awarded
        + inputs.costs_awarded
    )

    message = _validation_message(new_state, table, settings)
    if message is not None:
        logger.warning("Case validation failed: %s", message)
        results.validation_error = True
        results.validation_message = message
        results.prejudgment_result = InterestResult()
        results.postjudgment_result = InterestResult()
        results.judgment_total = base_total
        results.total_owing = base_total
        results.per_diem = 0.0
        results.final_calculation_date = postjudgment_start(inputs)
        results.unapplied_payments = []
        return new_state

    results.validation_error = False
    results.validation_message = ""
    payments = allocate_payments(new_state, table)
    results.payments = payments

    # Prejudgment
    if inputs.show_prejudgment:
        prejudgment = calculate_interest_periods(
            new_state,
            InterestType.PREJUDGMENT,
            inputs.prejudgment_start_date,
            inputs.date_of_judgment,
            inputs.judgment_awarded,
            table,
        )
        prejudgment_interest = prejudgment.total
    else:
        prejudgment = InterestResult(principal=inputs.judgment_awarded)
        prejudgment_interest = inputs.user_entered_prejudgment_interest
    results.prejudgment_result = prejudgment
    results.judgment_total = base_total + prejudgment_interest

    # Postjudgment
    post_start = postjudgment_start(inputs)
    post_end = inputs.postjudgment_end_date
    show_post = inputs.show_postjudgment and post_end is not None and post_end >= post_start
    results.final_calculation_date = post_end if show_post else post_start
    outside = _outside_period(new_state, payments)
    paid_before_post = sum(
        p.principal_applied or 0.0
        for p in payments
        if p.date <= post_start and p not in outside
    )
    post_principal = gross_postjudgment_principal(new_state) - paid_before_post
    if show_post:
        results.postjudgment_result = calculate_interest_periods(
            new_state,
            InterestType.POSTJUDGMENT,
            post_start,
            post_end,
            post_principal,
            table,
        )
    else:
        results.postjudgment_result = InterestResult(principal=post_principal)

    results.unapplied_payments = sorted(
        outside
        + results.prejudgment_result.unapplied_payments
        + results.postjudgment_result.unapplied_payments,
        key=lambda p: p.date,
    )
    if results.unapplied_payments:
        first = results.unapplied_payments[0]
        results.validation_message = UNAPPLIED_PAYMENT_MESSAGE.format(format_date(first.date))
        for payment in results.unapplied_payments:
            logger.error(
                "Payment of %.2f on %s is outside the calculation period",
                payment.amount,
                payment.date,
            )

    paid = sum(p.amount for p in payments if p not in results.unapplied_payments)
    results.total_owing = (
        results.judgment_total + results.postjudgment_result.total - paid
    )
    results.per_diem = calculate_per_diem(new_state, table)

    logger.debug(
        "Recalculated case: judgment total %.2f, total owing %.2f, per diem %.4f",
        results.judgment_total,
        results.total_owing,
        results.per_diem,
    )
    return new_state


def _outside_period(state: CalculatorState, payments: List[Payment]) -> List[Payment]:
    """Payments dated before the case starts or after the final calculation date."""
    inputs = state.inputs
    first_day = (
        inputs.prejudgment_start_date if inputs.show_prejudgment else inputs.date_of_judgment
    )
    last_day = state.results.final_calculation_date
    return [p for p in payments if p.date < first_day or p.date > last_day]
