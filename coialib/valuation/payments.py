"""
Payment allocation: interest first, then principal.

Gross interest to a payment date is the interest that would have accrued had
no payments been made. Interest already paid by earlier payments is deducted
from it, and the new payment covers what remains before it reduces principal.
"""

import logging
from datetime import date
from typing import List, Mapping, Optional, Tuple

from coialib.conventions.types import InterestType
from coialib.rates.core import RatePeriod
from coialib.utils.date import parse_date

from .accrual import accrue_interest, gross_postjudgment_principal, postjudgment_start
from .types import CalculatorState, Payment, PaymentAllocation, sorted_payments, valid_damages

logger = logging.getLogger(__name__)


def gross_interest_to(
    state: CalculatorState,
    on: date,
    table: Mapping[str, List[RatePeriod]],
) -> float:
    """
    Interest accrued from the prejudgment start to ``on``, ignoring payments.

    Prejudgment interest runs to the earlier of ``on`` and the judgment date;
    after judgment, postjudgment interest is added from the postjudgment start.
    When prejudgment interest is not calculated, the user-entered amount is
    due from the judgment date and no prejudgment start date is needed.
    """
    inputs = state.inputs
    pre_start = inputs.prejudgment_start_date
    judgment = inputs.date_of_judgment

    total = 0.0
    if inputs.show_prejudgment:
        if pre_start is None or on < pre_start:
            return 0.0
        pre_end = min(on, judgment) if judgment is not None else on
        total += accrue_interest(
            state,
            InterestType.PREJUDGMENT,
            pre_start,
            pre_end,
            inputs.judgment_awarded,
            table,
        ).total
    elif judgment is not None and on >= judgment:
        total += inputs.user_entered_prejudgment_interest

    if judgment is not None and on > judgment:
        post_start = postjudgment_start(inputs)
        if post_start is not None and on > post_start:
            total += accrue_interest(
                state,
                InterestType.POSTJUDGMENT,
                post_start,
                on,
                gross_postjudgment_principal(state),
                table,
            ).total
    return total


def principal_at(state: CalculatorState, on: date) -> float:
    """Principal owed on a date before payments, including damages incurred by then."""
    inputs = state.inputs
    if inputs.date_of_judgment is not None and on > inputs.date_of_judgment:
        return gross_postjudgment_principal(state)
    damages = valid_damages(state.results.special_damages)
    return inputs.judgment_awarded + sum(d.amount for d in damages if d.date <= on)


def _prior_splits(
    state: CalculatorState,
    prior_payments: List[Payment],
    table: Mapping[str, List[RatePeriod]],
) -> Tuple[float, float]:
    """Total interest and principal applied by prior payments, in date order."""
    interest_paid = 0.0
    principal_paid = 0.0
    for prior in sorted_payments(prior_payments):
        if prior.is_allocated:
            interest_part = prior.interest_applied
            principal_part = prior.principal_applied
        else:
            available = max(0.0, gross_interest_to(state, prior.date, table) - interest_paid)
            interest_part = min(prior.amount, available)
            principal_part = prior.amount - interest_part
            logger.debug(
                "Inferred split for payment %.2f on %s: interest %.2f, principal %.2f",
                prior.amount,
                prior.date,
                interest_part,
                principal_part,
            )
        interest_paid += interest_part
        principal_paid += principal_part
    return interest_paid, principal_paid


def allocate(
    state: CalculatorState,
    payment_date,
    payment_amount: float,
    prior_payments: Optional[List[Payment]],
    table: Mapping[str, List[RatePeriod]],
) -> PaymentAllocation:
    """
    Split a payment between accrued interest and principal.

    Args:
        state: Case state (inputs and special damages)
        payment_date: Date of the new payment
        payment_amount: Amount of the new payment
        prior_payments: Payments made before this one
        table: Rate table

    Returns:
        PaymentAllocation; remaining principal is negative on overpayment
    """
    on = parse_date(payment_date)
    if on is None:
        logger.warning("Invalid payment date %r; nothing allocated", payment_date)
        return PaymentAllocation(0.0, 0.0, 0.0, 0.0)

    total_accrued = gross_interest_to(state, on, table)
    interest_paid, principal_paid = _prior_splits(state, prior_payments or [], table)
    interest_accrued = max(0.0, total_accrued - interest_paid)

    interest_applied = min(payment_amount, interest_accrued)
    principal_applied = payment_amount - interest_applied
    remaining = principal_at(state, on) - principal_paid - principal_applied

    logger.debug(
        "Payment %.2f on %s: accrued %.2f, interest %.2f, principal %.2f, remaining %.2f",
        payment_amount,
        on,
        interest_accrued,
        interest_applied,
        principal_applied,
        remaining,
    )
    return PaymentAllocation(interest_applied, principal_applied, remaining, interest_accrued)


def _allocated(
    state: CalculatorState,
    payment: Payment,
    priors: List[Payment],
    table: Mapping[str, List[RatePeriod]],
) -> Payment:
    allocation = allocate(state, payment.date, payment.amount, priors, table)
    return Payment(
        payment.date,
        payment.amount,
        allocation.interest_applied,
        allocation.principal_applied,
        allocation.remaining_principal,
    )


def allocate_payments(
    state: CalculatorState,
    table: Mapping[str, List[RatePeriod]],
) -> List[Payment]:
    """
    Payments in date order, computing splits only for payments without one.
    """
    done: List[Payment] = []
    for payment in sorted_payments(state.results.payments):
        if not payment.is_allocated:
            payment = _allocated(state, payment, done, table)
        done.append(payment)
    return done


def replay_payments(
    state: CalculatorState,
    table: Mapping[str, List[RatePeriod]],
) -> CalculatorState:
    """
    Recompute every payment split chronologically (after editing an earlier payment).

    Returns:
        New state with the recomputed payments
    """
    new_state = state.copy()
    new_state.results.payments = [p.cleared() for p in state.results.payments]
    new_state.results.payments = allocate_payments(new_state, table)
    return new_state


def record_payment(
    state: CalculatorState,
    payment_date,
    amount: float,
    table: Mapping[str, List[RatePeriod]],
) -> Tuple[CalculatorState, Optional[Payment]]:
    """
    Allocate a new payment against the payments made before it and record it.

    Returns:
        (new state, recorded payment), or (unchanged copy, None) for an invalid date
    """
    new_state = state.copy()
    on = parse_date(payment_date)
    if on is None:
        logger.warning("Cannot record payment with invalid date %r", payment_date)
        return new_state, None

    existing = allocate_payments(state, table)
    priors = [p for p in existing if p.date <= on]
    payment = _allocated(state, Payment(on, float(amount)), priors, table)
    new_state.results.payments = sorted_payments(existing + [payment])
    return new_state, payment
