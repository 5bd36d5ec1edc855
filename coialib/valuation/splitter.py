"""
Payment insertion into an interest breakdown.

A payment reduces principal from its own date onward. Depending on where the
payment date falls against segment boundaries, the containing segment is
left alone (boundary hit) or split in two, a payment row is inserted, and
every later segment is re-priced on the reduced principal.
"""

import logging
from typing import List, Optional

from coialib.schedule.core import PaymentRow, Segment

from .types import DetailRow, Payment, PaymentInsertion, sorted_payments

logger = logging.getLogger(__name__)


def _payment_row(payment: Payment) -> PaymentRow:
    return PaymentRow(
        date=payment.date,
        amount=payment.amount,
        interest_applied=payment.interest_applied or 0.0,
        principal_applied=payment.principal_applied or 0.0,
        remaining_principal=payment.remaining_principal or 0.0,
    )


def _find_segment(details: List[DetailRow], payment: Payment) -> Optional[tuple]:
    """Locate the segment a payment date hits: (index, "end" | "start" | "inside")."""
    on = payment.date
    for i, row in enumerate(details):
        if row.is_payment:
            continue
        if row.end == on:
            return i, "end"
        if row.start == on:
            return i, "start"
        if row.start < on < row.end:
            return i, "inside"
    return None


def _reduce_later(details: List[DetailRow], after: int, principal_applied: float) -> None:
    for i in range(after, len(details)):
        row = details[i]
        if row.is_payment:
            continue
        reduced = row.priced(row.principal - principal_applied)
        reduced.is_modified_by_payment = True
        details[i] = reduced


def insert_payment(details: List[DetailRow], payment: Payment) -> PaymentInsertion:
    """
    Insert one payment into a breakdown.

    - Payment on a segment's end: the payment row follows that segment and
      every later segment is reduced.
    - Payment on a segment's start: the segment itself is reduced and the
      payment row precedes it.
    - Payment strictly inside a segment: the segment is split at the payment
      date; the first half keeps its principal, the second half (and every
      later segment) is reduced, and the payment row sits between them.
    - Payment outside every segment: nothing changes and ``applied`` is False.

    Args:
        details: Segments and payment rows in date order (not modified)
        payment: Allocated payment

    Returns:
        PaymentInsertion with a new detail list
    """
    rows: List[DetailRow] = [row.copy() for row in details]
    located = _find_segment(rows, payment)
    if located is None:
        logger.debug("Payment on %s matches no segment", payment.date)
        return PaymentInsertion(details=rows, applied=False)

    idx, position = located
    principal_applied = payment.principal_applied or 0.0
    marker = _payment_row(payment)

    if position == "end":
        rows.insert(idx + 1, marker)
        _reduce_later(rows, idx + 2, principal_applied)
        return PaymentInsertion(details=rows, applied=True, index=idx + 1)

    if position == "start":
        rows.insert(idx, marker)
        _reduce_later(rows, idx + 1, principal_applied)
        return PaymentInsertion(details=rows, applied=True, index=idx)

    segment: Segment = rows[idx]
    before = segment.resized(segment.start, payment.date, is_final_segment=False).priced(
        segment.principal
    )
    after = segment.resized(payment.date, segment.end, segment.is_final_segment).priced(
        segment.principal
    )
    before.is_split_segment = True
    after.is_split_segment = True
    rows[idx:idx + 1] = [before, marker, after]
    _reduce_later(rows, idx + 2, principal_applied)
    logger.debug(
        "Split segment %s to %s at payment on %s", segment.start, segment.end, payment.date
    )
    return PaymentInsertion(details=rows, applied=True, index=idx + 1)


def insert_payments(details: List[DetailRow], payments: List[Payment]):
    """
    Insert payments in date order.

    Returns:
        (details, unapplied payments)
    """
    rows = list(details)
    unapplied: List[Payment] = []
    for payment in sorted_payments(payments):
        insertion = insert_payment(rows, payment)
        if not insertion.applied:
            unapplied.append(payment)
        rows = insertion.details
    return rows, unapplied
