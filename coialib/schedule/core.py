"""
Core data structures for interest segments.
"""

from dataclasses import dataclass, field, replace
from datetime import date

from coialib.conventions.daycount import COIA_ACTUAL
from coialib.utils.date import format_date


def segment_description(days: int) -> str:
    return f"{days} days"


@dataclass
class Segment:
    """A constant-rate, constant-principal accrual span.

    Consecutive segments share boundary dates: a non-final segment accrues
    over ``[start, end)`` and the final segment of a range over
    ``[start, end]``.

    Attributes:
        start: First accrual day
        end: Segment end (shared with the next segment's start)
        rate: Rate in percent
        principal: Principal entering the segment
        interest: Simple interest for the segment
        is_final_segment: Whether this segment closes the calculation range
        description: Display text, e.g. "59 days"
        days: Accrual days
        is_split_segment: Produced by splitting around a payment
        is_modified_by_payment: Principal reduced by an earlier payment
    """

    start: date
    end: date
    rate: float
    principal: float = 0.0
    interest: float = 0.0
    is_final_segment: bool = False
    description: str = ""
    days: int = 0
    is_split_segment: bool = False
    is_modified_by_payment: bool = False
    is_payment: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        if not self.days:
            self.days = COIA_ACTUAL.accrual_days(
                self.start, self.end, include_end=self.is_final_segment
            )
        if not self.description:
            self.description = segment_description(self.days)

    @property
    def end_label(self) -> str:
        """Formatted end date for display."""
        return format_date(self.end)

    @property
    def year_fraction(self) -> float:
        return COIA_ACTUAL.year_fraction(
            self.start, self.end, include_end=self.is_final_segment
        )

    def priced(self, principal: float) -> "Segment":
        """Copy of this segment with a new principal and recomputed interest."""
        return replace(
            self,
            principal=principal,
            interest=principal * (self.rate / 100.0) * self.year_fraction,
        )

    def copy(self, **changes) -> "Segment":
        return replace(self, **changes)

    def resized(self, start: date, end: date, is_final_segment: bool) -> "Segment":
        """Copy over new boundaries with days and description recomputed."""
        return replace(
            self,
            start=start,
            end=end,
            is_final_segment=is_final_segment,
            days=0,
            description="",
        )


@dataclass
class PaymentRow:
    """Payment marker row placed among segments.

    Attributes:
        date: Payment date
        amount: Payment amount
        interest_applied: Portion applied to accrued interest
        principal_applied: Portion applied to principal
        remaining_principal: Principal after the payment
        description: Display text
    """

    date: date
    amount: float
    interest_applied: float = 0.0
    principal_applied: float = 0.0
    remaining_principal: float = 0.0
    description: str = "Payment received"
    is_payment: bool = field(default=True, init=False, repr=False)

    @property
    def start(self) -> date:
        return self.date

    @property
    def end(self) -> date:
        return self.date

    @property
    def end_label(self) -> str:
        return format_date(self.date)

    @property
    def interest(self) -> float:
        return -self.interest_applied

    @property
    def principal(self) -> float:
        return -self.principal_applied

    def copy(self, **changes) -> "PaymentRow":
        return replace(self, **changes)
