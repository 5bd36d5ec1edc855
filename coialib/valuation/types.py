"""Data structures for court order interest calculations.

This module defines the value types passed between the calculation steps:
user-entered events (special damages and payments), intermediate results of
the damage accumulator, payment allocator and period splitter, the interest
result for one range, and the case-level calculator state.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional, Union

import pandas as pd

from coialib.schedule.core import PaymentRow, Segment
from coialib.utils.date import format_date, parse_date

logger = logging.getLogger(__name__)

DetailRow = Union[Segment, PaymentRow]


@dataclass(frozen=True)
class SpecialDamage:
    """A dated out-of-pocket loss added to principal.

    Attributes:
        date: Date the damage was incurred
        amount: Amount added to principal
        description: Display text
    """

    date: Optional[date]
    amount: float
    description: str = "Special damage"

    @property
    def is_valid(self) -> bool:
        return self.date is not None and self.amount > 0

    @classmethod
    def from_dict(cls, data: Dict) -> Optional["SpecialDamage"]:
        """Build from a raw record, or None when the date or amount is unusable."""
        damage_date = parse_date(data.get("date"))
        try:
            amount = float(data.get("amount") or 0)
        except (TypeError, ValueError):
            amount = 0.0
        if damage_date is None or amount <= 0:
            logger.debug("Dropping invalid special damage %r", data)
            return None
        return cls(damage_date, amount, data.get("description") or "Special damage")


def valid_damages(damages: Optional[List[SpecialDamage]]) -> List[SpecialDamage]:
    """Damages with a date and a positive amount, sorted by date."""
    kept = [d for d in damages or [] if d.is_valid]
    if len(kept) != len(damages or []):
        logger.debug("Dropped %d invalid special damages", len(damages) - len(kept))
    return sorted(kept, key=lambda d: d.date)


@dataclass(frozen=True)
class Payment:
    """A recorded payment.

    The applied fields are computed once by the payment allocator and then
    kept as recorded. None marks a record whose split has not been computed.

    Attributes:
        date: Payment date
        amount: Amount paid
        interest_applied: Portion applied to accrued interest
        principal_applied: Portion applied to principal
        remaining_principal: Principal after the payment (negative on overpayment)
    """

    date: date
    amount: float
    interest_applied: Optional[float] = None
    principal_applied: Optional[float] = None
    remaining_principal: Optional[float] = None

    @property
    def is_allocated(self) -> bool:
        return self.interest_applied is not None and self.principal_applied is not None

    def cleared(self) -> "Payment":
        """Copy without the computed split."""
        return Payment(self.date, self.amount)

    @classmethod
    def from_dict(cls, data: Dict) -> Optional["Payment"]:
        payment_date = parse_date(data.get("date"))
        try:
            amount = float(data.get("amount"))
        except (TypeError, ValueError):
            amount = None
        if payment_date is None or amount is None:
            logger.debug("Dropping invalid payment %r", data)
            return None

        def _optional(key):
            value = data.get(key)
            return None if value is None else float(value)

        return cls(
            payment_date,
            amount,
            _optional("interest_applied"),
            _optional("principal_applied"),
            _optional("remaining_principal"),
        )


def sorted_payments(payments: Optional[List[Payment]]) -> List[Payment]:
    return sorted((p for p in payments or [] if p.date is not None), key=lambda p: p.date)


@dataclass(frozen=True)
class FinalPeriodDamageDetail:
    """Interest on a special damage incurred during the last segment.

    Attributes:
        damage_date: Date of the damage
        principal: Damage amount
        rate: Rate at the end date, in percent
        interest: Simple interest from the damage date to the end date
        days: Inclusive days from the damage date to the end date
        description: Display text
    """

    damage_date: date
    principal: float
    rate: float
    interest: float
    days: int
    description: str = ""
    is_final_period_damage: bool = True


@dataclass
class FinalPeriodDamageInterest:
    """Final-period damage details and their total interest."""

    details: List[FinalPeriodDamageDetail] = field(default_factory=list)
    total_interest: float = 0.0


@dataclass
class DamageAccumulation:
    """Segments priced with running principal.

    Attributes:
        segments: Copies of the input segments with principal and interest set
        total_interest: Sum of segment interest
        final_principal: Initial principal plus damages dated on or before the end
    """

    segments: List[Segment]
    total_interest: float
    final_principal: float


@dataclass(frozen=True)
class PaymentAllocation:
    """Interest-first split of a payment.

    Attributes:
        interest_applied: Portion applied to accrued interest
        principal_applied: Portion applied to principal
        remaining_principal: Principal after the payment
        interest_accrued: Unpaid interest available to the payment
    """

    interest_applied: float
    principal_applied: float
    remaining_principal: float
    interest_accrued: float


@dataclass
class PaymentInsertion:
    """Outcome of inserting a payment into a detail list.

    Attributes:
        details: Rows after insertion (the input rows when not applied)
        applied: False when the payment date is outside every segment
        index: Position of the payment row in ``details``
    """

    details: List[DetailRow]
    applied: bool
    index: Optional[int] = None


@dataclass
class InterestResult:
    """Interest breakdown for one calculation range.

    Attributes:
        details: Segments and payment rows in date order
        total: Gross interest (segments plus final-period damage interest)
        principal: Principal at the end of the range after damages and payments
        final_period_damage_interest_details: Individually priced final-period damages
        interest_paid: Interest applied by payments inside the range
        unapplied_payments: Payments in the range that matched no segment
    """

    details: List[DetailRow] = field(default_factory=list)
    total: float = 0.0
    principal: float = 0.0
    final_period_damage_interest_details: List[FinalPeriodDamageDetail] = field(
        default_factory=list
    )
    interest_paid: float = 0.0
    unapplied_payments: List[Payment] = field(default_factory=list)

    @property
    def outstanding_interest(self) -> float:
        return self.total - self.interest_paid

    @property
    def segments(self) -> List[Segment]:
        return [row for row in self.details if not row.is_payment]

    def copy(self) -> "InterestResult":
        return replace(
            self,
            details=[row.copy() for row in self.details],
            final_period_damage_interest_details=list(
                self.final_period_damage_interest_details
            ),
            unapplied_payments=list(self.unapplied_payments),
        )

    def to_frame(self) -> pd.DataFrame:
        """Breakdown rows as a DataFrame for display."""
        rows = []
        for row in self.details:
            rows.append(
                {
                    "start": format_date(row.start),
                    "end": row.end_label,
                    "description": row.description,
                    "rate": None if row.is_payment else row.rate,
                    "principal": row.principal,
                    "interest": row.interest,
                    "is_payment": row.is_payment,
                }
            )
        for detail in self.final_period_damage_interest_details:
            rows.append(
                {
                    "start": format_date(detail.damage_date),
                    "end": rows[-1]["end"] if rows else "",
                    "description": detail.description,
                    "rate": detail.rate,
                    "principal": detail.principal,
                    "interest": detail.interest,
                    "is_payment": False,
                }
            )
        return pd.DataFrame(
            rows,
            columns=["start", "end", "description", "rate", "principal", "interest", "is_payment"],
        )


@dataclass
class CalculatorInputs:
    """Case inputs.

    Dates are normalized on construction; unusable dates become None.

    Attributes:
        prejudgment_start_date: Cause-of-action date
        date_of_judgment: Judgment date
        postjudgment_end_date: Last day of postjudgment accrual
        judgment_awarded: Judgment amount (pecuniary)
        jurisdiction: Rate table jurisdiction code
        non_pecuniary_awarded: Non-pecuniary damages award
        non_pecuniary_judgment_date: Date the non-pecuniary award was made
        costs_awarded: Costs award
        costs_awarded_date: Date costs were awarded
        show_prejudgment: Calculate prejudgment interest
        show_postjudgment: Calculate postjudgment interest
        user_entered_prejudgment_interest: Prejudgment interest used when not calculated
    """

    prejudgment_start_date: Optional[date] = None
    date_of_judgment: Optional[date] = None
    postjudgment_end_date: Optional[date] = None
    judgment_awarded: float = 0.0
    jurisdiction: str = "BC"
    non_pecuniary_awarded: float = 0.0
    non_pecuniary_judgment_date: Optional[date] = None
    costs_awarded: float = 0.0
    costs_awarded_date: Optional[date] = None
    show_prejudgment: bool = True
    show_postjudgment: bool = True
    user_entered_prejudgment_interest: float = 0.0

    def __post_init__(self):
        for name in (
            "prejudgment_start_date",
            "date_of_judgment",
            "postjudgment_end_date",
            "non_pecuniary_judgment_date",
            "costs_awarded_date",
        ):
            setattr(self, name, parse_date(getattr(self, name)))
        for name in (
            "judgment_awarded",
            "non_pecuniary_awarded",
            "costs_awarded",
            "user_entered_prejudgment_interest",
        ):
            setattr(self, name, float(getattr(self, name) or 0.0))


@dataclass
class CalculatorResults:
    """User-entered events and computed case results.

    Attributes:
        special_damages: Recorded special damages
        payments: Recorded payments
        prejudgment_result: Prejudgment interest breakdown
        postjudgment_result: Postjudgment interest breakdown
        special_damages_total: Sum of valid special damages
        judgment_total: Total at judgment (awards, damages, prejudgment interest)
        total_owing: Judgment total plus postjudgment interest less payments
        per_diem: Daily postjudgment accrual on the total owing
        final_calculation_date: Date the totals are calculated to
        validation_error: Whether the inputs failed validation
        validation_message: User-facing validation message
        unapplied_payments: Payments outside the calculation period
    """

    special_damages: List[SpecialDamage] = field(default_factory=list)
    payments: List[Payment] = field(default_factory=list)
    prejudgment_result: InterestResult = field(default_factory=InterestResult)
    postjudgment_result: InterestResult = field(default_factory=InterestResult)
    special_damages_total: float = 0.0
    judgment_total: float = 0.0
    total_owing: float = 0.0
    per_diem: float = 0.0
    final_calculation_date: Optional[date] = None
    validation_error: bool = False
    validation_message: str = ""
    unapplied_payments: List[Payment] = field(default_factory=list)

    def __post_init__(self):
        self.final_calculation_date = parse_date(self.final_calculation_date)


@dataclass
class CalculatorState:
    """Snapshot of a case: inputs plus results."""

    inputs: CalculatorInputs = field(default_factory=CalculatorInputs)
    results: CalculatorResults = field(default_factory=CalculatorResults)

    def copy(self) -> "CalculatorState":
        """Independent copy; results lists and interest breakdowns are not shared."""
        results = replace(
            self.results,
            special_damages=list(self.results.special_damages),
            payments=list(self.results.payments),
            prejudgment_result=self.results.prejudgment_result.copy(),
            postjudgment_result=self.results.postjudgment_result.copy(),
            unapplied_payments=list(self.results.unapplied_payments),
        )
        return CalculatorState(inputs=replace(self.inputs), results=results)
