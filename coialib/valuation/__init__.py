"""Court order interest calculations.

Key modules:
- periods: interest breakdown for one range and per diem
- damages: running principal and final-period damage interest
- payments: interest-first payment allocation
- splitter: payment insertion into a breakdown
- calculator: case recalculation
"""

from .accrual import accrue_interest
from .calculator import recalculate
from .damages import apply_damages, final_period_damage_interest
from .payments import allocate, allocate_payments, record_payment, replay_payments
from .periods import calculate_interest_periods, calculate_per_diem
from .splitter import insert_payment, insert_payments
from .types import (
    CalculatorInputs,
    CalculatorResults,
    CalculatorState,
    DamageAccumulation,
    FinalPeriodDamageDetail,
    FinalPeriodDamageInterest,
    InterestResult,
    Payment,
    PaymentAllocation,
    PaymentInsertion,
    SpecialDamage,
)

__all__ = [
    "CalculatorInputs",
    "CalculatorResults",
    "CalculatorState",
    "DamageAccumulation",
    "FinalPeriodDamageDetail",
    "FinalPeriodDamageInterest",
    "InterestResult",
    "Payment",
    "PaymentAllocation",
    "PaymentInsertion",
    "SpecialDamage",
    "accrue_interest",
    "allocate",
    "allocate_payments",
    "apply_damages",
    "calculate_interest_periods",
    "calculate_per_diem",
    "final_period_damage_interest",
    "insert_payment",
    "insert_payments",
    "recalculate",
    "record_payment",
    "replay_payments",
]
