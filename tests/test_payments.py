"""Unit tests for interest-first payment allocation.

The flat table charges 2% prejudgment and 4% postjudgment in the first half
of 2023. A $400 award from 2023-01-01 accrues 400 * 0.02 * 42 / 365 = 0.92
of interest by 2023-02-11.
"""

from datetime import date

import pytest

from coialib.valuation import (
    Payment,
    SpecialDamage,
    allocate,
    allocate_payments,
    record_payment,
    replay_payments,
)
from coialib.valuation.payments import gross_interest_to, principal_at

from conftest import make_state

ACCRUED_FEB_11 = 400 * 0.02 * 42 / 365
ACCRUED_JAN_10 = 400 * 0.02 * 10 / 365


# ── Fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
def state():
    """$400 award, cause of action 2023-01-01, judgment 2023-03-31."""
    return make_state(
        prejudgment_start_date=date(2023, 1, 1),
        date_of_judgment=date(2023, 3, 31),
        postjudgment_end_date=date(2023, 6, 30),
        judgment_awarded=400.0,
    )


# ── Allocation ────────────────────────────────────────────────────────────

class TestAllocate:
    def test_small_payment_goes_to_interest(self, state, flat_table):
        """A payment below accrued interest leaves principal untouched."""
        allocation = allocate(state, date(2023, 2, 11), 0.5, [], flat_table)
        assert allocation.interest_applied == pytest.approx(0.5)
        assert allocation.principal_applied == pytest.approx(0.0)
        assert allocation.remaining_principal == pytest.approx(400.0)
        assert allocation.interest_accrued == pytest.approx(ACCRUED_FEB_11)

    def test_overpayment_leaves_negative_principal(self, state, flat_table):
        """$500 against $400 principal and $0.92 interest is a refund of ~$99.08."""
        allocation = allocate(state, date(2023, 2, 11), 500.0, [], flat_table)
        assert allocation.interest_applied == pytest.approx(ACCRUED_FEB_11)
        assert allocation.principal_applied == pytest.approx(500 - ACCRUED_FEB_11)
        assert allocation.remaining_principal == pytest.approx(-99.08, abs=0.01)

    def test_stored_prior_split_is_trusted(self, state, flat_table):
        priors = [Payment(date(2023, 2, 1), 0.3, 0.3, 0.0, 400.0)]
        allocation = allocate(state, date(2023, 2, 11), 1.0, priors, flat_table)
        assert allocation.interest_applied == pytest.approx(ACCRUED_FEB_11 - 0.3)
        assert allocation.principal_applied == pytest.approx(1.0 - (ACCRUED_FEB_11 - 0.3))
        assert allocation.remaining_principal == pytest.approx(400 - allocation.principal_applied)

    def test_legacy_prior_split_inferred(self, state, flat_table):
        """A prior without a stored split is allocated interest-first at its own date."""
        priors = [Payment(date(2023, 1, 10), 5.0)]
        allocation = allocate(state, date(2023, 2, 11), 10.0, priors, flat_table)
        prior_principal = 5.0 - ACCRUED_JAN_10
        assert allocation.interest_applied == pytest.approx(ACCRUED_FEB_11 - ACCRUED_JAN_10)
        assert allocation.remaining_principal == pytest.approx(
            400 - prior_principal - allocation.principal_applied
        )

    def test_interest_accrued_never_negative(self, state, flat_table):
        priors = [Payment(date(2023, 1, 10), 50.0, 5.0, 45.0, 355.0)]
        allocation = allocate(state, date(2023, 2, 11), 10.0, priors, flat_table)
        assert allocation.interest_accrued == 0.0
        assert allocation.principal_applied == pytest.approx(10.0)
        assert allocation.remaining_principal == pytest.approx(400 - 45 - 10)

    def test_invalid_date(self, state, flat_table):
        allocation = allocate(state, "not a date", 100.0, [], flat_table)
        assert allocation.interest_applied == 0.0
        assert allocation.principal_applied == 0.0


class TestAccrualToDate:
    def test_damages_raise_principal_and_interest(self, flat_table):
        state = make_state(
            damages=[SpecialDamage(date(2023, 2, 1), 100.0)],
            prejudgment_start_date=date(2023, 1, 1),
            date_of_judgment=date(2023, 3, 31),
            judgment_awarded=400.0,
        )
        assert principal_at(state, date(2023, 2, 11)) == 500.0
        assert principal_at(state, date(2023, 1, 31)) == 400.0
        expected = ACCRUED_FEB_11 + 100 * 0.02 * 11 / 365
        assert gross_interest_to(state, date(2023, 2, 11), flat_table) == pytest.approx(expected)

    def test_after_judgment_adds_postjudgment_interest(self, state, flat_table):
        prejudgment = 400 * 0.02 * 90 / 365
        postjudgment = 400 * 0.04 * 11 / 365
        total = gross_interest_to(state, date(2023, 4, 10), flat_table)
        assert total == pytest.approx(prejudgment + postjudgment)

    def test_postjudgment_principal_includes_awards(self, flat_table):
        state = make_state(
            prejudgment_start_date=date(2023, 1, 1),
            date_of_judgment=date(2023, 3, 31),
            judgment_awarded=400.0,
            non_pecuniary_awarded=100.0,
            costs_awarded=50.0,
        )
        assert principal_at(state, date(2023, 3, 31)) == 400.0
        assert principal_at(state, date(2023, 4, 1)) == 550.0

    def test_before_prejudgment_start(self, state, flat_table):
        assert gross_interest_to(state, date(2022, 12, 1), flat_table) == 0.0

    def test_user_entered_prejudgment_interest(self, flat_table):
        state = make_state(
            prejudgment_start_date=date(2023, 1, 1),
            date_of_judgment=date(2023, 3, 31),
            judgment_awarded=400.0,
            show_prejudgment=False,
            user_entered_prejudgment_interest=12.5,
        )
        assert gross_interest_to(state, date(2023, 3, 1), flat_table) == 0.0
        assert gross_interest_to(state, date(2023, 3, 31), flat_table) == 12.5

    def test_postjudgment_only_case_accrues_interest(self, flat_table):
        """Without a prejudgment start date, postjudgment interest is still owed first."""
        state = make_state(
            date_of_judgment=date(2023, 1, 1),
            judgment_awarded=10000.0,
            show_prejudgment=False,
        )
        accrued = 10000 * 0.04 * 152 / 365
        assert gross_interest_to(state, date(2023, 6, 1), flat_table) == pytest.approx(accrued)

        allocation = allocate(state, date(2023, 6, 1), 50.0, [], flat_table)
        assert allocation.interest_applied == pytest.approx(50.0)
        assert allocation.principal_applied == pytest.approx(0.0)
        assert allocation.remaining_principal == pytest.approx(10000.0)
        assert allocation.interest_accrued == pytest.approx(accrued)


# ── Payment records ───────────────────────────────────────────────────────

class TestPaymentRecords:
    def test_record_payment(self, state, flat_table):
        new_state, payment = record_payment(state, "2023-02-11", 500, flat_table)
        assert payment.interest_applied == pytest.approx(ACCRUED_FEB_11)
        assert payment.remaining_principal == pytest.approx(-99.08, abs=0.01)
        assert new_state.results.payments == [payment]
        assert state.results.payments == []

    def test_record_payment_invalid_date(self, state, flat_table):
        new_state, payment = record_payment(state, "2023-13-01", 5, flat_table)
        assert payment is None
        assert new_state.results.payments == []

    def test_recorded_splits_kept(self, flat_table):
        """Allocation fills in only missing splits, in date order."""
        state = make_state(
            payments=[
                Payment(date(2023, 2, 11), 10.0),
                Payment(date(2023, 1, 10), 5.0, 0.1, 4.9, 395.1),
            ],
            prejudgment_start_date=date(2023, 1, 1),
            date_of_judgment=date(2023, 3, 31),
            judgment_awarded=400.0,
        )
        payments = allocate_payments(state, flat_table)
        assert [p.date for p in payments] == [date(2023, 1, 10), date(2023, 2, 11)]
        assert payments[0].interest_applied == 0.1
        assert payments[1].interest_applied == pytest.approx(ACCRUED_FEB_11 - 0.1)
        assert payments[1].remaining_principal == pytest.approx(
            400 - 4.9 - payments[1].principal_applied
        )

    def test_replay_recomputes_stored_splits(self, flat_table):
        state = make_state(
            payments=[Payment(date(2023, 1, 10), 5.0, 1.0, 4.0, 396.0)],
            prejudgment_start_date=date(2023, 1, 1),
            date_of_judgment=date(2023, 3, 31),
            judgment_awarded=400.0,
        )
        replayed = replay_payments(state, flat_table)
        payment = replayed.results.payments[0]
        assert payment.interest_applied == pytest.approx(ACCRUED_JAN_10)
        assert payment.principal_applied == pytest.approx(5.0 - ACCRUED_JAN_10)
        assert state.results.payments[0].interest_applied == 1.0

    def test_from_dict(self):
        payment = Payment.from_dict({"date": "2023-02-11", "amount": "500"})
        assert payment == Payment(date(2023, 2, 11), 500.0)
        assert not payment.is_allocated
        assert Payment.from_dict({"date": "", "amount": 5}) is None
