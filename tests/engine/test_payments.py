from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from loanflow.engine.amortization import generate_schedule
from loanflow.engine.payment import monthly_payment
from loanflow.engine.payments import reconcile_payment, split_payment
from loanflow.exceptions import ValidationError
from loanflow.models.loan import LoanStatus, PaymentMethod, PaymentType


class TestSplitPayment:
    def test_regular_payment(self):
        split = split_payment(Decimal("50000"), Decimal("6"), Decimal("966.45"))
        assert split.interest_portion == Decimal("250.00")
        assert split.principal_portion == Decimal("716.45")
        assert split.new_balance == Decimal("49283.55")

    def test_overpayment_floors_balance_at_zero(self):
        split = split_payment(Decimal("500"), Decimal("6"), Decimal("1000"))
        assert split.new_balance == Decimal("0")

    def test_underpayment_grows_balance(self):
        # Payment smaller than interest: principal portion is negative
        split = split_payment(Decimal("100000"), Decimal("12"), Decimal("500"))
        assert split.interest_portion == Decimal("1000.00")
        assert split.principal_portion == Decimal("-500.00")
        assert split.new_balance == Decimal("100500.00")

    def test_zero_rate(self):
        split = split_payment(Decimal("1200"), Decimal("0"), Decimal("100"))
        assert split.interest_portion == 0
        assert split.new_balance == Decimal("1100.00")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10"), None])
    def test_non_positive_amount_rejected(self, amount):
        with pytest.raises(ValidationError):
            split_payment(Decimal("1000"), Decimal("5"), amount)


class TestReconcilePayment:
    def test_regular_payment_marks_first_entry_paid(self, canonical_loan, canonical_schedule):
        result = reconcile_payment(
            canonical_loan, canonical_schedule, "pay-1",
            canonical_loan.monthly_payment, payment_date=date(2025, 2, 1),
        )
        first = result.schedule[0]
        assert first.is_paid is True
        assert first.actual_payment_id == "pay-1"
        assert first.payment_number == 1
        assert first.interest_amount == Decimal("250.00")
        assert first.remaining_balance == result.split.new_balance
        assert all(not e.is_paid for e in result.schedule[1:])

    def test_schedule_stays_contiguous(self, canonical_loan, canonical_schedule):
        result = reconcile_payment(
            canonical_loan, canonical_schedule, "pay-1",
            canonical_loan.monthly_payment, payment_date=date(2025, 2, 1),
        )
        assert [e.payment_number for e in result.schedule] == list(range(1, 61))
        assert result.schedule[-1].remaining_balance == 0
        # Forward entries keep the original calendar
        assert result.schedule[1].payment_date == date(2025, 3, 1)

    def test_loan_updated_with_schedule(self, canonical_loan, canonical_schedule):
        result = reconcile_payment(
            canonical_loan, canonical_schedule, "pay-1",
            canonical_loan.monthly_payment, payment_date=date(2025, 2, 1),
        )
        assert result.loan.current_balance == result.split.new_balance
        assert result.loan.remaining_months == 59
        assert abs(result.loan.monthly_payment - canonical_loan.monthly_payment) <= Decimal("0.02")
        assert result.loan.status == LoanStatus.ACTIVE

    def test_extra_payment_lowers_future_installment(self, canonical_loan, canonical_schedule):
        result = reconcile_payment(
            canonical_loan, canonical_schedule, "pay-1", Decimal("10000"),
            payment_date=date(2025, 2, 1), payment_type=PaymentType.EXTRA,
        )
        assert result.loan.current_balance == Decimal("40250.00")
        assert result.loan.monthly_payment < canonical_loan.monthly_payment
        assert result.schedule[1].payment_amount == result.loan.monthly_payment
        assert len(result.schedule) == 60

    def test_payoff_drops_forward_schedule(self, canonical_loan, canonical_schedule):
        result = reconcile_payment(
            canonical_loan, canonical_schedule, "pay-1", Decimal("60000"),
            payment_date=date(2025, 2, 1), payment_type=PaymentType.LUMP_SUM,
        )
        assert result.loan.current_balance == 0
        assert result.loan.status == LoanStatus.PAID_OFF
        assert result.loan.remaining_months == 0
        assert len(result.schedule) == 1
        assert result.schedule[0].is_paid

    def test_second_payment_keeps_earlier_paid_entry(self, canonical_loan, canonical_schedule):
        first = reconcile_payment(
            canonical_loan, canonical_schedule, "pay-1",
            canonical_loan.monthly_payment, payment_date=date(2025, 2, 1),
        )
        second = reconcile_payment(
            first.loan, first.schedule, "pay-2",
            first.loan.monthly_payment, payment_date=date(2025, 3, 1),
        )
        assert second.schedule[0] == first.schedule[0]
        assert second.schedule[1].is_paid
        assert second.schedule[1].actual_payment_id == "pay-2"
        assert second.loan.remaining_months == 58
        assert second.loan.current_balance < first.loan.current_balance

    def test_without_stored_schedule(self, canonical_loan):
        result = reconcile_payment(
            canonical_loan, [], "pay-1",
            canonical_loan.monthly_payment, payment_date=date(2025, 2, 3),
        )
        assert result.schedule[0].payment_number == 1
        assert result.schedule[0].payment_date == date(2025, 2, 3)
        assert len(result.schedule) == 60

    def test_ledger_row(self, canonical_loan, canonical_schedule):
        result = reconcile_payment(
            canonical_loan, canonical_schedule, "pay-1", Decimal("966.45"),
            payment_date=date(2025, 2, 1), payment_method=PaymentMethod.CASH, notes="Feb",
        )
        p = result.payment
        assert p.id == "pay-1"
        assert p.loan_id == canonical_loan.id
        assert p.amount == Decimal("966.45")
        assert p.principal_amount == Decimal("716.45")
        assert p.interest_amount == Decimal("250.00")
        assert p.payment_type == PaymentType.REGULAR
        assert p.payment_method == PaymentMethod.CASH
        assert p.notes == "Feb"

    def test_input_loan_not_mutated(self, canonical_loan, canonical_schedule):
        reconcile_payment(canonical_loan, canonical_schedule, "pay-1", Decimal("966.45"))
        assert canonical_loan.current_balance == Decimal("50000")
        assert not canonical_schedule[0].is_paid

    def test_paid_off_loan_rejected(self, canonical_loan):
        paid = replace(canonical_loan, current_balance=Decimal("0"), status=LoanStatus.PAID_OFF)
        with pytest.raises(ValidationError):
            reconcile_payment(paid, [], "pay-1", Decimal("100"))

    def test_month_end_start_keeps_day_of_month(self, canonical_loan):
        loan = replace(
            canonical_loan,
            principal=Decimal("6000"),
            current_balance=Decimal("6000"),
            term_months=6,
            remaining_months=6,
            monthly_payment=monthly_payment(Decimal("6000"), Decimal("6"), 6),
            start_date=date(2024, 1, 31),
        )
        schedule = generate_schedule(loan.id, loan.principal, loan.interest_rate, 6, loan.start_date)
        result = reconcile_payment(
            loan, schedule, "pay-1", loan.monthly_payment, payment_date=date(2024, 2, 29)
        )
        assert [e.payment_date for e in result.schedule] == [
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
            date(2024, 5, 31),
            date(2024, 6, 30),
            date(2024, 7, 31),
        ]
