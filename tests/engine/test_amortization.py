from datetime import date
from decimal import Decimal

import pytest

from loanflow.engine.amortization import (
    generate_schedule,
    payment_breakdown,
    remaining_interest,
    simulate,
    total_interest,
    total_simulated_interest,
)
from loanflow.engine.payment import add_months
from loanflow.exceptions import ValidationError


@pytest.fixture
def thirty_year():
    return generate_schedule("loan-1", Decimal("100000"), Decimal("6"), 360, date(2024, 1, 15))


class TestGenerateSchedule:
    def test_payment_count(self, thirty_year):
        assert len(thirty_year) == 360
        assert [e.payment_number for e in thirty_year] == list(range(1, 361))

    def test_first_payment(self, thirty_year):
        first = thirty_year[0]
        # 100000 * 0.06 / 12 = 500.00 interest
        assert first.payment_amount == Decimal("599.55")
        assert first.interest_amount == Decimal("500.00")
        assert first.principal_amount == Decimal("99.55")
        assert first.remaining_balance == Decimal("99900.45")
        assert first.payment_date == date(2024, 2, 15)
        assert first.is_paid is False
        assert first.loan_id == "loan-1"

    def test_final_balance_exactly_zero(self, thirty_year):
        assert thirty_year[-1].remaining_balance == Decimal("0")

    def test_balance_decreases(self, thirty_year):
        for i in range(1, len(thirty_year)):
            assert thirty_year[i].remaining_balance < thirty_year[i - 1].remaining_balance

    def test_principal_sums_to_loan_amount(self, thirty_year):
        total = sum(e.principal_amount for e in thirty_year)
        assert abs(total - Decimal("100000")) <= Decimal("360") * Decimal("0.01")

    def test_components_add_up(self, thirty_year):
        for e in thirty_year:
            assert abs(e.principal_amount + e.interest_amount - e.payment_amount) <= Decimal("0.01")

    def test_dates_one_month_apart(self, thirty_year):
        start = date(2024, 1, 15)
        for e in thirty_year:
            assert e.payment_date == add_months(start, e.payment_number)

    def test_month_end_start_date(self):
        schedule = generate_schedule("l", Decimal("3000"), Decimal("5"), 3, date(2024, 1, 31))
        assert [e.payment_date for e in schedule] == [
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
        ]

    def test_iso_string_start_date(self):
        schedule = generate_schedule("l", Decimal("3000"), Decimal("5"), 3, "2024-06-01")
        assert schedule[0].payment_date == date(2024, 7, 1)

    def test_zero_rate(self):
        schedule = generate_schedule("l", Decimal("12000"), Decimal("0"), 12, date(2024, 1, 1))
        assert all(e.interest_amount == 0 for e in schedule)
        assert all(e.principal_amount == Decimal("1000.00") for e in schedule)
        assert schedule[-1].remaining_balance == 0

    def test_payment_override(self):
        schedule = generate_schedule(
            "l", Decimal("12000"), Decimal("0"), 12, date(2024, 1, 1),
            monthly_payment_override=Decimal("1500"),
        )
        assert all(e.payment_amount == Decimal("1500.00") for e in schedule)
        # Overpaying drives the balance to zero early; it never goes negative
        assert all(e.remaining_balance >= 0 for e in schedule)
        assert schedule[7].remaining_balance == 0

    def test_first_payment_number_offset(self):
        schedule = generate_schedule(
            "l", Decimal("3000"), Decimal("5"), 3, date(2024, 1, 1), first_payment_number=10
        )
        assert [e.payment_number for e in schedule] == [10, 11, 12]
        assert schedule[0].payment_date == date(2024, 11, 1)
        assert schedule[2].payment_date == date(2025, 1, 1)

    def test_deterministic(self):
        a = generate_schedule("l", Decimal("75000"), Decimal("4.25"), 180, date(2024, 3, 1))
        b = generate_schedule("l", Decimal("75000"), Decimal("4.25"), 180, date(2024, 3, 1))
        assert a == b


class TestScheduleValidation:
    @pytest.mark.parametrize(
        "loan_id, principal, rate, term, start",
        [
            ("", Decimal("1000"), Decimal("5"), 12, date(2024, 1, 1)),
            ("l", Decimal("0"), Decimal("5"), 12, date(2024, 1, 1)),
            ("l", None, Decimal("5"), 12, date(2024, 1, 1)),
            ("l", Decimal("1000"), Decimal("-0.5"), 12, date(2024, 1, 1)),
            ("l", Decimal("1000"), None, 12, date(2024, 1, 1)),
            ("l", Decimal("1000"), Decimal("5"), 0, date(2024, 1, 1)),
            ("l", Decimal("1000"), Decimal("5"), 12.5, date(2024, 1, 1)),
            ("l", Decimal("1000"), Decimal("5"), 12, None),
            ("l", Decimal("1000"), Decimal("5"), 12, "not-a-date"),
        ],
    )
    def test_rejected_before_computation(self, loan_id, principal, rate, term, start):
        with pytest.raises(ValidationError):
            generate_schedule(loan_id, principal, rate, term, start)

    def test_negative_override_rejected(self):
        with pytest.raises(ValidationError):
            generate_schedule(
                "l", Decimal("1000"), Decimal("5"), 12, date(2024, 1, 1),
                monthly_payment_override=Decimal("-1"),
            )


class TestSimulate:
    def test_unforced_leaves_rounding_residue(self):
        rows = simulate(Decimal("100000"), Decimal("6"), Decimal("599.55"), 360, force_zero_at_end=False)
        assert rows[-1].balance != 0
        assert abs(rows[-1].balance) < Decimal("1")

    def test_forced_ends_at_zero(self):
        rows = simulate(Decimal("100000"), Decimal("6"), Decimal("599.55"), 360, force_zero_at_end=True)
        assert rows[-1].balance == 0

    def test_modes_share_interest_path(self):
        forced = simulate(Decimal("5000"), Decimal("9"), Decimal("437.26"), 12, force_zero_at_end=True)
        free = simulate(Decimal("5000"), Decimal("9"), Decimal("437.26"), 12, force_zero_at_end=False)
        assert total_simulated_interest(forced) == total_simulated_interest(free)

    def test_zero_periods(self):
        assert simulate(Decimal("5000"), Decimal("9"), Decimal("100"), 0, force_zero_at_end=True) == []


class TestInterestHelpers:
    def test_payment_breakdown(self):
        split = payment_breakdown(Decimal("50000"), Decimal("6"), Decimal("966.45"))
        assert split == {"interest": Decimal("250.00"), "principal": Decimal("716.45")}

    def test_total_interest(self):
        # 599.55 * 360 - 100000
        assert total_interest(Decimal("100000"), Decimal("6"), 360) == Decimal("115838.00")

    def test_total_interest_zero_rate(self):
        assert total_interest(Decimal("12000"), Decimal("0"), 12) == Decimal("0.00")

    def test_remaining_interest_matches_schedule(self, thirty_year):
        expected = sum(e.interest_amount for e in thirty_year)
        assert remaining_interest(Decimal("100000"), Decimal("6"), 360, Decimal("599.55")) == expected

    def test_remaining_interest_paid_off(self):
        assert remaining_interest(Decimal("0"), Decimal("6"), 12, Decimal("100")) == 0
