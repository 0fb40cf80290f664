"""Canonical test fixtures shared across engine, service and API tests.

Fixture loan: $50K personal loan, 6% rate, 60 months, starting 2025-01-01.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from loanflow.engine.amortization import generate_schedule
from loanflow.engine.payment import monthly_payment
from loanflow.exceptions import PersistenceError
from loanflow.models.loan import Loan

OWNER = "user-1"


class InMemoryLoanStore:
    """Dict-backed store satisfying LoanStore, ScheduleStore and RefinanceLog."""

    def __init__(self):
        self.loans: dict[str, Loan] = {}
        self.schedules: dict[str, list] = {}
        self.analyses: list = []
        self.payments: list = []
        self.fail_writes = False
        self.fail_audit = False

    def add_loan(self, loan: Loan) -> None:
        self.loans[loan.id] = loan

    async def get_loan(self, loan_id, owner_id):
        loan = self.loans.get(loan_id)
        if loan is None or loan.owner_id != owner_id:
            return None
        return loan

    async def list_loans(self, owner_id):
        return [l for l in self.loans.values() if l.owner_id == owner_id]

    async def get_schedule(self, loan_id):
        return sorted(self.schedules.get(loan_id, []), key=lambda e: e.payment_number)

    async def replace_schedule(self, loan_id, entries):
        if self.fail_writes:
            raise PersistenceError("Failed to save amortization schedule")
        self.schedules[loan_id] = list(entries)

    async def record_payment(self, loan, payment, schedule):
        if self.fail_writes:
            raise PersistenceError("Failed to record loan payment")
        self.loans[loan.id] = loan
        self.payments.append(payment)
        self.schedules[loan.id] = list(schedule)

    async def append(self, analysis):
        if self.fail_audit:
            raise PersistenceError("Failed to save refinance analysis")
        self.analyses.append(analysis)


@pytest.fixture
def canonical_loan() -> Loan:
    """$50K at 6% over 60 months, nothing paid yet."""
    return Loan(
        id="loan-1",
        owner_id=OWNER,
        name="Car loan",
        principal=Decimal("50000"),
        current_balance=Decimal("50000"),
        interest_rate=Decimal("6"),
        term_months=60,
        remaining_months=60,
        monthly_payment=monthly_payment(Decimal("50000"), Decimal("6"), 60),
        start_date=date(2025, 1, 1),
    )


@pytest.fixture
def canonical_schedule(canonical_loan):
    return generate_schedule(
        canonical_loan.id,
        canonical_loan.principal,
        canonical_loan.interest_rate,
        canonical_loan.term_months,
        canonical_loan.start_date,
    )


@pytest.fixture
def mortgage() -> Loan:
    """$200K remaining on a 7% mortgage with 25 years left."""
    return Loan(
        id="loan-2",
        owner_id=OWNER,
        name="Mortgage",
        principal=Decimal("250000"),
        current_balance=Decimal("200000"),
        interest_rate=Decimal("7"),
        term_months=360,
        remaining_months=300,
        monthly_payment=monthly_payment(Decimal("200000"), Decimal("7"), 300),
        start_date=date(2020, 1, 1),
    )


@pytest.fixture
def store(canonical_loan, canonical_schedule, mortgage) -> InMemoryLoanStore:
    s = InMemoryLoanStore()
    s.add_loan(canonical_loan)
    s.add_loan(mortgage)
    s.add_loan(replace(mortgage, id="loan-other", owner_id="someone-else"))
    s.schedules[canonical_loan.id] = list(canonical_schedule)
    return s
