"""Read-only loan queries: stored schedule, payoff projection, debt summary, strategies."""

from datetime import date
from decimal import Decimal

from loanflow.config import settings
from loanflow.engine.payoff import compare_strategies, debt_summary, extra_payment_impact
from loanflow.exceptions import NotFoundError, ValidationError
from loanflow.models.loan import AmortizationScheduleEntry, Loan
from loanflow.models.projections import DebtSummary, ExtraPaymentImpact, StrategyComparison
from loanflow.store.base import LoanStore, ScheduleStore


def _check_extra(extra_payment: Decimal) -> None:
    if extra_payment is None or extra_payment < 0:
        raise ValidationError("extra_payment must be zero or greater")


class PortfolioService:
    def __init__(self, loans: LoanStore, schedules: ScheduleStore):
        self.loans = loans
        self.schedules = schedules

    async def _owned_loan(self, owner_id: str, loan_id: str) -> Loan:
        loan = await self.loans.get_loan(loan_id, owner_id)
        if loan is None:
            raise NotFoundError(f"Loan {loan_id} not found")
        return loan

    async def schedule(self, owner_id: str, loan_id: str) -> list[AmortizationScheduleEntry]:
        await self._owned_loan(owner_id, loan_id)
        return await self.schedules.get_schedule(loan_id)

    async def payoff(
        self,
        owner_id: str,
        loan_id: str,
        extra_payment: Decimal = Decimal("0"),
        as_of: date | None = None,
    ) -> ExtraPaymentImpact:
        _check_extra(extra_payment)
        loan = await self._owned_loan(owner_id, loan_id)
        return extra_payment_impact(
            loan.current_balance,
            loan.interest_rate,
            loan.monthly_payment,
            extra_payment,
            start_date=as_of,
            max_months=settings.payoff_max_months,
        )

    async def summary(self, owner_id: str, as_of: date | None = None) -> DebtSummary:
        loans = await self.loans.list_loans(owner_id)
        return debt_summary(loans, as_of=as_of, max_months=settings.payoff_max_months)

    async def strategies(
        self,
        owner_id: str,
        extra_payment: Decimal = Decimal("0"),
        as_of: date | None = None,
    ) -> StrategyComparison:
        _check_extra(extra_payment)
        loans = await self.loans.list_loans(owner_id)
        return compare_strategies(
            loans, extra_payment, as_of=as_of, max_months=settings.payoff_max_months
        )
