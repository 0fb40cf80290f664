"""Schedule regeneration: compute a loan's full amortization table and replace the stored one."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from loanflow.engine.amortization import generate_schedule
from loanflow.exceptions import NotFoundError, ValidationError
from loanflow.models.loan import AmortizationScheduleEntry
from loanflow.store.base import LoanStore, ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleResult:
    loan_id: str
    entries: list[AmortizationScheduleEntry]

    @property
    def total_entries(self) -> int:
        return len(self.entries)

    def preview(self, size: int) -> list[AmortizationScheduleEntry]:
        return self.entries[:size]


class ScheduleService:
    def __init__(self, loans: LoanStore, schedules: ScheduleStore):
        self.loans = loans
        self.schedules = schedules

    async def regenerate(
        self,
        owner_id: str,
        loan_id: str,
        principal: Decimal,
        annual_rate: Decimal,
        term_months: int,
        start_date: date | str,
        monthly_payment: Decimal | None = None,
    ) -> ScheduleResult:
        """Generate and persist a fresh schedule for one of the caller's loans.

        A loan the caller does not own raises ``NotFoundError`` and nothing is
        computed. Once a payment has been recorded the schedule belongs to
        payment reconciliation, so regeneration raises ``ValidationError``.
        Invalid input raises ``ValidationError`` before anything is written.
        A failed write raises ``PersistenceError``; the previous schedule
        stays in place because the replacement is a single transaction.
        Safe to retry: the same input always produces the same table.
        """
        loan = await self.loans.get_loan(loan_id, owner_id)
        if loan is None:
            raise NotFoundError(f"Loan {loan_id} not found")

        stored = await self.schedules.get_schedule(loan_id)
        if any(e.is_paid for e in stored):
            raise ValidationError(
                f"Loan {loan_id} has recorded payments; its schedule is updated by payments only"
            )

        entries = generate_schedule(
            loan_id, principal, annual_rate, term_months, start_date, monthly_payment
        )
        await self.schedules.replace_schedule(loan_id, entries)
        logger.info(
            "Generated %d-period schedule for loan %s (payment %s)",
            len(entries), loan_id, entries[0].payment_amount,
        )
        return ScheduleResult(loan_id=loan_id, entries=entries)
