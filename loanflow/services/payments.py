"""Payment application: the only path that changes a loan's balance."""

import logging
import uuid
from datetime import date
from decimal import Decimal

from loanflow.engine.payments import reconcile_payment
from loanflow.exceptions import NotFoundError
from loanflow.models.loan import PaymentMethod, PaymentReconciliation, PaymentType
from loanflow.store.base import LoanStore, ScheduleStore

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, loans: LoanStore, schedules: ScheduleStore):
        self.loans = loans
        self.schedules = schedules

    async def apply(
        self,
        owner_id: str,
        loan_id: str,
        payment_amount: Decimal,
        payment_date: date | None = None,
        payment_type: PaymentType = PaymentType.REGULAR,
        payment_method: PaymentMethod | None = None,
        notes: str | None = None,
    ) -> PaymentReconciliation:
        """Apply one payment and persist loan, ledger row and schedule together.

        Raises ``NotFoundError`` for a loan the caller does not own,
        ``ValidationError`` for a non-positive amount or a paid-off loan and
        ``PersistenceError`` when the store write fails.
        """
        loan = await self.loans.get_loan(loan_id, owner_id)
        if loan is None:
            raise NotFoundError(f"Loan {loan_id} not found")

        schedule = await self.schedules.get_schedule(loan_id)
        result = reconcile_payment(
            loan,
            schedule,
            payment_id=str(uuid.uuid4()),
            payment_amount=payment_amount,
            payment_date=payment_date,
            payment_type=payment_type,
            payment_method=payment_method,
            notes=notes,
        )
        await self.loans.record_payment(result.loan, result.payment, result.schedule)

        logger.info(
            "Applied %s payment of %s to loan %s: balance %s -> %s",
            payment_type.value, result.payment.amount, loan_id,
            loan.current_balance, result.loan.current_balance,
        )
        return result
