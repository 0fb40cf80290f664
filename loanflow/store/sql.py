"""SQLAlchemy-backed loan store.

Every write commits exactly once, so a schedule replacement (delete + insert)
is visible to readers either entirely or not at all. Concurrent writers on
the same loan are not coordinated here; the last commit wins.
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.exceptions import PersistenceError
from loanflow.models.db import (
    AmortizationScheduleRecord,
    LoanPaymentRecord,
    LoanRecord,
    RefinanceAnalysisRecord,
)
from loanflow.models.loan import (
    AmortizationScheduleEntry,
    Loan,
    LoanPayment,
    LoanStatus,
    RefinanceAnalysis,
)

logger = logging.getLogger(__name__)


def loan_from_record(record: LoanRecord) -> Loan:
    return Loan(
        id=record.id,
        owner_id=record.user_id,
        name=record.loan_name or "",
        principal=record.original_amount,
        current_balance=record.current_balance,
        interest_rate=record.interest_rate,
        term_months=record.term_months,
        remaining_months=record.remaining_months,
        monthly_payment=record.monthly_payment,
        start_date=record.start_date,
        status=LoanStatus(record.status),
    )


def entry_from_record(record: AmortizationScheduleRecord) -> AmortizationScheduleEntry:
    return AmortizationScheduleEntry(
        loan_id=record.loan_id,
        payment_number=record.payment_number,
        payment_date=record.payment_date,
        payment_amount=record.payment_amount,
        principal_amount=record.principal_amount,
        interest_amount=record.interest_amount,
        remaining_balance=record.remaining_balance,
        is_paid=record.is_paid,
        actual_payment_id=record.actual_payment_id,
    )


def entry_to_record(entry: AmortizationScheduleEntry) -> AmortizationScheduleRecord:
    return AmortizationScheduleRecord(
        loan_id=entry.loan_id,
        payment_number=entry.payment_number,
        payment_date=entry.payment_date,
        payment_amount=entry.payment_amount,
        principal_amount=entry.principal_amount,
        interest_amount=entry.interest_amount,
        remaining_balance=entry.remaining_balance,
        is_paid=entry.is_paid,
        actual_payment_id=entry.actual_payment_id,
    )


class SQLLoanStore:
    """Implements ``LoanStore``, ``ScheduleStore`` and ``RefinanceLog`` on one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self, action: str, loan_id: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to %s for loan %s: %s", action, loan_id, e)
            raise PersistenceError(f"Failed to {action}") from e

    async def get_loan(self, loan_id: str, owner_id: str) -> Loan | None:
        result = await self.session.execute(
            select(LoanRecord).where(LoanRecord.id == loan_id, LoanRecord.user_id == owner_id)
        )
        record = result.scalar_one_or_none()
        return loan_from_record(record) if record is not None else None

    async def list_loans(self, owner_id: str) -> list[Loan]:
        result = await self.session.execute(
            select(LoanRecord).where(LoanRecord.user_id == owner_id).order_by(LoanRecord.created_at)
        )
        return [loan_from_record(r) for r in result.scalars().all()]

    async def get_schedule(self, loan_id: str) -> list[AmortizationScheduleEntry]:
        result = await self.session.execute(
            select(AmortizationScheduleRecord)
            .where(AmortizationScheduleRecord.loan_id == loan_id)
            .order_by(AmortizationScheduleRecord.payment_number)
        )
        return [entry_from_record(r) for r in result.scalars().all()]

    async def replace_schedule(
        self, loan_id: str, entries: list[AmortizationScheduleEntry]
    ) -> None:
        try:
            await self.session.execute(
                delete(AmortizationScheduleRecord).where(AmortizationScheduleRecord.loan_id == loan_id)
            )
            self.session.add_all([entry_to_record(e) for e in entries])
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError("Failed to save amortization schedule") from e
        await self._commit("save amortization schedule", loan_id)
        logger.info("Replaced schedule for loan %s with %d entries", loan_id, len(entries))

    async def record_payment(
        self,
        loan: Loan,
        payment: LoanPayment,
        schedule: list[AmortizationScheduleEntry],
    ) -> None:
        try:
            await self.session.execute(
                update(LoanRecord)
                .where(LoanRecord.id == loan.id)
                .values(
                    current_balance=loan.current_balance,
                    remaining_months=loan.remaining_months,
                    monthly_payment=loan.monthly_payment,
                    status=loan.status.value,
                )
            )
            self.session.add(LoanPaymentRecord(
                id=payment.id,
                loan_id=payment.loan_id,
                payment_date=payment.payment_date,
                amount=payment.amount,
                principal_amount=payment.principal_amount,
                interest_amount=payment.interest_amount,
                payment_type=payment.payment_type.value,
                payment_method=payment.payment_method.value if payment.payment_method else None,
                notes=payment.notes,
            ))
            await self.session.execute(
                delete(AmortizationScheduleRecord).where(AmortizationScheduleRecord.loan_id == loan.id)
            )
            self.session.add_all([entry_to_record(e) for e in schedule])
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError("Failed to record loan payment") from e
        await self._commit("record loan payment", loan.id)

    async def append(self, analysis: RefinanceAnalysis) -> None:
        self.session.add(RefinanceAnalysisRecord(
            loan_id=analysis.loan_id,
            analysis_date=analysis.analysis_date,
            current_rate=analysis.current_rate,
            new_rate=analysis.new_rate,
            monthly_savings=analysis.monthly_savings,
            lifetime_savings=analysis.lifetime_savings,
            break_even_months=analysis.break_even_months,
            is_recommended=analysis.is_recommended,
        ))
        await self._commit("save refinance analysis", analysis.loan_id)
