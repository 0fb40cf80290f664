"""Protocol definitions for the loan store.

Services depend on these protocols; ``loanflow.store.sql`` is the
SQLAlchemy implementation.
"""

from typing import Protocol, runtime_checkable

from loanflow.models.loan import (
    AmortizationScheduleEntry,
    Loan,
    LoanPayment,
    RefinanceAnalysis,
)


@runtime_checkable
class LoanStore(Protocol):
    async def get_loan(self, loan_id: str, owner_id: str) -> Loan | None:
        """Fetch a loan only if it belongs to ``owner_id``."""
        ...

    async def list_loans(self, owner_id: str) -> list[Loan]:
        """All loans held by ``owner_id``."""
        ...

    async def record_payment(
        self,
        loan: Loan,
        payment: LoanPayment,
        schedule: list[AmortizationScheduleEntry],
    ) -> None:
        """Persist the updated loan, the ledger row and the rebuilt schedule in one transaction."""
        ...


@runtime_checkable
class ScheduleStore(Protocol):
    async def replace_schedule(
        self, loan_id: str, entries: list[AmortizationScheduleEntry]
    ) -> None:
        """Delete every stored entry for ``loan_id`` and insert ``entries`` atomically."""
        ...

    async def get_schedule(self, loan_id: str) -> list[AmortizationScheduleEntry]:
        """Stored schedule ordered by payment number."""
        ...


@runtime_checkable
class RefinanceLog(Protocol):
    async def append(self, analysis: RefinanceAnalysis) -> None:
        """Append one analysis to the audit log."""
        ...
