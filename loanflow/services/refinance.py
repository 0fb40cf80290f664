"""Refinance analysis for a caller's own loan, with an append-only audit trail."""

import logging
from datetime import date
from decimal import Decimal

from loanflow.engine.refinance import RefinancePolicy, analyze_refinance
from loanflow.exceptions import NotFoundError
from loanflow.models.loan import RefinanceAnalysis
from loanflow.store.base import LoanStore, RefinanceLog

logger = logging.getLogger(__name__)


class RefinanceService:
    def __init__(
        self,
        loans: LoanStore,
        log: RefinanceLog,
        policy: RefinancePolicy | None = None,
    ):
        self.loans = loans
        self.log = log
        self.policy = policy or RefinancePolicy.from_settings()

    async def analyze(
        self,
        owner_id: str,
        loan_id: str,
        new_rate: Decimal,
        closing_costs: Decimal = Decimal("0"),
        analysis_date: date | None = None,
    ) -> RefinanceAnalysis:
        loan = await self.loans.get_loan(loan_id, owner_id)
        if loan is None:
            raise NotFoundError(f"Loan {loan_id} not found")

        analysis = analyze_refinance(
            loan, new_rate, closing_costs, analysis_date=analysis_date, policy=self.policy
        )

        # Audit write failures are logged, never raised
        try:
            await self.log.append(analysis)
        except Exception:
            logger.exception("Error saving refinance analysis for loan %s", loan_id)

        return analysis
