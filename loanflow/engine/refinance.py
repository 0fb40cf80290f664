"""Refinancing analysis: interest on the current path vs a new rate, savings, break-even.

Pure functions: Decimal in, dataclass out. No I/O.
"""

import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from loanflow.config import settings
from loanflow.engine.amortization import simulate, total_simulated_interest
from loanflow.engine.payment import annuity_payment, to_cents
from loanflow.exceptions import ValidationError
from loanflow.models.loan import Loan, RefinanceAnalysis


@dataclass(frozen=True)
class RefinancePolicy:
    min_lifetime_savings: Decimal = Decimal("5000")
    max_break_even_months: int = 36
    never_break_even: int = 999

    @classmethod
    def from_settings(cls) -> "RefinancePolicy":
        return cls(
            min_lifetime_savings=settings.refinance_min_lifetime_savings,
            max_break_even_months=settings.refinance_max_break_even_months,
            never_break_even=settings.refinance_never_break_even,
        )


def break_even_months(
    monthly_savings: Decimal,
    closing_costs: Decimal,
    never: int = 999,
) -> int:
    """Months of savings needed to recover closing costs; ``never`` if there are no savings."""
    if monthly_savings <= 0:
        return never
    return math.ceil(closing_costs / monthly_savings)


def analyze_refinance(
    loan: Loan,
    new_rate: Decimal,
    closing_costs: Decimal = Decimal("0"),
    analysis_date: date | None = None,
    policy: RefinancePolicy | None = None,
) -> RefinanceAnalysis:
    """Compare keeping the current loan against refinancing the balance at ``new_rate``.

    The current path keeps paying the loan's existing fixed payment at its
    current rate. The new path re-amortizes the current balance over the same
    remaining months at the new rate with the unrounded level payment. Neither
    path forces the final balance to zero; only reported amounts are rounded.
    """
    if new_rate is None or new_rate < 0:
        raise ValidationError("new_rate must be zero or greater")
    if closing_costs < 0:
        raise ValidationError("closing_costs must be zero or greater")
    policy = policy or RefinancePolicy()

    remaining = loan.effective_remaining_months
    balance = loan.current_balance

    current_rows = simulate(
        balance, loan.interest_rate, loan.monthly_payment, remaining, force_zero_at_end=False
    )
    current_interest = total_simulated_interest(current_rows)

    new_payment = annuity_payment(balance, new_rate, remaining)
    new_rows = simulate(balance, new_rate, new_payment, remaining, force_zero_at_end=False)
    new_interest = total_simulated_interest(new_rows)

    monthly_savings = loan.monthly_payment - new_payment
    lifetime_savings = current_interest - new_interest - closing_costs
    months = break_even_months(monthly_savings, closing_costs, policy.never_break_even)

    return RefinanceAnalysis(
        loan_id=loan.id,
        analysis_date=analysis_date or date.today(),
        current_rate=loan.interest_rate,
        new_rate=new_rate,
        monthly_savings=to_cents(monthly_savings),
        lifetime_savings=to_cents(lifetime_savings),
        break_even_months=months,
        is_recommended=(
            lifetime_savings > policy.min_lifetime_savings
            and months < policy.max_break_even_months
        ),
    )
