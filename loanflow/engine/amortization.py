"""Amortization schedule computation.

One period loop (``simulate``) serves every caller. The schedule generator
forces the final balance to zero; projections used for interest comparison
do not, so any rounding residue stays visible in their totals.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from loanflow.engine.payment import add_months, monthly_payment, monthly_rate, to_cents
from loanflow.exceptions import ValidationError
from loanflow.models.loan import AmortizationScheduleEntry


@dataclass(frozen=True)
class AmortizationPeriod:
    period: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal


def simulate(
    balance: Decimal,
    annual_rate: Decimal,
    payment: Decimal,
    periods: int,
    force_zero_at_end: bool,
) -> list[AmortizationPeriod]:
    """Run ``periods`` fixed payments against ``balance``; values stay unrounded."""
    r = monthly_rate(annual_rate)
    rows: list[AmortizationPeriod] = []

    for period in range(1, periods + 1):
        interest = balance * r
        principal = payment - interest
        balance -= principal

        if force_zero_at_end and period == periods:
            balance = Decimal("0")

        rows.append(AmortizationPeriod(
            period=period,
            payment=payment,
            principal=principal,
            interest=interest,
            balance=balance,
        ))

    return rows


def total_simulated_interest(rows: list[AmortizationPeriod]) -> Decimal:
    return sum((row.interest for row in rows), Decimal("0"))


def parse_start_date(value: date | str | None) -> date:
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError("start_date is required")
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise ValidationError(f"Invalid start_date: {value}") from e


def _validate_terms(loan_id: str, principal, annual_rate, term_months) -> None:
    if not loan_id:
        raise ValidationError("loan_id is required")
    if principal is None or principal <= 0:
        raise ValidationError("principal must be greater than zero")
    if annual_rate is None or annual_rate < 0:
        raise ValidationError("annual_rate must be zero or greater")
    if isinstance(term_months, bool) or not isinstance(term_months, int) or term_months < 1:
        raise ValidationError("term_months must be a positive integer")


def generate_schedule(
    loan_id: str,
    principal: Decimal,
    annual_rate: Decimal,
    term_months: int,
    start_date: date | str,
    monthly_payment_override: Decimal | None = None,
    first_payment_number: int = 1,
) -> list[AmortizationScheduleEntry]:
    """Generate the full amortization table for a loan.

    Args:
        loan_id: Owning loan
        principal: Amount to amortize
        annual_rate: Nominal annual percent (e.g. 6 for 6%)
        term_months: Number of payments; one entry per payment
        start_date: Loan start; the entry numbered ``n`` falls ``n`` calendar months later
        monthly_payment_override: Use this payment instead of the annuity payment
        first_payment_number: Number given to the first entry (forward regeneration)
    """
    _validate_terms(loan_id, principal, annual_rate, term_months)
    start = parse_start_date(start_date)
    if monthly_payment_override is not None and monthly_payment_override < 0:
        raise ValidationError("monthly_payment must not be negative")

    pmt = monthly_payment_override or monthly_payment(principal, annual_rate, term_months)
    rows = simulate(principal, annual_rate, pmt, term_months, force_zero_at_end=True)

    return [
        AmortizationScheduleEntry(
            loan_id=loan_id,
            payment_number=first_payment_number + row.period - 1,
            payment_date=add_months(start, first_payment_number + row.period - 1),
            payment_amount=to_cents(row.payment),
            principal_amount=to_cents(row.principal),
            interest_amount=to_cents(row.interest),
            remaining_balance=max(Decimal("0"), to_cents(row.balance)),
        )
        for row in rows
    ]


def payment_breakdown(
    balance: Decimal, annual_rate: Decimal, payment: Decimal
) -> dict[str, Decimal]:
    """Principal/interest split of the next regular payment."""
    interest = balance * monthly_rate(annual_rate)
    return {
        "principal": to_cents(payment - interest),
        "interest": to_cents(interest),
    }


def total_interest(
    principal: Decimal,
    annual_rate: Decimal,
    term_months: int,
    payment: Decimal | None = None,
) -> Decimal:
    """Lifetime interest of a loan paid exactly on schedule."""
    pmt = payment or monthly_payment(principal, annual_rate, term_months)
    return to_cents(pmt * term_months - principal)


def remaining_interest(
    balance: Decimal,
    annual_rate: Decimal,
    remaining_months: int,
    payment: Decimal,
) -> Decimal:
    """Interest still to be paid if the loan runs its remaining schedule."""
    if balance <= 0 or remaining_months < 1:
        return Decimal("0")
    rows = simulate(balance, annual_rate, payment, remaining_months, force_zero_at_end=True)
    return sum((to_cents(row.interest) for row in rows), Decimal("0"))
