"""Payoff projections: extra-payment impact, portfolio summary, snowball vs avalanche.

Pure functions: Decimal in, dataclass out. No I/O.
"""

from datetime import date
from decimal import Decimal

from loanflow.engine.amortization import remaining_interest
from loanflow.engine.payment import add_months, monthly_rate, to_cents
from loanflow.models.loan import Loan, LoanStatus
from loanflow.models.projections import (
    DebtSummary,
    ExtraPaymentImpact,
    PayoffOrderItem,
    PayoffProjection,
    PayoffStrategy,
    StrategyComparison,
    StrategyType,
)

HALF_CENT = Decimal("0.005")
DEFAULT_MAX_MONTHS = 600


def project_payoff(
    balance: Decimal,
    annual_rate: Decimal,
    payment: Decimal,
    extra_payment: Decimal = Decimal("0"),
    start_date: date | None = None,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> PayoffProjection:
    """Month-by-month payoff at ``payment + extra_payment``.

    The final payment is capped at what is owed. A payment that does not
    cover the monthly interest never pays the loan off; the projection then
    stops at ``max_months`` with ``paid_off=False``.
    """
    start = start_date or date.today()
    r = monthly_rate(annual_rate)
    total_payment = payment + extra_payment

    months = 0
    total_interest = Decimal("0")
    total_paid = Decimal("0")

    while balance > 0 and months < max_months:
        interest = balance * r
        pay = min(total_payment, balance + interest)
        if pay <= interest:
            months = max_months
            break
        balance -= pay - interest
        total_interest += interest
        total_paid += pay
        months += 1
        # Sub-cent residue would otherwise add a phantom period
        if balance < HALF_CENT:
            balance = Decimal("0")

    return PayoffProjection(
        months=months,
        payoff_date=add_months(start, months),
        total_interest=to_cents(total_interest),
        total_paid=to_cents(total_paid),
        paid_off=balance <= 0,
    )


def extra_payment_impact(
    balance: Decimal,
    annual_rate: Decimal,
    payment: Decimal,
    extra_payment: Decimal,
    start_date: date | None = None,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> ExtraPaymentImpact:
    """Months and interest saved by adding ``extra_payment`` to every payment."""
    base = project_payoff(balance, annual_rate, payment, Decimal("0"), start_date, max_months)
    accelerated = project_payoff(balance, annual_rate, payment, extra_payment, start_date, max_months)
    return ExtraPaymentImpact(
        extra_amount=to_cents(extra_payment),
        original_payoff_date=base.payoff_date,
        new_payoff_date=accelerated.payoff_date,
        months_saved=max(0, base.months - accelerated.months),
        interest_saved=base.total_interest - accelerated.total_interest,
    )


def _open_loans(loans: list[Loan]) -> list[Loan]:
    return [l for l in loans if l.current_balance > 0 and l.status != LoanStatus.PAID_OFF]


def debt_summary(
    loans: list[Loan], as_of: date | None = None, max_months: int = DEFAULT_MAX_MONTHS
) -> DebtSummary:
    """Portfolio-level totals across every loan an owner holds."""
    as_of = as_of or date.today()
    total_debt = sum((l.current_balance for l in loans), Decimal("0"))
    total_original = sum((l.principal for l in loans), Decimal("0"))
    total_paid = total_original - total_debt

    interest_remaining = Decimal("0")
    months_to_free = 0
    for loan in _open_loans(loans):
        interest_remaining += remaining_interest(
            loan.current_balance,
            loan.interest_rate,
            loan.effective_remaining_months,
            loan.monthly_payment,
        )
        projection = project_payoff(
            loan.current_balance, loan.interest_rate, loan.monthly_payment,
            start_date=as_of, max_months=max_months,
        )
        months_to_free = max(months_to_free, projection.months)

    return DebtSummary(
        total_debt=to_cents(total_debt),
        total_monthly_payments=to_cents(
            sum((l.monthly_payment for l in _open_loans(loans)), Decimal("0"))
        ),
        total_original_debt=to_cents(total_original),
        total_paid=to_cents(total_paid),
        percentage_paid=(
            int((total_paid / total_original * 100).to_integral_value())
            if total_original > 0 else 0
        ),
        total_interest_remaining=to_cents(interest_remaining),
        debt_free_date=add_months(as_of, months_to_free),
        months_to_debt_free=months_to_free,
    )


def _simulate_portfolio(
    ordered: list[Loan],
    extra_payment: Decimal,
    rollover: bool,
    max_months: int,
) -> tuple[int, Decimal]:
    """Pay every loan's minimum each month and steer the surplus down ``ordered``.

    With ``rollover`` the minimum of each paid-off loan joins the surplus.
    Returns (months until every balance is zero, total interest).
    """
    balances = {l.id: l.current_balance for l in ordered}
    freed = Decimal("0")
    months = 0
    total_interest = Decimal("0")

    while any(b > 0 for b in balances.values()) and months < max_months:
        months += 1
        surplus = extra_payment + (freed if rollover else Decimal("0"))

        for loan in ordered:
            balance = balances[loan.id]
            if balance <= 0:
                continue
            interest = balance * monthly_rate(loan.interest_rate)
            pay = min(loan.monthly_payment, balance + interest)
            total_interest += interest
            balances[loan.id] = balance + interest - pay
            if rollover:
                # Whatever the final payment did not need is spare this month
                surplus += loan.monthly_payment - pay

        for loan in ordered:
            if surplus <= 0:
                break
            balance = balances[loan.id]
            if balance <= 0:
                continue
            applied = min(surplus, balance)
            balances[loan.id] = balance - applied
            surplus -= applied

        for loan in ordered:
            if 0 < balances[loan.id] < HALF_CENT:
                balances[loan.id] = Decimal("0")

        freed = sum(
            (l.monthly_payment for l in ordered if balances[l.id] <= 0), Decimal("0")
        )

    return months, to_cents(total_interest)


def _strategy(
    kind: StrategyType,
    ordered: list[Loan],
    reasons: list[str],
    extra_payment: Decimal,
    rollover: bool,
    as_of: date,
    max_months: int,
    baseline: PayoffStrategy | None = None,
) -> PayoffStrategy:
    months, interest = _simulate_portfolio(ordered, extra_payment, rollover, max_months)
    return PayoffStrategy(
        type=kind,
        payoff_order=[
            PayoffOrderItem(loan_id=l.id, loan_name=l.name, reason=reason)
            for l, reason in zip(ordered, reasons)
        ],
        months_to_debt_free=months,
        payoff_date=add_months(as_of, months),
        total_interest=interest,
        interest_saved=baseline.total_interest - interest if baseline else Decimal("0"),
        months_saved=max(0, baseline.months_to_debt_free - months) if baseline else 0,
    )


def compare_strategies(
    loans: list[Loan],
    extra_payment: Decimal = Decimal("0"),
    as_of: date | None = None,
    max_months: int = DEFAULT_MAX_MONTHS,
) -> StrategyComparison:
    """Compare minimum payments against snowball and avalanche payoff orders."""
    as_of = as_of or date.today()
    open_loans = _open_loans(loans)

    current = _strategy(
        StrategyType.CURRENT, open_loans, ["Minimum payment"] * len(open_loans),
        Decimal("0"), False, as_of, max_months,
    )

    by_balance = sorted(open_loans, key=lambda l: l.current_balance)
    snowball = _strategy(
        StrategyType.SNOWBALL, by_balance,
        [f"Balance: {to_cents(l.current_balance):,}" for l in by_balance],
        extra_payment, True, as_of, max_months, baseline=current,
    )

    by_rate = sorted(open_loans, key=lambda l: l.interest_rate, reverse=True)
    avalanche = _strategy(
        StrategyType.AVALANCHE, by_rate,
        [f"Interest rate: {l.interest_rate}%" for l in by_rate],
        extra_payment, True, as_of, max_months, baseline=current,
    )

    best = (
        StrategyType.AVALANCHE
        if avalanche.interest_saved >= snowball.interest_saved
        else StrategyType.SNOWBALL
    )
    chosen = avalanche if best == StrategyType.AVALANCHE else snowball
    notes = []
    if chosen.payoff_order:
        notes.append(
            f"Save {chosen.interest_saved:,} in interest and become debt-free "
            f"{chosen.months_saved} months earlier"
        )
        first = chosen.payoff_order[0]
        notes.append(
            f"Focus {to_cents(extra_payment):,} extra per month on {first.loan_name or first.loan_id}"
        )

    return StrategyComparison(
        current=current,
        snowball=snowball,
        avalanche=avalanche,
        best=best,
        extra_payment=to_cents(extra_payment),
        notes=notes,
    )
