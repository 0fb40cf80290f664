"""Per-loan and portfolio routes: payments, stored schedule, payoff and strategies."""

from decimal import Decimal

from fastapi import APIRouter, Depends

from loanflow.api.deps import get_current_user_id, get_payment_service, get_portfolio_service
from loanflow.api.routes.schedules import entry_response
from loanflow.api.schemas import (
    DebtSummaryResponse,
    LoanStateResponse,
    PaymentRequest,
    PaymentResponse,
    PayoffOrderResponse,
    PayoffResponse,
    ScheduleEntryResponse,
    StrategyComparisonResponse,
    StrategyResponse,
)
from loanflow.exceptions import ValidationError
from loanflow.models.loan import PaymentMethod, PaymentType
from loanflow.models.projections import PayoffStrategy
from loanflow.services.payments import PaymentService
from loanflow.services.portfolio import PortfolioService

router = APIRouter(prefix="/api/v1/loans", tags=["loans"])


def _strategy_response(s: PayoffStrategy) -> StrategyResponse:
    return StrategyResponse(
        type=s.type.value,
        payoff_order=[
            PayoffOrderResponse(loan_id=o.loan_id, loan_name=o.loan_name, reason=o.reason)
            for o in s.payoff_order
        ],
        months_to_debt_free=s.months_to_debt_free,
        payoff_date=s.payoff_date,
        total_interest=s.total_interest,
        interest_saved=s.interest_saved,
        months_saved=s.months_saved,
    )


@router.get("/summary", response_model=DebtSummaryResponse)
async def get_debt_summary(
    user_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Totals across all of the caller's loans."""
    s = await service.summary(user_id)
    return DebtSummaryResponse(
        total_debt=s.total_debt,
        total_monthly_payments=s.total_monthly_payments,
        total_original_debt=s.total_original_debt,
        total_paid=s.total_paid,
        percentage_paid=s.percentage_paid,
        total_interest_remaining=s.total_interest_remaining,
        debt_free_date=s.debt_free_date,
        months_to_debt_free=s.months_to_debt_free,
    )


@router.get("/strategies", response_model=StrategyComparisonResponse)
async def get_payoff_strategies(
    extra_payment: Decimal = Decimal("0"),
    user_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Minimum payments vs snowball vs avalanche."""
    c = await service.strategies(user_id, extra_payment)
    return StrategyComparisonResponse(
        current=_strategy_response(c.current),
        snowball=_strategy_response(c.snowball),
        avalanche=_strategy_response(c.avalanche),
        best=c.best.value,
        extra_payment=c.extra_payment,
        notes=c.notes,
    )


@router.get("/{loan_id}/schedule", response_model=list[ScheduleEntryResponse])
async def get_loan_schedule(
    loan_id: str,
    user_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    entries = await service.schedule(user_id, loan_id)
    return [entry_response(e) for e in entries]


@router.get("/{loan_id}/payoff", response_model=PayoffResponse)
async def get_payoff(
    loan_id: str,
    extra_payment: Decimal = Decimal("0"),
    user_id: str = Depends(get_current_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Payoff date and interest saved with an optional extra monthly payment."""
    impact = await service.payoff(user_id, loan_id, extra_payment)
    return PayoffResponse(
        extra_amount=impact.extra_amount,
        original_payoff_date=impact.original_payoff_date,
        new_payoff_date=impact.new_payoff_date,
        months_saved=impact.months_saved,
        interest_saved=impact.interest_saved,
    )


@router.post("/{loan_id}/payments", response_model=PaymentResponse)
async def make_payment(
    loan_id: str,
    req: PaymentRequest,
    user_id: str = Depends(get_current_user_id),
    service: PaymentService = Depends(get_payment_service),
):
    """Apply a payment; balance, ledger and schedule are updated together."""
    try:
        payment_type = PaymentType(req.payment_type)
        payment_method = PaymentMethod(req.payment_method) if req.payment_method else None
    except ValueError as e:
        raise ValidationError(str(e)) from e

    result = await service.apply(
        user_id,
        loan_id,
        req.payment_amount,
        payment_date=req.payment_date,
        payment_type=payment_type,
        payment_method=payment_method,
        notes=req.notes,
    )

    next_entry = next((e for e in result.schedule if not e.is_paid), None)
    loan = result.loan
    return PaymentResponse(
        payment_id=result.payment.id,
        interest_portion=result.split.interest_portion,
        principal_portion=result.split.principal_portion,
        new_balance=result.split.new_balance,
        loan=LoanStateResponse(
            id=loan.id,
            current_balance=loan.current_balance,
            monthly_payment=loan.monthly_payment,
            remaining_months=loan.remaining_months,
            status=loan.status.value,
        ),
        next_entry=entry_response(next_entry) if next_entry else None,
    )
