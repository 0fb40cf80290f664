"""Pydantic schemas for API request/response models.

Request bodies accept the camelCase field names used by the mobile and web
clients as well as snake_case.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---- Request schemas ----

class ScheduleRequest(_Request):
    loan_id: str = Field(..., alias="loanId")
    principal: Decimal
    annual_rate: Decimal = Field(..., alias="annualRate", description="Nominal annual percent")
    term_months: int = Field(..., alias="termMonths")
    start_date: date = Field(..., alias="startDate")
    monthly_payment: Decimal | None = Field(None, alias="monthlyPayment")


class RefinanceRequest(_Request):
    loan_id: str = Field(..., alias="loanId")
    new_rate: Decimal = Field(..., alias="newRate")
    closing_costs: Decimal = Field(Decimal("0"), alias="closingCosts")


class PaymentRequest(_Request):
    payment_amount: Decimal = Field(..., alias="paymentAmount")
    payment_date: date | None = Field(None, alias="paymentDate")
    payment_type: str = Field("regular", alias="paymentType")
    payment_method: str | None = Field(None, alias="paymentMethod")
    notes: str | None = None


# ---- Response schemas ----

class ScheduleEntryResponse(BaseModel):
    loan_id: str
    payment_number: int
    payment_date: date
    payment_amount: Decimal
    principal_amount: Decimal
    interest_amount: Decimal
    remaining_balance: Decimal
    is_paid: bool
    actual_payment_id: str | None = None


class ScheduleResponse(BaseModel):
    success: bool = True
    schedule: list[ScheduleEntryResponse]
    total_entries: int = Field(..., serialization_alias="totalEntries")


class RefinanceAnalysisResponse(BaseModel):
    loan_id: str
    analysis_date: date
    current_rate: Decimal
    new_rate: Decimal
    monthly_savings: Decimal
    lifetime_savings: Decimal
    break_even_months: int
    is_recommended: bool


class RefinanceResponse(BaseModel):
    success: bool = True
    analysis: RefinanceAnalysisResponse


class LoanStateResponse(BaseModel):
    id: str
    current_balance: Decimal
    monthly_payment: Decimal
    remaining_months: int | None
    status: str


class PaymentResponse(BaseModel):
    success: bool = True
    payment_id: str
    interest_portion: Decimal
    principal_portion: Decimal
    new_balance: Decimal
    loan: LoanStateResponse
    next_entry: ScheduleEntryResponse | None = None


class PayoffResponse(BaseModel):
    extra_amount: Decimal
    original_payoff_date: date
    new_payoff_date: date
    months_saved: int
    interest_saved: Decimal


class DebtSummaryResponse(BaseModel):
    total_debt: Decimal
    total_monthly_payments: Decimal
    total_original_debt: Decimal
    total_paid: Decimal
    percentage_paid: int
    total_interest_remaining: Decimal
    debt_free_date: date
    months_to_debt_free: int


class PayoffOrderResponse(BaseModel):
    loan_id: str
    loan_name: str
    reason: str


class StrategyResponse(BaseModel):
    type: str
    payoff_order: list[PayoffOrderResponse]
    months_to_debt_free: int
    payoff_date: date
    total_interest: Decimal
    interest_saved: Decimal
    months_saved: int


class StrategyComparisonResponse(BaseModel):
    current: StrategyResponse
    snowball: StrategyResponse
    avalanche: StrategyResponse
    best: str
    extra_payment: Decimal
    notes: list[str] = []
