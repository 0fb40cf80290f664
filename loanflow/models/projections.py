from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class StrategyType(Enum):
    CURRENT = "current"
    SNOWBALL = "snowball"
    AVALANCHE = "avalanche"


@dataclass(frozen=True)
class PayoffProjection:
    months: int
    payoff_date: date
    total_interest: Decimal
    total_paid: Decimal
    paid_off: bool  # False when the payment never covers the interest


@dataclass(frozen=True)
class ExtraPaymentImpact:
    extra_amount: Decimal
    original_payoff_date: date
    new_payoff_date: date
    months_saved: int
    interest_saved: Decimal


@dataclass(frozen=True)
class DebtSummary:
    total_debt: Decimal
    total_monthly_payments: Decimal
    total_original_debt: Decimal
    total_paid: Decimal
    percentage_paid: int
    total_interest_remaining: Decimal
    debt_free_date: date
    months_to_debt_free: int


@dataclass(frozen=True)
class PayoffOrderItem:
    loan_id: str
    loan_name: str
    reason: str


@dataclass(frozen=True)
class PayoffStrategy:
    type: StrategyType
    payoff_order: list[PayoffOrderItem]
    months_to_debt_free: int
    payoff_date: date
    total_interest: Decimal
    interest_saved: Decimal = Decimal("0")
    months_saved: int = 0


@dataclass(frozen=True)
class StrategyComparison:
    current: PayoffStrategy
    snowball: PayoffStrategy
    avalanche: PayoffStrategy
    best: StrategyType
    extra_payment: Decimal = Decimal("0")
    notes: list[str] = field(default_factory=list)
