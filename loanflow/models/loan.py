from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class LoanStatus(Enum):
    ACTIVE = "active"
    PAID_OFF = "paid_off"
    DEFAULTED = "defaulted"
    REFINANCED = "refinanced"


class PaymentType(Enum):
    REGULAR = "regular"
    EXTRA = "extra"
    LUMP_SUM = "lump_sum"


class PaymentMethod(Enum):
    AUTO_DEBIT = "auto_debit"
    ONLINE_BANKING = "online_banking"
    CHECK = "check"
    CASH = "cash"


@dataclass
class Loan:
    id: str
    owner_id: str
    principal: Decimal  # Original amount borrowed
    current_balance: Decimal
    interest_rate: Decimal  # Nominal annual percent, e.g. Decimal("6.5")
    term_months: int
    monthly_payment: Decimal
    start_date: date
    name: str = ""
    remaining_months: int | None = None
    status: LoanStatus = LoanStatus.ACTIVE

    @property
    def effective_remaining_months(self) -> int:
        """Periods left, falling back to the original term when unset."""
        return self.remaining_months or self.term_months


@dataclass
class AmortizationScheduleEntry:
    loan_id: str
    payment_number: int  # 1-based, unique per loan
    payment_date: date
    payment_amount: Decimal
    principal_amount: Decimal
    interest_amount: Decimal
    remaining_balance: Decimal  # Balance after this payment
    is_paid: bool = False
    actual_payment_id: str | None = None


@dataclass(frozen=True)
class RefinanceAnalysis:
    loan_id: str
    analysis_date: date
    current_rate: Decimal
    new_rate: Decimal
    monthly_savings: Decimal
    lifetime_savings: Decimal
    break_even_months: int
    is_recommended: bool


@dataclass(frozen=True)
class PaymentSplit:
    interest_portion: Decimal
    principal_portion: Decimal
    new_balance: Decimal


@dataclass(frozen=True)
class LoanPayment:
    id: str
    loan_id: str
    payment_date: date
    amount: Decimal
    principal_amount: Decimal
    interest_amount: Decimal
    payment_type: PaymentType = PaymentType.REGULAR
    payment_method: PaymentMethod | None = None
    notes: str | None = None


@dataclass(frozen=True)
class PaymentReconciliation:
    """Outcome of applying one payment: updated loan, ledger row and full schedule."""
    loan: Loan
    payment: LoanPayment
    split: PaymentSplit
    schedule: list[AmortizationScheduleEntry] = field(default_factory=list)
