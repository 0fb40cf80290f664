"""Payment application and schedule reconciliation.

A payment is split into interest and principal against the loan's current
balance. The earliest unpaid schedule entry records the actual payment and
every later unpaid entry is regenerated from the new balance, so the stored
schedule never drifts from the balance.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from loanflow.engine.amortization import generate_schedule
from loanflow.engine.payment import monthly_payment, monthly_rate, to_cents
from loanflow.exceptions import ValidationError
from loanflow.models.loan import (
    AmortizationScheduleEntry,
    Loan,
    LoanPayment,
    LoanStatus,
    PaymentMethod,
    PaymentReconciliation,
    PaymentSplit,
    PaymentType,
)


def split_payment(
    current_balance: Decimal, annual_rate: Decimal, payment_amount: Decimal
) -> PaymentSplit:
    """Split one payment into interest and principal and compute the resulting balance."""
    if payment_amount is None or payment_amount <= 0:
        raise ValidationError("payment_amount must be greater than zero")

    interest = current_balance * monthly_rate(annual_rate)
    principal = payment_amount - interest
    new_balance = max(Decimal("0"), current_balance - principal)

    return PaymentSplit(
        interest_portion=to_cents(interest),
        principal_portion=to_cents(principal),
        new_balance=to_cents(new_balance),
    )


def reconcile_payment(
    loan: Loan,
    schedule: list[AmortizationScheduleEntry],
    payment_id: str,
    payment_amount: Decimal,
    payment_date: date | None = None,
    payment_type: PaymentType = PaymentType.REGULAR,
    payment_method: PaymentMethod | None = None,
    notes: str | None = None,
) -> PaymentReconciliation:
    """Apply a payment to ``loan`` and rebuild its schedule around it.

    Paid entries are kept as they are. The earliest unpaid entry becomes the
    paid entry for this payment; the forward schedule is re-amortized from the
    new balance over the periods left after it.
    """
    if loan.status == LoanStatus.PAID_OFF or loan.current_balance <= 0:
        raise ValidationError(f"Loan {loan.id} is already paid off")

    paid_on = payment_date or date.today()
    split = split_payment(loan.current_balance, loan.interest_rate, payment_amount)

    ordered = sorted(schedule, key=lambda e: e.payment_number)
    paid = [e for e in ordered if e.is_paid]
    unpaid = [e for e in ordered if not e.is_paid]

    paid_fields = dict(
        payment_amount=to_cents(payment_amount),
        principal_amount=split.principal_portion,
        interest_amount=split.interest_portion,
        remaining_balance=split.new_balance,
        is_paid=True,
        actual_payment_id=payment_id,
    )
    if unpaid:
        target = unpaid[0]
        paid_entry = replace(target, **paid_fields)
    else:
        next_number = paid[-1].payment_number + 1 if paid else 1
        paid_entry = AmortizationScheduleEntry(
            loan_id=loan.id, payment_number=next_number, payment_date=paid_on, **paid_fields
        )

    new_balance = split.new_balance
    forward: list[AmortizationScheduleEntry] = []
    if new_balance > 0:
        # An underpaid final period still needs one more payment
        remaining = max(loan.effective_remaining_months - 1, 1)
        new_payment = monthly_payment(new_balance, loan.interest_rate, remaining)
        forward = generate_schedule(
            loan.id,
            new_balance,
            loan.interest_rate,
            remaining,
            loan.start_date,
            new_payment,
            first_payment_number=paid_entry.payment_number + 1,
        )
        updated = replace(
            loan,
            current_balance=new_balance,
            remaining_months=remaining,
            monthly_payment=new_payment,
        )
    else:
        updated = replace(
            loan,
            current_balance=Decimal("0"),
            remaining_months=0,
            status=LoanStatus.PAID_OFF,
        )

    ledger_row = LoanPayment(
        id=payment_id,
        loan_id=loan.id,
        payment_date=paid_on,
        amount=to_cents(payment_amount),
        principal_amount=split.principal_portion,
        interest_amount=split.interest_portion,
        payment_type=payment_type,
        payment_method=payment_method,
        notes=notes,
    )

    return PaymentReconciliation(
        loan=updated,
        payment=ledger_row,
        split=split,
        schedule=paid + [paid_entry] + forward,
    )
