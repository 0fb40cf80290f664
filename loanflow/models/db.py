"""SQLAlchemy ORM models for PostgreSQL persistence."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class LoanRecord(Base):
    __tablename__ = "loans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    loan_name: Mapped[str] = mapped_column(String(255), default="")
    original_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    current_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    interest_rate: Mapped[Decimal] = mapped_column(Numeric(7, 4))
    monthly_payment: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    term_months: Mapped[int] = mapped_column(Integer)
    remaining_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    start_date: Mapped[date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="active")

    schedule: Mapped[list["AmortizationScheduleRecord"]] = relationship(
        back_populates="loan", order_by="AmortizationScheduleRecord.payment_number"
    )


class AmortizationScheduleRecord(Base):
    __tablename__ = "loan_amortization_schedule"
    __table_args__ = (UniqueConstraint("loan_id", "payment_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    loan_id: Mapped[str] = mapped_column(ForeignKey("loans.id", ondelete="CASCADE"), index=True)
    payment_number: Mapped[int] = mapped_column(Integer)
    payment_date: Mapped[date] = mapped_column(Date)
    payment_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    principal_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    interest_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    remaining_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    actual_payment_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    loan: Mapped["LoanRecord"] = relationship(back_populates="schedule")


class RefinanceAnalysisRecord(Base):
    """Append-only audit log of refinance analyses."""
    __tablename__ = "loan_refinance_analyses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    loan_id: Mapped[str] = mapped_column(ForeignKey("loans.id", ondelete="CASCADE"), index=True)
    analysis_date: Mapped[date] = mapped_column(Date)
    current_rate: Mapped[Decimal] = mapped_column(Numeric(7, 4))
    new_rate: Mapped[Decimal] = mapped_column(Numeric(7, 4))
    monthly_savings: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    lifetime_savings: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    break_even_months: Mapped[int] = mapped_column(Integer)
    is_recommended: Mapped[bool] = mapped_column(Boolean)


class LoanPaymentRecord(Base):
    __tablename__ = "loan_payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    loan_id: Mapped[str] = mapped_column(ForeignKey("loans.id", ondelete="CASCADE"), index=True)
    payment_date: Mapped[date] = mapped_column(Date)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    principal_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    interest_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    payment_type: Mapped[str] = mapped_column(String(20), default="regular")
    payment_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
