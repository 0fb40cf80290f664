"""Fixed monthly payment for a fully amortizing loan, plus shared money/date helpers.

Pure functions: Decimal in, Decimal out. No I/O.
"""

import calendar
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from loanflow.exceptions import ValidationError

TWO_PLACES = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, ROUND_HALF_UP)


def monthly_rate(annual_rate: Decimal) -> Decimal:
    """Nominal annual percent -> periodic monthly rate (6 -> 0.005)."""
    return annual_rate / 100 / 12


def add_months(start: date, months: int) -> date:
    """Return the date ``months`` calendar months after ``start``.

    The day of month stays anchored to ``start`` and is clamped to the last
    valid day when the target month is shorter (Jan 31 + 1 -> Feb 28/29).
    """
    year = start.year + (start.month - 1 + months) // 12
    month = (start.month - 1 + months) % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def annuity_payment(principal: Decimal, annual_rate: Decimal, term_months: int) -> Decimal:
    """Unrounded level payment that amortizes ``principal`` over ``term_months``.

    Zero rate falls back to straight-line ``principal / term``.
    """
    if term_months < 1:
        raise ValidationError(f"term_months must be at least 1, got {term_months}")
    if annual_rate < 0:
        raise ValidationError(f"annual_rate must not be negative, got {annual_rate}")
    if principal <= 0:
        return Decimal("0")
    if annual_rate == 0:
        return principal / term_months

    r = monthly_rate(annual_rate)
    # M = P * [r(1+r)^n] / [(1+r)^n - 1]
    factor = (1 + r) ** term_months
    return principal * (r * factor) / (factor - 1)


def monthly_payment(principal: Decimal, annual_rate: Decimal, term_months: int) -> Decimal:
    """Calculate the fixed monthly payment that amortizes ``principal`` over ``term_months``.

    Rounded to cents, so a schedule built on it carries a small residual that
    the last period absorbs.
    """
    return to_cents(annuity_payment(principal, annual_rate, term_months))
