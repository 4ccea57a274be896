"""Mortgage payment and amortization figures.

Payments follow the fixed annuity (French amortization) formula.  A zero
rate, a zero term or a non-positive principal produce a payment of 0 rather
than a straight principal split, and a balance that cannot be amortized is
reported as the untouched principal.
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from .models import MortgageTerms
from .recurrence import add_months, clamp_day

DAYS_PER_YEAR = 365.25
SCHEDULE_COLUMNS = ['Period', 'Date', 'Payment', 'Interest', 'Principal', 'Balance']


def _finite(x: float, *, fallback: float) -> float:
    if x is None:
        return fallback
    if isinstance(x, float) and (math.isnan(x) or math.isinf(x)):
        return fallback
    return float(x)


def _monthly_rate(annual_rate_percent: float) -> float:
    return float(annual_rate_percent or 0.0) / 100.0 / 12.0


def monthly_payment(principal: float, annual_rate_percent: float, term_years: int) -> float:
    """Fixed monthly payment for a loan of ``principal`` over ``term_years``."""
    n = int(term_years or 0) * 12
    r = _monthly_rate(annual_rate_percent)
    if r == 0 or n <= 0 or principal <= 0:
        return 0.0
    try:
        growth = (1 + r) ** n
        payment = principal * (r * growth) / (growth - 1)
    except (OverflowError, ZeroDivisionError):
        return 0.0
    return _finite(payment, fallback=0.0)


def payment_for(terms: MortgageTerms) -> float:
    return monthly_payment(terms.principal, terms.payment_rate, terms.term_years)


def total_payable(payment: float, term_years: int) -> float:
    return _finite(float(payment) * int(term_years or 0) * 12, fallback=0.0)


def compute_end_date(start_date: date, term_years: int) -> date:
    """End of the loan using a 365.25-day year, truncated to whole days."""
    return start_date + timedelta(days=int(term_years * DAYS_PER_YEAR))


def months_elapsed(start: date, as_of: date) -> int:
    """Whole calendar months from ``start`` to ``as_of`` (negative before start).

    A month completes on the start's day-of-month, clamped to shorter months.
    """
    months = (as_of.year - start.year) * 12 + (as_of.month - start.month)
    if months > 0 and as_of.day < clamp_day(as_of.year, as_of.month, start.day):
        months -= 1
    elif months < 0 and as_of.day > clamp_day(as_of.year, as_of.month, start.day):
        months += 1
    return months


def outstanding_balance(terms: MortgageTerms, as_of: date) -> float:
    """Remaining principal at ``as_of`` using the declining-balance formula."""
    principal = float(terms.principal)
    n = int(terms.term_years or 0) * 12
    r = _monthly_rate(terms.payment_rate)
    payment = payment_for(terms)
    if r == 0 or payment == 0 or n == 0 or terms.start_date is None:
        return principal

    if as_of >= compute_end_date(terms.start_date, terms.term_years):
        k = n
    else:
        k = min(max(months_elapsed(terms.start_date, as_of), 0), n)
    try:
        growth = (1 + r) ** k
        balance = principal * growth - payment * ((growth - 1) / r)
    except OverflowError:
        return principal
    return max(_finite(balance, fallback=principal), 0.0)


def amortization_schedule(terms: MortgageTerms) -> pd.DataFrame:
    """Month-by-month French amortization table.

    Empty when the terms cannot be amortized (see :func:`outstanding_balance`).
    """
    n = int(terms.term_years or 0) * 12
    r = _monthly_rate(terms.payment_rate)
    payment = payment_for(terms)
    if r == 0 or payment == 0 or n == 0 or terms.start_date is None:
        return pd.DataFrame(columns=SCHEDULE_COLUMNS)

    periods = np.arange(1, n + 1)
    growth = np.power(1 + r, periods)
    balance = terms.principal * growth - payment * (growth - 1) / r
    balance = np.clip(balance, 0.0, None)
    balance[-1] = 0.0
    previous = np.concatenate(([float(terms.principal)], balance[:-1]))
    interest = previous * r
    principal_paid = previous - balance

    return pd.DataFrame({
        'Period': periods,
        'Date': [pd.Timestamp(add_months(terms.start_date, int(k))) for k in periods],
        'Payment': interest + principal_paid,
        'Interest': interest,
        'Principal': principal_paid,
        'Balance': balance,
    }, columns=SCHEDULE_COLUMNS)


def mortgage_summary(terms: MortgageTerms, as_of: Optional[date] = None) -> Dict[str, Any]:
    """Figures shown on the dashboard's mortgage cards."""
    as_of = as_of or date.today()
    payment = payment_for(terms)
    return {
        'monthly_payment': payment,
        'total_payable': total_payable(payment, terms.term_years),
        'outstanding_balance': outstanding_balance(terms, as_of),
        'end_date': (
            compute_end_date(terms.start_date, terms.term_years)
            if terms.start_date is not None else None
        ),
    }
