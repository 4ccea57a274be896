"""Domain records for incomes, expenses and mortgages.

The backend returns JSON documents with snake_case keys (``property_id``,
``is_recurring``, ``recurrence_start_date`` ...).  The helpers in this
module decode those documents into small dataclasses that the engine
modules operate on, and encode events back to the same keys so that a
saved snapshot stays wire compatible.

Decoding is forgiving: a record with a broken date is kept
with ``date=None`` so the expander can skip it without failing the rest
of the batch.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

import pandas as pd

logger = logging.getLogger(__name__)

INCOME = 'income'
EXPENSE = 'expense'

INCOME_TYPES = ('rent', 'deposit', 'sale', 'interest', 'dividends', 'other')
EXPENSE_TYPES = (
    'maintenance',
    'utilities',
    'taxes',
    'insurance',
    'mortgage',
    'repairs',
    'improvements',
    'management',
    'other',
)

# Months between two consecutive occurrences of a recurring event
FREQUENCY_STEPS: Dict[str, int] = {
    'monthly': 1,
    'quarterly': 3,
    'yearly': 12,
}

MORTGAGE_TYPES = ('fixed', 'variable', 'mixed')


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def parse_date(value: Any) -> Optional[date]:
    """Parse a backend date (``YYYY-MM-DD`` with an optional time part).

    Returns ``None`` for anything that cannot be read as a calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()[:10]
    if not text:
        return None
    parsed = pd.to_datetime(text, format='%Y-%m-%d', errors='coerce')
    if pd.isna(parsed):
        return None
    return parsed.date()


def format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _to_float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        try:
            parsed = float(value.replace(',', '.'))
        except ValueError:
            return default
    else:
        return default
    # NaN and infinities fall back to the default
    return parsed if math.isfinite(parsed) else default


def _to_optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    parsed = _to_float(value, default=float('nan'))
    return None if pd.isna(parsed) else parsed


def _to_optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes')
    return value is True or (isinstance(value, (int, float)) and value == 1)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class FinancialEvent:
    id: str
    property_id: str
    kind: str               # 'income' | 'expense'
    type: str               # rent, utilities, ...
    amount: float
    date: Optional[date]
    description: Optional[str] = None
    is_recurring: bool = False
    frequency: Optional[str] = None     # 'monthly' | 'quarterly' | 'yearly'
    recurrence_start: Optional[date] = None
    recurrence_end: Optional[date] = None
    # Expense only
    due_date: Optional[date] = None
    is_paid: Optional[bool] = None
    payment_date: Optional[date] = None

    @property
    def is_expandable_recurring(self) -> bool:
        """Recurring flag set together with a frequency the expander knows."""
        return bool(self.is_recurring) and self.frequency in FREQUENCY_STEPS

    @property
    def anchor_start(self) -> Optional[date]:
        return self.recurrence_start or self.date

    @property
    def is_income(self) -> bool:
        return self.kind == INCOME


@dataclass(frozen=True)
class Occurrence:
    event: FinancialEvent
    date: date

    @property
    def amount(self) -> float:
        return self.event.amount

    @property
    def kind(self) -> str:
        return self.event.kind


@dataclass
class MortgageTerms:
    id: str
    property_id: Optional[str]
    type: str               # 'fixed' | 'variable' | 'mixed'
    principal: float
    term_years: int
    start_date: Optional[date]
    fixed_rate: Optional[float] = None      # annual percent
    variable_rate: Optional[float] = None   # annual percent
    stored_monthly_payment: Optional[float] = None
    stored_end_date: Optional[date] = None
    bank_name: Optional[str] = None
    payment_day: Optional[int] = None
    fixed_rate_period: Optional[int] = None
    description: Optional[str] = None

    @property
    def payment_rate(self) -> float:
        """Annual percent rate fed to the annuity formula.

        Mixed mortgages only ever apply the fixed leg.
        """
        if self.type == 'variable':
            return self.variable_rate or 0.0
        return self.fixed_rate or 0.0


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------


def _event_from_api(payload: Mapping[str, Any], kind: str) -> FinancialEvent:
    event_id = str(payload.get('id') or payload.get('_id') or '')
    raw_date = payload.get('date')
    event_date = parse_date(raw_date)
    if event_date is None:
        logger.warning("Unparsable date %r on %s", raw_date, kind, extra={'event_id': event_id})

    is_recurring = _to_bool(payload.get('is_recurring'))
    frequency = _optional_text(payload.get('frequency'))
    recurrence_start = None
    recurrence_end = None
    if is_recurring:
        frequency = frequency.lower() if frequency else None
        recurrence_start = _recurrence_bound(payload, 'recurrence_start_date', event_id)
        recurrence_end = _recurrence_bound(payload, 'recurrence_end_date', event_id)
    else:
        frequency = None

    event = FinancialEvent(
        id=event_id,
        property_id=str(payload.get('property_id') or ''),
        kind=kind,
        type=str(payload.get('type') or 'other'),
        amount=_to_float(payload.get('amount')),
        date=event_date,
        description=_optional_text(payload.get('description')),
        is_recurring=is_recurring,
        frequency=frequency,
        recurrence_start=recurrence_start,
        recurrence_end=recurrence_end,
    )
    if kind == EXPENSE:
        event.due_date = parse_date(payload.get('due_date'))
        is_paid = payload.get('is_paid')
        event.is_paid = _to_bool(is_paid) if is_paid is not None else None
        event.payment_date = parse_date(payload.get('payment_date'))
    return event


def _recurrence_bound(payload: Mapping[str, Any], key: str, event_id: str) -> Optional[date]:
    raw = payload.get(key)
    if raw in (None, ''):
        return None
    parsed = parse_date(raw)
    if parsed is None:
        logger.warning("Ignoring unparsable %s %r", key, raw, extra={'event_id': event_id})
    return parsed


def income_from_api(payload: Mapping[str, Any]) -> FinancialEvent:
    return _event_from_api(payload, INCOME)


def expense_from_api(payload: Mapping[str, Any]) -> FinancialEvent:
    return _event_from_api(payload, EXPENSE)


def event_to_api(event: FinancialEvent) -> Dict[str, Any]:
    """Encode an event with the backend's JSON keys."""
    payload: Dict[str, Any] = {
        'id': event.id,
        'property_id': event.property_id,
        'type': event.type,
        'amount': event.amount,
        'date': format_date(event.date),
        'description': event.description,
        'is_recurring': event.is_recurring,
    }
    if event.is_recurring:
        payload['frequency'] = event.frequency
        payload['recurrence_start_date'] = format_date(event.recurrence_start)
        payload['recurrence_end_date'] = format_date(event.recurrence_end)
    if event.kind == EXPENSE:
        payload['due_date'] = format_date(event.due_date)
        payload['is_paid'] = event.is_paid
        payload['payment_date'] = format_date(event.payment_date)
    return payload


def mortgage_from_api(payload: Mapping[str, Any]) -> MortgageTerms:
    # The backend omits ``id`` on some endpoints and keys mortgages by property
    mortgage_id = payload.get('id') or payload.get('property_id') or ''
    mortgage_type = str(payload.get('type') or 'fixed').lower()
    return MortgageTerms(
        id=str(mortgage_id),
        property_id=_optional_text(payload.get('property_id')),
        type=mortgage_type,
        principal=_to_float(payload.get('initial_amount')),
        term_years=_to_optional_int(payload.get('years')) or 0,
        start_date=parse_date(payload.get('start_date')),
        fixed_rate=_to_optional_float(payload.get('interest_rate_fixed')),
        variable_rate=_to_optional_float(payload.get('interest_rate_variable')),
        stored_monthly_payment=_to_optional_float(payload.get('monthly_payment')),
        stored_end_date=parse_date(payload.get('end_date')),
        bank_name=_optional_text(payload.get('bank_name')),
        payment_day=_to_optional_int(payload.get('payment_day')),
        fixed_rate_period=_to_optional_int(payload.get('fixed_rate_period')),
        description=_optional_text(payload.get('description')),
    )


def mortgage_to_api(terms: MortgageTerms) -> Dict[str, Any]:
    return {
        'id': terms.id,
        'property_id': terms.property_id,
        'type': terms.type,
        'initial_amount': terms.principal,
        'years': terms.term_years,
        'interest_rate_fixed': terms.fixed_rate,
        'interest_rate_variable': terms.variable_rate,
        'monthly_payment': terms.stored_monthly_payment,
        'start_date': format_date(terms.start_date),
        'end_date': format_date(terms.stored_end_date),
        'bank_name': terms.bank_name,
        'payment_day': terms.payment_day,
        'fixed_rate_period': terms.fixed_rate_period,
        'description': terms.description,
    }
