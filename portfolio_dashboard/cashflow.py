"""Cash-flow aggregation over expanded occurrences.

These functions turn income/expense lists into chart and calendar ready
structures:

* :func:`monthly_totals`: twelve rows of income/expense sums for a year
* :func:`occurrences_by_day`: per-day occurrence counts for a month
* :func:`day_detail`: the occurrences of a single day
* :func:`period_summary`: month-to-date and year figures for summary cards

All of them are pure and tolerate malformed events (those are excluded by
the expander).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from .models import FinancialEvent, Occurrence
from .recurrence import expand_for_month, expand_for_window, month_bounds

MONTHS = list(range(1, 13))
OCCURRENCE_COLUMNS = [
    'Date', 'Kind', 'Type', 'Amount', 'Property', 'Description', 'Event Id', 'Recurring',
]


@dataclass
class DayCounts:
    income: int = 0
    expense: int = 0

    @property
    def total(self) -> int:
        return self.income + self.expense


def occurrences_frame(occurrences: Iterable[Occurrence]) -> pd.DataFrame:
    """Tabulate occurrences, one row each, in the order given."""
    rows = [
        {
            'Date': pd.Timestamp(occ.date),
            'Kind': occ.event.kind,
            'Type': occ.event.type,
            'Amount': float(occ.event.amount),
            'Property': occ.event.property_id,
            'Description': occ.event.description or '',
            'Event Id': occ.event.id,
            'Recurring': occ.event.is_expandable_recurring,
        }
        for occ in occurrences
    ]
    if not rows:
        return pd.DataFrame(columns=OCCURRENCE_COLUMNS)
    return pd.DataFrame(rows, columns=OCCURRENCE_COLUMNS)


def monthly_totals(
    incomes: Sequence[FinancialEvent],
    expenses: Sequence[FinancialEvent],
    year: int,
) -> pd.DataFrame:
    """Return income and expense sums for each month of ``year``.

    The result always has twelve rows ordered by ``Month`` with the columns
    ``Month``, ``Income`` and ``Expenses``.
    """
    columns = {}
    for label, events in (('Income', incomes), ('Expenses', expenses)):
        sums = []
        for month in MONTHS:
            occurrences = expand_for_month(events, year, month)
            sums.append(float(sum(occ.event.amount for occ in occurrences)))
        columns[label] = sums
    return pd.DataFrame({'Month': MONTHS, **columns})


def with_net(totals: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``totals`` with ``Net = Income - Expenses``."""
    result = totals.copy()
    result['Net'] = result['Income'] - result['Expenses']
    return result


def occurrences_by_day(
    incomes: Sequence[FinancialEvent],
    expenses: Sequence[FinancialEvent],
    year: int,
    month: int,
) -> Dict[date, DayCounts]:
    """Count income and expense occurrences on each day of a month.

    Only days with at least one occurrence are present.
    """
    counts: Dict[date, DayCounts] = {}
    for occ in expand_for_month(incomes, year, month):
        counts.setdefault(occ.date, DayCounts()).income += 1
    for occ in expand_for_month(expenses, year, month):
        counts.setdefault(occ.date, DayCounts()).expense += 1
    return dict(sorted(counts.items()))


def day_detail(
    incomes: Sequence[FinancialEvent],
    expenses: Sequence[FinancialEvent],
    day: date,
) -> pd.DataFrame:
    """Occurrences landing on ``day``, incomes first."""
    occurrences: List[Occurrence] = []
    occurrences.extend(expand_for_window(incomes, day, day))
    occurrences.extend(expand_for_window(expenses, day, day))
    return occurrences_frame(occurrences)


def period_summary(
    incomes: Sequence[FinancialEvent],
    expenses: Sequence[FinancialEvent],
    as_of: date,
) -> Dict[str, float]:
    """Income, expenses and net for ``as_of``'s month and for its whole year."""
    month_start, month_end = month_bounds(as_of.year, as_of.month)
    year_start, year_end = date(as_of.year, 1, 1), date(as_of.year, 12, 31)

    def _sum(events: Sequence[FinancialEvent], start: date, end: date) -> float:
        return float(sum(occ.event.amount for occ in expand_for_window(events, start, end)))

    monthly_income = _sum(incomes, month_start, month_end)
    monthly_expenses = _sum(expenses, month_start, month_end)
    annual_income = _sum(incomes, year_start, year_end)
    annual_expenses = _sum(expenses, year_start, year_end)
    return {
        'monthly_income': monthly_income,
        'monthly_expenses': monthly_expenses,
        'monthly_net': monthly_income - monthly_expenses,
        'annual_income': annual_income,
        'annual_expenses': annual_expenses,
        'annual_net': annual_income - annual_expenses,
    }
