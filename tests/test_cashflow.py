from datetime import date

import pandas as pd

from portfolio_dashboard.cashflow import (
    DayCounts,
    day_detail,
    monthly_totals,
    occurrences_by_day,
    occurrences_frame,
    period_summary,
    with_net,
)
from portfolio_dashboard.models import FinancialEvent, expense_from_api, income_from_api


def _income(event_id, when, amount, frequency=None, **kwargs):
    return FinancialEvent(
        id=event_id, property_id='p1', kind='income', type='rent', amount=amount, date=when,
        is_recurring=frequency is not None, frequency=frequency, **kwargs,
    )


def _expense(event_id, when, amount, frequency=None, **kwargs):
    return FinancialEvent(
        id=event_id, property_id='p1', kind='expense', type='utilities', amount=amount, date=when,
        is_recurring=frequency is not None, frequency=frequency, **kwargs,
    )


def test_monthly_totals_has_twelve_ordered_rows():
    incomes = [_income('rent', date(2024, 1, 1), 1000.0, 'monthly')]
    expenses = [
        _expense('ibi', date(2024, 6, 30), 450.0),
        _expense('community', date(2023, 11, 5), 90.0, 'quarterly'),
    ]

    totals = monthly_totals(incomes, expenses, 2024)

    assert list(totals.columns) == ['Month', 'Income', 'Expenses']
    assert totals['Month'].tolist() == list(range(1, 13))
    assert totals['Income'].tolist() == [1000.0] * 12
    # quarterly from November: Feb, May, Aug, Nov
    expected_expenses = [0.0, 90.0, 0.0, 0.0, 90.0, 450.0, 0.0, 90.0, 0.0, 0.0, 90.0, 0.0]
    assert totals['Expenses'].tolist() == expected_expenses


def test_monthly_totals_for_year_without_events():
    totals = monthly_totals([], [], 2030)
    assert len(totals) == 12
    assert totals[['Income', 'Expenses']].to_numpy().sum() == 0


def test_monthly_totals_is_additive():
    first = [
        _income('a', date(2024, 2, 10), 700.0, 'monthly'),
        _income('b', date(2024, 7, 1), 5000.0),
    ]
    second = [
        _income('c', date(2023, 4, 30), 1200.0, 'yearly'),
        _income('d', date(2024, 1, 31), 80.0, 'quarterly', recurrence_end=date(2024, 9, 1)),
    ]

    combined = monthly_totals(first + second, [], 2024)
    separate = monthly_totals(first, [], 2024)['Income'] + monthly_totals(second, [], 2024)['Income']

    pd.testing.assert_series_equal(combined['Income'], separate, check_names=False)


def test_with_net_adds_difference_without_touching_input():
    totals = monthly_totals([_income('a', date(2024, 1, 1), 300.0, 'monthly')],
                            [_expense('b', date(2024, 1, 1), 120.0, 'monthly')], 2024)
    result = with_net(totals)

    assert 'Net' not in totals.columns
    assert (result['Net'] == 180.0).all()


def test_occurrences_by_day_counts_per_kind():
    incomes = [
        _income('rent', date(2024, 1, 5), 900.0, 'monthly'),
        _income('deposit', date(2024, 3, 5), 1800.0),
    ]
    expenses = [
        _expense('water', date(2024, 1, 5), 40.0, 'quarterly'),
        _expense('repair', date(2024, 3, 20), 300.0),
    ]

    counts = occurrences_by_day(incomes, expenses, 2024, 3)

    assert counts == {
        date(2024, 3, 5): DayCounts(income=2, expense=0),
        date(2024, 3, 20): DayCounts(income=0, expense=1),
    }
    assert sum(c.total for c in counts.values()) == 3


def test_unparsable_dates_do_not_break_aggregation():
    incomes = [
        income_from_api({'id': 'bad', 'property_id': 'p1', 'type': 'rent', 'amount': 50, 'date': 'not-a-date'}),
        income_from_api({'id': 'ok', 'property_id': 'p1', 'type': 'rent', 'amount': 75, 'date': '2024-05-09T00:00:00'}),
    ]
    expenses = [
        expense_from_api({'id': 'bad', 'property_id': 'p1', 'type': 'taxes', 'amount': 10,
                          'date': '2024-13-01', 'is_recurring': True, 'frequency': 'monthly'}),
    ]

    totals = monthly_totals(incomes, expenses, 2024)
    counts = occurrences_by_day(incomes, expenses, 2024, 5)

    assert totals['Income'].sum() == 75.0
    assert totals['Expenses'].sum() == 0.0
    assert counts == {date(2024, 5, 9): DayCounts(income=1, expense=0)}


def test_day_detail_lists_incomes_then_expenses():
    incomes = [_income('rent', date(2024, 1, 10), 950.0, 'monthly', description='Flat 2B')]
    expenses = [_expense('insurance', date(2023, 4, 10), 320.0, 'yearly')]

    detail = day_detail(incomes, expenses, date(2024, 4, 10))

    assert detail['Event Id'].tolist() == ['rent', 'insurance']
    assert detail['Kind'].tolist() == ['income', 'expense']
    assert detail['Description'].tolist() == ['Flat 2B', '']
    assert detail['Recurring'].all()
    assert day_detail(incomes, expenses, date(2024, 4, 11)).empty


def test_occurrences_frame_empty_keeps_columns():
    frame = occurrences_frame([])
    assert frame.empty
    assert 'Amount' in frame.columns and 'Date' in frame.columns


def test_period_summary_month_and_year():
    incomes = [_income('rent', date(2024, 1, 1), 1000.0, 'monthly')]
    expenses = [
        _expense('ibi', date(2024, 6, 15), 600.0),
        _expense('fees', date(2024, 1, 1), 50.0, 'monthly'),
    ]

    summary = period_summary(incomes, expenses, date(2024, 6, 3))

    assert summary['monthly_income'] == 1000.0
    assert summary['monthly_expenses'] == 650.0
    assert summary['monthly_net'] == 350.0
    assert summary['annual_income'] == 12000.0
    assert summary['annual_expenses'] == 1200.0
    assert summary['annual_net'] == 10800.0
