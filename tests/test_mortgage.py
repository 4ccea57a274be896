from datetime import date

import pandas as pd
import pytest

from portfolio_dashboard.models import MortgageTerms
from portfolio_dashboard.mortgage import (
    amortization_schedule,
    compute_end_date,
    monthly_payment,
    months_elapsed,
    mortgage_summary,
    outstanding_balance,
    payment_for,
    total_payable,
)


def _terms(principal=100000.0, years=20, mortgage_type='fixed', fixed=3.0, variable=None, start=date(2020, 1, 1)):
    return MortgageTerms(
        id='m1',
        property_id='p1',
        type=mortgage_type,
        principal=principal,
        term_years=years,
        start_date=start,
        fixed_rate=fixed,
        variable_rate=variable,
    )


def test_monthly_payment_matches_annuity_formula():
    assert monthly_payment(100000, 3.0, 20) == pytest.approx(554.60, abs=0.01)


def test_monthly_payment_degenerate_inputs_return_zero():
    assert monthly_payment(100000, 0, 20) == 0.0
    assert monthly_payment(250000, 0.0, 30) == 0.0
    assert monthly_payment(100000, 3.0, 0) == 0.0
    assert monthly_payment(0, 3.0, 20) == 0.0
    assert monthly_payment(-5000, 3.0, 20) == 0.0


def test_monthly_payment_overflow_returns_zero():
    assert monthly_payment(100000, 1e9, 40) == 0.0


def test_mixed_mortgage_uses_fixed_rate():
    mixed = _terms(mortgage_type='mixed', fixed=2.5, variable=4.0)
    assert payment_for(mixed) == monthly_payment(100000.0, 2.5, 20)


def test_variable_mortgage_uses_variable_rate():
    variable = _terms(mortgage_type='variable', fixed=None, variable=4.0)
    assert payment_for(variable) == monthly_payment(100000.0, 4.0, 20)


def test_total_payable():
    assert total_payable(554.6, 20) == pytest.approx(133104.0)
    assert total_payable(0.0, 30) == 0.0
    assert total_payable(float('inf'), 30) == 0.0


def test_compute_end_date_uses_365_25_day_years():
    assert compute_end_date(date(2020, 1, 1), 20) == date(2040, 1, 1)
    assert compute_end_date(date(2024, 3, 15), 1) == date(2025, 3, 15)
    # 25 * 365.25 = 9131.25 days falls one day short of the calendar anniversary
    assert compute_end_date(date(2020, 1, 1), 25) == date(2044, 12, 31)


def test_months_elapsed_counts_whole_months():
    assert months_elapsed(date(2024, 1, 15), date(2024, 2, 14)) == 0
    assert months_elapsed(date(2024, 1, 15), date(2024, 2, 15)) == 1
    assert months_elapsed(date(2024, 1, 31), date(2024, 2, 29)) == 1
    assert months_elapsed(date(2024, 1, 15), date(2025, 1, 20)) == 12
    assert months_elapsed(date(2024, 5, 1), date(2024, 3, 1)) == -2


def test_outstanding_balance_at_start_is_principal():
    terms = _terms()
    assert outstanding_balance(terms, terms.start_date) == terms.principal


def test_outstanding_balance_before_start_is_principal():
    terms = _terms()
    assert outstanding_balance(terms, date(2019, 6, 1)) == terms.principal


@pytest.mark.parametrize('years', [20, 25])
def test_outstanding_balance_at_end_is_zero(years):
    terms = _terms(years=years)
    end = compute_end_date(terms.start_date, years)
    assert outstanding_balance(terms, end) == pytest.approx(0.0, abs=0.01)
    assert outstanding_balance(terms, date(2080, 1, 1)) == pytest.approx(0.0, abs=0.01)


def test_outstanding_balance_declines_with_schedule():
    terms = _terms()
    schedule = amortization_schedule(terms)

    after_one_year = outstanding_balance(terms, date(2021, 1, 1))

    assert 0 < after_one_year < terms.principal
    assert after_one_year == pytest.approx(schedule.loc[schedule['Period'] == 12, 'Balance'].item())


def test_outstanding_balance_falls_back_to_principal_without_rate():
    terms = _terms(fixed=0.0)
    assert outstanding_balance(terms, date(2030, 1, 1)) == terms.principal


def test_amortization_schedule_shape_and_totals():
    terms = _terms()
    schedule = amortization_schedule(terms)
    payment = payment_for(terms)

    assert len(schedule) == 240
    assert schedule['Interest'].iloc[0] == pytest.approx(250.0)
    assert schedule['Balance'].iloc[-1] == 0.0
    assert schedule['Principal'].sum() == pytest.approx(terms.principal)
    assert schedule['Payment'].sum() == pytest.approx(total_payable(payment, 20), rel=1e-9)
    assert schedule['Date'].iloc[0] == pd.Timestamp(2020, 2, 1)


def test_amortization_schedule_empty_for_degenerate_terms():
    assert amortization_schedule(_terms(fixed=0.0)).empty
    assert amortization_schedule(_terms(start=None)).empty


def test_mortgage_summary():
    terms = _terms()
    summary = mortgage_summary(terms, date(2020, 1, 1))

    assert summary['monthly_payment'] == pytest.approx(554.60, abs=0.01)
    assert summary['total_payable'] == pytest.approx(summary['monthly_payment'] * 240)
    assert summary['outstanding_balance'] == terms.principal
    assert summary['end_date'] == date(2040, 1, 1)
