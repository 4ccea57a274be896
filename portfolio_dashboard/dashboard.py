"""Streamlit app for the portfolio dashboard.

The app loads incomes, expenses and mortgages from the backend when an API
token is available (sidebar or ``PROPIEXPERT_API_TOKEN``) and keeps a local
snapshot so the dashboard still works offline.  All figures are computed
locally by the cash-flow and mortgage modules.

To run the dashboard from the command line::

    streamlit run portfolio_dashboard/dashboard.py

or use ``run_dashboard.py`` at the project root.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date
from typing import List, Optional

import pandas as pd
import streamlit as st

# Conditional imports to support both ``streamlit run`` on this file and
# execution as part of the package.
if __package__:
    from . import cashflow as cf
    from . import config
    from . import mortgage as mg
    from . import visualization as viz
    from .api_client import ApiError, ApiSession, Portfolio, PortfolioClient
    from .formatting import format_currency, month_label
    from .logging_config import configure_logging
    from .snapshot import load_snapshot, save_snapshot
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from portfolio_dashboard import cashflow as cf  # type: ignore
    from portfolio_dashboard import config  # type: ignore
    from portfolio_dashboard import mortgage as mg  # type: ignore
    from portfolio_dashboard import visualization as viz  # type: ignore
    from portfolio_dashboard.api_client import ApiError, ApiSession, Portfolio, PortfolioClient  # type: ignore
    from portfolio_dashboard.formatting import format_currency, month_label  # type: ignore
    from portfolio_dashboard.logging_config import configure_logging  # type: ignore
    from portfolio_dashboard.snapshot import load_snapshot, save_snapshot  # type: ignore

logger = logging.getLogger(__name__)


def load_portfolio(token: Optional[str]) -> tuple[Portfolio, str]:
    """Fetch from the backend when possible, otherwise read the snapshot.

    Returns the portfolio and a short description of where it came from.
    """
    if token:
        session = ApiSession(token=token, base_url=config.API_BASE_URL)
        try:
            with PortfolioClient(session) as client:
                portfolio = client.fetch_portfolio()
        except ApiError as exc:
            logger.warning("Backend unavailable, using snapshot: %s", exc)
        else:
            try:
                save_snapshot(portfolio)
            except OSError:
                logger.warning("Could not write the portfolio snapshot", exc_info=True)
            return portfolio, "backend"
    return load_snapshot(), "snapshot"


def filter_by_property(portfolio: Portfolio, property_id: Optional[str]) -> Portfolio:
    if not property_id:
        return portfolio
    return Portfolio(
        properties=[p for p in portfolio.properties if str(p.get('_id') or p.get('id')) == property_id],
        incomes=[e for e in portfolio.incomes if e.property_id == property_id],
        expenses=[e for e in portfolio.expenses if e.property_id == property_id],
        mortgages=[m for m in portfolio.mortgages if m.property_id == property_id],
    )


def _render_summary(portfolio: Portfolio, today: date) -> None:
    summary = cf.period_summary(portfolio.incomes, portfolio.expenses, today)
    cols = st.columns(3)
    cols[0].metric("Monthly income", format_currency(summary['monthly_income']))
    cols[1].metric("Monthly expenses", format_currency(summary['monthly_expenses']))
    cols[2].metric("Monthly net", format_currency(summary['monthly_net']))
    cols = st.columns(3)
    cols[0].metric("Annual income", format_currency(summary['annual_income']))
    cols[1].metric("Annual expenses", format_currency(summary['annual_expenses']))
    cols[2].metric("Annual net", format_currency(summary['annual_net']))


def _render_monthly_chart(portfolio: Portfolio, year: int) -> None:
    totals = cf.monthly_totals(portfolio.incomes, portfolio.expenses, year)
    st.plotly_chart(viz.create_monthly_cashflow_chart(totals, title=f"Cash flow {year}"), use_container_width=True)
    with st.expander("Monthly totals"):
        table = cf.with_net(totals)
        table['Month'] = table['Month'].apply(month_label)
        st.dataframe(table, hide_index=True)


def _render_calendar(portfolio: Portfolio, year: int) -> None:
    month = st.selectbox("Month", options=list(range(1, 13)), index=date.today().month - 1, format_func=month_label)
    counts = cf.occurrences_by_day(portfolio.incomes, portfolio.expenses, year, month)
    st.plotly_chart(viz.create_calendar_chart(counts, year, month), use_container_width=True)

    days: List[date] = list(counts.keys())
    if not days:
        st.info("No incomes or expenses this month.")
        return
    day = st.selectbox("Day detail", options=days, format_func=lambda d: d.strftime('%d %b %Y'))
    detail = cf.day_detail(portfolio.incomes, portfolio.expenses, day)
    st.dataframe(detail.drop(columns=['Event Id']), hide_index=True)


def _render_mortgages(portfolio: Portfolio, names: dict, today: date) -> None:
    if not portfolio.mortgages:
        st.info("No mortgages registered.")
        return
    for terms in portfolio.mortgages:
        label = names.get(terms.property_id or '', terms.property_id or terms.id)
        summary = mg.mortgage_summary(terms, today)
        st.markdown(f"**{label}** · {terms.type} · {terms.term_years} years")
        cols = st.columns(4)
        cols[0].metric("Payment", format_currency(summary['monthly_payment']))
        cols[1].metric("Balance", format_currency(summary['outstanding_balance']))
        cols[2].metric("Total payable", format_currency(summary['total_payable']))
        end_date = summary['end_date']
        cols[3].metric("Ends", end_date.isoformat() if end_date else "n/a")
        schedule = mg.amortization_schedule(terms)
        if not schedule.empty:
            st.plotly_chart(viz.create_balance_chart(schedule, title=f"{label} balance"), use_container_width=True)


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    st.set_page_config(
        page_title="Portfolio Dashboard",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    st.title("Portfolio Dashboard")

    token = st.sidebar.text_input("API token", value=config.API_TOKEN or "", type="password") or None
    portfolio, source = load_portfolio(token)
    st.sidebar.caption(f"Data source: {source}")
    if portfolio.is_empty:
        st.info("No portfolio data yet. Provide an API token to fetch it from the backend.")
        st.stop()

    names = portfolio.property_names()
    property_id = st.sidebar.selectbox(
        "Property", options=[None] + list(names.keys()),
        format_func=lambda key: "All properties" if key is None else names.get(key, key),
    )
    portfolio = filter_by_property(portfolio, property_id)

    today = date.today()
    year = int(st.sidebar.number_input("Year", min_value=1990, max_value=config.HORIZON_YEAR, value=today.year, step=1))

    st.header("Summary")
    _render_summary(portfolio, today)

    st.header("Cash flow")
    _render_monthly_chart(portfolio, year)

    st.header("Calendar")
    _render_calendar(portfolio, year)

    st.header("Mortgages")
    _render_mortgages(portfolio, names, today)

    if source == "backend":
        _render_backend_figures(token, property_id)


def _render_backend_figures(token: str, property_id: Optional[str]) -> None:
    """Figures the backend computes itself, shown only when it is reachable."""
    try:
        with PortfolioClient(ApiSession(token=token, base_url=config.API_BASE_URL)) as client:
            performance = pd.DataFrame(client.fetch_property_performance())
            summary = client.fetch_financial_summary(property_id) if property_id else {}
    except ApiError as exc:
        st.warning(f"Backend figures unavailable: {exc}")
        return

    if summary:
        st.header("Backend summary")
        st.json(summary)
    if not performance.empty:
        st.header("Property performance")
        st.dataframe(performance, hide_index=True)


if __name__ == "__main__":
    main()
