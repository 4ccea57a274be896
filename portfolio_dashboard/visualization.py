"""Plotly visualisation helpers for the portfolio dashboard.

Each function accepts the structures returned by :mod:`cashflow` or
:mod:`mortgage` and produces an interactive Plotly figure that Streamlit
can render via ``st.plotly_chart``.  Empty inputs yield an empty figure
titled "No data to display" rather than raising.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Dict

import pandas as pd
import plotly.graph_objects as go

from .cashflow import DayCounts, with_net
from .formatting import MONTH_LABELS

INCOME_COLOR = '#2e7d32'
EXPENSE_COLOR = '#c62828'
NET_COLOR = '#546e7a'
WEEKDAY_LABELS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_monthly_cashflow_chart(totals: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Grouped income/expense bars per month with a net line.

    Parameters
    ----------
    totals : pandas.DataFrame
        Output of :func:`cashflow.monthly_totals`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Bar chart with one group per month.
    """
    if totals is None or totals.empty:
        return _empty_figure()
    df = with_net(totals)
    labels = [MONTH_LABELS[int(m) - 1] for m in df['Month']]
    fig = go.Figure()
    fig.add_trace(go.Bar(x=labels, y=df['Income'], name='Income', marker_color=INCOME_COLOR))
    fig.add_trace(go.Bar(x=labels, y=df['Expenses'], name='Expenses', marker_color=EXPENSE_COLOR))
    fig.add_trace(go.Scatter(x=labels, y=df['Net'], name='Net', mode='lines+markers', line={'color': NET_COLOR}))
    fig.update_layout(
        title=title or "Monthly cash flow",
        barmode='group',
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    return fig


def create_calendar_chart(
    counts: Dict[date, DayCounts],
    year: int,
    month: int,
    title: str | None = None,
) -> go.Figure:
    """Month grid (weeks by weekdays) annotated with occurrence counts.

    Cell colour encodes the total number of occurrences on that day; the
    text shows the day number with income (+) and expense (-) counts.
    """
    weeks = calendar.Calendar(firstweekday=0).monthdayscalendar(year, month)
    z = []
    text = []
    for week in weeks:
        z_row = []
        text_row = []
        for day in week:
            if day == 0:
                z_row.append(None)
                text_row.append('')
                continue
            cell = counts.get(date(year, month, day), DayCounts())
            z_row.append(cell.total)
            marks = []
            if cell.income:
                marks.append(f"+{cell.income}")
            if cell.expense:
                marks.append(f"-{cell.expense}")
            text_row.append(f"{day}<br>{' '.join(marks)}" if marks else str(day))
        z.append(z_row)
        text.append(text_row)

    fig = go.Figure(go.Heatmap(
        z=z,
        x=WEEKDAY_LABELS,
        y=[f"W{i + 1}" for i in range(len(weeks))],
        text=text,
        texttemplate="%{text}",
        colorscale='Blues',
        showscale=False,
        hoverinfo='text',
    ))
    fig.update_layout(
        title=title or f"{calendar.month_name[month]} {year}",
        yaxis={'autorange': 'reversed', 'showticklabels': False},
    )
    return fig


def create_balance_chart(schedule: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Outstanding balance over the life of a mortgage.

    Parameters
    ----------
    schedule : pandas.DataFrame
        Output of :func:`mortgage.amortization_schedule`.
    """
    if schedule is None or schedule.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=schedule['Date'], y=schedule['Balance'], name='Balance', mode='lines'))
    fig.add_trace(go.Bar(x=schedule['Date'], y=schedule['Interest'], name='Interest', marker_color=EXPENSE_COLOR, yaxis='y2'))
    fig.update_layout(
        title=title or "Outstanding balance",
        xaxis_title="Date",
        yaxis_title="Balance",
        yaxis2={'title': 'Interest', 'overlaying': 'y', 'side': 'right', 'showgrid': False},
    )
    return fig
