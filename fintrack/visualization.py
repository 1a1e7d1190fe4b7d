"""Plotly figure builders for the derived aggregates.

Each function takes the dataclass lists returned by
:mod:`fintrack.calculations` and returns a ``plotly.graph_objects.Figure``.
Rendering is left to the caller.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import CashFlowDay, CategorySpending, WeeklyCashFlow

# Tailwind 500 shades, keyed by category
CATEGORY_COLORS = {
    'Salary': '#10b981',
    'Freelance': '#14b8a6',
    'Investments': '#22c55e',
    'Rent': '#3b82f6',
    'Housing': '#3b82f6',
    'Groceries': '#84cc16',
    'Transportation': '#f59e0b',
    'Entertainment': '#a855f7',
    'Utilities': '#06b6d4',
    'Health': '#ef4444',
    'Shopping': '#ec4899',
    'Dining': '#f97316',
    'Other': '#64748b',
}
DEFAULT_COLOR = CATEGORY_COLORS['Other']
INCOME_COLOR = '#10b981'
EXPENSE_COLOR = '#f43f5e'


def get_category_color(category: str) -> str:
    return CATEGORY_COLORS.get(category, DEFAULT_COLOR)


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_category_pie_chart(spending: Sequence[CategorySpending], title: str | None = None) -> go.Figure:
    """Pie chart of expense share by category.

    Parameters
    ----------
    spending : sequence of CategorySpending
        Output of ``calculate_category_spending``.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart, or an empty titled figure when there is no spending.
    """
    if not spending:
        return _empty_figure()
    df = pd.DataFrame({
        'Category': [s.category for s in spending],
        'Amount': [s.amount for s in spending],
    })
    fig = px.pie(
        df,
        names='Category',
        values='Amount',
        color='Category',
        color_discrete_map={c: get_category_color(c) for c in df['Category']},
    )
    fig.update_layout(title=title or "Spending by Category")
    return fig


def _income_expense_bars(labels: Sequence[str], income: Sequence[float], expenses: Sequence[float]) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(go.Bar(x=list(labels), y=list(income), name='Income', marker_color=INCOME_COLOR))
    fig.add_trace(go.Bar(x=list(labels), y=list(expenses), name='Expenses', marker_color=EXPENSE_COLOR))
    fig.update_layout(barmode='group')
    return fig


def create_daily_cash_flow_chart(flow: Sequence[CashFlowDay], title: str | None = None) -> go.Figure:
    """Grouped income/expense bars for the last days, oldest first."""
    if not flow:
        return _empty_figure()
    fig = _income_expense_bars(
        [day.date.strftime('%a') for day in flow],
        [day.income for day in flow],
        [day.expenses for day in flow],
    )
    fig.update_layout(title=title or "Cash Flow (Last 7 Days)", xaxis_title="Day", yaxis_title="Amount")
    return fig


def create_weekly_cash_flow_chart(weeks: Sequence[WeeklyCashFlow], title: str | None = None) -> go.Figure:
    """Grouped income/expense bars per week, plotted oldest to newest."""
    if not weeks:
        return _empty_figure()
    ordered = list(reversed(weeks))
    fig = _income_expense_bars(
        [w.label for w in ordered],
        [w.income for w in ordered],
        [w.expenses for w in ordered],
    )
    fig.add_trace(go.Scatter(x=[w.label for w in ordered], y=[w.net for w in ordered], name='Net', mode='lines+markers'))
    fig.update_layout(title=title or "Weekly Cash Flow", xaxis_title="Week", yaxis_title="Amount")
    return fig
