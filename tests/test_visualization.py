from __future__ import annotations

from datetime import date

from fintrack import visualization as viz
from fintrack.models import CashFlowDay, CategorySpending, WeeklyCashFlow


def test_empty_inputs_give_placeholder_figures():
    for fig in (
        viz.create_category_pie_chart([]),
        viz.create_daily_cash_flow_chart([]),
        viz.create_weekly_cash_flow_chart([]),
    ):
        assert fig.layout.title.text == "No data to display"
        assert len(fig.data) == 0


def test_category_pie_chart():
    fig = viz.create_category_pie_chart([
        CategorySpending('Rent', 1200, 80),
        CategorySpending('Mystery', 300, 20),
    ])
    assert fig.layout.title.text == "Spending by Category"
    assert len(fig.data) == 1
    assert list(fig.data[0].labels) == ['Rent', 'Mystery']


def test_daily_cash_flow_chart_has_income_and_expense_bars():
    flow = [
        CashFlowDay(date(2024, 3, 9), 0, 30, -30),
        CashFlowDay(date(2024, 3, 10), 100, 0, 100),
    ]
    fig = viz.create_daily_cash_flow_chart(flow)
    assert [trace.name for trace in fig.data] == ['Income', 'Expenses']
    assert list(fig.data[0].x) == ['Sat', 'Sun']
    assert list(fig.data[0].y) == [0, 100]


def test_weekly_chart_plots_oldest_first():
    weeks = [
        WeeklyCashFlow(date(2024, 3, 10), 'Mar 10', 100, 0, 100),
        WeeklyCashFlow(date(2024, 3, 3), 'Mar 3', 0, 50, -50),
    ]
    fig = viz.create_weekly_cash_flow_chart(weeks)
    assert [trace.name for trace in fig.data] == ['Income', 'Expenses', 'Net']
    assert list(fig.data[2].x) == ['Mar 3', 'Mar 10']
    assert list(fig.data[2].y) == [-50, 100]


def test_get_category_color_defaults():
    assert viz.get_category_color('Dining') == '#f97316'
    assert viz.get_category_color('Mystery') == viz.DEFAULT_COLOR
