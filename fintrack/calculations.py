"""Aggregation engine for transaction lists.

Transactions are loaded into a pandas DataFrame once and every aggregate
(budget summary, category spending, cash flow, ratios, budget vs actual)
is computed from it. Results are returned as plain dataclasses so callers
never need to touch pandas.

Every function accepts the full transaction list it is given; applied
forecast entries count towards the summary, category and cash-flow
aggregates. Ratios and budget comparison only look at real
(non-forecast) transactions.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .models import (
    Budget,
    BudgetStatus,
    BudgetSummary,
    CashFlowDay,
    CategorySpending,
    FinancialRatio,
    Transaction,
    WeeklyCashFlow,
)

FRAME_COLUMNS = ['Id', 'Date', 'Type', 'Category', 'Amount', 'Is Forecast']

ESSENTIAL_CATEGORIES = {'Rent', 'Housing', 'Utilities', 'Groceries', 'Health', 'Transportation'}
DISCRETIONARY_CATEGORIES = {'Entertainment', 'Dining', 'Shopping'}

TIMEFRAMES = ('month', 'year', 'ytd', 'all')


def transactions_to_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Build the analysis DataFrame for a list of transactions.

    Input order is preserved in the index, which keeps first-seen ordering
    stable for grouped results.
    """
    rows = [
        {
            'Id': t.id,
            'Date': t.date,
            'Type': t.type,
            'Category': t.category,
            'Amount': float(t.amount),
            'Is Forecast': bool(t.is_forecast),
        }
        for t in transactions
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df['Date'] = pd.to_datetime(df['Date'])
    df['Amount'] = pd.to_numeric(df['Amount'], errors='coerce').fillna(0.0)
    df['Is Forecast'] = df['Is Forecast'].astype(bool)
    return df


def _pct(part: float, whole: float) -> float:
    return float(part / whole * 100) if whole > 0 else 0.0


def _summary_status(percentage: float) -> str:
    if percentage >= 90:
        return 'danger'
    if percentage >= 80:
        return 'warning'
    return 'good'


def _budget_status(percentage: float) -> str:
    if percentage >= 100:
        return 'danger'
    if percentage >= 80:
        return 'warning'
    return 'good'


def week_start(day: date) -> date:
    """Return the Sunday that starts the week containing ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


class TransactionAnalytics:
    """Aggregate calculations over a list of transactions."""

    def __init__(self, transactions: Iterable[Transaction]):
        self.transactions: List[Transaction] = list(transactions)
        self.data = transactions_to_frame(self.transactions)

    # -- row selections ---------------------------------------------------

    def _income_rows(self, df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        source = self.data if df is None else df
        return source[source['Type'] == 'income']

    def _expense_rows(self, df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        source = self.data if df is None else df
        return source[source['Type'] == 'expense']

    def _actual_rows(self) -> pd.DataFrame:
        return self.data[~self.data['Is Forecast']]

    # -- aggregates ---------------------------------------------------------

    def budget_summary(self) -> BudgetSummary:
        """Income, expenses, balance and the share of income spent."""
        income = float(self._income_rows()['Amount'].sum())
        expenses = float(self._expense_rows()['Amount'].sum())
        percentage = _pct(expenses, income)
        return BudgetSummary(
            total_income=income,
            total_expenses=expenses,
            balance=income - expenses,
            percentage=percentage,
            status=_summary_status(percentage),
        )

    def category_totals(self, df: Optional[pd.DataFrame] = None) -> pd.Series:
        """Expense totals per category, largest first (ties in first-seen order)."""
        expenses = self._expense_rows(df)
        if expenses.empty:
            return pd.Series(dtype=float)
        totals = expenses.groupby('Category', sort=False)['Amount'].sum()
        return totals.sort_values(ascending=False, kind='stable')

    def category_spending(self) -> List[CategorySpending]:
        totals = self.category_totals()
        grand_total = float(totals.sum()) if not totals.empty else 0.0
        return [
            CategorySpending(category=str(category), amount=float(amount), percentage=_pct(amount, grand_total))
            for category, amount in totals.items()
        ]

    def daily_cash_flow(self, today: Optional[date] = None, days: int = 7) -> List[CashFlowDay]:
        """Income and expenses for the last ``days`` calendar days, oldest first."""
        today = today or date.today()
        day_values = self.data['Date'].dt.date
        flow: List[CashFlowDay] = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            on_day = self.data[day_values == day]
            income = float(self._income_rows(on_day)['Amount'].sum())
            expenses = float(self._expense_rows(on_day)['Amount'].sum())
            flow.append(CashFlowDay(date=day, income=income, expenses=expenses, net=income - expenses))
        return flow

    def weekly_cash_flow(self) -> List[WeeklyCashFlow]:
        """Bucket transactions by Sunday-start week, most recent week first.

        Every non-income type (transfers and withdrawals included) counts
        as an expense here.
        """
        if self.data.empty:
            return []
        df = self.data.copy()
        df['Week Start'] = df['Date'].dt.date.map(week_start)
        df['Income'] = np.where(df['Type'] == 'income', df['Amount'], 0.0)
        df['Expenses'] = np.where(df['Type'] != 'income', df['Amount'], 0.0)
        weekly = df.groupby('Week Start')[['Income', 'Expenses']].sum().sort_index(ascending=False)

        result: List[WeeklyCashFlow] = []
        for start, row in weekly.iterrows():
            income = float(row['Income'])
            expenses = float(row['Expenses'])
            result.append(
                WeeklyCashFlow(
                    week_start=start,
                    label=f"{start.strftime('%b')} {start.day}",
                    income=income,
                    expenses=expenses,
                    net=income - expenses,
                )
            )
        return result

    def financial_ratios(self) -> List[FinancialRatio]:
        """Savings, essential and discretionary ratios against their targets.

        Returns an empty list when there is no (non-forecast) income.
        """
        actual = self._actual_rows()
        income = float(self._income_rows(actual)['Amount'].sum())
        if income <= 0:
            return []

        expense_rows = self._expense_rows(actual)
        expenses = float(expense_rows['Amount'].sum())
        essential = float(expense_rows[expense_rows['Category'].isin(ESSENTIAL_CATEGORIES)]['Amount'].sum())
        discretionary = float(
            expense_rows[expense_rows['Category'].isin(DISCRETIONARY_CATEGORIES)]['Amount'].sum()
        )

        savings_rate = (income - expenses) / income * 100
        essential_ratio = essential / income * 100
        discretionary_ratio = discretionary / income * 100

        if savings_rate >= 20:
            savings_status = 'good'
        elif savings_rate >= 10:
            savings_status = 'warning'
        else:
            savings_status = 'bad'

        return [
            FinancialRatio(
                name='Savings Rate',
                value=savings_rate,
                target=20,
                status=savings_status,
                description='Share of income left after expenses',
                tip='Automate a transfer to savings on payday to reach 20%.',
            ),
            FinancialRatio(
                name='Essential Expenses',
                value=essential_ratio,
                target=50,
                status=_ceiling_status(essential_ratio, 50, 60),
                description='Housing, utilities, groceries, health and transport',
                tip='Keep needs at or below half of your income.',
            ),
            FinancialRatio(
                name='Discretionary Spending',
                value=discretionary_ratio,
                target=30,
                status=_ceiling_status(discretionary_ratio, 30, 40),
                description='Dining, entertainment and shopping',
                tip='Cap wants at 30% of income and review them monthly.',
            ),
        ]

    def budget_comparison(
        self,
        budgets: Iterable[Budget],
        timeframe: str = 'month',
        today: Optional[date] = None,
    ) -> List[BudgetStatus]:
        """Compare non-forecast spending to each budget limit.

        Args:
            budgets: Budgets to compare against; limits of 0 are dropped
            timeframe: ``'month'``, ``'year'`` or ``'all'``
            today: Reference date for the month/year window

        Returns:
            BudgetStatus entries sorted by percentage used, highest first
        """
        if timeframe not in ('month', 'year', 'all'):
            raise ValueError(f"Unknown budget comparison timeframe '{timeframe}'")
        today = today or date.today()

        actual = self._actual_rows()
        if timeframe == 'month':
            actual = actual[(actual['Date'].dt.year == today.year) & (actual['Date'].dt.month == today.month)]
        elif timeframe == 'year':
            actual = actual[actual['Date'].dt.year == today.year]
        spent_by_category: Dict[str, float] = self.category_totals(actual).to_dict()

        statuses = []
        for budget in budgets:
            if budget.limit <= 0:
                continue
            spent = float(spent_by_category.get(budget.category, 0.0))
            percentage = _pct(spent, budget.limit)
            statuses.append(
                BudgetStatus(
                    category=budget.category,
                    limit=budget.limit,
                    spent=spent,
                    percentage=percentage,
                    status=_budget_status(percentage),
                )
            )
        return sorted(statuses, key=lambda s: s.percentage, reverse=True)


def _ceiling_status(value: float, good_max: float, warning_max: float) -> str:
    if value <= good_max:
        return 'good'
    if value <= warning_max:
        return 'warning'
    return 'bad'


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def calculate_budget_summary(transactions: Iterable[Transaction]) -> BudgetSummary:
    return TransactionAnalytics(transactions).budget_summary()


def calculate_category_spending(transactions: Iterable[Transaction]) -> List[CategorySpending]:
    return TransactionAnalytics(transactions).category_spending()


def calculate_daily_cash_flow(transactions: Iterable[Transaction], today: Optional[date] = None) -> List[CashFlowDay]:
    return TransactionAnalytics(transactions).daily_cash_flow(today=today)


def calculate_weekly_cash_flow(transactions: Iterable[Transaction]) -> List[WeeklyCashFlow]:
    return TransactionAnalytics(transactions).weekly_cash_flow()


def calculate_financial_ratios(transactions: Iterable[Transaction]) -> List[FinancialRatio]:
    return TransactionAnalytics(transactions).financial_ratios()


def compare_budgets(
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget],
    timeframe: str = 'month',
    today: Optional[date] = None,
) -> List[BudgetStatus]:
    return TransactionAnalytics(transactions).budget_comparison(budgets, timeframe=timeframe, today=today)


def filter_by_period(
    transactions: Iterable[Transaction],
    timeframe: str = 'month',
    year: Optional[int] = None,
    month: Optional[int] = None,
    today: Optional[date] = None,
) -> List[Transaction]:
    """Select transactions for a report window.

    Args:
        transactions: Transactions to filter
        timeframe: ``'month'`` (year + month), ``'year'`` (whole year),
            ``'ytd'`` (Jan 1 of today's year through today) or ``'all'``
        year: Selected year, defaults to today's year
        month: Selected month 1-12, defaults to today's month
        today: Reference date

    Returns:
        Matching transactions in input order
    """
    if timeframe not in TIMEFRAMES:
        raise ValueError(f"Unknown timeframe '{timeframe}'")
    today = today or date.today()
    year = year or today.year
    month = month or today.month

    if timeframe == 'all':
        return list(transactions)
    if timeframe == 'year':
        return [t for t in transactions if t.date.year == year]
    if timeframe == 'ytd':
        start = date(today.year, 1, 1)
        return [t for t in transactions if start <= t.date <= today]
    return [t for t in transactions if t.date.year == year and t.date.month == month]


def current_month_transactions(transactions: Iterable[Transaction], today: Optional[date] = None) -> List[Transaction]:
    """Transactions dated in the calendar month of ``today``."""
    return filter_by_period(transactions, 'month', today=today)
