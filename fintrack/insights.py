"""Rule-based advisory insights.

Three independent generators read the same transaction list:

* ``generate_ai_insights``: ratio health, anomalies, recurring patterns,
  month-end projection and an optimization tip (at most 5).
* ``generate_insights``: budget health and spending habit tips (at most 4).
* ``summary_messages``: short one-line highlights for the dashboard header.

Forecast entries are ignored by all of them. Generation order is the
priority order; output is truncated after generation.
"""

from __future__ import annotations

import calendar
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from .calculations import DISCRETIONARY_CATEGORIES, ESSENTIAL_CATEGORIES
from .formatting import format_currency, format_percent
from .models import AIInsight, Insight, Transaction

MAX_AI_INSIGHTS = 5
MAX_INSIGHTS = 4


def _split_actual(transactions: Iterable[Transaction]) -> Tuple[List[Transaction], List[Transaction]]:
    actual = [t for t in transactions if not t.is_forecast]
    income = [t for t in actual if t.type == 'income']
    expenses = [t for t in actual if t.type == 'expense']
    return income, expenses


def _amounts_by_category(expenses: Iterable[Transaction]) -> Dict[str, List[float]]:
    grouped: Dict[str, List[float]] = OrderedDict()
    for t in expenses:
        grouped.setdefault(t.category, []).append(t.amount)
    return grouped


def _sorted_totals(grouped: Dict[str, List[float]]) -> List[Tuple[str, float]]:
    # sorted() is stable so ties keep first-seen order
    return sorted(((cat, sum(amounts)) for cat, amounts in grouped.items()), key=lambda item: item[1], reverse=True)


def _severity(status: str) -> str:
    return {'danger': 'high', 'warning': 'medium'}.get(status, 'low')


# ---------------------------------------------------------------------------
# Ratio, anomaly, pattern and projection insights
# ---------------------------------------------------------------------------


def _savings_rate_insight(total_income: float, total_expenses: float) -> AIInsight:
    rate = (total_income - total_expenses) / total_income * 100
    shown = format_percent(rate, 1)
    if rate >= 20:
        status = 'success'
        message = f"Excellent! Your savings rate is {shown}. You are building wealth efficiently."
    elif rate >= 10:
        status = 'warning'
        message = f"Your savings rate is {shown}. Good progress, but aim for 20% to accelerate goals."
    elif rate > 0:
        status = 'warning'
        message = f"Your savings rate is low ({shown}). Try to reduce non-essential spending to boost this."
    else:
        status = 'danger'
        message = "You are spending more than you earn. Immediate budget correction is required."
    return AIInsight(
        id='ratio-savings',
        type='health',
        title='Savings Rate Ratio',
        message=message,
        icon='TrendingUp',
        severity=_severity(status),
        actionable=status != 'success',
    )


def _essential_ratio_insight(total_income: float, expenses: List[Transaction]) -> AIInsight:
    spent = sum(t.amount for t in expenses if t.category in ESSENTIAL_CATEGORIES)
    ratio = spent / total_income * 100
    shown = format_percent(ratio, 1)
    if ratio > 60:
        status = 'danger'
        message = (
            f"Essential costs consume {shown} of income. "
            "This is high; consider housing or utility adjustments."
        )
    elif ratio > 50:
        status = 'warning'
        message = f"Essential costs are {shown} of income. You are slightly over the recommended 50% limit."
    else:
        status = 'success'
        message = f"Essential costs are {shown} of income. You are well within the healthy 50% range."
    return AIInsight(
        id='ratio-essential',
        type='optimization',
        title='Essential Expenses Ratio',
        message=message,
        icon='Target',
        severity=_severity(status),
        actionable=status != 'success',
    )


def _discretionary_ratio_insight(total_income: float, expenses: List[Transaction]) -> AIInsight:
    spent = sum(t.amount for t in expenses if t.category in DISCRETIONARY_CATEGORIES)
    ratio = spent / total_income * 100
    shown = format_percent(ratio, 1)
    if ratio > 40:
        warning = True
        message = f"Lifestyle inflation detected. {shown} of income goes to wants. Cut back to hit 30%."
    elif ratio > 30:
        warning = True
        message = f"Discretionary spending is {shown}. You are slightly over the 30% guideline."
    else:
        warning = False
        message = f'Discretionary spending is {shown}. You have good control over your "wants".'
    return AIInsight(
        id='ratio-discretionary',
        type='pattern',
        title='Discretionary Spending',
        message=message,
        icon='Zap',
        severity='medium' if warning else 'low',
        actionable=warning,
    )


def _anomaly_insights(grouped: Dict[str, List[float]], currency: str) -> List[AIInsight]:
    found = []
    for category, amounts in grouped.items():
        if len(amounts) < 2:
            continue
        average = sum(amounts) / len(amounts)
        largest = max(amounts)
        if largest > average * 2:
            found.append(
                AIInsight(
                    id=f"anomaly-{category}",
                    type='anomaly',
                    title=f"Unusual Spending in {category}",
                    message=(
                        f"You spent {format_currency(largest, currency)} on {category}, which is "
                        f"significantly higher than your average of {format_currency(average, currency)}."
                    ),
                    icon='AlertTriangle',
                    severity='high',
                    actionable=True,
                )
            )
    return found


def _pattern_insights(expenses: List[Transaction]) -> List[AIInsight]:
    counts: Dict[Tuple[str, int], int] = OrderedDict()
    for t in expenses:
        key = (t.category, t.date.day)
        counts[key] = counts.get(key, 0) + 1

    found = []
    for (category, day), count in counts.items():
        if count < 2:
            continue
        found.append(
            AIInsight(
                id=f"pattern-{category}-{day}",
                type='pattern',
                title='Recurring Pattern Detected',
                message=(
                    f'You have transactions in "{category}" on the same day of the month multiple times. '
                    'Consider setting this up as a recurring bill.'
                ),
                icon='Repeat',
                severity='low',
                actionable=True,
            )
        )
    return found


def _projection_insight(
    total_income: float, total_expenses: float, today: date, currency: str
) -> Optional[AIInsight]:
    days_passed = today.day
    if days_passed <= 5 or total_income <= 0:
        return None
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    burn_rate = total_expenses / days_passed
    projected = total_expenses + burn_rate * (days_in_month - days_passed)

    if projected > total_income:
        return AIInsight(
            id='prediction-overspend',
            type='prediction',
            title='Month-End Projection',
            message=(
                f"At your current burn rate, you're projected to spend {format_currency(projected, currency)} "
                "by month-end, exceeding your income."
            ),
            icon='TrendingDown',
            severity='high',
            actionable=True,
        )
    if projected < total_income * 0.8:
        return AIInsight(
            id='prediction-underspend',
            type='prediction',
            title='On Track for Savings',
            message=f"Projected month-end spend is {format_currency(projected, currency)}. You are in a safe position.",
            icon='TrendingUp',
            severity='low',
            actionable=False,
        )
    return None


def generate_ai_insights(
    transactions: Iterable[Transaction],
    currency: str = 'USD',
    today: Optional[date] = None,
) -> List[AIInsight]:
    """Generate up to five prioritized insights.

    Args:
        transactions: Transactions to analyze (forecast entries ignored)
        currency: Currency code used in messages
        today: Reference date for the month-end projection

    Returns:
        Insights in priority order, truncated to five
    """
    today = today or date.today()
    income, expenses = _split_actual(transactions)
    total_income = sum(t.amount for t in income)
    total_expenses = sum(t.amount for t in expenses)
    grouped = _amounts_by_category(expenses)

    insights: List[AIInsight] = []
    if total_income > 0:
        insights.append(_savings_rate_insight(total_income, total_expenses))
        insights.append(_essential_ratio_insight(total_income, expenses))
        insights.append(_discretionary_ratio_insight(total_income, expenses))

    insights.extend(_anomaly_insights(grouped, currency))
    insights.extend(_pattern_insights(expenses))

    projection = _projection_insight(total_income, total_expenses, today, currency)
    if projection is not None:
        insights.append(projection)

    totals = _sorted_totals(grouped)
    if totals:
        category, total = totals[0]
        insights.append(
            AIInsight(
                id='optimization-cut',
                type='optimization',
                title=f"Optimize {category}",
                message=(
                    f"Reducing your {category} spending by 20% could save you "
                    f"{format_currency(total * 0.2, currency)}."
                ),
                icon='Target',
                severity='medium',
                actionable=True,
            )
        )

    return insights[:MAX_AI_INSIGHTS]


# ---------------------------------------------------------------------------
# Budget health and habit tips
# ---------------------------------------------------------------------------


def generate_insights(transactions: Iterable[Transaction], currency: str = 'USD') -> List[Insight]:
    """Generate up to four budget health and spending habit insights."""
    income, expenses = _split_actual(transactions)
    total_income = sum(t.amount for t in income)
    total_expenses = sum(t.amount for t in expenses)
    balance = total_income - total_expenses
    totals = _sorted_totals(_amounts_by_category(expenses))
    by_category = dict(totals)

    insights: List[Insight] = []

    if balance < 0:
        insights.append(Insight(
            id='1',
            type='danger',
            title='Over Budget Alert',
            message=(
                f"You've spent {format_currency(abs(balance), currency)} more than you earned this month. "
                "Review your largest expenses immediately."
            ),
            icon='AlertTriangle',
            actionable=True,
        ))
    elif total_expenses > total_income * 0.9:
        insights.append(Insight(
            id='2',
            type='warning',
            title='Budget Nearly Exhausted',
            message=(
                f"You've used {format_percent(total_expenses / total_income * 100)} of your income. "
                "Consider pausing non-essential spending."
            ),
            icon='TrendingDown',
            actionable=True,
        ))
    else:
        insights.append(Insight(
            id='3',
            type='success',
            title='Healthy Budget',
            message=(
                f"Great job! You have {format_currency(balance, currency)} remaining. "
                "Consider saving or investing this surplus."
            ),
            icon='CheckCircle',
            actionable=False,
        ))

    if totals and total_expenses > 0:
        top_category, top_amount = totals[0]
        share = top_amount / total_expenses * 100
        if share > 40:
            insights.append(Insight(
                id='4',
                type='warning',
                title='High Spending Concentration',
                message=(
                    f"{top_category} accounts for {format_percent(share)} of your expenses "
                    f"({format_currency(top_amount, currency)}). Try to reduce this by 10% to save "
                    f"{format_currency(top_amount * 0.1, currency)}."
                ),
                icon='PieChart',
                actionable=True,
            ))
        elif share > 25:
            insights.append(Insight(
                id='5',
                type='tip',
                title='Top Spending Category',
                message=(
                    f"{top_category} is your biggest expense at {format_currency(top_amount, currency)}. "
                    "Look for discounts or alternatives in this category."
                ),
                icon='Tag',
                actionable=True,
            ))

    leisure = by_category.get('Dining', 0.0) + by_category.get('Entertainment', 0.0)
    if leisure > total_income * 0.15:
        insights.append(Insight(
            id='6',
            type='warning',
            title='Leisure Spending Alert',
            message=(
                f"You've spent {format_currency(leisure, currency)} on dining and entertainment. "
                f"Cooking at home and free activities could save you {format_currency(leisure * 0.3, currency)}."
            ),
            icon='Utensils',
            actionable=True,
        ))

    savings_rate = balance / total_income * 100 if total_income > 0 else 0.0
    if savings_rate < 10 and total_income > 0:
        insights.append(Insight(
            id='7',
            type='tip',
            title='Boost Your Savings',
            message=(
                f"Your savings rate is {format_percent(savings_rate, 1)}. Aim for at least 20%. "
                "Set up automatic transfers to save first."
            ),
            icon='PiggyBank',
            actionable=True,
        ))
    elif savings_rate >= 20:
        insights.append(Insight(
            id='8',
            type='success',
            title='Excellent Savings Rate',
            message=f"You're saving {format_percent(savings_rate, 1)} of your income! This puts you ahead of most people.",
            icon='Star',
            actionable=False,
        ))

    small_purchases = sum(1 for t in expenses if t.amount < 20)
    if small_purchases > 5:
        insights.append(Insight(
            id='9',
            type='tip',
            title='Watch Small Purchases',
            message=(
                f"You made {small_purchases} small purchases under $20. These add up quickly. "
                "Track them for a week to see the impact."
            ),
            icon='Coffee',
            actionable=True,
        ))

    if by_category.get('Utilities', 0.0) > 100 or by_category.get('Shopping', 0.0) > 100:
        insights.append(Insight(
            id='10',
            type='tip',
            title='Review Subscriptions',
            message='Check for unused subscriptions or recurring charges. Canceling just one can save $10-30/month.',
            icon='RefreshCw',
            actionable=True,
        ))

    return insights[:MAX_INSIGHTS]


def summary_messages(transactions: Iterable[Transaction], currency: str = 'USD') -> List[str]:
    """Short highlight lines: savings rate and top spending category."""
    income, expenses = _split_actual(transactions)
    total_income = sum(t.amount for t in income)
    total_expenses = sum(t.amount for t in expenses)

    messages: List[str] = []
    if total_income > 0:
        rate = (total_income - total_expenses) / total_income * 100
        if rate > 20:
            messages.append(f"Great job! You're saving {format_percent(rate)} of your income.")
        elif rate < 0:
            messages.append("Warning: You're spending more than you earn this month.")
        else:
            messages.append(f"You are saving {format_percent(rate)} of your income.")
    elif total_expenses > 0:
        messages.append("Add some income transactions to track your savings rate.")

    totals = _sorted_totals(_amounts_by_category(expenses))
    if totals:
        category, amount = totals[0]
        share = amount / total_expenses * 100 if total_expenses > 0 else 0.0
        messages.append(
            f"Your highest spending category is {category} ({format_currency(amount, currency)}), "
            f"which is {format_percent(share)} of total expenses."
        )

    if not messages:
        messages.append("Add more transactions to see personalized insights.")
    return messages
