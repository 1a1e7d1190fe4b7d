from __future__ import annotations

import itertools
from datetime import date

from fintrack.insights import generate_ai_insights, generate_insights, summary_messages
from fintrack.models import Transaction

_ids = itertools.count(1)


def _tx(type_, category, amount, day, is_forecast=False):
    return Transaction(
        id=str(next(_ids)),
        type=type_,
        category=category,
        amount=amount,
        date=day,
        is_forecast=is_forecast,
    )


def healthy_month():
    return [
        _tx('income', 'Salary', 5000, date(2024, 3, 1)),
        _tx('expense', 'Rent', 1000, date(2024, 3, 2)),
        _tx('expense', 'Groceries', 200, date(2024, 3, 3)),
        _tx('expense', 'Dining', 100, date(2024, 3, 4)),
    ]


# ---------------------------------------------------------------------------
# generate_ai_insights
# ---------------------------------------------------------------------------


def test_ai_insights_healthy_month_priority_order():
    insights = generate_ai_insights(healthy_month(), 'USD', today=date(2024, 3, 15))
    assert [i.id for i in insights] == [
        'ratio-savings',
        'ratio-essential',
        'ratio-discretionary',
        'prediction-underspend',
        'optimization-cut',
    ]
    savings = insights[0]
    assert savings.message == 'Excellent! Your savings rate is 74.0%. You are building wealth efficiently.'
    assert savings.severity == 'low'
    assert savings.actionable is False
    assert insights[3].actionable is False
    assert insights[4].title == 'Optimize Rent'
    assert insights[4].message == 'Reducing your Rent spending by 20% could save you $200.00.'


def test_ai_insights_are_capped_at_five():
    transactions = healthy_month() + [
        _tx('expense', 'Dining', 10, date(2024, 3, 5)),
        _tx('expense', 'Dining', 10, date(2024, 3, 6)),
        _tx('expense', 'Dining', 300, date(2024, 3, 7)),
    ]
    insights = generate_ai_insights(transactions, 'USD', today=date(2024, 3, 15))
    assert len(insights) == 5
    assert insights[3].id == 'anomaly-Dining'


def test_anomaly_message_uses_currency():
    transactions = [
        _tx('expense', 'Dining', 10, date(2024, 3, 1)),
        _tx('expense', 'Dining', 10, date(2024, 3, 2)),
        _tx('expense', 'Dining', 100, date(2024, 3, 3)),
    ]
    insights = generate_ai_insights(transactions, 'USD', today=date(2024, 3, 15))
    assert [i.id for i in insights] == ['anomaly-Dining', 'optimization-cut']
    anomaly = insights[0]
    assert anomaly.message == (
        'You spent $100.00 on Dining, which is significantly higher than your average of $40.00.'
    )
    assert anomaly.severity == 'high'


def test_recurring_pattern_keeps_hyphenated_category():
    transactions = [
        _tx('expense', 'Health-Care', 50, date(2024, 1, 5)),
        _tx('expense', 'Health-Care', 50, date(2024, 2, 5)),
    ]
    insights = generate_ai_insights(transactions, 'USD', today=date(2024, 3, 3))
    assert [i.id for i in insights] == ['pattern-Health-Care-5', 'optimization-cut']
    assert '"Health-Care"' in insights[0].message
    assert insights[0].severity == 'low'


def test_overspend_projection_and_discretionary_warning():
    transactions = [
        _tx('income', 'Salary', 1000, date(2024, 3, 1)),
        _tx('expense', 'Shopping', 800, date(2024, 3, 2)),
    ]
    insights = generate_ai_insights(transactions, 'USD', today=date(2024, 3, 10))
    ids = [i.id for i in insights]
    assert ids == [
        'ratio-savings',
        'ratio-essential',
        'ratio-discretionary',
        'prediction-overspend',
        'optimization-cut',
    ]
    discretionary = insights[2]
    assert discretionary.message.startswith('Lifestyle inflation detected. 80.0% of income')
    assert discretionary.severity == 'medium'
    assert insights[3].severity == 'high'


def test_no_projection_early_in_month():
    insights = generate_ai_insights(healthy_month(), 'USD', today=date(2024, 3, 5))
    assert not any(i.type == 'prediction' for i in insights)


def test_spending_more_than_income_is_danger():
    transactions = [
        _tx('income', 'Salary', 100, date(2024, 3, 1)),
        _tx('expense', 'Rent', 200, date(2024, 3, 2)),
    ]
    savings = generate_ai_insights(transactions, 'USD', today=date(2024, 3, 3))[0]
    assert savings.message == 'You are spending more than you earn. Immediate budget correction is required.'
    assert savings.severity == 'high'
    assert savings.actionable is True


def test_forecast_entries_are_ignored():
    base = generate_ai_insights(healthy_month(), 'USD', today=date(2024, 3, 15))
    with_forecast = generate_ai_insights(
        healthy_month() + [_tx('expense', 'Shopping', 9000, date(2024, 4, 1), is_forecast=True)],
        'USD',
        today=date(2024, 3, 15),
    )
    assert [i.message for i in with_forecast] == [i.message for i in base]


def test_ai_insights_empty():
    assert generate_ai_insights([], 'USD', today=date(2024, 3, 15)) == []


# ---------------------------------------------------------------------------
# generate_insights
# ---------------------------------------------------------------------------


def test_over_budget():
    transactions = [
        _tx('income', 'Salary', 100, date(2024, 3, 1)),
        _tx('expense', 'Dining', 150, date(2024, 3, 2)),
    ]
    insights = generate_insights(transactions, 'USD')
    assert [i.id for i in insights] == ['1', '4', '6', '7']
    assert insights[0].message.startswith("You've spent $50.00 more than you earned")


def test_budget_nearly_exhausted():
    transactions = [
        _tx('income', 'Salary', 1000, date(2024, 3, 1)),
        _tx('expense', 'Rent', 950, date(2024, 3, 2)),
    ]
    insights = generate_insights(transactions, 'USD')
    assert [i.id for i in insights] == ['2', '4', '7']
    assert insights[0].message.startswith("You've used 95% of your income.")


def test_healthy_budget_with_subscriptions_hint():
    transactions = [
        _tx('income', 'Salary', 1000, date(2024, 3, 1)),
        _tx('expense', 'Groceries', 100, date(2024, 3, 2)),
        _tx('expense', 'Rent', 100, date(2024, 3, 3)),
        _tx('expense', 'Utilities', 150, date(2024, 3, 4)),
        _tx('expense', 'Health', 150, date(2024, 3, 5)),
    ]
    insights = generate_insights(transactions, 'USD')
    assert [i.id for i in insights] == ['3', '5', '8', '10']
    assert 'You have $500.00 remaining' in insights[0].message
    assert insights[1].message.startswith('Utilities is your biggest expense at $150.00.')
    assert insights[3].message == (
        'Check for unused subscriptions or recurring charges. Canceling just one can save $10-30/month.'
    )


def test_small_purchases():
    transactions = [_tx('income', 'Salary', 1000, date(2024, 3, 1))]
    transactions += [_tx('expense', 'Dining', 5, date(2024, 3, d)) for d in range(2, 8)]
    insights = generate_insights(transactions, 'USD')
    assert [i.id for i in insights] == ['3', '4', '8', '9']
    assert insights[3].message.startswith('You made 6 small purchases under $20.')


def test_generate_insights_empty_is_healthy():
    insights = generate_insights([], 'USD')
    assert [i.id for i in insights] == ['3']
    assert '$0.00' in insights[0].message


# ---------------------------------------------------------------------------
# summary_messages
# ---------------------------------------------------------------------------


def test_summary_messages_saving_well():
    transactions = [
        _tx('income', 'Salary', 1000, date(2024, 3, 1)),
        _tx('expense', 'Rent', 700, date(2024, 3, 2)),
    ]
    assert summary_messages(transactions, 'USD') == [
        "Great job! You're saving 30% of your income.",
        'Your highest spending category is Rent ($700.00), which is 100% of total expenses.',
    ]


def test_summary_messages_edge_cases():
    assert summary_messages([], 'USD') == ['Add more transactions to see personalized insights.']

    only_expenses = summary_messages([_tx('expense', 'Rent', 10, date(2024, 3, 1))], 'EUR')
    assert only_expenses[0] == 'Add some income transactions to track your savings rate.'
    assert '(€10.00)' in only_expenses[1]

    overspent = summary_messages(
        [_tx('income', 'Salary', 100, date(2024, 3, 1)), _tx('expense', 'Rent', 150, date(2024, 3, 1))],
        'USD',
    )
    assert overspent[0] == "Warning: You're spending more than you earn this month."

    exactly_twenty = summary_messages(
        [_tx('income', 'Salary', 100, date(2024, 3, 1)), _tx('expense', 'Rent', 80, date(2024, 3, 1))],
        'USD',
    )
    assert exactly_twenty[0] == 'You are saving 20% of your income.'
