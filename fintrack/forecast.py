"""Next-month expense forecast.

The prediction for a category is simply the mean of its historical expense
amounts. Predictions can be applied as forecast transactions dated the
first day of next month; those entries carry ``is_forecast=True`` so the
insight and budget comparison engines ignore them.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from .calculations import transactions_to_frame
from .models import ForecastPrediction, Transaction, TransactionDraft


def generate_forecast_predictions(transactions: Iterable[Transaction]) -> List[ForecastPrediction]:
    """Average expense amount per category, rounded to cents.

    Categories are returned in first-seen order; categories without any
    expense are absent.

    Example:
        >>> [p.predicted_amount for p in generate_forecast_predictions(txns)]
        [54.33, 1200.0]
    """
    df = transactions_to_frame(transactions)
    expenses = df[df['Type'] == 'expense']
    if expenses.empty:
        return []
    means = expenses.groupby('Category', sort=False)['Amount'].mean()
    return [
        ForecastPrediction(category=str(category), predicted_amount=round(float(mean), 2))
        for category, mean in means.items()
    ]


def first_of_next_month(today: date) -> date:
    if today.month == 12:
        return date(today.year + 1, 1, 1)
    return date(today.year, today.month + 1, 1)


def predictions_to_drafts(
    predictions: Iterable[ForecastPrediction], today: Optional[date] = None
) -> List[TransactionDraft]:
    """Turn predictions into forecast expense drafts for next month."""
    forecast_date = first_of_next_month(today or date.today())
    return [
        TransactionDraft(
            type='expense',
            category=p.category,
            amount=p.predicted_amount,
            date=forecast_date,
            is_forecast=True,
        )
        for p in predictions
        if p.predicted_amount > 0
    ]
