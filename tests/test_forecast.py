from __future__ import annotations

from datetime import date

from fintrack.forecast import first_of_next_month, generate_forecast_predictions, predictions_to_drafts
from fintrack.models import ForecastPrediction, Transaction


def _tx(tx_id, type_, category, amount):
    return Transaction(id=tx_id, type=type_, category=category, amount=amount, date=date(2024, 3, 1))


def test_mean_per_category_rounded_to_cents():
    predictions = generate_forecast_predictions([
        _tx('1', 'expense', 'Groceries', 50),
        _tx('2', 'expense', 'Rent', 1200),
        _tx('3', 'expense', 'Groceries', 60),
        _tx('4', 'income', 'Salary', 4000),
        _tx('5', 'expense', 'Groceries', 53),
    ])
    assert predictions == [
        ForecastPrediction('Groceries', 54.33),
        ForecastPrediction('Rent', 1200.0),
    ]


def test_no_expenses_no_predictions():
    assert generate_forecast_predictions([]) == []
    assert generate_forecast_predictions([_tx('1', 'income', 'Salary', 10)]) == []


def test_first_of_next_month_rolls_year():
    assert first_of_next_month(date(2024, 12, 15)) == date(2025, 1, 1)
    assert first_of_next_month(date(2024, 1, 31)) == date(2024, 2, 1)


def test_predictions_to_drafts_are_flagged_forecasts():
    drafts = predictions_to_drafts(
        [ForecastPrediction('Groceries', 54.33), ForecastPrediction('Other', 0.0)],
        today=date(2024, 3, 10),
    )
    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.type == 'expense'
    assert draft.category == 'Groceries'
    assert draft.amount == 54.33
    assert draft.date == date(2024, 4, 1)
    assert draft.is_forecast is True
