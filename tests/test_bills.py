from __future__ import annotations

from datetime import date

import pytest

from fintrack.bills import (
    bills_by_status,
    calculate_bill_status,
    categorize_bills,
    days_until_due,
    refresh_bill_statuses,
    upcoming_bills_alert,
)
from fintrack.models import Bill

TODAY = date(2024, 6, 1)


def _bill(bill_id, amount, due, status='pending', paid=False):
    return Bill(
        id=bill_id,
        name=f'Bill {bill_id}',
        amount=amount,
        due_date=due,
        category='Utilities',
        status=status,
        paid=paid,
    )


def sample_bills():
    return [
        _bill('A', 10, date(2024, 5, 30)),
        _bill('B', 20, date(2024, 6, 5)),
        _bill('C', 30, date(2024, 6, 8)),
        _bill('D', 40, date(2024, 6, 20)),
        _bill('E', 50, date(2024, 5, 1), status='paid', paid=True),
    ]


def test_categorize_bills_statuses_and_order():
    summary = categorize_bills(sample_bills(), today=TODAY)
    assert [cb.id for cb in summary.categorized] == ['E', 'A', 'B', 'C', 'D']
    statuses = {cb.id: cb.status for cb in summary.categorized}
    assert statuses == {'A': 'overdue', 'B': 'unpaid', 'C': 'unpaid', 'D': 'upcoming', 'E': 'paid'}
    days = {cb.id: cb.days_until_due for cb in summary.categorized}
    assert days['A'] == -2
    assert days['C'] == 7


def test_categorize_bills_sums_follow_status():
    summary = categorize_bills(sample_bills(), today=TODAY)
    assert summary.total == pytest.approx(150)
    assert summary.paid == pytest.approx(50)
    assert summary.unpaid == pytest.approx(50)
    assert summary.overdue == pytest.approx(10)
    assert summary.upcoming == pytest.approx(40)
    assert summary.outstanding == pytest.approx(100)


def test_paid_flag_wins_over_dates():
    summary = categorize_bills([_bill('X', 5, date(2020, 1, 1), paid=True)], today=TODAY)
    assert summary.categorized[0].status == 'paid'


def test_categorize_bills_empty():
    summary = categorize_bills([], today=TODAY)
    assert summary.total == 0
    assert summary.categorized == []


def test_days_until_due():
    assert days_until_due(date(2024, 6, 1), TODAY) == 0
    assert days_until_due(date(2024, 5, 31), TODAY) == -1


@pytest.mark.parametrize(
    'due, current, expected',
    [
        (date(2024, 5, 31), 'pending', 'overdue'),
        (date(2024, 6, 1), 'pending', 'upcoming'),
        (date(2024, 5, 31), 'paid', 'paid'),
        (date(2024, 7, 1), 'overdue', 'upcoming'),
    ],
)
def test_calculate_bill_status(due, current, expected):
    assert calculate_bill_status(due, current, today=TODAY) == expected


def test_refresh_bill_statuses_returns_copies():
    bills = sample_bills()
    refreshed = refresh_bill_statuses(bills, today=TODAY)
    assert [b.status for b in refreshed] == ['overdue', 'upcoming', 'upcoming', 'upcoming', 'paid']
    assert bills[0].status == 'pending'


def test_bills_by_status_uses_stored_status():
    refreshed = refresh_bill_statuses(sample_bills(), today=TODAY)
    refreshed.reverse()
    groups = bills_by_status(refreshed)
    assert [b.id for b in groups['overdue']] == ['A']
    assert [b.id for b in groups['upcoming']] == ['B', 'C', 'D']
    assert [b.id for b in groups['paid']] == ['E']


def test_pending_bills_are_in_no_group():
    groups = bills_by_status(sample_bills())
    assert groups['overdue'] == []
    assert groups['upcoming'] == []


def test_upcoming_bills_alert_window():
    alert = upcoming_bills_alert(sample_bills(), today=TODAY)
    assert alert.count == 2
    assert alert.total == pytest.approx(50)


def test_upcoming_bills_alert_includes_today():
    alert = upcoming_bills_alert([_bill('T', 12, TODAY)], today=TODAY)
    assert (alert.count, alert.total) == (1, 12)
