"""Bill status derivation.

Bills carry two independent status models:

* ``categorize_bills`` works from the ``paid`` flag and the number of days
  until the due date, and feeds the bill status summary cards.
* ``calculate_bill_status`` re-validates the stored ``status`` field and
  feeds the bill list, the overdue/upcoming groups and the due-soon alert.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from .models import Bill, BillStatusSummary, CategorizedBill, UpcomingBillsAlert, copy_bill

DUE_SOON_DAYS = 7


def days_until_due(due_date: date, today: Optional[date] = None) -> int:
    """Whole days from ``today`` to ``due_date`` (negative when past due)."""
    today = today or date.today()
    return (due_date - today).days


def categorize_bill(bill: Bill, today: Optional[date] = None) -> CategorizedBill:
    days = days_until_due(bill.due_date, today)
    if bill.paid:
        status = 'paid'
    elif days < 0:
        status = 'overdue'
    elif days <= DUE_SOON_DAYS:
        status = 'unpaid'
    else:
        status = 'upcoming'
    return CategorizedBill(bill=bill, status=status, days_until_due=days)


def categorize_bills(bills: Iterable[Bill], today: Optional[date] = None) -> BillStatusSummary:
    """Classify bills and total them per derived status.

    Args:
        bills: Bills to classify
        today: Reference date

    Returns:
        BillStatusSummary whose ``paid``, ``unpaid``, ``overdue`` and
        ``upcoming`` sums follow the derived status, ``outstanding`` sums
        every bill whose paid flag is not set and ``categorized`` is sorted
        by due date ascending.

    Example:
        >>> summary = categorize_bills([bill], today=date(2024, 6, 1))
        >>> summary.categorized[0].status
        'unpaid'
    """
    today = today or date.today()
    categorized = sorted(
        (categorize_bill(bill, today) for bill in bills),
        key=lambda cb: cb.bill.due_date,
    )

    sums: Dict[str, float] = {'paid': 0.0, 'unpaid': 0.0, 'overdue': 0.0, 'upcoming': 0.0}
    for item in categorized:
        sums[item.status] += item.bill.amount

    return BillStatusSummary(
        total=sum(item.bill.amount for item in categorized),
        paid=sums['paid'],
        unpaid=sums['unpaid'],
        overdue=sums['overdue'],
        upcoming=sums['upcoming'],
        outstanding=sum(item.bill.amount for item in categorized if not item.bill.paid),
        categorized=categorized,
    )


def calculate_bill_status(due_date: date, current_status: str, today: Optional[date] = None) -> str:
    """Re-validate a stored bill status against the calendar.

    ``paid`` is terminal. Anything else becomes ``overdue`` when the due
    date is before today, otherwise ``upcoming`` (due today counts as
    upcoming).
    """
    if current_status == 'paid':
        return 'paid'
    today = today or date.today()
    return 'overdue' if due_date < today else 'upcoming'


def refresh_bill_statuses(bills: Iterable[Bill], today: Optional[date] = None) -> List[Bill]:
    """Return copies of ``bills`` with their stored status re-validated."""
    today = today or date.today()
    return [
        copy_bill(bill, status=calculate_bill_status(bill.due_date, bill.status, today))
        for bill in bills
    ]


def bills_by_status(bills: Iterable[Bill]) -> Dict[str, List[Bill]]:
    """Group bills by their stored status field.

    Returns a dict with ``overdue``, ``upcoming`` (sorted by due date) and
    ``paid`` lists. Bills still marked ``pending`` belong to none of them;
    run ``refresh_bill_statuses`` first to place them.
    """
    bills = list(bills)
    return {
        'overdue': [b for b in bills if b.status == 'overdue'],
        'upcoming': sorted((b for b in bills if b.status == 'upcoming'), key=lambda b: b.due_date),
        'paid': [b for b in bills if b.status == 'paid'],
    }


def upcoming_bills_alert(bills: Iterable[Bill], today: Optional[date] = None) -> UpcomingBillsAlert:
    """Count and total unpaid bills due between today and a week from today."""
    today = today or date.today()
    horizon = today + timedelta(days=DUE_SOON_DAYS)
    due_soon = [b for b in bills if b.status != 'paid' and today <= b.due_date <= horizon]
    return UpcomingBillsAlert(count=len(due_soon), total=sum(b.amount for b in due_soon))
