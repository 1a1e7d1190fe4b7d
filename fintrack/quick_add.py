"""Free-text "quick add" parsing.

Turns a phrase like ``"spent 45.20 on groceries yesterday"`` into a
transaction draft. The result is only a candidate: callers show it for
confirmation and persist it through the store.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Optional

from .models import TransactionDraft
from .rules import quick_add_category_keywords, quick_add_type_keywords

_AMOUNT = re.compile(r'(\d+(\.\d{1,2})?)')


def detect_type(text: str) -> str:
    """Return the transaction type implied by ``text`` (already lowercased)."""
    type_keywords = quick_add_type_keywords()
    for tx_type in ('income', 'transfer', 'withdrawal'):
        if any(keyword in text for keyword in type_keywords[tx_type]):
            return tx_type
    return 'expense'


def detect_category(text: str) -> str:
    for category, keywords in quick_add_category_keywords().items():
        if any(keyword in text for keyword in keywords):
            return category
    return 'Other'


def parse_quick_add(text: str, today: Optional[date] = None) -> TransactionDraft:
    """Parse a free-text phrase into a transaction draft.

    Only "yesterday" is understood as a relative date; anything else is
    dated today. A phrase without a number yields an amount of 0.

    Example:
        >>> draft = parse_quick_add('Uber 23.5 yesterday', today=date(2024, 3, 10))
        >>> draft.category, draft.amount, draft.date
        ('Transportation', 23.5, datetime.date(2024, 3, 9))
    """
    today = today or date.today()
    lower = (text or '').lower()

    match = _AMOUNT.search(lower)
    amount = float(match.group(1)) if match else 0.0

    tx_date = today - timedelta(days=1) if 'yesterday' in lower else today

    return TransactionDraft(
        type=detect_type(lower),
        category=detect_category(lower),
        amount=amount,
        date=tx_date,
    )
