"""Keyword and amount based transaction categorization.

Descriptions are matched against ordered keyword tables loaded from
``rules/categorizer.json``. When no keyword matches, typical amount ranges
are used as a weaker signal before falling back to ``Other``.
"""

from __future__ import annotations

from typing import Iterable

from .models import CategorizationResult
from .rules import amount_rules, expense_category_keywords, income_keywords


def _matches_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def categorize_by_amount(amount: float) -> str | None:
    """Return the first category whose inclusive amount range contains ``amount``."""
    for rule in amount_rules():
        if rule.min <= amount <= rule.max:
            return rule.category
    return None


def categorize_transaction(description: str, amount: float, type: str) -> CategorizationResult:
    """Assign a category to a transaction description.

    Priority order:
        1. Income transactions: income keyword hit gives ``Salary`` with high
           confidence, anything else is ``Freelance`` with medium confidence.
        2. Expense keyword table, first category (in table order) with a
           substring hit wins.
        3. Amount heuristics, first containing range wins.
        4. ``Other`` with low confidence.

    Args:
        description: Free-text description (matched case-insensitively)
        amount: Transaction amount, compared as given
        type: ``'income'`` or ``'expense'``

    Returns:
        CategorizationResult with category, confidence and method

    Example:
        >>> categorize_transaction('WHOLE FOODS MARKET #123', 84.12, 'expense').category
        'Groceries'
        >>> categorize_transaction('Acme Corp PAYROLL', 3200, 'income').confidence
        'high'
    """
    text = (description or '').lower()

    if type == 'income':
        if _matches_any(text, income_keywords()):
            return CategorizationResult('Salary', 'high', 'keyword')
        return CategorizationResult('Freelance', 'medium', 'default')

    for category, keywords in expense_category_keywords().items():
        if _matches_any(text, keywords):
            return CategorizationResult(category, 'high', 'keyword')

    by_amount = categorize_by_amount(amount)
    if by_amount is not None:
        return CategorizationResult(by_amount, 'medium', 'amount')

    return CategorizationResult('Other', 'low', 'default')
