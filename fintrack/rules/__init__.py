"""Rule tables and loaders.

Keyword lists, column sniffing keywords and amount heuristics are stored
in JSON files so they can be reviewed and adjusted without code changes.
Tables are ordered: the first matching entry wins wherever they are used.
"""

from .defaults import (
    AmountRule,
    amount_rules,
    column_fallback_positions,
    column_keywords,
    expense_category_keywords,
    get_rule_value,
    income_keywords,
    income_type_markers,
    load_rules,
    quick_add_category_keywords,
    quick_add_type_keywords,
)

__all__ = [
    'AmountRule',
    'amount_rules',
    'column_fallback_positions',
    'column_keywords',
    'expense_category_keywords',
    'get_rule_value',
    'income_keywords',
    'income_type_markers',
    'load_rules',
    'quick_add_category_keywords',
    'quick_add_type_keywords',
]
