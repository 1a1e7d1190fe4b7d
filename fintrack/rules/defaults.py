"""Loader and typed accessors for the keyword and heuristic rule tables.

Tables are read once per process and frozen: mappings become read-only
proxies and lists become tuples, so a caller holding a table cannot change
how the classifier or the parsers behave for everyone else.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Tuple

# Rule tables live next to this module
RULES_DIR = Path(__file__).parent


class AmountRule(NamedTuple):
    """Inclusive amount range that suggests a category."""
    min: float
    max: float
    category: str


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


@lru_cache(maxsize=None)
def load_rules(rules_name: str) -> Mapping[str, Any]:
    """Load a rule table by name.

    Args:
        rules_name: Name of the rules file (without .json extension)

    Returns:
        Read-only mapping containing the rule table. Key order in the file
        is preserved and is significant for first-match tables.

    Raises:
        FileNotFoundError: If the rules file doesn't exist
        json.JSONDecodeError: If the rules file is invalid JSON

    Example:
        >>> rules = load_rules('categorizer')
        >>> list(rules['category_keywords'])[0]
        'Groceries'
    """
    rules_path = RULES_DIR / f"{rules_name}.json"

    if not rules_path.exists():
        raise FileNotFoundError(f"Rules file not found: {rules_path}")

    with open(rules_path, 'r', encoding='utf-8') as f:
        return _freeze(json.load(f))


def get_rule_value(rules_name: str, *keys: str, default: Any = None) -> Any:
    """Get a nested rule value by key path.

    Example:
        >>> get_rule_value('quick_add', 'type_keywords', 'withdrawal')
        ('withdrawal', 'cash out', 'atm')
    """
    try:
        value = load_rules(rules_name)
        for key in keys:
            value = value[key]
        return value
    except (KeyError, FileNotFoundError):
        return default


# ---------------------------------------------------------------------------
# categorizer.json
# ---------------------------------------------------------------------------


def income_keywords() -> Tuple[str, ...]:
    return load_rules('categorizer')['income_keywords']


def expense_category_keywords() -> Mapping[str, Tuple[str, ...]]:
    """Expense categories in match order, each with its description keywords."""
    return load_rules('categorizer')['category_keywords']


@lru_cache(maxsize=None)
def amount_rules() -> Tuple[AmountRule, ...]:
    return tuple(
        AmountRule(float(rule['min']), float(rule['max']), rule['category'])
        for rule in load_rules('categorizer')['amount_heuristics']
    )


# ---------------------------------------------------------------------------
# quick_add.json
# ---------------------------------------------------------------------------


def quick_add_type_keywords() -> Mapping[str, Tuple[str, ...]]:
    return load_rules('quick_add')['type_keywords']


def quick_add_category_keywords() -> Mapping[str, Tuple[str, ...]]:
    return load_rules('quick_add')['category_keywords']


# ---------------------------------------------------------------------------
# csv_import.json
# ---------------------------------------------------------------------------


def column_keywords() -> Mapping[str, Tuple[str, ...]]:
    """Header keywords per column role (date, description, amount, type, category)."""
    return load_rules('csv_import')['column_keywords']


def column_fallback_positions() -> Mapping[str, int]:
    return load_rules('csv_import')['fallback_positions']


def income_type_markers() -> Tuple[str, ...]:
    return load_rules('csv_import')['income_type_markers']
