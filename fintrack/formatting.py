"""Formatting utilities for currency and date display."""

from __future__ import annotations

import math
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from . import config

CURRENCY_SYMBOLS = {
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'INR': '₹',
    'JPY': '¥',
    'CAD': 'CA$',
    'AUD': 'A$',
}

# Currencies displayed without minor units
ZERO_DECIMAL_CURRENCIES = {'JPY', 'KRW', 'VND', 'CLP', 'ISK'}

_CURRENCY_CODE = re.compile(r'^[A-Za-z]{3}$')


def normalize_currency(currency: Optional[str]) -> str:
    """Return an upper-case currency code, or the default for missing/invalid codes."""
    if not isinstance(currency, str) or not _CURRENCY_CODE.match(currency.strip()):
        return config.DEFAULT_CURRENCY
    return currency.strip().upper()


def format_currency(amount: Union[float, int], currency: Optional[str] = None) -> str:
    """Format an amount with en-US grouping for a currency code.

    Known currencies get their symbol; any other well-formed 3-letter code
    is written in front of the number. Missing or malformed codes fall back
    to USD. Never raises.

    Args:
        amount: The amount to format
        currency: ISO-4217-like code (e.g. 'EUR')

    Returns:
        Formatted currency string

    Example:
        >>> format_currency(1234.5, 'USD')
        '$1,234.50'
        >>> format_currency(1234.5, 'JPY')
        '¥1,235'
        >>> format_currency(-20, 'CHF')
        '-CHF 20.00'
    """
    code = normalize_currency(currency)
    if not math.isfinite(amount):
        return f"{code} {amount}"
    decimals = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
    sign = '-' if amount < 0 else ''
    rounded = Decimal(abs(amount)).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    number = f"{rounded:,.{decimals}f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is not None:
        return f"{sign}{symbol}{number}"
    return f"{sign}{code} {number}"


def format_date(value: date) -> str:
    """Format a date as ``Jan 5, 2024``."""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def to_fixed(value: float, digits: int = 0) -> str:
    """Render ``value`` with ``digits`` decimals, rounding exact ties upwards.

    Example:
        >>> to_fixed(2.5)
        '3'
    """
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_percent(value: float, digits: int = 0) -> str:
    """Format a percentage the way advisory messages display it (``42%``)."""
    return f"{to_fixed(value, digits)}%"
