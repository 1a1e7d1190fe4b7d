"""CSV ingestion for bank exports.

Columns are located by sniffing header keywords (see
``rules/csv_import.json``) with positional fallbacks, so exports from
different banks can be imported without a per-bank profile. Rows that
cannot be interpreted are skipped and logged rather than failing the
whole import.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd
import structlog

from . import config
from .categorizer import categorize_transaction
from .models import ParsedTransaction
from .rules import column_fallback_positions, column_keywords, income_type_markers

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS = {'.csv', '.txt'}

# Split on commas followed by an even number of double quotes
_FIELD_SPLIT = re.compile(r',(?=(?:(?:[^"]*"){2})*[^"]*$)')
_SURROUNDING_QUOTES = re.compile(r'^"|"$')
_AMOUNT_NOISE = re.compile(r'[^0-9.\-]+')
_LEADING_NUMBER = re.compile(r'^[-+]?(?:\d+\.?\d*|\.\d+)')

# A four-digit year, or a numeric day/month/year triple such as 01/15/24
_HAS_YEAR = re.compile(r'\d{4}|\d{1,2}[/.\-]\d{1,2}[/.\-]\d{2}')


class CSVParseError(ValueError):
    """Raised when CSV text has no header or no data rows."""


class UnsupportedFileTypeError(ValueError):
    """Raised when an import file does not have a supported extension."""


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def split_row(line: str) -> List[str]:
    """Split a CSV line on commas outside double-quoted spans.

    Example:
        >>> split_row('2024-01-05,"Coffee, large",4.50')
        ['2024-01-05', 'Coffee, large', '4.50']
    """
    return [_SURROUNDING_QUOTES.sub('', value.strip()) for value in _FIELD_SPLIT.split(line)]


def detect_columns(headers: Sequence[str]) -> Dict[str, int]:
    """Map each column role to a header index.

    The first header cell containing any keyword of a role wins. Roles with
    no matching header fall back to their default position.
    """
    normalized = [h.strip().lower() for h in headers]
    columns: Dict[str, int] = {}
    for role, keywords in column_keywords().items():
        index = next(
            (i for i, header in enumerate(normalized) if any(k in header for k in keywords)),
            None,
        )
        columns[role] = index if index is not None else column_fallback_positions()[role]
    return columns


def parse_amount(raw: Optional[str]) -> Optional[float]:
    """Parse a currency string, keeping only digits, dots and minus signs.

    The longest leading numeric prefix is used, so ``"12.50.3"`` parses as
    12.5. Returns None when nothing numeric remains.

    Example:
        >>> parse_amount('$1,234.56')
        1234.56
        >>> parse_amount('-$45.00')
        -45.0
    """
    if raw is None:
        return None
    match = _LEADING_NUMBER.match(_AMOUNT_NOISE.sub('', raw))
    if not match:
        return None
    return float(match.group(0))


def parse_date_value(raw: Optional[str], today: date) -> date:
    """Leniently parse a date cell, falling back to ``today``.

    Cells without an explicit year count as unparseable, which covers
    relative tokens like ``now`` as well as ``Jan 5``.
    """
    text = (raw or '').strip()
    if not _HAS_YEAR.search(text):
        return today
    parsed = pd.to_datetime(text, errors='coerce')
    if pd.isna(parsed):
        return today
    return parsed.date()


def _value_at(values: Sequence[str], index: int) -> Optional[str]:
    return values[index] if 0 <= index < len(values) else None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_csv(text: str, today: Optional[date] = None) -> List[ParsedTransaction]:
    """Parse CSV text into candidate transactions.

    Args:
        text: Full CSV document, first non-blank line is the header
        today: Date used for rows whose date is missing or unparseable

    Returns:
        Parsed transactions in input row order

    Raises:
        CSVParseError: If fewer than two non-blank lines are present
    """
    today = today or date.today()
    lines = [line for line in re.split(r'\r\n|\n', text or '') if line.strip()]
    if len(lines) < 2:
        raise CSVParseError('CSV file is empty or has no data rows.')

    columns = detect_columns(lines[0].split(','))
    income_markers = income_type_markers()

    parsed: List[ParsedTransaction] = []
    skipped = 0
    for line_number, line in enumerate(lines[1:], start=2):
        values = split_row(line)
        if len(values) < 3:
            skipped += 1
            logger.debug('csv_row_skipped', line=line_number, reason='too_few_fields')
            continue

        amount = parse_amount(_value_at(values, columns['amount']))
        if amount is None:
            skipped += 1
            logger.debug('csv_row_skipped', line=line_number, reason='invalid_amount')
            continue

        raw_type = _value_at(values, columns['type'])
        if raw_type:
            type_text = raw_type.lower()
            tx_type = 'income' if any(m in type_text for m in income_markers) else 'expense'
        else:
            tx_type = 'income' if amount >= 0 else 'expense'
        amount = abs(amount)

        description = _value_at(values, columns['description']) or config.DEFAULT_DESCRIPTION
        raw_category = _value_at(values, columns['category']) or ''

        if raw_category and raw_category != 'Other':
            category = raw_category
            ai_categorized = False
        else:
            category = categorize_transaction(description, amount, tx_type).category
            ai_categorized = True

        parsed.append(
            ParsedTransaction(
                date=parse_date_value(_value_at(values, columns['date']), today),
                description=description,
                amount=amount,
                type=tx_type,
                category=category,
                is_ai_categorized=ai_categorized,
            )
        )

    logger.info('csv_parsed', parsed=len(parsed), skipped=skipped)
    return parsed


def read_transactions_file(path, today: Optional[date] = None) -> List[ParsedTransaction]:
    """Load a whole CSV/TXT file and parse it.

    Raises:
        UnsupportedFileTypeError: If the extension is not .csv or .txt
        CSVParseError: If the file has no data rows
    """
    path = Path(path)
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileTypeError(f"Unsupported file extension '{ext}'.")
    text = path.read_text(encoding='utf-8-sig')
    logger.info('csv_file_loaded', path=str(path), size=len(text))
    return parse_csv(text, today=today)
