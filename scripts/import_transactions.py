#!/usr/bin/env python3
"""Import a CSV bank export into the local fintrack data directory."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fintrack import config
from fintrack.calculations import calculate_budget_summary
from fintrack.csv_import import read_transactions_file
from fintrack.formatting import format_currency, format_date
from fintrack.models import ParsedTransaction
from fintrack.storage import FinanceStore, JsonFileRepository


def print_preview(parsed: List[ParsedTransaction], currency: str, limit: int = 10) -> None:
    for row in parsed[:limit]:
        marker = '*' if row.is_ai_categorized else ' '
        print(
            f"{format_date(row.date):>13}  {row.type:<7} {row.category:<15}{marker} "
            f"{format_currency(row.amount, currency):>12}  {row.description}"
        )
    if len(parsed) > limit:
        print(f"... and {len(parsed) - limit} more")


def main(path: Path, data_dir: Optional[Path] = None, dry_run: bool = False) -> int:
    config.configure_logging()
    store = FinanceStore(JsonFileRepository(data_dir))
    currency = store.settings().currency

    try:
        parsed = read_transactions_file(path)
    except (OSError, ValueError) as exc:
        print(f"Import failed: {exc}", file=sys.stderr)
        return 1

    print(f"Parsed {len(parsed)} transactions from {path.name} (* = auto-categorized)")
    print_preview(parsed, currency)

    if dry_run:
        print("Dry run, nothing saved.")
        return 0

    created = store.import_transactions(parsed)
    summary = calculate_budget_summary(store.all_transactions())
    print(f"\nSaved {len(created)} transactions.")
    print(
        f"Totals: income {format_currency(summary.total_income, currency)}, "
        f"expenses {format_currency(summary.total_expenses, currency)}, "
        f"balance {format_currency(summary.balance, currency)}"
    )
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Import transactions from a CSV export.')
    parser.add_argument('path', type=Path, help='CSV or TXT file to import')
    parser.add_argument('--data-dir', type=Path, default=None, help='Override the data directory')
    parser.add_argument('--dry-run', action='store_true', help='Parse and preview without saving')
    args = parser.parse_args()
    sys.exit(main(args.path, data_dir=args.data_dir, dry_run=args.dry_run))
