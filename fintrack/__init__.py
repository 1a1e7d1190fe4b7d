"""Top-level package for fintrack.

A personal finance tracking engine. The primary modules are:

* ``categorizer`` / ``csv_import`` / ``quick_add`` turn raw input into
  transactions
* ``calculations`` derives budget summaries, cash flow and ratios
* ``bills`` derives bill statuses and due-soon alerts
* ``insights`` / ``forecast`` produce advisory records and predictions
* ``storage`` persists everything through a slot-based repository
* ``visualization`` builds Plotly figures for the aggregates

To import a bank export from the command line:

```bash
python scripts/import_transactions.py statement.csv
```
"""

from . import calculations  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
from .categorizer import categorize_transaction
from .csv_import import CSVParseError, UnsupportedFileTypeError, parse_csv, read_transactions_file
from .quick_add import parse_quick_add
from .storage import FinanceStore, InMemoryRepository, JsonFileRepository, new_id

__all__ = [
    "calculations",
    "visualization",
    "categorize_transaction",
    "parse_csv",
    "read_transactions_file",
    "CSVParseError",
    "UnsupportedFileTypeError",
    "parse_quick_add",
    "FinanceStore",
    "JsonFileRepository",
    "InMemoryRepository",
    "new_id",
]
