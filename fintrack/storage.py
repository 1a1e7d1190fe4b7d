"""Persistence for transactions, bills, budgets and settings.

Storage is four independent slots, each loaded and saved as a whole.
``FinanceRepository`` defines the slot contract so the JSON-file store can
be swapped for the in-memory one in tests. ``FinanceStore`` runs the
reload, mutate, save cycle for every user action (last write wins).
"""

from __future__ import annotations

import json
import threading
import time
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar, Union

import structlog

from . import config
from .bills import refresh_bill_statuses
from .calculations import current_month_transactions
from .forecast import predictions_to_drafts
from .formatting import normalize_currency
from .models import (
    BILL_STATUSES,
    Bill,
    Budget,
    ForecastPrediction,
    ParsedTransaction,
    Settings,
    Transaction,
    TransactionDraft,
    copy_bill,
)

logger = structlog.get_logger()

T = TypeVar('T')

TRANSACTIONS_SLOT = 'transactions'
BILLS_SLOT = 'bills'
BUDGETS_SLOT = 'budgets'
SETTINGS_SLOT = 'settings'
SLOTS = (TRANSACTIONS_SLOT, BILLS_SLOT, BUDGETS_SLOT, SETTINGS_SLOT)

_id_lock = threading.Lock()
_last_id = 0


def new_id() -> str:
    """Return a millisecond-timestamp id, unique within this process.

    When the clock has not advanced since the previous call the value is
    bumped by one.
    """
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)


class FinanceRepository(ABC):
    """Slot-based storage contract.

    Implementations only move raw JSON-compatible payloads; record
    conversion and defaults for missing slots are handled here.
    """

    @abstractmethod
    def read_slot(self, slot: str) -> Optional[Any]:
        """Return the stored payload for ``slot`` or None when absent."""

    @abstractmethod
    def write_slot(self, slot: str, payload: Any) -> None:
        """Replace the stored payload for ``slot``."""

    def _load_records(self, slot: str, from_dict: Callable[[Dict[str, Any]], T]) -> List[T]:
        payload = self.read_slot(slot)
        if payload is None:
            return []
        if not isinstance(payload, list):
            logger.warning('storage_slot_malformed', slot=slot, payload_type=type(payload).__name__)
            return []
        records: List[T] = []
        for index, item in enumerate(payload):
            try:
                records.append(from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning('storage_record_skipped', slot=slot, index=index, error=str(exc))
        return records

    def load_transactions(self) -> List[Transaction]:
        return self._load_records(TRANSACTIONS_SLOT, Transaction.from_dict)

    def save_transactions(self, transactions: Iterable[Transaction]) -> None:
        self.write_slot(TRANSACTIONS_SLOT, [t.to_dict() for t in transactions])

    def load_bills(self) -> List[Bill]:
        return self._load_records(BILLS_SLOT, Bill.from_dict)

    def save_bills(self, bills: Iterable[Bill]) -> None:
        self.write_slot(BILLS_SLOT, [b.to_dict() for b in bills])

    def load_budgets(self) -> List[Budget]:
        return self._load_records(BUDGETS_SLOT, Budget.from_dict)

    def save_budgets(self, budgets: Iterable[Budget]) -> None:
        self.write_slot(BUDGETS_SLOT, [b.to_dict() for b in budgets])

    def load_settings(self) -> Settings:
        payload = self.read_slot(SETTINGS_SLOT)
        if not isinstance(payload, dict):
            return Settings()
        return Settings.from_dict(payload)

    def save_settings(self, settings: Settings) -> None:
        self.write_slot(SETTINGS_SLOT, settings.to_dict())


class JsonFileRepository(FinanceRepository):
    """One JSON file per slot inside ``data_dir``."""

    def __init__(self, data_dir: Union[str, Path, None] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR

    def slot_path(self, slot: str) -> Path:
        return self.data_dir / f"{slot}.json"

    def read_slot(self, slot: str) -> Optional[Any]:
        target = self.slot_path(slot)
        if not target.exists():
            return None
        try:
            with target.open('r', encoding='utf-8') as handle:
                return json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning('storage_slot_corrupt', slot=slot, path=str(target), error=str(exc))
            return None

    def write_slot(self, slot: str, payload: Any) -> None:
        target = self.slot_path(slot)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open('w', encoding='utf-8') as handle:
            json.dump(payload, handle, indent=2)


class InMemoryRepository(FinanceRepository):
    """Dict-backed repository; payloads are copied through JSON on write."""

    def __init__(self):
        self.slots: Dict[str, Any] = {}

    def read_slot(self, slot: str) -> Optional[Any]:
        if slot not in self.slots:
            return None
        return json.loads(self.slots[slot])

    def write_slot(self, slot: str, payload: Any) -> None:
        self.slots[slot] = json.dumps(payload)


class FinanceStore:
    """User-facing operations over a repository.

    Each mutation reloads the affected slot, changes a copy and writes the
    full slot back.

    Example:
        >>> store = FinanceStore(InMemoryRepository())
        >>> tx = store.add_transaction(parse_quick_add('coffee 4.50'))
        >>> [t.id for t in store.all_transactions()] == [tx.id]
        True
    """

    def __init__(self, repository: Optional[FinanceRepository] = None):
        self.repository = repository or JsonFileRepository()

    # -- transactions -------------------------------------------------------

    def all_transactions(self) -> List[Transaction]:
        return self.repository.load_transactions()

    def current_month_transactions(self, today: Optional[date] = None) -> List[Transaction]:
        return current_month_transactions(self.all_transactions(), today=today)

    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        return self.import_transactions([draft])[0]

    def import_transactions(
        self, items: Iterable[Union[TransactionDraft, ParsedTransaction]]
    ) -> List[Transaction]:
        """Persist drafts (or parsed CSV rows) in one reload/save cycle."""
        drafts = [item.to_draft() if isinstance(item, ParsedTransaction) else item for item in items]
        transactions = self.repository.load_transactions()
        created = [Transaction.from_draft(draft, new_id()) for draft in drafts]
        transactions.extend(created)
        self.repository.save_transactions(transactions)
        logger.info('transactions_added', count=len(created))
        return created

    def delete_transaction(self, transaction_id: str) -> None:
        transactions = self.repository.load_transactions()
        remaining = [t for t in transactions if t.id != transaction_id]
        if len(remaining) == len(transactions):
            raise KeyError(f"Transaction '{transaction_id}' not found")
        self.repository.save_transactions(remaining)
        logger.info('transaction_deleted', id=transaction_id)

    def apply_forecast(
        self, predictions: Iterable[ForecastPrediction], today: Optional[date] = None
    ) -> List[Transaction]:
        """Store predictions as forecast expenses dated next month."""
        return self.import_transactions(predictions_to_drafts(predictions, today=today))

    # -- bills --------------------------------------------------------------

    def bills(self, today: Optional[date] = None) -> List[Bill]:
        """Stored bills with their status re-validated against ``today``."""
        return refresh_bill_statuses(self.repository.load_bills(), today=today)

    def add_bill(
        self,
        name: str,
        amount: float,
        due_date: date,
        category: str,
        is_recurring: bool = False,
        recurring_period: Optional[str] = None,
    ) -> Bill:
        bill = Bill(
            id=new_id(),
            name=name,
            amount=amount,
            due_date=due_date,
            category=category,
            status='pending',
            is_recurring=is_recurring,
            recurring_period=recurring_period if is_recurring else None,
        )
        bills = self.repository.load_bills()
        bills.append(bill)
        self.repository.save_bills(bills)
        logger.info('bill_added', id=bill.id, name=name)
        return bill

    def _replace_bill(self, bill_id: str, **changes: Any) -> Bill:
        bills = self.repository.load_bills()
        for index, bill in enumerate(bills):
            if bill.id == bill_id:
                bills[index] = copy_bill(bill, **changes)
                self.repository.save_bills(bills)
                return bills[index]
        raise KeyError(f"Bill '{bill_id}' not found")

    def mark_bill_paid(self, bill_id: str) -> Bill:
        """Mark a bill paid. Recurring bills are not rolled forward."""
        bill = self._replace_bill(bill_id, status='paid', paid=True)
        logger.info('bill_paid', id=bill_id)
        return bill

    def update_bill_status(self, bill_id: str, status: str) -> Bill:
        if status not in BILL_STATUSES:
            raise ValueError(f"Unknown bill status '{status}'")
        return self._replace_bill(bill_id, status=status, paid=status == 'paid')

    def delete_bill(self, bill_id: str) -> None:
        bills = self.repository.load_bills()
        remaining = [b for b in bills if b.id != bill_id]
        if len(remaining) == len(bills):
            raise KeyError(f"Bill '{bill_id}' not found")
        self.repository.save_bills(remaining)
        logger.info('bill_deleted', id=bill_id)

    # -- budgets ------------------------------------------------------------

    def budgets(self) -> List[Budget]:
        return self.repository.load_budgets()

    def save_budgets(self, budgets: Iterable[Budget]) -> None:
        """Replace the whole budget set."""
        self.repository.save_budgets(list(budgets))

    def merge_budgets(self, updates: Iterable[Budget]) -> List[Budget]:
        """Insert or update budgets by category, keeping existing order."""
        merged: Dict[str, Budget] = {b.category: b for b in self.repository.load_budgets()}
        for budget in updates:
            merged[budget.category] = budget
        result = list(merged.values())
        self.repository.save_budgets(result)
        return result

    # -- settings -----------------------------------------------------------

    def settings(self) -> Settings:
        return self.repository.load_settings()

    def set_currency(self, code: str) -> Settings:
        settings = self.repository.load_settings()
        settings.currency = normalize_currency(code)
        self.repository.save_settings(settings)
        return settings
