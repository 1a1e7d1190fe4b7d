"""Record types shared by the parsers, engines and storage layer.

Persisted records (transactions, bills, budgets, settings) know how to
convert themselves to and from plain JSON-compatible dictionaries. The
remaining classes are derived, ephemeral results that are rebuilt on
every computation pass.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional

from .formatting import normalize_currency

TRANSACTION_TYPES = ('income', 'expense', 'transfer', 'withdrawal')
BILL_STATUSES = ('pending', 'upcoming', 'paid', 'overdue')
RECURRING_PERIODS = ('monthly', 'weekly', 'yearly')


def parse_date(value: Any) -> date:
    """Coerce an ISO ``YYYY-MM-DD`` string (or a date) into a ``date``."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _validate_amount(amount: float) -> float:
    amount = float(amount)
    if not math.isfinite(amount):
        raise ValueError(f"Amount must be a finite number, got {amount}")
    if amount < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")
    return amount


@dataclass
class TransactionDraft:
    """A transaction that has not been persisted yet (no id)."""
    type: str
    category: str
    amount: float
    date: date
    is_forecast: bool = False
    is_ai_categorized: bool = False

    def __post_init__(self) -> None:
        if self.type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type '{self.type}'")
        self.amount = _validate_amount(self.amount)
        self.date = parse_date(self.date)


@dataclass
class Transaction:
    id: str
    type: str
    category: str
    amount: float
    date: date
    is_forecast: bool = False
    is_ai_categorized: bool = False

    def __post_init__(self) -> None:
        if self.type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type '{self.type}'")
        self.amount = _validate_amount(self.amount)
        self.date = parse_date(self.date)

    @classmethod
    def from_draft(cls, draft: TransactionDraft, transaction_id: str) -> 'Transaction':
        return cls(id=transaction_id, **asdict(draft))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['date'] = self.date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=str(data['id']),
            type=data['type'],
            category=data.get('category') or 'Other',
            amount=data['amount'],
            date=parse_date(data['date']),
            is_forecast=bool(data.get('is_forecast', False)),
            is_ai_categorized=bool(data.get('is_ai_categorized', False)),
        )


@dataclass
class Bill:
    """A bill with a stored status and a separate paid flag.

    ``status`` is the stored tri-state (plus ``upcoming``) that may be
    stale; ``paid`` is the persisted boolean used by the bill status
    summary. Recurrence fields are metadata only.
    """
    id: str
    name: str
    amount: float
    due_date: date
    category: str
    status: str = 'pending'
    paid: bool = False
    is_recurring: bool = False
    recurring_period: Optional[str] = None

    def __post_init__(self) -> None:
        self.amount = _validate_amount(self.amount)
        self.due_date = parse_date(self.due_date)
        if self.status not in BILL_STATUSES:
            raise ValueError(f"Unknown bill status '{self.status}'")
        if self.recurring_period is not None and self.recurring_period not in RECURRING_PERIODS:
            raise ValueError(f"Unknown recurring period '{self.recurring_period}'")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['due_date'] = self.due_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Bill':
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            amount=data['amount'],
            due_date=parse_date(data['due_date']),
            category=data.get('category') or 'Other',
            status=data.get('status', 'pending'),
            paid=bool(data.get('paid', False)),
            is_recurring=bool(data.get('is_recurring', False)),
            recurring_period=data.get('recurring_period'),
        )


@dataclass
class Budget:
    category: str
    limit: float

    def __post_init__(self) -> None:
        if not isinstance(self.category, str) or not self.category.strip():
            raise ValueError(f"Budget category must be a non-empty string, got {self.category!r}")
        self.limit = _validate_amount(self.limit)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Budget':
        return cls(category=data['category'], limit=data['limit'])


@dataclass
class Settings:
    currency: str = 'USD'

    def __post_init__(self) -> None:
        self.currency = normalize_currency(self.currency)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Settings':
        merged = cls().to_dict()
        merged.update({k: v for k, v in data.items() if k in merged})
        return cls(**merged)


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclass
class CategorizationResult:
    category: str
    confidence: str  # high | medium | low
    method: str  # keyword | amount | default


@dataclass
class ParsedTransaction:
    """A candidate transaction produced by the CSV parser."""
    date: date
    description: str
    amount: float
    type: str  # income | expense
    category: str
    is_ai_categorized: bool = False

    def to_draft(self) -> TransactionDraft:
        return TransactionDraft(
            type=self.type,
            category=self.category,
            amount=self.amount,
            date=self.date,
            is_ai_categorized=self.is_ai_categorized,
        )


@dataclass
class BudgetSummary:
    total_income: float
    total_expenses: float
    balance: float
    percentage: float
    status: str  # good | warning | danger


@dataclass
class CategorySpending:
    category: str
    amount: float
    percentage: float


@dataclass
class CashFlowDay:
    date: date
    income: float
    expenses: float
    net: float


@dataclass
class WeeklyCashFlow:
    week_start: date
    label: str
    income: float
    expenses: float
    net: float


@dataclass
class FinancialRatio:
    name: str
    value: float
    target: float
    status: str  # good | warning | bad
    description: str
    tip: str


@dataclass
class BudgetStatus:
    category: str
    limit: float
    spent: float
    percentage: float
    status: str  # good | warning | danger


@dataclass
class CategorizedBill:
    bill: Bill
    status: str  # paid | unpaid | overdue | upcoming
    days_until_due: int

    @property
    def id(self) -> str:
        return self.bill.id

    @property
    def name(self) -> str:
        return self.bill.name

    @property
    def amount(self) -> float:
        return self.bill.amount

    @property
    def due_date(self) -> date:
        return self.bill.due_date


@dataclass
class BillStatusSummary:
    total: float
    paid: float
    unpaid: float
    overdue: float
    upcoming: float
    outstanding: float
    categorized: List[CategorizedBill] = field(default_factory=list)


@dataclass
class UpcomingBillsAlert:
    count: int
    total: float


@dataclass
class Insight:
    id: str
    type: str  # danger | warning | success | tip
    title: str
    message: str
    icon: str
    actionable: bool


@dataclass
class AIInsight:
    id: str
    type: str  # health | optimization | pattern | anomaly | prediction
    title: str
    message: str
    icon: str
    severity: str  # high | medium | low
    actionable: bool


@dataclass
class ForecastPrediction:
    category: str
    predicted_amount: float


def copy_bill(bill: Bill, **changes: Any) -> Bill:
    """Return a copy of ``bill`` with ``changes`` applied (re-validated)."""
    return replace(bill, **changes)
