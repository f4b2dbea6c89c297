"""Domain records exchanged between the store, the engine and the views.

Money is always carried as :class:`decimal.Decimal` with two places.  The
helpers at the top of the module convert between that representation and
integer minor units, which is what the store persists and what pandas sums.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

import pandas as pd

from .config import GLOBAL_BUDGET_KEY, MINOR_UNITS

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Coerce ``value`` to a two-place Decimal.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal('0.10')``
    rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Not a monetary value: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a monetary value: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Any) -> int:
    return int(to_money(value) * MINOR_UNITS)


def from_cents(cents: Any) -> Decimal:
    return (Decimal(int(cents)) / MINOR_UNITS).quantize(CENT)


def _to_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    ts = pd.to_datetime(value)
    return ts.to_pydatetime()


@dataclass(frozen=True)
class Transaction:
    amount: Decimal
    category: str
    date: datetime
    type: Optional[str] = None  # None on rows created before the type column existed
    description: Optional[str] = None
    id: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, 'amount', to_money(self.amount))
        object.__setattr__(self, 'date', _to_timestamp(self.date))
        object.__setattr__(self, 'created_at', _to_timestamp(self.created_at))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Transaction':
        """Build a transaction from a plain mapping (e.g. a JSON row)."""
        return cls(
            amount=record['amount'],
            category=record.get('category') or '',
            date=record.get('date'),
            type=record.get('type'),
            description=record.get('description'),
            id=record.get('id'),
            user_id=record.get('user_id'),
            created_at=record.get('created_at'),
        )


@dataclass(frozen=True)
class Category:
    name: str
    type: str
    id: Optional[int] = None
    user_id: Optional[str] = None

    @property
    def is_system(self) -> bool:
        """System categories are shared across users and cannot be deleted."""
        return self.user_id is None


@dataclass(frozen=True)
class Budget:
    category: str
    month: str
    amount: Decimal
    id: Optional[int] = None
    user_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, 'amount', to_money(self.amount))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Budget':
        return cls(
            category=record['category'],
            month=record['month'],
            amount=record['amount'],
            id=record.get('id'),
            user_id=record.get('user_id'),
        )

    @property
    def is_global(self) -> bool:
        return self.category == GLOBAL_BUDGET_KEY


@dataclass(frozen=True)
class SavingsGoal:
    name: str
    target_amount: Decimal
    current_amount: Decimal = ZERO
    id: Optional[int] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, 'target_amount', to_money(self.target_amount))
        object.__setattr__(self, 'current_amount', to_money(self.current_amount))
        object.__setattr__(self, 'created_at', _to_timestamp(self.created_at))


@dataclass(frozen=True)
class MonthlyReport:
    """Derived figures for one calendar month. Never persisted."""

    month: str
    period_start: datetime
    period_end: datetime
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    net_savings: Decimal = ZERO
    per_category_spend: Dict[str, Decimal] = field(default_factory=dict)
    transaction_count: int = 0

    @property
    def savings_rate(self) -> Decimal:
        """Net savings as a percentage of income (0 when there is no income)."""
        if self.total_income <= 0:
            return ZERO
        return (self.net_savings / self.total_income * 100).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BudgetLine:
    category: str
    limit: Decimal
    spent: Decimal
    utilization_pct: Decimal
    is_over_limit: bool
    is_global: bool = False

    @property
    def remaining(self) -> Decimal:
        return self.limit - self.spent

    @property
    def has_limit(self) -> bool:
        return self.limit > 0


@dataclass(frozen=True)
class GoalProgress:
    goal_id: Optional[int]
    name: str
    target_amount: Decimal
    current_amount: Decimal
    progress_pct: Decimal

    @property
    def remaining(self) -> Decimal:
        return max(self.target_amount - self.current_amount, ZERO)

    @property
    def is_complete(self) -> bool:
        return self.target_amount > 0 and self.current_amount >= self.target_amount
