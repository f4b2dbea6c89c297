"""Input validation for values submitted from forms and scripts.

Everything here raises :class:`ValidationError` so a bad submission is
rejected before it is stored or aggregated.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import pandas as pd

from .classifier import normalize_type
from .exceptions import ValidationError
from .models import Transaction, to_money
from .periods import validate_month, wall_clock

__all__ = [
    'parse_amount',
    'parse_date',
    'require_category',
    'require_type',
    'validate_month',
    'validate_transaction_input',
]


def parse_amount(value: Any) -> Decimal:
    """Convert textual or numeric amounts into a positive two-place Decimal.

    Accepts ``1234.5``, ``"1,234.50"`` and ``"$12"``.  Empty, non-numeric,
    NaN, zero and negative values are rejected.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Amount is required")
    if isinstance(value, bool):
        raise ValidationError(f"Invalid amount: {value!r}")
    if isinstance(value, str):
        cleaned = value.strip().replace(',', '')
        for symbol in ('$', '€', '£', '₹'):
            cleaned = cleaned.replace(symbol, '')
        value = cleaned.strip()
    try:
        amount = to_money(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    return amount


def parse_date(value: Any) -> datetime:
    """Parse a date or timestamp; strings like ``2024-03-05`` become local midnight."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Date is required")
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        raise ValidationError(f"Invalid date: {value!r}")
    ts = wall_clock(ts)
    return ts.to_pydatetime()


def require_category(name: Any) -> str:
    cleaned = str(name).strip() if name is not None else ''
    if not cleaned:
        raise ValidationError("Category is required")
    return cleaned


def require_type(value: Any) -> str:
    resolved = normalize_type(value)
    if resolved is None:
        raise ValidationError(f"Type must be 'income' or 'expense', got {value!r}")
    return resolved


def validate_transaction_input(
    amount: Any,
    category: Any,
    date: Any,
    txn_type: Optional[Any] = None,
    description: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Transaction:
    """Build a :class:`Transaction` from raw form input.

    ``txn_type`` may be omitted, in which case the transaction is classified
    by its category when aggregated.
    """
    resolved_type = require_type(txn_type) if txn_type not in (None, '') else None
    note = description.strip() if isinstance(description, str) and description.strip() else None
    return Transaction(
        amount=parse_amount(amount),
        category=require_category(category),
        date=parse_date(date),
        type=resolved_type,
        description=note,
        user_id=user_id,
    )
