"""Income/expense classification for ledger rows.

Rows written before transactions carried their own ``type`` column only know
their category, so classification resolves in this order everywhere:

1. the transaction's explicit ``type`` when it is ``income`` or ``expense``;
2. the type of the transaction's category;
3. ``expense``.

Category names are compared after :func:`normalize_category`, so the row
path and the frame path always agree.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd

from .config import EXPENSE, TRANSACTION_TYPES
from .models import Category, Transaction

UNCATEGORIZED = 'Uncategorized'


def normalize_type(value: Any) -> Optional[str]:
    """Lower-case a type label; anything unrecognised counts as absent."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    label = str(value).strip().lower()
    return label if label in TRANSACTION_TYPES else None


def normalize_category(value: Any) -> str:
    """Trim a category name; a missing or blank name becomes ``Uncategorized``."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return UNCATEGORIZED
    name = str(value).strip()
    return name or UNCATEGORIZED


def build_category_type_map(categories: Iterable[Union[Category, Mapping[str, Any]]]) -> Dict[str, str]:
    """Map category name to type.

    Duplicate names are tolerated: a user-owned category beats a system one
    with the same name, and among equals the later row wins.
    """
    mapping: Dict[str, str] = {}
    owned: set = set()
    for category in categories:
        if isinstance(category, Mapping):
            raw_name, raw_type, user_id = category.get('name'), category.get('type'), category.get('user_id')
        else:
            raw_name, raw_type, user_id = category.name, category.type, category.user_id
        cat_type = normalize_type(raw_type)
        name = normalize_category(raw_name)
        if cat_type is None or not str(raw_name or '').strip():
            continue
        if user_id is None and name in owned:
            continue
        if user_id is not None:
            owned.add(name)
        mapping[name] = cat_type
    return mapping


def classify(
    transaction: Union[Transaction, Mapping[str, Any]],
    category_types: Mapping[str, str],
) -> str:
    if isinstance(transaction, Mapping):
        explicit, category = transaction.get('type'), transaction.get('category')
    else:
        explicit, category = transaction.type, transaction.category
    resolved = normalize_type(explicit)
    if resolved is not None:
        return resolved
    return category_types.get(normalize_category(category), EXPENSE)


def classify_frame(frame: pd.DataFrame, category_types: Mapping[str, str]) -> pd.Series:
    """Vectorised :func:`classify` over a frame with ``type`` and ``category`` columns."""
    if frame.empty:
        return pd.Series(dtype=object, index=frame.index)
    explicit = frame['type'].map(normalize_type) if 'type' in frame.columns else pd.Series(None, index=frame.index, dtype=object)
    looked_up = frame['category'].map(lambda name: category_types.get(normalize_category(name), EXPENSE))
    resolved = np.where(explicit.notna(), explicit, looked_up)
    return pd.Series(resolved, index=frame.index, dtype=object)
