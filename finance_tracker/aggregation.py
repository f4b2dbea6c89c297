"""Monthly aggregation of the transaction ledger.

The functions here are pure: they take the rows a view has already fetched
and return derived figures without touching storage or keeping state between
calls.  Amounts are summed as integer cents in pandas and converted back to
two-place Decimals, so repeated recomputation never drifts.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from .classifier import UNCATEGORIZED, build_category_type_map, classify_frame, normalize_category
from .config import EXPENSE, INCOME
from .models import CENT, ZERO, Category, MonthlyReport, Transaction, from_cents, to_cents
from .periods import MonthPeriod, resolve_month, wall_clock

__all__ = [
    'UNCATEGORIZED',
    'compute_monthly_report',
    'monthly_trend',
    'report_frame',
    'transactions_frame',
]

TransactionLike = Union[Transaction, Mapping[str, Any]]
CategoryLike = Union[Category, Mapping[str, Any]]

FRAME_COLUMNS = ['id', 'date', 'category', 'type', 'description', 'amount_cents']


def transactions_frame(transactions: Iterable[TransactionLike]) -> pd.DataFrame:
    """Build the working DataFrame the aggregator reduces over."""
    rows: List[Transaction] = [
        txn if isinstance(txn, Transaction) else Transaction.from_record(txn)
        for txn in transactions
    ]
    if not rows:
        frame = pd.DataFrame(columns=FRAME_COLUMNS)
        frame['date'] = pd.to_datetime(frame['date'])
        frame['amount_cents'] = frame['amount_cents'].astype('int64')
        return frame

    frame = pd.DataFrame({
        'id': [txn.id for txn in rows],
        'date': pd.to_datetime([wall_clock(txn.date) for txn in rows]),
        'category': [normalize_category(txn.category) for txn in rows],
        'type': [txn.type for txn in rows],
        'description': [txn.description for txn in rows],
        'amount_cents': [to_cents(txn.amount) for txn in rows],
    })
    frame['amount_cents'] = frame['amount_cents'].astype('int64')
    return frame


def _in_period(frame: pd.DataFrame, period: MonthPeriod) -> pd.DataFrame:
    mask = (frame['date'] >= period.start) & (frame['date'] <= period.end)
    return frame[mask]


def _report_from_frame(
    frame: pd.DataFrame,
    category_types: Mapping[str, str],
    period: MonthPeriod,
) -> MonthlyReport:
    scoped = _in_period(frame, period)
    flow = classify_frame(scoped, category_types)

    income_cents = int(scoped.loc[flow == INCOME, 'amount_cents'].sum())
    expenses = scoped[flow == EXPENSE]
    by_category = expenses.groupby('category', sort=True, dropna=False)['amount_cents'].sum()
    per_category = {str(name): from_cents(cents) for name, cents in by_category.items()}
    expense_cents = int(expenses['amount_cents'].sum())

    return MonthlyReport(
        month=period.month,
        period_start=period.start,
        period_end=period.end,
        total_income=from_cents(income_cents),
        total_expense=from_cents(expense_cents),
        net_savings=from_cents(income_cents - expense_cents),
        per_category_spend=per_category,
        transaction_count=len(scoped),
    )


def compute_monthly_report(
    transactions: Iterable[TransactionLike],
    categories: Iterable[CategoryLike],
    month: Optional[str] = None,
) -> MonthlyReport:
    """Totals for one month.

    Args:
        transactions: Ledger rows; rows outside the month are ignored.
        categories: System and user categories, used for rows without a type.
        month: ``YYYY-MM`` token, defaults to the current month.

    Returns:
        MonthlyReport with income, expense, net savings and per-category spend.
        Income never contributes to per-category spend, and the per-category
        values always add up to ``total_expense``.

    Example:
        >>> report = compute_monthly_report(
        ...     [{'amount': 500, 'category': 'Food', 'type': 'expense', 'date': '2024-03-04'},
        ...      {'amount': 2000, 'category': 'Salary', 'type': 'income', 'date': '2024-03-01'}],
        ...     [], '2024-03')
        >>> report.net_savings
        Decimal('1500.00')
    """
    period = resolve_month(month)
    category_types = build_category_type_map(categories)
    return _report_from_frame(transactions_frame(transactions), category_types, period)


def monthly_trend(
    transactions: Iterable[TransactionLike],
    categories: Iterable[CategoryLike],
    months: Sequence[str],
) -> pd.DataFrame:
    """Income vs expense for several months, one zero-filled row per month.

    Returns:
        DataFrame with columns: Month, Income, Expense, Net Savings, Savings Rate
    """
    frame = transactions_frame(transactions)
    category_types = build_category_type_map(categories)
    rows = []
    for month in months:
        report = _report_from_frame(frame, category_types, resolve_month(month))
        rows.append({
            'Month': report.month,
            'Income': float(report.total_income),
            'Expense': float(report.total_expense),
            'Net Savings': float(report.net_savings),
            'Savings Rate': float(report.savings_rate),
        })
    return pd.DataFrame(rows, columns=['Month', 'Income', 'Expense', 'Net Savings', 'Savings Rate'])


def report_frame(report: MonthlyReport) -> pd.DataFrame:
    """Per-category spend of a report with each category's share of expense."""
    if not report.per_category_spend:
        return pd.DataFrame(columns=['Category', 'Spent', 'Share %'])

    rows = []
    for category, spent in report.per_category_spend.items():
        share = (
            (spent / report.total_expense * 100).quantize(CENT, rounding=ROUND_HALF_UP)
            if report.total_expense > 0
            else ZERO
        )
        rows.append({'Category': category, 'Spent': float(spent), 'Share %': float(share)})
    result = pd.DataFrame(rows)
    return result.sort_values(['Spent', 'Category'], ascending=[False, True]).reset_index(drop=True)
