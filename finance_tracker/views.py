"""Per-view data loading.

Each loader issues the independent reads its view needs in parallel and only
runs the aggregation once every read has come back.  If any read fails the
whole view fails with the store's error; no partial figures are produced.
Nothing is cached, every call recomputes from the current ledger.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from .aggregation import compute_monthly_report
from .budgets import budget_totals, evaluate_budgets
from .classifier import build_category_type_map, classify
from .config import MAX_WORKERS
from .db import LedgerStore
from .goals import goals_progress
from .models import Budget, BudgetLine, Category, GoalProgress, MonthlyReport, Transaction
from .periods import resolve_month

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


@dataclass
class HomeView:
    report: MonthlyReport
    totals: Dict[str, Decimal]
    recent: List[Transaction] = field(default_factory=list)
    category_types: Dict[str, str] = field(default_factory=dict)

    def flow(self, transaction: Transaction) -> str:
        """Income or expense, resolved the same way the report resolves it."""
        return classify(transaction, self.category_types)


@dataclass
class BudgetsView:
    report: MonthlyReport
    lines: List[BudgetLine]
    categories: List[Category]
    budgets: List[Budget]


@dataclass
class SavingsView:
    report: MonthlyReport
    goals: List[GoalProgress]


@dataclass
class TransactionsView:
    transactions: List[Transaction]
    categories: List[Category]
    category_types: Dict[str, str] = field(default_factory=dict)

    def flow(self, transaction: Transaction) -> str:
        return classify(transaction, self.category_types)


def fetch_all(requests: Dict[str, Callable[[], Any]], max_workers: Optional[int] = None) -> Dict[str, Any]:
    """Run independent reads concurrently and wait for all of them.

    The first failure (in request order) is re-raised after every read has
    finished, so callers never see a partially loaded view.
    """
    workers = max(1, min(max_workers or MAX_WORKERS, len(requests)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {name: pool.submit(fn) for name, fn in requests.items()}
    results: Dict[str, Any] = {}
    for name, future in futures.items():
        try:
            results[name] = future.result()
        except Exception:
            logger.exception("Failed to load %s", name)
            raise
    return results


def _month_reads(store: LedgerStore, user_id: str, month: str) -> Dict[str, Callable[[], Any]]:
    period = resolve_month(month)
    return {
        'transactions': lambda: store.list_transactions(user_id, period.start, period.end),
        'categories': lambda: store.list_categories(user_id),
    }


def load_home_view(store: LedgerStore, user_id: str, month: Optional[str] = None) -> HomeView:
    """Spend, overall limit and the latest transactions for one month."""
    period = resolve_month(month)
    reads = _month_reads(store, user_id, period.month)
    reads['budgets'] = lambda: store.list_budgets(user_id, period.month)
    data = fetch_all(reads)

    report = compute_monthly_report(data['transactions'], data['categories'], period.month)
    lines = evaluate_budgets(report, data['budgets'])
    return HomeView(
        report=report,
        totals=budget_totals(lines),
        recent=data['transactions'][:RECENT_LIMIT],
        category_types=build_category_type_map(data['categories']),
    )


def load_budgets_view(store: LedgerStore, user_id: str, month: Optional[str] = None) -> BudgetsView:
    period = resolve_month(month)
    reads = _month_reads(store, user_id, period.month)
    reads['budgets'] = lambda: store.list_budgets(user_id, period.month)
    data = fetch_all(reads)

    report = compute_monthly_report(data['transactions'], data['categories'], period.month)
    return BudgetsView(
        report=report,
        lines=evaluate_budgets(report, data['budgets']),
        categories=data['categories'],
        budgets=data['budgets'],
    )


def load_savings_view(store: LedgerStore, user_id: str, month: Optional[str] = None) -> SavingsView:
    period = resolve_month(month)
    reads = _month_reads(store, user_id, period.month)
    reads['goals'] = lambda: store.list_goals(user_id)
    data = fetch_all(reads)

    report = compute_monthly_report(data['transactions'], data['categories'], period.month)
    return SavingsView(report=report, goals=goals_progress(data['goals']))


def load_transactions_view(
    store: LedgerStore,
    user_id: str,
    month: Optional[str] = None,
    category: Optional[str] = None,
) -> TransactionsView:
    """Transactions list with optional month and category filters."""
    period = resolve_month(month) if month else None
    data = fetch_all({
        'transactions': lambda: store.list_transactions(
            user_id,
            period.start if period else None,
            period.end if period else None,
            category,
        ),
        'categories': lambda: store.list_categories(user_id),
    })
    return TransactionsView(
        transactions=data['transactions'],
        categories=data['categories'],
        category_types=build_category_type_map(data['categories']),
    )
