#!/usr/bin/env python3
"""Print the monthly report, budget lines and goal progress for a user."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finance_tracker.aggregation import report_frame
from finance_tracker.budgets import budget_frame
from finance_tracker.config import DEFAULT_USER_ID, configure_logging
from finance_tracker.db import LedgerStore
from finance_tracker.exceptions import FinanceTrackerError
from finance_tracker.formatting import format_currency, format_percent
from finance_tracker.views import load_budgets_view, load_savings_view


def main(user_id: str, month: Optional[str] = None, db_path: Optional[str] = None) -> int:
    store = LedgerStore(Path(db_path) if db_path else None)
    try:
        budgets = load_budgets_view(store, user_id, month)
        savings = load_savings_view(store, user_id, month)
    except FinanceTrackerError as exc:
        print(f"Could not build report: {exc}", file=sys.stderr)
        return 1

    report = budgets.report
    print(f"Report for {report.month} ({report.transaction_count} transactions)")
    print(f"  Income:       {format_currency(report.total_income)}")
    print(f"  Expense:      {format_currency(report.total_expense)}")
    print(f"  Net savings:  {format_currency(report.net_savings)}")
    print(f"  Savings rate: {format_percent(report.savings_rate)}")

    spend = report_frame(report)
    if not spend.empty:
        print("\nSpending by category:")
        print(spend.to_string(index=False))

    print("\nBudgets:")
    print(budget_frame(budgets.lines).to_string(index=False))

    if savings.goals:
        print("\nGoals:")
        for goal in savings.goals:
            print(
                f"  {goal.name}: {format_currency(goal.current_amount)} of "
                f"{format_currency(goal.target_amount)} ({format_percent(goal.progress_pct)})"
            )
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show the monthly finance report.')
    parser.add_argument('--month', help='Month as YYYY-MM (defaults to the current month)')
    parser.add_argument('--user', default=DEFAULT_USER_ID, help='User id to report on')
    parser.add_argument('--db', help='Path to the ledger database')
    parser.add_argument('--log-level', default=None, help='Logging level (DEBUG, INFO, ...)')
    args = parser.parse_args()
    configure_logging(args.log_level)
    sys.exit(main(args.user, args.month, args.db))
