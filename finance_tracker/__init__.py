"""Top‑level package for the Finance Tracker.

The primary modules are:

* ``periods`` – calendar-month boundaries
* ``classifier`` – income/expense resolution for ledger rows
* ``aggregation`` – monthly totals and per-category spend
* ``budgets`` – budget utilization and overage detection
* ``goals`` – savings goal progress
* ``db`` – the SQLite ledger store
* ``views`` – per-view loaders that fetch and aggregate

To run the dashboard from the command line you can execute:

```bash
python run_dashboard.py
```
"""

from .aggregation import compute_monthly_report, monthly_trend
from .budgets import evaluate_budgets
from .goals import add_to_goal, compute_goal_progress, set_goal_amount
from .periods import resolve_month

__all__ = [
    "compute_monthly_report",
    "monthly_trend",
    "evaluate_budgets",
    "compute_goal_progress",
    "add_to_goal",
    "set_goal_amount",
    "resolve_month",
]
