"""Budget evaluation against a monthly report.

This module joins the per-category spend of a :class:`MonthlyReport` with the
budget rows configured for the same month and produces one
:class:`BudgetLine` per category, plus the whole-ledger ``_GLOBAL_`` line.
A category with spend but no budget is shown with a zero limit ("no limit")
and is never flagged as over.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Union

import pandas as pd

from .config import GLOBAL_BUDGET_KEY
from .models import CENT, ZERO, Budget, BudgetLine, MonthlyReport


def utilization(spent: Decimal, limit: Decimal) -> Decimal:
    """Spend as a percentage of the limit; 0 when there is no limit."""
    if limit <= 0:
        return ZERO
    return (spent / limit * 100).quantize(CENT, rounding=ROUND_HALF_UP)


def build_line(category: str, limit: Decimal, spent: Decimal) -> BudgetLine:
    return BudgetLine(
        category=category,
        limit=limit,
        spent=spent,
        utilization_pct=utilization(spent, limit),
        is_over_limit=limit > 0 and spent > limit,
        is_global=category == GLOBAL_BUDGET_KEY,
    )


BudgetLike = Union[Budget, Mapping[str, Any]]


def limits_for_month(budgets: Iterable[BudgetLike], month: str) -> Dict[str, Decimal]:
    """Budget amounts keyed by category for one month; later rows replace earlier ones.

    Rows may be :class:`Budget` objects or plain mappings with ``category``,
    ``month`` and ``amount`` keys.
    """
    limits: Dict[str, Decimal] = {}
    for row in budgets:
        budget = row if isinstance(row, Budget) else Budget.from_record(row)
        if budget.month == month:
            limits[budget.category] = budget.amount
    return limits


def evaluate_budgets(report: MonthlyReport, budgets: Iterable[BudgetLike]) -> List[BudgetLine]:
    """Evaluate every budget line for the report's month.

    Args:
        report: Output of :func:`compute_monthly_report`.
        budgets: Budget rows; rows for other months are ignored.

    Returns:
        The ``_GLOBAL_`` line first, then category lines sorted by name. The
        global line's spend is the sum of all category spend, so it overlaps
        with the category lines on purpose.
    """
    limits = limits_for_month(budgets, report.month)

    global_spent = sum(report.per_category_spend.values(), ZERO)
    lines = [build_line(GLOBAL_BUDGET_KEY, limits.pop(GLOBAL_BUDGET_KEY, ZERO), global_spent)]

    categories = set(limits) | set(report.per_category_spend)
    for category in sorted(categories, key=lambda name: (name.casefold(), name)):
        lines.append(build_line(
            category,
            limits.get(category, ZERO),
            report.per_category_spend.get(category, ZERO),
        ))
    return lines


def budget_totals(lines: Iterable[BudgetLine]) -> Dict[str, Decimal]:
    """Overall limit/spent/remaining for the Home view.

    A configured global limit takes precedence; otherwise the limit is the sum
    of category limits.
    """
    lines = list(lines)
    global_line = next((line for line in lines if line.is_global), None)
    category_lines = [line for line in lines if not line.is_global]

    spent = global_line.spent if global_line else sum((line.spent for line in category_lines), ZERO)
    if global_line is not None and global_line.has_limit:
        limit = global_line.limit
    else:
        limit = sum((line.limit for line in category_lines), ZERO)
    return {
        'limit': limit,
        'spent': spent,
        'remaining': limit - spent,
        'utilization_pct': utilization(spent, limit),
    }


def budget_frame(lines: Iterable[BudgetLine]) -> pd.DataFrame:
    """Tabular view of budget lines for display."""
    rows = [
        {
            'Category': 'All spending' if line.is_global else line.category,
            'Limit': float(line.limit),
            'Spent': float(line.spent),
            'Remaining': float(line.remaining) if line.has_limit else None,
            'Percent Used': float(line.utilization_pct),
            'Status': 'No limit' if not line.has_limit else ('Over' if line.is_over_limit else 'Under'),
        }
        for line in lines
    ]
    return pd.DataFrame(rows, columns=['Category', 'Limit', 'Spent', 'Remaining', 'Percent Used', 'Status'])
