"""Savings goal progress."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Iterable, List

from .exceptions import ValidationError
from .models import CENT, ZERO, GoalProgress, SavingsGoal, to_money

if TYPE_CHECKING:
    from .db import LedgerStore

HUNDRED = Decimal('100.00')


def progress_pct(current: Decimal, target: Decimal) -> Decimal:
    """Completion percentage clamped to [0, 100]; 0 for a non-positive target."""
    if target <= 0:
        return ZERO
    pct = (current / target * 100).quantize(CENT, rounding=ROUND_HALF_UP)
    return min(max(pct, ZERO), HUNDRED)


def compute_goal_progress(goal: SavingsGoal) -> GoalProgress:
    return GoalProgress(
        goal_id=goal.id,
        name=goal.name,
        target_amount=goal.target_amount,
        current_amount=goal.current_amount,
        progress_pct=progress_pct(goal.current_amount, goal.target_amount),
    )


def goals_progress(goals: Iterable[SavingsGoal]) -> List[GoalProgress]:
    return [compute_goal_progress(goal) for goal in goals]


def set_goal_amount(store: 'LedgerStore', goal_id: int, absolute: Any) -> SavingsGoal:
    """Replace a goal's saved amount with ``absolute``.

    This is the low-level primitive: callers that want to add funds should use
    :func:`add_to_goal` so concurrent deposits are not overwritten.
    """
    try:
        amount = to_money(absolute)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    if amount < 0:
        raise ValidationError("Saved amount cannot be negative")
    store.set_goal_current_amount(goal_id, amount)
    return store.get_goal(goal_id)


def add_to_goal(store: 'LedgerStore', goal_id: int, delta: Any) -> SavingsGoal:
    """Add ``delta`` to a goal's saved amount and return the updated goal.

    The increment is applied by the store in a single statement, so two
    deposits made at the same time both land.
    """
    try:
        amount = to_money(delta)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    if amount == 0:
        raise ValidationError("Amount to add must not be zero")
    store.increment_goal_amount(goal_id, amount)
    return store.get_goal(goal_id)
