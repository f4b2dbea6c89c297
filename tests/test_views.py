from datetime import datetime
from decimal import Decimal

import pytest

from finance_tracker import views
from finance_tracker.config import GLOBAL_BUDGET_KEY
from finance_tracker.exceptions import StorageError
from finance_tracker.models import Transaction
from finance_tracker.views import (
    fetch_all,
    load_budgets_view,
    load_home_view,
    load_savings_view,
    load_transactions_view,
)


@pytest.fixture
def seeded_store(store):
    entries = [
        (2000, 'Salary', datetime(2024, 3, 1), 'income'),
        (500, 'Food', datetime(2024, 3, 4), 'expense'),
        (40, 'Transport', datetime(2024, 3, 6), None),
        (60, 'Food', datetime(2024, 2, 20), 'expense'),
    ]
    for amount, category, when, txn_type in entries:
        store.add_transaction(
            Transaction(amount=amount, category=category, date=when, type=txn_type), user_id='u1'
        )
    store.replace_budget('u1', 'Food', '2024-03', 400)
    store.replace_budget('u1', GLOBAL_BUDGET_KEY, '2024-03', 1000)
    return store


def test_home_view(seeded_store):
    view = load_home_view(seeded_store, 'u1', '2024-03')
    assert view.report.total_income == Decimal('2000.00')
    assert view.report.total_expense == Decimal('540.00')
    assert view.totals['limit'] == Decimal('1000.00')
    assert view.totals['remaining'] == Decimal('460.00')
    assert [t.category for t in view.recent] == ['Transport', 'Food', 'Salary']


def test_budgets_view(seeded_store):
    view = load_budgets_view(seeded_store, 'u1', '2024-03')
    assert view.lines[0].is_global
    food = next(line for line in view.lines if line.category == 'Food')
    assert food.utilization_pct == Decimal('125.00')
    assert food.is_over_limit
    assert {b.category for b in view.budgets} == {'Food', GLOBAL_BUDGET_KEY}
    assert any(c.name == 'Salary' for c in view.categories)


def test_savings_view(seeded_store):
    goal = seeded_store.create_goal('u1', 'Emergency fund', 10000, 3000)
    view = load_savings_view(seeded_store, 'u1', '2024-03')
    assert view.report.net_savings == Decimal('1460.00')
    assert [(g.goal_id, g.progress_pct) for g in view.goals] == [(goal.id, Decimal('30.00'))]


def test_transactions_view_filters(seeded_store):
    assert len(load_transactions_view(seeded_store, 'u1').transactions) == 4
    march = load_transactions_view(seeded_store, 'u1', month='2024-03')
    assert len(march.transactions) == 3
    food = load_transactions_view(seeded_store, 'u1', month='2024-03', category='Food')
    assert [t.amount for t in food.transactions] == [Decimal('500.00')]


def test_failed_read_aborts_the_view(seeded_store, monkeypatch):
    def broken(*args, **kwargs):
        raise StorageError("disk on fire")

    calls = []
    monkeypatch.setattr(seeded_store, 'list_budgets', broken)
    monkeypatch.setattr(views, 'compute_monthly_report', lambda *a, **k: calls.append(a))

    with pytest.raises(StorageError):
        load_home_view(seeded_store, 'u1', '2024-03')
    assert calls == []


def test_fetch_all_waits_for_every_read():
    results = fetch_all({'a': lambda: 1, 'b': lambda: 2}, max_workers=2)
    assert results == {'a': 1, 'b': 2}


def test_views_classify_untyped_rows_through_categories(store):
    store.add_transaction(
        Transaction(amount=900, category='Salary', date=datetime(2024, 3, 2)), user_id='u1'
    )
    store.add_transaction(
        Transaction(amount=15, category='Food', date=datetime(2024, 3, 3)), user_id='u1'
    )

    home = load_home_view(store, 'u1', '2024-03')
    assert [(t.category, t.type, home.flow(t)) for t in home.recent] == [
        ('Food', None, 'expense'),
        ('Salary', None, 'income'),
    ]

    listing = load_transactions_view(store, 'u1', month='2024-03')
    assert [listing.flow(t) for t in listing.transactions] == ['expense', 'income']
