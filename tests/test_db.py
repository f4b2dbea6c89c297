from datetime import datetime
from decimal import Decimal

import pytest

from finance_tracker.config import DEFAULT_CATEGORIES, GLOBAL_BUDGET_KEY
from finance_tracker.db import LedgerStore
from finance_tracker.exceptions import NotFoundError, PermissionDeniedError, StorageError, ValidationError
from finance_tracker.models import Transaction


def _add(store, amount, category, when, txn_type='expense', user_id='u1'):
    txn = Transaction(amount=amount, category=category, date=when, type=txn_type)
    return store.add_transaction(txn, user_id=user_id)


def test_new_database_is_seeded_with_system_categories(store):
    categories = store.list_categories('u1')
    assert len(categories) == len(DEFAULT_CATEGORIES)
    assert all(category.is_system for category in categories)
    names = {category.name for category in categories}
    assert {'Food', 'Salary'} <= names


def test_reopening_does_not_duplicate_seed_rows(tmp_path):
    path = tmp_path / 'ledger.db'
    LedgerStore(path).list_categories('u1')
    assert len(LedgerStore(path).list_categories('u1')) == len(DEFAULT_CATEGORIES)


def test_user_categories_are_private(store):
    store.add_category('u1', 'Pets', 'expense')
    assert 'Pets' in {c.name for c in store.list_categories('u1')}
    assert 'Pets' not in {c.name for c in store.list_categories('u2')}


def test_duplicate_category_is_rejected(store):
    store.add_category('u1', 'Pets')
    with pytest.raises(ValidationError):
        store.add_category('u1', 'Pets')
    with pytest.raises(ValidationError):
        store.add_category('u1', 'Food', 'expense')
    # same name with the other type is a different category
    assert store.add_category('u1', 'Pets', 'income').type == 'income'


def test_category_delete_rules(store):
    own = store.add_category('u1', 'Pets')
    system = next(c for c in store.list_categories('u1') if c.name == 'Food')

    with pytest.raises(PermissionDeniedError):
        store.delete_category('u1', system.id)
    with pytest.raises(PermissionDeniedError):
        store.delete_category('u2', own.id)
    with pytest.raises(NotFoundError):
        store.delete_category('u1', 9999)

    store.delete_category('u1', own.id)
    assert 'Pets' not in {c.name for c in store.list_categories('u1')}


def test_transactions_round_trip_exact_amounts(store):
    saved = _add(store, '19.99', 'Food', datetime(2024, 3, 4, 12, 30))
    assert saved.id is not None
    assert saved.amount == Decimal('19.99')
    assert saved.date == datetime(2024, 3, 4, 12, 30)
    assert saved.user_id == 'u1'
    assert saved.created_at is not None


def test_legacy_rows_keep_a_missing_type(store):
    saved = _add(store, 100, 'Salary', datetime(2024, 3, 1), txn_type=None)
    assert saved.type is None


def test_list_transactions_filters_and_orders(store):
    _add(store, 1, 'Food', datetime(2024, 2, 29, 23, 59))
    _add(store, 2, 'Food', datetime(2024, 3, 1))
    _add(store, 3, 'Transport', datetime(2024, 3, 15))
    _add(store, 4, 'Food', datetime(2024, 3, 31, 23, 59, 59, 999999))
    _add(store, 5, 'Food', datetime(2024, 4, 1))
    _add(store, 6, 'Food', datetime(2024, 3, 10), user_id='u2')

    march = store.list_transactions(
        'u1', start=datetime(2024, 3, 1), end=datetime(2024, 3, 31, 23, 59, 59, 999999)
    )
    assert [t.amount for t in march] == [Decimal('4.00'), Decimal('3.00'), Decimal('2.00')]

    food = store.list_transactions('u1', category='Food')
    assert [t.amount for t in food] == [Decimal('5.00'), Decimal('4.00'), Decimal('2.00'), Decimal('1.00')]


def test_update_and_delete_transaction(store):
    saved = _add(store, 10, 'Food', datetime(2024, 3, 4))
    assert store.update_transaction(saved.id, amount='12.5', category='Transport', description=' bus ')
    updated = store.get_transaction(saved.id)
    assert updated.amount == Decimal('12.50')
    assert updated.category == 'Transport'
    assert updated.description == 'bus'

    assert not store.update_transaction(saved.id)
    assert not store.update_transaction(9999, amount=1)
    with pytest.raises(ValidationError):
        store.update_transaction(saved.id, amount=-1)

    assert store.delete_transaction(saved.id)
    assert not store.delete_transaction(saved.id)
    with pytest.raises(NotFoundError):
        store.get_transaction(saved.id)


def test_invalid_transactions_are_not_stored(store):
    with pytest.raises(ValidationError):
        _add(store, 10, '  ', datetime(2024, 3, 4))
    with pytest.raises(ValidationError):
        store.add_transaction(Transaction(amount=10, category='Food', date=datetime(2024, 3, 4)))
    assert store.list_transactions('u1') == []


def test_replace_budget_upserts(store):
    store.replace_budget('u1', 'Food', '2024-03', 400)
    store.replace_budget('u1', 'Food', '2024-03', '450.25')
    store.replace_budget('u1', GLOBAL_BUDGET_KEY, '2024-03', 2000)
    store.replace_budget('u1', 'Food', '2024-04', 100)

    march = store.list_budgets('u1', '2024-03')
    by_category = {budget.category: budget.amount for budget in march}
    assert by_category == {'Food': Decimal('450.25'), GLOBAL_BUDGET_KEY: Decimal('2000.00')}
    assert store.list_budgets('u2', '2024-03') == []


def test_replace_budget_validates(store):
    with pytest.raises(ValidationError):
        store.replace_budget('u1', 'Food', '2024-13', 100)
    with pytest.raises(ValidationError):
        store.replace_budget('u1', 'Food', '2024-03', 0)


def test_delete_budget(store):
    store.replace_budget('u1', 'Food', '2024-03', 400)
    assert store.delete_budget('u1', 'Food', '2024-03')
    assert store.list_budgets('u1', '2024-03') == []


def test_goal_ownership(store):
    goal = store.create_goal('u1', 'Trip', 1200)
    assert [g.name for g in store.list_goals('u1')] == ['Trip']
    assert store.list_goals('u2') == []

    with pytest.raises(PermissionDeniedError):
        store.delete_goal(goal.id, user_id='u2')
    assert store.delete_goal(goal.id, user_id='u1')
    with pytest.raises(NotFoundError):
        store.get_goal(goal.id)


def test_goal_creation_is_validated(store):
    with pytest.raises(ValidationError):
        store.create_goal('u1', '  ', 100)
    with pytest.raises(ValidationError):
        store.create_goal('u1', 'Trip', 0)
    with pytest.raises(ValidationError):
        store.create_goal('u1', 'Trip', 100, -5)


def test_unusable_database_path_raises_storage_error(tmp_path):
    directory = tmp_path / 'not-a-file'
    directory.mkdir()
    with pytest.raises(StorageError):
        LedgerStore(directory).list_categories('u1')
