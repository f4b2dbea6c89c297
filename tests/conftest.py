from datetime import datetime

import pytest

from finance_tracker.db import LedgerStore
from finance_tracker.models import Category, Transaction


@pytest.fixture
def store(tmp_path):
    """A fresh ledger database per test."""
    return LedgerStore(tmp_path / 'ledger.db')


@pytest.fixture
def categories():
    return [
        Category(name='Food', type='expense'),
        Category(name='Transport', type='expense'),
        Category(name='Salary', type='income'),
    ]


@pytest.fixture
def march_ledger():
    return [
        Transaction(amount=500, category='Food', date=datetime(2024, 3, 4), type='expense'),
        Transaction(amount=2000, category='Salary', date=datetime(2024, 3, 1), type='income'),
    ]
