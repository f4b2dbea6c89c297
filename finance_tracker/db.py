"""SQLite-backed ledger store.

The store is the persistence collaborator of the aggregation engine: it reads
and writes transactions, categories, budgets and savings goals and nothing
else.  Each call opens its own connection, so a store can be shared between
the threads a view loader uses to fetch in parallel.

Money is persisted as integer cents and timestamps as fixed-width local ISO
strings, so SQL range filters and increments are exact.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Optional

from .config import DB_PATH, DEFAULT_CATEGORIES, EXPENSE, ensure_data_directories
from .exceptions import NotFoundError, PermissionDeniedError, StorageError, ValidationError
from .models import Budget, Category, SavingsGoal, Transaction, from_cents, to_cents, to_money
from .periods import validate_month
from .validation import parse_amount, parse_date, require_category, require_type

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S.%f'

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    type TEXT NOT NULL CHECK (type IN ('income', 'expense')),
    user_id TEXT
);

CREATE UNIQUE INDEX IF NOT EXISTS ux_category_scope
ON categories (COALESCE(user_id, ''), name, type);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    amount_cents INTEGER NOT NULL CHECK (amount_cents > 0),
    category TEXT NOT NULL,
    type TEXT CHECK (type IS NULL OR type IN ('income', 'expense')),
    description TEXT,
    transaction_date TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_txn_user_date ON transactions (user_id, transaction_date);
CREATE INDEX IF NOT EXISTS ix_txn_category ON transactions (category);

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    category TEXT NOT NULL,
    month TEXT NOT NULL,
    amount_cents INTEGER NOT NULL CHECK (amount_cents > 0),
    UNIQUE (user_id, category, month)
);

CREATE TABLE IF NOT EXISTS goals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    target_cents INTEGER NOT NULL CHECK (target_cents > 0),
    current_cents INTEGER NOT NULL DEFAULT 0 CHECK (current_cents >= 0),
    created_at TEXT NOT NULL
);
"""

TRANSACTION_COLUMNS = "id, user_id, amount_cents, category, type, description, transaction_date, created_at"
GOAL_COLUMNS = "id, user_id, name, target_cents, current_cents, created_at"


def _to_db_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def _from_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.strptime(value, TIMESTAMP_FORMAT)


def _row_to_transaction(row: sqlite3.Row) -> Transaction:
    return Transaction(
        id=row['id'],
        user_id=row['user_id'],
        amount=from_cents(row['amount_cents']),
        category=row['category'],
        type=row['type'],
        description=row['description'],
        date=_from_db_timestamp(row['transaction_date']),
        created_at=_from_db_timestamp(row['created_at']),
    )


def _row_to_category(row: sqlite3.Row) -> Category:
    return Category(id=row['id'], name=row['name'], type=row['type'], user_id=row['user_id'])


def _row_to_budget(row: sqlite3.Row) -> Budget:
    return Budget(
        id=row['id'],
        user_id=row['user_id'],
        category=row['category'],
        month=row['month'],
        amount=from_cents(row['amount_cents']),
    )


def _row_to_goal(row: sqlite3.Row) -> SavingsGoal:
    return SavingsGoal(
        id=row['id'],
        user_id=row['user_id'],
        name=row['name'],
        target_amount=from_cents(row['target_cents']),
        current_amount=from_cents(row['current_cents']),
        created_at=_from_db_timestamp(row['created_at']),
    )


class LedgerStore:
    """Handles all ledger reads and writes against one SQLite file."""

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the store.

        Args:
            db_path: Optional custom database file. Defaults to DB_PATH from config.
        """
        self.db_path = Path(db_path) if db_path is not None else DB_PATH
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success and map sqlite errors to StorageError."""
        self._ensure_schema()
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as exc:
            raise StorageError(f"Could not open ledger database {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(f"Ledger database error: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        with self._schema_lock:
            if self._schema_ready:
                return
            if self.db_path == DB_PATH:
                ensure_data_directories()
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(str(self.db_path))
                try:
                    conn.executescript(SCHEMA_SQL)
                    conn.executemany(
                        "INSERT OR IGNORE INTO categories (name, type, user_id) VALUES (?, ?, NULL)",
                        DEFAULT_CATEGORIES,
                    )
                    conn.commit()
                finally:
                    conn.close()
            except sqlite3.Error as exc:
                raise StorageError(f"Could not initialise ledger database {self.db_path}: {exc}") from exc
            self._schema_ready = True
            logger.info("Ledger database ready at %s", self.db_path)

    # Transactions -----------------------------------------------------

    def list_transactions(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        category: Optional[str] = None,
    ) -> List[Transaction]:
        """Transactions for a user, newest first, optionally bounded by an inclusive date range."""
        where = ["user_id = ?"]
        params: List[Any] = [user_id]
        if start is not None:
            where.append("transaction_date >= ?")
            params.append(_to_db_timestamp(start))
        if end is not None:
            where.append("transaction_date <= ?")
            params.append(_to_db_timestamp(end))
        if category:
            where.append("category = ?")
            params.append(category)

        sql = (
            f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE {' AND '.join(where)} "
            "ORDER BY transaction_date DESC, id DESC"
        )
        with self.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_transaction(row) for row in rows]

    def get_transaction(self, transaction_id: int) -> Transaction:
        with self.connect() as conn:
            row = conn.execute(
                f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE id = ?", (transaction_id,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return _row_to_transaction(row)

    def add_transaction(self, transaction: Transaction, user_id: Optional[str] = None) -> Transaction:
        """Insert a validated transaction and return it with its new id."""
        owner = user_id or transaction.user_id
        if not owner:
            raise ValidationError("Transaction needs an owner")
        if transaction.amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        txn_type = require_type(transaction.type) if transaction.type is not None else None
        created_at = datetime.now()

        with self.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO transactions (user_id, amount_cents, category, type, description, "
                "transaction_date, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    owner,
                    to_cents(transaction.amount),
                    require_category(transaction.category),
                    txn_type,
                    transaction.description,
                    _to_db_timestamp(parse_date(transaction.date)),
                    _to_db_timestamp(created_at),
                ),
            )
            new_id = cursor.lastrowid
        logger.debug("Added transaction %s for user %s", new_id, owner)
        return self.get_transaction(new_id)

    def update_transaction(
        self,
        transaction_id: int,
        amount: Optional[Any] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
        transaction_date: Optional[Any] = None,
        txn_type: Optional[str] = None,
    ) -> bool:
        """Update the editable fields of a transaction.

        Returns True if a row was changed, False if nothing was given or the
        transaction does not exist.
        """
        updates = []
        params: List[Any] = []

        if amount is not None:
            updates.append("amount_cents = ?")
            params.append(to_cents(parse_amount(amount)))
        if category is not None:
            updates.append("category = ?")
            params.append(require_category(category))
        if description is not None:
            updates.append("description = ?")
            params.append(description.strip() or None)
        if transaction_date is not None:
            updates.append("transaction_date = ?")
            params.append(_to_db_timestamp(parse_date(transaction_date)))
        if txn_type is not None:
            updates.append("type = ?")
            params.append(require_type(txn_type))

        if not updates:
            return False

        params.append(transaction_id)
        with self.connect() as conn:
            cursor = conn.execute(f"UPDATE transactions SET {', '.join(updates)} WHERE id = ?", params)
            changed = cursor.rowcount > 0
        logger.debug("Updated transaction %s: %s", transaction_id, changed)
        return changed

    def delete_transaction(self, transaction_id: int) -> bool:
        with self.connect() as conn:
            cursor = conn.execute("DELETE FROM transactions WHERE id = ?", (transaction_id,))
            return cursor.rowcount > 0

    # Categories -------------------------------------------------------

    def list_categories(self, user_id: str) -> List[Category]:
        """System categories plus the user's own, ordered by name."""
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT id, name, type, user_id FROM categories "
                "WHERE user_id IS NULL OR user_id = ? ORDER BY name COLLATE NOCASE, id",
                (user_id,),
            ).fetchall()
        return [_row_to_category(row) for row in rows]

    def add_category(self, user_id: str, name: str, category_type: str = EXPENSE) -> Category:
        """Create a user-owned category.

        Raises:
            ValidationError: If the name is empty or the user already has a
                category (or a system one exists) with this name and type.
        """
        cleaned = require_category(name)
        resolved_type = require_type(category_type)
        with self.connect() as conn:
            clash = conn.execute(
                "SELECT 1 FROM categories WHERE name = ? AND type = ? AND (user_id IS NULL OR user_id = ?)",
                (cleaned, resolved_type, user_id),
            ).fetchone()
            if clash:
                raise ValidationError(f"Category '{cleaned}' already exists")
            try:
                cursor = conn.execute(
                    "INSERT INTO categories (name, type, user_id) VALUES (?, ?, ?)",
                    (cleaned, resolved_type, user_id),
                )
            except sqlite3.IntegrityError as exc:
                raise ValidationError(f"Category '{cleaned}' already exists") from exc
            new_id = cursor.lastrowid
        logger.debug("Added category %r for user %s", cleaned, user_id)
        return Category(id=new_id, name=cleaned, type=resolved_type, user_id=user_id)

    def delete_category(self, user_id: str, category_id: int) -> None:
        """Delete a user-owned category; system categories are never deleted."""
        with self.connect() as conn:
            row = conn.execute("SELECT user_id FROM categories WHERE id = ?", (category_id,)).fetchone()
            if row is None:
                raise NotFoundError(f"Category {category_id} not found")
            if row['user_id'] is None:
                raise PermissionDeniedError("Cannot delete system categories")
            if row['user_id'] != user_id:
                raise PermissionDeniedError("Category belongs to another user")
            conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))

    # Budgets ----------------------------------------------------------

    def list_budgets(self, user_id: str, month: str) -> List[Budget]:
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT id, user_id, category, month, amount_cents FROM budgets "
                "WHERE user_id = ? AND month = ? ORDER BY category",
                (user_id, validate_month(month)),
            ).fetchall()
        return [_row_to_budget(row) for row in rows]

    def replace_budget(self, user_id: str, category: str, month: str, amount: Any) -> Budget:
        """Set the limit for ``(user, category, month)`` in one upsert statement.

        Readers see either the old or the new limit, never a missing row.
        """
        cleaned = require_category(category)
        token = validate_month(month)
        cents = to_cents(parse_amount(amount))
        with self.connect() as conn:
            conn.execute(
                "INSERT INTO budgets (user_id, category, month, amount_cents) VALUES (?, ?, ?, ?) "
                "ON CONFLICT (user_id, category, month) DO UPDATE SET amount_cents = excluded.amount_cents",
                (user_id, cleaned, token, cents),
            )
            row = conn.execute(
                "SELECT id, user_id, category, month, amount_cents FROM budgets "
                "WHERE user_id = ? AND category = ? AND month = ?",
                (user_id, cleaned, token),
            ).fetchone()
        logger.debug("Budget %s/%s for user %s set to %s cents", cleaned, token, user_id, cents)
        return _row_to_budget(row)

    def delete_budget(self, user_id: str, category: str, month: str) -> bool:
        with self.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM budgets WHERE user_id = ? AND category = ? AND month = ?",
                (user_id, category, validate_month(month)),
            )
            return cursor.rowcount > 0

    # Goals ------------------------------------------------------------

    def list_goals(self, user_id: str) -> List[SavingsGoal]:
        with self.connect() as conn:
            rows = conn.execute(
                f"SELECT {GOAL_COLUMNS} FROM goals WHERE user_id = ? ORDER BY created_at, id",
                (user_id,),
            ).fetchall()
        return [_row_to_goal(row) for row in rows]

    def get_goal(self, goal_id: int) -> SavingsGoal:
        with self.connect() as conn:
            row = conn.execute(f"SELECT {GOAL_COLUMNS} FROM goals WHERE id = ?", (goal_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"Goal {goal_id} not found")
        return _row_to_goal(row)

    def create_goal(self, user_id: str, name: str, target_amount: Any, current_amount: Any = 0) -> SavingsGoal:
        cleaned = (name or '').strip()
        if not cleaned:
            raise ValidationError("Goal name is required")
        target_cents = to_cents(parse_amount(target_amount))
        current_cents = to_cents(to_money(current_amount))
        if current_cents < 0:
            raise ValidationError("Saved amount cannot be negative")
        with self.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO goals (user_id, name, target_cents, current_cents, created_at) VALUES (?, ?, ?, ?, ?)",
                (user_id, cleaned, target_cents, current_cents, _to_db_timestamp(datetime.now())),
            )
            new_id = cursor.lastrowid
        logger.debug("Created goal %s (%r) for user %s", new_id, cleaned, user_id)
        return self.get_goal(new_id)

    def delete_goal(self, goal_id: int, user_id: Optional[str] = None) -> bool:
        """Delete a goal; when ``user_id`` is given only the owner may delete it."""
        with self.connect() as conn:
            if user_id is not None:
                row = conn.execute("SELECT user_id FROM goals WHERE id = ?", (goal_id,)).fetchone()
                if row is not None and row['user_id'] != user_id:
                    raise PermissionDeniedError("Goal belongs to another user")
            cursor = conn.execute("DELETE FROM goals WHERE id = ?", (goal_id,))
            return cursor.rowcount > 0

    def set_goal_current_amount(self, goal_id: int, absolute: Any) -> None:
        """Overwrite the saved amount of a goal with an absolute value."""
        cents = to_cents(absolute)
        if cents < 0:
            raise ValidationError("Saved amount cannot be negative")
        with self.connect() as conn:
            cursor = conn.execute("UPDATE goals SET current_cents = ? WHERE id = ?", (cents, goal_id))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Goal {goal_id} not found")

    def increment_goal_amount(self, goal_id: int, delta: Any) -> None:
        """Add ``delta`` to the saved amount in a single statement."""
        cents = to_cents(delta)
        with self.connect() as conn:
            cursor = conn.execute(
                "UPDATE goals SET current_cents = current_cents + ? "
                "WHERE id = ? AND current_cents + ? >= 0",
                (cents, goal_id, cents),
            )
            if cursor.rowcount == 0:
                exists = conn.execute("SELECT 1 FROM goals WHERE id = ?", (goal_id,)).fetchone()
                if exists is None:
                    raise NotFoundError(f"Goal {goal_id} not found")
                raise ValidationError("Saved amount cannot drop below zero")


_default_store: Optional[LedgerStore] = None


def get_store() -> LedgerStore:
    """Shared store for the configured database path."""
    global _default_store
    if _default_store is None:
        _default_store = LedgerStore()
    return _default_store
