"""Configuration management for the finance tracker.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Tuple

# Base project root - assumes this file is in finance_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))
REPORTS_DIR = DATA_DIR / "reports"

# Database
DB_PATH = Path(
    os.getenv("FINTRACK_DB_PATH", DATA_DIR / "ledger.db")
).resolve()

# The dashboard runs for a single local user unless told otherwise
DEFAULT_USER_ID = os.getenv("FINTRACK_USER_ID", "local")

CURRENCY_SYMBOL = os.getenv("FINTRACK_CURRENCY_SYMBOL", "$")
LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "INFO").upper()
MAX_WORKERS = int(os.getenv("FINTRACK_MAX_WORKERS", "4"))

# Sentinel category for the whole-ledger monthly limit
GLOBAL_BUDGET_KEY = "_GLOBAL_"

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

# Amounts are stored as integer minor units (cents)
MINOR_UNITS = 100

# System categories seeded into every new ledger (user_id NULL)
DEFAULT_CATEGORIES: List[Tuple[str, str]] = [
    ("Food", EXPENSE),
    ("Transport", EXPENSE),
    ("Housing", EXPENSE),
    ("Utilities", EXPENSE),
    ("Entertainment", EXPENSE),
    ("Health", EXPENSE),
    ("Shopping", EXPENSE),
    ("Other", EXPENSE),
    ("Salary", INCOME),
    ("Freelance", INCOME),
    ("Investments", INCOME),
]

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, REPORTS_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def get_db_path() -> str:
    """Get the database path as a string."""
    return str(DB_PATH)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for scripts and the Streamlit shell."""
    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
