"""Exception hierarchy for the finance tracker."""

from __future__ import annotations


class FinanceTrackerError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(FinanceTrackerError, ValueError):
    """Raised when user input is malformed (bad amount, missing category, ...)."""


class StorageError(FinanceTrackerError):
    """Raised when the persistence layer fails to read or write."""


class NotFoundError(StorageError):
    """Raised when a referenced row does not exist."""


class PermissionDeniedError(FinanceTrackerError):
    """Raised when a user tries to modify a row they do not own."""
