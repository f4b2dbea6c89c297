"""Calendar-month period helpers.

A month token is a ``"YYYY-MM"`` string.  :func:`resolve_month` turns it into
an inclusive ``[start, end]`` pair of naive local timestamps.  No timezone
conversion happens anywhere in the engine: transaction dates are compared
against these boundaries exactly as they were stored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Union

import pandas as pd

from .exceptions import ValidationError

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def wall_clock(value: Any) -> Any:
    """Drop any UTC offset but keep the wall-clock reading."""
    if value is not None and getattr(value, 'tzinfo', None) is not None:
        return value.replace(tzinfo=None)
    return value


@dataclass(frozen=True)
class MonthPeriod:
    month: str
    start: datetime
    end: datetime

    def contains(self, timestamp: Any) -> bool:
        if timestamp is None:
            return False
        ts = wall_clock(pd.Timestamp(timestamp))
        return self.start <= ts <= self.end


def validate_month(month: str) -> str:
    """Return ``month`` stripped, or raise ValidationError if it is not YYYY-MM."""
    token = str(month).strip() if month is not None else ''
    match = MONTH_PATTERN.match(token)
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValidationError(f"Invalid month '{month}'; expected YYYY-MM")
    return token


def current_month(today: Optional[Union[date, datetime]] = None) -> str:
    today = today or datetime.now()
    return f"{today.year:04d}-{today.month:02d}"


def month_of(timestamp: Any) -> str:
    return pd.Timestamp(timestamp).strftime('%Y-%m')


def shift_month(month: str, offset: int) -> str:
    """Move a month token by ``offset`` months, rolling over years."""
    period = pd.Period(validate_month(month), freq='M') + offset
    return str(period)


def month_range(end_month: str, count: int) -> List[str]:
    """The ``count`` months ending with ``end_month``, oldest first."""
    return [shift_month(end_month, -offset) for offset in reversed(range(count))]


def resolve_month(
    month: Optional[str] = None,
    today: Optional[Union[date, datetime]] = None,
) -> MonthPeriod:
    """Resolve a month token (or the current month) to its inclusive boundaries.

    ``start`` is local midnight on the first day; ``end`` is one microsecond
    before the first instant of the following month, so 2024-02 ends on
    Feb 29 and 2023-12 ends on Dec 31 without special cases.
    """
    token = validate_month(month) if month is not None else current_month(today)
    period = pd.Period(token, freq='M')
    start = period.start_time.to_pydatetime()
    end = (period + 1).start_time.to_pydatetime() - timedelta(microseconds=1)
    return MonthPeriod(month=token, start=start, end=end)
