from datetime import date, datetime, timedelta, timezone

import pytest

from finance_tracker.exceptions import ValidationError
from finance_tracker.periods import (
    current_month,
    month_of,
    month_range,
    resolve_month,
    shift_month,
    wall_clock,
)


def test_leap_february_ends_on_the_29th():
    period = resolve_month('2024-02')
    assert period.start == datetime(2024, 2, 1)
    assert period.end.date() == date(2024, 2, 29)
    assert period.end == datetime(2024, 2, 29, 23, 59, 59, 999999)


def test_non_leap_february_ends_on_the_28th():
    assert resolve_month('2023-02').end.date() == date(2023, 2, 28)


@pytest.mark.parametrize('month, last_day', [('2024-01', 31), ('2024-04', 30), ('2024-12', 31)])
def test_month_lengths(month, last_day):
    assert resolve_month(month).end.day == last_day


def test_december_does_not_leak_into_january():
    period = resolve_month('2023-12')
    assert period.start == datetime(2023, 12, 1)
    assert period.end == datetime(2023, 12, 31, 23, 59, 59, 999999)
    assert not period.contains(datetime(2024, 1, 1))


def test_boundaries_are_inclusive():
    period = resolve_month('2024-03')
    assert period.contains(datetime(2024, 3, 1))
    assert period.contains(datetime(2024, 3, 31, 23, 59, 59))
    assert not period.contains(datetime(2024, 2, 29, 23, 59, 59))
    assert not period.contains(datetime(2024, 4, 1))
    assert not period.contains(None)


def test_defaults_to_current_month():
    assert resolve_month(today=date(2024, 3, 15)).month == '2024-03'
    assert current_month(date(2025, 1, 2)) == '2025-01'


@pytest.mark.parametrize('token', ['2024-13', '2024-00', '2024-3', 'March', '', '24-03'])
def test_malformed_months_are_rejected(token):
    with pytest.raises(ValidationError):
        resolve_month(token)


def test_shift_and_range_roll_over_years():
    assert shift_month('2023-12', 1) == '2024-01'
    assert shift_month('2024-01', -1) == '2023-12'
    assert month_range('2024-02', 3) == ['2023-12', '2024-01', '2024-02']


def test_month_of_timestamp():
    assert month_of('2024-03-31T23:00:00') == '2024-03'
    assert month_of(datetime(2024, 2, 29)) == '2024-02'


def test_offset_timestamps_are_judged_by_wall_clock():
    ist = timezone(timedelta(hours=5, minutes=30))
    period = resolve_month('2024-03')
    assert period.contains(datetime(2024, 3, 31, 23, 30, tzinfo=ist))
    assert period.contains('2024-03-31T23:30:00+05:30')
    assert not period.contains(datetime(2024, 4, 1, 0, 30, tzinfo=ist))
    assert wall_clock(datetime(2024, 3, 31, 23, 30, tzinfo=ist)) == datetime(2024, 3, 31, 23, 30)
