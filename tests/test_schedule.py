from datetime import datetime, timedelta

import pytest

from botplugins.schedule import first_weekday, is_due, next_wake_time
from botplugins.timer import Timer


def make(month=0, day=0, week=0, hour=0, minute=0):
    t = Timer()
    t.month = month
    t.day = day
    t.week = week
    t.hour = hour
    t.minute = minute
    t.enabled = True
    return t


def test_source_case_is_in_future():
    ts = make(month=-1, week=6, hour=16, minute=30)
    now = datetime.now()
    assert next_wake_time(ts, now) >= now


@pytest.mark.parametrize("days", range(0, 14))
def test_weekly_timer_lands_on_weekday_in_future(days):
    ts = make(month=-1, week=6, hour=16, minute=30)
    now = datetime(2023, 1, 1, 9, 15) + timedelta(days=days)
    result = next_wake_time(ts, now)
    assert result > now


def test_weekly_timer_pinned():
    ts = make(month=-1, week=6, hour=16, minute=30)
    now = datetime(2023, 1, 4, 10, 0)
    assert next_wake_time(ts, now) == datetime(2023, 1, 7, 16, 30)


def test_daily_timer_adds_a_day():
    ts = make(month=-1, day=-1, hour=16, minute=30)
    now = datetime(2023, 1, 4, 10, 0)
    assert next_wake_time(ts, now) == datetime(2023, 1, 5, 16, 30)


def test_every_minute_timer():
    ts = make(month=-1, day=-1, hour=-1, minute=-1)
    now = datetime(2023, 1, 4, 10, 0, 12)
    assert next_wake_time(ts, now) == now + timedelta(minutes=1)


def test_yearly_date_this_year_and_next():
    ts = make(month=12, day=25, hour=8, minute=0)
    assert next_wake_time(ts, datetime(2023, 1, 4, 10, 0)) == datetime(2023, 12, 25, 8, 0)
    assert next_wake_time(ts, datetime(2023, 12, 26, 10, 0)) == datetime(2024, 12, 25, 8, 0)


def test_first_weekday():
    d = first_weekday(datetime(2023, 1, 18, 7, 0), 1)
    assert d == datetime(2023, 1, 2, 7, 0)
    for week in range(7):
        r = first_weekday(datetime(2024, 5, 20), week)
        assert r.month == 5
        assert 1 <= r.day <= 7
        assert (r.weekday() + 1) % 7 == week


def test_first_weekday_rejects_bad_week():
    with pytest.raises(ValueError):
        first_weekday(datetime(2023, 1, 1), -1)


def test_is_due_day_timer():
    ts = make(month=1, day=4, hour=10, minute=0)
    assert is_due(ts, datetime(2023, 1, 4, 10, 0)) is True
    assert is_due(ts, datetime(2023, 1, 4, 10, 1)) is False
    assert is_due(ts, datetime(2023, 2, 4, 10, 0)) is False


def test_is_due_weekly_and_every():
    weekly = make(month=-1, week=3, hour=10, minute=0)
    assert is_due(weekly, datetime(2023, 1, 4, 10, 0)) is True
    assert is_due(weekly, datetime(2023, 1, 5, 10, 0)) is False
    every = make(month=-1, day=-1, hour=-1, minute=-1)
    assert is_due(every, datetime(2023, 7, 9, 3, 45)) is True