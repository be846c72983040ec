from datetime import datetime, timedelta

import pytest

from fina.domain import Period, Transaction
from fina.temporal import bucket, filter_period, newest_first, period_start, window

NOW = datetime(2025, 9, 15, 14, 30)


def test_day_is_calendar_date_not_24h():
    assert bucket(datetime(2025, 9, 15, 0, 1), NOW, Period.DAY)
    assert bucket(datetime(2025, 9, 15, 23, 59), NOW, Period.DAY)
    assert not bucket(datetime(2025, 9, 14, 23, 59), NOW, Period.DAY)


def test_week_is_rolling_and_inclusive():
    assert bucket(NOW - timedelta(days=7), NOW, "week")
    assert not bucket(NOW - timedelta(days=7, seconds=1), NOW, "week")


def test_week_lets_future_dates_through():
    assert bucket(NOW + timedelta(days=30), NOW, Period.WEEK)


def test_month_is_calendar_month_and_year():
    assert bucket(datetime(2025, 9, 1), NOW, Period.MONTH)
    assert not bucket(datetime(2025, 8, 31, 23, 59), NOW, Period.MONTH)
    assert not bucket(datetime(2024, 9, 15), NOW, Period.MONTH)


def test_bimester_boundary_is_inclusive():
    boundary = datetime(2025, 7, 15, 14, 30)
    assert bucket(boundary, NOW, Period.BIMESTER)
    assert not bucket(boundary - timedelta(microseconds=1), NOW, Period.BIMESTER)


def test_bimester_uses_calendar_months_not_sixty_days():
    now = datetime(2025, 3, 1)
    # 2025-01-01 is 59 days before, exactly two calendar months
    assert period_start(now, Period.BIMESTER) == datetime(2025, 1, 1)


def test_bimester_clamps_short_months():
    assert period_start(datetime(2025, 4, 30), Period.BIMESTER) == datetime(2025, 2, 28)
    assert period_start(datetime(2024, 4, 30), Period.BIMESTER) == datetime(2024, 2, 29)


def test_unknown_period_raises():
    with pytest.raises(ValueError):
        bucket(NOW, NOW, "year")


def test_filter_period_is_lazy():
    calls = {"n": 0}

    def stream():
        for d in (NOW, NOW - timedelta(days=1), NOW - timedelta(days=40)):
            calls["n"] += 1
            yield Transaction.expense(1, "A", date=d)

    gen = filter_period(stream(), NOW, Period.DAY)
    assert calls["n"] == 0
    assert next(gen).date == NOW
    assert calls["n"] == 1


def test_window_is_half_open():
    txs = [Transaction.expense(1, "A", date=datetime(2025, 9, d)) for d in (1, 8, 15)]
    picked = list(window(txs, datetime(2025, 9, 1), datetime(2025, 9, 15)))
    assert [t.date.day for t in picked] == [1, 8]


def test_newest_first():
    txs = [Transaction.expense(1, "A", date=datetime(2025, 9, d)) for d in (3, 10, 1)]
    assert [t.date.day for t in newest_first(txs)] == [10, 3, 1]
