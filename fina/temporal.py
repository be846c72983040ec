from datetime import datetime, timedelta
from typing import Iterable, Iterator, Union

from dateutil.relativedelta import relativedelta

from fina.domain import Period, Transaction


def period_start(now: datetime, period: Union[Period, str]) -> datetime:
    """Lower bound of the rolling windows (week, bimester).

    Day and month are calendar buckets and have no single start instant;
    for them this returns midnight of today / the first of the month.
    """
    period = Period(period)
    if period is Period.WEEK:
        return now - timedelta(days=7)
    if period is Period.BIMESTER:
        # relativedelta clamps 31/04 -> 28/02 (or 29 on leap years)
        return now - relativedelta(months=2)
    if period is Period.MONTH:
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def bucket(timestamp: datetime, now: datetime, period: Union[Period, str]) -> bool:
    period = Period(period)
    if period is Period.DAY:
        return timestamp.date() == now.date()
    if period is Period.MONTH:
        return (timestamp.year, timestamp.month) == (now.year, now.month)
    # rolling windows: inclusive lower bound, future dates pass
    return timestamp >= period_start(now, period)


def filter_period(
    trans: Iterable[Transaction], now: datetime, period: Union[Period, str]
) -> Iterator[Transaction]:
    period = Period(period)
    for t in trans:
        if bucket(t.date, now, period):
            yield t


def window(trans: Iterable[Transaction], start: datetime, end: datetime) -> Iterator[Transaction]:
    for t in trans:
        if start <= t.date < end:
            yield t


def newest_first(trans: Iterable[Transaction]) -> tuple[Transaction, ...]:
    return tuple(sorted(trans, key=lambda t: t.date, reverse=True))
