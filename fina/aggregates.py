from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from functools import reduce
from typing import Dict, Iterable, Iterator, List, NamedTuple, Tuple, Union

from fina.domain import Period, Transaction, TransactionType
from fina.temporal import filter_period

ZERO = Decimal(0)


class DailySummary(NamedTuple):
    spent: Decimal
    earned: Decimal
    variation: Decimal


class DayTotals(NamedTuple):
    day: date
    income: Decimal
    expense: Decimal


def sum_by_type(trans: Iterable[Transaction], tx_type: Union[TransactionType, str]) -> Decimal:
    tx_type = TransactionType(tx_type)
    return reduce(lambda acc, t: acc + t.amount if t.type is tx_type else acc, trans, ZERO)


def sum_by_category(trans: Iterable[Transaction]) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = {}
    for t in trans:
        if t.type is TransactionType.EXPENSE:
            totals[t.category] = totals.get(t.category, ZERO) + t.amount
    return totals


def net_total(trans: Iterable[Transaction]) -> Decimal:
    return reduce(lambda acc, t: acc + t.signed_amount, trans, ZERO)


def top_categories(trans: Iterable[Transaction], k: int) -> Iterator[Tuple[str, Decimal]]:
    # sorted() is stable, so equal totals keep first-seen order
    ordered: List[Tuple[str, Decimal]] = sorted(
        sum_by_category(trans).items(),
        key=lambda item: item[1],
        reverse=True,
    )
    for name, total in ordered[: max(0, k)]:
        yield name, total


def daily_summary(trans: Iterable[Transaction], now: datetime) -> DailySummary:
    today = tuple(filter_period(trans, now, Period.DAY))
    spent = sum_by_type(today, TransactionType.EXPENSE)
    earned = sum_by_type(today, TransactionType.INCOME)
    return DailySummary(spent=spent, earned=earned, variation=earned - spent)


def last_days_series(trans: Iterable[Transaction], now: datetime, days: int = 7) -> List[DayTotals]:
    """Income and expense per calendar day for the last `days` days, oldest first."""
    wanted = [(now - timedelta(days=i)).date() for i in reversed(range(max(0, days)))]
    income: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    expense: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    for t in trans:
        target = income if t.is_income else expense
        target[t.date.date()] += t.amount
    return [DayTotals(day=d, income=income[d], expense=expense[d]) for d in wanted]


def period_total(trans: Iterable[Transaction], now: datetime, period: Union[Period, str]) -> Decimal:
    return net_total(filter_period(trans, now, period))
