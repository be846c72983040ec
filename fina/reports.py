from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional, Tuple

from fina.aggregates import sum_by_type, top_categories
from fina.domain import Transaction, TransactionType

HUNDRED = Decimal(100)


class WindowTotals(NamedTuple):
    income: Decimal
    expense: Decimal


class WeeklyReport(NamedTuple):
    this_week: WindowTotals
    last_week: WindowTotals
    expense_change: Decimal
    top_category: Optional[Tuple[str, Decimal]]


def window_totals(trans: Iterable[Transaction]) -> WindowTotals:
    trans = tuple(trans)
    return WindowTotals(
        income=sum_by_type(trans, TransactionType.INCOME),
        expense=sum_by_type(trans, TransactionType.EXPENSE),
    )


def expense_change(this_week: WindowTotals, last_week: WindowTotals) -> Decimal:
    """Percent change of expenses against last week.

    With nothing spent last week: 100 if anything was spent this week, else 0.
    """
    if last_week.expense > 0:
        return (this_week.expense - last_week.expense) / last_week.expense * HUNDRED
    return HUNDRED if this_week.expense > 0 else Decimal(0)


def split_weeks(trans: Iterable[Transaction], now: datetime) -> Tuple[Tuple[Transaction, ...], Tuple[Transaction, ...]]:
    one_week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)
    this_week, last_week = [], []
    for t in trans:
        if t.date >= one_week_ago:
            this_week.append(t)
        elif t.date >= two_weeks_ago:
            last_week.append(t)
    return tuple(this_week), tuple(last_week)


def weekly_report(trans: Iterable[Transaction], now: datetime) -> WeeklyReport:
    this_tx, last_tx = split_weeks(trans, now)
    this_week = window_totals(this_tx)
    last_week = window_totals(last_tx)
    top = next(top_categories(this_tx, 1), None)
    return WeeklyReport(
        this_week=this_week,
        last_week=last_week,
        expense_change=expense_change(this_week, last_week),
        top_category=top,
    )
