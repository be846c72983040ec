import json
import logging
from datetime import datetime
from typing import Iterable, Optional

import pandas as pd

from fina.domain import GOAL_OPTIONS, Goal, GoalIcon, Transaction
from fina.events import EventBus
from fina.ledger import Ledger

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ["id", "date", "type", "category", "source", "amount", "signed_amount"]


def goal_from_dict(d: dict) -> Goal:
    icon = GoalIcon.parse(d.get("icon", GoalIcon.PERSONAL))
    kwargs = {}
    if d.get("id"):
        kwargs["id"] = str(d["id"])
    return Goal(
        name=d.get("name") or GOAL_OPTIONS[icon],
        icon=icon,
        current_amount=d.get("current_amount", 0) or 0,
        target_amount=d.get("target_amount", 0) or 0,
        **kwargs,
    )


def transaction_from_dict(d: dict) -> Transaction:
    kwargs = {"date": datetime.fromisoformat(d["date"])} if d.get("date") else {}
    if d.get("id"):
        kwargs["id"] = str(d["id"])
    if d["type"] == "income":
        return Transaction.income(d["amount"], source=d.get("source", ""), **kwargs)
    return Transaction.expense(d["amount"], d["category"], **kwargs)


def load_seed(path: str, events: Optional[EventBus] = None) -> Ledger:
    """Build a session ledger from a JSON onboarding document.

    `current_balance` in the file is the starting balance; listed
    transactions are replayed on top of it.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    ledger = Ledger.from_onboarding(
        user_name=data["user_name"],
        monthly_income=data["monthly_income"],
        current_balance=data.get("current_balance", 0),
        goals=tuple(goal_from_dict(g) for g in data.get("goals", [])),
        events=events,
    )
    for t in data.get("transactions", []):
        ledger.record_transaction(transaction_from_dict(t))

    logger.info("Loaded seed %s: %d transaction(s), %d goal(s)", path, len(ledger.transactions), len(ledger.goals))
    return ledger


def transactions_frame(trans: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {
            "id": t.id,
            "date": t.date,
            "type": t.type.value,
            "category": t.category,
            "source": t.source,
            "amount": float(t.amount),
            "signed_amount": float(t.signed_amount),
        }
        for t in trans
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    return df
