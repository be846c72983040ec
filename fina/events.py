import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from fina.insights import daily_income, expense_insight

__all__ = [
    'EventBus',
    'LedgerEvent',
    'TRANSACTION_RECORDED',
    'GOAL_CREATED',
    'GOAL_CONTRIBUTED',
    'GOAL_COMPLETED',
    'register_default_handlers',
]

logger = logging.getLogger(__name__)

TRANSACTION_RECORDED = "TRANSACTION_RECORDED"
GOAL_CREATED = "GOAL_CREATED"
GOAL_CONTRIBUTED = "GOAL_CONTRIBUTED"
GOAL_COMPLETED = "GOAL_COMPLETED"


class LedgerEvent(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[LedgerEvent], dict]


class EventBus:
    """Synchronous in-process publish/subscribe.

    Handlers run in subscription order and their dict results are returned
    to the publisher. Handlers must not mutate the ledger. Events are
    published after the mutation is applied, so a handler that raises is
    logged and contributes an empty dict instead of propagating.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if not self._subscribers.get(name):
            return []

        event = LedgerEvent(name=name, ts=datetime.now().isoformat(), payload=payload)
        results = []
        for handler in list(self._subscribers[name]):
            try:
                results.append(handler(event))
            except Exception:
                logger.exception("Handler %r failed on %s", handler, name)
                results.append({})
        return results


def expense_insight_handler(event: LedgerEvent) -> dict:
    tx = event.payload["transaction"]
    if tx.is_income:
        return {}
    message = expense_insight(tx.amount, daily_income(event.payload["monthly_income"]))
    return {"insight": message} if message else {}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(TRANSACTION_RECORDED, expense_insight_handler)
    return bus
