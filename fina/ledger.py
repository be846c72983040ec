import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple, Union

from fina.domain import (
    Amount,
    Goal,
    GoalIcon,
    InvalidAmount,
    NotFound,
    Transaction,
    to_decimal,
)
from fina.events import (
    GOAL_COMPLETED,
    GOAL_CONTRIBUTED,
    GOAL_CREATED,
    TRANSACTION_RECORDED,
    EventBus,
    register_default_handlers,
)
from fina.goals import is_complete

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    user_name: str
    monthly_income: Decimal
    current_balance: Decimal
    goals: Tuple[Goal, ...]
    transactions: Tuple[Transaction, ...]
    taken_at: datetime = field(default_factory=datetime.now)

    def recent_transactions(self, n: int = 5) -> Tuple[Transaction, ...]:
        return self.transactions[-n:] if n > 0 else ()


class Ledger:
    """Owns the transaction log, the goals and the cached balance.

    `current_balance` is never recomputed: every mutation updates it together
    with the log, so it always equals the starting balance plus incomes minus
    expenses.
    """

    def __init__(
        self,
        user_name: str,
        monthly_income: Amount,
        current_balance: Amount = 0,
        goals: Iterable[Goal] = (),
        events: Optional[EventBus] = None,
    ):
        self._user_name = user_name
        self._monthly_income = to_decimal(monthly_income)
        self._balance = to_decimal(current_balance)
        self._transactions: List[Transaction] = []
        self._goals: Dict[str, Goal] = {}
        if events is None:
            events = register_default_handlers(EventBus())
        self.events = events
        for g in goals:
            self._goals[g.id] = g

    @classmethod
    def from_onboarding(
        cls,
        user_name: str,
        monthly_income: Amount,
        current_balance: Amount,
        goals: Iterable[Goal] = (),
        events: Optional[EventBus] = None,
    ) -> "Ledger":
        ledger = cls(user_name, monthly_income, current_balance, goals, events)
        logger.debug(
            "Ledger created for %s with balance %s and %d goal(s)",
            user_name, ledger.current_balance, len(ledger._goals),
        )
        return ledger

    @property
    def user_name(self) -> str:
        return self._user_name

    @property
    def monthly_income(self) -> Decimal:
        return self._monthly_income

    @property
    def current_balance(self) -> Decimal:
        return self._balance

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def goals(self) -> Tuple[Goal, ...]:
        return tuple(self._goals.values())

    def record_transaction(self, tx: Transaction) -> List[dict]:
        if tx.amount < 0:
            raise InvalidAmount(f"Transaction amount cannot be negative: {tx.amount}")

        self._transactions.append(tx)
        self._balance += tx.signed_amount
        logger.debug("Recorded %s of %s (%s); balance now %s", tx.type.value, tx.amount, tx.category, self._balance)

        return self.events.publish(TRANSACTION_RECORDED, {
            "transaction": tx,
            "balance": self._balance,
            "monthly_income": self._monthly_income,
        })

    def create_goal(self, goal: Goal) -> Goal:
        self._goals[goal.id] = goal
        logger.debug("Created goal %s (%s)", goal.name, goal.id)
        self.events.publish(GOAL_CREATED, {"goal": goal})
        return goal

    def add_goal(
        self,
        name: str,
        target_amount: Amount = 0,
        current_amount: Amount = 0,
        icon: Union[GoalIcon, str] = GoalIcon.PERSONAL,
    ) -> Goal:
        return self.create_goal(Goal(
            name=name,
            target_amount=to_decimal(target_amount),
            current_amount=to_decimal(current_amount),
            icon=icon,
        ))

    def get_goal(self, goal_id: str) -> Goal:
        try:
            return self._goals[goal_id]
        except KeyError:
            raise NotFound(f"Goal {goal_id} does not exist") from None

    def contribute_to_goal(self, goal_id: str, added_amount: Amount) -> Goal:
        added = to_decimal(added_amount)
        if added <= 0:
            raise InvalidAmount(f"Contribution must be positive, got {added}")

        goal = self.get_goal(goal_id)
        was_complete = is_complete(goal)
        updated = replace(goal, current_amount=goal.current_amount + added)
        self._goals[goal_id] = updated
        logger.debug("Goal %s now at %s of %s", goal_id, updated.current_amount, updated.target_amount)

        self.events.publish(GOAL_CONTRIBUTED, {"goal": updated, "added": added})
        if not was_complete and is_complete(updated):
            self.events.publish(GOAL_COMPLETED, {"goal": updated})
        return updated

    def recent_transactions(self, n: int = 5) -> Tuple[Transaction, ...]:
        return self.transactions[-n:] if n > 0 else ()

    def snapshot(self, now: Optional[datetime] = None) -> LedgerSnapshot:
        return LedgerSnapshot(
            user_name=self._user_name,
            monthly_income=self._monthly_income,
            current_balance=self._balance,
            goals=self.goals,
            transactions=self.transactions,
            taken_at=now or datetime.now(),
        )
