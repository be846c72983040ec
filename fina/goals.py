from decimal import Decimal, ROUND_CEILING
from typing import NamedTuple

from fina.config import DEFAULT_SAVINGS_RATE
from fina.domain import Amount, Goal, to_decimal

HUNDRED = Decimal(100)


class GoalStatus(NamedTuple):
    goal: Goal
    progress: Decimal
    display_progress: Decimal  # capped at 100 for progress bars
    complete: bool
    months_remaining: int


def progress(goal: Goal) -> Decimal:
    if goal.target_amount <= 0:
        return Decimal(0)
    return goal.current_amount / goal.target_amount * HUNDRED


def is_complete(goal: Goal) -> bool:
    return progress(goal) >= HUNDRED


def monthly_contribution(monthly_income: Amount, savings_rate: Amount = DEFAULT_SAVINGS_RATE) -> Decimal:
    return to_decimal(monthly_income) * to_decimal(savings_rate)


def months_remaining(goal: Goal, monthly_income: Amount, savings_rate: Amount = DEFAULT_SAVINGS_RATE) -> int:
    """Months until the goal is reached saving a fixed share of income.

    Returns 0 when there is nothing left to save or no contribution to
    project with.
    """
    contribution = monthly_contribution(monthly_income, savings_rate)
    remaining = goal.target_amount - goal.current_amount
    if remaining <= 0 or contribution <= 0:
        return 0
    return int((remaining / contribution).to_integral_value(rounding=ROUND_CEILING))


def goal_status(goal: Goal, monthly_income: Amount, savings_rate: Amount = DEFAULT_SAVINGS_RATE) -> GoalStatus:
    pct = progress(goal)
    return GoalStatus(
        goal=goal,
        progress=pct,
        display_progress=min(pct, HUNDRED),
        complete=pct >= HUNDRED,
        months_remaining=months_remaining(goal, monthly_income, savings_rate),
    )
