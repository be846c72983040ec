"""Rule-based insight messages.

Always available and side-effect free; the AI advisor is a separate path
that may be offline.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from fina.aggregates import top_categories
from fina.config import DAYS_PER_MONTH
from fina.domain import Amount, Transaction, to_decimal
from fina.reports import WeeklyReport

HUNDRED = Decimal(100)

SAVE_MORE = "Nenhum gasto hoje! 💰 Que tal guardar um pouco para as suas metas?"
GREAT_DAY = "Excelente! 🎉 Você gastou menos da metade da sua renda diária hoje."
ON_TRACK = "Você está no caminho certo! 👍 Seus gastos de hoje estão dentro da sua renda diária."
OVERSPENT = "Atenção! ⚠️ Hoje você gastou mais do que a sua renda diária. Amanhã dá para compensar!"

WEEK_REDUCED = "Ótimo! Você reduziu seus gastos em {pct}% em relação à semana passada."
WEEK_INCREASED = "Atenção, seus gastos aumentaram {pct}% esta semana."
WEEK_STABLE = "Seus gastos se mantiveram estáveis."


def daily_income(monthly_income: Amount, days_per_month: int = DAYS_PER_MONTH) -> Decimal:
    return to_decimal(monthly_income) / days_per_month


def spend_ratio(spent: Amount, monthly_income: Amount) -> Optional[Decimal]:
    """Today's spending as a percentage of daily income, None without income."""
    income = daily_income(monthly_income)
    if income <= 0:
        return None
    return to_decimal(spent) / income * HUNDRED


def daily_insight(spent: Amount, monthly_income: Amount) -> str:
    spent = to_decimal(spent)
    if spent == 0:
        return SAVE_MORE
    ratio = spend_ratio(spent, monthly_income)
    if ratio is None or ratio > HUNDRED:
        return OVERSPENT
    if ratio < 50:
        return GREAT_DAY
    return ON_TRACK


def _pct(value: Decimal) -> str:
    return str(abs(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def weekly_insight(expense_change: Amount) -> str:
    change = to_decimal(expense_change)
    if change < -1:
        return WEEK_REDUCED.format(pct=_pct(change))
    if change > 1:
        return WEEK_INCREASED.format(pct=_pct(change))
    return WEEK_STABLE


def expense_insight(spent: Amount, daily_income: Amount) -> str:
    spent, income = to_decimal(spent), to_decimal(daily_income)
    if income <= 0:
        return ""
    pct = spent / income * HUNDRED
    return f"Hoje você gastou R${spent:.2f}, o que representa {_pct(pct)}% da sua renda diária."


def top_category_insight(report: WeeklyReport) -> str:
    if report.top_category is None:
        return ""
    return f"Sua maior categoria de gasto foi {report.top_category[0]}."


def spending_highlight(trans: Iterable[Transaction]) -> str:
    top = next(top_categories(trans, 1), None)
    return f"Você gasta mais com {top[0] if top else '...'}!"
