from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union
from uuid import uuid4

Amount = Union[Decimal, int, float, str]

INCOME_CATEGORY = "Ganho"

EXPENSE_CATEGORIES = (
    "Alimentação",
    "Transporte",
    "Lazer",
    "Moradia",
    "Educação",
    "Saúde",
    "Outros",
)


class FinaError(Exception):
    """Base class for ledger errors."""


class InvalidAmount(FinaError, ValueError):
    pass


class NotFound(FinaError, KeyError):
    pass


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class GoalIcon(str, Enum):
    EMERGENCY = "emergency"
    TRAVEL = "travel"
    HOME = "home"
    DEBT = "debt"
    EDUCATION = "education"
    INVESTMENTS = "investments"
    PERSONAL = "personal"

    @classmethod
    def parse(cls, value) -> "GoalIcon":
        try:
            return cls(value)
        except ValueError:
            return cls.PERSONAL


class Period(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    BIMESTER = "bimester"


# default goal names offered during onboarding
GOAL_OPTIONS = {
    GoalIcon.EMERGENCY: "Fundo de Emergência",
    GoalIcon.TRAVEL: "Viagem dos Sonhos",
    GoalIcon.HOME: "Casa Própria",
    GoalIcon.DEBT: "Quitar Dívidas",
    GoalIcon.EDUCATION: "Educação",
    GoalIcon.INVESTMENTS: "Investimentos",
    GoalIcon.PERSONAL: "Plano Pessoal",
}


def to_decimal(value: Optional[Amount]) -> Decimal:
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value))
        except InvalidOperation:
            raise InvalidAmount(f"Not a number: {value!r}") from None
    if not d.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")
    return d


def new_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class Transaction:
    type: TransactionType
    amount: Decimal
    category: str
    date: datetime = field(default_factory=datetime.now)
    source: str = ""  # income only
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        # frozen, so normalise through object.__setattr__
        object.__setattr__(self, "type", TransactionType(self.type))
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.amount < 0:
            raise InvalidAmount(f"Transaction amount cannot be negative: {self.amount}")
        if self.source and self.type is TransactionType.EXPENSE:
            raise ValueError("Only income transactions carry a source")

    @classmethod
    def expense(cls, amount: Amount, category: str, date: Optional[datetime] = None, **kw) -> "Transaction":
        return cls(
            type=TransactionType.EXPENSE,
            amount=to_decimal(amount),
            category=category,
            date=date or datetime.now(),
            **kw,
        )

    @classmethod
    def income(cls, amount: Amount, source: str = "", date: Optional[datetime] = None, **kw) -> "Transaction":
        return cls(
            type=TransactionType.INCOME,
            amount=to_decimal(amount),
            category=INCOME_CATEGORY,
            date=date or datetime.now(),
            source=source,
            **kw,
        )

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.is_income else -self.amount


@dataclass(frozen=True)
class Goal:
    name: str
    target_amount: Decimal = Decimal(0)
    current_amount: Decimal = Decimal(0)
    icon: GoalIcon = GoalIcon.PERSONAL
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        object.__setattr__(self, "icon", GoalIcon.parse(self.icon))
        object.__setattr__(self, "target_amount", to_decimal(self.target_amount))
        object.__setattr__(self, "current_amount", to_decimal(self.current_amount))
        if self.target_amount < 0 or self.current_amount < 0:
            raise InvalidAmount(f"Goal amounts cannot be negative: {self.name}")
