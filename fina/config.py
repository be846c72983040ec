import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

DEFAULT_SAVINGS_RATE = Decimal("0.10")
DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class Settings:
    """Tunable knobs shared by the analytics and the advisor.

    savings_rate: share of monthly income assumed to go into a goal each
    month when projecting completion dates.
    """

    savings_rate: Decimal = DEFAULT_SAVINGS_RATE
    days_per_month: int = DAYS_PER_MONTH
    currency_symbol: str = "R$"
    openai_model: str = "gpt-4.1-mini"
    openai_api_key: str = ""
    flags_path: str = "data/flags.json"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        rate = DEFAULT_SAVINGS_RATE
        raw_rate = env.get("FINA_SAVINGS_RATE", "").strip()
        if raw_rate:
            try:
                rate = Decimal(raw_rate)
            except InvalidOperation:
                raise ValueError(f"FINA_SAVINGS_RATE is not a number: {raw_rate!r}")
        return cls(
            savings_rate=rate,
            openai_model=env.get("FINA_OPENAI_MODEL", cls.openai_model),
            openai_api_key=env.get("OPENAI_API_KEY", "").strip(),
            flags_path=env.get("FINA_FLAGS_PATH", cls.flags_path),
        )

    def money(self, value) -> str:
        return f"{self.currency_symbol}{Decimal(value):.2f}"
