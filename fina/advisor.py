"""FINA, the generative-AI finance assistant.

Every entry point takes a LedgerSnapshot, never the live ledger, and
degrades to a fixed message instead of raising when the model is
unreachable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, NamedTuple, Optional, Sequence

from openai import AsyncOpenAI

from fina.aggregates import daily_summary
from fina.config import Settings
from fina.insights import daily_income, daily_insight
from fina.ledger import LedgerSnapshot

logger = logging.getLogger(__name__)

GREETING = "Olá! Como posso te ajudar a organizar suas finanças hoje?"
OFFLINE_REPLY = "Desculpe, meu cérebro de IA está offline. Verifique a configuração da API Key."
ERROR_REPLY = "Ocorreu um erro ao processar sua solicitação."
DAILY_ERROR = "Não foi possível gerar o insight diário."

QUICK_REPLIES = (
    "Qual meu maior gasto?",
    "Como posso economizar?",
    "Analise minha última semana.",
)


class ChatMessage(NamedTuple):
    role: str  # "user" or "assistant"
    text: str


def _money(settings: Settings, value) -> str:
    return settings.money(value)


def describe_goals(snapshot: LedgerSnapshot, settings: Settings) -> str:
    if not snapshot.goals:
        return "(nenhuma)"
    return ", ".join(
        f"{g.name} ({_money(settings, g.current_amount)} de {_money(settings, g.target_amount)})"
        for g in snapshot.goals
    )


def describe_recent(snapshot: LedgerSnapshot, settings: Settings, n: int = 5) -> str:
    recent = snapshot.recent_transactions(n)
    if not recent:
        return "(nenhuma)"
    return ", ".join(
        f"{'Ganho' if t.is_income else 'Gasto'} de {_money(settings, t.amount)} em {t.category}"
        for t in recent
    )


def build_system_prompt(snapshot: LedgerSnapshot, settings: Optional[Settings] = None) -> str:
    settings = settings or Settings()
    name = snapshot.user_name
    lines = [
        "Você é a FINA, uma assistente financeira de IA amigável, empática e proativa.",
        "Ajude o usuário a entender e melhorar suas finanças, com tom leve e motivacional de coach financeiro.",
        "",
        "REGRAS IMPORTANTES:",
        "- Seja extremamente concisa e use frases curtas.",
        "- Nunca escreva parágrafos longos.",
        "- Use emojis para deixar a conversa mais leve.",
        f"- Chame o usuário pelo nome: {name}.",
        "",
        f"Dados financeiros de {name}:",
        f"- Renda Mensal: {_money(settings, snapshot.monthly_income)}",
        f"- Saldo Atual: {_money(settings, snapshot.current_balance)}",
        f"- Metas: {describe_goals(snapshot, settings)}",
        f"- Últimas 5 Transações: {describe_recent(snapshot, settings)}",
        "",
        "Com base nesses dados e no histórico da conversa, responda à mensagem do usuário de forma útil e personalizada.",
    ]
    return "\n".join(lines)


def build_daily_prompt(snapshot: LedgerSnapshot, now: datetime, settings: Optional[Settings] = None) -> str:
    settings = settings or Settings()
    summary = daily_summary(snapshot.transactions, now)
    lines = [
        f"Analise o resumo financeiro diário de {snapshot.user_name} e forneça um insight curto, amigável e motivacional em português.",
        f"- Renda mensal: {_money(settings, snapshot.monthly_income)}",
        f"- Média de renda diária: {_money(settings, daily_income(snapshot.monthly_income, settings.days_per_month))}",
        f"- Gastos de hoje: {_money(settings, summary.spent)}",
        f"- Ganhos de hoje: {_money(settings, summary.earned)}",
        f"- Saldo atual: {_money(settings, snapshot.current_balance)}",
        "",
        "Se os gastos estiverem abaixo de 50% da renda diária, elogie de forma calorosa.",
        "Se estiverem entre 50% e 100%, comente que está no caminho certo.",
        "Se ultrapassarem a renda diária, envie um alerta amigável e encorajador.",
        "Se não houve gastos, incentive a economia.",
        "Seja breve (1-2 frases) e use um emoji.",
    ]
    return "\n".join(lines)


def _is_offline(settings: Settings, client: Any) -> bool:
    if client is None and not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; FINA is offline")
        return True
    return False


async def _complete(client: Any, model: str, messages: List[dict]) -> str:
    response = await client.chat.completions.create(
        model=model,
        temperature=0.4,
        messages=messages,
    )
    content = response.choices[0].message.content if response.choices else ""
    return (content or "").strip()


async def _request(settings: Settings, client: Any, messages: List[dict]) -> str:
    # an injected client belongs to the caller; one built here is closed here
    if client is not None:
        return await _complete(client, settings.openai_model, messages)
    async with AsyncOpenAI(api_key=settings.openai_api_key) as owned:
        return await _complete(owned, settings.openai_model, messages)


async def ask_fina(
    snapshot: LedgerSnapshot,
    history: Sequence[ChatMessage],
    message: str,
    client: Any = None,
    settings: Optional[Settings] = None,
) -> str:
    """Answer `message` given the conversation so far. Never raises."""
    settings = settings or Settings.from_env()
    if _is_offline(settings, client):
        return OFFLINE_REPLY

    messages = [{"role": "system", "content": build_system_prompt(snapshot, settings)}]
    messages += [{"role": m.role, "content": m.text} for m in history]
    messages.append({"role": "user", "content": message})

    try:
        reply = await _request(settings, client, messages)
    except Exception:
        logger.exception("FINA chat request failed")
        return ERROR_REPLY
    return reply or ERROR_REPLY


async def daily_summary_insight(
    snapshot: LedgerSnapshot,
    now: Optional[datetime] = None,
    client: Any = None,
    settings: Optional[Settings] = None,
) -> str:
    settings = settings or Settings.from_env()
    now = now or snapshot.taken_at
    if _is_offline(settings, client):
        spent = daily_summary(snapshot.transactions, now).spent
        return daily_insight(spent, snapshot.monthly_income)

    messages = [{"role": "user", "content": build_daily_prompt(snapshot, now, settings)}]
    try:
        text = await _request(settings, client, messages)
    except Exception:
        logger.exception("Daily summary insight request failed")
        return DAILY_ERROR
    return text or DAILY_ERROR


@dataclass
class Conversation:
    """Chat transcript with FINA; starts with her greeting."""

    messages: List[ChatMessage] = field(
        default_factory=lambda: [ChatMessage("assistant", GREETING)]
    )

    @property
    def history(self) -> List[ChatMessage]:
        # the greeting is UI-only and is not sent to the model
        return self.messages[1:]

    async def send(
        self,
        snapshot: LedgerSnapshot,
        text: str,
        client: Any = None,
        settings: Optional[Settings] = None,
    ) -> Optional[str]:
        text = text.strip()
        if not text:
            return None
        history = list(self.history)
        self.messages.append(ChatMessage("user", text))
        reply = await ask_fina(snapshot, history, text, client=client, settings=settings)
        self.messages.append(ChatMessage("assistant", reply))
        return reply
