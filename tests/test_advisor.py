from datetime import datetime
from types import SimpleNamespace

import pytest

from fina.advisor import (
    DAILY_ERROR,
    ERROR_REPLY,
    GREETING,
    OFFLINE_REPLY,
    ChatMessage,
    Conversation,
    ask_fina,
    build_daily_prompt,
    build_system_prompt,
    daily_summary_insight,
)
from fina.config import Settings
from fina.domain import Goal, Transaction
from fina.insights import SAVE_MORE
from fina.ledger import Ledger

NOW = datetime(2025, 9, 15, 18, 0)
ONLINE = Settings(openai_api_key="sk-test", openai_model="test-model")
OFFLINE = Settings(openai_api_key="")


class FakeClient:
    """Mimics the parts of AsyncOpenAI the advisor uses."""

    def __init__(self, reply="Oi Ana! 👋", error=None):
        self.calls = []
        self.reply = reply
        self.error = error
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class ClosingClient(FakeClient):
    """FakeClient that can be built by the advisor and used as a context manager."""

    instances = []

    def __init__(self, api_key=None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.closed = False
        ClosingClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def close(self):
        self.closed = True


@pytest.fixture
def built_clients(monkeypatch):
    ClosingClient.instances = []
    monkeypatch.setattr("fina.advisor.AsyncOpenAI", ClosingClient)
    return ClosingClient.instances


def make_snapshot():
    ledger = Ledger("Ana", 3000, 1000, goals=[Goal(name="Viagem", target_amount=2000, current_amount=500)])
    for i in range(7):
        ledger.record_transaction(Transaction.expense(10 + i, f"Cat{i}", date=NOW))
    return ledger.snapshot(NOW)


def test_system_prompt_carries_snapshot_data():
    prompt = build_system_prompt(make_snapshot())
    assert "Ana" in prompt
    assert "R$3000.00" in prompt
    assert "R$909.00" in prompt
    assert "Viagem (R$500.00 de R$2000.00)" in prompt
    # only the last five transactions
    assert "Cat1" not in prompt
    assert "Gasto de R$16.00 em Cat6" in prompt


def test_daily_prompt_has_today_numbers():
    prompt = build_daily_prompt(make_snapshot(), NOW)
    assert "Gastos de hoje: R$91.00" in prompt
    assert "Média de renda diária: R$100.00" in prompt


@pytest.mark.asyncio
async def test_ask_fina_sends_history_and_message():
    client = FakeClient()
    history = [ChatMessage("user", "Oi"), ChatMessage("assistant", "Olá!")]
    reply = await ask_fina(make_snapshot(), history, "Como posso economizar?", client=client, settings=ONLINE)

    assert reply == "Oi Ana! 👋"
    sent = client.calls[0]
    assert sent["model"] == "test-model"
    roles = [m["role"] for m in sent["messages"]]
    assert roles == ["system", "user", "assistant", "user"]
    assert sent["messages"][-1]["content"] == "Como posso economizar?"


@pytest.mark.asyncio
async def test_ask_fina_offline_without_key():
    assert await ask_fina(make_snapshot(), [], "Oi", settings=OFFLINE) == OFFLINE_REPLY


@pytest.mark.asyncio
async def test_ask_fina_failure_falls_back():
    client = FakeClient(error=RuntimeError("timeout"))
    assert await ask_fina(make_snapshot(), [], "Oi", client=client, settings=ONLINE) == ERROR_REPLY


@pytest.mark.asyncio
async def test_ask_fina_empty_reply_falls_back():
    client = FakeClient(reply="   ")
    assert await ask_fina(make_snapshot(), [], "Oi", client=client, settings=ONLINE) == ERROR_REPLY


def test_error_reply_text():
    assert ERROR_REPLY == "Ocorreu um erro ao processar sua solicitação."


@pytest.mark.asyncio
async def test_client_built_from_settings_is_closed(built_clients):
    reply = await ask_fina(make_snapshot(), [], "Oi", settings=ONLINE)
    assert reply == "Oi Ana! 👋"
    [client] = built_clients
    assert client.api_key == "sk-test"
    assert client.closed


@pytest.mark.asyncio
async def test_client_built_from_settings_is_closed_on_failure(built_clients, monkeypatch):
    async def failing(self, **kwargs):
        raise RuntimeError("timeout")

    monkeypatch.setattr(ClosingClient, "_create", failing)
    assert await daily_summary_insight(make_snapshot(), NOW, settings=ONLINE) == DAILY_ERROR
    [client] = built_clients
    assert client.closed


@pytest.mark.asyncio
async def test_injected_client_is_left_open(built_clients):
    client = ClosingClient(reply="ok")
    assert await ask_fina(make_snapshot(), [], "Oi", client=client, settings=ONLINE) == "ok"
    assert not client.closed


@pytest.mark.asyncio
async def test_daily_insight_offline_uses_rules():
    snap = Ledger("Ana", 3000, 0).snapshot(NOW)
    assert await daily_summary_insight(snap, NOW, settings=OFFLINE) == SAVE_MORE


@pytest.mark.asyncio
async def test_daily_insight_failure():
    client = FakeClient(error=ConnectionError())
    assert await daily_summary_insight(make_snapshot(), NOW, client=client, settings=ONLINE) == DAILY_ERROR


@pytest.mark.asyncio
async def test_conversation_keeps_transcript():
    client = FakeClient(reply="Corte o Lazer 😉")
    chat = Conversation()
    assert chat.messages == [ChatMessage("assistant", GREETING)]

    await chat.send(make_snapshot(), "Qual meu maior gasto?", client=client, settings=ONLINE)
    await chat.send(make_snapshot(), "E agora?", client=client, settings=ONLINE)

    assert [m.role for m in chat.messages] == ["assistant", "user", "assistant", "user", "assistant"]
    # greeting is not sent, earlier turns are
    second_call = client.calls[1]["messages"]
    assert [m["role"] for m in second_call] == ["system", "user", "assistant", "user"]


@pytest.mark.asyncio
async def test_conversation_ignores_blank_input():
    chat = Conversation()
    assert await chat.send(make_snapshot(), "   ", client=FakeClient(), settings=ONLINE) is None
    assert len(chat.messages) == 1


@pytest.mark.asyncio
async def test_ledger_can_change_while_waiting():
    ledger = Ledger("Ana", 3000, 100)
    snap = ledger.snapshot(NOW)

    class SlowClient(FakeClient):
        async def _create(self, **kwargs):
            ledger.record_transaction(Transaction.expense(50, "Lazer"))
            return await super()._create(**kwargs)

    client = SlowClient()
    await ask_fina(snap, [], "Oi", client=client, settings=ONLINE)
    assert "R$100.00" in client.calls[0]["messages"][0]["content"]
    assert ledger.current_balance == 50
