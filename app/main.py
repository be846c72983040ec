import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging
from dataclasses import replace
from datetime import datetime

import numpy as np
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from fina.advisor import QUICK_REPLIES, Conversation, daily_summary_insight
from fina.aggregates import daily_summary, last_days_series, period_total, sum_by_category
from fina.balance import balance_trend
from fina.config import Settings
from fina.domain import EXPENSE_CATEGORIES, GOAL_OPTIONS, FinaError, Goal, GoalIcon, Period, Transaction
from fina.flags import AppFlags
from fina.goals import goal_status, is_complete
from fina.insights import spending_highlight, top_category_insight, weekly_insight
from fina.ledger import Ledger
from fina.reports import weekly_report
from fina.temporal import filter_period, newest_first
from fina.transforms import load_seed, transactions_frame

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="FINA", layout="centered")


def load_settings() -> Settings:
    settings = Settings.from_env()
    if not settings.openai_api_key:
        try:
            key = st.secrets.get("OPENAI_API_KEY", "")
        except FileNotFoundError:
            key = ""
        if key:
            settings = replace(settings, openai_api_key=key)
    return settings


settings = load_settings()
flags = AppFlags.load(settings.flags_path)

PERIOD_LABELS = {Period.DAY: "Dia", Period.WEEK: "Semana", Period.MONTH: "Mês", Period.BIMESTER: "Bimestre"}


def onboarding():
    st.title("👋 Bem-vindo à FINA")
    st.caption("Sua assistente financeira pessoal.")
    with st.form("onboarding"):
        user_name = st.text_input("Como você se chama?")
        monthly_income = st.number_input("Renda mensal (R$)", min_value=0.0, step=100.0, format="%.2f")
        current_balance = st.number_input("Saldo atual (R$)", step=100.0, format="%.2f")
        chosen = st.multiselect(
            "Quais são as suas metas?",
            list(GoalIcon),
            format_func=lambda icon: GOAL_OPTIONS[icon],
        )
        details = {}
        for icon in chosen:
            c1, c2 = st.columns(2)
            with c1:
                current = st.number_input(f"{GOAL_OPTIONS[icon]}: valor atual", min_value=0.0, key=f"cur_{icon.value}")
            with c2:
                target = st.number_input(f"{GOAL_OPTIONS[icon]}: valor alvo", min_value=0.0, key=f"tgt_{icon.value}")
            details[icon] = (current, target)
        submitted = st.form_submit_button("Começar")

    if submitted and user_name and monthly_income:
        goals = [
            Goal(id=icon.value, name=GOAL_OPTIONS[icon], icon=icon, current_amount=cur, target_amount=tgt)
            for icon, (cur, tgt) in details.items()
        ]
        st.session_state.ledger = Ledger.from_onboarding(user_name, monthly_income, current_balance, goals)
        st.rerun()

    if st.button("Usar dados de demonstração"):
        st.session_state.ledger = load_seed("data/seed.json")
        st.rerun()


if "ledger" not in st.session_state:
    onboarding()
    st.stop()

ledger: Ledger = st.session_state.ledger
now = datetime.now()
snapshot = ledger.snapshot(now)

if not flags.has_seen_tutorial:
    st.info("💡 Registre seus gastos e ganhos, acompanhe suas metas e converse com a FINA para dicas.")
    if st.button("Entendi"):
        flags.mark_tutorial_seen(settings.flags_path)
        st.rerun()

st.sidebar.markdown(f"### 👤 {ledger.user_name}")
st.sidebar.metric("Saldo atual", settings.money(ledger.current_balance))
menu = st.sidebar.radio(
    "Menu",
    ["🏠 Painel", "🧾 Entradas e Saídas", "🎯 Metas", "📊 Visualizações", "📅 Relatório Semanal", "💬 FINA", "⭐ Assinatura"],
)

if menu == "🏠 Painel":
    summary = daily_summary(snapshot.transactions, now)
    k1, k2, k3 = st.columns(3)
    k1.metric("Gastos de hoje", settings.money(summary.spent))
    k2.metric("Ganhos de hoje", settings.money(summary.earned))
    k3.metric("Variação", settings.money(summary.variation))

    if st.button("📝 Resumo do dia"):
        with st.spinner("A FINA está analisando o seu dia..."):
            st.success(asyncio.run(daily_summary_insight(snapshot, now, settings=settings)))

    exp_tab, inc_tab = st.tabs(["➖ Gasto", "➕ Ganho"])
    with exp_tab:
        with st.form("expense_form", clear_on_submit=True):
            category = st.selectbox("Com o que gastou?", EXPENSE_CATEGORIES)
            amount = st.number_input("Qual o valor? (R$)", min_value=0.0, step=10.0, format="%.2f")
            if st.form_submit_button("Salvar Gasto") and amount:
                results = ledger.record_transaction(Transaction.expense(amount, category))
                for r in results:
                    if r.get("insight"):
                        st.session_state.last_insight = r["insight"]
                st.rerun()
    with inc_tab:
        with st.form("income_form", clear_on_submit=True):
            amount = st.number_input("Quanto recebeu hoje? (R$)", min_value=0.0, step=10.0, format="%.2f")
            source = st.text_input("De qual fonte?", placeholder="Salário, Extra, etc.")
            if st.form_submit_button("Salvar Ganho") and amount:
                ledger.record_transaction(Transaction.income(amount, source=source))
                st.rerun()

    if st.session_state.get("last_insight"):
        st.success("✅ Gasto adicionado! " + st.session_state.pop("last_insight"))

elif menu == "🧾 Entradas e Saídas":
    st.title("🧾 Entradas e Saídas")
    period = st.radio("Período", list(Period), index=1, horizontal=True, format_func=PERIOD_LABELS.get)
    selected = newest_first(filter_period(snapshot.transactions, now, period))
    st.metric("No período", settings.money(period_total(snapshot.transactions, now, period)))
    if not selected:
        st.info("Nenhuma transação neste período.")
    else:
        df = transactions_frame(selected)
        df["Data"] = df["date"].dt.strftime("%d/%m/%Y")
        df["Valor"] = df["signed_amount"].map(lambda v: f"{'+' if v >= 0 else '-'} R$ {abs(v):.2f}")
        st.table(df[["Data", "category", "source", "Valor"]].rename(columns={"category": "Categoria", "source": "Fonte"}))

elif menu == "🎯 Metas":
    st.title("🎯 Metas")
    for goal in snapshot.goals:
        status = goal_status(goal, ledger.monthly_income, settings.savings_rate)
        with st.container(border=True):
            st.subheader(("🏆 " if status.complete else "") + goal.name)
            st.caption(f"{settings.money(goal.current_amount)} / {settings.money(goal.target_amount)}  ·  {status.progress:.0f}%")
            st.progress(float(status.display_progress) / 100)
            if status.complete:
                st.success("Meta Concluída! 🎉")
            elif status.months_remaining > 0:
                st.caption(f"Tempo estimado: **{status.months_remaining} meses**")
            with st.form(f"contrib_{goal.id}", clear_on_submit=True):
                added = st.number_input("Quanto você guardou?", min_value=0.0, step=10.0, key=f"add_{goal.id}")
                if st.form_submit_button("Adicionar Valor"):
                    try:
                        updated = ledger.contribute_to_goal(goal.id, added)
                    except FinaError as e:
                        st.error(str(e))
                    else:
                        if is_complete(updated):
                            st.balloons()
                        st.rerun()

    with st.expander("➕ Adicionar Nova Meta"):
        with st.form("new_goal", clear_on_submit=True):
            name = st.text_input("Nome da meta")
            current = st.number_input("Valor atual (opcional)", min_value=0.0)
            target = st.number_input("Valor alvo", min_value=0.0)
            if st.form_submit_button("Criar Meta") and name and target:
                ledger.add_goal(name, target_amount=target, current_amount=current)
                st.rerun()

elif menu == "📊 Visualizações":
    st.title("📊 Visualizações")
    series = last_days_series(snapshot.transactions, now, days=7)
    fig_week = go.Figure()
    labels = [d.day.strftime("%d/%m") for d in series]
    fig_week.add_trace(go.Bar(x=labels, y=[float(d.expense) for d in series], name="Gastos", marker_color="#ef4444"))
    fig_week.add_trace(go.Bar(x=labels, y=[float(d.income) for d in series], name="Ganhos", marker_color="#22c55e"))
    fig_week.update_layout(title="Gastos vs Ganhos (Últimos 7 dias)", barmode="group", margin=dict(t=40, b=10, l=10, r=10))
    st.plotly_chart(fig_week, use_container_width=True)

    by_cat = sum_by_category(snapshot.transactions)
    if by_cat:
        values = np.array([float(v) for v in by_cat.values()])
        shares = np.round(values / values.sum() * 100, 1)
        fig_cat = px.pie(names=list(by_cat.keys()), values=values, title="Distribuição de Gastos")
        fig_cat.update_traces(customdata=shares, hovertemplate="%{label}: R$%{value:.2f} (%{customdata}%)")
        st.plotly_chart(fig_cat, use_container_width=True)
    else:
        st.info("Sem dados de gastos para exibir.")

    trend = balance_trend(snapshot)
    if trend:
        fig_bal = px.line(x=[p.label for p in trend], y=[float(p.balance) for p in trend], markers=True, title="Evolução de Saldo")
        fig_bal.update_layout(xaxis_title="", yaxis_title="Saldo (R$)")
        st.plotly_chart(fig_bal, use_container_width=True)
    else:
        st.info("Sem histórico para exibir.")

    st.subheader("Destaques da IA")
    st.write(spending_highlight(snapshot.transactions))

elif menu == "📅 Relatório Semanal":
    st.title("📅 Relatório Semanal Inteligente")
    report = weekly_report(snapshot.transactions, now)
    c1, c2 = st.columns(2)
    c1.metric("Ganhos Totais", settings.money(report.this_week.income))
    c2.metric("Gastos Totais", settings.money(report.this_week.expense))
    fig_cmp = px.bar(
        x=[float(report.last_week.expense), float(report.this_week.expense)],
        y=["Semana Passada", "Esta Semana"],
        orientation="h",
        labels={"x": "Gastos (R$)", "y": ""},
        title="Comparativo de Gastos",
    )
    st.plotly_chart(fig_cmp, use_container_width=True)
    st.info(weekly_insight(report.expense_change))
    if report.top_category:
        st.write(top_category_insight(report))

elif menu == "💬 FINA":
    st.title("💬 FINA")
    if "conversation" not in st.session_state:
        st.session_state.conversation = Conversation()
    conversation: Conversation = st.session_state.conversation

    for msg in conversation.messages:
        with st.chat_message("user" if msg.role == "user" else "assistant"):
            st.write(msg.text)

    quick = None
    cols = st.columns(len(QUICK_REPLIES))
    for col, text in zip(cols, QUICK_REPLIES):
        if col.button(text):
            quick = text
    prompt = st.chat_input("Pergunte algo à FINA") or quick
    if prompt:
        with st.spinner("FINA está digitando..."):
            asyncio.run(conversation.send(snapshot, prompt, settings=settings))
        st.rerun()

elif menu == "⭐ Assinatura":
    st.title("⭐ FINA Premium")
    if flags.is_subscribed:
        st.success("Você já é assinante. Obrigado! 💜")
    elif st.button("Assinar"):
        flags.subscribe(settings.flags_path)
        st.rerun()
