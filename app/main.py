import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
from datetime import datetime, time

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from mintmind.advice import GeminiAdviceProvider, get_financial_advice, get_personalized_budget_advice
from mintmind.budget import calculate_emergency_fund
from mintmind.config import configure_logging, load_settings
from mintmind.domain import ExpenseCategory, IncomeCategory, RiskLevel, Theme, TransactionType
from mintmind.emi import calculate_emi, calculate_max_emi
from mintmind.functional import InvalidTransaction
from mintmind.goals import create_goal_plan
from mintmind.ledger import daily_series
from mintmind.patterns import analyze_all_patterns
from mintmind.services import TransactionStore
from mintmind.sip import calculate_recommended_sip, calculate_sip
from mintmind.storage import JsonFileStore, load_seed

settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title="MintMind", layout="wide")

disk = JsonFileStore(settings.data_path)

if "store" not in st.session_state:
    store = TransactionStore()
    asyncio.run(store.load(disk))
    if not store.transactions and os.path.exists(settings.seed_path):
        profile, transactions = load_seed(settings.seed_path)
        store = TransactionStore(transactions, profile, settings=store.settings)
    st.session_state.store = store

if "chat" not in st.session_state:
    st.session_state.chat = [
        ("assistant", "Hi! I'm MintMind AI, your personal financial coach. Ask me anything about "
                      "budgeting, SIP investments, EMI calculations, or financial planning!"),
    ]

store: TransactionStore = st.session_state.store
CUR = store.settings.currency
CHART_TEMPLATE = "plotly_dark" if store.settings.theme == Theme.DARK else "plotly_white"


def persist():
    if not asyncio.run(store.save(disk)):
        st.error("Could not save your data. Changes are kept for this session only.")


def tx_to_df(tx_list):
    rows = [
        {
            "id": t.id,
            "date": pd.to_datetime(t.date),
            "type": t.type.value,
            "category": t.category.value,
            "amount": t.amount,
            "note": t.note,
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["id", "date", "type", "category", "amount", "note"])


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Transactions", "📊 Insights", "📈 SIP & EMI", "🤖 AI Coach", "⚙️ Settings"]
)

if store.budget is None and menu not in ("⚙️ Settings", "📈 SIP & EMI"):
    st.info("Set your monthly income in Settings to unlock the dashboard.")
    st.stop()

if menu == "🏠 Dashboard":
    st.title("Your Dashboard")
    st.caption(datetime.now().strftime("%A %d %B, %Y"))

    for alert in store.budget_alerts():
        st.error(f"⚠️ {alert['message']}")

    report = store.monthly_report()
    for check in report["validation"]:
        for msg in check["messages"]:
            st.warning(msg)

    snap = report["result"]["snapshot"]
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Income (excl. refunds)", f"{CUR}{snap.true_income:,.0f}")
    with k2:
        st.metric("Net Expenses", f"{CUR}{snap.net_expenses:,.0f}",
                  delta=f"-{CUR}{snap.total_refunds:,.0f} refunds" if snap.total_refunds else None)
    with k3:
        st.metric("Burn Rate", f"{CUR}{snap.burn_rate:,.2f}/day")
    with k4:
        st.metric("Month-end Projection", f"{CUR}{snap.month_end_projection:,.0f}")

    if report["result"]["over_limit"]:
        st.warning(f"Over your monthly limit by {CUR}{-report['result']['limit_remaining']:,.0f}")
    for action in report["result"]["summary"].recommended_actions[:1]:
        st.info(f"💡 {action}")

    budget = store.budget
    remaining = store.remaining_budget()
    b1, b2, b3 = st.columns(3)
    b1.metric("Today", f"{CUR}{remaining.daily_spent:,.0f}", f"{remaining.daily_remaining:,.0f} left")
    b2.metric("This week", f"{CUR}{remaining.weekly_spent:,.0f}", f"{remaining.weekly_remaining:,.0f} left")
    b3.metric("This month", f"{CUR}{remaining.monthly_spent:,.0f}", f"{remaining.monthly_remaining:,.0f} left")

    col_pie, col_bar = st.columns(2)
    with col_pie:
        if snap.category_breakdown:
            fig_cat = px.pie(
                names=[row.category.value for row in snap.category_breakdown],
                values=[row.amount for row in snap.category_breakdown],
                title="Spending by Category",
                template=CHART_TEMPLATE,
            )
            st.plotly_chart(fig_cat, use_container_width=True)
        else:
            st.info("No expenses this month yet.")
    with col_bar:
        series = daily_series(store.monthly_transactions(), 7)
        fig_daily = px.bar(
            x=[d.date for d in series],
            y=[d.amount for d in series],
            labels={"x": "Day", "y": f"Spent ({CUR})"},
            title="Last 7 Days",
            template=CHART_TEMPLATE,
        )
        st.plotly_chart(fig_daily, use_container_width=True)

    fig_plan = go.Figure(go.Pie(
        labels=["Needs", "Wants", "Savings"],
        values=[budget.needs, budget.wants, budget.savings],
        hole=0.5,
    ))
    fig_plan.update_layout(template=CHART_TEMPLATE, title="50/30/20 Plan", margin=dict(t=40, b=10, l=10, r=10))
    st.plotly_chart(fig_plan, use_container_width=True)

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    tx_type = st.radio("Type", [TransactionType.EXPENSE, TransactionType.INCOME],
                       format_func=lambda t: t.value.title(), horizontal=True)
    options = list(ExpenseCategory) if tx_type == TransactionType.EXPENSE else list(IncomeCategory)

    with st.form("input_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            date = st.date_input("Date")
            amount = st.number_input(f"Amount ({CUR})", min_value=0.0, step=100.0, format="%.2f")
        with col2:
            category = st.selectbox("Category", options, format_func=lambda c: c.value)
            note = st.text_input("Note (optional)")
        submitted = st.form_submit_button("Add Transaction")

    if submitted:
        if amount <= 0:
            st.warning("Enter an amount greater than zero.")
        else:
            try:
                store.add_transaction(tx_type, float(amount), category, datetime.combine(date, time(12, 0)), note)
            except InvalidTransaction as e:
                st.error(f"Invalid transaction: {e}")
            else:
                persist()
                st.success("Transaction added")

    snap = store.finance_snapshot()
    st.metric("Monthly Balance", f"{CUR}{snap.remaining_budget:,.0f}")

    for t in sorted(store.transactions, key=lambda t: t.date, reverse=True):
        sign = "+" if t.type == TransactionType.INCOME else "-"
        with st.expander(f"{t.date:%d %b} · {t.category.value} · {sign}{CUR}{t.amount:,.0f}  {t.note}"):
            if t.type == TransactionType.EXPENSE:
                insight = store.insight_for(t.id).get_or_else(None)
                if insight is not None:
                    if insight.predictive_alert:
                        st.warning(insight.predictive_alert)
                    if insight.warning_message:
                        st.error(insight.warning_message)
                    if insight.should_skip:
                        st.markdown("💡 **Consider skipping this expense**")
                    st.caption(f"📊 {insight.moment_analysis}")
                    c1, c2, c3 = st.columns(3)
                    c1.metric("Savings Index", f"{insight.savings_index}/10")
                    c2.metric("Month-end Impact", f"{CUR}{insight.month_end_impact:,.0f}")
                    c3.metric("Burn-rate Drift", f"{CUR}{insight.burn_rate_drift:,.2f}/day")
            if st.button("🗑 Delete", key=f"del_{t.id}"):
                store.delete_transaction(t.id)
                persist()
                st.rerun()

    df = tx_to_df(store.transactions)
    if not df.empty:
        csv = df.to_csv(index=False).encode("utf-8")
        st.download_button("⬇ Download CSV", csv, file_name="transactions.csv")

elif menu == "📊 Insights":
    st.title("📊 Insights")
    summary = store.insight_summary()

    c1, c2 = st.columns(2)
    c1.metric("Savings Potential", f"{CUR}{summary.total_savings_potential:,.0f}")
    c2.metric("Projection Confidence", f"{summary.projection_confidence}%")

    st.subheader("Recommended Actions")
    if summary.recommended_actions:
        for action in summary.recommended_actions:
            st.markdown(f"- {action}")
    else:
        st.success("You're on track this month.")

    st.subheader("Category Health")
    if summary.category_scores:
        scores = pd.DataFrame([
            {
                "Category": s.category.value,
                "Spent": s.spent,
                "Allocation": s.allocation,
                "Used %": s.usage_percent,
                "Status": s.status.value,
            }
            for s in summary.category_scores
        ])
        st.dataframe(scores, use_container_width=True)

    patterns = analyze_all_patterns(store.transactions)
    if patterns:
        st.subheader("3-Month Patterns")
        fig = go.Figure()
        for category, p in patterns.items():
            fig.add_trace(go.Scatter(x=["M-2", "M-1", "This month"], y=list(p.monthly_totals),
                                     mode="lines+markers", name=f"{category.value} ({p.trend.value})"))
        fig.update_layout(template=CHART_TEMPLATE, margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)

elif menu == "📈 SIP & EMI":
    st.title("📈 SIP & EMI")
    tab_sip, tab_emi, tab_goal = st.tabs(["SIP", "EMI", "Goal"])

    with tab_sip:
        monthly = st.number_input("Monthly Investment", min_value=0.0, value=10000.0, step=500.0)
        rate = st.number_input("Expected Annual Return (%)", min_value=0.0, value=12.0, step=0.5)
        years = st.number_input("Investment Period (years)", min_value=1, value=10, step=1)
        result = calculate_sip(monthly, rate, int(years))
        s1, s2, s3 = st.columns(3)
        s1.metric("Invested", f"{CUR}{result.total_invested:,}")
        s2.metric("Returns", f"{CUR}{result.total_returns:,}")
        s3.metric("Final Value", f"{CUR}{result.final_value:,}")
        fig_sip = px.bar(
            x=[f"Y{y.year}" for y in result.yearly_breakdown],
            y=[y.total for y in result.yearly_breakdown],
            labels={"x": "Year", "y": f"Value ({CUR})"},
            template=CHART_TEMPLATE,
        )
        st.plotly_chart(fig_sip, use_container_width=True)
        if store.profile.monthly_income > 0:
            rec = calculate_recommended_sip(store.profile.monthly_income, store.profile.monthly_expenses,
                                            store.profile.risk_level)
            st.caption(f"Recommended SIP for your profile: {CUR}{rec:,}")

    with tab_emi:
        principal = st.number_input("Loan Amount", min_value=0.0, value=500000.0, step=10000.0)
        loan_rate = st.number_input("Annual Interest Rate (%)", min_value=0.0, value=8.5, step=0.25)
        tenure = st.number_input("Tenure (years)", min_value=1, value=5, step=1)
        emi = calculate_emi(principal, loan_rate, int(tenure))
        e1, e2, e3 = st.columns(3)
        e1.metric("EMI", f"{CUR}{emi.emi:,}")
        e2.metric("Total Interest", f"{CUR}{emi.total_interest:,}")
        e3.metric("Total Payment", f"{CUR}{emi.total_payment:,}")
        if store.profile.monthly_income > 0:
            st.caption(f"Max affordable EMI: {CUR}{calculate_max_emi(store.profile.monthly_income):,}")

    with tab_goal:
        target = st.number_input("Target Amount", min_value=1.0, value=1000000.0, step=50000.0)
        goal_years = st.number_input("Timeline (years)", min_value=1, value=5, step=1, key="goal_years")
        savings = st.number_input("Current Savings", min_value=0.0, value=0.0, step=10000.0)
        plan = create_goal_plan(target, int(goal_years), savings, store.profile.monthly_income)
        st.metric("Required Monthly SIP", f"{CUR}{plan.required_monthly_sip:,}")
        st.table(pd.DataFrame([
            {"Year": m.year, "Amount": f"{CUR}{m.amount:,}", "Status": m.description} for m in plan.milestones
        ]))

elif menu == "🤖 AI Coach":
    st.title("🤖 AI Coach")
    for role, content in st.session_state.chat:
        with st.chat_message(role):
            st.markdown(content)

    prompt = st.chat_input("Ask about budgeting, SIP or EMI")
    if prompt:
        st.session_state.chat.append(("user", prompt))
        profile = store.profile if store.profile.has_completed_onboarding else None
        try:
            provider = GeminiAdviceProvider(settings.gemini_api_key, settings.gemini_model)
        except ValueError as e:
            reply = f"AI coach unavailable: {e}"
        else:
            with st.spinner("Thinking..."):
                reply = get_financial_advice(prompt, profile, provider)
        st.session_state.chat.append(("assistant", reply))
        st.rerun()

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")
    p = store.profile
    with st.form("profile_form"):
        income = st.number_input("Monthly Income", min_value=0.0, value=float(p.monthly_income), step=1000.0)
        expenses = st.number_input("Monthly Expenses", min_value=0.0, value=float(p.monthly_expenses), step=1000.0)
        travel = st.number_input("Travel Cost", min_value=0.0, value=float(p.travel_cost), step=100.0)
        food = st.number_input("Food & Snacks", min_value=0.0, value=float(p.food_snacks), step=100.0)
        random_exp = st.number_input("Random Expenses", min_value=0.0, value=float(p.random_expenses), step=100.0)
        sip_goal = st.number_input("SIP Goal", min_value=0.0, value=float(p.sip_goal), step=500.0)
        risk = st.selectbox("Risk Level", list(RiskLevel), index=list(RiskLevel).index(p.risk_level),
                            format_func=lambda r: r.value.title())
        saved = st.form_submit_button("Save Profile")

    if saved:
        store.update_profile(
            monthly_income=income,
            monthly_expenses=expenses,
            travel_cost=travel,
            food_snacks=food,
            random_expenses=random_exp,
            sip_goal=sip_goal,
            risk_level=risk,
            has_completed_onboarding=True,
        )
        persist()
        st.success("Profile saved")

    if store.budget is not None:
        b = store.budget
        st.caption(
            f"Monthly limit {CUR}{b.monthly_limit:,} · weekly {CUR}{b.weekly_limit:,} · daily {CUR}{b.daily_limit:,}"
        )
        st.caption(f"Emergency fund target: {CUR}{calculate_emergency_fund(store.profile.monthly_expenses):,}")

    if st.button("Get personalized budget advice"):
        try:
            provider = GeminiAdviceProvider(settings.gemini_api_key, settings.gemini_model)
        except ValueError as e:
            st.warning(f"AI coach unavailable: {e}")
        else:
            with st.spinner("Analyzing your profile..."):
                st.markdown(get_personalized_budget_advice(store.profile, provider))

    st.subheader("Preferences")
    with st.form("settings_form"):
        theme = st.radio("Theme", list(Theme), index=list(Theme).index(store.settings.theme),
                         format_func=lambda t: t.value.title(), horizontal=True)
        currency = st.text_input("Currency symbol", value=store.settings.currency, max_chars=3)
        prefs_saved = st.form_submit_button("Save Preferences")

    if prefs_saved:
        store.update_settings(theme=theme, currency=currency or store.settings.currency)
        persist()
        st.rerun()

    st.subheader("Data")
    st.download_button(
        "⬇ Backup Data",
        store.backup(),
        file_name=f"mintmind-backup-{datetime.now():%Y%m%d%H%M%S}.json",
        mime="application/json",
    )

    confirm = st.checkbox("I understand this resets my profile and settings")
    if st.button("Reset All Data", disabled=not confirm):
        if asyncio.run(store.reset(disk)):
            st.success("All data has been reset")
            st.rerun()
        else:
            st.error("Could not reset your data.")
