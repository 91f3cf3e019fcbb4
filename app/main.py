import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from datetime import date, datetime

from fintrack.assistant import FinanceAssistant, WELCOME_MESSAGE
from fintrack.config import ensure_data_directory, load_settings
from fintrack.domain import (
    Category,
    PaymentMethod,
    TransactionType,
    EXPENSE_CATEGORIES,
    STATUS_EXCEEDED,
    STATUS_WARNING,
)
from fintrack.functional import parse_budget_form
from fintrack.logging_setup import configure_logging
from fintrack.periods import month_bounds, today_iso
from fintrack.storage import open_gateway
from fintrack.tracker import FinanceTracker
from fintrack.transforms import with_labels

st.set_page_config(page_title="Finance Tracker", layout="wide")

settings = load_settings()
configure_logging(settings.log_level)

if "tracker" not in st.session_state:
    ensure_data_directory(settings)
    st.session_state.tracker = FinanceTracker(open_gateway(settings.store_path))
    st.session_state.assistant = FinanceAssistant(settings)
    st.session_state.chat = [("assistant", WELCOME_MESSAGE)]

tracker: FinanceTracker = st.session_state.tracker
assistant: FinanceAssistant = st.session_state.assistant
today = today_iso()


def money(value) -> str:
    return f"$ {float(value):,.2f}"


def tx_to_df(tx_list, provisioned=frozenset()):
    rows = [
        {
            "date": t.date,
            "description": t.description,
            "category": t.category,
            "payment": t.payment_method or "-",
            "amount": float(t.signed_amount),
            "status": "Provisioned" if t.id in provisioned else "",
            "id": t.id,
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["date", "description", "category", "payment", "amount", "status", "id"])


def transaction_form(key: str, default_date: str, initial=None):
    types = [t.value for t in TransactionType]
    categories = with_labels(Category, [initial.category] if initial else [])
    methods = with_labels(PaymentMethod, [initial.payment_method] if initial else [])
    with st.form(key, clear_on_submit=initial is None):
        description = st.text_input("Description", value=initial.description if initial else "")
        amount = st.number_input(
            "Amount", min_value=0.0, step=0.01, format="%.2f",
            value=float(initial.amount) if initial else 0.0,
        )
        tx_type = st.selectbox(
            "Type", types,
            index=types.index(initial.type.value) if initial else types.index(TransactionType.EXPENSE.value),
        )
        category = st.selectbox(
            "Category", categories,
            index=categories.index(initial.category) if initial and initial.category in categories else 0,
        )
        method = st.selectbox(
            "Payment method", methods,
            index=methods.index(initial.payment_method) if initial and initial.payment_method in methods else 0,
        )
        day = st.date_input("Date", value=date.fromisoformat(initial.date if initial else default_date))
        submitted = st.form_submit_button("Save")
    if not submitted:
        return
    draft = {
        "description": description,
        "amount": amount,
        "type": tx_type,
        "category": category,
        "payment_method": method,
        "date": day.isoformat(),
    }
    result = tracker.save_transaction(draft, editing_id=initial.id if initial else None)
    if result.is_left():
        st.error(result.get_error()["message"])
    else:
        st.success("Transaction saved")
        st.rerun()


st.sidebar.markdown("### 💰 Finance Tracker")
menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "➕ New Transaction", "🎯 Budget Goals", "🤖 Assistant"])
if tracker.last_updated:
    stamp = datetime.fromisoformat(tracker.last_updated)
    st.sidebar.caption(f"Last updated {stamp:%d/%m/%y %H:%M}")

if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")
    default_start, default_end = month_bounds(today)
    c1, c2 = st.columns(2)
    with c1:
        start = st.date_input("From", value=date.fromisoformat(default_start))
    with c2:
        end = st.date_input("To", value=date.fromisoformat(default_end))

    dash = tracker.dashboard(start.isoformat(), end.isoformat(), today)
    st.caption(f"Showing {dash.record_count} records")

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Current balance (all time)", money(dash.real_balance))
    with k2:
        st.metric("Period result", money(dash.totals.period_result))
    with k3:
        st.metric("Income (period)", money(dash.totals.total_income))
    with k4:
        st.metric("Expenses (period)", money(dash.totals.total_expense))

    left, right = st.columns(2)
    with left:
        st.subheader("Period transactions")
        if dash.transactions:
            df = tx_to_df(dash.transactions, dash.provisioned_ids)
            st.dataframe(df.drop(columns=["id"]), use_container_width=True, hide_index=True)
            victim = st.selectbox(
                "Delete transaction", ["-"] + list(df["id"]),
                format_func=lambda i: i if i == "-" else df.loc[df["id"] == i, "description"].item(),
            )
            if victim != "-" and st.button("Delete"):
                tracker.delete_transaction(victim)
                st.rerun()
        else:
            st.info("No transactions found in this period.")
    with right:
        st.subheader("Expenses by category")
        if dash.category_breakdown:
            df_cat = pd.DataFrame(
                [{"Category": c.category, "Total": float(c.amount), "Share": c.share} for c in dash.category_breakdown]
            )
            fig_cat = px.pie(df_cat, values="Total", names="Category", hole=0.5)
            st.plotly_chart(fig_cat, use_container_width=True)
        else:
            st.info("No expenses to show for this period.")

    left, right = st.columns(2)
    with left:
        st.subheader("Cash flow (summary)")
        fig_cmp = go.Figure(go.Bar(
            x=[p.name for p in dash.comparison],
            y=[float(p.value) for p in dash.comparison],
            marker_color=["#10b981", "#f43f5e"],
        ))
        fig_cmp.update_layout(margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_cmp, use_container_width=True)
    with right:
        st.subheader("Expenses by payment method")
        if dash.payment_breakdown:
            fig_pay = px.bar(
                x=[float(p.amount) for p in dash.payment_breakdown],
                y=[p.method for p in dash.payment_breakdown],
                orientation="h",
                labels={"x": "Amount", "y": "Method"},
            )
            st.plotly_chart(fig_pay, use_container_width=True)
        else:
            st.info("No payment data for this period.")

    st.subheader("🎯 Budget progress (this month)")
    if not dash.has_budgets:
        st.info("You haven't set any spending limits yet. Open Budget Goals to add some.")
    for item in dash.budget_status:
        if item.status == STATUS_EXCEEDED:
            badge = "🔴 Exceeded"
        elif item.status == STATUS_WARNING:
            badge = "🟠 Warning"
        else:
            badge = "🟢 On track"
        st.markdown(f"**{item.category}** {badge} ({item.percentage:.0f}%)")
        st.progress(item.progress / 100)
        st.caption(f"Spent {money(item.spent)} of {money(item.limit)} ({money(item.remaining)} left)")

elif menu == "➕ New Transaction":
    st.title("➕ New Transaction")
    provision = st.toggle("Provision a future entry")
    transaction_form("new_tx", tracker.provision_date(today) if provision else today)

    if tracker.transactions:
        st.subheader("✏️ Edit Transaction")
        ids = [t.id for t in tracker.transactions]
        chosen = st.selectbox(
            "Transaction", ids,
            format_func=lambda i: f"{tracker.find(i).date} · {tracker.find(i).description}",
        )
        transaction_form(f"edit_{chosen}", today, initial=tracker.find(chosen))

elif menu == "🎯 Budget Goals":
    st.title("🎯 Monthly Budget Goals")
    current = {b.category: b.limit for b in tracker.budgets}
    with st.form("budgets"):
        cols = st.columns(3)
        values = {}
        for idx, category in enumerate(with_labels(EXPENSE_CATEGORIES, current)):
            with cols[idx % 3]:
                values[category] = st.text_input(
                    category, value=str(current[category]) if category in current else ""
                )
        if st.form_submit_button("Save goals"):
            tracker.set_budgets(parse_budget_form(values))
            st.success("Budget goals saved")

elif menu == "🤖 Assistant":
    st.title("🤖 Financial Assistant")
    if not assistant.configured:
        st.warning("Set OPENAI_API_KEY to enable the assistant.")
    for role, text in st.session_state.chat:
        with st.chat_message(role):
            st.markdown(text)
    question = st.chat_input("Ask about your spending...")
    if question:
        st.session_state.chat.append(("user", question))
        with st.spinner("Thinking..."):
            answer = assistant.ask(tracker.transactions, question)
        st.session_state.chat.append(("assistant", answer))
        st.rerun()
