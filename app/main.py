import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
from datetime import datetime

import streamlit as st
import pandas as pd
import plotly.express as px

from tracker.config import load_settings, setup_logging
from tracker.domain import LATEST, SORT_MODES
from tracker.errors import StorageError, ValidationError
from tracker.events import event_bus, register_default_handlers
from tracker.pipeline import day_label, day_key
from tracker.services import ExpenseTracker
from tracker.storage import JsonFileStore
from tracker.windows import is_this_month, to_local


st.set_page_config(page_title="Expense Tracker", layout="centered")

settings = load_settings()
setup_logging(settings.log_level)
register_default_handlers(event_bus)

tracker = ExpenseTracker(JsonFileStore(settings.data_dir), bus=event_bus)


def run(coro):
    return asyncio.run(coro)


def money(value: float) -> str:
    return f"${value:,.2f}"


def group_to_df(items):
    return pd.DataFrame([
        {
            "Time": to_local(e.date).strftime("%H:%M:%S"),
            "Category": e.category,
            "Amount": money(e.amount),
            "Note": e.note,
        }
        for e in items
    ])


def daily_spend_df(expenses, now):
    rows = [
        {"day": day_key(e.date), "amount": e.amount}
        for e in expenses
        if is_this_month(e.date, now)
    ]
    if not rows:
        return pd.DataFrame(columns=["day", "amount"])
    return pd.DataFrame(rows).groupby("day", as_index=False)["amount"].sum().sort_values("day")


try:
    now = datetime.now().astimezone()
    overview = run(tracker.refresh(now))
except StorageError as e:
    st.error(f"Could not load your data: {e}")
    st.stop()

if "flash" in st.session_state:
    st.success(st.session_state.pop("flash"))

menu = st.sidebar.radio("Menu", ["🏠 Home", "➕ Add Expense", "⚙️ Settings"])

if menu == "🏠 Home":
    st.title("🏠 Overview")

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Today", money(overview.totals.today))
    with k2:
        st.metric("This Week", money(overview.totals.week))
    with k3:
        st.metric("This Month", money(overview.totals.month))

    monthly = daily_spend_df(overview.expenses, now)
    if not monthly.empty:
        fig = px.bar(
            monthly,
            x="day",
            y="amount",
            labels={"day": "Day", "amount": "Spent ($)"},
            title="Spending this month",
        )
        fig.update_layout(margin=dict(t=40, b=10, l=10, r=10), height=260)
        st.plotly_chart(fig, use_container_width=True)

    search = st.text_input("🔍 Search by note...", key="home_search")
    col1, col2 = st.columns(2)
    with col1:
        filter_category = st.selectbox(
            "Category",
            options=[""] + list(overview.categories),
            format_func=lambda c: c or "All Categories",
            key="home_category",
        )
    with col2:
        sort_mode = st.selectbox(
            "Sort",
            options=list(SORT_MODES),
            format_func=lambda m: "Latest First" if m == LATEST else "Highest Amount First",
            key="home_sort",
        )

    grouped = tracker.view(
        overview.expenses,
        category=filter_category,
        search=search,
        sort_mode=sort_mode,
    )

    if not grouped:
        st.info("No expenses to display.")
    for key, items in grouped.items():
        st.subheader(day_label(key))
        st.table(group_to_df(items))

elif menu == "➕ Add Expense":
    st.title("➕ Add Expense")

    with st.form("add_expense_form", clear_on_submit=True):
        amount = st.text_input("💰 Amount", placeholder="e.g. 199.99")
        category = st.selectbox("Category", options=list(overview.categories), index=0 if overview.categories else None)
        note = st.text_input("📝 Note (optional)")
        submitted = st.form_submit_button("Save Expense")

    if submitted:
        try:
            run(tracker.add_expense(amount, category or "", note))
            st.success("Expense saved ✅")
        except ValidationError as e:
            st.warning(e.message)
        except StorageError:
            st.error("Could not save expense")

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")

    st.subheader("Categories")
    for cat in overview.categories:
        st.markdown(f"- {cat}")

    with st.form("add_category_form", clear_on_submit=True):
        new_category = st.text_input("➕ Add new category")
        add_clicked = st.form_submit_button("Add Category")

    if add_clicked:
        try:
            run(tracker.add_category(new_category))
            st.rerun()
        except ValidationError as e:
            st.warning(e.message)
        except StorageError:
            st.error("Could not save category")

    st.divider()
    if st.button("Clear All Data", type="primary", key="btn_clear_all"):
        st.session_state["confirm_clear"] = True

    if st.session_state.get("confirm_clear"):
        st.warning("Clear all expenses?")
        c_yes, c_cancel = st.columns(2)
        with c_yes:
            if st.button("Yes", key="btn_confirm_clear"):
                st.session_state["confirm_clear"] = False
                try:
                    run(tracker.clear_all())
                    st.session_state["flash"] = "All data cleared ✅"
                    st.rerun()
                except StorageError:
                    st.error("Could not clear data")
        with c_cancel:
            if st.button("Cancel", key="btn_cancel_clear"):
                st.session_state["confirm_clear"] = False
                st.rerun()
