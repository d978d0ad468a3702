"""
Streamlit Frontend for Expense Tracker

Pages:
1. Dashboard - month total, top categories, recent expenses
2. Add Expense - manual entry
3. Transactions - search, category and date-range filters
4. Analytics - 7-day chart and category breakdown
5. Scan Receipt - AI extraction, review, confirm
6. Settings - preferences, export/import, connection status

The UI enforces the human-in-the-loop principle for scanned receipts:
- User sees what was extracted
- User confirms or edits
- Nothing is saved without an explicit "Save" action
"""

import asyncio
import math
from datetime import datetime, time

import streamlit as st
from pydantic import ValidationError

from expense_tracker.analytics import (
    compute_analytics,
    format_currency,
    format_date,
    format_percentage,
    format_short_date,
)
from expense_tracker.audit import create_correlation_id
from expense_tracker.catalog import EXPENSE_CATEGORIES
from expense_tracker.config import validate_all_settings
from expense_tracker.models import ExpenseDraft, ReceiptEdits, Theme
from expense_tracker.models.expense import DESCRIPTION_MAX_LENGTH
from expense_tracker.orchestrator import create_app_components, initialize_components
from expense_tracker.queries import TransactionFilter, filter_expenses, total_amount


st.set_page_config(
    page_title="Financial Tracker",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Run a coroutine on this session's event loop."""
    loop = st.session_state.get("event_loop")
    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        st.session_state.event_loop = loop
    return loop.run_until_complete(coro)


def get_components():
    """
    Get or create this session's components, with data loaded.

    Stores and their locks live in session state next to the loop that
    drives them; sessions never share a lock across threads.
    """
    if "components" not in st.session_state:
        st.session_state.components = run_async(
            initialize_components(create_app_components())
        )
    return st.session_state.components


def category_label(category) -> str:
    return f"{category.icon} {category.name}"


def main():
    """Main application entry point."""
    components = get_components()
    currency = components.preferences_store.preferences.currency

    st.sidebar.title("💸 Financial Tracker")
    st.sidebar.caption("Track your expenses with AI")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "🏠 Dashboard",
            "➕ Add Expense",
            "📋 Transactions",
            "📈 Analytics",
            "📷 Scan Receipt",
            "⚙️ Settings",
        ],
        index=0,
    )

    if page == "🏠 Dashboard":
        render_dashboard_page(components, currency)
    elif page == "➕ Add Expense":
        render_add_expense_page(components)
    elif page == "📋 Transactions":
        render_transactions_page(components, currency)
    elif page == "📈 Analytics":
        render_analytics_page(components, currency)
    elif page == "📷 Scan Receipt":
        render_scan_page(components, currency)
    elif page == "⚙️ Settings":
        render_settings_page(components)


def render_dashboard_page(components, currency: str):
    """Render the dashboard."""
    st.title("🏠 Dashboard")
    analytics = compute_analytics(components.expense_store.expenses, datetime.now())

    col1, col2 = st.columns(2)
    col1.metric("This Month", format_currency(analytics.total_this_month, currency))
    col2.metric("Categories", len(analytics.category_breakdown))

    st.markdown("### Top Categories")
    if not analytics.category_breakdown:
        st.info("No spending this month yet.")
    for item in analytics.category_breakdown[:3]:
        st.markdown(
            f"{category_label(item.category)} · "
            f"**{format_currency(item.amount, currency)}** "
            f"({format_percentage(item.percentage)} of spending)"
        )

    st.markdown("### Recent Expenses")
    if not analytics.recent_expenses:
        st.info("No expenses in the last 7 days. Add one or scan a receipt!")
    for expense in analytics.recent_expenses:
        ai_badge = " 🤖" if expense.is_ai_generated else ""
        st.markdown(
            f"{expense.category.icon} **{expense.description}**{ai_badge} · "
            f"{format_short_date(expense.date)} · "
            f"-{format_currency(expense.amount, currency)}"
        )


def render_add_expense_page(components):
    """Render the manual entry form."""
    st.title("➕ Add Expense")
    st.caption("Track your spending manually")

    with st.form("add_expense", clear_on_submit=True):
        amount_text = st.text_input("Amount", placeholder="0.00")
        description = st.text_input(
            "Description",
            placeholder="What did you spend on?",
            max_chars=DESCRIPTION_MAX_LENGTH,
        )
        category = st.selectbox(
            "Category",
            options=list(EXPENSE_CATEGORIES),
            format_func=category_label,
        )
        submitted = st.form_submit_button("Save Expense")

    if not submitted:
        return

    try:
        amount = float(amount_text)
    except ValueError:
        amount = 0.0
    if not math.isfinite(amount) or amount <= 0 or not description.strip():
        st.error("Please enter a positive amount and a description.")
        return
    if len(description.strip()) > DESCRIPTION_MAX_LENGTH:
        st.error(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters.")
        return

    try:
        draft = ExpenseDraft(amount=amount, description=description, category=category)
    except ValidationError:
        st.error("Please check the expense details and try again.")
        return

    expense = run_async(components.expense_store.add(draft))
    if expense:
        st.success("Expense saved!")
    else:
        st.error("Could not save the expense. Please try again.")


def render_transactions_page(components, currency: str):
    """Render the filterable transaction list."""
    st.title("📋 Transactions")

    col1, col2, col3 = st.columns(3)
    with col1:
        search = st.text_input("Search", placeholder="Search expenses...")
    with col2:
        category = st.selectbox(
            "Category",
            options=[None] + list(EXPENSE_CATEGORIES),
            format_func=lambda c: "All" if c is None else category_label(c),
        )
    with col3:
        date_range = st.date_input("Date Range", value=[])

    start_date = date_range[0] if len(date_range) > 0 else None
    end_date = date_range[1] if len(date_range) > 1 else None

    criteria = TransactionFilter(
        search=search,
        category_id=category.id if category else None,
        start_date=start_date,
        end_date=end_date,
    )
    expenses = filter_expenses(components.expense_store.expenses, criteria)

    st.caption(
        f"{len(expenses)} expenses • {format_currency(total_amount(expenses), currency)}"
        f" • {criteria.describe_range()}"
    )

    if not expenses:
        if criteria.is_active:
            st.info("Try adjusting your search, date range, or filters.")
        else:
            st.info("No expenses yet.")
        return

    for expense in expenses:
        col_info, col_amount, col_delete = st.columns([6, 2, 1])
        col_info.markdown(
            f"{expense.category.icon} **{expense.description}** · "
            f"{expense.category.name} · {format_date(expense.date)}"
        )
        col_amount.markdown(f"-{format_currency(expense.amount, currency)}")
        if col_delete.button("🗑️", key=f"delete_{expense.id}"):
            run_async(components.expense_store.delete(expense.id))
            st.rerun()


def render_analytics_page(components, currency: str):
    """Render charts and insights."""
    st.title("📈 Analytics")
    now = datetime.now()
    analytics = compute_analytics(components.expense_store.expenses, now)

    st.markdown("### Last 7 Days")
    st.bar_chart(
        {
            format_short_date(datetime.combine(day.date, time())): day.amount
            for day in analytics.daily_spending
        }
    )

    st.markdown("### Category Breakdown")
    if not analytics.category_breakdown:
        st.info("No spending this month yet.")
    for item in analytics.category_breakdown:
        st.markdown(
            f"{category_label(item.category)} · "
            f"**{format_currency(item.amount, currency)}** "
            f"({format_percentage(item.percentage)} of total spending)"
        )
        st.progress(min(item.percentage / 100, 1.0))

    st.markdown("### Insights")
    st.info(
        "You're spending an average of "
        f"{format_currency(analytics.average_daily_spend(now), currency)} per day this month."
    )


def render_scan_page(components, currency: str):
    """Render the receipt scan → review → confirm flow."""
    st.title("📷 Scan Receipt")
    flow = components.receipt_flow

    if "scan_state" not in st.session_state:
        st.session_state.scan_state = "idle"  # idle, reviewing, saved
    if "extraction" not in st.session_state:
        st.session_state.extraction = None
    if "correlation_id" not in st.session_state:
        st.session_state.correlation_id = None

    uploaded_file = st.file_uploader(
        "Upload or take a photo of your receipt",
        type=["jpg", "jpeg", "png", "webp"],
    )

    if uploaded_file and st.session_state.scan_state == "idle":
        if st.button("🔍 Read Receipt"):
            st.session_state.correlation_id = create_correlation_id()
            with st.spinner("Reading receipt..."):
                extraction, can_proceed, message = run_async(flow.scan(
                    uploaded_file.getvalue(),
                    uploaded_file.type or "image/jpeg",
                    correlation_id=st.session_state.correlation_id,
                ))
            if not can_proceed:
                st.error(message)
                return
            st.session_state.extraction = extraction
            st.session_state.scan_message = message
            st.session_state.scan_state = "reviewing"

    if st.session_state.scan_state == "reviewing":
        extraction = st.session_state.extraction
        if extraction.parse_failed:
            st.warning(st.session_state.scan_message)
        else:
            st.success(st.session_state.scan_message)

        amount_text = st.text_input("Amount", value=f"{extraction.amount:.2f}")
        description = st.text_input(
            "Description",
            value=extraction.description,
            max_chars=DESCRIPTION_MAX_LENGTH,
        )
        category = st.selectbox(
            "Category",
            options=list(EXPENSE_CATEGORIES),
            index=list(EXPENSE_CATEGORIES).index(extraction.category),
            format_func=category_label,
        )

        col1, col2 = st.columns(2)
        if col1.button("✅ Save Expense"):
            expense = run_async(flow.confirm(
                extraction,
                ReceiptEdits(
                    amount_text=amount_text,
                    description=description,
                    category=category,
                ),
                image_uri=uploaded_file.name if uploaded_file else None,
                correlation_id=st.session_state.correlation_id,
            ))
            if expense:
                st.session_state.scan_state = "saved"
                st.session_state.saved_expense = expense
                st.rerun()
            else:
                st.error("Could not save the expense. Please try again.")
        if col2.button("❌ Discard"):
            st.session_state.scan_state = "idle"
            st.session_state.extraction = None
            st.rerun()

    if st.session_state.scan_state == "saved":
        expense = st.session_state.saved_expense
        st.success(
            f"Saved {expense.description} "
            f"({format_currency(expense.amount, currency)})"
        )
        if st.button("Scan another"):
            st.session_state.scan_state = "idle"
            st.session_state.extraction = None
            st.rerun()


def render_settings_page(components):
    """Render preferences, data management and connection status."""
    st.title("⚙️ Settings")
    preferences_store = components.preferences_store
    expense_store = components.expense_store
    preferences = preferences_store.preferences

    st.markdown("### Preferences")
    currency = st.text_input("Currency", value=preferences.currency, max_chars=3)
    theme = st.selectbox(
        "Theme",
        options=list(Theme),
        index=list(Theme).index(preferences.theme),
        format_func=lambda t: t.value.title(),
    )
    notifications = st.checkbox("Notifications", value=preferences.notifications)
    backup = st.checkbox("Backup", value=preferences.backup)

    col1, col2 = st.columns(2)
    if col1.button("Save Preferences"):
        try:
            saved = run_async(preferences_store.update(
                currency=currency.upper(),
                theme=theme,
                notifications=notifications,
                backup=backup,
            ))
        except ValueError as e:
            st.error(f"Invalid preferences: {e}")
        else:
            if saved:
                st.success("Preferences saved.")
            else:
                st.error("Failed to save preferences.")
    if col2.button("Reset to Defaults"):
        run_async(preferences_store.reset())
        st.rerun()

    st.markdown("---")
    st.markdown("### Your Data")
    st.caption(f"{len(expense_store.expenses)} expenses stored")

    if st.button("📦 Prepare Export"):
        st.session_state.export_data = run_async(expense_store.export_list())
    if st.session_state.get("export_data"):
        st.download_button(
            "⬇️ Download Expenses",
            data=st.session_state.export_data,
            file_name="expenses.json",
            mime="application/json",
        )

    import_file = st.file_uploader("Import Expenses (JSON)", type=["json"])
    if import_file and st.button("⬆️ Import (replaces current data)"):
        if run_async(expense_store.import_list(import_file.getvalue())):
            st.success("Expenses imported.")
        else:
            st.error("Import failed: the file is not a valid expense export.")

    if st.button("🗑️ Clear All Expenses"):
        if run_async(expense_store.clear_all()):
            st.success("All expenses have been cleared.")
        else:
            st.error("Failed to clear expenses.")

    st.markdown("---")
    st.markdown("### Connection Status")
    status = validate_all_settings()
    for name, key in [("Storage", "storage"), ("Gemini (Receipt AI)", "gemini"), ("App", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    with st.expander("Recent activity"):
        for event in run_async(components.audit_logger.recent_events(limit=20)):
            st.markdown(f"`{event['timestamp']}` {event['description']}")


if __name__ == "__main__":
    main()
