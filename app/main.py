"""
Streamlit Frontend for Personal Ledger

The screens mirror the ledger's menus:
- Signed out: sign in, sign up
- Signed in: add, modify, delete, sort, display, sign out
- Admin accounts also get search

All data handling lives in ledger.session; this module only collects
input and renders results.
"""

import streamlit as st

from ledger.audit import configure_logging
from ledger.config import get_settings
from ledger.models.transaction import TABLE_HEADER, Transaction, TransactionType
from ledger.services.storage import StorageError
from ledger.session import LedgerSession, create_session
from ledger.validation import InvalidTransactionError, TransactionValidator, categories_for


st.set_page_config(
    page_title="Personal Ledger",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_session() -> LedgerSession:
    """Get or create the ledger session (cached for the process)."""
    settings = get_settings()
    configure_logging(settings)
    return create_session(settings)


def main():
    """Main application entry point."""
    try:
        session = get_session()
    except StorageError as e:
        st.error(f"Failed to load users: {e}")
        st.stop()

    st.sidebar.title("💰 Personal Ledger")
    st.sidebar.markdown("---")

    if not session.is_signed_in:
        render_sign_in_page(session)
        return

    pages = ["➕ Add", "✏️ Modify", "🗑️ Delete", "📅 Sort", "📊 Display"]
    if session.is_admin:
        pages.insert(3, "🔍 Search")

    st.sidebar.markdown(f"Signed in as **{session.current_user}**")
    page = st.sidebar.radio("Navigate to:", pages, index=len(pages) - 1)

    if st.sidebar.button("🚪 Sign out"):
        try:
            session.sign_out()
        except StorageError as e:
            st.sidebar.error(f"Could not save transactions: {e}")
        st.rerun()

    if page == "➕ Add":
        render_add_page(session)
    elif page == "✏️ Modify":
        render_modify_page(session)
    elif page == "🗑️ Delete":
        render_delete_page(session)
    elif page == "🔍 Search":
        render_search_page(session)
    elif page == "📅 Sort":
        render_sort_page(session)
    else:
        render_display_page(session)


def render_sign_in_page(session: LedgerSession):
    """Render sign in and sign up forms."""
    st.title("Personal Ledger")
    sign_in_tab, sign_up_tab = st.tabs(["Sign in", "Sign up"])

    with sign_in_tab:
        with st.form("sign_in"):
            username = st.text_input("Username")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Sign in", type="primary"):
                try:
                    signed_in = session.sign_in(username, password)
                except StorageError as e:
                    st.error(f"Could not load transactions: {e}")
                else:
                    if signed_in:
                        st.rerun()
                    st.error("Sign in failed.")

    with sign_up_tab:
        with st.form("sign_up"):
            username = st.text_input("Username")
            password = st.text_input("Password", type="password")
            is_admin = st.checkbox("Admin account")
            if st.form_submit_button("Sign up"):
                if not username or not password:
                    st.error("Username and password are required.")
                elif session.sign_up(username, password, is_admin=is_admin):
                    try:
                        session.save_users()
                    except StorageError as e:
                        st.error(f"Account created but not saved: {e}")
                    else:
                        st.success(f"Account {username} created. You can sign in now.")
                else:
                    st.error("The username already exists.")


def render_transaction_form(
    session: LedgerSession,
    key: str,
    initial: Transaction = None,
) -> Transaction:
    """Collect and validate transaction fields. Returns None until submitted and valid."""
    transaction_type = st.radio(
        "Type",
        options=list(TransactionType),
        index=int(initial.type) if initial else 0,
        format_func=lambda t: t.display_name,
        horizontal=True,
        key=f"{key}_type",
    )
    options = list(categories_for(transaction_type))
    default_category = options.index(initial.category) if initial and initial.category in options else 0

    with st.form(key):
        date = st.text_input(
            "Date (DD/MM/YYYY)",
            value=initial.date if initial else "",
        )
        category = st.selectbox(
            "Category",
            options=options,
            index=default_category,
            format_func=lambda c: c.display_name,
        )
        description = st.text_input(
            "Description",
            value=initial.description if initial else "",
        )
        amount = st.text_input(
            "Amount",
            value=repr(initial.amount) if initial else "",
        )
        if not st.form_submit_button("Save", type="primary"):
            return None

    try:
        return TransactionValidator().build(
            username=session.current_user,
            transaction_type=transaction_type,
            date=date,
            category=category,
            description=description,
            amount=amount,
        )
    except InvalidTransactionError as e:
        for issue in e.result.issues:
            st.error(issue.message)
        return None


def select_transaction(session: LedgerSession, label: str) -> int:
    """Pick a transaction; returns its 0-based index, or None if there are none."""
    rows = session.list_transactions()
    if not rows:
        st.info("No transactions now.")
        return None
    position = st.selectbox(
        label,
        options=[position for position, _ in rows],
        format_func=lambda p: f"{p:>2}. {rows[p - 1][1].format_row()}",
    )
    return position - 1


def render_table(rows: list[tuple[int, Transaction]]):
    lines = [TABLE_HEADER]
    lines.extend(f"{position:>2}. {transaction.format_row()}" for position, transaction in rows)
    st.code("\n".join(lines), language=None)


def render_add_page(session: LedgerSession):
    st.title("➕ Add Transaction")
    transaction = render_transaction_form(session, "add")
    if transaction is not None:
        session.add_transaction(transaction)
        st.success("Transaction added.")


def render_modify_page(session: LedgerSession):
    st.title("✏️ Modify Transaction")
    index = select_transaction(session, "Your selection")
    if index is None:
        return
    transaction = render_transaction_form(
        session, f"modify_{index}", initial=session.transactions.get(index),
    )
    if transaction is not None:
        session.modify_transaction(index, transaction)
        st.success("Transaction updated.")


def render_delete_page(session: LedgerSession):
    st.title("🗑️ Delete Transaction")
    index = select_transaction(session, "Your selection")
    if index is None:
        return
    if st.button("Delete", type="primary"):
        session.delete_transaction(index)
        st.rerun()


def render_search_page(session: LedgerSession):
    st.title("🔍 Search Transactions")
    keyword = st.text_input("Keyword (date or category)")
    if keyword:
        render_table(session.search_transactions(keyword))


def render_sort_page(session: LedgerSession):
    st.title("📅 Sort Transactions")
    if st.button("Sort by date (newest first)", type="primary"):
        try:
            session.sort_transactions()
        except ValueError as e:
            st.error(f"Cannot sort: {e}")
    render_table(session.list_transactions())


def render_display_page(session: LedgerSession):
    st.title("📊 Transactions")
    render_table(session.list_transactions())
    st.markdown(f"**Balance:** {session.transactions.balance():,.2f}")


if __name__ == "__main__":
    main()
