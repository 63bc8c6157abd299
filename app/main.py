"""
Streamlit Frontend for LifeLedger

This is the user interface. It only talks to LedgerService; all numbers on
screen come from LedgerService.aggregates.

DESIGN PRINCIPLES:
1. One tap to record a transaction
2. Destructive actions need an explicit confirmation
3. Save failures are shown, never swallowed
4. Nothing is computed here that the service already computes
"""

from datetime import date, datetime
from decimal import Decimal

import streamlit as st

from lifeledger.config import validate_settings
from lifeledger.models import (
    AdHocFilter,
    BudgetConfig,
    Period,
    TransactionDraft,
    TransactionType,
    chart_color,
    resolve_icon,
)
from lifeledger.orchestrator import LedgerService, create_app_components
from lifeledger.services.storage import StorageError
from lifeledger.stats import top_categories
from lifeledger.validation import TransactionRejectedError


# Page configuration
st.set_page_config(
    page_title="LifeLedger",
    page_icon="👛",
    layout="centered",
    initial_sidebar_state="expanded",
)

PERIOD_LABELS = {
    Period.DAY: "Today",
    Period.WEEK: "This week",
    Period.MONTH: "This month",
}

KIND_LABELS = {
    TransactionType.EXPENSE: "Expense",
    TransactionType.INCOME: "Income",
}

QUICK_AMOUNTS = [5, 10, 20, 50, 100]


@st.cache_resource
def get_service() -> LedgerService:
    """Get or create the ledger service (cached)."""
    status = validate_settings()
    if not status.get("data_dir", False):
        st.warning(
            "Data directory is not writable, changes will be lost on restart: "
            f"{status.get('data_dir_error', status.get('settings_error', 'unknown error'))}"
        )
        return create_app_components(use_storage=False)
    return create_app_components(use_storage=True)


def notify_save_failed(error: Exception) -> None:
    st.error(f"Save failed, please try again: {error}")


HOME, STATS, FORM, SETTINGS = "🏠 Home", "📊 Statistics", "➕ Add", "⚙️ Settings"
FILTER_KEYS = ("filter_kind", "filter_tag", "filter_start", "filter_end")


def init_state() -> None:
    defaults = {
        "period": Period.DAY,
        "editing_id": None,
        "confirm_delete": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def go_to(page: str) -> None:
    """Switch page on the next run (the sidebar radio is already drawn)."""
    st.session_state.next_page = page


def current_filters() -> AdHocFilter:
    return AdHocFilter(
        kind=st.session_state.get("filter_kind"),
        tag_id=st.session_state.get("filter_tag"),
        date_start=st.session_state.get("filter_start"),
        date_end=st.session_state.get("filter_end"),
    )


def clear_filters() -> None:
    for key in FILTER_KEYS:
        st.session_state.pop(key, None)


def main():
    """Main application entry point."""
    init_state()
    service = get_service()

    st.sidebar.title("👛 LifeLedger")
    st.sidebar.caption(date.today().strftime("%d %B"))
    st.sidebar.markdown("---")

    if "next_page" in st.session_state:
        st.session_state.page = st.session_state.pop("next_page")
    page = st.sidebar.radio("Navigate to:", [HOME, STATS, FORM, SETTINGS], key="page")

    if page == HOME:
        render_home_page(service)
    elif page == STATS:
        render_stats_page(service)
    elif page == FORM:
        render_form_page(service)
    elif page == SETTINGS:
        render_settings_page(service)


def render_home_page(service: LedgerService):
    """Dashboard card, filter panel and transaction list."""
    period = st.radio(
        "Period",
        options=list(Period),
        format_func=lambda p: PERIOD_LABELS[p],
        horizontal=True,
        key="period",
        label_visibility="collapsed",
    )

    stats = service.aggregates(period, current_filters())

    # Dashboard card
    if stats.budget.has_budget:
        headline = f"{PERIOD_LABELS[period]}: remaining budget"
    else:
        headline = "Net for this period"
    st.metric(headline, f"{stats.display_amount:,.2f}")

    if stats.budget.is_over_budget:
        st.error(f"{resolve_icon('Alert')} Over budget")
    elif stats.budget.is_warning and service.budget.enable_alerts:
        st.warning(f"{resolve_icon('Alert')} Budget almost used up")

    col1, col2 = st.columns(2)
    col1.metric("Income", f"+ {stats.income:,.2f}")
    col2.metric("Expense", f"- {stats.expense:,.2f}")

    # Filter panel
    with st.expander(f"{resolve_icon('Filter')} Filter"):
        st.radio(
            "Type",
            options=["all", TransactionType.EXPENSE.value, TransactionType.INCOME.value],
            format_func=lambda v: "All" if v == "all" else v.capitalize(),
            horizontal=True,
            key="filter_kind",
        )
        c1, c2 = st.columns(2)
        c1.date_input("From", value=None, key="filter_start")
        c2.date_input("To", value=None, key="filter_end")
        tag_ids = ["all"] + [t.id for t in service.tags]
        st.selectbox(
            "Payment method",
            options=tag_ids,
            format_func=lambda v: "All payment methods" if v == "all" else service.tag_label(v),
            key="filter_tag",
        )
        if stats.filters_active:
            st.button("Clear filters", on_click=clear_filters)

    st.subheader(f"Transactions ({len(stats.display_list)})")

    if not stats.display_list:
        st.info(f"{resolve_icon('Calendar')} No records yet")
        return

    for tx in stats.display_list:
        category = service.category_for(tx.category_id)
        icon = resolve_icon(category.icon if category else None)
        sign = "+" if tx.kind == TransactionType.INCOME else "-"
        note = f" · {tx.note}" if tx.note else ""

        c1, c2, c3, c4 = st.columns([6, 2, 1, 1])
        c1.markdown(
            f"{icon} **{service.category_label(tx.category_id)}** "
            f"`{service.tag_label(tx.tag_id)}`  \n"
            f"{tx.date_key}{note}"
        )
        c2.markdown(f"**{sign} {tx.amount:,.2f}**")
        if c3.button(resolve_icon("Edit"), key=f"edit_{tx.id}"):
            st.session_state.editing_id = tx.id
            go_to(FORM)
            st.rerun()
        if c4.button(resolve_icon("Trash"), key=f"delete_{tx.id}"):
            st.session_state.confirm_delete = tx.id

        if st.session_state.get("confirm_delete") == tx.id:
            st.warning("Delete this record? This cannot be undone.")
            yes, no = st.columns(2)
            if yes.button("Delete", key=f"confirm_{tx.id}", type="primary"):
                try:
                    service.delete_transaction(tx.id)
                    st.toast("Record deleted")
                except StorageError as e:
                    notify_save_failed(e)
                st.session_state.confirm_delete = None
                st.rerun()
            if no.button("Cancel", key=f"cancel_{tx.id}"):
                st.session_state.confirm_delete = None
                st.rerun()


def render_stats_page(service: LedgerService):
    """Category breakdown and trailing trend."""
    st.title("📊 Statistics")

    period = st.radio(
        "Period",
        options=[Period.WEEK, Period.MONTH],
        format_func=lambda p: PERIOD_LABELS[p],
        horizontal=True,
    )
    stats = service.aggregates(period)

    st.subheader("Expense by category")
    ranked = top_categories(stats.category_breakdown)
    if not ranked:
        st.info("No expenses in this period")
    else:
        st.bar_chart(
            {
                "category": [s.label for s in ranked],
                "amount": [float(s.total) for s in ranked],
                "color": [chart_color(i) for i in range(len(ranked))],
            },
            x="category",
            y="amount",
            color="color",
        )
        for i, s in enumerate(ranked[:5]):
            st.markdown(
                f"<span style='color:{chart_color(i)}'>&#9632;</span> "
                f"**{s.label}**: {s.total:,.2f} ({s.share:.1f}%)",
                unsafe_allow_html=True,
            )

    st.subheader("Last 7 days")
    st.line_chart(
        {
            "day": [p.label for p in stats.trend],
            "net": [float(p.value) for p in stats.trend],
        },
        x="day",
        y="net",
    )


def _as_date(value):
    return value.date() if isinstance(value, datetime) else value


def _load_form(draft: TransactionDraft, form_id: str) -> None:
    """Copy a draft into the form widgets' state once per opened form."""
    # widget state is dropped by Streamlit when the page was not drawn
    if st.session_state.get("form_id") == form_id and "f_kind" in st.session_state:
        return
    st.session_state.form_id = form_id
    st.session_state.form_original = draft.occurred_on
    st.session_state.f_amount = draft.amount_text
    st.session_state.f_kind = draft.kind
    st.session_state.f_category = draft.category_id
    st.session_state.f_tag = draft.tag_id
    st.session_state.f_date = _as_date(draft.occurred_on)
    st.session_state.f_note = draft.note


def _close_form() -> None:
    st.session_state.editing_id = None
    st.session_state.pop("form_id", None)
    go_to(HOME)


def _on_kind_change(service: LedgerService) -> None:
    draft = TransactionDraft().switch_kind(st.session_state.f_kind, service.categories)
    st.session_state.f_category = draft.category_id


def _set_amount(value) -> None:
    st.session_state.f_amount = str(value)


def render_form_page(service: LedgerService):
    """Add or edit a transaction."""
    editing = None
    if st.session_state.editing_id:
        editing = service.get_transaction(st.session_state.editing_id)

    st.title("✏️ Edit record" if editing else "➕ New record")

    if editing:
        _load_form(TransactionDraft.from_transaction(editing), editing.id)
    else:
        _load_form(service.new_draft(), "new")

    kind = st.radio(
        "Type",
        options=list(TransactionType),
        format_func=lambda k: KIND_LABELS[k],
        horizontal=True,
        key="f_kind",
        on_change=_on_kind_change,
        args=(service,),
    )

    st.text_input("Amount", placeholder="0.00", key="f_amount")
    quick = st.columns(len(QUICK_AMOUNTS))
    for col, value in zip(quick, QUICK_AMOUNTS):
        col.button(str(value), key=f"quick_{value}", on_click=_set_amount, args=(value,))

    category_ids = [c.id for c in service.categories_of(kind)]
    current = st.session_state.f_category
    if current and current not in category_ids:
        category_ids.insert(0, current)
    st.selectbox(
        "Category",
        options=category_ids,
        format_func=lambda cid: f"{resolve_icon(getattr(service.category_for(cid), 'icon', None))} "
                                f"{service.category_label(cid)}",
        key="f_category",
    )

    tag_ids = [t.id for t in service.tags]
    current = st.session_state.f_tag
    if current and current not in tag_ids:
        tag_ids.insert(0, current)
    st.selectbox(
        "Payment method",
        options=tag_ids,
        format_func=service.tag_label,
        key="f_tag",
    )

    st.date_input("Date", key="f_date")
    st.text_input("Note (optional)", max_chars=50, key="f_note")

    col1, col2 = st.columns(2)
    if col1.button("Save", type="primary"):
        original = st.session_state.form_original
        picked = st.session_state.f_date
        submitted = TransactionDraft(
            amount_text=st.session_state.f_amount,
            kind=kind,
            category_id=st.session_state.f_category,
            tag_id=st.session_state.f_tag,
            note=st.session_state.f_note,
            occurred_on=original if picked == _as_date(original) else picked,
        )
        try:
            if editing:
                service.update_transaction(editing.id, submitted)
                st.toast("Record updated")
            else:
                tx = service.add_transaction(submitted)
                st.toast(f"{KIND_LABELS[tx.kind]} saved")
            _close_form()
            st.rerun()
        except TransactionRejectedError as e:
            st.error(str(e).capitalize())
        except StorageError as e:
            notify_save_failed(e)

    if col2.button("Cancel"):
        _close_form()
        st.rerun()


def render_settings_page(service: LedgerService):
    """Budget, labels, backup."""
    st.title("⚙️ Settings")

    st.subheader("Budget")
    st.caption("Set a threshold to 0 to switch that budget off.")
    c1, c2, c3 = st.columns(3)
    daily = c1.number_input("Daily", min_value=0.0, value=float(service.budget.daily), step=10.0)
    weekly = c2.number_input("Weekly", min_value=0.0, value=float(service.budget.weekly), step=50.0)
    monthly = c3.number_input("Monthly", min_value=0.0, value=float(service.budget.monthly), step=100.0)
    alerts = st.checkbox("Warn when 90% of a budget is used", value=service.budget.enable_alerts)
    if st.button("Save budget"):
        try:
            service.update_budget(BudgetConfig(
                daily=Decimal(str(daily)),
                weekly=Decimal(str(weekly)),
                monthly=Decimal(str(monthly)),
                enable_alerts=alerts,
            ))
            st.toast("Budget updated")
        except StorageError as e:
            notify_save_failed(e)

    st.markdown("---")
    render_label_manager(service)

    st.markdown("---")
    st.subheader(f"{resolve_icon('Download')} Backup")
    st.download_button(
        "Export data (JSON)",
        data=service.export_snapshot(),
        file_name=service.export_filename(),
        mime="application/json",
    )

    uploaded = st.file_uploader("Import a backup", type=["json"])
    if uploaded is not None and st.button("Import"):
        try:
            if service.import_snapshot(uploaded.getvalue()):
                st.toast("Backup imported")
                st.rerun()
            else:
                st.error("This file is not a valid backup. Nothing was changed.")
        except StorageError as e:
            notify_save_failed(e)

    confirm = st.checkbox("I understand that all data will be deleted permanently")
    if st.button("Clear all data", disabled=not confirm):
        try:
            service.clear_all()
            st.toast("All data cleared")
            st.rerun()
        except StorageError as e:
            notify_save_failed(e)


def render_label_manager(service: LedgerService):
    """Add and delete categories and payment-method tags."""
    st.subheader("Categories and payment methods")
    mode = st.radio("Manage", ["Categories", "Payment methods"], horizontal=True)

    try:
        if mode == "Categories":
            for category in service.categories:
                c1, c2 = st.columns([8, 1])
                c1.markdown(
                    f"{resolve_icon(category.icon)} {category.name} "
                    f"· {KIND_LABELS[category.kind]}"
                )
                if c2.button(resolve_icon("Trash"), key=f"delcat_{category.id}"):
                    service.delete_category(category.id)
                    st.rerun()
            c1, c2, c3 = st.columns([5, 2, 2])
            name = c1.text_input("New category", key="new_category_name")
            kind = c2.selectbox("Type", list(TransactionType), format_func=lambda k: KIND_LABELS[k])
            if c3.button("Add", key="add_category") and service.add_category(name, kind):
                st.toast("Category added")
                st.rerun()
        else:
            for tag in service.tags:
                c1, c2 = st.columns([8, 1])
                c1.markdown(f"{resolve_icon('CreditCard')} {tag.name}")
                if c2.button(resolve_icon("Trash"), key=f"deltag_{tag.id}"):
                    service.delete_tag(tag.id)
                    st.rerun()
            c1, c2 = st.columns([7, 2])
            name = c1.text_input("New payment method", key="new_tag_name")
            if c2.button("Add", key="add_tag") and service.add_tag(name):
                st.toast("Payment method added")
                st.rerun()
    except StorageError as e:
        notify_save_failed(e)


if __name__ == "__main__":
    main()
