import html

import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from datetime import timedelta
from typing import Dict, List, Optional

from core.catalog import DEFAULT_CATALOG, sheet_labels, with_published_id
from core.config import configure_logging, load_settings
from core.controller import DashboardController
from core.data import export_frame
from core.filters import DashboardFilters
from core.metrics_overview import compute_overview
from core.metrics_table import compute_table

alt.data_transformers.disable_max_rows()

GRADIENTS = [
    "linear-gradient(135deg, #6366f1, #8b5cf6)",
    "linear-gradient(135deg, #ec4899, #f43f5e)",
    "linear-gradient(135deg, #06b6d4, #0891b2)",
    "linear-gradient(135deg, #10b981, #059669)",
    "linear-gradient(135deg, #f59e0b, #d97706)",
    "linear-gradient(135deg, #8b5cf6, #7c3aed)",
]

MEMBER_STATS = [
    ("total_meals", "Total Meal"),
    ("bazar_cost", "Bazar Cost"),
    ("maid_bill", "Maid Bill"),
    ("extra_expenses", "Extra Expenses"),
    ("total_cost", "Total Cost"),
    ("deposit", "Deposit"),
    ("due", "Due"),
]


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.9rem;color: #6b7280;}
        .member-card {border-radius: 12px;padding: 14px;margin-bottom: 12px;border: 1px solid #e5e7eb;}
        .member-header {display: flex;align-items: center;gap: 10px;margin-bottom: 8px;}
        .member-avatar {width: 36px;height: 36px;border-radius: 50%;color: #fff;display: flex;
                        align-items: center;justify-content: center;font-weight: 700;}
        .member-name {font-weight: 600;font-size: 1.05rem;color: #111827;}
        .member-stat {display: flex;justify-content: space-between;font-size: 0.9rem;padding: 2px 0;color: #374151;}
        .member-stat.highlight {font-weight: 700;color: #b91c1c;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


# One controller (and one poller thread) per server process, shared by all sessions.
@st.cache_resource
def get_controller() -> DashboardController:
    settings = load_settings()
    configure_logging(settings)
    catalog = with_published_id(DEFAULT_CATALOG, settings.published_id)
    controller = DashboardController(catalog, settings)
    controller.start()
    return controller


def render_summary(summary: Dict):
    display = summary["display"]
    cols = st.columns(4)
    cols[0].metric("Total Meals", display["total_meals"])
    cols[1].metric("Members", display["member_count"])
    cols[2].metric("Total Bazar", display["total_bazar"])
    cols[3].metric("Meal Rate", display["meal_rate"])


def render_member_cards(members: List[Dict]):
    if not members:
        st.info("No members found for this month.")
        return
    cols = st.columns(3)
    for card_data in members:
        gradient = GRADIENTS[card_data["index"] % len(GRADIENTS)]
        stats = "".join(
            f"<div class='member-stat{' highlight' if key == 'due' else ''}'>"
            f"<span>{label}</span><span>{card_data['display'][key]}</span></div>"
            for key, label in MEMBER_STATS
        )
        cols[card_data["index"] % 3].markdown(
            f"""
            <div class="member-card">
              <div class="member-header">
                <div class="member-avatar" style="background: {gradient}">{html.escape(card_data["initial"])}</div>
                <div class="member-name">{html.escape(card_data["name"])}</div>
              </div>
              {stats}
            </div>
            """,
            unsafe_allow_html=True,
        )


def render_table(table: Dict, frame: pd.DataFrame):
    counts = table["row_counts"]
    st.caption(f"{counts['matched_rows']} of {counts['total_rows']} rows")
    if not table["rows"]:
        st.info(table["message"])
        return
    st.dataframe(frame, hide_index=True, use_container_width=True)
    st.download_button(
        "Export CSV",
        data=frame.to_csv(index=False).encode("utf-8"),
        file_name="ledger.csv",
        mime="text/csv",
    )


# ---------- UI setup ----------
st.set_page_config(page_title="Mess Ledger Dashboard", layout="wide")
inject_base_styles()
st.title("Mess Ledger Dashboard")
st.caption("Monthly meals, bazar and dues from the published ledger sheet.")

controller = get_controller()
catalog = controller.catalog
labels = sheet_labels(catalog)
if not labels:
    st.error("No sheets configured.")
    st.stop()

# ----- Sidebar: month selection + search -----
with st.sidebar:
    st.markdown("### Month")
    current = controller.state.current_sheet
    index = catalog.sources.index(current) if current in catalog.sources else len(labels) - 1
    choice = st.selectbox("Month", options=labels, index=index)
    chosen = catalog.sources[labels.index(choice)]
    if chosen != controller.state.current_sheet:
        controller.select(chosen)

    if st.button("Refresh"):
        controller.refresh()

    st.markdown("---")
    st.markdown("### Search")
    st.text_input(
        "Search table",
        key="search_query",
        on_change=lambda: controller.search(st.session_state.get("search_query", "")),
    )


@st.fragment(run_every=timedelta(seconds=1))
def render_dashboard():
    state = controller.state
    ctx = controller.context()
    filters = DashboardFilters(
        sheet_id=state.current_sheet.remote_id if state.current_sheet else None,
        search_query=state.search_query,
    )
    overview = compute_overview(filters, ctx)
    table = compute_table(filters, ctx)

    if state.error:
        st.error(state.error)
    if state.is_loading:
        st.caption("Syncing…")
    elif state.last_updated is not None:
        st.caption(f"Last updated: {state.last_updated.strftime('%H:%M:%S')}")

    with card("Summary", actions=state.current_sheet.label if state.current_sheet else None):
        render_summary(overview["summary"])

    with card("Members"):
        render_member_cards(overview["members"])
        if overview["member_cost_chart"] is not None:
            st.vega_lite_chart(overview["member_cost_chart"], use_container_width=True)

    with card("Sheet"):
        render_table(table, export_frame("table", ctx, query=state.search_query))


render_dashboard()
