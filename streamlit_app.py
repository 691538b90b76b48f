"""Streamlit dashboard: overdose deaths over time, one line per drug."""

from __future__ import annotations

import hashlib

import pandas as pd
import streamlit as st

from overdose_trends.capabilities import get_capability_report
from overdose_trends.config import DashboardSettings, get_dashboard_settings
from overdose_trends.domain.overdose_series import ColumnRole
from overdose_trends.logging_utils import configure_logging
from overdose_trends.services.chart_adapter import build_figure
from overdose_trends.services.dashboard_session import DashboardSession
from overdose_trends.services.data_source_service import DataSourceService

st.set_page_config(page_title="Overdose in US", page_icon="📈", layout="wide")

_UNSET = "—"
_ALL_JURISDICTIONS = "(all jurisdictions)"

_ROLE_LABELS: dict[ColumnRole, str] = {
    ColumnRole.DRUG: "Drug column",
    ColumnRole.DATE: "Date column",
    ColumnRole.VALUE: "Deaths column",
    ColumnRole.JURISDICTION: "Jurisdiction column (optional)",
}


@st.cache_resource(show_spinner=False)
def _bootstrap() -> DataSourceService:
    """Configure logging and build the shared data source once per process."""
    configure_logging()
    return DataSourceService()


def _new_session(settings: DashboardSettings) -> DashboardSession:
    return DashboardSession(
        schema_mode=settings.schema_mode,
        default_jurisdiction=settings.default_jurisdiction,
    )


settings = get_dashboard_settings()
data_source = _bootstrap()

if "dashboard" not in st.session_state:
    st.session_state.dashboard = _new_session(settings)
if "autoload_attempted" not in st.session_state:
    st.session_state.autoload_attempted = False
if "uploaded_hash" not in st.session_state:
    st.session_state.uploaded_hash = None

dashboard: DashboardSession = st.session_state.dashboard
capabilities = get_capability_report()

if capabilities.available and settings.autoload_enabled and not st.session_state.autoload_attempted:
    st.session_state.autoload_attempted = True
    with st.spinner(f"Loading {settings.autoload_source}…"):
        dashboard.load_from_source(settings.autoload_source, data_source)


# ── Sidebar ────────────────────────────────────────────────────────────────
with st.sidebar:
    st.title("Overdose in US")
    st.caption("Drug overdose deaths over time, by drug")
    st.divider()

    uploaded_file = st.file_uploader("Upload CSV", type=["csv"])
    if uploaded_file is not None:
        uploaded_bytes = uploaded_file.getvalue()
        uploaded_hash = hashlib.sha256(uploaded_bytes).hexdigest()
        if uploaded_hash != st.session_state.uploaded_hash:
            st.session_state.uploaded_hash = uploaded_hash
            with st.spinner(f"Parsing {uploaded_file.name}…"):
                dashboard.load_upload(uploaded_file.name, uploaded_bytes)

    state = dashboard.state
    if state.has_data and not dashboard.is_fixed_schema:
        st.divider()
        st.subheader("Columns")
        options = [_UNSET, *state.fields]
        for role, label in _ROLE_LABELS.items():
            current = state.mapping.column_for(role)
            chosen = st.selectbox(
                label,
                options=options,
                index=options.index(current) if current in options else 0,
            )
            chosen_column = "" if chosen == _UNSET else chosen
            if chosen_column != current:
                dashboard.set_role(role, chosen_column)

    state = dashboard.state
    if state.has_data and state.mapping.jurisdiction:
        jurisdictions = [_ALL_JURISDICTIONS, *dashboard.observed_jurisdictions()]
        current_jurisdiction = state.jurisdiction or _ALL_JURISDICTIONS
        chosen_jurisdiction = st.selectbox(
            "Jurisdiction",
            options=jurisdictions,
            index=jurisdictions.index(current_jurisdiction) if current_jurisdiction in jurisdictions else 0,
        )
        selected_jurisdiction = "" if chosen_jurisdiction == _ALL_JURISDICTIONS else chosen_jurisdiction
        if selected_jurisdiction != state.jurisdiction:
            dashboard.set_jurisdiction(selected_jurisdiction)

    state = dashboard.state
    drugs = list(dashboard.observed_drugs())
    if drugs:
        st.divider()
        default_drugs = drugs if state.drug_filter is None else [d for d in drugs if d in state.drug_filter]
        selected_drugs = st.multiselect("Drugs", options=drugs, default=default_drugs)
        next_filter: frozenset[str] | None = (
            None if set(selected_drugs) == set(drugs) else frozenset(selected_drugs)
        )
        if next_filter != state.drug_filter:
            dashboard.set_drug_filter(next_filter)


# ── Main content ───────────────────────────────────────────────────────────
def _render_preview(state_rows: tuple, preview_rows: int) -> None:
    with st.expander("Data preview"):
        preview_df = pd.DataFrame([dict(row) for row in state_rows[:preview_rows]])
        st.dataframe(preview_df, use_container_width=True)
        st.caption(f"Showing first {len(preview_df)} of {len(state_rows):,} row(s).")


st.header("Overdose in US")
state = dashboard.state

if not capabilities.available:
    st.error(capabilities.to_error().message)
    st.stop()

if state.error:
    st.error(state.error)
    st.caption(state.status)
elif not state.has_data:
    st.info(state.status)
else:
    spec = dashboard.chart_spec()
    if spec.is_empty:
        if not state.mapping.is_complete:
            st.info("Pick the drug, date, and deaths columns to draw the chart.")
        else:
            st.warning("No rows could be charted with the current selection.")
    else:
        st.plotly_chart(
            build_figure(spec),
            use_container_width=True,
            config={"responsive": True, "displaylogo": False, "scrollZoom": True},
        )
    cols = st.columns(3)
    cols[0].metric("Rows loaded", f"{len(state.rows):,}")
    cols[1].metric("Rows charted", f"{spec.used_rows:,}")
    cols[2].metric("Rows dropped", f"{spec.dropped_rows:,}")
    st.caption(f"{state.status} Source: {state.source_label}")
    _render_preview(state.rows, settings.preview_rows)

st.caption(
    "Lets fix this. Opioids, Fentanyl, and other pain killers should not be given to people under 20"
)
