import logging
from pathlib import Path

import pandas as pd
import streamlit as st

from naics_ghg.charts import (EMISSION_LABELS, bar_figure, bubble_figure, fmt_value, pie_figure,
                              selection_summary)
from naics_ghg.comparison import LAST_CHILD_LEVEL
from naics_ghg.config import get_settings
from naics_ghg.dashboard import Dashboard, Datasets, load_datasets
from naics_ghg.gases import fact_rows
from naics_ghg.records import label_for

settings = get_settings()
logging.basicConfig(level=settings.log_level)

st.set_page_config(page_title="Supply Chain GHG Explorer", layout="wide")
st.title("Supply Chain GHG Explorer: emission factors across the NAICS hierarchy")
st.markdown(
    "Click a bubble to drill into a sector, subsector, industry group or industry. "
    "Selecting a 6-digit industry shows its gas composition.\n\n"
    "Data: US EPA Supply Chain GHG Emission Factors v1.3 (NAICS, USD 2022) and the 2017 NAICS code list."
)

# data location and controls in the sidebar
data_dir = st.sidebar.text_input("Data directory", value=str(settings.data_dir))
st.sidebar.markdown("---")


@st.cache_data(show_spinner="Loading emission factor tables...")
def cached_datasets(directory: str) -> Datasets:
    return load_datasets(settings.model_copy(update={"data_dir": Path(directory)}))


def get_dashboard() -> Dashboard:
    # one dashboard per session; rebuilt when the data directory changes
    if st.session_state.get("data_dir") != data_dir or "dashboard" not in st.session_state:
        old = st.session_state.get("dashboard")
        if old is not None:
            old.close()
        st.session_state["dashboard"] = Dashboard(cached_datasets(data_dir), settings)
        st.session_state["data_dir"] = data_dir
    return st.session_state["dashboard"]


dashboard = get_dashboard()
loaded = dashboard.datasets.loaded()
for name, ok in loaded.items():
    if not ok:
        st.sidebar.warning(f"Could not load the {name.replace('_', ' ')} table; its views will be empty.")

if not any(loaded.values()):
    st.info("Awaiting data files. Check the data directory in the sidebar.")
    st.stop()


# interaction handlers; each one is a single store transition
def on_bubble_click():
    event = st.session_state.get("bubbles")
    points = event.selection.points if event and event.selection else []
    if not points:
        return
    index = points[0].get("point_index", points[0].get("point_number"))
    keys = st.session_state.get("bubble_keys", [])
    if index is not None and 0 <= index < len(keys):
        dashboard.click(keys[index])


def on_emissions_change():
    dashboard.set_emissions_kind(st.session_state["emissions_kind"])


def on_gas_change():
    dashboard.set_selected_gas(st.session_state["gas_detail"])


selection = dashboard.store.current()
kinds = list(EMISSION_LABELS)
st.sidebar.selectbox(
    "Emissions", options=kinds, index=kinds.index(selection.selected_emissions),
    format_func=EMISSION_LABELS.get, key="emissions_kind", on_change=on_emissions_change,
)
nav_back, nav_up = st.sidebar.columns(2)
nav_back.button("Back to all", on_click=dashboard.reset, disabled=selection.is_root)
nav_up.button("Up one level", on_click=dashboard.go_to_parent, disabled=selection.is_root)

size = st.sidebar.slider("Bubble chart size (px)", min_value=360, max_value=1200,
                         value=int(dashboard.store.viewport.width), step=20)
dashboard.resize(size, size)
# every widget change is already a discrete rerun, so apply the resize before drawing
dashboard.settle()

views = dashboard.views
selection = views.selection

# breadcrumbs
crumbs = [label_for(dashboard.datasets.labels, n.code) for n in reversed(dashboard.store.node.ancestors())] \
    if dashboard.store.node is not None else []
crumbs.append(selection.label)
st.markdown(" → ".join(crumbs))

col_bubbles, col_detail = st.columns([3, 2])

with col_bubbles:
    st.subheader("Industry hierarchy")
    if not views.bubbles:
        st.warning("No CO2e emission factors loaded, nothing to display.")
    else:
        fig = bubble_figure(views.bubbles, dashboard.store.zoom, dashboard.store.viewport,
                            transition_ms=dashboard.transition_ms())
        st.session_state["bubble_keys"] = [b.key for b in views.bubbles]
        st.plotly_chart(fig, use_container_width=False, key="bubbles",
                        on_select=on_bubble_click, selection_mode="points")

with col_detail:
    st.subheader("Selection")
    for name, value in selection_summary(selection).items():
        st.write(f"**{name}:** {value}")

    st.subheader("Gas composition")
    if not selection.terminal_node:
        st.info("Drill down to a 6-digit industry to see its gas composition.")
    elif not views.slices:
        st.info("No by-gas emission factors for this industry.")
    else:
        st.plotly_chart(pie_figure(views.slices, selection.pie_radius, selection.selected_emissions),
                        use_container_width=True)
        pie_df = pd.DataFrame([{"gas": s.gas, "amount": s.amount, "share_pct": s.share * 100} for s in views.slices])
        st.download_button("Download gas composition CSV", pie_df.to_csv(index=False),
                           f"gas_composition_{selection.naics}.csv", "text/csv")

st.markdown("---")
level_name = "gas" if selection.depth > LAST_CHILD_LEVEL else "sub-level"
st.subheader(f"Base vs. margin emissions by {level_name}: {selection.label}")
if not views.level_rows:
    st.warning("Nothing to display for this selection.")
else:
    st.plotly_chart(bar_figure(views.segments, views.level_rows, selection.selected_emissions),
                    use_container_width=True)
    bars_df = pd.DataFrame([
        {"key": r.key, "label": r.label, "base": r.base, "margin": r.margin, "combined": r.combined}
        for r in views.level_rows
    ])
    with st.expander("Show table"):
        st.dataframe(bars_df.assign(combined=bars_df["combined"].map(fmt_value)))
    st.download_button("Download level comparison CSV", bars_df.to_csv(index=False),
                       "level_comparison.csv", "text/csv")

# gas detail panel
st.markdown("---")
st.subheader("Gas facts")
gases = dashboard.gases()
if not gases:
    st.info("Gas details need the by-gas emission factors table.")
else:
    current_gas = selection.selected_gas if selection.selected_gas in gases else gases[0]
    st.selectbox("Gas", options=gases, index=gases.index(current_gas), key="gas_detail", on_change=on_gas_change)
    rows = fact_rows(current_gas)
    if rows:
        st.table(pd.DataFrame(rows, columns=["", current_gas]).set_index(""))
    else:
        st.write(f"No reference facts recorded for {current_gas}.")
