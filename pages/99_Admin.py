# pages/99_Admin.py
# Admin/debug view – no st.set_page_config(...) here, the main page owns it.

import json
from dataclasses import replace

import streamlit as st

from leadfinder.io import companies_to_frame
from leadfinder.pipeline import EnrichmentPipeline
from leadfinder.request import FULL_LIMIT, PREVIEW_LIMIT
from leadfinder.settings import load_settings
from leadfinder.types import SearchCriteria

# ----------------------------
# Page
# ----------------------------
st.title("Lead Finder (Admin)")
st.caption("Raw pipeline output and settings overrides for debugging.")

base_settings = load_settings()

# ----------------------------
# Sidebar: settings overrides
# ----------------------------
st.sidebar.header("Providers")
use_key = st.sidebar.checkbox(
    "Use Google Places key",
    value=bool(base_settings.places_api_key),
    disabled=not base_settings.places_api_key,
    help="Unchecked forces the OpenStreetMap fallback.",
)
default_region = st.sidebar.text_input("Default OSM region", value=base_settings.default_region)

st.sidebar.divider()
st.sidebar.header("Timeouts (seconds)")
page_timeout = st.sidebar.slider("Page fetch", 1.0, 20.0, float(base_settings.page_timeout_s), 0.5)
provider_timeout = st.sidebar.slider("Provider request", 5.0, 60.0, float(base_settings.provider_timeout_s), 1.0)

settings = replace(
    base_settings,
    places_api_key=base_settings.places_api_key if use_key else None,
    page_timeout_s=page_timeout,
    provider_timeout_s=provider_timeout,
    default_region=default_region.strip() or base_settings.default_region,
)

# ----------------------------
# Query
# ----------------------------
c1, c2, c3 = st.columns(3)
with c1:
    subject = st.text_input("Subject")
with c2:
    industry = st.text_input("Industry")
with c3:
    location = st.text_input("Location")
limit = st.select_slider("Result limit", options=[5, PREVIEW_LIMIT, 20, FULL_LIMIT], value=PREVIEW_LIMIT)

if st.button("Run pipeline", use_container_width=True):
    criteria = SearchCriteria(
        subject=subject.strip(),
        industry=industry.strip(),
        location=location.strip(),
        result_limit=int(limit),
    )
    with st.spinner("Running…"):
        with EnrichmentPipeline(settings) as p:
            envelope = p.run(criteria)

    cols = st.columns(3)
    cols[0].metric("Mode", envelope.mode)
    cols[1].metric("Total", envelope.total)
    cols[2].metric("Returned", len(envelope.companies))
    if envelope.error_message:
        st.error(envelope.error_message)

    st.dataframe(companies_to_frame(envelope), use_container_width=True, hide_index=True)

    with st.expander("Raw JSON envelope (debug)", expanded=False):
        st.code(json.dumps(envelope.to_dict(), ensure_ascii=False, indent=2), language="json")
