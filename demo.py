# demo.py
import html

import streamlit as st

from leadfinder.io import companies_to_frame, envelope_to_csv
from leadfinder.pipeline import search_companies
from leadfinder.request import criteria_from_params
from leadfinder.settings import configure_logging, load_settings
from leadfinder.types import Mode

configure_logging()

# ----------------------------
# Page config (ONLY ONCE in multipage app)
# ----------------------------
st.set_page_config(
    page_title="Lead Finder",
    layout="wide",
    initial_sidebar_state="collapsed",
)

# ----------------------------
# Glass UI
# ----------------------------
APP_CSS = """
<style>
#MainMenu {visibility: hidden;}
footer {visibility: hidden;}

:root{
  --ink-1: rgba(7, 22, 45, 0.92);
  --ink-2: rgba(7, 22, 45, 0.72);
  --mint-1: rgba(110,255,190,1);
  --border-soft: rgba(140,160,190,0.28);
}

.stApp {
  background:
    radial-gradient(1200px 600px at 70% 10%, rgba(120, 255, 230, .22), transparent 60%),
    radial-gradient(900px 500px at 20% 20%, rgba(120, 170, 255, .18), transparent 55%),
    linear-gradient(180deg, #f7fbff 0%, #eef6ff 45%, #f9fbff 100%);
}

.lf-title {
  font-size: 26px;
  font-weight: 760;
  margin: 6px 0 6px 0;
  color: var(--ink-1);
}
.lf-hint {
  padding: 12px 14px;
  border-radius: 16px;
  border: 1px solid rgba(140, 160, 190, 0.20);
  background: rgba(255,255,255,0.62);
  font-size: 14px;
  color: var(--ink-2);
}
.lf-metric {
  display: inline-flex;
  align-items: center;
  gap: 8px;
  padding: 6px 10px;
  border-radius: 999px;
  border: 1px solid rgba(140,160,190,.22);
  background: rgba(255,255,255,.65);
  font-size: 13px;
}

/* Score badges */
.badge-strong { box-shadow: 0 0 0 2px rgba(124,255,230,.40) inset; }
.badge-promising { box-shadow: 0 0 0 2px rgba(122,170,255,.35) inset; }
.badge-weak { box-shadow: 0 0 0 2px rgba(180,200,220,.30) inset; }

div[data-testid="stButton"] > button[kind="primary"] {
  border: 1px solid rgba(110,255,190,.75) !important;
  background: linear-gradient(90deg, rgba(110,255,190,.30), rgba(122,170,255,.18)) !important;
  color: rgba(7, 22, 45, 0.95) !important;
}
</style>
"""
st.markdown(APP_CSS, unsafe_allow_html=True)


# ----------------------------
# Helpers
# ----------------------------
MODE_LABELS = {
    Mode.LIVE_V1: "Google Places",
    Mode.LIVE_LEGACY: "Google Places (legacy)",
    Mode.LIVE_OSM: "OpenStreetMap",
    Mode.MOCK_ERROR: "Placeholder data",
}


def _score_badge(score: int) -> tuple[str, str]:
    if score >= 80:
        return ("Strong", "badge-strong")
    if score >= 50:
        return ("Promising", "badge-promising")
    return ("Weak", "badge-weak")


if "envelope" not in st.session_state:
    st.session_state["envelope"] = None


# ----------------------------
# Search form
# ----------------------------
st.markdown('<div class="lf-title">Find companies and contact leads</div>', unsafe_allow_html=True)
st.markdown(
    '<div class="lf-hint">Subject, industry and location are all optional. '
    "Empty searches look for manufacturers.</div>",
    unsafe_allow_html=True,
)
st.write("")

c1, c2, c3 = st.columns(3)
with c1:
    subject = st.text_input("Subject", placeholder="e.g. AI, robotics, packaging")
with c2:
    industry = st.text_input("Industry", placeholder="e.g. logistics, food processing")
with c3:
    location = st.text_input("Location", placeholder="e.g. Sydney, Victoria")

full = st.toggle("Full list (slower, up to 40 companies)", value=False)

if st.button("Search", type="primary", use_container_width=True, key="run_search"):
    criteria = criteria_from_params(
        {"subject": subject, "industry": industry, "location": location, "full": full}
    )
    with st.spinner("Searching and enriching…"):
        st.session_state["envelope"] = search_companies(criteria, load_settings())

envelope = st.session_state["envelope"]
if envelope is None:
    st.stop()

# ----------------------------
# Results
# ----------------------------
st.divider()
st.markdown(
    f'<div class="lf-metric">Source: <b>{MODE_LABELS.get(envelope.mode, envelope.mode)}</b></div> '
    f'<div class="lf-metric">Query: <b>{html.escape(envelope.query_used)}</b></div> '
    f'<div class="lf-metric">Matches: <b>{envelope.total}</b></div>',
    unsafe_allow_html=True,
)
if envelope.mode == Mode.MOCK_ERROR:
    st.warning(f"Live search failed, showing placeholder companies. Error: {envelope.error_message}")

if not envelope.companies:
    st.info("No companies found. Try a broader industry or a larger region.")
    st.stop()

n = len(envelope.companies)
top_k = st.slider("Show top N", 1, n, min(10, n), 1) if n > 1 else n
st.download_button(
    "Download CSV",
    data=envelope_to_csv(envelope),
    file_name="leads.csv",
    mime="text/csv",
)

for company in envelope.companies[: int(top_k)]:
    badge_text, badge_cls = _score_badge(company.lead_score)
    with st.container(border=True):
        cA, cB = st.columns([5, 2], vertical_alignment="center")
        with cA:
            st.markdown(f"**{company.name}**")
            if company.website:
                st.caption(company.website)
            if company.address:
                st.write(company.address)
            if company.emails:
                st.write("Emails: " + ", ".join(company.emails))
            else:
                st.caption("No public emails found.")
        with cB:
            st.metric("Lead score", company.lead_score)
            st.markdown(
                f'<div class="lf-metric {badge_cls}">Match: <b>{badge_text}</b></div>',
                unsafe_allow_html=True,
            )
        with st.expander("LinkedIn people search", expanded=False):
            for link in company.linkedin_search:
                st.markdown(f"- [{link.role}]({link.url})")

with st.expander("Table view", expanded=False):
    st.dataframe(companies_to_frame(envelope), use_container_width=True, hide_index=True)
