"""
Shopify Store Audit — dashboard with the AI audit and a follow-up chatbot.
Run with: streamlit run shopaudit/dashboard.py
"""

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor

import streamlit as st
import plotly.graph_objects as go

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from shopaudit.config import LOG_LEVEL
from shopaudit.auditor import run_audit
from shopaudit.chat import ChatSession
from shopaudit.errors import AuditError
from shopaudit.models import AuditReport, AuditRequest
from shopaudit.presentation import (
    sort_issues, health_label, score_color, category_icon, store_hostname,
    radar_frame, loading_message, PRIORITY_COLORS,
)
from shopaudit.screenshot import encode_screenshot

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# ============================================================
# PAGE CONFIG
# ============================================================
st.set_page_config(
    page_title="Shopify Store Audit",
    page_icon="⚡",
    layout="wide",
    initial_sidebar_state="collapsed",
)

# ============================================================
# STYLING — applied ONCE at the top of every render
# ============================================================
CUSTOM_CSS = """
<style>
@import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap');
html, body, [class*="css"] { font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif; }

footer {visibility: hidden;}
#MainMenu {visibility: hidden;}

:root {
    --bg-elevated: #2d2b26;
    --border: rgba(255,235,205,0.08);
    --text-primary: #e8e0d5;
    --text-secondary: #9c9588;
    --accent: #7c3aed;
    --accent-hover: #8b5cf6;
}

/* Metric cards */
[data-testid="stMetric"] {
    background: var(--bg-elevated);
    border: 1px solid var(--border); border-radius: 14px;
    padding: 14px 18px; box-shadow: 0 2px 12px rgba(0,0,0,0.2); text-align: center;
}
[data-testid="stMetric"] label {
    color: var(--text-secondary) !important; font-weight: 500; font-size: 0.72rem;
    text-transform: uppercase; letter-spacing: 0.06em;
}

/* Buttons */
.stButton > button, .stFormSubmitButton > button {
    border-radius: 10px; font-weight: 600; transition: all 0.15s ease;
}
.stButton > button[kind="primary"], .stFormSubmitButton > button[kind="primaryFormSubmit"] {
    background: var(--accent) !important; color: #fff !important; border: none;
}

/* Expanders */
.streamlit-expanderHeader { font-weight: 500; border-radius: 10px; }

/* Chat messages */
[data-testid="stChatMessage"] { border-radius: 12px; border: 1px solid var(--border); }
</style>
"""

st.markdown(CUSTOM_CSS, unsafe_allow_html=True)


def apply_chart_style(fig):
    fig.update_layout(
        font=dict(family="Inter, sans-serif", color="#9c9588"),
        paper_bgcolor="rgba(0,0,0,0)", plot_bgcolor="rgba(0,0,0,0)",
        title_font=dict(size=14, color="#e8e0d5"),
        legend=dict(font=dict(color="#9c9588", size=10)),
        margin=dict(l=40, r=40, t=45, b=35),
    )
    return fig


# ============================================================
# SESSION STATE HELPERS
# ============================================================
def _init_state():
    st.session_state.setdefault("status", "idle")
    st.session_state.setdefault("report", None)
    st.session_state.setdefault("chat", None)
    st.session_state.setdefault("pending_request", None)


def _reset_audit():
    """Back to the form. The report and its chat transcript are discarded."""
    for k in ("report", "chat", "pending_request"):
        st.session_state[k] = None
    st.session_state.status = "idle"


# ============================================================
# IDLE — the audit form
# ============================================================
def render_form():
    st.markdown("""
    <div style="text-align:center; padding-top:4vh;">
        <div style="font-size:2rem; color:#7c3aed;">⚡</div>
        <h1 style="font-size:2.6rem; font-weight:800; margin:0; letter-spacing:-0.02em;">
            Why isn't your store converting?</h1>
        <p style="color:#9c9588; font-size:1rem; margin:0.4rem 0 1.5rem;">
            Get an AI-powered audit of your Shopify store in seconds.
            See what's killing your sales and get step-by-step fixes.</p>
    </div>
    """, unsafe_allow_html=True)

    col1, col2, col3 = st.columns([1, 2, 1])
    with col2:
        with st.form("audit_form"):
            url = st.text_input("Store URL", placeholder="https://mystore.com")
            c1, c2 = st.columns(2)
            with c1:
                niche = st.text_input("Niche (optional)", placeholder="e.g. Fashion")
            with c2:
                target_market = st.text_input("Target market (optional)", placeholder="e.g. US")
            upload = st.file_uploader("Optional: homepage screenshot for visual analysis",
                                      type=["png", "jpg", "jpeg", "webp", "gif"])
            submitted = st.form_submit_button("Audit →", use_container_width=True, type="primary")

        if submitted:
            if not url.strip():
                st.error("Enter your store URL.")
                return
            try:
                screenshot = encode_screenshot(upload.getvalue(), upload.type) if upload else None
                request = AuditRequest(
                    url=url.strip(),
                    niche=niche.strip() or None,
                    target_market=target_market.strip() or None,
                    screenshot=screenshot,
                )
            except ValueError as e:
                st.error(str(e))
                return
            st.session_state.pending_request = request
            st.session_state.status = "scanning"
            st.rerun()


# ============================================================
# SCANNING — one blocking call, progress simulated meanwhile
# ============================================================
def render_scanning():
    request: AuditRequest = st.session_state.pending_request
    if request is None:
        _reset_audit()
        st.rerun()

    st.markdown("### Analyzing store...")
    progress = st.progress(0, text=loading_message(0))

    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(run_audit, request)
        step = 0
        while not future.done():
            progress.progress(step, text=loading_message(step))
            time.sleep(0.5)
            if step < 95:
                step = min(95, step + random.randint(0, 9))
        try:
            report = future.result()
        except AuditError:
            st.session_state.status = "error"
            st.session_state.pending_request = None
            st.rerun()

    progress.progress(100, text="Complete!")
    st.session_state.report = report
    st.session_state.chat = ChatSession(report)
    st.session_state.pending_request = None
    st.session_state.status = "complete"
    st.rerun()


# ============================================================
# ERROR
# ============================================================
def render_error():
    col1, col2, col3 = st.columns([1, 2, 1])
    with col2:
        st.error("**Audit Failed**\n\nWe couldn't reach the AI auditor. Please check your API key or try again.")
        if st.button("Try Again", use_container_width=True):
            _reset_audit()
            st.rerun()


# ============================================================
# CHARTS
# ============================================================
def chart_overall(report: AuditReport):
    fig = go.Figure(go.Indicator(
        mode="gauge+number", value=report.overall_score,
        number=dict(font=dict(size=44, color="#e8e0d5")),
        gauge=dict(
            axis=dict(range=[0, 100], tickcolor="#6b6560"),
            bar=dict(color=score_color(report.overall_score)),
            bgcolor="rgba(255,235,205,0.04)", borderwidth=0,
        ),
        title=dict(text=health_label(report.overall_score), font=dict(size=14, color="#9c9588")),
    ))
    fig.update_layout(height=260)
    apply_chart_style(fig)
    st.plotly_chart(fig, use_container_width=True)


def chart_categories(report: AuditReport):
    df = radar_frame(report)
    if df.empty: return
    fig = go.Figure(go.Scatterpolar(
        r=list(df["score"]) + [df["score"].iloc[0]],
        theta=list(df["category"]) + [df["category"].iloc[0]],
        fill="toself", name="Score",
        line=dict(color="#7c3aed"), fillcolor="rgba(139,92,246,0.6)",
    ))
    fig.update_layout(
        title="Category breakdown", height=320, showlegend=False,
        polar=dict(bgcolor="rgba(0,0,0,0)",
                   radialaxis=dict(range=[0, 100], showticklabels=False, gridcolor="rgba(255,235,205,0.08)"),
                   angularaxis=dict(gridcolor="rgba(255,235,205,0.08)")),
    )
    apply_chart_style(fig)
    st.plotly_chart(fig, use_container_width=True)


# ============================================================
# COMPLETE — the report
# ============================================================
def render_issue(issue):
    color = PRIORITY_COLORS.get(issue.priority, "#9c9588")
    with st.expander(f"{category_icon(issue.category)}  {issue.title}  ·  {issue.priority} priority"):
        st.markdown(f"<span style='color:{color}; font-weight:700;'>{issue.priority} Priority</span>"
                    f" · {issue.category}", unsafe_allow_html=True)
        st.markdown(issue.problem)
        c1, c2 = st.columns(2)
        with c1:
            st.caption("WHY IT HURTS SALES")
            st.markdown(issue.impact)
        with c2:
            st.success(f"**How to fix: {issue.fix.title}**\n\n{issue.fix.description}")
            st.markdown("\n".join(f"{i}. {step}" for i, step in enumerate(issue.fix.steps, 1)))


def render_report(report: AuditReport):
    h1, h2 = st.columns([4, 1])
    with h1:
        st.markdown(f"""
        <div style="display:flex; align-items:center; gap:10px;">
            <span style="font-size:1.3rem; color:#7c3aed;">⚡</span>
            <span style="font-size:1.3rem; font-weight:700;">Audit Report</span>
            <span style="color:#9c9588; font-size:0.85rem;">{store_hostname(report.store_url)}</span>
        </div>""", unsafe_allow_html=True)
        st.caption(f"Generated {report.timestamp:%Y-%m-%d %H:%M} UTC")
    with h2:
        if st.button("New Audit", use_container_width=True):
            _reset_audit()
            st.rerun()

    c1, c2 = st.columns([1, 2])
    with c1:
        chart_overall(report)
        st.caption(report.summary)
    with c2:
        chart_categories(report)

    if report.categories:
        cols = st.columns(min(len(report.categories), 6))
        for i, cat in enumerate(report.categories):
            with cols[i % len(cols)]:
                st.metric(f"{category_icon(cat.name)} {cat.name}", cat.score, help=cat.description)

    st.markdown("---")
    a1, a2 = st.columns([4, 1])
    a1.markdown("### Action plan")
    a2.markdown(f"**{len(report.issues)} Critical Issues Found**")
    for issue in sort_issues(report.issues):
        render_issue(issue)


# ============================================================
# CHATBOT
# ============================================================
def render_chatbot(chat: ChatSession):
    st.markdown("---")
    st.markdown("#### Ask AI Auditor")

    for turn in chat.transcript:
        with st.chat_message(turn.role):
            st.markdown(turn.text)

    q = st.chat_input("Type a question...", disabled=chat.pending)
    if q:
        with st.chat_message("user"):
            st.markdown(q)
        with st.chat_message("assistant"):
            with st.spinner("Typing..."):
                reply = chat.send(q)
            if reply:
                st.markdown(reply)


# ============================================================
# MAIN
# ============================================================
def main():
    _init_state()
    status = st.session_state.status

    if status == "scanning":
        render_scanning()
    elif status == "error":
        render_error()
    elif status == "complete" and st.session_state.report is not None:
        render_report(st.session_state.report)
        render_chatbot(st.session_state.chat)
    else:
        render_form()

if __name__ == "__main__":
    main()
