"""
Presentation helpers for the dashboard.

Pure functions, no Streamlit imports, so they can be tested directly.

The priority sort never raises: an unknown priority ranks 0 and sinks to
the bottom. Rejecting bad values is the auditor's job, not the page's.
"""

import math
from urllib.parse import urlparse

import pandas as pd

from shopaudit.models import AuditReport

PRIORITY_RANK = {"High": 3, "Medium": 2, "Low": 1}

PRIORITY_COLORS = {"High": "#c45c4a", "Medium": "#c9a85c", "Low": "#6a8fb5"}

CATEGORY_ICONS = {
    "CRO": "⚡", "Trust": "🛡", "Speed": "⏱", "SEO": "🔍", "Mobile": "📱", "Brand": "💬",
}

LOADING_MESSAGES = [
    "Connecting to store...",
    "Scanning homepage structure...",
    "Analyzing visual hierarchy...",
    "Checking mobile responsiveness...",
    "Evaluating trust signals...",
    "Calculating conversion score...",
    "Generating fix recommendations...",
]


def _priority_of(issue) -> str:
    if isinstance(issue, dict):
        return issue.get("priority")
    return getattr(issue, "priority", None)


def priority_rank(priority) -> int:
    """High=3, Medium=2, Low=1, anything else 0."""
    return PRIORITY_RANK.get(priority, 0) if isinstance(priority, str) else 0


def sort_issues(issues) -> list:
    """Highest priority first. Returns a new list; ties keep their original order."""
    return sorted(issues, key=lambda issue: priority_rank(_priority_of(issue)), reverse=True)


def health_label(score: int) -> str:
    return "Good Job!" if score > 70 else "Needs Work"


def score_color(score: int) -> str:
    """Red below 50, yellow below 80, green from 80."""
    if score >= 80:
        return "#5a9e6f"
    if score >= 50:
        return "#c9a85c"
    return "#c45c4a"


def category_icon(name: str) -> str:
    return CATEGORY_ICONS.get(name, "💬")


def store_hostname(url: str) -> str:
    """Hostname for the header. Falls back to the raw text if it isn't a full URL."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    return host or url


def radar_frame(report: AuditReport) -> pd.DataFrame:
    """Category scores in the shape the radar chart wants."""
    return pd.DataFrame(
        [{"category": c.name, "score": c.score} for c in report.categories],
        columns=["category", "score"],
    )


def loading_message(progress: int) -> str:
    """Pick the scanning-screen message for a progress value of 0-100."""
    n = len(LOADING_MESSAGES)
    index = math.floor((progress / 100) * n)
    return LOADING_MESSAGES[max(0, min(index, n - 1))]
