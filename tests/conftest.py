import json
from types import SimpleNamespace

import pytest

from shopaudit import llm_client


class FakeCompletions:
    """Stands in for client.chat.completions; records every request."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_llm(monkeypatch):
    """Call fake_llm(reply, ...) to queue replies; returns the recorder."""
    def install(*replies):
        completions = FakeCompletions(replies)
        client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        monkeypatch.setattr(llm_client, "get_client", lambda: client)
        return completions
    return install


def make_issue(issue_id, priority="High", category="CRO"):
    return {
        "id": issue_id,
        "category": category,
        "title": f"Issue {issue_id}",
        "problem": "Primary CTA is below the fold on mobile.",
        "impact": "Visitors bounce before seeing the offer.",
        "priority": priority,
        "fix": {
            "title": "Move the CTA up",
            "description": "Put the add-to-cart button in the first viewport.",
            "steps": ["Open the theme editor", "Move the buy buttons block above the gallery"],
        },
    }


@pytest.fixture
def audit_payload():
    return {
        "overallScore": 58,
        "summary": "Solid catalog, weak trust signals. Checkout friction is costing sales.",
        "categories": [
            {"name": "CRO", "score": 55, "description": "CTAs are hard to find."},
            {"name": "Trust", "score": 40, "description": "No reviews on product pages."},
            {"name": "Speed", "score": 62, "description": "Heavy apps loaded on every page."},
            {"name": "SEO", "score": 70, "description": "Titles are fine, descriptions missing."},
            {"name": "Mobile", "score": 50, "description": "Tap targets too small."},
            {"name": "Brand", "score": 66, "description": "Value prop is vague."},
        ],
        "issues": [
            make_issue("cro-1", "Medium"),
            make_issue("trust-1", "High", "Trust"),
            make_issue("seo-1", "Low", "SEO"),
        ],
    }


@pytest.fixture
def audit_json(audit_payload):
    return json.dumps(audit_payload)


@pytest.fixture
def new_issue():
    return make_issue


@pytest.fixture
def report(audit_json):
    from shopaudit.auditor import decode_audit_report
    return decode_audit_report(audit_json, "https://example-store.com")
