"""
Data models — the structure of our data.

Requests and chat turns are plain dataclasses built by our own code.
The audit report comes back from the LLM as untrusted JSON, so it is
validated with pydantic: wrong enums, missing fields or out-of-range
scores, including scores sent as strings or booleans, are rejected instead
of coerced.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CATEGORIES = ("CRO", "Trust", "Speed", "SEO", "Mobile", "Brand")
PRIORITIES = ("High", "Medium", "Low")
CHAT_ROLES = ("user", "assistant")

Category = Literal["CRO", "Trust", "Speed", "SEO", "Mobile", "Brand"]
Priority = Literal["High", "Medium", "Low"]


@dataclass(frozen=True)
class Screenshot:
    """An uploaded page screenshot, already base64-encoded."""
    data: str                   # base64 without the "data:...;base64," prefix
    mime_type: str = "image/png"

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class AuditRequest:
    """What the user typed into the audit form."""
    url: str
    niche: Optional[str] = None
    target_market: Optional[str] = None
    screenshot: Optional[Screenshot] = None

    def __post_init__(self):
        if not self.url or not self.url.strip():
            raise ValueError("Store URL is required")


@dataclass(frozen=True)
class ChatTurn:
    """A single message in the follow-up conversation."""
    role: str                   # "user" or "assistant"
    text: str

    def __post_init__(self):
        if self.role not in CHAT_ROLES:
            raise ValueError(f"Unknown chat role: {self.role!r}")


# ============================================================
# Audit report (validated LLM output)
# ============================================================

class _ReportModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class FixRecommendation(_ReportModel):
    title: str
    description: str
    steps: list[str]


class AuditIssue(_ReportModel):
    id: str
    category: Category
    title: str
    problem: str
    impact: str
    priority: Priority
    fix: FixRecommendation


class CategoryScore(_ReportModel):
    name: str
    score: int = Field(ge=0, le=100, strict=True)
    description: str


class AuditPayload(_ReportModel):
    """The part of the report the model is asked to generate."""
    overall_score: int = Field(alias="overallScore", ge=0, le=100, strict=True)
    summary: str
    categories: list[CategoryScore]
    issues: list[AuditIssue]

    @field_validator("issues")
    @classmethod
    def _unique_issue_ids(cls, issues: list[AuditIssue]) -> list[AuditIssue]:
        seen = set()
        for issue in issues:
            if issue.id in seen:
                raise ValueError(f"duplicate issue id: {issue.id!r}")
            seen.add(issue.id)
        return issues


class AuditReport(AuditPayload):
    """A validated audit plus the metadata we stamp on it ourselves."""
    store_url: str = Field(alias="storeUrl")
    timestamp: datetime
