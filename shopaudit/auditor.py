"""
Store Auditor — turns a store URL into a scored audit report.

Takes an AuditRequest, turns it into a prompt for the LLM, and turns the
reply back into a validated AuditReport.

Key design decisions:
    1. One call per audit. No retries; the user can start over from the form.
    2. The JSON schema is spelled out in the prompt AND enforced on the way back.
       The model's word is never taken on trust.
    3. storeUrl and timestamp are ours, not the model's. Whatever it sends
       for those fields is overwritten.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from shopaudit.config import AUDIT_MODEL, VISION_MODEL, AUDIT_TEMPERATURE
from shopaudit.errors import AuditError, EmptyResponse, MalformedResponse
from shopaudit.llm_client import call_llm, image_part, text_part
from shopaudit.models import AuditPayload, AuditReport, AuditRequest, CATEGORIES, PRIORITIES

logger = logging.getLogger(__name__)

DEFAULT_NICHE = "General E-commerce"
DEFAULT_MARKET = "Global"

# ============================================================
# PART 1: The contract with the model
# ============================================================

AUDIT_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "overallScore": {"type": "number", "description": "Overall store score from 0-100"},
        "summary": {"type": "string", "description": "A brief 2-sentence summary of the audit findings."},
        "categories": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Category name e.g. CRO, Trust, Speed"},
                    "score": {"type": "number", "description": "Score 0-100"},
                    "description": {"type": "string", "description": "Short assessment of this category"},
                },
                "required": ["name", "score", "description"],
            },
        },
        "issues": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "category": {"type": "string", "enum": list(CATEGORIES)},
                    "title": {"type": "string"},
                    "problem": {"type": "string", "description": "What is wrong"},
                    "impact": {"type": "string", "description": "Why it hurts sales"},
                    "priority": {"type": "string", "enum": list(PRIORITIES)},
                    "fix": {
                        "type": "object",
                        "properties": {
                            "title": {"type": "string"},
                            "description": {"type": "string"},
                            "steps": {"type": "array", "items": {"type": "string"}},
                        },
                        "required": ["title", "description", "steps"],
                    },
                },
                "required": ["id", "category", "title", "problem", "impact", "priority", "fix"],
            },
        },
    },
    "required": ["overallScore", "summary", "categories", "issues"],
}

AUDIT_SYSTEM_PROMPT = """You are a brutal but helpful audit AI. Do not be polite about design flaws; be objective. Focus on revenue impact.

Respond with a single JSON object that matches the schema you are given. No markdown, no commentary.
Issue ids must be unique. Use ONLY the listed values for "category" and "priority"."""

VISUAL_DIRECTIVE = (
    "Analyze the attached screenshot of the homepage/product page for visual hierarchy, "
    "clutter, and design issues."
)


def inference_directive(niche: str) -> str:
    return (
        f"Since no screenshot was provided, infer likely issues based on common pitfalls in the "
        f"{niche} industry and the structure of typical Shopify themes."
    )


# ============================================================
# PART 2: Building the request
# ============================================================

def build_audit_prompt(request: AuditRequest) -> str:
    """The user-turn instruction text for one audit."""
    niche = request.niche or DEFAULT_NICHE
    prompt = f"""You are a world-class Shopify Conversion Rate Optimization (CRO) expert.
Perform a simulated, critical audit of the following Shopify store.

Store URL: {request.url}
Niche: {niche}
Target Market: {request.target_market or DEFAULT_MARKET}

Focus on these core areas:
1. CRO (Call to actions, above fold clarity)
2. Trust (Badges, reviews, policies)
3. Speed (Simulated assessment of potential bloat)
4. SEO (Meta structures, headings)
5. Mobile Experience (Tap targets, layout)
6. Brand & Messaging (Clarity of value prop)

Be strict. Most stores have significant issues. Provide at least 5 critical issues with actionable fixes.
Score the store realistically (most stores score between 40-70 initially).

Respond with JSON matching this schema:
{json.dumps(AUDIT_RESPONSE_SCHEMA, indent=2)}"""

    if request.screenshot:
        prompt += f"\n\n{VISUAL_DIRECTIVE}"
    else:
        prompt += f"\n\n{inference_directive(request.niche or 'e-commerce')}"
    return prompt


def build_audit_messages(request: AuditRequest) -> list[dict]:
    """The message list sent to the LLM: one user turn, with the screenshot attached if any."""
    parts = [text_part(build_audit_prompt(request))]
    if request.screenshot:
        parts.append(image_part(request.screenshot.data_url()))
    return [{"role": "user", "content": parts}]


# ============================================================
# PART 3: Reading the reply
# ============================================================

def decode_audit_report(raw_text: Optional[str], store_url: str,
                        now: Optional[datetime] = None) -> AuditReport:
    """
    Validate the model's JSON and stamp our own metadata on it.

    Raises:
        EmptyResponse:     no text at all.
        MalformedResponse: text that isn't a schema-conformant report.
    """
    if raw_text is None or not raw_text.strip():
        raise EmptyResponse("No response from AI")

    try:
        payload = AuditPayload.model_validate_json(raw_text)
    except ValidationError as e:
        raise MalformedResponse(f"Audit response does not match schema: {e}", raw=raw_text) from e

    return AuditReport(
        **payload.model_dump(),
        store_url=store_url,
        timestamp=now or datetime.now(timezone.utc),
    )


# ============================================================
# PART 4: The whole round trip
# ============================================================

def run_audit(request: AuditRequest) -> AuditReport:
    """
    Run one audit: build the prompt, make one blocking call, validate the reply.

    Raises:
        AuditError (TransportError, EmptyResponse or MalformedResponse).
    """
    model = VISION_MODEL if request.screenshot else AUDIT_MODEL
    logger.info("Auditing %s with %s (screenshot=%s)", request.url, model, bool(request.screenshot))

    try:
        raw_text = call_llm(
            system_prompt=AUDIT_SYSTEM_PROMPT,
            messages=build_audit_messages(request),
            temperature=AUDIT_TEMPERATURE,
            model=model,
        )
        report = decode_audit_report(raw_text, request.url)
    except AuditError as e:
        logger.error("Audit failed for %s (%s): %s", request.url, type(e).__name__, e)
        if isinstance(e, MalformedResponse):
            logger.debug("Raw response: %s", e.raw[:500])
        raise

    logger.info("Audit complete for %s: score=%d, %d issues",
                request.url, report.overall_score, len(report.issues))
    return report
