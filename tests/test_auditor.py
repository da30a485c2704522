import json
from datetime import datetime, timezone

import pytest
from openai import OpenAIError

from shopaudit.auditor import (
    AUDIT_RESPONSE_SCHEMA, VISUAL_DIRECTIVE, build_audit_messages, build_audit_prompt,
    decode_audit_report, run_audit,
)
from shopaudit.errors import AuditError, EmptyResponse, MalformedResponse, TransportError
from shopaudit.models import CATEGORIES, PRIORITIES, AuditRequest, Screenshot

STORE = "https://example-store.com"


# ============================================================
# Prompt building
# ============================================================

def test_prompt_without_screenshot_asks_for_inference():
    request = AuditRequest(url=STORE, niche="Fashion")
    prompt = build_audit_prompt(request)

    assert "Store URL: https://example-store.com" in prompt
    assert "Niche: Fashion" in prompt
    assert "Target Market: Global" in prompt
    assert "Since no screenshot was provided" in prompt
    assert "common pitfalls in the Fashion industry" in prompt
    assert VISUAL_DIRECTIVE not in prompt


def test_messages_without_screenshot_carry_no_image():
    messages = build_audit_messages(AuditRequest(url=STORE, niche="Fashion"))

    assert len(messages) == 1
    parts = messages[0]["content"]
    assert [p["type"] for p in parts] == ["text"]


def test_screenshot_adds_visual_directive_and_image():
    shot = Screenshot(data="aGVsbG8=", mime_type="image/jpeg")
    request = AuditRequest(url=STORE, screenshot=shot)
    parts = build_audit_messages(request)[0]["content"]

    assert VISUAL_DIRECTIVE in parts[0]["text"]
    assert "Since no screenshot was provided" not in parts[0]["text"]
    assert parts[1] == {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,aGVsbG8="}}


def test_defaults_when_niche_and_market_missing():
    prompt = build_audit_prompt(AuditRequest(url=STORE))
    assert "Niche: General E-commerce" in prompt
    assert "common pitfalls in the e-commerce industry" in prompt


def test_prompt_embeds_schema_with_enums():
    prompt = build_audit_prompt(AuditRequest(url=STORE, target_market="US"))
    assert "Target Market: US" in prompt
    assert json.dumps(AUDIT_RESPONSE_SCHEMA, indent=2) in prompt

    issue_props = AUDIT_RESPONSE_SCHEMA["properties"]["issues"]["items"]["properties"]
    assert issue_props["category"]["enum"] == list(CATEGORIES)
    assert issue_props["priority"]["enum"] == list(PRIORITIES)
    assert AUDIT_RESPONSE_SCHEMA["required"] == ["overallScore", "summary", "categories", "issues"]


def test_blank_url_rejected_before_any_call():
    with pytest.raises(ValueError):
        AuditRequest(url="   ")


# ============================================================
# Decoding
# ============================================================

def test_decode_valid_payload(audit_json):
    now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    report = decode_audit_report(audit_json, STORE, now=now)

    assert report.overall_score == 58
    assert [c.name for c in report.categories] == ["CRO", "Trust", "Speed", "SEO", "Mobile", "Brand"]
    assert [i.id for i in report.issues] == ["cro-1", "trust-1", "seo-1"]
    assert report.issues[0].fix.steps[1] == "Move the buy buttons block above the gallery"
    assert report.store_url == STORE
    assert report.timestamp == now


def test_decode_round_trip_keeps_every_field(audit_payload, audit_json):
    report = decode_audit_report(audit_json, STORE)
    dumped = report.model_dump(by_alias=True, exclude={"store_url", "timestamp"})
    assert dumped == audit_payload


def test_model_supplied_store_url_and_timestamp_are_ignored(audit_payload):
    audit_payload["storeUrl"] = "https://hallucinated.example"
    audit_payload["timestamp"] = "1999-01-01T00:00:00Z"
    report = decode_audit_report(json.dumps(audit_payload), STORE)

    assert report.store_url == STORE
    assert report.timestamp.year != 1999


@pytest.mark.parametrize("raw", [None, "", "   \n"])
def test_empty_text_is_empty_response(raw):
    with pytest.raises(EmptyResponse):
        decode_audit_report(raw, STORE)


def test_missing_issues_is_malformed(audit_payload):
    del audit_payload["issues"]
    with pytest.raises(MalformedResponse):
        decode_audit_report(json.dumps(audit_payload), STORE)


def test_invalid_json_is_malformed():
    with pytest.raises(MalformedResponse) as exc:
        decode_audit_report("{not json", STORE)
    assert exc.value.raw == "{not json"


def test_unknown_priority_is_malformed(audit_payload):
    audit_payload["issues"][0]["priority"] = "Critical"
    with pytest.raises(MalformedResponse):
        decode_audit_report(json.dumps(audit_payload), STORE)


def test_unknown_category_is_malformed(audit_payload):
    audit_payload["issues"][0]["category"] = "Checkout"
    with pytest.raises(MalformedResponse):
        decode_audit_report(json.dumps(audit_payload), STORE)


def test_duplicate_issue_ids_are_malformed(audit_payload, new_issue):
    audit_payload["issues"].append(new_issue("cro-1", "Low"))
    with pytest.raises(MalformedResponse):
        decode_audit_report(json.dumps(audit_payload), STORE)


def test_out_of_range_score_is_malformed(audit_payload):
    audit_payload["overallScore"] = 140
    with pytest.raises(MalformedResponse):
        decode_audit_report(json.dumps(audit_payload), STORE)


@pytest.mark.parametrize("score", ["58", True, 72.5])
def test_wrongly_typed_overall_score_is_malformed(audit_payload, score):
    audit_payload["overallScore"] = score
    with pytest.raises(MalformedResponse):
        decode_audit_report(json.dumps(audit_payload), STORE)


@pytest.mark.parametrize("score", ["55", False])
def test_wrongly_typed_category_score_is_malformed(audit_payload, score):
    audit_payload["categories"][0]["score"] = score
    with pytest.raises(MalformedResponse):
        decode_audit_report(json.dumps(audit_payload), STORE)


def test_missing_fix_steps_is_malformed(audit_payload):
    del audit_payload["issues"][1]["fix"]["steps"]
    with pytest.raises(MalformedResponse):
        decode_audit_report(json.dumps(audit_payload), STORE)


# ============================================================
# Full round trip with a fake LLM
# ============================================================

def test_run_audit_copies_request_url(fake_llm, audit_json):
    calls = fake_llm(audit_json)
    report = run_audit(AuditRequest(url=STORE, niche="Fashion"))

    assert report.store_url == STORE
    assert len(calls.calls) == 1
    sent = calls.calls[0]
    assert sent["messages"][0]["role"] == "system"
    assert sent["response_format"] == {"type": "json_object"}


def test_run_audit_with_screenshot_sends_image(fake_llm, audit_json):
    calls = fake_llm(audit_json)
    run_audit(AuditRequest(url=STORE, screenshot=Screenshot(data="aGVsbG8=")))

    parts = calls.calls[0]["messages"][1]["content"]
    assert parts[1]["image_url"]["url"] == "data:image/png;base64,aGVsbG8="


def test_run_audit_transport_failure(fake_llm):
    fake_llm(OpenAIError("connection refused"))
    with pytest.raises(TransportError):
        run_audit(AuditRequest(url=STORE))


def test_run_audit_empty_reply(fake_llm):
    fake_llm(None)
    with pytest.raises(EmptyResponse):
        run_audit(AuditRequest(url=STORE))


def test_all_failures_share_one_base_class(fake_llm):
    fake_llm("[]")
    with pytest.raises(AuditError):
        run_audit(AuditRequest(url=STORE))
