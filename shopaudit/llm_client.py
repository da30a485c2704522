"""
LLM Client — interface for talking to the model behind the auditor.

Key concepts:
    - System prompt: Sets the model's role and behavior (constant per task).
    - Messages: The conversation so far, oldest first. The newest user turn is last.
    - Content parts: A user turn can mix text and images (screenshot audits).
    - Structured output: JSON format for machine-readable responses.

This module only moves text in and out. Parsing and validation of the
audit JSON happens in the auditor.
"""

import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from shopaudit.config import LLM_API_KEY, LLM_BASE_URL, AUDIT_MODEL
from shopaudit.errors import TransportError

logger = logging.getLogger(__name__)


def get_client() -> OpenAI:
    """Create an OpenAI client pointed at the configured server."""
    return OpenAI(api_key=LLM_API_KEY, base_url=LLM_BASE_URL)


def text_part(text: str) -> dict:
    return {"type": "text", "text": text}


def image_part(data_url: str) -> dict:
    return {"type": "image_url", "image_url": {"url": data_url}}


def call_llm(
    system_prompt: str,
    messages: list[dict],
    temperature: float = 0.1,
    model: str = AUDIT_MODEL,
    expect_json: bool = True,
) -> Optional[str]:
    """
    Send a conversation to the LLM and get the reply text back.

    Args:
        system_prompt: The role/rules for the model.
        messages:      Chat messages ({"role", "content"}) in order, newest last.
        expect_json:   Ask the server for a JSON object response.

    Returns:
        The raw reply text, or None if the model returned nothing.

    Raises:
        TransportError: the request could not be completed.
    """
    try:
        client = get_client()
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "system", "content": system_prompt}, *messages],
            temperature=temperature,
            response_format={"type": "json_object"} if expect_json else None,
        )
    except OpenAIError as e:
        logger.error("LLM call to %s failed: %s", model, e)
        raise TransportError(str(e)) from e

    if not response.choices:
        return None
    return response.choices[0].message.content
