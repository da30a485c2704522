"""
Auditor Chat — the follow-up conversation about one audit report.

There is no server-side chat session. Every question rebuilds the context
from scratch: a system prompt grounded in the report, then the whole
transcript so far, then the new question.
"""

import logging

from shopaudit.config import CHAT_MODEL, CHAT_TEMPERATURE
from shopaudit.errors import AuditError
from shopaudit.llm_client import call_llm
from shopaudit.models import AuditReport, ChatTurn

logger = logging.getLogger(__name__)

GREETING = "Hi! I analyzed your store. Ask me anything about the results."
FALLBACK_REPLY = "I couldn't generate a response."
ERROR_REPLY = "Sorry, I encountered an error answering that."


def build_chat_system_prompt(report: AuditReport) -> str:
    return f"""You are the AI Auditor who just analyzed this store: {report.store_url}.
Context of the audit:
Overall Score: {report.overall_score}
Summary: {report.summary}

Answer the user's questions specifically about their audit results. Keep answers short, punchy, and helpful."""


def build_chat_messages(message: str, history: list[ChatTurn]) -> list[dict]:
    """Replay the transcript in order and put the new question last."""
    messages = [{"role": turn.role, "content": turn.text} for turn in history]
    messages.append({"role": "user", "content": message})
    return messages


def ask(report: AuditReport, message: str, history: list[ChatTurn]) -> str:
    """
    Ask the auditor one question about the report.

    Raises:
        ValueError:     empty message.
        TransportError: the LLM call failed.
    """
    if not message or not message.strip():
        raise ValueError("Message must not be empty")

    reply = call_llm(
        system_prompt=build_chat_system_prompt(report),
        messages=build_chat_messages(message, history),
        temperature=CHAT_TEMPERATURE,
        model=CHAT_MODEL,
        expect_json=False,
    )
    return reply or FALLBACK_REPLY


class ChatSession:
    """
    The transcript for one report, plus a pending flag so a second question
    can't be sent while the first is still waiting on the model.
    """

    def __init__(self, report: AuditReport):
        self.report = report
        self.transcript: list[ChatTurn] = [ChatTurn("assistant", GREETING)]
        self.pending = False

    def send(self, message: str) -> str | None:
        """
        Append the question and the auditor's answer to the transcript.
        Returns the answer, or None if the message was ignored (blank, or busy).
        """
        if self.pending or not message or not message.strip():
            return None

        history = list(self.transcript)
        self.transcript.append(ChatTurn("user", message))
        self.pending = True
        try:
            reply = ask(self.report, message, history)
        except AuditError as e:
            logger.warning("Chat turn failed for %s: %s", self.report.store_url, e)
            reply = ERROR_REPLY
        finally:
            self.pending = False

        self.transcript.append(ChatTurn("assistant", reply))
        return reply
