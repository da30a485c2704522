"""
Failures of an audit or chat call.

The dashboard shows every audit failure the same way ("Audit Failed"),
the classes only exist so the logs can tell them apart.
"""


class AuditError(Exception):
    """Base class for anything that went wrong talking to the AI auditor."""


class TransportError(AuditError):
    """The call to the LLM service could not be completed (network, auth, quota)."""


class EmptyResponse(AuditError):
    """The call completed but the model returned no text."""


class MalformedResponse(AuditError):
    """The model returned text that does not match the audit report schema."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw
