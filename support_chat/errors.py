"""Exception hierarchy shared by the service layer and the HTTP routes."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Why a call to the completion provider failed."""

    API_KEY_ERROR = "API_KEY_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ChatError(Exception):
    """Base class for errors that map to a client-facing HTTP status."""

    status_code = 500


class MessageValidationError(ChatError):
    """The caller sent a missing, empty or oversized value."""

    status_code = 400


class ConversationNotFoundError(ChatError):
    """The session id does not resolve to a stored conversation."""

    status_code = 404

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__("Conversation not found")


class ProviderError(Exception):
    """Raised by the completion client when the LLM call fails.

    ``kind`` is decided from the provider's exception type at the client
    boundary, so callers never have to inspect error text.
    """

    def __init__(self, kind: ErrorKind, message: str = ""):
        self.kind = kind
        super().__init__(message or kind.value)
